"""Services package - backend client, draft submission and live refresh."""

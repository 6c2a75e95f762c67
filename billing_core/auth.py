"""Authentication context handed to every component that talks to the backend."""
from typing import Any, Dict, Optional


class AuthContext:
    """
    Bearer token plus the signed-in user, passed in explicitly.

    Components never read credentials from ambient storage; the caller
    builds one AuthContext at sign-in and injects it.
    """

    def __init__(self, token: str, user: Optional[Dict[str, Any]] = None):
        if not token:
            raise ValueError("An API token is required")
        self.token = token
        self.user = dict(user or {})

    @property
    def headers(self) -> Dict[str, str]:
        return {
            'Authorization': f'Bearer {self.token}',
            'Content-Type': 'application/json'
        }

    @property
    def channel_params(self) -> Dict[str, str]:
        """Credential for transports that cannot carry custom headers."""
        return {'token': self.token}

    def __repr__(self):
        return f"<AuthContext(user={self.user.get('email') or self.user.get('_id')})>"

"""Custom exceptions for the billing core."""


class BillingError(Exception):
    """Base exception for all billing core errors."""
    def __init__(self, message="An internal error occurred", status_code=500, payload=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload

    def to_dict(self):
        rv = dict(self.payload or ())
        rv['message'] = self.message
        rv['status'] = 'error'
        return rv


class InvalidFieldValue(BillingError):
    """Raised when a single field edit falls outside its domain."""
    def __init__(self, field, value, message=None):
        self.field = field
        self.value = value
        message = message or f"Invalid value for {field}: {value!r}"
        super().__init__(message, status_code=400, payload={'field': field})


class ValidationFailed(BillingError):
    """Raised when a draft fails its pre-submit checks."""
    def __init__(self, field, message):
        self.field = field
        super().__init__(message, status_code=422, payload={'field': field})


class SubmitFailed(BillingError):
    """Raised when the backend rejects a document or cannot be reached."""
    def __init__(self, message, status_code=503, payload=None):
        super().__init__(message, status_code, payload)


class ChannelError(BillingError):
    """Raised when the push notification channel fails."""
    def __init__(self, message="Live update channel closed"):
        super().__init__(message, 502)


class DraftStateError(BillingError):
    """Raised when an operation is not legal in the draft's current state."""
    def __init__(self, message):
        super().__init__(message, 409)


class NotFoundError(BillingError):
    """Exception raised when a resource is not found."""
    def __init__(self, message="Resource not found", payload=None):
        super().__init__(message, 404, payload)


class ItemNotFoundError(NotFoundError):
    """Raised when a line item index does not exist in the draft."""
    def __init__(self, index, size):
        super().__init__(
            f"No item at position {index} (draft has {size} items)",
            payload={'index': index}
        )


class ApiError(BillingError):
    """Raised when a backend read call fails."""
    def __init__(self, message, status_code=502, payload=None):
        super().__init__(message, status_code, payload)

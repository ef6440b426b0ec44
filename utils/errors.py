class MarketError(Exception):
    """Base class for failures reported to API callers as a failed envelope."""

    kind = "error"
    status = 400
    default_message = "Request failed"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(MarketError):
    kind = "validation"
    status = 400
    default_message = "Invalid input"


class AuthError(MarketError):
    kind = "auth"
    status = 401
    default_message = "Authentication required"


class ForbiddenError(MarketError):
    kind = "forbidden"
    status = 403
    default_message = "Forbidden"


class NotFoundError(MarketError):
    kind = "not_found"
    status = 404
    default_message = "Not found"


class ConflictError(MarketError):
    kind = "conflict"
    status = 409
    default_message = "Conflict"


class TooManyAttemptsError(MarketError):
    kind = "too_many_attempts"
    status = 429
    default_message = "Too many attempts. Try again later."

    def __init__(self, message: str = None, retry_after_seconds: int = None):
        super().__init__(message)
        self.retry_after_seconds = retry_after_seconds


class InternalError(MarketError):
    kind = "internal"
    status = 500
    default_message = "Something went wrong, please try again"

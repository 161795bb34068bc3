"""
Service Exceptions

Error taxonomy shared by every module. Services raise these, routers turn
them into structured HTTP errors:

    {"error": <error_code>, "message": <human readable message>}

Unexpected exceptions are never converted here; routers log them and answer
with a generic message so internals do not leak.
"""


class ServiceError(Exception):
    """Base exception for business-rule failures."""

    error_code = "SERVICE_ERROR"
    status_code = 400

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        status_code: int | None = None,
    ):
        self.message = message
        if error_code is not None:
            self.error_code = error_code
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message)


class ValidationError(ServiceError):
    """Input was rejected before anything was written."""

    error_code = "VALIDATION_ERROR"
    status_code = 422

    def __init__(self, message: str, field: str | None = None, error_code: str | None = None):
        self.field = field
        super().__init__(message, error_code=error_code)


class AuthorizationError(ServiceError):
    """Caller lacks the required role. The message never names the role."""

    error_code = "FORBIDDEN"
    status_code = 403

    def __init__(self, message: str = "You are not permitted to perform this action."):
        super().__init__(message)


class RateLimitedError(ServiceError):
    """Too many requests for a rate-limit key."""

    error_code = "RATE_LIMITED"
    status_code = 429

    def __init__(self, retry_after_seconds: int):
        self.retry_after_seconds = retry_after_seconds
        super().__init__(
            f"Too many requests. Please try again in {retry_after_seconds} second(s)."
        )


class ConflictError(ServiceError):
    """Request conflicts with existing state (duplicates, unique constraints)."""

    error_code = "CONFLICT"
    status_code = 409


class NotFoundError(ServiceError):
    """Referenced entity does not exist."""

    error_code = "NOT_FOUND"
    status_code = 404


class TransientError(ServiceError):
    """Unexpected persistence failure. Safe to retry."""

    error_code = "TEMPORARY_FAILURE"
    status_code = 503

    def __init__(self, message: str = "A temporary error occurred. Please try again."):
        super().__init__(message)


__all__ = [
    "ServiceError",
    "ValidationError",
    "AuthorizationError",
    "RateLimitedError",
    "ConflictError",
    "NotFoundError",
    "TransientError",
]

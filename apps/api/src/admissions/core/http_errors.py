"""
HTTP error translation shared by all routers.
"""

import logging

from fastapi import HTTPException, status

from admissions.core.exceptions import RateLimitedError, ServiceError

logger = logging.getLogger(__name__)


def service_error_to_http(e: ServiceError) -> HTTPException:
    """Convert a service error to a structured HTTPException."""
    headers = None
    if isinstance(e, RateLimitedError):
        headers = {"Retry-After": str(e.retry_after_seconds)}

    return HTTPException(
        status_code=e.status_code,
        detail={
            "error": e.error_code,
            "message": e.message,
        },
        headers=headers,
    )


def internal_error() -> HTTPException:
    """Generic 500. Details stay in the logs."""
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={
            "error": "INTERNAL_ERROR",
            "message": "An unexpected error occurred.",
        },
    )

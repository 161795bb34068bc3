"""
Tests for translating service errors into HTTP responses.
"""

from admissions.core.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    RateLimitedError,
    TransientError,
    ValidationError,
)
from admissions.core.http_errors import internal_error, service_error_to_http


class TestServiceErrorToHttp:
    def test_status_codes_follow_error_kind(self):
        assert service_error_to_http(ValidationError("bad")).status_code == 422
        assert service_error_to_http(AuthorizationError()).status_code == 403
        assert service_error_to_http(NotFoundError("gone")).status_code == 404
        assert service_error_to_http(ConflictError("dup")).status_code == 409
        assert service_error_to_http(TransientError()).status_code == 503

    def test_detail_carries_code_and_message(self):
        exc = service_error_to_http(
            ValidationError("Phone is invalid", field="applicant_phone", error_code="BAD_PHONE")
        )

        assert exc.detail == {"error": "BAD_PHONE", "message": "Phone is invalid"}

    def test_rate_limited_sets_retry_after_header(self):
        exc = service_error_to_http(RateLimitedError(120))

        assert exc.status_code == 429
        assert exc.headers == {"Retry-After": "120"}
        assert exc.detail["error"] == "RATE_LIMITED"

    def test_authorization_message_does_not_leak_role(self):
        exc = service_error_to_http(AuthorizationError())

        assert "ADMIN" not in exc.detail["message"]


def test_internal_error_is_generic():
    exc = internal_error()

    assert exc.status_code == 500
    assert exc.detail == {
        "error": "INTERNAL_ERROR",
        "message": "An unexpected error occurred.",
    }

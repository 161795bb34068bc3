"""
Tests for application request validation.
"""

import pytest
from pydantic import ValidationError

from admissions.modules.applications.schemas import ApplicationCreate
from admissions.modules.users.models import Gender


class TestApplicationCreate:
    def test_normalizes_form_input(self, application_payload):
        data = ApplicationCreate.model_validate(application_payload)

        assert data.applicant_name == "Abdul Karim"
        assert data.applicant_phone == "01712345678"
        assert data.father_name is None
        assert data.date_of_birth is None
        assert data.gender == Gender.MALE

    @pytest.mark.parametrize(
        "phone",
        [
            "01712345678",
            "+8801712345678",
            "8801712345678",
            "+880 1712-345678",
            "0171 234 5678",
        ],
    )
    def test_mobile_numbers_are_stored_in_local_form(self, application_payload, phone):
        application_payload["applicant_phone"] = phone

        data = ApplicationCreate.model_validate(application_payload)

        assert data.applicant_phone == "01712345678"

    @pytest.mark.parametrize("phone", ["12345", "01212345678", "0171234567", "phone"])
    def test_rejects_invalid_phone(self, application_payload, phone):
        application_payload["applicant_phone"] = phone

        with pytest.raises(ValidationError) as exc_info:
            ApplicationCreate.model_validate(application_payload)

        assert exc_info.value.errors()[0]["loc"] == ("applicant_phone",)

    def test_rejects_short_name(self, application_payload):
        application_payload["applicant_name"] = " A "

        with pytest.raises(ValidationError):
            ApplicationCreate.model_validate(application_payload)

    def test_rejects_malformed_email(self, application_payload):
        application_payload["applicant_email"] = "not-an-email"

        with pytest.raises(ValidationError):
            ApplicationCreate.model_validate(application_payload)

    def test_blank_email_becomes_none(self, application_payload):
        application_payload["applicant_email"] = "   "

        data = ApplicationCreate.model_validate(application_payload)

        assert data.applicant_email is None

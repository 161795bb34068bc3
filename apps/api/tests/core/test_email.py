"""
Tests for the Resend-backed email helpers.
"""

from unittest.mock import AsyncMock, patch

import pytest

from admissions.core import email as email_module
from admissions.core.email import (
    send_email,
    send_enrollment_credentials,
    send_new_application_alert,
)


class TestSendEmail:
    @pytest.mark.asyncio
    async def test_logs_instead_of_sending_without_api_key(self):
        with (
            patch.object(email_module.resend, "api_key", None),
            patch.object(email_module.resend.Emails, "send") as mock_send,
        ):
            result = await send_email("a@example.com", "Subject", "<p>Hi</p>")

        assert result is True
        mock_send.assert_not_called()

    @pytest.mark.asyncio
    async def test_sends_through_resend(self):
        with (
            patch.object(email_module.resend, "api_key", "re_test"),
            patch.object(
                email_module.resend.Emails, "send", return_value={"id": "email_123"}
            ) as mock_send,
        ):
            result = await send_email("a@example.com", "Subject", "<p>Hi</p>")

        assert result is True
        params = mock_send.call_args.args[0]
        assert params["to"] == ["a@example.com"]
        assert params["subject"] == "Subject"

    @pytest.mark.asyncio
    async def test_returns_false_when_provider_fails(self):
        with (
            patch.object(email_module.resend, "api_key", "re_test"),
            patch.object(
                email_module.resend.Emails, "send", side_effect=RuntimeError("provider down")
            ),
        ):
            result = await send_email("a@example.com", "Subject", "<p>Hi</p>")

        assert result is False


class TestTemplates:
    @pytest.mark.asyncio
    async def test_new_application_alert_escapes_applicant_input(self):
        with patch.object(email_module, "send_email", new=AsyncMock(return_value=True)) as mock:
            await send_new_application_alert(
                to_email="admin@example.com",
                applicant_name="<script>alert(1)</script>",
                applicant_phone="01712345678",
                course_title="Web Development",
            )

        html = mock.call_args.kwargs["html_content"]
        assert "<script>" not in html
        assert "&lt;script&gt;" in html
        assert "Web Development" in html

    @pytest.mark.asyncio
    async def test_enrollment_credentials_include_login_details(self):
        with patch.object(email_module, "send_email", new=AsyncMock(return_value=True)) as mock:
            await send_enrollment_credentials(
                to_email="karim@example.com",
                student_name="Abdul Karim",
                course_title="Web Development",
                login_email="karim@example.com",
                temporary_password="Tmp<Pass>123",
                batch_number=3,
            )

        kwargs = mock.call_args.kwargs
        assert kwargs["to_email"] == "karim@example.com"
        assert "Batch:</strong> #3" in kwargs["html_content"]
        assert "Tmp&lt;Pass&gt;123" in kwargs["html_content"]

    @pytest.mark.asyncio
    async def test_enrollment_credentials_without_batch(self):
        with patch.object(email_module, "send_email", new=AsyncMock(return_value=True)) as mock:
            await send_enrollment_credentials(
                to_email="karim@example.com",
                student_name="Abdul Karim",
                course_title="Web Development",
                login_email="karim@example.com",
                temporary_password="secret",
            )

        assert "Batch:" not in mock.call_args.kwargs["html_content"]

    @pytest.mark.asyncio
    async def test_subjects_use_plain_text(self):
        with patch.object(email_module, "send_email", new=AsyncMock(return_value=True)) as mock:
            await send_new_application_alert(
                to_email="admin@example.com",
                applicant_name="Sa'id O'Neil",
                applicant_phone="01712345678",
                course_title="Design & Print",
            )
            await send_enrollment_credentials(
                to_email="said@example.com",
                student_name="Sa'id O'Neil",
                course_title="Design & Print",
                login_email="said@example.com",
                temporary_password="secret",
            )

        alert, credentials = (c.kwargs for c in mock.call_args_list)
        assert alert["subject"] == "New application: Sa'id O'Neil for Design & Print"
        assert credentials["subject"] == "You're enrolled in Design & Print"
        assert "Design &amp; Print" in credentials["html_content"]

"""
Email Service using Resend

Handles sending emails for the admission and enrollment flow.
"""

import asyncio
import logging
from html import escape

import resend

from admissions.core.config import settings

logger = logging.getLogger(__name__)

# Initialize Resend with API key
resend.api_key = settings.resend_api_key

_BASE_STYLE = """
            body { font-family: system-ui, -apple-system, sans-serif; line-height: 1.6; color: #1f2937; }
            .container { max-width: 600px; margin: 0 auto; padding: 40px 20px; }
            .header { color: #14532d; margin-bottom: 24px; }
            .button { display: inline-block; background-color: #15803d; color: white; padding: 14px 28px; text-decoration: none; border-radius: 8px; margin: 24px 0; }
            .info-box { background-color: #f3f4f6; padding: 16px; border-radius: 8px; margin: 16px 0; }
            .warning { background-color: #fef3c7; border: 1px solid #f59e0b; padding: 16px; border-radius: 8px; margin: 16px 0; }
            .footer { margin-top: 40px; padding-top: 20px; border-top: 1px solid #e5e7eb; color: #6b7280; font-size: 14px; }
"""


async def send_email(
    to_email: str,
    subject: str,
    html_content: str,
) -> bool:
    """
    Send an email using Resend.

    Args:
        to_email: Recipient email address
        subject: Email subject line
        html_content: HTML content of the email

    Returns:
        True if email was sent successfully, False otherwise (never raises)
    """
    if not resend.api_key:
        logger.warning("RESEND_API_KEY not set - logging email instead of sending")
        logger.info(f"EMAIL TO: {to_email} | SUBJECT: {subject}")
        return True

    try:
        params: resend.Emails.SendParams = {
            "from": settings.email_from,
            "to": [to_email],
            "subject": subject,
            "html": html_content,
        }

        # Run sync Resend call in thread pool to avoid blocking event loop
        email = await asyncio.to_thread(resend.Emails.send, params)
        logger.info(f"Email sent successfully to {to_email}, id: {email['id']}")
        return True
    except Exception as e:
        logger.error(f"Failed to send email to {to_email}: {e}")
        return False


async def send_new_application_alert(
    to_email: str,
    applicant_name: str,
    applicant_phone: str,
    course_title: str,
) -> bool:
    """Alert staff that a new application arrived."""
    # Escape user inputs to prevent XSS
    safe_applicant_name = escape(applicant_name)
    safe_applicant_phone = escape(applicant_phone)
    safe_course_title = escape(course_title)
    safe_institute = escape(settings.institute_name)

    review_url = f"{settings.frontend_url}/admin/applications"
    html_content = f"""
    <!DOCTYPE html>
    <html>
    <head>
        <style>{_BASE_STYLE}</style>
    </head>
    <body>
        <div class="container">
            <h1 class="header">New Admission Application</h1>

            <p>A new application has been submitted and is waiting for review.</p>

            <div class="info-box">
                <p><strong>Applicant:</strong> {safe_applicant_name}</p>
                <p><strong>Phone:</strong> {safe_applicant_phone}</p>
                <p><strong>Course:</strong> {safe_course_title}</p>
            </div>

            <a href="{review_url}" class="button">Review Applications</a>

            <div class="footer">
                <p>{safe_institute} - Admissions</p>
            </div>
        </div>
    </body>
    </html>
    """
    return await send_email(
        to_email=to_email,
        subject=f"New application: {applicant_name} for {course_title}",
        html_content=html_content,
    )


async def send_enrollment_credentials(
    to_email: str,
    student_name: str,
    course_title: str,
    login_email: str,
    temporary_password: str,
    batch_number: int | None = None,
) -> bool:
    """Send login credentials to a student whose account was just created."""
    # Escape user inputs to prevent XSS
    safe_student_name = escape(student_name)
    safe_course_title = escape(course_title)
    safe_login_email = escape(login_email)
    safe_password = escape(temporary_password)
    safe_institute = escape(settings.institute_name)

    batch_line = (
        f"<p><strong>Batch:</strong> #{batch_number}</p>" if batch_number is not None else ""
    )
    login_url = f"{settings.frontend_url}/login"
    html_content = f"""
    <!DOCTYPE html>
    <html>
    <head>
        <style>{_BASE_STYLE}</style>
    </head>
    <body>
        <div class="container">
            <h1 class="header">Welcome to {safe_institute}</h1>

            <p>Hello {safe_student_name},</p>

            <p>Your application has been accepted and you are now enrolled in <strong>{safe_course_title}</strong>.</p>

            <div class="info-box">
                <p><strong>Course:</strong> {safe_course_title}</p>
                {batch_line}
                <p><strong>Login email:</strong> {safe_login_email}</p>
                <p><strong>Temporary password:</strong> <code>{safe_password}</code></p>
            </div>

            <div class="warning">
                <strong>You will be asked to change this password the first time you sign in.</strong>
            </div>

            <a href="{login_url}" class="button">Sign In</a>

            <div class="footer">
                <p>If you did not apply for this course, please contact us.</p>
                <p>{safe_institute}</p>
            </div>
        </div>
    </body>
    </html>
    """
    return await send_email(
        to_email=to_email,
        subject=f"You're enrolled in {course_title}",
        html_content=html_content,
    )

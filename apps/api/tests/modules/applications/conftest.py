"""
Fixtures for admission application tests.
"""

from datetime import UTC, datetime
from unittest.mock import MagicMock
from uuid import UUID, uuid4

import pytest

from admissions.modules.applications.models import Application, ApplicationStatus
from admissions.modules.courses.models import Course

COURSE_ID = UUID("11111111-1111-1111-1111-111111111111")


@pytest.fixture
def course():
    course = MagicMock(spec=Course)
    course.id = COURSE_ID
    course.title = "Web Development"
    course.slug = "web-development"
    course.is_active = True
    return course


@pytest.fixture
def application_payload():
    """Raw request body as it arrives from the public form."""
    return {
        "course_id": str(COURSE_ID),
        "applicant_name": "  Abdul Karim  ",
        "applicant_phone": "017-1234 5678",
        "applicant_email": "Karim@Example.com",
        "father_name": "",
        "gender": "MALE",
        "date_of_birth": "",
        "motivation": "I want to build websites.",
    }


@pytest.fixture
def application_model(course):
    """A freshly submitted application."""
    app = MagicMock(spec=Application)
    app.id = uuid4()
    app.course_id = course.id
    app.course = course
    app.user_id = None
    app.applicant_name = "Abdul Karim"
    app.applicant_phone = "01712345678"
    app.applicant_email = "karim@example.com"
    app.status = ApplicationStatus.PENDING
    app.review_notes = None
    app.reviewed_by = None
    app.reviewed_at = None
    app.created_at = datetime.now(UTC)
    app.updated_at = datetime.now(UTC)
    return app

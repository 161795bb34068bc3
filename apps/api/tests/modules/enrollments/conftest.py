"""
Fixtures for enrollment tests.
"""

from datetime import UTC, date, datetime
from unittest.mock import MagicMock
from uuid import UUID, uuid4

import pytest

from admissions.modules.applications.models import Application, ApplicationStatus
from admissions.modules.courses.models import Batch, BatchStatus, Course
from admissions.modules.enrollments.models import Enrollment, EnrollmentStatus
from admissions.modules.users.models import Gender, User, UserRole

COURSE_ID = UUID("22222222-2222-2222-2222-222222222222")


@pytest.fixture
def course():
    course = MagicMock(spec=Course)
    course.id = COURSE_ID
    course.title = "Web Development"
    course.is_active = True
    return course


@pytest.fixture
def accepted_application(course):
    """An ACCEPTED application with an email and no linked account."""
    app = MagicMock(spec=Application)
    app.id = uuid4()
    app.course_id = course.id
    app.course = course
    app.user_id = None
    app.applicant_name = "Abdul Karim"
    app.applicant_phone = "01712345678"
    app.applicant_email = "karim@example.com"
    app.father_name = "Abdul Rahim"
    app.gender = Gender.MALE
    app.date_of_birth = date(2001, 4, 12)
    app.nid_number = None
    app.address = "Mirpur, Dhaka"
    app.status = ApplicationStatus.ACCEPTED
    return app


@pytest.fixture
def student():
    user = MagicMock(spec=User)
    user.id = uuid4()
    user.email = "karim@example.com"
    user.name = "Abdul Karim"
    user.role = UserRole.STUDENT
    return user


def make_batch(course_id: UUID, number: int, status: BatchStatus) -> Batch:
    batch = MagicMock(spec=Batch)
    batch.id = uuid4()
    batch.course_id = course_id
    batch.batch_number = number
    batch.status = status
    return batch


@pytest.fixture
def open_batch(course):
    return make_batch(course.id, 3, BatchStatus.ONGOING)


@pytest.fixture
def enrollment(student, course):
    enrollment = MagicMock(spec=Enrollment)
    enrollment.id = uuid4()
    enrollment.user_id = student.id
    enrollment.course_id = course.id
    enrollment.batch_id = None
    enrollment.status = EnrollmentStatus.ENROLLED
    enrollment.progress = 0
    enrollment.enrolled_at = datetime.now(UTC)
    enrollment.completed_at = None
    return enrollment

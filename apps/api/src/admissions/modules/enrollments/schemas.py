"""
Enrollment Schemas

Pydantic schemas for request validation and response serialization.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from admissions.modules.enrollments.models import EnrollmentStatus


class EnrollmentResult(BaseModel):
    """Outcome of enrolling an accepted application."""

    message: str
    enrollment_id: UUID
    user_id: UUID
    batch_id: UUID | None = None
    batch_number: int | None = None
    account_created: bool = Field(
        False, description="True when a new student account was provisioned"
    )


class EnrollmentListItem(BaseModel):
    id: UUID
    user_id: UUID
    student_name: str
    student_email: str
    course_id: UUID
    course_title: str
    batch_id: UUID | None
    batch_number: int | None
    status: EnrollmentStatus
    progress: int
    enrolled_at: datetime
    completed_at: datetime | None


class EnrollmentListResponse(BaseModel):
    items: list[EnrollmentListItem]
    total: int


class EnrollmentStatusUpdateRequest(BaseModel):
    """
    Request body for PATCH /admin/enrollments/{id}/status.

    Values are checked by the service so bad input gets the same
    structured error as every other business rule.
    """

    status: str = Field(..., min_length=1, max_length=50)
    progress: int | None = None


class EnrollmentStatusUpdateResponse(BaseModel):
    id: UUID
    status: EnrollmentStatus
    progress: int
    completed_at: datetime | None
    message: str = "Enrollment updated"

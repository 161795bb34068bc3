"""
Admission Application Schemas

Pydantic schemas for request validation and response serialization.
"""

import re
from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from admissions.modules.applications.models import ApplicationStatus
from admissions.modules.users.models import Gender

# Bangladeshi mobile numbers: 01XXXXXXXXX, optionally prefixed with 880 or +880
PHONE_PATTERN = re.compile(r"^(\+?880|0)1[3-9]\d{8}$")

_OPTIONAL_TEXT_FIELDS = (
    "applicant_email",
    "father_name",
    "mother_name",
    "nid_number",
    "address",
    "education",
    "experience",
    "motivation",
)


class ApplicationCreate(BaseModel):
    """Request body for POST /applications."""

    course_id: UUID
    applicant_name: str = Field(..., min_length=2, max_length=200)
    applicant_phone: str = Field(..., max_length=20)
    applicant_email: EmailStr | None = None

    father_name: str | None = Field(None, max_length=200)
    mother_name: str | None = Field(None, max_length=200)
    date_of_birth: date | None = None
    gender: Gender | None = None
    nid_number: str | None = Field(None, max_length=50)
    address: str | None = Field(None, max_length=500)
    education: str | None = Field(None, max_length=2000)
    experience: str | None = Field(None, max_length=2000)
    motivation: str | None = Field(None, max_length=2000)

    @field_validator("applicant_name", mode="before")
    @classmethod
    def strip_name(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("applicant_phone", mode="before")
    @classmethod
    def validate_phone(cls, v):
        if not isinstance(v, str):
            raise ValueError("Phone number is required")
        phone = re.sub(r"[\s-]", "", v)
        if not PHONE_PATTERN.match(phone):
            raise ValueError("Enter a valid mobile number, e.g. 01712345678")
        # +8801XXXXXXXXX and 8801XXXXXXXXX are stored as 01XXXXXXXXX
        return "0" + phone[-10:]

    @field_validator(*_OPTIONAL_TEXT_FIELDS, mode="before")
    @classmethod
    def blank_to_none(cls, v):
        """Optional fields arrive as empty strings from HTML forms."""
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v

    @field_validator("gender", "date_of_birth", mode="before")
    @classmethod
    def empty_choice_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v


class ApplicationSubmitResponse(BaseModel):
    """Response after submitting an application."""

    id: UUID
    status: ApplicationStatus
    message: str = "Application submitted successfully. We will contact you soon."


# ============================================
# Admin Schemas
# ============================================


class ApplicationStatusUpdateRequest(BaseModel):
    """
    Request body for PATCH /admin/applications/{id}/status.

    status is a plain string so an unknown value is reported as a
    business validation error rather than a schema error.
    """

    status: str = Field(..., min_length=1, max_length=50)
    review_notes: str | None = Field(None, max_length=2000)


class ApplicationListItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    course_id: UUID
    course_title: str | None = None
    applicant_name: str
    applicant_phone: str
    applicant_email: str | None
    status: ApplicationStatus
    user_id: UUID | None
    created_at: datetime
    reviewed_at: datetime | None


class ApplicationListResponse(BaseModel):
    items: list[ApplicationListItem]
    total: int
    pages: int
    page: int
    page_size: int


class ApplicationDetailResponse(ApplicationListItem):
    father_name: str | None
    mother_name: str | None
    date_of_birth: date | None
    gender: Gender | None
    nid_number: str | None
    address: str | None
    education: str | None
    experience: str | None
    motivation: str | None
    review_notes: str | None
    reviewed_by: UUID | None
    updated_at: datetime


class ApplicationStatusUpdateResponse(BaseModel):
    id: UUID
    status: ApplicationStatus
    reviewed_by: UUID
    reviewed_at: datetime
    message: str = "Application status updated"

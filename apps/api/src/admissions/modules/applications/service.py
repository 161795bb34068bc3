"""
Admission Applications Service Layer

Business logic for admission applications.

This module implements:
1. Application Intake:
   - Validate input (field-level messages)
   - Rate limit per phone number
   - Reject duplicates while an earlier application is still open
   - Persist as PENDING, then alert staff without waiting for delivery

2. Review Workflow:
   - Reviewer-only status changes guarded by a transition map
   - Records reviewer, review time and optional notes
   - Audit entry for every change

3. Admin listing and detail views

Nothing is written when validation, rate limiting or the duplicate check
fails. The partial unique index on (applicant_phone, course_id) is the
authoritative duplicate guard; the read-before-insert check only gives a
friendlier early answer.
"""

import logging
import math
from typing import Any
from uuid import UUID

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from admissions.core.auth import CurrentUser, require_admin, require_reviewer
from admissions.core.config import settings
from admissions.core.email import send_new_application_alert
from admissions.core.exceptions import (
    ConflictError,
    NotFoundError,
    TransientError,
    ValidationError,
)
from admissions.core.notifications import NotificationDispatcher, get_notifier
from admissions.core.rate_limit import (
    APPLICATION_LIMIT,
    RateLimiter,
    application_key,
    get_rate_limiter,
)
from admissions.modules.applications import repository
from admissions.modules.applications.models import Application, ApplicationStatus
from admissions.modules.applications.schemas import ApplicationCreate, ApplicationSubmitResponse
from admissions.modules.audit.models import AuditAction
from admissions.modules.audit.service import record_admin_action
from admissions.modules.courses.repository import CourseRepository

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 100


class DuplicateApplicationError(ConflictError):
    """Raised when an open application already exists for this phone and course."""

    def __init__(self):
        super().__init__(
            "You have already applied for this course. We will contact you soon.",
            error_code="DUPLICATE_APPLICATION",
        )


class CourseNotFoundError(NotFoundError):
    def __init__(self, course_id: UUID | None = None):
        message = f"Course {course_id} not found" if course_id else "Course not found"
        super().__init__(message, error_code="COURSE_NOT_FOUND")


class ApplicationNotFoundError(NotFoundError):
    """Raised when an application is not found."""

    def __init__(self, application_id: UUID | None = None):
        message = (
            f"Application {application_id} not found" if application_id else "Application not found"
        )
        super().__init__(message, error_code="APPLICATION_NOT_FOUND")


class InvalidStatusError(ValidationError):
    """Raised when a status string is not a known application status."""

    def __init__(self, value: str):
        allowed = ", ".join(s.value for s in ApplicationStatus)
        super().__init__(
            f"Unknown application status '{value}'. Allowed values: {allowed}",
            field="status",
            error_code="INVALID_STATUS",
        )


# Valid status transitions. ACCEPTED, REJECTED and WAITLISTED are final.
# INTERVIEW_SCHEDULED may be chosen from any open state.
VALID_STATUS_TRANSITIONS: dict[ApplicationStatus, set[ApplicationStatus]] = {
    ApplicationStatus.PENDING: {
        ApplicationStatus.UNDER_REVIEW,
        ApplicationStatus.INTERVIEW_SCHEDULED,
        ApplicationStatus.ACCEPTED,  # Fast-track acceptance
        ApplicationStatus.REJECTED,
        ApplicationStatus.WAITLISTED,
    },
    ApplicationStatus.UNDER_REVIEW: {
        ApplicationStatus.INTERVIEW_SCHEDULED,
        ApplicationStatus.ACCEPTED,
        ApplicationStatus.REJECTED,
        ApplicationStatus.WAITLISTED,
    },
    ApplicationStatus.INTERVIEW_SCHEDULED: {
        ApplicationStatus.UNDER_REVIEW,  # Back to review after the interview
        ApplicationStatus.ACCEPTED,
        ApplicationStatus.REJECTED,
        ApplicationStatus.WAITLISTED,
    },
    # Terminal states - no transitions allowed
    ApplicationStatus.ACCEPTED: set(),
    ApplicationStatus.REJECTED: set(),
    ApplicationStatus.WAITLISTED: set(),
}


class InvalidStatusTransitionError(ConflictError):
    """Raised when an invalid status transition is attempted."""

    def __init__(self, current_status: ApplicationStatus, new_status: ApplicationStatus):
        self.current_status = current_status
        self.new_status = new_status
        valid_transitions = sorted(s.value for s in VALID_STATUS_TRANSITIONS[current_status])
        super().__init__(
            f"Cannot change status from {current_status.value} to {new_status.value}. "
            f"Valid transitions: {valid_transitions or 'none (final status)'}",
            error_code="INVALID_STATUS_TRANSITION",
        )


def parse_application_status(value: str | ApplicationStatus) -> ApplicationStatus:
    """Map a status string to ApplicationStatus, raising InvalidStatusError."""
    if isinstance(value, ApplicationStatus):
        return value
    try:
        return ApplicationStatus(str(value).strip().upper())
    except ValueError as e:
        raise InvalidStatusError(str(value)) from e


def validate_application_input(data: ApplicationCreate | dict[str, Any]) -> ApplicationCreate:
    """
    Parse raw input into an ApplicationCreate.

    Raises:
        ValidationError: naming the first offending field
    """
    if isinstance(data, ApplicationCreate):
        return data
    try:
        return ApplicationCreate.model_validate(data)
    except PydanticValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first.get("loc", ())) or None
        message = first.get("msg", "Invalid input").removeprefix("Value error, ")
        raise ValidationError(message, field=field) from e


async def submit_application(
    db: AsyncSession,
    data: ApplicationCreate | dict[str, Any],
    *,
    actor: CurrentUser | None = None,
    rate_limiter: RateLimiter | None = None,
    notifier: NotificationDispatcher | None = None,
) -> ApplicationSubmitResponse:
    """
    Submit a new admission application.

    Order: validate, rate limit, course check, duplicate check, insert,
    commit, then alert staff in the background.

    Raises:
        ValidationError: If the input is malformed
        RateLimitedError: If the phone number submitted too often
        CourseNotFoundError: If the course does not exist or is inactive
        DuplicateApplicationError: If an open application already exists
        TransientError: On unexpected database failure
    """
    data = validate_application_input(data)
    rate_limiter = rate_limiter or get_rate_limiter()
    notifier = notifier or get_notifier()

    await rate_limiter.enforce(application_key(data.applicant_phone), APPLICATION_LIMIT)

    course = await CourseRepository.get_by_id(db, data.course_id)
    if course is None or not course.is_active:
        logger.warning(f"Application for unknown or inactive course {data.course_id}")
        raise CourseNotFoundError(data.course_id)

    existing = await repository.get_active_by_phone_and_course(
        db, data.applicant_phone, data.course_id
    )
    if existing:
        logger.warning(
            f"Duplicate application attempt: phone={data.applicant_phone}, course={course.id}"
        )
        raise DuplicateApplicationError()

    try:
        application = await repository.create(db, data, user_id=actor.id if actor else None)
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        logger.warning(
            f"Duplicate application caught by unique index: "
            f"phone={data.applicant_phone}, course={course.id}"
        )
        raise DuplicateApplicationError() from e
    except SQLAlchemyError as e:
        await db.rollback()
        logger.exception(f"Database error while saving application: {e}")
        raise TransientError() from e

    logger.info(f"Created application {application.id} for course {course.slug}")

    if settings.admin_email:
        notifier.dispatch(
            f"new_application_alert:{application.id}",
            send_new_application_alert(
                to_email=settings.admin_email,
                applicant_name=application.applicant_name,
                applicant_phone=application.applicant_phone,
                course_title=course.title,
            ),
        )
    else:
        logger.debug("ADMIN_EMAIL not set - skipping new application alert")

    return ApplicationSubmitResponse(id=application.id, status=application.status)


async def update_application_status(
    db: AsyncSession,
    application_id: UUID,
    status: str | ApplicationStatus,
    review_notes: str | None = None,
    *,
    actor: CurrentUser | None,
) -> Application:
    """
    Move an application to a new status.

    Setting the current status again is allowed (e.g. to update notes).
    Does not enroll the applicant or notify anyone.

    Raises:
        AuthorizationError: If the caller is not staff or admin (checked first)
        InvalidStatusError: If status is not a known value
        ApplicationNotFoundError: If the application doesn't exist
        InvalidStatusTransitionError: If the move is not allowed
        TransientError: On unexpected database failure
    """
    reviewer = require_reviewer(actor)
    new_status = parse_application_status(status)

    application = await repository.get_by_id_for_update(db, application_id)
    if not application:
        logger.warning(f"Application not found: {application_id}")
        raise ApplicationNotFoundError(application_id)

    current_status = application.status
    if new_status != current_status and new_status not in VALID_STATUS_TRANSITIONS[current_status]:
        await db.rollback()
        logger.warning(
            f"Rejected transition for application {application_id}: "
            f"{current_status.value} -> {new_status.value}"
        )
        raise InvalidStatusTransitionError(current_status, new_status)

    try:
        await repository.update_review(
            db,
            application,
            status=new_status,
            reviewed_by=reviewer.id,
            review_notes=review_notes,
        )
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.exception(f"Database error updating application {application_id}: {e}")
        raise TransientError() from e

    logger.info(
        f"Application {application_id} status {current_status.value} -> {new_status.value} "
        f"by {reviewer.id}"
    )

    await record_admin_action(
        actor=reviewer,
        action=AuditAction.STATUS_CHANGE,
        entity_type="application",
        entity_id=application_id,
        details={"from": current_status.value, "to": new_status.value},
    )

    return application


async def get_applications(
    db: AsyncSession,
    *,
    actor: CurrentUser | None,
    status: str | ApplicationStatus | None = None,
    page: int = 1,
    page_size: int = 20,
) -> dict:
    """
    Paginated application list for the back office, newest first.

    Returns:
        Dict with items, total, pages, page and page_size
    """
    require_admin(actor)
    status_filter = parse_application_status(status) if status else None

    page = max(1, page)
    page_size = min(max(1, page_size), MAX_PAGE_SIZE)

    applications, total = await repository.list_applications(
        db,
        status=status_filter,
        skip=(page - 1) * page_size,
        limit=page_size,
    )

    return {
        "items": applications,
        "total": total,
        "pages": math.ceil(total / page_size),
        "page": page,
        "page_size": page_size,
    }


async def get_application_detail(
    db: AsyncSession,
    application_id: UUID,
    *,
    actor: CurrentUser | None,
) -> Application:
    require_admin(actor)

    application = await repository.get_by_id(db, application_id)
    if not application:
        logger.warning(f"Application not found: {application_id}")
        raise ApplicationNotFoundError(application_id)

    return application

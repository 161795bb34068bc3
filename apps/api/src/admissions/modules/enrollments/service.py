"""
Enrollment Service Layer

Turns an accepted application into an enrollment.

enroll_student() is the critical operation. In ONE transaction, with the
application row locked, it:
1. Resolves the student account (linked user, existing user by email, or a
   newly provisioned STUDENT with a temporary password)
2. Links the account to the application
3. Refuses a second enrollment for the same (user, course)
4. Picks the highest-numbered open batch of the course, if any
5. Creates the enrollment as ENROLLED with progress 0

Any failure rolls everything back, so no orphaned account is left behind.
The audit entry and the credentials email happen after commit and never
affect the outcome.
"""

import logging
from uuid import UUID

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from admissions.core.auth import CurrentUser, require_admin
from admissions.core.email import send_enrollment_credentials
from admissions.core.exceptions import (
    ConflictError,
    NotFoundError,
    ServiceError,
    TransientError,
    ValidationError,
)
from admissions.core.notifications import NotificationDispatcher, get_notifier
from admissions.core.security import generate_temporary_password, hash_password
from admissions.modules.applications import repository as application_repository
from admissions.modules.applications.models import Application, ApplicationStatus
from admissions.modules.applications.service import ApplicationNotFoundError
from admissions.modules.audit.models import AuditAction
from admissions.modules.audit.service import record_admin_action
from admissions.modules.courses.repository import BatchRepository
from admissions.modules.enrollments import repository
from admissions.modules.enrollments.models import Enrollment, EnrollmentStatus
from admissions.modules.enrollments.schemas import EnrollmentResult
from admissions.modules.users.models import User, UserRole
from admissions.modules.users.repository import UserRepository

logger = logging.getLogger(__name__)


class ApplicationNotAcceptedError(ConflictError):
    def __init__(self, current_status: ApplicationStatus):
        super().__init__(
            f"Only accepted applications can be enrolled. "
            f"This application is {current_status.value}.",
            error_code="APPLICATION_NOT_ACCEPTED",
        )


class ApplicantEmailRequiredError(ValidationError):
    """No linked account and no email to create one with."""

    def __init__(self):
        super().__init__(
            "This application has no email address and no linked account. "
            "Create the student's account manually, link it to the application, "
            "then enroll again.",
            field="applicant_email",
            error_code="APPLICANT_EMAIL_REQUIRED",
        )


class AlreadyEnrolledError(ConflictError):
    def __init__(self):
        super().__init__(
            "This student is already enrolled in this course.",
            error_code="ALREADY_ENROLLED",
        )


class EnrollmentNotFoundError(NotFoundError):
    def __init__(self, enrollment_id: UUID | None = None):
        message = f"Enrollment {enrollment_id} not found" if enrollment_id else "Enrollment not found"
        super().__init__(message, error_code="ENROLLMENT_NOT_FOUND")


class InvalidEnrollmentStatusError(ValidationError):
    def __init__(self, value: str):
        allowed = ", ".join(s.value for s in EnrollmentStatus)
        super().__init__(
            f"Unknown enrollment status '{value}'. Allowed values: {allowed}",
            field="status",
            error_code="INVALID_STATUS",
        )


class InvalidProgressError(ValidationError):
    def __init__(self, progress: int):
        super().__init__(
            f"Progress must be between 0 and 100, got {progress}.",
            field="progress",
            error_code="INVALID_PROGRESS",
        )


def parse_enrollment_status(value: str | EnrollmentStatus) -> EnrollmentStatus:
    if isinstance(value, EnrollmentStatus):
        return value
    try:
        return EnrollmentStatus(str(value).strip().upper())
    except ValueError as e:
        raise InvalidEnrollmentStatusError(str(value)) from e


async def _resolve_student(db: AsyncSession, application: Application) -> tuple[User, str | None]:
    """
    Find or create the account behind an application.

    Returns:
        Tuple of (user, temporary password if the account was just created)

    Raises:
        ApplicantEmailRequiredError: No linked user and no applicant email
    """
    if application.user_id:
        user = await UserRepository.get_by_id(db, application.user_id)
        if user:
            return user, None

    if not application.applicant_email:
        logger.warning(
            f"Cannot provision account for application {application.id}: no email address"
        )
        raise ApplicantEmailRequiredError()

    user = await UserRepository.get_by_email(db, application.applicant_email)
    if user:
        logger.info(f"Reusing existing user {user.id} for application {application.id}")
        return user, None

    temporary_password = generate_temporary_password()
    user = await UserRepository.create(
        db,
        email=application.applicant_email,
        password_hash=hash_password(temporary_password),
        name=application.applicant_name,
        role=UserRole.STUDENT,
        phone=application.applicant_phone,
        gender=application.gender,
        date_of_birth=application.date_of_birth,
        nid_number=application.nid_number,
        address=application.address,
        father_name=application.father_name,
        must_change_password=True,
    )
    return user, temporary_password


async def enroll_student(
    db: AsyncSession,
    application_id: UUID,
    *,
    actor: CurrentUser | None,
    notifier: NotificationDispatcher | None = None,
) -> EnrollmentResult:
    """
    Enroll the applicant of an accepted application.

    Raises:
        AuthorizationError: If the caller is not an admin
        ApplicationNotFoundError: If the application doesn't exist
        ApplicationNotAcceptedError: If the application is not ACCEPTED
        ApplicantEmailRequiredError: If no account can be resolved or created
        AlreadyEnrolledError: If the student is already in this course
        TransientError: On unexpected database failure
    """
    admin = require_admin(actor)
    notifier = notifier or get_notifier()

    logger.info(f"Admin {admin.id} enrolling application {application_id}")

    try:
        # ============================================
        # ATOMIC TRANSACTION: all writes commit together
        # ============================================
        application = await application_repository.get_by_id_for_update(db, application_id)
        if not application:
            logger.warning(f"Application not found: {application_id}")
            raise ApplicationNotFoundError(application_id)

        if application.status != ApplicationStatus.ACCEPTED:
            logger.warning(
                f"Cannot enroll application {application_id}: status={application.status.value}"
            )
            raise ApplicationNotAcceptedError(application.status)

        user, temporary_password = await _resolve_student(db, application)

        if application.user_id != user.id:
            await application_repository.link_user(db, application, user.id)

        existing = await repository.get_by_user_and_course(db, user.id, application.course_id)
        if existing:
            logger.warning(
                f"User {user.id} already enrolled in course {application.course_id} "
                f"(enrollment {existing.id})"
            )
            raise AlreadyEnrolledError()

        batch = await BatchRepository.get_latest_open_batch(db, application.course_id)

        enrollment = await repository.create(
            db,
            user_id=user.id,
            course_id=application.course_id,
            batch_id=batch.id if batch else None,
        )

        await db.commit()
        # ============================================
        # END ATOMIC TRANSACTION
        # ============================================

    except ServiceError:
        await db.rollback()
        raise
    except IntegrityError as e:
        # Concurrent enroll of the same student won the race
        await db.rollback()
        logger.warning(f"Unique constraint hit while enrolling application {application_id}: {e}")
        raise AlreadyEnrolledError() from e
    except SQLAlchemyError as e:
        await db.rollback()
        logger.exception(f"Database error enrolling application {application_id}: {e}")
        raise TransientError() from e

    account_created = temporary_password is not None
    course_title = application.course.title
    batch_number = batch.batch_number if batch else None

    logger.info(
        f"Enrolled user {user.id} in course {application.course_id} "
        f"(enrollment {enrollment.id}, batch {batch_number}, account_created={account_created})"
    )

    # The account is unusable without its temporary password, so the mail
    # goes out before anything else can fail.
    if account_created:
        notifier.dispatch(
            f"enrollment_credentials:{enrollment.id}",
            send_enrollment_credentials(
                to_email=user.email,
                student_name=user.name,
                course_title=course_title,
                login_email=user.email,
                temporary_password=temporary_password,
                batch_number=batch_number,
            ),
        )

    await record_admin_action(
        actor=admin,
        action=AuditAction.CREATE,
        entity_type="enrollment",
        entity_id=enrollment.id,
        details={
            "application_id": str(application_id),
            "user_id": str(user.id),
            "course_id": str(application.course_id),
            "batch_number": batch_number,
            "account_created": account_created,
        },
    )

    message = f"Student enrolled in {course_title}"
    message += f" (Batch #{batch_number})." if batch_number is not None else " without a batch."
    if account_created:
        message += " A new account was created and login details were emailed."

    return EnrollmentResult(
        message=message,
        enrollment_id=enrollment.id,
        user_id=user.id,
        batch_id=batch.id if batch else None,
        batch_number=batch_number,
        account_created=account_created,
    )


async def get_enrollments(
    db: AsyncSession,
    *,
    actor: CurrentUser | None,
    course_id: UUID | None = None,
    batch_id: UUID | None = None,
    status: str | EnrollmentStatus | None = None,
) -> list[Enrollment]:
    require_admin(actor)
    status_filter = parse_enrollment_status(status) if status else None
    return await repository.list_enrollments(
        db, course_id=course_id, batch_id=batch_id, status=status_filter
    )


async def update_enrollment_status(
    db: AsyncSession,
    enrollment_id: UUID,
    status: str | EnrollmentStatus,
    progress: int | None = None,
    *,
    actor: CurrentUser | None,
) -> Enrollment:
    """
    Change an enrollment's status and, optionally, its progress.

    Raises:
        AuthorizationError: If the caller is not an admin
        InvalidEnrollmentStatusError: If status is not a known value
        InvalidProgressError: If progress is outside 0..100
        EnrollmentNotFoundError: If the enrollment doesn't exist
        TransientError: On unexpected database failure
    """
    admin = require_admin(actor)
    new_status = parse_enrollment_status(status)
    if progress is not None and not 0 <= progress <= 100:
        raise InvalidProgressError(progress)

    enrollment = await repository.get_by_id(db, enrollment_id)
    if not enrollment:
        logger.warning(f"Enrollment not found: {enrollment_id}")
        raise EnrollmentNotFoundError(enrollment_id)

    previous_status = enrollment.status

    try:
        await repository.update_status(db, enrollment, status=new_status, progress=progress)
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.exception(f"Database error updating enrollment {enrollment_id}: {e}")
        raise TransientError() from e

    logger.info(
        f"Enrollment {enrollment_id} {previous_status.value} -> {new_status.value} "
        f"(progress {enrollment.progress}) by {admin.id}"
    )

    await record_admin_action(
        actor=admin,
        action=AuditAction.STATUS_CHANGE,
        entity_type="enrollment",
        entity_id=enrollment_id,
        details={
            "from": previous_status.value,
            "to": new_status.value,
            "progress": enrollment.progress,
        },
    )

    return enrollment

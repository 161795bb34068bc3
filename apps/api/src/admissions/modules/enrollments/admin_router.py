"""
Enrollments Admin Router

Mounted under /admin. All endpoints are admin only (enforced by the service).

Endpoints:
- POST /admin/applications/{id}/enroll - Enroll an accepted application
- GET /admin/enrollments - List enrollments with filters
- PATCH /admin/enrollments/{id}/status - Update status and progress
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from admissions.core.auth import CurrentUser, get_current_user
from admissions.core.database import get_db
from admissions.core.exceptions import ServiceError
from admissions.core.http_errors import internal_error, service_error_to_http
from admissions.core.notifications import NotificationDispatcher, get_notifier
from admissions.core.rate_limit import RateLimiter, check_admin_write_limit, get_rate_limiter
from admissions.modules.enrollments import service
from admissions.modules.enrollments.models import Enrollment
from admissions.modules.enrollments.schemas import (
    EnrollmentListItem,
    EnrollmentListResponse,
    EnrollmentResult,
    EnrollmentStatusUpdateRequest,
    EnrollmentStatusUpdateResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _enrollment_to_list_item(enrollment: Enrollment) -> EnrollmentListItem:
    return EnrollmentListItem(
        id=enrollment.id,
        user_id=enrollment.user_id,
        student_name=enrollment.user.name,
        student_email=enrollment.user.email,
        course_id=enrollment.course_id,
        course_title=enrollment.course.title,
        batch_id=enrollment.batch_id,
        batch_number=enrollment.batch.batch_number if enrollment.batch else None,
        status=enrollment.status,
        progress=enrollment.progress,
        enrolled_at=enrollment.enrolled_at,
        completed_at=enrollment.completed_at,
    )


@router.post(
    "/applications/{application_id}/enroll",
    response_model=EnrollmentResult,
    status_code=status.HTTP_201_CREATED,
    summary="Enroll Accepted Application",
    description="""
Enroll the applicant of an ACCEPTED application.

Creates the student account when none exists (a temporary password is
emailed and must be changed at first sign-in) and attaches the newest
UPCOMING or ONGOING batch of the course, if any.

All database writes happen in one transaction.

**Access:** Admin only
""",
    responses={
        403: {"description": "Caller is not an admin"},
        404: {"description": "Application not found"},
        409: {"description": "Application not accepted, or student already enrolled"},
        422: {"description": "No email address to create the student account with"},
        429: {"description": "Too many admin actions"},
    },
)
async def enroll_application(
    application_id: UUID,
    db: AsyncSession = Depends(get_db),
    actor: CurrentUser | None = Depends(get_current_user),
    rate_limiter: RateLimiter = Depends(get_rate_limiter),
    notifier: NotificationDispatcher = Depends(get_notifier),
) -> EnrollmentResult:
    try:
        await check_admin_write_limit(rate_limiter, actor.id if actor else None, "enroll")
        return await service.enroll_student(db, application_id, actor=actor, notifier=notifier)
    except ServiceError as e:
        raise service_error_to_http(e) from e
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Error enrolling application {application_id}: {e}")
        raise internal_error() from e


@router.get(
    "/enrollments",
    response_model=EnrollmentListResponse,
    summary="List Enrollments",
)
async def list_enrollments(
    course_id: UUID | None = Query(None),
    batch_id: UUID | None = Query(None),
    status: str | None = Query(None, description="Filter by enrollment status"),
    db: AsyncSession = Depends(get_db),
    actor: CurrentUser | None = Depends(get_current_user),
) -> EnrollmentListResponse:
    try:
        enrollments = await service.get_enrollments(
            db, actor=actor, course_id=course_id, batch_id=batch_id, status=status
        )
        return EnrollmentListResponse(
            items=[_enrollment_to_list_item(e) for e in enrollments],
            total=len(enrollments),
        )
    except ServiceError as e:
        raise service_error_to_http(e) from e
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Error listing enrollments: {e}")
        raise internal_error() from e


@router.patch(
    "/enrollments/{enrollment_id}/status",
    response_model=EnrollmentStatusUpdateResponse,
    summary="Update Enrollment Status",
    description="""
Set an enrollment's status and optionally its progress (0-100).

COMPLETED sets progress to 100 and records the completion time.

**Access:** Admin only
""",
)
async def update_enrollment_status(
    enrollment_id: UUID,
    data: EnrollmentStatusUpdateRequest,
    db: AsyncSession = Depends(get_db),
    actor: CurrentUser | None = Depends(get_current_user),
    rate_limiter: RateLimiter = Depends(get_rate_limiter),
) -> EnrollmentStatusUpdateResponse:
    try:
        await check_admin_write_limit(
            rate_limiter, actor.id if actor else None, "enrollment_status"
        )
        enrollment = await service.update_enrollment_status(
            db, enrollment_id, data.status, data.progress, actor=actor
        )
        return EnrollmentStatusUpdateResponse(
            id=enrollment.id,
            status=enrollment.status,
            progress=enrollment.progress,
            completed_at=enrollment.completed_at,
        )
    except ServiceError as e:
        raise service_error_to_http(e) from e
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Error updating enrollment {enrollment_id}: {e}")
        raise internal_error() from e

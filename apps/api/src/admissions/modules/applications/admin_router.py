"""
Admission Applications Admin Router

Back-office endpoints for reviewing applications. Listing and detail views
are admin only; staff may also change status. The service enforces roles.

Endpoints:
- GET /admin/applications - List applications with pagination
- GET /admin/applications/{id} - Get application details
- PATCH /admin/applications/{id}/status - Change application status

Enrollment of an accepted application lives in the enrollments module
(POST /admin/applications/{id}/enroll).
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from admissions.core.auth import CurrentUser, get_current_user
from admissions.core.database import get_db
from admissions.core.exceptions import ServiceError
from admissions.core.http_errors import internal_error, service_error_to_http
from admissions.core.rate_limit import RateLimiter, check_admin_write_limit, get_rate_limiter
from admissions.modules.applications import service
from admissions.modules.applications.models import Application
from admissions.modules.applications.schemas import (
    ApplicationDetailResponse,
    ApplicationListItem,
    ApplicationListResponse,
    ApplicationStatusUpdateRequest,
    ApplicationStatusUpdateResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _application_to_list_item(app: Application) -> ApplicationListItem:
    item = ApplicationListItem.model_validate(app)
    item.course_title = app.course.title if app.course else None
    return item


def _application_to_detail(app: Application) -> ApplicationDetailResponse:
    detail = ApplicationDetailResponse.model_validate(app)
    detail.course_title = app.course.title if app.course else None
    return detail


@router.get(
    "",
    response_model=ApplicationListResponse,
    summary="List Applications",
    description="""
Paginated list of applications, newest first.

**Filters:**
- `status`: Filter by application status

**Pagination:**
- `page`: 1-based page number. Default: 1
- `page_size`: Records per page (1-100). Default: 20

**Access:** Admin only
""",
)
async def list_applications(
    status: str | None = Query(None, description="Filter by application status"),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    actor: CurrentUser | None = Depends(get_current_user),
) -> ApplicationListResponse:
    try:
        result = await service.get_applications(
            db, actor=actor, status=status, page=page, page_size=page_size
        )
        return ApplicationListResponse(
            items=[_application_to_list_item(app) for app in result["items"]],
            total=result["total"],
            pages=result["pages"],
            page=result["page"],
            page_size=result["page_size"],
        )
    except ServiceError as e:
        raise service_error_to_http(e) from e
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Error listing applications: {e}")
        raise internal_error() from e


@router.get(
    "/{application_id}",
    response_model=ApplicationDetailResponse,
    summary="Get Application Details",
    description="Full application record. **Access:** Admin only",
)
async def get_application(
    application_id: UUID,
    db: AsyncSession = Depends(get_db),
    actor: CurrentUser | None = Depends(get_current_user),
) -> ApplicationDetailResponse:
    try:
        application = await service.get_application_detail(db, application_id, actor=actor)
        return _application_to_detail(application)
    except ServiceError as e:
        raise service_error_to_http(e) from e
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Error getting application {application_id}: {e}")
        raise internal_error() from e


@router.patch(
    "/{application_id}/status",
    response_model=ApplicationStatusUpdateResponse,
    summary="Update Application Status",
    description="""
Move an application to a new status and optionally record review notes.

**Allowed transitions:**
- PENDING → UNDER_REVIEW, INTERVIEW_SCHEDULED, ACCEPTED, REJECTED, WAITLISTED
- UNDER_REVIEW → INTERVIEW_SCHEDULED, ACCEPTED, REJECTED, WAITLISTED
- INTERVIEW_SCHEDULED → UNDER_REVIEW, ACCEPTED, REJECTED, WAITLISTED
- ACCEPTED, REJECTED, WAITLISTED are final

Re-submitting the current status is allowed, e.g. to update notes.
Changing the status never enrolls the applicant or sends email.

**Access:** Staff and admins
""",
    responses={
        403: {"description": "Caller is not staff or admin"},
        404: {"description": "Application not found"},
        409: {"description": "Transition not allowed from the current status"},
        422: {"description": "Unknown status value"},
        429: {"description": "Too many admin actions"},
    },
)
async def update_application_status(
    application_id: UUID,
    data: ApplicationStatusUpdateRequest,
    db: AsyncSession = Depends(get_db),
    actor: CurrentUser | None = Depends(get_current_user),
    rate_limiter: RateLimiter = Depends(get_rate_limiter),
) -> ApplicationStatusUpdateResponse:
    try:
        await check_admin_write_limit(rate_limiter, actor.id if actor else None, "review")

        application = await service.update_application_status(
            db,
            application_id,
            data.status,
            data.review_notes,
            actor=actor,
        )
        return ApplicationStatusUpdateResponse(
            id=application.id,
            status=application.status,
            reviewed_by=application.reviewed_by,
            reviewed_at=application.reviewed_at,
        )
    except ServiceError as e:
        raise service_error_to_http(e) from e
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Error updating status of application {application_id}: {e}")
        raise internal_error() from e

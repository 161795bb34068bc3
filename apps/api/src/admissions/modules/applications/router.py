"""
Admission Applications Router

Public endpoint for submitting an application. A bearer token is optional;
when present the application is linked to the signed-in user.

Endpoints:
- POST /applications - Submit a new admission application

Security:
- Rate limited per phone number
- Input validation via Pydantic schemas
- XSS prevention in email templates
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from admissions.core.auth import CurrentUser, get_current_user
from admissions.core.database import get_db
from admissions.core.exceptions import ServiceError
from admissions.core.http_errors import internal_error, service_error_to_http
from admissions.core.notifications import NotificationDispatcher, get_notifier
from admissions.core.rate_limit import RateLimiter, get_rate_limiter
from admissions.modules.applications import service
from admissions.modules.applications.schemas import ApplicationCreate, ApplicationSubmitResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "",
    response_model=ApplicationSubmitResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Submit Admission Application",
    description="""
Submit an application for a course.

Only `course_id`, `applicant_name` and `applicant_phone` are required.

**Duplicate Prevention:**
- Only one open application (PENDING, UNDER_REVIEW, INTERVIEW_SCHEDULED or
  ACCEPTED) per phone number + course. A rejected or waitlisted application
  does not block a new one.

**Rate Limiting:**
- 2 submissions per phone number per 15 minutes. Exceeding it returns 429
  with a `Retry-After` header.
""",
    responses={
        201: {"description": "Application created successfully"},
        404: {"description": "Course not found or not accepting applications"},
        409: {
            "description": "Duplicate application detected",
            "content": {
                "application/json": {
                    "example": {
                        "detail": {
                            "error": "DUPLICATE_APPLICATION",
                            "message": "You have already applied for this course. We will contact you soon.",
                        }
                    }
                }
            },
        },
        429: {"description": "Too many submissions from this phone number"},
    },
)
async def submit_application(
    data: ApplicationCreate,
    db: AsyncSession = Depends(get_db),
    actor: CurrentUser | None = Depends(get_current_user),
    rate_limiter: RateLimiter = Depends(get_rate_limiter),
    notifier: NotificationDispatcher = Depends(get_notifier),
) -> ApplicationSubmitResponse:
    try:
        response = await service.submit_application(
            db,
            data,
            actor=actor,
            rate_limiter=rate_limiter,
            notifier=notifier,
        )
        logger.info(f"Application submitted successfully: id={response.id}")
        return response

    except ServiceError as e:
        raise service_error_to_http(e) from e
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Unexpected error submitting application: {e}")
        raise internal_error() from e

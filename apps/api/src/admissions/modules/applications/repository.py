"""
Admission Applications Repository

Database operations for admission applications.

Design Principles:
- Only database operations, no business logic
- Writes flush but never commit; the service owns the transaction
- Timezone-aware datetime handling (UTC)
"""

from datetime import UTC, datetime
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import ACTIVE_APPLICATION_STATUSES, Application, ApplicationStatus
from .schemas import ApplicationCreate


async def create(
    db: AsyncSession,
    data: ApplicationCreate,
    user_id: UUID | None = None,
) -> Application:
    """Add a new PENDING application and flush it."""
    application = Application(
        course_id=data.course_id,
        user_id=user_id,
        applicant_name=data.applicant_name,
        applicant_phone=data.applicant_phone,
        applicant_email=str(data.applicant_email).lower() if data.applicant_email else None,
        father_name=data.father_name,
        mother_name=data.mother_name,
        date_of_birth=data.date_of_birth,
        gender=data.gender,
        nid_number=data.nid_number,
        address=data.address,
        education=data.education,
        experience=data.experience,
        motivation=data.motivation,
        status=ApplicationStatus.PENDING,
    )

    db.add(application)
    await db.flush()

    return application


async def get_by_id(db: AsyncSession, id: UUID) -> Application | None:
    """Get application by ID."""
    return await db.get(Application, id)


async def get_by_id_for_update(db: AsyncSession, id: UUID) -> Application | None:
    """Get application by ID with a row lock held until the transaction ends."""
    result = await db.execute(
        select(Application).where(Application.id == id).with_for_update(of=Application)
    )
    return result.scalar_one_or_none()


async def get_active_by_phone_and_course(
    db: AsyncSession, phone: str, course_id: UUID
) -> Application | None:
    """Get a not-yet-closed application for a phone + course pair."""
    result = await db.execute(
        select(Application)
        .where(
            Application.applicant_phone == phone,
            Application.course_id == course_id,
            Application.status.in_(ACTIVE_APPLICATION_STATUSES),
        )
        .limit(1)
    )
    return result.scalar_one_or_none()


async def update_review(
    db: AsyncSession,
    application: Application,
    *,
    status: ApplicationStatus,
    reviewed_by: UUID,
    review_notes: str | None = None,
) -> Application:
    """Record a review decision. Notes are only overwritten when given."""
    application.status = status
    application.reviewed_by = reviewed_by
    application.reviewed_at = datetime.now(UTC)
    if review_notes is not None:
        application.review_notes = review_notes

    await db.flush()
    return application


async def link_user(db: AsyncSession, application: Application, user_id: UUID) -> Application:
    application.user_id = user_id
    await db.flush()
    return application


async def list_applications(
    db: AsyncSession,
    *,
    status: ApplicationStatus | None = None,
    skip: int = 0,
    limit: int = 20,
) -> tuple[list[Application], int]:
    """
    Page through applications, newest first.

    Returns:
        Tuple of (applications, total matching count)
    """
    query = select(Application)
    if status:
        query = query.where(Application.status == status)

    count_query = select(func.count()).select_from(query.subquery())
    total = (await db.execute(count_query)).scalar() or 0

    query = query.order_by(Application.created_at.desc()).offset(skip).limit(limit)
    result = await db.execute(query)

    return list(result.scalars().all()), total

"""
Enrollments Repository

Database operations for enrollments. Writes flush but never commit.
"""

from datetime import UTC, datetime
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import Enrollment, EnrollmentStatus


async def create(
    db: AsyncSession,
    *,
    user_id: UUID,
    course_id: UUID,
    batch_id: UUID | None,
) -> Enrollment:
    enrollment = Enrollment(
        user_id=user_id,
        course_id=course_id,
        batch_id=batch_id,
        status=EnrollmentStatus.ENROLLED,
        progress=0,
    )
    db.add(enrollment)
    await db.flush()
    return enrollment


async def get_by_id(db: AsyncSession, id: UUID) -> Enrollment | None:
    return await db.get(Enrollment, id)


async def get_by_user_and_course(
    db: AsyncSession, user_id: UUID, course_id: UUID
) -> Enrollment | None:
    result = await db.execute(
        select(Enrollment).where(Enrollment.user_id == user_id, Enrollment.course_id == course_id)
    )
    return result.scalar_one_or_none()


async def list_enrollments(
    db: AsyncSession,
    *,
    course_id: UUID | None = None,
    batch_id: UUID | None = None,
    status: EnrollmentStatus | None = None,
) -> list[Enrollment]:
    """Enrollments matching the filters, most recent first."""
    query = select(Enrollment)
    if course_id:
        query = query.where(Enrollment.course_id == course_id)
    if batch_id:
        query = query.where(Enrollment.batch_id == batch_id)
    if status:
        query = query.where(Enrollment.status == status)

    result = await db.execute(query.order_by(Enrollment.enrolled_at.desc()))
    return list(result.scalars().unique().all())


async def update_status(
    db: AsyncSession,
    enrollment: Enrollment,
    *,
    status: EnrollmentStatus,
    progress: int | None = None,
) -> Enrollment:
    """
    Set status and progress.

    COMPLETED forces progress to 100 and stamps completed_at; any other
    status clears completed_at.
    """
    enrollment.status = status
    if progress is not None:
        enrollment.progress = progress

    if status == EnrollmentStatus.COMPLETED:
        enrollment.progress = 100
        enrollment.completed_at = datetime.now(UTC)
    else:
        enrollment.completed_at = None

    await db.flush()
    return enrollment

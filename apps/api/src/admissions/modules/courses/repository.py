"""
Course Repository

Read-only queries over courses and batches.
"""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from admissions.modules.courses.models import OPEN_BATCH_STATUSES, Batch, Course


class CourseRepository:
    @staticmethod
    async def get_by_id(db: AsyncSession, course_id: UUID) -> Course | None:
        result = await db.execute(select(Course).where(Course.id == course_id))
        return result.scalar_one_or_none()


class BatchRepository:
    @staticmethod
    async def get_latest_open_batch(db: AsyncSession, course_id: UUID) -> Batch | None:
        """
        Highest-numbered batch of the course that is UPCOMING or ONGOING.

        Capacity is not considered.
        """
        result = await db.execute(
            select(Batch)
            .where(Batch.course_id == course_id, Batch.status.in_(OPEN_BATCH_STATUSES))
            .order_by(Batch.batch_number.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

"""
Course Models

Catalog offerings and their scheduled batches. Course content is managed
elsewhere; admissions only reads these tables.
"""

import enum
import uuid
from datetime import date

from sqlalchemy import Boolean, Date, Enum, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from admissions.modules.shared import BaseModel


class BatchStatus(str, enum.Enum):
    UPCOMING = "UPCOMING"
    ONGOING = "ONGOING"
    COMPLETED = "COMPLETED"


# Batches that can still take new students
OPEN_BATCH_STATUSES = (BatchStatus.UPCOMING, BatchStatus.ONGOING)


class Course(BaseModel):
    __tablename__ = "courses"

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    slug: Mapped[str] = mapped_column(String(200), unique=True, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    batches: Mapped[list["Batch"]] = relationship(
        "Batch", back_populates="course", order_by="Batch.batch_number"
    )

    def __repr__(self) -> str:
        return f"<Course(id={self.id}, slug={self.slug})>"


class Batch(BaseModel):
    """A scheduled intake of a course. batch_number is unique within its course."""

    __tablename__ = "batches"

    course_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("courses.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    batch_number: Mapped[int] = mapped_column(Integer, nullable=False)
    capacity: Mapped[int] = mapped_column(Integer, nullable=False, default=30)
    status: Mapped[BatchStatus] = mapped_column(
        Enum(BatchStatus, name="batch_status"),
        nullable=False,
        default=BatchStatus.UPCOMING,
    )
    start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    course: Mapped["Course"] = relationship("Course", back_populates="batches")

    __table_args__ = (
        UniqueConstraint("course_id", "batch_number", name="uq_batches_course_batch_number"),
    )

    def __repr__(self) -> str:
        return f"<Batch(course_id={self.course_id}, number={self.batch_number}, status={self.status.value})>"

"""
Courses Module

Catalog courses and batches as seen by the admissions workflow.
"""

from .models import Batch, BatchStatus, Course
from .repository import BatchRepository, CourseRepository

__all__ = ["Batch", "BatchRepository", "BatchStatus", "Course", "CourseRepository"]

"""
Enrollments Module

Provisioning of accepted applicants into courses, and admin management of
enrollment status and progress.
"""

from .admin_router import router as admin_router

__all__ = ["admin_router"]

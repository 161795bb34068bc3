from fastapi import APIRouter

from admissions.modules.applications import router as applications_router
from admissions.modules.applications.admin_router import router as admin_applications_router
from admissions.modules.audit.admin_router import router as admin_audit_router
from admissions.modules.enrollments.admin_router import router as admin_enrollments_router

api_router = APIRouter()

api_router.include_router(applications_router, prefix="/applications", tags=["Applications"])

api_router.include_router(
    admin_applications_router,
    prefix="/admin/applications",
    tags=["Admin - Applications"],
)

api_router.include_router(
    admin_enrollments_router,
    prefix="/admin",
    tags=["Admin - Enrollments"],
)

api_router.include_router(
    admin_audit_router,
    prefix="/admin/audit-logs",
    tags=["Admin - Audit Log"],
)

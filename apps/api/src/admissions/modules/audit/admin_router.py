"""
Audit Log Admin Router

Endpoints:
- GET /admin/audit-logs - Recent entries, or the history of one entity
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from admissions.core.auth import CurrentUser, get_current_user
from admissions.core.database import get_db
from admissions.core.exceptions import ServiceError
from admissions.core.http_errors import internal_error, service_error_to_http
from admissions.modules.audit import service
from admissions.modules.audit.schemas import AuditLogListResponse, AuditLogResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "",
    response_model=AuditLogListResponse,
    summary="List Audit Log Entries",
    description="""
Recent administrative actions, newest first.

Pass both `entity_type` and `entity_id` to get the full history of one
record instead.

**Access:** Admin only
""",
)
async def list_audit_logs(
    entity_type: str | None = Query(None, max_length=50),
    entity_id: str | None = Query(None, max_length=64),
    limit: int = Query(50, ge=1, le=200),
    db: AsyncSession = Depends(get_db),
    actor: CurrentUser | None = Depends(get_current_user),
) -> AuditLogListResponse:
    try:
        if entity_type and entity_id:
            entries = await service.get_entity_audit_logs(db, entity_type, entity_id, actor=actor)
        else:
            entries = await service.get_recent_audit_logs(db, actor=actor, limit=limit)
        return AuditLogListResponse(items=[AuditLogResponse.model_validate(e) for e in entries])
    except ServiceError as e:
        raise service_error_to_http(e) from e
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Error listing audit logs: {e}")
        raise internal_error() from e

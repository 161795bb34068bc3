from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from admissions.modules.audit.models import AuditAction


class AuditLogResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    actor_id: UUID
    actor_name: str | None
    action: AuditAction
    entity_type: str
    entity_id: str
    details: dict | None
    created_at: datetime


class AuditLogListResponse(BaseModel):
    items: list[AuditLogResponse]

"""
Audit Log Service

record_admin_action() is called after the primary operation has committed.
It writes through its own session so a failure never touches the caller's
session or its loaded objects. It never raises: a failed audit write is
logged and the caller carries on.
"""

import logging
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from admissions.core.auth import CurrentUser, require_admin
from admissions.core.database import async_session_maker
from admissions.modules.audit import repository
from admissions.modules.audit.models import AuditAction, AuditLog

logger = logging.getLogger(__name__)

MAX_AUDIT_PAGE = 200


async def record_admin_action(
    *,
    actor: CurrentUser,
    action: AuditAction,
    entity_type: str,
    entity_id: UUID | str,
    details: dict | None = None,
) -> None:
    """Append one audit entry in a separate session and commit."""
    async with async_session_maker() as audit_db:
        try:
            await repository.create(
                audit_db,
                actor_id=actor.id,
                actor_name=actor.name or actor.email,
                action=action,
                entity_type=entity_type,
                entity_id=str(entity_id),
                details=details,
            )
            await audit_db.commit()
            logger.info(f"Audit: {actor.id} {action.value} {entity_type}:{entity_id}")
        except Exception:
            logger.exception(
                f"Failed to write audit entry: {actor.id} {action.value} {entity_type}:{entity_id}"
            )
            try:
                await audit_db.rollback()
            except Exception:
                logger.exception("Rollback after failed audit write also failed")


async def get_recent_audit_logs(
    db: AsyncSession,
    *,
    actor: CurrentUser | None,
    limit: int = 50,
) -> list[AuditLog]:
    require_admin(actor)
    limit = min(max(1, limit), MAX_AUDIT_PAGE)
    return await repository.get_recent(db, limit)


async def get_entity_audit_logs(
    db: AsyncSession,
    entity_type: str,
    entity_id: UUID | str,
    *,
    actor: CurrentUser | None,
) -> list[AuditLog]:
    """Full history for one entity, newest first."""
    require_admin(actor)
    return await repository.get_for_entity(db, entity_type, str(entity_id))

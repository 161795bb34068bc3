"""
Audit Log Repository

Insert and read audit entries. Entries are append-only.
"""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import AuditAction, AuditLog


async def create(
    db: AsyncSession,
    *,
    actor_id: UUID,
    actor_name: str | None,
    action: AuditAction,
    entity_type: str,
    entity_id: str,
    details: dict | None = None,
) -> AuditLog:
    entry = AuditLog(
        actor_id=actor_id,
        actor_name=actor_name,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        details=details,
    )
    db.add(entry)
    await db.flush()
    return entry


async def get_recent(db: AsyncSession, limit: int = 50) -> list[AuditLog]:
    result = await db.execute(select(AuditLog).order_by(AuditLog.created_at.desc()).limit(limit))
    return list(result.scalars().all())


async def get_for_entity(db: AsyncSession, entity_type: str, entity_id: str) -> list[AuditLog]:
    result = await db.execute(
        select(AuditLog)
        .where(AuditLog.entity_type == entity_type, AuditLog.entity_id == entity_id)
        .order_by(AuditLog.created_at.desc())
    )
    return list(result.scalars().all())

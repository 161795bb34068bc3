"""
Tests for the audit log service.
"""

from unittest.mock import AsyncMock, MagicMock, patch
from uuid import uuid4

import pytest
import pytest_asyncio
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from admissions.core.exceptions import AuthorizationError
from admissions.modules.audit.models import AuditAction
from admissions.modules.audit.service import (
    MAX_AUDIT_PAGE,
    get_entity_audit_logs,
    get_recent_audit_logs,
    record_admin_action,
)
from admissions.modules.users.models import User, UserRole

SERVICE = "admissions.modules.audit.service"


def _session_factory(session):
    """Stand-in for async_session_maker that yields the given session."""
    factory = MagicMock()
    factory.return_value.__aenter__ = AsyncMock(return_value=session)
    factory.return_value.__aexit__ = AsyncMock(return_value=False)
    return factory


@pytest.fixture
def audit_db(mock_db):
    with patch(f"{SERVICE}.async_session_maker", _session_factory(mock_db)):
        yield mock_db


class TestRecordAdminAction:
    @pytest.mark.asyncio
    async def test_writes_and_commits_entry(self, audit_db, admin_user):
        entity_id = uuid4()

        with patch(f"{SERVICE}.repository") as mock_repo:
            mock_repo.create = AsyncMock()

            await record_admin_action(
                actor=admin_user,
                action=AuditAction.STATUS_CHANGE,
                entity_type="application",
                entity_id=entity_id,
                details={"from": "PENDING", "to": "ACCEPTED"},
            )

        mock_repo.create.assert_awaited_once_with(
            audit_db,
            actor_id=admin_user.id,
            actor_name="Head Admin",
            action=AuditAction.STATUS_CHANGE,
            entity_type="application",
            entity_id=str(entity_id),
            details={"from": "PENDING", "to": "ACCEPTED"},
        )
        audit_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_falls_back_to_email_for_actor_name(self, audit_db, student_user):
        with patch(f"{SERVICE}.repository") as mock_repo:
            mock_repo.create = AsyncMock()

            await record_admin_action(
                actor=student_user,
                action=AuditAction.CREATE,
                entity_type="enrollment",
                entity_id="abc",
            )

        assert mock_repo.create.await_args.kwargs["actor_name"] == "student@example.com"

    @pytest.mark.asyncio
    async def test_failure_is_logged_and_swallowed(self, audit_db, admin_user):
        audit_db.commit.side_effect = OperationalError("INSERT", {}, Exception("db down"))

        with patch(f"{SERVICE}.repository") as mock_repo:
            mock_repo.create = AsyncMock()

            await record_admin_action(
                actor=admin_user,
                action=AuditAction.CREATE,
                entity_type="enrollment",
                entity_id=uuid4(),
            )

        audit_db.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_failed_rollback_is_also_swallowed(self, audit_db, admin_user):
        audit_db.rollback.side_effect = RuntimeError("connection closed")

        with patch(f"{SERVICE}.repository") as mock_repo:
            mock_repo.create = AsyncMock(side_effect=RuntimeError("flush failed"))

            await record_admin_action(
                actor=admin_user,
                action=AuditAction.CREATE,
                entity_type="enrollment",
                entity_id=uuid4(),
            )


class TestAuditSessionIsolation:
    """A failed audit write must not expire objects in the caller's session."""

    @pytest_asyncio.fixture
    async def engine(self, tmp_path):
        # Only the users table exists, so every audit insert fails.
        engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'audit.db'}")
        async with engine.begin() as conn:
            await conn.run_sync(User.__table__.create)
        yield engine
        await engine.dispose()

    @pytest.mark.asyncio
    async def test_caller_objects_stay_readable_after_failed_audit(self, engine, admin_user):
        session_maker = async_sessionmaker(engine, expire_on_commit=False)

        async with session_maker() as db:
            user = User(
                email="karim@example.com",
                password_hash="$2b$12$hashed",
                name="Abdul Karim",
                role=UserRole.STUDENT,
            )
            db.add(user)
            await db.commit()
            user_id = user.id

            with patch(f"{SERVICE}.async_session_maker", session_maker):
                await record_admin_action(
                    actor=admin_user,
                    action=AuditAction.CREATE,
                    entity_type="user",
                    entity_id=user_id,
                )

            assert user.email == "karim@example.com"
            assert user.name == "Abdul Karim"
            assert user.id == user_id


class TestReadAuditLogs:
    @pytest.mark.asyncio
    async def test_recent_caps_limit(self, mock_db, admin_user):
        entries = [MagicMock()]

        with patch(f"{SERVICE}.repository") as mock_repo:
            mock_repo.get_recent = AsyncMock(return_value=entries)

            result = await get_recent_audit_logs(mock_db, actor=admin_user, limit=10_000)

        assert result == entries
        mock_repo.get_recent.assert_awaited_once_with(mock_db, MAX_AUDIT_PAGE)

    @pytest.mark.asyncio
    async def test_entity_history(self, mock_db, admin_user):
        entity_id = uuid4()

        with patch(f"{SERVICE}.repository") as mock_repo:
            mock_repo.get_for_entity = AsyncMock(return_value=[])

            await get_entity_audit_logs(mock_db, "enrollment", entity_id, actor=admin_user)

        mock_repo.get_for_entity.assert_awaited_once_with(mock_db, "enrollment", str(entity_id))

    @pytest.mark.asyncio
    async def test_staff_cannot_read(self, mock_db, staff_user):
        with pytest.raises(AuthorizationError):
            await get_recent_audit_logs(mock_db, actor=staff_user)

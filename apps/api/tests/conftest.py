"""
Shared fixtures: a mocked database session and callers of each role.
"""

from unittest.mock import AsyncMock, MagicMock
from uuid import UUID

import pytest

from admissions.core.auth import CurrentUser
from admissions.core.notifications import NotificationDispatcher
from admissions.core.rate_limit import MemoryRateLimitBackend, RateLimiter


@pytest.fixture
def mock_db():
    """Create a mock database session."""
    db = AsyncMock()
    db.commit = AsyncMock()
    db.rollback = AsyncMock()
    db.flush = AsyncMock()
    db.execute = AsyncMock()
    db.get = AsyncMock()
    db.add = MagicMock()
    return db


@pytest.fixture
def admin_user():
    return CurrentUser(
        id=UUID("00000000-0000-0000-0000-000000000001"),
        email="admin@assunnahskill.org",
        role="ADMIN",
        name="Head Admin",
    )


@pytest.fixture
def staff_user():
    return CurrentUser(
        id=UUID("00000000-0000-0000-0000-000000000002"),
        email="reviewer@assunnahskill.org",
        role="STAFF",
        name="Reviewer",
    )


@pytest.fixture
def student_user():
    return CurrentUser(
        id=UUID("00000000-0000-0000-0000-000000000003"),
        email="student@example.com",
        role="STUDENT",
    )


@pytest.fixture
def rate_limiter():
    """A fresh in-memory limiter per test."""
    return RateLimiter(MemoryRateLimitBackend())


@pytest.fixture
def mock_notifier():
    return MagicMock(spec=NotificationDispatcher)

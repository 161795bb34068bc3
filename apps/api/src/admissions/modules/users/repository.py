"""
User Repository

Database operations for user accounts.
"""

import logging
from datetime import date
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from admissions.modules.users.models import Gender, User, UserRole

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


class UserRepository:
    """Repository for user database operations."""

    @staticmethod
    async def create(
        db: AsyncSession,
        *,
        email: str,
        password_hash: str,
        name: str,
        role: UserRole = UserRole.STUDENT,
        phone: str | None = None,
        gender: Gender | None = None,
        date_of_birth: date | None = None,
        nid_number: str | None = None,
        address: str | None = None,
        father_name: str | None = None,
        must_change_password: bool = False,
    ) -> User:
        """
        Create a new user record.

        The email is lower-cased before it is stored. Flushes but does not
        commit; the caller owns the transaction.

        Returns:
            Created User instance
        """
        user = User(
            email=normalize_email(email),
            password_hash=password_hash,
            name=name,
            role=role,
            phone=phone,
            gender=gender,
            date_of_birth=date_of_birth,
            nid_number=nid_number,
            address=address,
            father_name=father_name,
            is_active=True,
            must_change_password=must_change_password,
        )

        db.add(user)
        await db.flush()

        logger.info(f"Created user: {user.id} - {user.email} ({user.role.value})")
        return user

    @staticmethod
    async def get_by_id(db: AsyncSession, user_id: UUID) -> User | None:
        result = await db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    @staticmethod
    async def get_by_email(db: AsyncSession, email: str) -> User | None:
        """Get a user by email address (case-insensitive)."""
        result = await db.execute(
            select(User).where(func.lower(User.email) == normalize_email(email))
        )
        return result.scalar_one_or_none()

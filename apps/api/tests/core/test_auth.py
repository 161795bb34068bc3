"""
Tests for token decoding, role checks and password helpers.
"""

from datetime import timedelta
from uuid import uuid4

import bcrypt
import pytest
from fastapi import HTTPException

from admissions.core.auth import require_admin, require_reviewer, user_from_token
from admissions.core.exceptions import AuthorizationError
from admissions.core.security import (
    create_access_token,
    generate_temporary_password,
    hash_password,
)


class TestUserFromToken:
    def test_builds_current_user_from_claims(self):
        user_id = uuid4()
        token = create_access_token(
            str(user_id), {"email": "staff@example.com", "role": "staff", "name": "Reviewer"}
        )

        user = user_from_token(token)

        assert user.id == user_id
        assert user.role == "STAFF"
        assert user.is_reviewer
        assert not user.is_admin

    def test_expired_token_is_rejected(self):
        token = create_access_token(str(uuid4()), expires_delta=timedelta(seconds=-5))

        with pytest.raises(HTTPException) as exc_info:
            user_from_token(token)

        assert exc_info.value.status_code == 401
        assert exc_info.value.detail["error"] == "INVALID_TOKEN"

    def test_refresh_token_is_rejected(self):
        token = create_access_token(str(uuid4()), {"type": "refresh"})

        with pytest.raises(HTTPException) as exc_info:
            user_from_token(token)

        assert exc_info.value.detail["error"] == "INVALID_TOKEN_TYPE"

    def test_malformed_subject_is_rejected(self):
        token = create_access_token("not-a-uuid")

        with pytest.raises(HTTPException) as exc_info:
            user_from_token(token)

        assert exc_info.value.detail["error"] == "INVALID_TOKEN_CLAIMS"


class TestRoleChecks:
    def test_reviewer_roles(self, staff_user, admin_user, student_user):
        assert require_reviewer(staff_user) is staff_user
        assert require_reviewer(admin_user) is admin_user
        with pytest.raises(AuthorizationError):
            require_reviewer(student_user)
        with pytest.raises(AuthorizationError):
            require_reviewer(None)

    def test_admin_roles(self, staff_user, admin_user):
        assert require_admin(admin_user) is admin_user
        with pytest.raises(AuthorizationError):
            require_admin(staff_user)


class TestPasswords:
    def test_hash_is_salted_bcrypt(self):
        password_hash = hash_password("correct horse")

        assert password_hash.startswith("$2b$12$")
        assert bcrypt.checkpw(b"correct horse", password_hash.encode())
        assert not bcrypt.checkpw(b"wrong", password_hash.encode())
        assert password_hash != hash_password("correct horse")

    def test_empty_password_is_rejected(self):
        with pytest.raises(ValueError):
            hash_password("")

    def test_temporary_passwords_are_unique(self):
        first = generate_temporary_password()

        assert len(first) == 16
        assert first != generate_temporary_password()

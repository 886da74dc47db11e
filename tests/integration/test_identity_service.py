"""Integration tests for account operations."""

import pytest

from openalpha.kernel.errors import AuthenticationError, AuthorizationError, ValidationError
from openalpha.kernel.identity.identity_service import IdentityService
from openalpha.kernel.models.user import UserRole


class TestRegistration:

    async def test_register_student(self, db_session):
        user = await IdentityService(db_session).register_user(
            email="  Kid@Example.com ",
            password="secret1",
            role=UserRole.STUDENT,
            display_name=" Sam ",
            grade_level=3,
        )
        assert user.email == "kid@example.com"
        assert user.display_name == "Sam"
        assert user.grade_level == 3
        assert user.created_at is not None

    async def test_student_needs_grade(self, db_session):
        with pytest.raises(ValidationError, match="Grade level is required"):
            await IdentityService(db_session).register_user("kid@example.com", "secret1", UserRole.STUDENT)

    async def test_parent_grade_is_dropped(self, db_session):
        user = await IdentityService(db_session).register_user(
            "mom@example.com", "secret1", UserRole.PARENT, grade_level=5
        )
        assert user.grade_level is None

    async def test_duplicate_email(self, db_session):
        identity = IdentityService(db_session)
        await identity.register_user("mom@example.com", "secret1", UserRole.PARENT)
        with pytest.raises(ValidationError) as exc_info:
            await identity.register_user("MOM@example.com", "secret2", UserRole.PARENT)
        assert exc_info.value.code == "email_taken"


class TestAuthenticate:

    async def test_valid_credentials(self, db_session, student):
        user = await IdentityService(db_session).authenticate(student.email, "TestPassword123")
        assert user.id == student.id

    async def test_wrong_password_and_unknown_email_look_alike(self, db_session, student):
        identity = IdentityService(db_session)
        with pytest.raises(AuthenticationError) as wrong:
            await identity.authenticate(student.email, "nope")
        with pytest.raises(AuthenticationError) as unknown:
            await identity.authenticate("ghost@example.com", "nope")
        assert wrong.value.detail == unknown.value.detail

    async def test_disabled_account(self, db_session, student):
        student.is_active = False
        await db_session.commit()
        with pytest.raises(AuthorizationError):
            await IdentityService(db_session).authenticate(student.email, "TestPassword123")


class TestProfile:

    async def test_student_changes_grade(self, db_session, student):
        user = await IdentityService(db_session).update_profile(student, grade_level=4)
        assert user.grade_level == 4

    async def test_parent_cannot_set_grade(self, db_session, parent):
        with pytest.raises(AuthorizationError):
            await IdentityService(db_session).update_profile(parent, grade_level=4)

    async def test_empty_update(self, db_session, parent):
        with pytest.raises(ValidationError):
            await IdentityService(db_session).update_profile(parent)

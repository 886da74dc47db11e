"""
Identity service for account operations.
"""

import uuid
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from openalpha.kernel.errors import AuthenticationError, AuthorizationError, ValidationError
from openalpha.kernel.identity.password import hash_password, verify_password
from openalpha.kernel.models.user import User, UserRole
from openalpha.logging_config import get_logger

logger = get_logger(__name__)


class IdentityService:
    """
    Service for user identity operations.

    Handles signup, password login and profile edits. Token issuance stays
    with JWTManager so this class only touches the database.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_user_by_id(self, user_id: uuid.UUID) -> Optional[User]:
        return await self.session.get(User, user_id)

    async def get_user_by_email(self, email: str) -> Optional[User]:
        result = await self.session.execute(
            select(User).where(User.email == email.lower().strip())
        )
        return result.scalar_one_or_none()

    async def register_user(
        self,
        email: str,
        password: str,
        role: UserRole,
        display_name: Optional[str] = None,
        grade_level: Optional[int] = None,
    ) -> User:
        """
        Create an account.

        Raises:
            ValidationError: student without a grade level, or email taken
        """
        if role == UserRole.STUDENT and grade_level is None:
            raise ValidationError("Grade level is required for students", code="grade_level_required")

        if await self.get_user_by_email(email):
            raise ValidationError("Email already registered", code="email_taken")

        user = User(
            email=email.lower().strip(),
            password_hash=hash_password(password),
            display_name=display_name.strip() if display_name else None,
            role=role.value,
            # Grade only means something for students
            grade_level=grade_level if role == UserRole.STUDENT else None,
        )
        self.session.add(user)
        await self.session.flush()
        await self.session.refresh(user)  # load server-side created_at

        logger.info("User registered", extra={"user_id": str(user.id), "role": user.role})
        return user

    async def authenticate(self, email: str, password: str) -> User:
        """
        Check credentials.

        Unknown email and wrong password are reported identically.
        """
        user = await self.get_user_by_email(email)
        if not user or not verify_password(password, user.password_hash):
            raise AuthenticationError("Invalid email or password")
        if not user.is_active:
            raise AuthorizationError("User account is disabled")
        return user

    async def update_profile(
        self,
        user: User,
        display_name: Optional[str] = None,
        grade_level: Optional[int] = None,
    ) -> User:
        """Apply a partial profile edit. Only students carry a grade level."""
        if display_name is None and grade_level is None:
            raise ValidationError("No fields to update")

        if grade_level is not None:
            if user.role != UserRole.STUDENT.value:
                raise AuthorizationError("Only students can update grade level")
            user.grade_level = grade_level
        if display_name is not None:
            user.display_name = display_name.strip() or None

        await self.session.flush()
        await self.session.refresh(user)
        return user

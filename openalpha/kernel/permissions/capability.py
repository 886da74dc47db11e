"""
Capability checks shared by every role-gated operation.

Two gates cover the whole API: the caller's role, and (for parent-facing
reads) an accepted link between the parent and the target student.
"""

import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from openalpha.kernel.errors import AuthorizationError
from openalpha.kernel.models.parent_link import ParentLink
from openalpha.kernel.models.user import User, UserRole

NOT_LINKED_DETAIL = "Not authorized to view this student"


def require_role(user: User, role: UserRole) -> User:
    """Return the user unchanged if it holds ``role``."""
    if user.role != role.value:
        raise AuthorizationError(f"This action requires the {role.value} role")
    return user


class CapabilityService:
    """Link-ownership checks for parent-facing reads."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def is_linked(self, parent_id: uuid.UUID, student_id: uuid.UUID) -> bool:
        result = await self.session.execute(
            select(ParentLink.id)
            .where(
                ParentLink.parent_id == parent_id,
                ParentLink.student_id == student_id,
                ParentLink.linked_at.is_not(None),
            )
            .limit(1)
        )
        return result.scalar_one_or_none() is not None

    async def require_linked(self, parent: User, student_id: uuid.UUID) -> User:
        """
        Resolve a linked student for ``parent``.

        A missing link and a missing student look the same to the caller,
        so the check never confirms that an unlinked account exists.
        """
        require_role(parent, UserRole.PARENT)
        if not await self.is_linked(parent.id, student_id):
            raise AuthorizationError(NOT_LINKED_DETAIL)
        student = await self.session.get(User, student_id)
        if student is None:
            raise AuthorizationError(NOT_LINKED_DETAIL)
        return student

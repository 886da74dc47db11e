"""
Linking Protocol - invite codes that bind a parent account to a student.

Lifecycle of a ParentLink row:
    issue_invite   -> pending (invite_code set, parent_id NULL)
    redeem_invite  -> linked  (parent_id + linked_at set, invite_code NULL)
    unlink         -> row deleted

Redemption is a single conditional UPDATE on (id, code, parent_id IS NULL);
clearing the code in that same statement is what makes a code single-use
when two parents race for it.
"""

import secrets
import uuid
from datetime import datetime
from typing import Callable, List, Optional

from sqlalchemy import delete, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from openalpha.kernel.errors import DependencyError, NotFoundError, ValidationError
from openalpha.kernel.models.base import generate_uuid, utcnow
from openalpha.kernel.models.parent_link import ParentLink
from openalpha.kernel.models.user import User
from openalpha.logging_config import get_logger

logger = get_logger(__name__)

MAX_CODE_ATTEMPTS = 5
INVALID_CODE = "Invalid or expired invite code"
ALREADY_LINKED = "Already linked to this student"


def generate_invite_code() -> str:
    """Eight uppercase hex characters (32 random bits)."""
    return secrets.token_hex(4).upper()


def normalize_invite_code(code: str) -> str:
    return code.strip().upper()


def _is_code_collision(exc: IntegrityError) -> bool:
    """True when the violated constraint is the invite_code uniqueness."""
    return "invite_code" in str(exc.orig)


class LinkService:
    """Issue, redeem and revoke parent links."""

    def __init__(
        self,
        session: AsyncSession,
        clock: Callable[[], datetime] = utcnow,
        code_factory: Callable[[], str] = generate_invite_code,
    ):
        self.session = session
        self.clock = clock
        self.code_factory = code_factory

    async def _find_pending(self, code: str) -> Optional[ParentLink]:
        result = await self.session.execute(
            select(ParentLink).where(
                ParentLink.invite_code == code,
                ParentLink.parent_id.is_(None),
            )
        )
        return result.scalar_one_or_none()

    async def _linked_row(self, parent_id: uuid.UUID, student_id: uuid.UUID) -> Optional[ParentLink]:
        result = await self.session.execute(
            select(ParentLink)
            .where(
                ParentLink.parent_id == parent_id,
                ParentLink.student_id == student_id,
                ParentLink.linked_at.is_not(None),
            )
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def issue_invite(self, student_id: uuid.UUID) -> str:
        """
        Return a fresh code for ``student_id``.

        An existing pending row gets its code overwritten in place, which
        invalidates the previous code immediately.
        """
        for attempt in range(1, MAX_CODE_ATTEMPTS + 1):
            code = self.code_factory()
            try:
                await self._write_pending(student_id, code)
            except IntegrityError as exc:
                if not _is_code_collision(exc):
                    raise
                # Code already held by another student's pending row; draw again
                logger.info("Invite code collision", extra={"attempt": attempt})
                continue
            logger.info("Invite issued", extra={"student_id": str(student_id)})
            return code

        logger.warning(
            "Invite code collisions exhausted attempts",
            extra={"student_id": str(student_id), "attempts": MAX_CODE_ATTEMPTS},
        )
        raise DependencyError("Could not allocate a unique invite code", code="invite_code_collision")

    async def _write_pending(self, student_id: uuid.UUID, code: str) -> None:
        """
        One statement: insert the student's pending row, or overwrite the code
        of the one that exists. Concurrent issues for the same student both
        land on the single pending row.
        """
        conn = await self.session.connection()
        is_postgres = conn.dialect.name == "postgresql"
        dialect_insert = postgresql.insert if is_postgres else sqlite.insert

        stmt = dialect_insert(ParentLink.__table__).values(
            id=generate_uuid(),
            student_id=student_id,
            invite_code=code,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["student_id"],
            index_where=ParentLink.__table__.c.parent_id.is_(None),
            set_={"invite_code": stmt.excluded.invite_code},
        )

        if is_postgres:
            # A failed statement aborts the whole PostgreSQL transaction
            async with self.session.begin_nested():
                await self.session.execute(stmt)
        else:
            await conn.execute(stmt)

    async def redeem_invite(self, parent_id: uuid.UUID, code: str) -> uuid.UUID:
        """
        Link ``parent_id`` to the student who issued ``code``.

        Raises:
            NotFoundError: unknown, reissued or already redeemed code
            ValidationError: parent already linked to that student
        """
        code = normalize_invite_code(code)
        pending = await self._find_pending(code)
        if pending is None:
            raise NotFoundError(INVALID_CODE)

        student_id = pending.student_id
        if await self._linked_row(parent_id, student_id) is not None:
            raise ValidationError(ALREADY_LINKED, code="already_linked")

        claimed = await self.session.execute(
            update(ParentLink)
            .where(
                ParentLink.id == pending.id,
                ParentLink.invite_code == code,
                ParentLink.parent_id.is_(None),
            )
            .values(parent_id=parent_id, linked_at=self.clock(), invite_code=None)
            .execution_options(synchronize_session=False)
        )
        if claimed.rowcount != 1:
            # Lost the race to another redemption, or the code was reissued
            logger.info("Invite redemption lost race", extra={"link_id": str(pending.id)})
            raise NotFoundError(INVALID_CODE)

        await self.session.refresh(pending)
        logger.info(
            "Parent linked",
            extra={"parent_id": str(parent_id), "student_id": str(student_id)},
        )
        return student_id

    async def unlink(self, parent_id: uuid.UUID, student_id: uuid.UUID) -> int:
        """Hard-delete the link rows for the pair. Returns rows removed."""
        result = await self.session.execute(
            delete(ParentLink)
            .where(
                ParentLink.parent_id == parent_id,
                ParentLink.student_id == student_id,
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount:
            logger.info(
                "Parent unlinked",
                extra={"parent_id": str(parent_id), "student_id": str(student_id)},
            )
        return result.rowcount

    async def list_linked_students(self, parent_id: uuid.UUID) -> List[tuple[User, datetime]]:
        """(student, linked_at) pairs, oldest link first."""
        result = await self.session.execute(
            select(User, ParentLink.linked_at)
            .join(ParentLink, ParentLink.student_id == User.id)
            .where(
                ParentLink.parent_id == parent_id,
                ParentLink.linked_at.is_not(None),
            )
            .order_by(ParentLink.linked_at)
        )
        return [(user, linked_at) for user, linked_at in result.all()]

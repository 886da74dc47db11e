"""
Session Store - append-only chat transcripts for tutor and coach sessions.

One chat exchange is: resolve the session, append the user entry in memory,
ask the completion backend for a reply, then persist both entries with one
conditional UPDATE. Nothing is written until the reply exists, so a failed
or timed-out completion leaves the stored transcript exactly as it was.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Awaitable, Callable, List, Optional, Sequence

from pydantic import BaseModel, ConfigDict
from sqlalchemy import desc, func, inspect, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from openalpha.kernel.errors import NotFoundError, SessionConflictError, ValidationError
from openalpha.kernel.models.base import generate_uuid, utcnow
from openalpha.kernel.models.chat_session import ChatSession, SessionType
from openalpha.logging_config import get_logger

logger = get_logger(__name__)

USER = "user"
ASSISTANT = "assistant"

SESSION_NOT_FOUND = "Session not found"


class SessionMetadata(BaseModel):
    """What a linked parent may see of a child's session: no transcript."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    session_type: str
    subject: Optional[str] = None
    concept_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime


@dataclass
class PendingTurn:
    """A turn whose user entry exists only in memory."""

    session: ChatSession
    transcript: List[dict] = field(default_factory=list)
    expected_version: int = 0


def is_well_formed(transcript: Sequence[dict]) -> bool:
    """Strict user/assistant alternation, starting with user, even length."""
    if len(transcript) % 2:
        return False
    for index, entry in enumerate(transcript):
        if entry.get("role") != (USER if index % 2 == 0 else ASSISTANT):
            return False
    return True


class SessionStore:
    """Reads and writes ChatSession rows for one unit of work."""

    def __init__(self, session: AsyncSession, clock: Callable[[], datetime] = utcnow):
        self.session = session
        self.clock = clock

    async def _load(
        self,
        user_id: uuid.UUID,
        session_id: uuid.UUID,
        session_type: Optional[SessionType] = None,
    ) -> ChatSession:
        query = select(ChatSession).where(
            ChatSession.id == session_id,
            ChatSession.user_id == user_id,
        )
        if session_type is not None:
            query = query.where(ChatSession.session_type == session_type.value)
        result = await self.session.execute(query.execution_options(populate_existing=True))
        chat = result.scalar_one_or_none()
        if chat is None:
            # Someone else's session reads as missing, never as forbidden
            raise NotFoundError(SESSION_NOT_FOUND)
        return chat

    async def get_or_create_session(
        self,
        user_id: uuid.UUID,
        session_type: SessionType,
        subject: Optional[str] = None,
        concept_id: Optional[str] = None,
        session_id: Optional[uuid.UUID] = None,
    ) -> ChatSession:
        """
        Resume ``session_id`` for its owner or open a new session.

        Tutor sessions stay pinned to the (subject, concept) they were
        created with; resuming one under a different concept is rejected.
        """
        if session_id is not None:
            chat = await self._load(user_id, session_id, session_type)
            if session_type == SessionType.TUTOR and (
                chat.subject != subject or chat.concept_id != concept_id
            ):
                raise ValidationError(
                    "Session belongs to a different concept",
                    code="session_scope_mismatch",
                )
            return chat

        now = self.clock()
        chat = ChatSession(
            id=generate_uuid(),
            user_id=user_id,
            session_type=session_type.value,
            subject=subject if session_type == SessionType.TUTOR else None,
            concept_id=concept_id if session_type == SessionType.TUTOR else None,
            transcript=[],
            version=0,
            created_at=now,
            updated_at=now,
        )
        # Inserted together with its first completed turn
        self.session.add(chat)
        logger.debug(
            "Chat session opened",
            extra={"session_id": str(chat.id), "session_type": chat.session_type},
        )
        return chat

    def append_turn(self, chat: ChatSession, user_content: str) -> PendingTurn:
        """Stage the user entry. Nothing is persisted."""
        transcript = [dict(entry) for entry in (chat.transcript or [])]
        transcript.append({"role": USER, "content": user_content})
        return PendingTurn(session=chat, transcript=transcript, expected_version=chat.version)

    async def complete_turn(self, pending: PendingTurn, assistant_content: str) -> ChatSession:
        """
        Persist the staged user entry and the reply as one state transition.

        Raises:
            SessionConflictError: another turn landed on this session first
        """
        chat = pending.session
        transcript = pending.transcript + [{"role": ASSISTANT, "content": assistant_content}]
        now = self.clock()

        if inspect(chat).pending:
            chat.transcript = transcript
            chat.version = pending.expected_version + 1
            chat.updated_at = now
            await self.session.flush()
            return chat

        result = await self.session.execute(
            update(ChatSession)
            .where(
                ChatSession.id == chat.id,
                ChatSession.version == pending.expected_version,
            )
            .values(
                transcript=transcript,
                version=pending.expected_version + 1,
                updated_at=now,
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            logger.warning(
                "Concurrent turn on chat session",
                extra={"session_id": str(chat.id), "expected_version": pending.expected_version},
            )
            raise SessionConflictError(
                "This conversation was updated by another request. Please retry.",
                code="session_conflict",
            )

        await self.session.refresh(chat)
        return chat

    async def run_turn(
        self,
        chat: ChatSession,
        user_content: str,
        reply: Callable[[List[dict]], Awaitable[str]],
    ) -> ChatSession:
        """
        One full exchange. ``reply`` receives the transcript including the
        new user entry; if it raises, the stored session is untouched.
        """
        pending = self.append_turn(chat, user_content)
        assistant_content = await reply(pending.transcript)
        return await self.complete_turn(pending, assistant_content)

    # ── Reads ──

    async def get_transcript(self, user_id: uuid.UUID, session_id: uuid.UUID) -> ChatSession:
        """Owner-only read of a full session."""
        return await self._load(user_id, session_id)

    async def list_metadata(
        self,
        user_id: uuid.UUID,
        session_type: Optional[SessionType] = None,
        since: Optional[datetime] = None,
        limit: int = 20,
    ) -> List[SessionMetadata]:
        """Newest first, without transcript content."""
        query = select(
            ChatSession.id,
            ChatSession.session_type,
            ChatSession.subject,
            ChatSession.concept_id,
            ChatSession.created_at,
            ChatSession.updated_at,
        ).where(ChatSession.user_id == user_id)
        if session_type is not None:
            query = query.where(ChatSession.session_type == session_type.value)
        if since is not None:
            query = query.where(ChatSession.updated_at >= since)
        query = query.order_by(desc(ChatSession.updated_at)).limit(limit)

        result = await self.session.execute(query)
        return [SessionMetadata.model_validate(row) for row in result.all()]

    async def last_active_at(self, user_id: uuid.UUID) -> Optional[datetime]:
        result = await self.session.execute(
            select(func.max(ChatSession.updated_at)).where(ChatSession.user_id == user_id)
        )
        return result.scalar_one_or_none()

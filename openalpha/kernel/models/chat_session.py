"""
Chat session model - persistent transcript for tutor and coach conversations.
"""

import uuid
from enum import Enum
from typing import Optional

from sqlalchemy import JSON, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from openalpha.kernel.models.base import Base, TimestampMixin, generate_uuid


class SessionType(str, Enum):
    TUTOR = "tutor"
    COACH = "coach"


class ChatSession(Base, TimestampMixin):
    """
    One conversation owned by one user.

    Tutor sessions are pinned to a (subject, concept) at creation. The
    transcript is a list of {"role": "user"|"assistant", "content": str}
    and only ever grows by complete user/assistant pairs; ``version`` counts
    committed turns and guards concurrent writers.
    """

    __tablename__ = "chat_sessions"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=generate_uuid,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    session_type: Mapped[str] = mapped_column(String(20), nullable=False)
    subject: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    concept_id: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    transcript: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    __table_args__ = (
        Index("ix_chat_sessions_user_type_updated", "user_id", "session_type", "updated_at"),
    )

    @property
    def turn_count(self) -> int:
        return len(self.transcript or []) // 2

"""
Kernel Data Models

SQLAlchemy models for users, mastery records, chat sessions and parent links.
Importing this package registers every table on Base.metadata.
"""

from openalpha.kernel.models.base import Base, TimestampMixin, as_utc, generate_uuid, utcnow
from openalpha.kernel.models.user import MAX_GRADE, MIN_GRADE, User, UserRole
from openalpha.kernel.models.mastery import MASTERY_THRESHOLD, MasteryRecord
from openalpha.kernel.models.chat_session import ChatSession, SessionType
from openalpha.kernel.models.parent_link import INVITE_CODE_LENGTH, ParentLink

__all__ = [
    "Base",
    "TimestampMixin",
    "as_utc",
    "generate_uuid",
    "utcnow",
    "User",
    "UserRole",
    "MIN_GRADE",
    "MAX_GRADE",
    "MasteryRecord",
    "MASTERY_THRESHOLD",
    "ChatSession",
    "SessionType",
    "ParentLink",
    "INVITE_CODE_LENGTH",
]

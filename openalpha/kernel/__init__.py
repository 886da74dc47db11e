"""
Kernel Layer

Foundational pieces every engine builds on:
- Data models (users, mastery records, chat sessions, parent links)
- Identity (passwords, bearer tokens, accounts)
- Capability checks (role and parent-link gates)
- The error taxonomy surfaced by the API
"""

from openalpha.kernel.models import (
    ChatSession,
    MasteryRecord,
    ParentLink,
    SessionType,
    User,
    UserRole,
)

__all__ = [
    "User",
    "UserRole",
    "MasteryRecord",
    "ChatSession",
    "SessionType",
    "ParentLink",
]

"""
Session Engine - append-only tutor and coach transcripts.
"""

from openalpha.engines.sessions.session_store import (
    PendingTurn,
    SessionMetadata,
    SessionStore,
    is_well_formed,
)

__all__ = [
    "PendingTurn",
    "SessionMetadata",
    "SessionStore",
    "is_well_formed",
]

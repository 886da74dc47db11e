"""
Linking Engine - parent/student invite codes.
"""

from openalpha.engines.linking.link_service import (
    LinkService,
    generate_invite_code,
    normalize_invite_code,
)

__all__ = [
    "LinkService",
    "generate_invite_code",
    "normalize_invite_code",
]

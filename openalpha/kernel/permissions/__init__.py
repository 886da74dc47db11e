"""
Permission Core - role and parent-link capability checks.
"""

from openalpha.kernel.permissions.capability import (
    CapabilityService,
    require_role,
)

__all__ = [
    "CapabilityService",
    "require_role",
]

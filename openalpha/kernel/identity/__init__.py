"""
Identity Core - Authentication and user management.
"""

from openalpha.kernel.identity.password import PasswordHasher, hash_password, verify_password
from openalpha.kernel.identity.jwt import AccessTokenPayload, JWTManager
from openalpha.kernel.identity.identity_service import IdentityService

__all__ = [
    "PasswordHasher",
    "hash_password",
    "verify_password",
    "JWTManager",
    "AccessTokenPayload",
    "IdentityService",
]

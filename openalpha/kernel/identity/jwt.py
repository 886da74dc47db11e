"""
Bearer tokens for students and parents.

A token names the account (``sub``) and its role, so role-gated routes can
reject a mismatch before touching the store. Only tokens minted by this
service with ``token_use=access`` verify; anything else decodes to None.
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt
from pydantic import BaseModel, ValidationError

from openalpha.kernel.models.user import UserRole

ISSUER = "openalpha"
TOKEN_USE = "access"


class AccessTokenPayload(BaseModel):
    """Claims of a verified access token."""

    sub: uuid.UUID
    role: UserRole
    exp: datetime
    iat: datetime

    @property
    def user_id(self) -> uuid.UUID:
        return self.sub


class JWTManager:
    """Signs and verifies access tokens with one shared secret."""

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        access_token_expire_minutes: int = 10080,
    ):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.lifetime = timedelta(minutes=access_token_expire_minutes)

    @classmethod
    def from_settings(cls, settings) -> "JWTManager":
        return cls(
            secret_key=settings.secret_key,
            algorithm=settings.algorithm,
            access_token_expire_minutes=settings.access_token_expire_minutes,
        )

    def create_access_token(
        self,
        user_id: uuid.UUID,
        role: str,
        expires_delta: Optional[timedelta] = None,
    ) -> tuple[str, datetime]:
        """Return ``(token, expires_at)`` for the account."""
        issued = datetime.now(timezone.utc)
        expires = issued + (expires_delta if expires_delta is not None else self.lifetime)
        claims = {
            "iss": ISSUER,
            "sub": str(user_id),
            "role": UserRole(role).value,
            "iat": issued,
            "exp": expires,
            "token_use": TOKEN_USE,
        }
        return jwt.encode(claims, self.secret_key, algorithm=self.algorithm), expires

    def verify_access_token(self, token: str) -> Optional[AccessTokenPayload]:
        """Claims of a valid, unexpired access token, or None."""
        try:
            claims = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                issuer=ISSUER,
            )
        except JWTError:
            return None

        if claims.get("token_use") != TOKEN_USE:
            return None
        try:
            return AccessTokenPayload.model_validate(claims)
        except ValidationError:
            return None

"""
Pydantic schemas for API request/response validation.
"""

from openalpha.schemas.common import ErrorResponse, HealthResponse, SuccessResponse
from openalpha.schemas.auth import (
    LoginRequest,
    ProfileUpdate,
    SignupRequest,
    TokenResponse,
    UserResponse,
)

__all__ = [
    "ErrorResponse",
    "HealthResponse",
    "SuccessResponse",
    "LoginRequest",
    "ProfileUpdate",
    "SignupRequest",
    "TokenResponse",
    "UserResponse",
]

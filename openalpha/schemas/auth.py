"""
Authentication schemas.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from openalpha.kernel.models.user import MAX_GRADE, MIN_GRADE, UserRole


class SignupRequest(BaseModel):
    """Account registration request."""

    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    display_name: Optional[str] = Field(None, min_length=1, max_length=255)
    role: UserRole
    grade_level: Optional[int] = Field(None, ge=MIN_GRADE, le=MAX_GRADE)


class LoginRequest(BaseModel):
    """Login request."""

    email: EmailStr
    password: str


class ProfileUpdate(BaseModel):
    """Partial profile edit."""

    display_name: Optional[str] = Field(None, max_length=255)
    grade_level: Optional[int] = Field(None, ge=MIN_GRADE, le=MAX_GRADE)

    @field_validator("display_name")
    @classmethod
    def strip_name(cls, v: Optional[str]) -> Optional[str]:
        return v.strip() if v is not None else v


class UserResponse(BaseModel):
    """User profile response."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    email: str
    display_name: Optional[str] = None
    role: str
    grade_level: Optional[int] = None
    created_at: datetime


class TokenResponse(BaseModel):
    """Bearer token plus the account it belongs to."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int  # seconds
    user: UserResponse

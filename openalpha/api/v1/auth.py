"""
Authentication endpoints.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, status

from openalpha.api.deps import CurrentUser, DbSession, Jwt
from openalpha.kernel.identity.identity_service import IdentityService
from openalpha.kernel.identity.jwt import JWTManager
from openalpha.kernel.models.user import User
from openalpha.schemas.auth import (
    LoginRequest,
    ProfileUpdate,
    SignupRequest,
    TokenResponse,
    UserResponse,
)

router = APIRouter()


def _token_response(jwt_manager: JWTManager, user: User) -> TokenResponse:
    token, expire = jwt_manager.create_access_token(user.id, user.role)
    return TokenResponse(
        access_token=token,
        expires_in=int((expire - datetime.now(timezone.utc)).total_seconds()),
        user=UserResponse.model_validate(user),
    )


@router.post("/signup", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def signup(data: SignupRequest, db: DbSession, jwt_manager: Jwt):
    """
    Register a student or parent account.

    Students must supply a grade level (0 = kindergarten to 12).
    """
    user = await IdentityService(db).register_user(
        email=data.email,
        password=data.password,
        role=data.role,
        display_name=data.display_name,
        grade_level=data.grade_level,
    )
    return _token_response(jwt_manager, user)


@router.post("/login", response_model=TokenResponse)
async def login(data: LoginRequest, db: DbSession, jwt_manager: Jwt):
    """Authenticate with email and password."""
    user = await IdentityService(db).authenticate(data.email, data.password)
    return _token_response(jwt_manager, user)


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(user: CurrentUser):
    """Get current user's profile."""
    return UserResponse.model_validate(user)


@router.patch("/profile", response_model=UserResponse)
async def update_profile(data: ProfileUpdate, user: CurrentUser, db: DbSession):
    """Update display name, or grade level for students."""
    user = await IdentityService(db).update_profile(
        user,
        display_name=data.display_name,
        grade_level=data.grade_level,
    )
    return UserResponse.model_validate(user)

"""
FastAPI dependencies for authentication, authorization, and database sessions.

Long-lived collaborators (Database, JWTManager, completion service, catalog)
are built once by create_app and read from app.state here.
"""

from typing import Annotated, AsyncIterator, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from openalpha.ai.completion import CompletionService
from openalpha.config import Settings
from openalpha.database import Database
from openalpha.kernel.errors import AuthenticationError, AuthorizationError
from openalpha.kernel.identity.identity_service import IdentityService
from openalpha.kernel.identity.jwt import JWTManager
from openalpha.kernel.models.user import User, UserRole
from openalpha.kernel.permissions.capability import require_role
from openalpha.logging_config import bind_user
from openalpha.pedagogy.catalog import CurriculumCatalog

# auto_error=False so a missing header reaches our own 401 instead of a bare 403
security = HTTPBearer(auto_error=False)


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_database(request: Request) -> Database:
    return request.app.state.database


def get_jwt_manager(request: Request) -> JWTManager:
    return request.app.state.jwt_manager


def get_completion(request: Request) -> CompletionService:
    return request.app.state.completion


def get_catalog(request: Request) -> CurriculumCatalog:
    return request.app.state.catalog


async def get_db(database: Annotated[Database, Depends(get_database)]) -> AsyncIterator[AsyncSession]:
    """One session per request: committed on success, rolled back on any error."""
    async with database.session() as session:
        yield session


AppSettings = Annotated[Settings, Depends(get_app_settings)]
DbSession = Annotated[AsyncSession, Depends(get_db)]
Jwt = Annotated[JWTManager, Depends(get_jwt_manager)]
Completion = Annotated[CompletionService, Depends(get_completion)]
Catalog = Annotated[CurriculumCatalog, Depends(get_catalog)]


async def get_current_user(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
    jwt_manager: Jwt,
    db: DbSession,
) -> User:
    """Resolve the bearer token to an active user or raise 401."""
    if not credentials:
        raise AuthenticationError("Not authenticated")

    payload = jwt_manager.verify_access_token(credentials.credentials)
    if not payload:
        raise AuthenticationError("Invalid or expired token")

    user = await IdentityService(db).get_user_by_id(payload.user_id)
    if not user:
        raise AuthenticationError("User not found")
    if not user.is_active:
        raise AuthorizationError("User account is disabled")
    bind_user(user.id)
    return user


CurrentUser = Annotated[User, Depends(get_current_user)]


async def require_student(user: CurrentUser) -> User:
    return require_role(user, UserRole.STUDENT)


async def require_parent(user: CurrentUser) -> User:
    return require_role(user, UserRole.PARENT)


StudentUser = Annotated[User, Depends(require_student)]
ParentUser = Annotated[User, Depends(require_parent)]

"""
Pytest fixtures for Open Alpha tests.

Every test gets its own file-backed SQLite database under tmp_path, so
separate sessions (and separate API requests) see each other's commits.
"""

import uuid
from typing import AsyncGenerator, List, Optional, Sequence

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from openalpha.ai.completion import StubCompletionService
from openalpha.config import Settings
from openalpha.database import Database
from openalpha.kernel.errors import CompletionError
from openalpha.kernel.identity.jwt import JWTManager
from openalpha.kernel.identity.password import PasswordHasher
from openalpha.kernel.models.user import User, UserRole
from openalpha.main import create_app
from openalpha.pedagogy.catalog import CurriculumCatalog, load_default_catalog

TEST_SECRET = "test-secret-key-for-testing-only-0123456789"

# Minimum bcrypt cost keeps fixture users cheap
_fast_hasher = PasswordHasher(rounds=4)


class FakeCompletion(StubCompletionService):
    """Stub replies plus a call log and a switch to simulate an outage."""

    model_name = "fake"

    def __init__(self):
        self.calls: List[dict] = []
        self.fail = False
        self.reply: Optional[str] = None

    async def complete(
        self,
        system_prompt: str,
        transcript: Sequence[dict],
        *,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
    ) -> str:
        self.calls.append({
            "system_prompt": system_prompt,
            "transcript": [dict(m) for m in transcript],
        })
        if self.fail:
            raise CompletionError("The tutor is unavailable right now. Please try again.", code="completion_failed")
        if self.reply is not None:
            return self.reply
        return await super().complete(system_prompt, transcript)


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'api.db'}",
        secret_key=TEST_SECRET,
        openai_api_key="",
        environment="test",
        log_level="WARNING",
    )


@pytest_asyncio.fixture
async def database(tmp_path) -> AsyncGenerator[Database, None]:
    """Fresh schema in a temp file."""
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await db.create_all()
    yield db
    await db.dispose()


@pytest_asyncio.fixture
async def db_session(database: Database) -> AsyncGenerator[AsyncSession, None]:
    """A session on the test database. Tests commit when another session must see the data."""
    async with database.session_maker() as session:
        yield session
        await session.rollback()


@pytest.fixture
def catalog() -> CurriculumCatalog:
    return load_default_catalog()


@pytest.fixture
def completion() -> FakeCompletion:
    return FakeCompletion()


@pytest.fixture
def jwt_manager() -> JWTManager:
    """Create a JWT manager for tests."""
    return JWTManager(
        secret_key=TEST_SECRET,
        algorithm="HS256",
        access_token_expire_minutes=30,
    )


async def make_user(
    session: AsyncSession,
    role: UserRole,
    grade_level: Optional[int] = None,
    email: Optional[str] = None,
) -> User:
    user = User(
        id=uuid.uuid4(),
        email=email or f"{role.value}-{uuid.uuid4().hex[:8]}@example.com",
        password_hash=_fast_hasher.hash("TestPassword123"),
        display_name=f"Test {role.value.title()}",
        role=role.value,
        grade_level=grade_level,
    )
    session.add(user)
    await session.commit()
    await session.refresh(user)
    return user


@pytest_asyncio.fixture
async def student(db_session: AsyncSession) -> User:
    """A first-grade student."""
    return await make_user(db_session, UserRole.STUDENT, grade_level=1)


@pytest_asyncio.fixture
async def parent(db_session: AsyncSession) -> User:
    return await make_user(db_session, UserRole.PARENT)


@pytest_asyncio.fixture
async def other_parent(db_session: AsyncSession) -> User:
    return await make_user(db_session, UserRole.PARENT)


@pytest.fixture
def app(settings: Settings, database: Database, completion: FakeCompletion, catalog: CurriculumCatalog):
    return create_app(
        settings=settings,
        database=database,
        completion=completion,
        catalog=catalog,
    )


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """In-process HTTP client; the schema already exists, so lifespan is not needed."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


def auth_headers(jwt_manager: JWTManager, user: User) -> dict:
    token, _ = jwt_manager.create_access_token(user.id, user.role)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def headers_for(jwt_manager: JWTManager):
    """Bearer headers for any user: ``headers_for(user)``."""
    return lambda user: auth_headers(jwt_manager, user)


@pytest.fixture
def user_factory(db_session: AsyncSession):
    """Create and commit extra users: ``await user_factory(UserRole.STUDENT, grade_level=3)``."""

    async def _make(role: UserRole, grade_level: Optional[int] = None, email: Optional[str] = None) -> User:
        return await make_user(db_session, role, grade_level=grade_level, email=email)

    return _make

"""Shared test fixtures: fake tenant sessions, SQLite outbox DB, test client."""

import os

TEST_WEBHOOK_SECRET = "whsec_dGVzdHNlY3JldA=="  # base64("testsecret")

os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("SESSION_TOKEN_KEY", "test-session-key")
os.environ.setdefault("SESSION_TOKEN_ALGORITHM", "HS256")
os.environ.setdefault("IDENTITY_PROVIDER_WEBHOOK_SECRET", TEST_WEBHOOK_SECRET)
os.environ.setdefault("IDENTITY_PROVIDER_SECRET_KEY", "sk_test_imprint")
if os.environ.get("TEST_DATABASE_URL"):
    os.environ["DATABASE_URL"] = os.environ["TEST_DATABASE_URL"]

from collections.abc import AsyncGenerator, Callable  # noqa: E402
from unittest.mock import AsyncMock, patch  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel import SQLModel  # noqa: E402

# Import all models so metadata is populated
import imprint.models  # noqa: E402, F401
from imprint.core.security import create_session_token  # noqa: E402
from imprint.main import app  # noqa: E402
from imprint.services import resolver  # noqa: E402


class FakeTransaction:
    def __init__(self, session: "FakeSession") -> None:
        self.session = session

    async def __aenter__(self) -> "FakeTransaction":
        self.session.began = True
        return self

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        if exc_type is None:
            self.session.committed = True
        else:
            self.session.rolled_back = True
        return False


class FakeSession:
    """Stands in for AsyncSession where no real PostgreSQL is available."""

    def __init__(self) -> None:
        self.execute = AsyncMock()
        self.flush = AsyncMock()
        self.added: list = []
        self.began = False
        self.committed = False
        self.rolled_back = False
        self.closed = False

    def begin(self) -> FakeTransaction:
        return FakeTransaction(self)

    def add(self, instance) -> None:
        self.added.append(instance)

    async def __aenter__(self) -> "FakeSession":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        self.closed = True
        return False

    def added_of(self, model: type) -> list:
        return [obj for obj in self.added if isinstance(obj, model)]


@pytest.fixture
def fake_session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def session_factory(fake_session):
    """Route every ``tenant_scope`` to ``fake_session``."""
    factory = lambda: fake_session  # noqa: E731
    with patch("imprint.core.tenancy.async_session_factory", side_effect=factory) as mocked:
        yield mocked


@pytest.fixture(autouse=True)
def _clear_resolver_cache():
    resolver.clear_cache()
    yield
    resolver.clear_cache()


@pytest.fixture
async def sqlite_session_factory():
    """Session factory over a private in-memory SQLite database."""
    eng = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    async with eng.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield sessionmaker(eng, class_=AsyncSession, expire_on_commit=False)
    await eng.dispose()


@pytest.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers() -> Callable[..., dict[str, str]]:
    """Build a bearer header for a user of ``org_id`` holding ``roles``."""

    def _make(roles=("publisher_owner",), org_id="org_acme", user_id="user_1") -> dict[str, str]:
        token = create_session_token(user_id, org_id, list(roles))
        return {"Authorization": f"Bearer {token}"}

    return _make

"""
Pytest configuration and fixtures for auth service testing.
Provides settings, a SQLite-backed account store, an in-memory code store
with a controllable clock, a recording notifier and an HTTP client.
"""
from typing import AsyncGenerator, List, Optional, Tuple

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from passlib.context import CryptContext
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from account_auth.container.container import Container
from account_auth.core import security
from account_auth.core.config import Settings
from account_auth.core.database import create_session_factory
from account_auth.interfaces.notifier_interface import NotificationKind
from account_auth.main import create_app
from account_auth.models import Base
from account_auth.notifications.dispatcher import NotificationDispatcher
from account_auth.repositories.account_repository import AccountRepository
from account_auth.services.auth.authentication_service import AuthenticationService
from account_auth.stores.code_store import InMemoryCodeStore

TEST_SECRET_KEY = "unit-test-signing-key-for-hs256-tokens-abcdefgh"


class FakeClock:
    """Monotonic clock advanced by hand."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingNotifier:
    """Notifier that keeps every delivery in memory."""

    def __init__(self):
        self.sent: List[Tuple[str, NotificationKind, str]] = []
        self.fail_with: Optional[Exception] = None

    async def send(self, address: str, kind: NotificationKind, code: str) -> None:
        if self.fail_with is not None:
            raise self.fail_with
        self.sent.append((address, kind, code))

    def last_code(self, address: str, kind: NotificationKind) -> Optional[str]:
        for sent_address, sent_kind, code in reversed(self.sent):
            if sent_address == address and sent_kind == kind:
                return code
        return None


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        ENVIRONMENT="test",
        DEBUG=False,
        SECRET_KEY=TEST_SECRET_KEY,
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'accounts.db'}",
        REDIS_URL="redis://localhost:6379/15",
        OTP_EXPIRY_SECONDS=300,
        NOTIFIER_WORKERS=1,
        NOTIFIER_QUEUE_SIZE=100,
    )


@pytest.fixture
def fast_hashing(monkeypatch):
    """Cheap bcrypt cost so flows that hash several times stay fast."""
    monkeypatch.setattr(
        security,
        "pwd_context",
        CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=4),
    )
    security.dummy_password_hash.cache_clear()
    yield
    security.dummy_password_hash.cache_clear()


@pytest_asyncio.fixture
async def test_engine(test_settings) -> AsyncGenerator[AsyncEngine, None]:
    """File-backed SQLite so concurrent sessions use separate connections."""
    engine = create_async_engine(test_settings.DATABASE_URL, echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine) -> async_sessionmaker[AsyncSession]:
    return create_session_factory(test_engine)


@pytest.fixture
def account_repository(session_factory) -> AccountRepository:
    return AccountRepository(session_factory)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def code_store(clock) -> InMemoryCodeStore:
    return InMemoryCodeStore(clock=clock)


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest_asyncio.fixture
async def container(
    test_settings, fast_hashing, account_repository, code_store, notifier
) -> AsyncGenerator[Container, None]:
    container = Container()
    container.wire_services(
        test_settings,
        account_repository=account_repository,
        code_store=code_store,
        notifier=notifier,
    )
    await container.startup()

    yield container

    await container.cleanup()


@pytest.fixture
def auth_service(container) -> AuthenticationService:
    return container.get(AuthenticationService)


@pytest.fixture
def dispatcher(container) -> NotificationDispatcher:
    return container.get(NotificationDispatcher)


@pytest.fixture
def app(test_settings, container):
    return create_app(settings=test_settings, container=container)


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

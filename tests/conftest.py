"""
Pytest fixtures для тестов.

Предоставляет:
- test_db: изолированная SQLite in-memory БД для каждого теста
- test_client: HTTP клиент для тестирования API endpoints
- user / other_user: пользователи для тестов сервисов
- auth_headers / other_auth_headers: Bearer токены двух пользователей для API
"""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from todo_app.api.dependencies import get_db  # ВАЖНО: get_db из dependencies, не из database!
from todo_app.core.config import settings
from todo_app.core.database import session_scope
from todo_app.main import app, limiter
from todo_app.models import Base, User

# Test database URL (SQLite in-memory)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

PASSWORD = "correct horse battery"


@pytest.fixture(autouse=True)
def fast_password_hashing(monkeypatch):
    """bcrypt с минимальной стоимостью: иначе каждый sign-up ~0.3 с."""
    monkeypatch.setattr(settings, "BCRYPT_ROUNDS", 4)


@pytest.fixture(autouse=True)
def reset_rate_limits():
    """Счётчики slowapi общие для процесса; каждый тест начинает с нуля."""
    limiter.reset()
    yield
    limiter.reset()


@pytest_asyncio.fixture
async def test_engine():
    """
    Async engine для тестовой БД (SQLite in-memory).

    StaticPool: одно и то же соединение, иначе in-memory данные теряются.
    Таблицы пересоздаются для каждого теста.
    """
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def test_db(session_factory):
    """
    Async session для тестов репозиториев и сервисов.

    Сервисы делают только flush(), так что всё видно в этой же сессии.
    """
    async with session_factory() as session:
        yield session
        await session.rollback()


async def _make_user(db: AsyncSession, name: str, email: str) -> User:
    user = User(name=name, email=email, password_hash="not-a-real-hash")
    db.add(user)
    await db.flush()
    return user


@pytest_asyncio.fixture
async def user(test_db) -> User:
    return await _make_user(test_db, "Ann", "ann@example.com")


@pytest_asyncio.fixture
async def other_user(test_db) -> User:
    return await _make_user(test_db, "Bob", "bob@example.com")


@pytest_asyncio.fixture
async def test_client(session_factory):
    """
    HTTP клиент для тестирования API endpoints на тестовой БД.

    get_db подменяется на тот же unit of work (session_scope),
    только поверх тестового engine.
    """

    async def override_get_db():
        async with session_scope(session_factory) as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


async def sign_up(client: AsyncClient, name: str, email: str) -> dict[str, str]:
    """Зарегистрировать пользователя через API и вернуть заголовок Authorization."""
    response = await client.post(
        "/api/auth/sign-up/email", json={"name": name, "email": email, "password": PASSWORD}
    )
    assert response.status_code == 200, response.text
    # Cookie из ответа не нужен: тесты явно передают Bearer
    client.cookies.clear()
    return {"Authorization": f"Bearer {response.json()['token']}"}


@pytest_asyncio.fixture
async def auth_headers(test_client) -> dict[str, str]:
    return await sign_up(test_client, "Ann", "ann@example.com")


@pytest_asyncio.fixture
async def other_auth_headers(test_client) -> dict[str, str]:
    return await sign_up(test_client, "Bob", "bob@example.com")

"""
Тесты аутентификации: AuthService и endpoints /api/auth.
"""

from datetime import timedelta

import pytest
from httpx import AsyncClient
from sqlalchemy import update

from todo_app.core.config import settings
from todo_app.core.exceptions import AlreadyExistsError, UnauthorizedError, ValidationError_
from todo_app.models import Session
from todo_app.models.base import utc_now
from todo_app.services import AuthService
from todo_app.services.auth import hash_password, verify_password

PASSWORD = "correct horse battery"


# ============================================================================
# PASSWORD HASHING
# ============================================================================


def test_hash_and_verify_password():
    hashed = hash_password(PASSWORD)

    assert hashed != PASSWORD
    assert verify_password(PASSWORD, hashed)
    assert not verify_password("wrong password", hashed)


def test_long_passwords_differ_after_72_bytes():
    base = "x" * 80
    hashed = hash_password(base + "a")

    assert not verify_password(base + "b", hashed)


def test_verify_password_with_malformed_hash():
    assert verify_password(PASSWORD, "not-a-bcrypt-hash") is False


# ============================================================================
# AUTH SERVICE
# ============================================================================


@pytest.mark.asyncio
async def test_sign_up_opens_session(test_db):
    session = await AuthService(test_db).sign_up("Ann", "Ann@Example.com ", PASSWORD)

    assert session.token
    assert session.user.email == "ann@example.com"
    assert session.user.password_hash != PASSWORD
    assert session.expires_at > utc_now() + timedelta(days=settings.SESSION_TTL_DAYS - 1)


@pytest.mark.asyncio
async def test_sign_up_duplicate_email(test_db):
    auth = AuthService(test_db)
    await auth.sign_up("Ann", "ann@example.com", PASSWORD)

    with pytest.raises(AlreadyExistsError):
        await auth.sign_up("Ann 2", "ANN@example.com", PASSWORD)


@pytest.mark.asyncio
async def test_sign_up_concurrent_duplicate_email(test_db, monkeypatch):
    """Вторая регистрация прошла проверку e-mail раньше, чем первая сохранилась."""
    auth = AuthService(test_db)
    await auth.sign_up("Ann", "ann@example.com", PASSWORD)

    async def not_found_yet(email):
        return None

    monkeypatch.setattr(auth.user_repo, "get_by_email", not_found_yet)

    with pytest.raises(AlreadyExistsError):
        await auth.sign_up("Ann 2", "ann@example.com", PASSWORD)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "name,email,password",
    [
        ("", "ann@example.com", PASSWORD),
        ("Ann", "not-an-email", PASSWORD),
        ("Ann", "@", PASSWORD),
        ("Ann", "ann@", PASSWORD),
        ("Ann", "@example.com", PASSWORD),
        ("Ann", "ann@a@example.com", PASSWORD),
        ("Ann", "ann@example.com", "short"),
    ],
)
async def test_sign_up_validation(test_db, name, email, password):
    with pytest.raises(ValidationError_):
        await AuthService(test_db).sign_up(name, email, password)


@pytest.mark.asyncio
async def test_sign_in(test_db):
    auth = AuthService(test_db)
    first = await auth.sign_up("Ann", "ann@example.com", PASSWORD)

    second = await auth.sign_in("ann@example.com", PASSWORD)

    assert second.token != first.token
    assert second.user.id == first.user.id


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "email,password",
    [("ann@example.com", "wrong password"), ("nobody@example.com", PASSWORD)],
)
async def test_sign_in_rejected(test_db, email, password):
    auth = AuthService(test_db)
    await auth.sign_up("Ann", "ann@example.com", PASSWORD)

    with pytest.raises(UnauthorizedError, match="Invalid email or password"):
        await auth.sign_in(email, password)


@pytest.mark.asyncio
async def test_resolve_session(test_db):
    auth = AuthService(test_db)
    session = await auth.sign_up("Ann", "ann@example.com", PASSWORD)

    resolved = await auth.resolve_session(session.token)

    assert resolved is not None
    assert resolved.user.id == session.user.id
    assert await auth.resolve_session(None) is None
    assert await auth.resolve_session("unknown") is None


@pytest.mark.asyncio
async def test_expired_session_is_rejected(test_db):
    auth = AuthService(test_db)
    session = await auth.sign_up("Ann", "ann@example.com", PASSWORD)
    session.expires_at = utc_now() - timedelta(seconds=1)
    await test_db.flush()

    assert await auth.resolve_session(session.token) is None


@pytest.mark.asyncio
async def test_sign_out(test_db):
    auth = AuthService(test_db)
    session = await auth.sign_up("Ann", "ann@example.com", PASSWORD)

    assert await auth.sign_out(session.token) is True
    assert await auth.resolve_session(session.token) is None
    assert await auth.sign_out(session.token) is False
    assert await auth.sign_out(None) is False


# ============================================================================
# AUTH API
# ============================================================================


async def api_sign_up(client: AsyncClient, email: str = "ann@example.com"):
    return await client.post(
        "/api/auth/sign-up/email", json={"name": "Ann", "email": email, "password": PASSWORD}
    )


@pytest.mark.asyncio
async def test_api_sign_up_sets_cookie(test_client: AsyncClient):
    response = await api_sign_up(test_client)

    assert response.status_code == 200
    data = response.json()
    assert data["token"]
    assert data["user"]["email"] == "ann@example.com"
    assert "createdAt" in data["user"]
    assert "passwordHash" not in data["user"]

    set_cookie = response.headers["set-cookie"]
    assert set_cookie.startswith(f"{settings.SESSION_COOKIE_NAME}={data['token']}")
    assert "HttpOnly" in set_cookie


@pytest.mark.asyncio
async def test_api_cookie_session_authorizes_requests(test_client: AsyncClient):
    await api_sign_up(test_client)

    # No Authorization header: the cookie jar carries the session
    response = await test_client.get("/api/todos")

    assert response.status_code == 200
    assert response.json() == []


@pytest.mark.asyncio
async def test_api_get_session(test_client: AsyncClient):
    token = (await api_sign_up(test_client)).json()["token"]
    test_client.cookies.clear()

    response = await test_client.get(
        "/api/auth/get-session", headers={"Authorization": f"Bearer {token}"}
    )

    assert response.status_code == 200
    data = response.json()
    assert data["user"]["email"] == "ann@example.com"
    assert data["session"]["userId"] == data["user"]["id"]
    assert "expiresAt" in data["session"]


@pytest.mark.asyncio
async def test_api_get_session_without_login_is_null(test_client: AsyncClient):
    response = await test_client.get("/api/auth/get-session")

    assert response.status_code == 200
    assert response.json() is None


@pytest.mark.asyncio
async def test_api_sign_in_and_sign_out(test_client: AsyncClient):
    await api_sign_up(test_client)
    test_client.cookies.clear()

    response = await test_client.post(
        "/api/auth/sign-in/email", json={"email": "ann@example.com", "password": PASSWORD}
    )
    assert response.status_code == 200
    headers = {"Authorization": f"Bearer {response.json()['token']}"}
    test_client.cookies.clear()

    response = await test_client.post("/api/auth/sign-out", headers=headers)
    assert response.status_code == 200
    assert response.json() == {"success": True}

    response = await test_client.get("/api/todos", headers=headers)
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_api_sign_in_wrong_password(test_client: AsyncClient):
    await api_sign_up(test_client)
    test_client.cookies.clear()

    response = await test_client.post(
        "/api/auth/sign-in/email", json={"email": "ann@example.com", "password": "nope nope"}
    )

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "UNAUTHORIZED"


@pytest.mark.asyncio
async def test_api_sign_up_duplicate_email(test_client: AsyncClient):
    await api_sign_up(test_client)

    response = await api_sign_up(test_client)

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "ALREADY_EXISTS"


@pytest.mark.asyncio
async def test_api_expired_session_is_unauthorized(test_client: AsyncClient, session_factory):
    token = (await api_sign_up(test_client)).json()["token"]
    test_client.cookies.clear()

    async with session_factory() as db:
        await db.execute(
            update(Session)
            .where(Session.token == token)
            .values(expires_at=utc_now() - timedelta(minutes=1))
        )
        await db.commit()

    response = await test_client.get("/api/todos", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401
    assert response.json()["error"]["message"] == "Session expired or invalid"

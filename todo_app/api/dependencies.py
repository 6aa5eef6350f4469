"""
Dependencies для FastAPI endpoints.

Цепочка для защищённого endpoint:

    get_db -> get_auth_service -> get_current_user -> endpoint
           -> get_task_service ----------------------^

FastAPI кэширует get_db в пределах запроса, поэтому проверка сессии
и сама операция идут через одну AsyncSession и одну транзакцию.
"""

from collections.abc import AsyncGenerator

from fastapi import Depends, Request
from fastapi.security import APIKeyCookie, HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..core.database import session_scope
from ..core.exceptions import UnauthorizedError
from ..core.logging import user_id_var
from ..models import User
from ..services import AuthService, CategoryService, TaskService

# ============================================================================
# DATABASE SESSION DEPENDENCY
# ============================================================================


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Сессия БД на время запроса.

    Изменяющие endpoints сами вызывают await db.commit() до return:
    выход из yield-зависимости выполняется уже после отправки ответа.
    Здесь остаётся rollback() при любом исключении.
    В тестах подменяется через app.dependency_overrides[get_db].
    """
    async with session_scope() as session:
        yield session


# ============================================================================
# SERVICE DEPENDENCIES
# ============================================================================


async def get_task_service(db: AsyncSession = Depends(get_db)) -> TaskService:
    return TaskService(db)


async def get_category_service(db: AsyncSession = Depends(get_db)) -> CategoryService:
    return CategoryService(db)


async def get_auth_service(db: AsyncSession = Depends(get_db)) -> AuthService:
    return AuthService(db)


# ============================================================================
# SESSION AUTHENTICATION
# ============================================================================

# Браузер присылает http-only cookie, скрипты и тесты - Authorization: Bearer.
# auto_error=False: отсутствие токена обрабатываем сами (единый формат 401).
bearer_scheme = HTTPBearer(auto_error=False, description="Session token")
cookie_scheme = APIKeyCookie(
    name=settings.SESSION_COOKIE_NAME, auto_error=False, description="Session cookie"
)


def get_session_token(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    cookie_token: str | None = Depends(cookie_scheme),
) -> str | None:
    """Токен сессии из заголовка Authorization или из cookie (заголовок важнее)."""
    if credentials and credentials.credentials:
        return credentials.credentials
    return cookie_token


async def get_current_user(
    request: Request,
    token: str | None = Depends(get_session_token),
    auth: AuthService = Depends(get_auth_service),
) -> User:
    """
    Пользователь текущего запроса.

    Raises:
        UnauthorizedError: токена нет, он неизвестен или сессия истекла
    """
    session = await auth.resolve_session(token)
    if session is None:
        if not token:
            raise UnauthorizedError("Authentication required")
        raise UnauthorizedError("Session expired or invalid")

    user_id_var.set(session.user.id)
    request.state.user_id = session.user.id
    return session.user

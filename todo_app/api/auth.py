"""
API endpoints аутентификации (/api/auth).

Вход и регистрация возвращают токен в теле ответа и
выставляют его же http-only cookie. Дальше клиент может
пользоваться любым из двух способов.
"""

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..core.logging import get_logger
from ..models import Session
from ..services import AuthService
from .dependencies import get_auth_service, get_db, get_session_token
from .schemas import (
    AuthResponse,
    ErrorResponse,
    SessionInfo,
    SessionResponse,
    SignInRequest,
    SignOutResponse,
    SignUpRequest,
    UserResponse,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def _set_session_cookie(response: Response, session: Session) -> None:
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=session.token,
        max_age=settings.SESSION_TTL_DAYS * 24 * 60 * 60,
        httponly=True,
        secure=settings.SESSION_COOKIE_SECURE,
        samesite="lax",
        path="/",
    )


def _auth_response(session: Session) -> AuthResponse:
    return AuthResponse(token=session.token, user=UserResponse.model_validate(session.user))


@router.post(
    "/sign-up/email",
    response_model=AuthResponse,
    summary="Регистрация",
    responses={400: {"model": ErrorResponse, "description": "Неверные данные или e-mail занят"}},
)
async def sign_up(
    data: SignUpRequest,
    response: Response,
    auth: AuthService = Depends(get_auth_service),
    db: AsyncSession = Depends(get_db),
) -> AuthResponse:
    """
    ```json
    {"name": "Ann", "email": "ann@example.com", "password": "correct horse"}
    ```
    """
    session = await auth.sign_up(data.name, data.email, data.password)
    await db.commit()
    _set_session_cookie(response, session)
    return _auth_response(session)


@router.post(
    "/sign-in/email",
    response_model=AuthResponse,
    summary="Вход по e-mail и паролю",
    responses={401: {"model": ErrorResponse, "description": "Неверный e-mail или пароль"}},
)
async def sign_in(
    data: SignInRequest,
    response: Response,
    auth: AuthService = Depends(get_auth_service),
    db: AsyncSession = Depends(get_db),
) -> AuthResponse:
    session = await auth.sign_in(data.email, data.password)
    await db.commit()
    _set_session_cookie(response, session)
    return _auth_response(session)


@router.post("/sign-out", response_model=SignOutResponse, summary="Выход")
async def sign_out(
    response: Response,
    token: str | None = Depends(get_session_token),
    auth: AuthService = Depends(get_auth_service),
    db: AsyncSession = Depends(get_db),
) -> SignOutResponse:
    """Удаляет сессию и cookie. Без сессии тоже отвечает 200."""
    removed = await auth.sign_out(token)
    await db.commit()
    response.delete_cookie(key=settings.SESSION_COOKIE_NAME, path="/")
    return SignOutResponse(success=removed)


@router.get("/get-session", response_model=SessionResponse | None, summary="Текущая сессия")
async def get_session(
    token: str | None = Depends(get_session_token),
    auth: AuthService = Depends(get_auth_service),
) -> SessionResponse | None:
    """Сессия и пользователь, либо `null`, если вход не выполнен."""
    session = await auth.resolve_session(token)
    if session is None:
        return None
    return SessionResponse(
        session=SessionInfo.model_validate(session),
        user=UserResponse.model_validate(session.user),
    )

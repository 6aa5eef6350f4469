"""Identity provider: e-mail/password accounts and login sessions."""

import hashlib
import secrets
from datetime import timedelta

import bcrypt
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..core.exceptions import AlreadyExistsError, UnauthorizedError, ValidationError_
from ..core.logging import get_logger
from ..models import Session, User
from ..models.base import utc_now
from ..repositories import SessionRepository, UserRepository

logger = get_logger(__name__)

MIN_PASSWORD_LENGTH = 8


def _prehash(password: str) -> bytes:
    # bcrypt only reads the first 72 bytes; SHA-256 first so long passwords still count.
    return hashlib.sha256(password.encode("utf-8")).digest()


def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(_prehash(password), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(_prehash(password), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed hash in the database
        return False


def generate_session_token() -> str:
    return secrets.token_urlsafe(32)


class AuthService:
    """
    Сервис аутентификации.

    Остальное приложение видит только user.id:
    сервисы задач и категорий получают его из get_current_user().

    Поток:
        sign_up / sign_in -> Session (token) -> cookie или Bearer
        resolve_session(token) -> Session с user или None
        sign_out(token) -> сессия удалена
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.user_repo = UserRepository(db)
        self.session_repo = SessionRepository(db)

    async def sign_up(self, name: str, email: str, password: str) -> Session:
        """
        Зарегистрировать пользователя и сразу открыть сессию.

        Raises:
            ValidationError_: пустое имя или короткий пароль
            AlreadyExistsError: e-mail уже зарегистрирован
        """
        name = name.strip() if name else ""
        email = self._normalize_email(email)

        if not name:
            raise ValidationError_(
                "Name cannot be empty", details=[{"field": "name", "message": "Name is required"}]
            )
        if len(password or "") < MIN_PASSWORD_LENGTH:
            raise ValidationError_(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters",
                details=[{"field": "password", "message": "Password too short"}],
            )
        if await self.user_repo.get_by_email(email):
            raise AlreadyExistsError("User", "email", email)

        try:
            user = await self.user_repo.create(
                User(name=name, email=email, password_hash=hash_password(password))
            )
        except IntegrityError as e:
            # параллельная регистрация успела занять e-mail (UNIQUE users.email)
            raise AlreadyExistsError("User", "email", email) from e
        logger.info("User registered", extra={"user_id": user.id})

        return await self._open_session(user)

    async def sign_in(self, email: str, password: str) -> Session:
        """
        Проверить пароль и открыть новую сессию.

        Raises:
            UnauthorizedError: неизвестный e-mail или неверный пароль
                (ответ одинаковый, чтобы не раскрывать существование аккаунта)
        """
        user = await self.user_repo.get_by_email(self._normalize_email(email))
        if not user or not verify_password(password, user.password_hash):
            logger.warning("Sign-in failed")
            raise UnauthorizedError("Invalid email or password")

        await self.session_repo.delete_expired(user.id)
        return await self._open_session(user)

    async def resolve_session(self, token: str | None) -> Session | None:
        """
        Найти действующую сессию по токену.

        Returns:
            Session (с загруженным user) или None, если токен
            пустой, неизвестный или просрочен
        """
        if not token:
            return None

        session = await self.session_repo.get_by_token(token)
        if not session or session.is_expired():
            return None
        return session

    async def sign_out(self, token: str | None) -> bool:
        """Удалить сессию. Неизвестный токен - не ошибка."""
        if not token:
            return False
        return await self.session_repo.delete_by_token(token)

    async def _open_session(self, user: User) -> Session:
        session = Session(
            token=generate_session_token(),
            user_id=user.id,
            expires_at=utc_now() + timedelta(days=settings.SESSION_TTL_DAYS),
        )
        session = await self.session_repo.create(session)
        session.user = user
        return session

    @staticmethod
    def _normalize_email(email: str | None) -> str:
        email = (email or "").strip().lower()
        local, _, domain = email.partition("@")
        if not local or not domain or "@" in domain:
            raise ValidationError_(
                "Invalid email", details=[{"field": "email", "message": "Invalid email"}]
            )
        return email

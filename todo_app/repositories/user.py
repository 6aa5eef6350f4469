"""Repositories for identity data (users and sessions)."""

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..models import Session, User
from ..models.base import utc_now
from .base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Репозиторий пользователей."""

    def __init__(self, db: AsyncSession):
        super().__init__(User, db)

    async def get_by_email(self, email: str) -> User | None:
        """
        SQL эквивалент:
            SELECT * FROM users WHERE email = {email};
        """
        result = await self.db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()


class SessionRepository(BaseRepository[Session]):
    """Репозиторий сессий входа."""

    def __init__(self, db: AsyncSession):
        super().__init__(Session, db)

    async def get_by_token(self, token: str) -> Session | None:
        """Сессия по токену вместе с пользователем (eager loading)."""
        result = await self.db.execute(
            select(Session).options(selectinload(Session.user)).where(Session.token == token)
        )
        return result.scalar_one_or_none()

    async def delete_by_token(self, token: str) -> bool:
        result = await self.db.execute(delete(Session).where(Session.token == token))
        return result.rowcount > 0

    async def delete_expired(self, user_id: str) -> int:
        """
        Удалить просроченные сессии пользователя.

        SQL эквивалент:
            DELETE FROM sessions WHERE user_id = {user_id} AND expires_at <= now();
        """
        result = await self.db.execute(
            delete(Session).where(Session.user_id == user_id, Session.expires_at <= utc_now())
        )
        return result.rowcount

"""Base repositories with common CRUD operations."""

from typing import Any, Generic, TypeVar

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.base import Base, id_in_range

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Базовый репозиторий с CRUD операциями.

    Generic[ModelType] - работает с любой моделью, наследующейся от Base.

    Репозиторий никогда не делает commit: только flush().
    Commit/rollback - ответственность unit of work (session_scope / get_db).
    """

    def __init__(self, model: type[ModelType], db: AsyncSession):
        self.model = model
        self.db = db

    async def create(self, obj: ModelType) -> ModelType:
        """
        Сохранить новый объект.

        flush() отправляет INSERT в рамках текущей транзакции,
        refresh() подтягивает id и значения по умолчанию из БД.
        """
        self.db.add(obj)
        await self.db.flush()
        await self.db.refresh(obj)
        return obj

    async def get_by_id(self, id: Any) -> ModelType | None:
        """
        SQL эквивалент:
            SELECT * FROM table WHERE id = {id};
        """
        result = await self.db.execute(select(self.model).where(self.model.id == id))
        return result.scalar_one_or_none()


class OwnedRepository(BaseRepository[ModelType]):
    """
    Репозиторий для записей, принадлежащих пользователю (колонка owner_id).

    Все выборки и изменения фильтруются по owner_id:
    чужая запись для вызывающего просто "не существует".
    """

    async def get_owned(self, id: int, owner_id: str) -> ModelType | None:
        """
        SQL эквивалент:
            SELECT * FROM table WHERE id = {id} AND owner_id = {owner_id};
        """
        if not id_in_range(id):
            return None

        result = await self.db.execute(
            select(self.model).where(self.model.id == id, self.model.owner_id == owner_id)
        )
        return result.scalar_one_or_none()

    async def list_owned(self, owner_id: str) -> list[ModelType]:
        """
        Все записи пользователя, новые сверху.

        SQL эквивалент:
            SELECT * FROM table
            WHERE owner_id = {owner_id}
            ORDER BY created_at DESC, id DESC;
        """
        result = await self.db.execute(
            select(self.model)
            .where(self.model.owner_id == owner_id)
            .order_by(self.model.created_at.desc(), self.model.id.desc())
        )
        return list(result.scalars().all())

    async def update(self, obj: ModelType, **kwargs: Any) -> ModelType:
        """
        Применить изменения к уже загруженному (и проверенному) объекту.

        Пример:
            category = await repo.get_owned(1, user_id)
            await repo.update(category, name="Work", color="#FF0000")
        """
        for key, value in kwargs.items():
            if hasattr(obj, key):
                setattr(obj, key, value)

        await self.db.flush()
        await self.db.refresh(obj)
        return obj

    async def delete_owned(self, id: int, owner_id: str) -> bool:
        """
        SQL эквивалент:
            DELETE FROM table WHERE id = {id} AND owner_id = {owner_id};
        """
        if not id_in_range(id):
            return False

        result = await self.db.execute(
            delete(self.model).where(self.model.id == id, self.model.owner_id == owner_id)
        )
        return result.rowcount > 0

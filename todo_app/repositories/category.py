"""Category repository with specific queries."""

from collections.abc import Collection

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import Category, Task, id_in_range, task_categories
from .base import OwnedRepository


class CategoryRepository(OwnedRepository[Category]):
    """Репозиторий для работы с категориями пользователя."""

    def __init__(self, db: AsyncSession):
        super().__init__(Category, db)

    async def get_owned_many(self, ids: Collection[int], owner_id: str) -> list[Category]:
        """
        Категории пользователя из списка ids (чужие, несуществующие
        и вне диапазона INTEGER отбрасываются).

        SQL эквивалент:
            SELECT * FROM categories
            WHERE id IN ({ids}) AND owner_id = {owner_id}
            ORDER BY id;
        """
        ids = [i for i in ids if id_in_range(i)]
        if not ids:
            return []

        result = await self.db.execute(
            select(Category)
            .where(Category.id.in_(ids), Category.owner_id == owner_id)
            .order_by(Category.id)
        )
        return list(result.scalars().all())

    async def delete_links_for_owner(self, category_id: int, owner_id: str) -> int:
        """
        Отвязать категорию от задач пользователя.

        Удаление ограничено задачами owner_id (JOIN через владельца задачи),
        связи на задачи других пользователей не трогаются.

        SQL эквивалент:
            DELETE FROM task_categories
            WHERE category_id = {category_id}
              AND task_id IN (SELECT id FROM tasks WHERE owner_id = {owner_id});
        """
        owned_task_ids = select(Task.id).where(Task.owner_id == owner_id)
        result = await self.db.execute(
            delete(task_categories).where(
                task_categories.c.category_id == category_id,
                task_categories.c.task_id.in_(owned_task_ids),
            )
        )
        return result.rowcount

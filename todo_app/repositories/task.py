"""Task repository with specific queries."""

from collections.abc import Iterable

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..models import Category, Task, id_in_range, task_categories
from .base import OwnedRepository


class TaskRepository(OwnedRepository[Task]):
    """
    Репозиторий для работы с задачами.

    Включает методы для:
    - Загрузки задач вместе с категориями (eager loading)
    - Замены и очистки связей task_categories
    """

    def __init__(self, db: AsyncSession):
        super().__init__(Task, db)

    async def get_owned_full(self, task_id: int, owner_id: str) -> Task | None:
        """
        Получить задачу пользователя вместе с категориями.

        populate_existing=True: если задача уже лежит в identity map сессии,
        коллекция categories всё равно перечитывается из БД
        (связи могли быть изменены bulk-запросом в этой же транзакции).

        Использование:
            task = await repo.get_owned_full(1, user_id)
            print([c.name for c in task.categories])  # без lazy load
        """
        if not id_in_range(task_id):
            return None

        result = await self.db.execute(
            select(Task)
            .options(selectinload(Task.categories))
            .where(Task.id == task_id, Task.owner_id == owner_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def list_with_categories(self, owner_id: str) -> list[Task]:
        """
        Все задачи пользователя с категориями, новые сверху.

        selectinload делает ровно 2 запроса вместо N+1:
            SELECT * FROM tasks WHERE owner_id = ? ORDER BY created_at DESC, id DESC;
            SELECT ... FROM categories JOIN task_categories ... WHERE task_id IN (...);
        """
        result = await self.db.execute(
            select(Task)
            .options(selectinload(Task.categories))
            .where(Task.owner_id == owner_id)
            .order_by(Task.created_at.desc(), Task.id.desc())
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def replace_categories(self, task: Task, categories: Iterable[Category]) -> Task:
        """
        Полностью заменить набор категорий задачи.

        Задача должна быть загружена с categories (get_owned_full).
        SQLAlchemy сам посчитает разницу и выполнит
        DELETE/INSERT в task_categories при flush().
        """
        task.categories = list(categories)
        await self.db.flush()
        return task

    async def delete_links(self, task_id: int) -> int:
        """
        Удалить все связи задачи с категориями.

        SQL эквивалент:
            DELETE FROM task_categories WHERE task_id = {task_id};

        Returns:
            Количество удалённых связей
        """
        result = await self.db.execute(
            delete(task_categories).where(task_categories.c.task_id == task_id)
        )
        return result.rowcount

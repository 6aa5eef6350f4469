"""Task service with business logic."""

from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import NotFoundError, ValidationError_
from ..core.logging import get_logger
from ..models import Category, Task
from ..models.base import utc_now
from ..repositories import CategoryRepository, TaskRepository
from .patch import TaskPatch, is_set

logger = get_logger(__name__)


class TaskService:
    """
    Сервис для работы с задачами.

    Все операции выполняются от имени пользователя owner_id:
    - видны и изменяемы только его задачи
    - привязать можно только его категории
    - "чужая" и "несуществующая" задача неразличимы (NotFoundError)

    Сервис делает только flush(). Commit/rollback выполняет unit of work
    (get_db / session_scope), поэтому многошаговые изменения
    (создание со связями, замена связей, удаление со связями) атомарны.
    """

    def __init__(self, db: AsyncSession):
        """Инициализация сервиса с несколькими репозиториями."""
        self.db = db
        self.task_repo = TaskRepository(db)
        self.category_repo = CategoryRepository(db)

    async def list_tasks(self, owner_id: str) -> list[Task]:
        """
        Все задачи пользователя с категориями, новые сверху.

        Без пагинации.
        """
        return await self.task_repo.list_with_categories(owner_id)

    async def get_task(self, owner_id: str, task_id: int) -> Task:
        """
        Задача пользователя с категориями.

        Raises:
            NotFoundError: задачи нет или она чужая
        """
        task = await self.task_repo.get_owned_full(task_id, owner_id)
        if not task:
            raise NotFoundError("Task", task_id)
        return task

    async def create_task(
        self,
        owner_id: str,
        title: str,
        description: str | None = None,
        category_ids: list[int] | None = None,
    ) -> Task:
        """
        Создать задачу и привязать категории.

        Args:
            owner_id: ID пользователя-владельца
            title: Название (обязательно)
            description: Описание
            category_ids: ID категорий пользователя

        Returns:
            Созданная задача со всеми привязанными категориями

        Raises:
            ValidationError_: пустое название или чужие/несуществующие категории

        Бизнес-правила:
        1. Название не пустое после trim
        2. Все категории принадлежат owner_id (проверяется ДО вставки)
        3. Новая задача всегда completed=False
        """
        # 1. ВАЛИДАЦИЯ: Название
        title = self._clean_title(title)

        # 2. ВАЛИДАЦИЯ: Категории
        categories = await self._resolve_categories(owner_id, category_ids or [])

        # 3. СОЗДАНИЕ: задача и связи вставляются одним flush()
        task = Task(
            title=title,
            description=(description or "").strip() or None,
            completed=False,
            owner_id=owner_id,
            categories=categories,
        )
        task = await self.task_repo.create(task)

        return await self.get_task(owner_id, task.id)

    async def update_task(self, owner_id: str, task_id: int, patch: TaskPatch) -> Task:
        """
        Частичное обновление задачи.

        Args:
            owner_id: ID пользователя
            task_id: ID задачи
            patch: Изменения; UNSET-поля не трогаются

        Бизнес-правила:
        1. title, если передан, не пустой
        2. description=None очищает описание
        3. category_ids передан (даже []) - набор связей заменяется целиком;
           не передан - связи остаются как есть
        4. updated_at обновляется при любом успешном обновлении
        """
        # 1. ПРОВЕРКА: Задача существует и принадлежит пользователю
        task = await self.get_task(owner_id, task_id)

        # 2. ВАЛИДАЦИЯ + сбор изменений колонок
        changes = patch.column_changes()
        if "title" in changes:
            changes["title"] = self._clean_title(changes["title"])
        if "description" in changes and changes["description"] is not None:
            changes["description"] = changes["description"].strip() or None
        if "completed" in changes and not isinstance(changes["completed"], bool):
            raise ValidationError_(
                "completed must be true or false",
                details=[{"field": "completed", "message": "Expected a boolean"}],
            )

        categories: list[Category] | None = None
        if is_set(patch.category_ids):
            categories = await self._resolve_categories(owner_id, patch.category_ids)

        # 3. ПРИМЕНЕНИЕ
        for key, value in changes.items():
            setattr(task, key, value)
        task.updated_at = utc_now()

        if categories is not None:
            await self.task_repo.replace_categories(task, categories)
        else:
            await self.db.flush()

        return await self.get_task(owner_id, task_id)

    async def delete_task(self, owner_id: str, task_id: int) -> None:
        """
        Удалить задачу вместе со связями.

        Порядок:
        1. Проверить владельца (иначе NotFoundError, связи не трогаются)
        2. Удалить связи task_categories
        3. Удалить задачу
        """
        task = await self.task_repo.get_owned(task_id, owner_id)
        if not task:
            raise NotFoundError("Task", task_id)

        links = await self.task_repo.delete_links(task_id)
        deleted = await self.task_repo.delete_owned(task_id, owner_id)
        if not deleted:
            # Удалена параллельным запросом между проверкой и DELETE
            raise NotFoundError("Task", task_id)

        logger.info("Task deleted", extra={"task_id": task_id, "links_removed": links})

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _clean_title(title: str | None) -> str:
        if not title or not title.strip():
            raise ValidationError_(
                "Task title cannot be empty",
                details=[{"field": "title", "message": "Title is required"}],
            )
        return title.strip()

    async def _resolve_categories(self, owner_id: str, category_ids: list[int]) -> list[Category]:
        """
        Загрузить категории пользователя по списку ID.

        Дубликаты схлопываются. Если хотя бы одна категория не найдена
        среди категорий owner_id - ValidationError_ (чужие и несуществующие
        не различаются).
        """
        wanted = list(dict.fromkeys(category_ids))
        if not wanted:
            return []

        categories = await self.category_repo.get_owned_many(wanted, owner_id)
        found = {c.id for c in categories}
        missing = [cid for cid in wanted if cid not in found]
        if missing:
            raise ValidationError_(
                f"Unknown category ids: {missing}",
                details=[{"field": "categoryIds", "message": f"Unknown category ids: {missing}"}],
            )

        by_id = {c.id: c for c in categories}
        return [by_id[cid] for cid in wanted]

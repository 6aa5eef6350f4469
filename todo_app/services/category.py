"""Category service with business logic."""

import re

from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import NotFoundError, ValidationError_
from ..core.logging import get_logger
from ..models import DEFAULT_CATEGORY_COLOR, Category
from ..models.base import utc_now
from ..repositories import CategoryRepository
from .patch import CategoryPatch

logger = get_logger(__name__)

COLOR_PATTERN = re.compile(r"^#[0-9A-Fa-f]{6}$")


class CategoryService:
    """
    Сервис для работы с категориями.

    Категории принадлежат пользователю. Имена не уникальны
    (даже в пределах одного пользователя).
    """

    def __init__(self, db: AsyncSession):
        """Инициализация сервиса."""
        self.db = db
        self.category_repo = CategoryRepository(db)

    async def list_categories(self, owner_id: str) -> list[Category]:
        """Все категории пользователя, новые сверху."""
        return await self.category_repo.list_owned(owner_id)

    async def get_category(self, owner_id: str, category_id: int) -> Category:
        """
        Raises:
            NotFoundError: категории нет или она чужая
        """
        category = await self.category_repo.get_owned(category_id, owner_id)
        if not category:
            raise NotFoundError("Category", category_id)
        return category

    async def create_category(
        self, owner_id: str, name: str, color: str | None = None
    ) -> Category:
        """
        Создать категорию.

        Args:
            owner_id: ID пользователя
            name: Название (обязательно)
            color: Цвет #RRGGBB, по умолчанию #3b82f6

        Бизнес-правила:
        1. Название не пустое после trim
        2. Цвет в формате #RRGGBB
        """
        name = self._clean_name(name)
        color = self._clean_color(color) if color is not None else DEFAULT_CATEGORY_COLOR

        category = Category(name=name, color=color, owner_id=owner_id)
        return await self.category_repo.create(category)

    async def update_category(
        self, owner_id: str, category_id: int, patch: CategoryPatch
    ) -> Category:
        """
        Частичное обновление категории (name и/или color).

        Raises:
            NotFoundError: категории нет или она чужая
            ValidationError_: пустое имя или неверный цвет
        """
        category = await self.get_category(owner_id, category_id)

        changes = patch.column_changes()
        if "name" in changes:
            changes["name"] = self._clean_name(changes["name"])
        if "color" in changes:
            changes["color"] = self._clean_color(changes["color"])

        return await self.category_repo.update(category, **changes, updated_at=utc_now())

    async def delete_category(self, owner_id: str, category_id: int) -> None:
        """
        Удалить категорию.

        Порядок:
        1. Проверить владельца (иначе NotFoundError, ничего не удаляется)
        2. Отвязать категорию от задач ЭТОГО пользователя
        3. Удалить категорию (оставшиеся связи снимет ON DELETE CASCADE)
        """
        await self.get_category(owner_id, category_id)

        links = await self.category_repo.delete_links_for_owner(category_id, owner_id)
        deleted = await self.category_repo.delete_owned(category_id, owner_id)
        if not deleted:
            raise NotFoundError("Category", category_id)

        logger.info(
            "Category deleted", extra={"category_id": category_id, "links_removed": links}
        )

    @staticmethod
    def _clean_name(name: str | None) -> str:
        if not name or not name.strip():
            raise ValidationError_(
                "Category name cannot be empty",
                details=[{"field": "name", "message": "Name is required"}],
            )
        return name.strip()

    @staticmethod
    def _clean_color(color: str | None) -> str:
        if not color or not COLOR_PATTERN.match(color):
            raise ValidationError_(
                f"Invalid color format: {color!r}. Use #RRGGBB",
                details=[{"field": "color", "message": "Expected #RRGGBB"}],
            )
        return color

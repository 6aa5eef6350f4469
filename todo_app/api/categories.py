"""API endpoints для категорий пользователя."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import User
from ..services import CategoryService
from .dependencies import get_category_service, get_current_user, get_db
from .schemas import (
    CategoryCreate,
    CategoryResponse,
    CategoryUpdate,
    ErrorResponse,
    MessageResponse,
)

router = APIRouter(prefix="/categories", tags=["categories"])


@router.get("", response_model=list[CategoryResponse], summary="Список категорий")
async def list_categories(
    user: User = Depends(get_current_user),
    service: CategoryService = Depends(get_category_service),
) -> list[CategoryResponse]:
    categories = await service.list_categories(user.id)
    return [CategoryResponse.model_validate(c) for c in categories]


@router.post(
    "",
    response_model=CategoryResponse,
    summary="Создать категорию",
    responses={400: {"model": ErrorResponse, "description": "Пустое имя или неверный цвет"}},
)
async def create_category(
    data: CategoryCreate,
    user: User = Depends(get_current_user),
    service: CategoryService = Depends(get_category_service),
    db: AsyncSession = Depends(get_db),
) -> CategoryResponse:
    """
    Создать категорию.

    ```json
    {"name": "Work", "color": "#ff0000"}
    ```

    Без `color` используется #3b82f6.
    """
    category = await service.create_category(user.id, data.name, data.color)
    await db.commit()
    return CategoryResponse.model_validate(category)


@router.put(
    "/{category_id}",
    response_model=CategoryResponse,
    summary="Обновить категорию",
    responses={
        400: {"model": ErrorResponse, "description": "Ошибка валидации"},
        404: {"model": ErrorResponse, "description": "Категория не найдена"},
    },
)
async def update_category(
    category_id: int,
    data: CategoryUpdate,
    user: User = Depends(get_current_user),
    service: CategoryService = Depends(get_category_service),
    db: AsyncSession = Depends(get_db),
) -> CategoryResponse:
    category = await service.update_category(user.id, category_id, data.to_patch())
    await db.commit()
    return CategoryResponse.model_validate(category)


@router.delete(
    "/{category_id}",
    response_model=MessageResponse,
    summary="Удалить категорию",
    responses={404: {"model": ErrorResponse, "description": "Категория не найдена"}},
)
async def delete_category(
    category_id: int,
    user: User = Depends(get_current_user),
    service: CategoryService = Depends(get_category_service),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    """
    Удалить категорию.

    Категория снимается со всех задач пользователя, сами задачи остаются.
    """
    await service.delete_category(user.id, category_id)
    await db.commit()
    return MessageResponse(message="Category deleted successfully")

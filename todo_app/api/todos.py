"""
API endpoints для задач (todos).

Все endpoints работают только с задачами текущего пользователя.
Чужая задача для клиента выглядит как несуществующая (404).
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import User
from ..services import TaskService
from .dependencies import get_current_user, get_db, get_task_service
from .schemas import ErrorResponse, MessageResponse, TaskCreate, TaskResponse, TaskUpdate

router = APIRouter(prefix="/todos", tags=["todos"])


@router.get("", response_model=list[TaskResponse], summary="Список задач")
async def list_todos(
    user: User = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
) -> list[TaskResponse]:
    """
    Все задачи пользователя с категориями, новые сверху.

    ```
    GET /api/todos
    ```
    """
    tasks = await service.list_tasks(user.id)
    return [TaskResponse.model_validate(t) for t in tasks]


@router.post(
    "",
    response_model=TaskResponse,
    summary="Создать задачу",
    responses={400: {"model": ErrorResponse, "description": "Пустое название или чужие категории"}},
)
async def create_todo(
    data: TaskCreate,
    user: User = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
    db: AsyncSession = Depends(get_db),
) -> TaskResponse:
    """
    Создать задачу и привязать категории.

    ```json
    {"title": "Buy milk", "description": "2 liters", "categoryIds": [1, 3]}
    ```

    Новая задача всегда `completed: false`.
    """
    task = await service.create_task(
        owner_id=user.id,
        title=data.title,
        description=data.description,
        category_ids=data.category_ids,
    )
    await db.commit()
    return TaskResponse.model_validate(task)


@router.put(
    "/{todo_id}",
    response_model=TaskResponse,
    summary="Обновить задачу",
    responses={
        400: {"model": ErrorResponse, "description": "Ошибка валидации"},
        404: {"model": ErrorResponse, "description": "Задача не найдена"},
    },
)
async def update_todo(
    todo_id: int,
    data: TaskUpdate,
    user: User = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
    db: AsyncSession = Depends(get_db),
) -> TaskResponse:
    """
    Частичное обновление.

    - `{"completed": true}` - переключить статус
    - `{"categoryIds": []}` - снять все категории
    - без `categoryIds` - категории не меняются
    """
    task = await service.update_task(user.id, todo_id, data.to_patch())
    await db.commit()
    return TaskResponse.model_validate(task)


@router.delete(
    "/{todo_id}",
    response_model=MessageResponse,
    summary="Удалить задачу",
    responses={404: {"model": ErrorResponse, "description": "Задача не найдена"}},
)
async def delete_todo(
    todo_id: int,
    user: User = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    await service.delete_task(user.id, todo_id)
    await db.commit()
    return MessageResponse(message="Todo deleted successfully")

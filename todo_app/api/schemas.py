"""
Pydantic схемы для API.

DTOs (Data Transfer Objects) - объекты для передачи данных через HTTP.

JSON использует camelCase (categoryIds, createdAt, userId),
Python-код - snake_case. Преобразование делает alias_generator.
"""

from datetime import datetime
from typing import Annotated

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from ..models import DEFAULT_CATEGORY_COLOR, MAX_ID
from ..services.patch import CategoryPatch, TaskPatch

COLOR_PATTERN = r"^#[0-9A-Fa-f]{6}$"

# Принимаем owner_id (ORM-атрибут) и userId (наш же JSON при повторной валидации)
OWNER_ALIAS = AliasChoices("owner_id", "userId")

# ID категории в теле запроса: вне диапазона INTEGER - сразу 400
CategoryId = Annotated[int, Field(ge=1, le=MAX_ID)]


class CamelModel(BaseModel):
    """Base schema: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ============================================================================
# CATEGORY SCHEMAS
# ============================================================================


class CategoryCreate(CamelModel):
    """
    Схема для создания категории (POST /api/categories).

    Пример запроса:
    {
        "name": "Work",
        "color": "#ff0000"
    }
    """

    name: str = Field(..., min_length=1, max_length=100, description="Название категории")
    color: str = Field(
        default=DEFAULT_CATEGORY_COLOR, pattern=COLOR_PATTERN, description="Цвет #RRGGBB"
    )


class CategoryUpdate(CamelModel):
    """
    Схема для обновления категории (PUT /api/categories/{id}).

    Все поля опциональные. Непереданное поле не меняется.
    """

    name: str | None = Field(None, min_length=1, max_length=100)
    color: str | None = Field(None, pattern=COLOR_PATTERN)

    @field_validator("name", "color")
    @classmethod
    def reject_null(cls, value):
        # null is not a "clear" for these columns
        if value is None:
            raise ValueError("may be omitted but not null")
        return value

    def to_patch(self) -> CategoryPatch:
        return CategoryPatch(**{name: getattr(self, name) for name in self.model_fields_set})


class CategoryBrief(CamelModel):
    """Категория внутри задачи: только то, что нужно для отображения."""

    id: int
    name: str
    color: str

    model_config = ConfigDict(from_attributes=True)


class CategoryResponse(CategoryBrief):
    """
    Пример ответа:
    {
        "id": 1,
        "name": "Work",
        "color": "#ff0000",
        "userId": "9a1e...",
        "createdAt": "2026-10-18T12:00:00",
        "updatedAt": "2026-10-18T12:00:00"
    }
    """

    owner_id: str = Field(validation_alias=OWNER_ALIAS, serialization_alias="userId")
    created_at: datetime
    updated_at: datetime


# ============================================================================
# TASK SCHEMAS
# ============================================================================


class TaskCreate(CamelModel):
    """
    Схема для создания задачи (POST /api/todos).

    Пример запроса:
    {
        "title": "Buy milk",
        "description": "2 liters",
        "categoryIds": [1, 3]
    }
    """

    title: str = Field(..., min_length=1, max_length=300, description="Название задачи")
    description: str | None = Field(None, description="Описание задачи")
    category_ids: list[CategoryId] | None = Field(None, description="ID категорий пользователя")


class TaskUpdate(CamelModel):
    """
    Схема для обновления задачи (PUT /api/todos/{id}).

    Частичное обновление: различаем "поле не передано" и "поле = null"
    через model_fields_set.

    - {"completed": true}      -> меняется только completed
    - {"description": null}    -> описание очищается
    - {"categoryIds": []}      -> все категории сняты
    - {}                       -> меняется только updatedAt
    """

    title: str | None = Field(None, min_length=1, max_length=300)
    description: str | None = None
    completed: bool | None = None
    category_ids: list[CategoryId] | None = None

    @field_validator("title", "completed", "category_ids")
    @classmethod
    def reject_null(cls, value):
        # only description is nullable
        if value is None:
            raise ValueError("may be omitted but not null")
        return value

    def to_patch(self) -> TaskPatch:
        return TaskPatch(**{name: getattr(self, name) for name in self.model_fields_set})


class TaskResponse(CamelModel):
    """
    Задача с категориями.

    Пример ответа:
    {
        "id": 1,
        "title": "Buy milk",
        "description": null,
        "completed": false,
        "userId": "9a1e...",
        "createdAt": "2026-10-18T12:00:00",
        "updatedAt": "2026-10-18T12:00:00",
        "categories": [{"id": 1, "name": "Work", "color": "#ff0000"}]
    }
    """

    id: int
    title: str
    description: str | None
    completed: bool
    owner_id: str = Field(validation_alias=OWNER_ALIAS, serialization_alias="userId")
    created_at: datetime
    updated_at: datetime
    categories: list[CategoryBrief] = []

    model_config = ConfigDict(from_attributes=True)


# ============================================================================
# AUTH SCHEMAS
# ============================================================================


class SignUpRequest(CamelModel):
    """POST /api/auth/sign-up/email"""

    name: str = Field(..., min_length=1, max_length=200)
    email: str = Field(..., min_length=3, max_length=320)
    password: str = Field(..., min_length=1, max_length=200)


class SignInRequest(CamelModel):
    """POST /api/auth/sign-in/email"""

    email: str = Field(..., min_length=3, max_length=320)
    password: str = Field(..., min_length=1, max_length=200)


class UserResponse(CamelModel):
    id: str
    name: str
    email: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class SessionInfo(CamelModel):
    user_id: str
    expires_at: datetime
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AuthResponse(CamelModel):
    """Ответ на вход/регистрацию. token также выставляется в cookie."""

    token: str
    user: UserResponse


class SessionResponse(CamelModel):
    """Ответ GET /api/auth/get-session (null, если сессии нет)."""

    session: SessionInfo
    user: UserResponse


class SignOutResponse(CamelModel):
    success: bool


# ============================================================================
# COMMON SCHEMAS
# ============================================================================


class MessageResponse(BaseModel):
    """
    Успешная операция без данных.

    Пример:
    {
        "message": "Todo deleted successfully"
    }
    """

    message: str


class ErrorDetail(BaseModel):
    """
    Ошибка конкретного поля.

    {"field": "title", "message": "Title is required"}
    """

    field: str = Field(..., description="Название поля с ошибкой")
    message: str = Field(..., description="Описание ошибки")


class ErrorBody(BaseModel):
    """
    Тело ошибки с кодом и деталями.

    Коды:
    - VALIDATION_ERROR: ошибка валидации (400)
    - UNAUTHORIZED: нет или истекла сессия (401)
    - NOT_FOUND: запись не найдена или чужая (404)
    - ALREADY_EXISTS: значение уже занято (400)
    - RATE_LIMIT_EXCEEDED: слишком много запросов (429)
    - INTERNAL_ERROR: внутренняя ошибка (500)
    """

    code: str = Field(..., description="Код ошибки")
    message: str = Field(..., description="Человекочитаемое сообщение")
    details: list[ErrorDetail] | None = Field(default=None, description="Ошибки по полям")


class ErrorResponse(BaseModel):
    """
    Единый формат ответа для всех ошибок API.

    {
        "error": {
            "code": "NOT_FOUND",
            "message": "Task with id=999 not found",
            "details": null
        }
    }
    """

    error: ErrorBody

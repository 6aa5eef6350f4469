"""SQLAlchemy models for the to-do API."""

from .base import MAX_ID, Base, TimestampMixin, id_in_range
from .category import DEFAULT_CATEGORY_COLOR, Category
from .task import Task
from .task_category import task_categories
from .user import Session, User

__all__ = [
    "Base",
    "TimestampMixin",
    "MAX_ID",
    "id_in_range",
    "User",
    "Session",
    "Task",
    "Category",
    "DEFAULT_CATEGORY_COLOR",
    "task_categories",
]

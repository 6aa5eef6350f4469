"""Service layer with business logic."""

from .auth import AuthService
from .category import CategoryService
from .patch import UNSET, CategoryPatch, TaskPatch
from .task import TaskService

__all__ = [
    "AuthService",
    "TaskService",
    "CategoryService",
    "TaskPatch",
    "CategoryPatch",
    "UNSET",
]

"""Repository layer for data access."""

from .base import BaseRepository, OwnedRepository
from .category import CategoryRepository
from .task import TaskRepository
from .user import SessionRepository, UserRepository

__all__ = [
    "BaseRepository",
    "OwnedRepository",
    "TaskRepository",
    "CategoryRepository",
    "UserRepository",
    "SessionRepository",
]

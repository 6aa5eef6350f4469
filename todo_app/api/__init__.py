"""API layer - FastAPI endpoints."""

from .auth import router as auth_router
from .categories import router as categories_router
from .todos import router as todos_router

__all__ = [
    "auth_router",
    "todos_router",
    "categories_router",
]

"""Python client for the to-do API with an optimistic, self-reconciling cache."""

from .api import ApiError, TodoApiClient
from .cache import QueryCache
from .grouping import CategoryGroup, group_by_category
from .store import TodoStore

__all__ = [
    "ApiError",
    "TodoApiClient",
    "QueryCache",
    "TodoStore",
    "CategoryGroup",
    "group_by_category",
]

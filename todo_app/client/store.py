"""
Dashboard state: todos and categories with optimistic updates.

    store = TodoStore(api)
    await store.todos()                 # fetch
    await store.toggle_todo(3, True)    # list updated at once, then re-fetched
"""

import itertools
from datetime import UTC, datetime
from typing import Any

from .api import TodoApiClient
from .cache import QueryCache
from .grouping import UNCATEGORIZED_COLOR, CategoryGroup, group_by_category

TODOS = "todos"
CATEGORIES = "categories"


def _now() -> str:
    return datetime.now(UTC).isoformat()


class TodoStore:
    def __init__(self, api: TodoApiClient, cache: QueryCache | None = None, user_id: str = ""):
        self.api = api
        self.cache = cache or QueryCache()
        self.user_id = user_id
        # Placeholder ids are negative so they never collide with server ids
        self._temp_ids = itertools.count(-1, -1)

        self.cache.register(TODOS, api.list_todos)
        self.cache.register(CATEGORIES, api.list_categories)

    async def todos(self) -> list[dict]:
        return await self.cache.get(TODOS)

    async def categories(self) -> list[dict]:
        return await self.cache.get(CATEGORIES)

    async def grouped(self) -> list[CategoryGroup]:
        return group_by_category(await self.todos(), await self.categories())

    # ------------------------------------------------------------------
    # todos (optimistic)
    # ------------------------------------------------------------------

    async def add_todo(
        self,
        title: str,
        description: str | None = None,
        category_ids: list[int] | None = None,
    ) -> dict:
        """Prepend a placeholder task, then create it on the server."""
        known = {c["id"]: c for c in self.cache.peek(CATEGORIES) or []}
        now = _now()
        placeholder: dict[str, Any] = {
            "id": next(self._temp_ids),
            "title": title,
            "description": description or None,
            "completed": False,
            "userId": self.user_id,
            "createdAt": now,
            "updatedAt": now,
            "categories": [
                {"id": cid, "name": known[cid]["name"], "color": known[cid]["color"]}
                if cid in known
                else {"id": cid, "name": "Unknown", "color": UNCATEGORIZED_COLOR}
                for cid in category_ids or []
            ],
        }

        return await self.cache.mutate(
            TODOS,
            lambda current: [placeholder, *(current or [])],
            lambda: self.api.create_todo(title, description or None, category_ids or None),
        )

    async def toggle_todo(self, todo_id: int, completed: bool) -> dict:
        def apply(current):
            return [
                {**t, "completed": completed, "updatedAt": _now()} if t["id"] == todo_id else t
                for t in current or []
            ]

        return await self.cache.mutate(
            TODOS, apply, lambda: self.api.update_todo(todo_id, completed=completed)
        )

    async def delete_todo(self, todo_id: int) -> dict:
        return await self.cache.mutate(
            TODOS,
            lambda current: [t for t in current or [] if t["id"] != todo_id],
            lambda: self.api.delete_todo(todo_id),
        )

    # ------------------------------------------------------------------
    # categories (server first, then re-fetch)
    # ------------------------------------------------------------------

    async def create_category(self, name: str, color: str | None = None) -> dict:
        return await self.cache.mutate(
            CATEGORIES, None, lambda: self.api.create_category(name, color)
        )

    async def update_category(self, category_id: int, **fields: Any) -> dict:
        # Tasks embed category name/colour, so they are re-fetched too
        return await self.cache.mutate(
            CATEGORIES,
            None,
            lambda: self.api.update_category(category_id, **fields),
            also=(TODOS,),
        )

    async def delete_category(self, category_id: int) -> dict:
        return await self.cache.mutate(
            CATEGORIES,
            None,
            lambda: self.api.delete_category(category_id),
            also=(TODOS,),
        )

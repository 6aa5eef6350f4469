"""
Partial-update structures.

Each field is either UNSET ("do not touch") or a value. For nullable
columns the value may itself be None ("clear"), so the two cases never
collapse into one:

    TaskPatch()                        # nothing changes
    TaskPatch(description=None)        # description is cleared
    TaskPatch(category_ids=[])         # all categories removed
"""

from dataclasses import dataclass, fields
from typing import Any, Final


class _Unset:
    """Marker type for a field that was not provided."""

    _instance: "_Unset | None" = None

    def __new__(cls) -> "_Unset":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "UNSET"


UNSET: Final = _Unset()


def is_set(value: Any) -> bool:
    return value is not UNSET


class _Patch:
    """Shared helpers for patch dataclasses."""

    # Fields that are handled separately and never written as columns
    _relations: tuple[str, ...] = ()

    def provided(self) -> dict[str, Any]:
        """All provided fields, including relations."""
        return {f.name: getattr(self, f.name) for f in fields(self) if is_set(getattr(self, f.name))}

    def column_changes(self) -> dict[str, Any]:
        """Provided fields that map directly to columns."""
        return {k: v for k, v in self.provided().items() if k not in self._relations}

    def is_empty(self) -> bool:
        return not self.provided()


@dataclass(frozen=True)
class TaskPatch(_Patch):
    """Partial update of a task. category_ids replaces the whole link set."""

    title: str | _Unset = UNSET
    description: str | None | _Unset = UNSET
    completed: bool | _Unset = UNSET
    category_ids: list[int] | _Unset = UNSET

    _relations = ("category_ids",)


@dataclass(frozen=True)
class CategoryPatch(_Patch):
    """Partial update of a category."""

    name: str | _Unset = UNSET
    color: str | _Unset = UNSET

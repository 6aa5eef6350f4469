"""Category view: tasks grouped by the categories attached to them."""

from dataclasses import dataclass, field

UNCATEGORIZED_NAME = "Uncategorized"
UNCATEGORIZED_COLOR = "#6b7280"


@dataclass
class CategoryGroup:
    category_id: int | None  # None for the "Uncategorized" group
    name: str
    color: str
    todos: list[dict] = field(default_factory=list)
    completed_count: int = 0

    @property
    def total_count(self) -> int:
        return len(self.todos)

    def add(self, todo: dict) -> None:
        self.todos.append(todo)
        if todo.get("completed"):
            self.completed_count += 1


def group_by_category(todos: list[dict], categories: list[dict]) -> list[CategoryGroup]:
    """
    Group tasks for the category view.

    - a task appears in the group of every category it carries
    - tasks without categories go to "Uncategorized"
    - category groups without tasks are dropped, sorted by name
    - "Uncategorized" is always present and always last

    Categories a task references but that are missing from `categories`
    (e.g. deleted while the list was cached) are ignored.
    """
    groups = {c["id"]: CategoryGroup(c["id"], c["name"], c["color"]) for c in categories}
    uncategorized = CategoryGroup(None, UNCATEGORIZED_NAME, UNCATEGORIZED_COLOR)

    for todo in todos:
        attached = todo.get("categories") or []
        if not attached:
            uncategorized.add(todo)
            continue
        for category in attached:
            group = groups.get(category["id"])
            if group is not None:
                group.add(todo)

    filled = sorted(
        (g for g in groups.values() if g.todos), key=lambda g: (g.name.casefold(), g.category_id)
    )
    return [*filled, uncategorized]

"""Task-Category junction table."""

from sqlalchemy import Column, ForeignKey, Integer, Table

from .base import Base

# Many-to-many link between tasks and categories.
# Both sides must belong to the same user; the service layer enforces it.
# ON DELETE CASCADE keeps the table free of dangling links even if a row
# is removed outside the service.
task_categories = Table(
    "task_categories",
    Base.metadata,
    Column("task_id", Integer, ForeignKey("tasks.id", ondelete="CASCADE"), primary_key=True),
    Column(
        "category_id", Integer, ForeignKey("categories.id", ondelete="CASCADE"), primary_key=True
    ),
)

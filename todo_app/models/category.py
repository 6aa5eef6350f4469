"""Category model."""

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin

DEFAULT_CATEGORY_COLOR = "#3b82f6"


class Category(Base, TimestampMixin):
    """
    User-owned label for tasks.

    Names are not unique, not even per user; (owner_id, name) is only
    treated as a soft key by clients.
    """

    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    color: Mapped[str] = mapped_column(String(7), default=DEFAULT_CATEGORY_COLOR, nullable=False)

    owner_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )

    tasks: Mapped[list["Task"]] = relationship(  # noqa: F821
        "Task", secondary="task_categories", back_populates="categories"
    )

    def __repr__(self) -> str:
        return f"<Category(id={self.id}, name='{self.name}', color='{self.color}')>"

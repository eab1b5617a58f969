from sqlalchemy import Boolean, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from typing import Optional

from app.core.db.base import BaseModel


class Category(BaseModel):
    """
    Product category. Categories may nest through parent_id.
    Extends BaseModel which provides: id, created_at, updated_at, deleted_at
    """

    __tablename__ = "categories"

    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)

    slug: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)

    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True, default=None)

    parent_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("categories.id", name="fk_category_parent_id"),
        nullable=True,
        default=None,
        index=True,
    )

    is_enabled: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default="1"
    )

    def __repr__(self) -> str:
        return f"<Category(id={self.id}, slug='{self.slug}')>"

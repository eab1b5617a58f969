from decimal import Decimal
from sqlalchemy import Boolean, CheckConstraint, ForeignKey, Index, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from typing import Optional

from app.core.db.base import BaseModel


class Product(BaseModel):
    """
    Storefront product.
    Disabled products are hidden from shoppers but still counted by the
    admin dashboard.
    """

    __tablename__ = "products"

    __table_args__ = (
        CheckConstraint("stock >= 0", name="ck_product_stock_non_negative"),
        Index("idx_product_enabled_created", "is_enabled", "created_at"),
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)

    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True, default=None)

    price: Mapped[Decimal] = mapped_column(Numeric(precision=15, scale=2), nullable=False)

    # Original price shown struck through when on sale
    compare_at_price: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(precision=15, scale=2), nullable=True, default=None
    )

    category_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("categories.id", name="fk_product_category_id"),
        nullable=True,
        default=None,
        index=True,
    )

    stock: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")

    is_enabled: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default="1"
    )

    featured: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default="0"
    )

    def __repr__(self) -> str:
        return f"<Product(id={self.id}, name='{self.name}', stock={self.stock})>"

import enum
from decimal import Decimal
from sqlalchemy import ForeignKey, Index, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import List, Optional

from app.core.db.base import Base, BaseModel


class OrderStatus(str, enum.Enum):
    """Fulfilment status values as stored on orders"""

    Pending = "Pending"
    Processing = "Processing"
    Shipped = "Shipped"
    Delivered = "Delivered"
    Cancelled = "Cancelled"
    Returned = "Returned"
    Refunded = "Refunded"
    PaymentFailed = "PaymentFailed"


class PaymentStatus(str, enum.Enum):
    """Payment status enum"""

    Pending = "Pending"
    Paid = "Paid"
    Failed = "Failed"
    Refunded = "Refunded"


class Order(BaseModel):
    """
    Customer order. user_id is null for guest checkouts.

    order_status is a plain string column: writes go through OrderStatus,
    but rows imported from older systems may carry other values.
    """

    __tablename__ = "orders"

    __table_args__ = (
        Index("idx_order_created_id", "created_at", "id"),
        Index("idx_order_user_created", "user_id", "created_at"),
    )

    user_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("users.id", name="fk_order_user_id"),
        nullable=True,
        default=None,
    )

    customer_email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)

    # Shipping address
    shipping_name: Mapped[str] = mapped_column(String(255), nullable=False)
    shipping_phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True, default=None)
    shipping_address: Mapped[str] = mapped_column(String(500), nullable=False)
    shipping_city: Mapped[str] = mapped_column(String(100), nullable=False)
    shipping_state: Mapped[Optional[str]] = mapped_column(String(100), nullable=True, default=None)
    shipping_zip_code: Mapped[str] = mapped_column(String(20), nullable=False)
    shipping_country: Mapped[Optional[str]] = mapped_column(String(100), nullable=True, default=None)

    # Totals
    subtotal: Mapped[Decimal] = mapped_column(
        Numeric(precision=15, scale=2), nullable=False, default=Decimal("0")
    )
    discount_amount: Mapped[Decimal] = mapped_column(
        Numeric(precision=15, scale=2), nullable=False, default=Decimal("0")
    )
    shipping_cost: Mapped[Decimal] = mapped_column(
        Numeric(precision=15, scale=2), nullable=False, default=Decimal("0")
    )
    tax_amount: Mapped[Decimal] = mapped_column(
        Numeric(precision=15, scale=2), nullable=False, default=Decimal("0")
    )
    grand_total: Mapped[Decimal] = mapped_column(
        Numeric(precision=15, scale=2), nullable=False, default=Decimal("0")
    )

    payment_method: Mapped[str] = mapped_column(String(50), nullable=False)

    payment_status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=PaymentStatus.Pending.value,
        server_default=PaymentStatus.Pending.value,
    )

    order_status: Mapped[str] = mapped_column(
        String(32), nullable=False, index=True, default=OrderStatus.Pending.value,
        server_default=OrderStatus.Pending.value,
    )

    transaction_id: Mapped[Optional[str]] = mapped_column(String(100), nullable=True, default=None)
    tracking_number: Mapped[Optional[str]] = mapped_column(String(100), nullable=True, default=None)
    shipping_carrier: Mapped[Optional[str]] = mapped_column(String(100), nullable=True, default=None)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True, default=None)

    items: Mapped[List["OrderItem"]] = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.id",
    )

    def __repr__(self) -> str:
        return (
            f"<Order(id={self.id}, status={self.order_status}, "
            f"grand_total={self.grand_total})>"
        )


class OrderItem(Base):
    """
    Line item. product_name and prices are snapshots taken at checkout, so
    reports stay correct after the catalog changes or the product is deleted.
    """

    __tablename__ = "order_items"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    order_id: Mapped[int] = mapped_column(
        ForeignKey("orders.id", ondelete="CASCADE", name="fk_order_item_order_id"),
        nullable=False,
        index=True,
    )

    # Not a foreign key: products may be hard-deleted after the sale
    product_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)

    product_name: Mapped[str] = mapped_column(String(255), nullable=False)

    quantity: Mapped[int] = mapped_column(Integer, nullable=False)

    unit_price: Mapped[Decimal] = mapped_column(Numeric(precision=15, scale=2), nullable=False)

    item_discount: Mapped[Decimal] = mapped_column(
        Numeric(precision=15, scale=2), nullable=False, default=Decimal("0")
    )

    final_unit_price: Mapped[Decimal] = mapped_column(
        Numeric(precision=15, scale=2), nullable=False
    )

    line_item_total: Mapped[Decimal] = mapped_column(
        Numeric(precision=15, scale=2), nullable=False
    )

    order: Mapped["Order"] = relationship("Order", back_populates="items")

    def __repr__(self) -> str:
        return f"<OrderItem(order_id={self.order_id}, product_id={self.product_id}, qty={self.quantity})>"

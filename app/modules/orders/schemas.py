"""
Order DTOs (Data Transfer Objects)
"""

from decimal import Decimal
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, model_validator

from app.core.pagination import MAX_CURSOR_PAGE_SIZE

from .models import OrderStatus, PaymentStatus


class OrderItemDto(BaseModel):
    product_id: int
    quantity: int = Field(..., ge=1)
    item_discount: Decimal = Field(Decimal("0"), ge=0, decimal_places=2)


class ShippingAddressDto(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    address: str = Field(..., min_length=1, max_length=500)
    city: str = Field(..., min_length=1, max_length=100)
    state: Optional[str] = Field(None, max_length=100)
    zip_code: str = Field(..., min_length=1, max_length=20)
    country: Optional[str] = Field(None, max_length=100)


class CreateOrderDto(BaseModel):
    """Checkout payload. Prices are taken from the catalog, never from the client."""

    customer_email: str = Field(..., min_length=3, max_length=255)
    shipping_address: ShippingAddressDto
    items: List[OrderItemDto] = Field(..., min_length=1)
    discount_amount: Decimal = Field(Decimal("0"), ge=0, decimal_places=2)
    shipping_cost: Decimal = Field(Decimal("0"), ge=0, decimal_places=2)
    tax_amount: Decimal = Field(Decimal("0"), ge=0, decimal_places=2)
    payment_method: str = Field(..., min_length=1, max_length=50)
    transaction_id: Optional[str] = Field(None, max_length=100)
    notes: Optional[str] = None

    @model_validator(mode="after")
    def check_unique_products(self) -> "CreateOrderDto":
        product_ids = [item.product_id for item in self.items]
        if len(product_ids) != len(set(product_ids)):
            raise ValueError("Each product may appear only once per order")
        return self


class UpdateOrderDto(BaseModel):
    order_status: Optional[OrderStatus] = None
    payment_status: Optional[PaymentStatus] = None
    transaction_id: Optional[str] = Field(None, max_length=100)
    tracking_number: Optional[str] = Field(None, max_length=100)
    shipping_carrier: Optional[str] = Field(None, max_length=100)
    notes: Optional[str] = None


class OrderListOptions(BaseModel):
    """
    Options for the cursor-paginated order reader.

    start_date / end_date bound created_at inclusively. start_after is the id
    of the last order of the previous page.
    """

    user_id: Optional[int] = None
    order_status: Optional[str] = None
    payment_status: Optional[str] = None
    customer_email: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    sort_by: Literal["created_at", "grand_total"] = "created_at"
    sort_order: Literal["asc", "desc"] = "desc"
    limit: int = Field(200, ge=1, le=MAX_CURSOR_PAGE_SIZE)
    start_after: Optional[int] = None


class OrderItemResponse(BaseModel):
    id: int
    product_id: int
    product_name: str
    quantity: int
    unit_price: Decimal
    item_discount: Decimal
    final_unit_price: Decimal
    line_item_total: Decimal

    class Config:
        from_attributes = True


class OrderResponse(BaseModel):
    id: int
    user_id: Optional[int] = None
    customer_email: str
    shipping_name: str
    shipping_phone: Optional[str] = None
    shipping_address: str
    shipping_city: str
    shipping_state: Optional[str] = None
    shipping_zip_code: str
    shipping_country: Optional[str] = None
    subtotal: Decimal
    discount_amount: Decimal
    shipping_cost: Decimal
    tax_amount: Decimal
    grand_total: Decimal
    payment_method: str
    payment_status: str
    order_status: str
    transaction_id: Optional[str] = None
    tracking_number: Optional[str] = None
    shipping_carrier: Optional[str] = None
    notes: Optional[str] = None
    items: List[OrderItemResponse]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class OrderPageResponse(BaseModel):
    items: List[OrderResponse]
    total: int
    page: int
    page_size: int
    total_pages: int
    has_more: bool

"""
Dashboard DTOs (Data Transfer Objects)

Field names are snake_case in Python and camelCase on the wire
(salesSummary, averageOrderValue, ...), which is what the admin panel reads.
"""

import enum
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


class TimePeriod(str, enum.Enum):
    """Named reporting windows"""

    today = "today"
    yesterday = "yesterday"
    week = "week"
    month = "month"
    year = "year"
    custom = "custom"


class DashboardModel(BaseModel):
    """Base for dashboard payloads: camelCase aliases, populated by field name."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


class CustomRange(DashboardModel):
    """Explicit bounds for the custom period. Both are required there."""

    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None


class DateRangeResponse(DashboardModel):
    start_date: datetime
    end_date: datetime


class SalesSummaryResponse(DashboardModel):
    total_sales: Decimal = Field(..., description="Sum of order grand totals")
    total_orders: int
    average_order_value: Decimal


class TopSellingProductResponse(DashboardModel):
    id: int
    name: str
    sales: Decimal
    quantity: int


class ProductSummaryResponse(DashboardModel):
    total_products: int
    low_stock_products: int = Field(..., description="0 < stock < threshold")
    out_of_stock_products: int
    top_selling_products: List[TopSellingProductResponse]


class CustomerSummaryResponse(DashboardModel):
    total_customers: int = Field(..., description="Distinct registered users with orders in the period")
    new_customers: int
    returning_customers: int


class OrderStatusSummaryResponse(DashboardModel):
    pending: int = 0
    processing: int = 0
    shipped: int = 0
    delivered: int = 0
    cancelled: int = 0
    returned: int = 0
    payment_failed: int = 0
    refunded: int = 0


class CategorySalesResponse(DashboardModel):
    category: int = Field(..., description="Category id")
    sales: Decimal
    order_count: int


class PaymentMethodSalesResponse(DashboardModel):
    method: str
    sales: Decimal
    order_count: int


class SalesOverTimePoint(DashboardModel):
    date: str = Field(..., description="YYYY-MM-DD")
    sales: Decimal
    orders: int


class DashboardOrderResponse(DashboardModel):
    """Compact order row for the recent orders widget"""

    id: int
    user_id: Optional[int] = None
    customer_email: str
    grand_total: Decimal
    order_status: str
    payment_status: str
    payment_method: Optional[str] = None
    item_count: int
    created_at: datetime


class DashboardResponse(DashboardModel):
    """Complete dashboard data response"""

    date_range: DateRangeResponse
    sales_summary: SalesSummaryResponse
    product_summary: ProductSummaryResponse
    customer_summary: CustomerSummaryResponse
    order_status_summary: OrderStatusSummaryResponse
    sales_by_category: List[CategorySalesResponse]
    sales_by_payment_method: List[PaymentMethodSalesResponse]
    sales_over_time: List[SalesOverTimePoint]
    recent_orders: List[DashboardOrderResponse]

"""
Dashboard aggregation: a pure reduction of orders and products over a
DateRange into a DashboardResponse.

Currency is summed exactly as Decimal and rounded once, on the final value.
"""

from collections import OrderedDict
from datetime import timedelta
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Sequence, Set

from app.core.utils import format_chart_date, round_money, to_decimal
from app.modules.orders.models import Order, OrderStatus
from app.modules.products.models import Product

from .date_range import DateRange
from .schemas import (
    CategorySalesResponse,
    CustomerSummaryResponse,
    DashboardOrderResponse,
    DashboardResponse,
    DateRangeResponse,
    OrderStatusSummaryResponse,
    PaymentMethodSalesResponse,
    ProductSummaryResponse,
    SalesOverTimePoint,
    SalesSummaryResponse,
    TopSellingProductResponse,
)

LOW_STOCK_THRESHOLD = 10
TOP_PRODUCTS_LIMIT = 10
RECENT_ORDERS_LIMIT = 5
UNKNOWN_PAYMENT_METHOD = "Unknown"

# Lowercased stored status -> histogram bucket
_STATUS_BUCKETS = {
    "pending": "pending",
    "processing": "processing",
    "shipped": "shipped",
    "delivered": "delivered",
    "cancelled": "cancelled",
    "returned": "returned",
    "refunded": "refunded",
}


def status_bucket(order_status: Optional[str]) -> Optional[str]:
    """
    Map a stored order status onto its histogram bucket.

    Matching is case-insensitive for the plain statuses. The payment failure
    bucket only takes the exact stored value "PaymentFailed". Anything else
    has no bucket (None) and is left out of the histogram.
    """
    if order_status == OrderStatus.PaymentFailed.value:
        return "payment_failed"
    if not order_status:
        return None
    return _STATUS_BUCKETS.get(order_status.lower())


def summarize_sales(orders: Sequence[Order]) -> SalesSummaryResponse:
    total_sales = sum((to_decimal(o.grand_total) for o in orders), Decimal("0"))
    total_orders = len(orders)
    average = total_sales / total_orders if total_orders else Decimal("0")
    return SalesSummaryResponse(
        total_sales=round_money(total_sales),
        total_orders=total_orders,
        average_order_value=round_money(average),
    )


def summarize_products(
    orders: Sequence[Order],
    products: Sequence[Product],
    low_stock_threshold: int = LOW_STOCK_THRESHOLD,
    top_products_limit: int = TOP_PRODUCTS_LIMIT,
) -> ProductSummaryResponse:
    out_of_stock = sum(1 for p in products if p.stock == 0)
    low_stock = sum(1 for p in products if 0 < p.stock < low_stock_threshold)

    # Keyed by the order line, so products missing from the catalog still rank
    product_sales: Dict[int, dict] = {}
    for order in orders:
        for item in order.items:
            entry = product_sales.setdefault(
                item.product_id,
                {"name": item.product_name, "sales": Decimal("0"), "quantity": 0},
            )
            entry["sales"] += to_decimal(item.line_item_total)
            entry["quantity"] += item.quantity

    ranked = sorted(product_sales.items(), key=lambda kv: kv[1]["sales"], reverse=True)
    top_selling = [
        TopSellingProductResponse(
            id=product_id,
            name=data["name"],
            sales=round_money(data["sales"]),
            quantity=data["quantity"],
        )
        for product_id, data in ranked[:top_products_limit]
    ]

    return ProductSummaryResponse(
        total_products=len(products),
        low_stock_products=low_stock,
        out_of_stock_products=out_of_stock,
        top_selling_products=top_selling,
    )


def summarize_customers(
    orders: Sequence[Order], history_user_ids: Set[int]
) -> CustomerSummaryResponse:
    """
    Split the period's registered customers into new and returning.
    A customer is returning when history_user_ids holds them, i.e. they
    ordered before the period started. Guest orders are ignored.
    """
    customers = {o.user_id for o in orders if o.user_id is not None}
    returning = len(customers & history_user_ids)
    return CustomerSummaryResponse(
        total_customers=len(customers),
        new_customers=len(customers) - returning,
        returning_customers=returning,
    )


def summarize_statuses(orders: Sequence[Order]) -> OrderStatusSummaryResponse:
    counts = {field: 0 for field in OrderStatusSummaryResponse.model_fields}
    for order in orders:
        bucket = status_bucket(order.order_status)
        if bucket is not None:
            counts[bucket] += 1
    return OrderStatusSummaryResponse(**counts)


def sales_by_category(
    orders: Sequence[Order], products: Sequence[Product]
) -> List[CategorySalesResponse]:
    """
    Line item sales grouped by the product's category.
    Items whose product is not in the catalog, or has no category, are
    skipped. An order counts once per category it touches.
    """
    category_of = {p.id: p.category_id for p in products if p.category_id is not None}
    totals: Dict[int, dict] = {}

    for order in orders:
        seen: Set[int] = set()
        for item in order.items:
            category_id = category_of.get(item.product_id)
            if category_id is None:
                continue
            entry = totals.setdefault(category_id, {"sales": Decimal("0"), "order_count": 0})
            entry["sales"] += to_decimal(item.line_item_total)
            if category_id not in seen:
                entry["order_count"] += 1
                seen.add(category_id)

    ranked = sorted(totals.items(), key=lambda kv: kv[1]["sales"], reverse=True)
    return [
        CategorySalesResponse(
            category=category_id,
            sales=round_money(data["sales"]),
            order_count=data["order_count"],
        )
        for category_id, data in ranked
    ]


def sales_by_payment_method(orders: Sequence[Order]) -> List[PaymentMethodSalesResponse]:
    totals: Dict[str, dict] = {}
    for order in orders:
        method = order.payment_method or UNKNOWN_PAYMENT_METHOD
        entry = totals.setdefault(method, {"sales": Decimal("0"), "order_count": 0})
        entry["sales"] += to_decimal(order.grand_total)
        entry["order_count"] += 1

    ranked = sorted(totals.items(), key=lambda kv: kv[1]["sales"], reverse=True)
    return [
        PaymentMethodSalesResponse(
            method=method,
            sales=round_money(data["sales"]),
            order_count=data["order_count"],
        )
        for method, data in ranked
    ]


def sales_over_time(
    orders: Sequence[Order], date_range: DateRange
) -> List[SalesOverTimePoint]:
    """
    Daily series with one zero-filled bucket per step of one day from
    start_date while <= end_date. Orders on a day without a bucket are
    not charted.
    """
    buckets: "OrderedDict[str, dict]" = OrderedDict()
    cursor = date_range.start_date
    while cursor <= date_range.end_date:
        buckets[format_chart_date(cursor)] = {"sales": Decimal("0"), "orders": 0}
        cursor += timedelta(days=1)

    for order in orders:
        bucket = buckets.get(format_chart_date(order.created_at))
        if bucket is None:
            continue
        bucket["sales"] += to_decimal(order.grand_total)
        bucket["orders"] += 1

    return [
        SalesOverTimePoint(date=day, sales=round_money(data["sales"]), orders=data["orders"])
        for day, data in sorted(buckets.items())
    ]


def recent_orders(
    orders: Sequence[Order], limit: int = RECENT_ORDERS_LIMIT
) -> List[DashboardOrderResponse]:
    """The last `limit` orders of a chronological sequence, newest first."""
    if limit <= 0:
        return []
    return [
        DashboardOrderResponse(
            id=order.id,
            user_id=order.user_id,
            customer_email=order.customer_email,
            grand_total=round_money(order.grand_total),
            order_status=order.order_status,
            payment_status=order.payment_status,
            payment_method=order.payment_method,
            item_count=len(order.items),
            created_at=order.created_at,
        )
        for order in reversed(orders[-limit:])
    ]


def aggregate(
    orders: Sequence[Order],
    products: Sequence[Product],
    date_range: DateRange,
    prior_customer_ids: Iterable[int] = (),
    low_stock_threshold: int = LOW_STOCK_THRESHOLD,
    top_products_limit: int = TOP_PRODUCTS_LIMIT,
    recent_orders_limit: int = RECENT_ORDERS_LIMIT,
) -> DashboardResponse:
    """
    Compute every dashboard metric for the given range.

    Args:
        orders: Orders in ascending created_at order. Orders outside the
            range are ignored except that those created before start_date
            mark their user as a returning customer.
        products: The full catalog, disabled products included
        date_range: Inclusive reporting range
        prior_customer_ids: Users known to have ordered before start_date

    Returns:
        DashboardResponse
    """
    in_range = [o for o in orders if date_range.contains(o.created_at)]

    history_user_ids = set(prior_customer_ids)
    history_user_ids.update(
        o.user_id
        for o in orders
        if o.user_id is not None and o.created_at < date_range.start_date
    )

    return DashboardResponse(
        date_range=DateRangeResponse(
            start_date=date_range.start_date, end_date=date_range.end_date
        ),
        sales_summary=summarize_sales(in_range),
        product_summary=summarize_products(
            in_range, products, low_stock_threshold, top_products_limit
        ),
        customer_summary=summarize_customers(in_range, history_user_ids),
        order_status_summary=summarize_statuses(in_range),
        sales_by_category=sales_by_category(in_range, products),
        sales_by_payment_method=sales_by_payment_method(in_range),
        sales_over_time=sales_over_time(in_range, date_range),
        recent_orders=recent_orders(in_range, recent_orders_limit),
    )

from datetime import datetime, timedelta
from decimal import Decimal

import pytest
from sqlalchemy.exc import OperationalError

from app.core.config import config
from app.core.exceptions import InvalidArgumentError
from app.modules.dashboard.date_range import resolve_date_range
from app.modules.dashboard.schemas import CustomRange
from app.modules.dashboard.service import DashboardService
from app.modules.orders.service import OrderService

from factories import build_item, seed_category, seed_order, seed_product, seed_user

NOW = datetime(2024, 3, 15, 14, 30)


async def seed_store(db):
    shoes = await seed_category(db)
    sneaker = await seed_product(db, name="Sneaker", stock=0, category_id=shoes.id)
    await seed_product(db, name="Sandal", stock=5, category_id=shoes.id, is_enabled=False)
    await seed_product(db, name="Boot", stock=40)

    regular = await seed_user(db, "regular")
    newbie = await seed_user(db, "newbie")

    await seed_order(db, "200", datetime(2024, 3, 14, 10, 0), user_id=regular.id)
    await seed_order(
        db, "100", datetime(2024, 3, 15, 9, 0), user_id=regular.id,
        items=[build_item(sneaker.id, "Sneaker", 2, "100")],
    )
    await seed_order(
        db, "50", datetime(2024, 3, 15, 10, 0), user_id=newbie.id, order_status="Delivered",
        payment_method="PayPal",
    )
    await seed_order(db, "25", datetime(2024, 3, 15, 11, 0), order_status="PaymentFailed")
    await db.flush()
    return sneaker


async def test_today_dashboard(db, monkeypatch):
    monkeypatch.setattr(config, "dashboard_page_size", 2)
    sneaker = await seed_store(db)

    result = await DashboardService.get_dashboard_data(db, "today", now=NOW)

    assert result.sales_summary.total_sales == Decimal("175.00")
    assert result.sales_summary.total_orders == 3
    assert result.sales_summary.average_order_value == Decimal("58.33")

    assert result.product_summary.total_products == 3
    assert result.product_summary.out_of_stock_products == 1
    assert result.product_summary.low_stock_products == 1
    assert [p.id for p in result.product_summary.top_selling_products] == [sneaker.id]

    assert result.customer_summary.total_customers == 2
    assert result.customer_summary.returning_customers == 1
    assert result.customer_summary.new_customers == 1

    assert result.order_status_summary.pending == 1
    assert result.order_status_summary.delivered == 1
    assert result.order_status_summary.payment_failed == 1

    assert [(c.category, c.order_count) for c in result.sales_by_category] == [
        (sneaker.category_id, 1)
    ]
    assert [m.method for m in result.sales_by_payment_method] == ["Card", "PayPal"]
    assert [(p.date, p.orders) for p in result.sales_over_time] == [("2024-03-15", 3)]
    assert [o.grand_total for o in result.recent_orders] == [
        Decimal("25.00"), Decimal("50.00"), Decimal("100.00")
    ]


async def test_yesterday_dashboard(db):
    await seed_store(db)

    result = await DashboardService.get_dashboard_data(db, "yesterday", now=NOW)

    assert result.sales_summary.total_sales == Decimal("200.00")
    assert result.customer_summary.new_customers == 1


async def test_custom_period_requires_bounds(db):
    with pytest.raises(InvalidArgumentError):
        await DashboardService.get_dashboard_data(db, "custom", now=NOW)


async def test_custom_period(db):
    await seed_store(db)

    result = await DashboardService.get_dashboard_data(
        db,
        "custom",
        CustomRange(start_date=datetime(2024, 3, 1), end_date=datetime(2024, 3, 31)),
        now=NOW,
    )

    assert result.sales_summary.total_orders == 4
    assert len(result.sales_over_time) == 31


async def test_fetch_orders_walks_every_page(db):
    for i in range(5):
        await seed_order(db, "1", NOW - timedelta(hours=i))

    orders = await DashboardService.fetch_orders(db, resolve_date_range("today", now=NOW), page_size=2)

    assert len(orders) == 5
    assert [o.created_at for o in orders] == sorted(o.created_at for o in orders)


async def test_upstream_failure_propagates(db, monkeypatch):
    async def broken_reader(db, options=None):
        raise OperationalError("SELECT", {}, Exception("database is locked"))

    monkeypatch.setattr(OrderService, "list_orders", broken_reader)

    with pytest.raises(OperationalError):
        await DashboardService.get_dashboard_data(db, "month", now=NOW)

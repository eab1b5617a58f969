from datetime import datetime, timedelta
from decimal import Decimal

from app.modules.dashboard.aggregator import aggregate, status_bucket
from app.modules.dashboard.date_range import DateRange, resolve_date_range

from factories import build_item, build_order, build_product

NOW = datetime(2024, 3, 15, 14, 30)
TODAY = resolve_date_range("today", now=NOW)


def test_today_totals_exclude_yesterdays_order():
    orders = [
        build_order(1, "200", datetime(2024, 3, 14, 10, 0), payment_method="Cash"),
        build_order(2, "100", datetime(2024, 3, 15, 9, 0)),
        build_order(3, "50", datetime(2024, 3, 15, 10, 0)),
        build_order(4, "25", datetime(2024, 3, 15, 11, 0)),
    ]

    result = aggregate(orders, [], TODAY)

    assert result.sales_summary.total_sales == Decimal("175.00")
    assert result.sales_summary.total_orders == 3
    assert result.sales_summary.average_order_value == Decimal("58.33")
    assert [p.method for p in result.sales_by_payment_method] == ["Card"]
    assert 1 not in [o.id for o in result.recent_orders]


def test_stock_health_counts():
    products = [build_product(1, stock=0), build_product(2, stock=5), build_product(3, stock=10)]

    summary = aggregate([], products, TODAY).product_summary

    assert summary.total_products == 3
    assert summary.out_of_stock_products == 1
    assert summary.low_stock_products == 1


def test_low_stock_threshold_is_configurable():
    products = [build_product(1, stock=12)]
    summary = aggregate([], products, TODAY, low_stock_threshold=20).product_summary
    assert summary.low_stock_products == 1


def test_empty_order_set():
    result = aggregate([], [], TODAY)

    assert result.sales_summary.total_sales == Decimal("0")
    assert result.sales_summary.total_orders == 0
    assert result.sales_summary.average_order_value == Decimal("0")
    assert result.recent_orders == []
    assert result.product_summary.top_selling_products == []
    assert result.customer_summary.total_customers == 0
    assert len(result.sales_over_time) == 1


def test_guest_orders_count_in_sales_but_not_customers():
    orders = [
        build_order(1, "40", datetime(2024, 3, 15, 9, 0), user_id=None),
        build_order(2, "60", datetime(2024, 3, 15, 10, 0), user_id=7),
        build_order(3, "10", datetime(2024, 3, 15, 11, 0), user_id=7),
    ]

    result = aggregate(orders, [], TODAY)

    assert result.sales_summary.total_sales == Decimal("110.00")
    assert result.customer_summary.total_customers == 1
    assert result.customer_summary.new_customers == 1
    assert result.customer_summary.returning_customers == 0


def test_returning_customers_come_from_prior_history():
    orders = [
        build_order(1, "10", datetime(2024, 3, 10), user_id=1),
        build_order(2, "10", datetime(2024, 3, 15, 9, 0), user_id=1),
        build_order(3, "10", datetime(2024, 3, 15, 9, 30), user_id=2),
        build_order(4, "10", datetime(2024, 3, 15, 10, 0), user_id=3),
    ]

    summary = aggregate(orders, [], TODAY, prior_customer_ids={3}).customer_summary

    assert summary.total_customers == 3
    assert summary.returning_customers == 2
    assert summary.new_customers == 1


def test_missing_product_skipped_by_category_but_ranked_by_sales():
    products = [build_product(1, stock=50, category_id=9)]
    orders = [
        build_order(
            1, "80", datetime(2024, 3, 15, 9, 0),
            items=[build_item(1, "Sneaker", 1, "30"), build_item(99, "Retired hat", 2, "50")],
        ),
    ]

    result = aggregate(orders, products, TODAY)

    assert result.sales_summary.total_sales == Decimal("80.00")
    assert [(c.category, c.sales) for c in result.sales_by_category] == [(9, Decimal("30.00"))]
    top = result.product_summary.top_selling_products
    assert [(p.id, p.name, p.quantity) for p in top] == [(99, "Retired hat", 2), (1, "Sneaker", 1)]


def test_category_order_count_is_once_per_order():
    products = [build_product(1, 5, category_id=4), build_product(2, 5, category_id=4)]
    orders = [
        build_order(
            1, "30", datetime(2024, 3, 15, 9, 0),
            items=[build_item(1, "A", 1, "10"), build_item(2, "B", 1, "20")],
        ),
        build_order(2, "5", datetime(2024, 3, 15, 10, 0), items=[build_item(1, "A", 1, "5")]),
    ]

    category = aggregate(orders, products, TODAY).sales_by_category[0]

    assert category.sales == Decimal("35.00")
    assert category.order_count == 2


def test_top_selling_products_are_limited_and_sorted():
    orders = [
        build_order(
            i, str(i), datetime(2024, 3, 15, 9, i),
            items=[build_item(i, f"P{i}", 1, str(i))],
        )
        for i in range(1, 13)
    ]

    top = aggregate(orders, [], TODAY).product_summary.top_selling_products

    assert len(top) == 10
    assert [p.id for p in top[:3]] == [12, 11, 10]


def test_status_histogram():
    statuses = ["Pending", "delivered", "Delivered", "PaymentFailed", "paymentfailed", "OnHold"]
    orders = [
        build_order(i, "1", datetime(2024, 3, 15, 9, i), order_status=status)
        for i, status in enumerate(statuses, start=1)
    ]

    summary = aggregate(orders, [], TODAY).order_status_summary

    assert summary.pending == 1
    assert summary.delivered == 2
    assert summary.payment_failed == 1
    counted = sum(summary.model_dump().values())
    assert counted == len(orders) - 2


def test_status_bucket_mapping():
    assert status_bucket("Shipped") == "shipped"
    assert status_bucket("REFUNDED") == "refunded"
    assert status_bucket("PaymentFailed") == "payment_failed"
    assert status_bucket("PAYMENTFAILED") is None
    assert status_bucket(None) is None


def test_missing_payment_method_is_unknown():
    orders = [
        build_order(1, "10", datetime(2024, 3, 15, 9, 0), payment_method=None),
        build_order(2, "15", datetime(2024, 3, 15, 9, 5), payment_method="Card"),
        build_order(3, "20", datetime(2024, 3, 15, 9, 10), payment_method=""),
    ]

    methods = aggregate(orders, [], TODAY).sales_by_payment_method

    assert [(m.method, m.sales, m.order_count) for m in methods] == [
        ("Unknown", Decimal("30.00"), 2),
        ("Card", Decimal("15.00"), 1),
    ]


def test_sales_over_time_has_one_bucket_per_day():
    rng = DateRange(datetime(2024, 3, 1), datetime(2024, 3, 7, 18, 0))
    orders = [
        build_order(1, "10", datetime(2024, 3, 2, 9, 0)),
        build_order(2, "5.5", datetime(2024, 3, 2, 20, 0)),
        build_order(3, "7", datetime(2024, 3, 7, 17, 0)),
    ]

    series = aggregate(orders, [], rng).sales_over_time

    assert len(series) == 7
    assert [p.date for p in series] == sorted({p.date for p in series})
    by_day = {p.date: (p.sales, p.orders) for p in series}
    assert by_day["2024-03-02"] == (Decimal("15.50"), 2)
    assert by_day["2024-03-07"] == (Decimal("7.00"), 1)
    assert by_day["2024-03-05"] == (Decimal("0.00"), 0)


def test_month_series_length_matches_whole_days():
    rng = resolve_date_range("month", now=NOW)
    series = aggregate([], [], rng).sales_over_time
    assert len(series) == (rng.end_date - rng.start_date).days + 1


def test_recent_orders_are_newest_first():
    orders = [
        build_order(i, "10", datetime(2024, 3, 15, 8, 0) + timedelta(minutes=i))
        for i in range(1, 8)
    ]

    recent = aggregate(orders, [], TODAY).recent_orders

    assert [o.id for o in recent] == [7, 6, 5, 4, 3]


def test_currency_rounds_half_away_from_zero_on_final_value():
    orders = [
        build_order(1, "0.005", datetime(2024, 3, 15, 9, 0)),
        build_order(2, "0.005", datetime(2024, 3, 15, 9, 1)),
        build_order(3, "0.005", datetime(2024, 3, 15, 9, 2)),
    ]

    summary = aggregate(orders, [], TODAY).sales_summary

    assert summary.total_sales == Decimal("0.02")
    assert summary.average_order_value == Decimal("0.01")


def test_aggregation_is_idempotent():
    orders = [
        build_order(1, "12.34", datetime(2024, 3, 15, 9, 0), user_id=1,
                    items=[build_item(1, "A", 2, "12.34")]),
    ]
    products = [build_product(1, stock=3, category_id=1)]

    first = aggregate(orders, products, TODAY)
    second = aggregate(orders, products, TODAY)

    assert first.model_dump_json(by_alias=True) == second.model_dump_json(by_alias=True)


def test_output_uses_camel_case_keys():
    payload = aggregate([], [], TODAY).model_dump(by_alias=True)
    assert set(payload) == {
        "dateRange", "salesSummary", "productSummary", "customerSummary",
        "orderStatusSummary", "salesByCategory", "salesByPaymentMethod",
        "salesOverTime", "recentOrders",
    }
    assert "averageOrderValue" in payload["salesSummary"]
    assert "paymentFailed" in payload["orderStatusSummary"]

"""
DashboardService - Business logic for aggregating dashboard data.
Reads orders and products through their cursor-paginated readers and
reduces them in memory.
"""

import logging
from datetime import datetime
from typing import List, Optional, Union

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import config
from app.core.pagination import CursorPage, collect_all_pages
from app.modules.orders.models import Order
from app.modules.orders.schemas import OrderListOptions
from app.modules.orders.service import OrderService
from app.modules.products.models import Product
from app.modules.products.schemas import ProductListOptions
from app.modules.products.service import ProductService

from .aggregator import aggregate
from .date_range import DateRange, resolve_date_range
from .schemas import CustomRange, DashboardResponse, TimePeriod

logger = logging.getLogger(__name__)


class DashboardService:
    """
    Dashboard service for aggregating all dashboard data.
    Upstream read failures propagate to the caller unchanged.
    """

    @staticmethod
    async def fetch_orders(
        db: AsyncSession, date_range: DateRange, page_size: Optional[int] = None
    ) -> List[Order]:
        """Every order created within the range, oldest first."""
        page_size = page_size or config.dashboard_page_size

        async def fetch_page(limit: int, start_after: Optional[int]) -> CursorPage[Order]:
            return await OrderService.list_orders(
                db,
                OrderListOptions(
                    start_date=date_range.start_date,
                    end_date=date_range.end_date,
                    sort_by="created_at",
                    sort_order="asc",
                    limit=limit,
                    start_after=start_after,
                ),
            )

        return await collect_all_pages(fetch_page, page_size)

    @staticmethod
    async def fetch_products(
        db: AsyncSession, page_size: Optional[int] = None
    ) -> List[Product]:
        """The whole catalog, disabled products included."""
        page_size = page_size or config.dashboard_page_size

        async def fetch_page(limit: int, start_after: Optional[int]) -> CursorPage[Product]:
            return await ProductService.list_products(
                db,
                ProductListOptions(fetch_all=True, limit=limit, start_after=start_after),
            )

        return await collect_all_pages(fetch_page, page_size)

    @staticmethod
    async def get_dashboard_data(
        db: AsyncSession,
        period: Union[TimePeriod, str, None] = TimePeriod.month,
        custom_range: Optional[CustomRange] = None,
        now: Optional[datetime] = None,
    ) -> DashboardResponse:
        """
        Get all dashboard data for a reporting period.

        Args:
            period: today, yesterday, week, month, year or custom
            custom_range: Bounds for the custom period
            now: Reference instant, defaults to the current UTC time

        Raises:
            InvalidArgumentError: If the custom range is missing or inverted
        """
        date_range = resolve_date_range(period, custom_range, now=now)
        logger.info(
            f"Building dashboard for period={getattr(period, 'value', period)} "
            f"({date_range.start_date.isoformat()} .. {date_range.end_date.isoformat()})"
        )

        orders = await DashboardService.fetch_orders(db, date_range)
        products = await DashboardService.fetch_products(db)

        prior_customer_ids = await OrderService.find_customers_with_orders_before(
            db,
            (o.user_id for o in orders if o.user_id is not None),
            date_range.start_date,
        )

        response = aggregate(
            orders,
            products,
            date_range,
            prior_customer_ids=prior_customer_ids,
            low_stock_threshold=config.low_stock_threshold,
            top_products_limit=config.top_products_limit,
            recent_orders_limit=config.recent_orders_limit,
        )
        logger.info(
            f"Dashboard aggregated {len(orders)} orders and {len(products)} products"
        )
        return response

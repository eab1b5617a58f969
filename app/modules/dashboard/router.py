"""
Dashboard Router - FastAPI endpoint for aggregated dashboard data.
"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db.engine import get_db_util
from app.core.exceptions import DatabaseError
from app.core.response_interceptor import CustomAPIRoute
from app.modules.users.auth import TokenData, require_admin
from .service import DashboardService
from .schemas import CustomRange, DashboardResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/dashboard", tags=["dashboard"], route_class=CustomAPIRoute)


@router.get("", response_model=DashboardResponse)
async def get_dashboard(
    period: str = Query("month", description="today, yesterday, week, month, year or custom"),
    start_date: Optional[datetime] = Query(None, description="Start of a custom period"),
    end_date: Optional[datetime] = Query(None, description="End of a custom period"),
    db: AsyncSession = Depends(get_db_util),
    current_user: TokenData = Depends(require_admin)
):
    """
    Get all dashboard data in a single API call (Admin only).

    Returns:
        - salesSummary: total sales, order count and average order value
        - productSummary: catalog stock levels and top selling products
        - customerSummary: new and returning customers
        - orderStatusSummary: order count per status
        - salesByCategory / salesByPaymentMethod: sales breakdowns
        - salesOverTime: daily sales series
        - recentOrders: latest orders in the period
    """
    custom_range = CustomRange(start_date=start_date, end_date=end_date)
    try:
        return await DashboardService.get_dashboard_data(
            db, period=period, custom_range=custom_range
        )
    except SQLAlchemyError as e:
        logger.error(f"Failed to load dashboard data: {e}")
        raise DatabaseError("Failed to load dashboard data") from e

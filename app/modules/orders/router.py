"""
Orders Router.
Checkout is open to guests; shoppers see their own orders; Admin/Staff manage all.
"""

from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db.engine import get_db_util
from app.core.exceptions import NotFoundError
from app.core.pagination import build_paginated_response
from app.core.response_interceptor import CustomAPIRoute, skip_interceptor
from app.modules.users.auth import (
    TokenData,
    get_optional_user,
    require_admin,
    require_admin_or_staff,
    require_any_role,
)
from app.modules.users.models import Role
from .models import OrderStatus
from .service import OrderService
from .schemas import CreateOrderDto, OrderPageResponse, OrderResponse, UpdateOrderDto

router = APIRouter(prefix="/orders", tags=["orders"], route_class=CustomAPIRoute)


@router.post("", response_model=OrderResponse)
async def create_order(
    dto: CreateOrderDto,
    db: AsyncSession = Depends(get_db_util),
    current_user: Optional[TokenData] = Depends(get_optional_user)
):
    """Place an order. Anonymous callers create guest orders."""
    user_id = current_user.user_id if current_user else None
    return await OrderService.create(db, dto, user_id=user_id)


@router.get("", response_model=OrderPageResponse)
async def get_all_orders(
    order_status: Optional[OrderStatus] = Query(None),
    user_id: Optional[int] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(25, ge=1, le=100),
    db: AsyncSession = Depends(get_db_util),
    current_user: TokenData = Depends(require_admin_or_staff)
):
    """List all orders, newest first (Admin/Staff only)"""
    items, total = await OrderService.find_all(
        db,
        user_id=user_id,
        order_status=order_status.value if order_status else None,
        page=page,
        page_size=page_size,
    )
    return build_paginated_response(
        [OrderResponse.model_validate(o) for o in items], total, page, page_size
    )


@router.get("/mine", response_model=OrderPageResponse)
async def get_my_orders(
    page: int = Query(1, ge=1),
    page_size: int = Query(25, ge=1, le=100),
    db: AsyncSession = Depends(get_db_util),
    current_user: TokenData = Depends(require_any_role)
):
    """Orders placed by the authenticated user"""
    items, total = await OrderService.find_all(
        db, user_id=current_user.user_id, page=page, page_size=page_size
    )
    return build_paginated_response(
        [OrderResponse.model_validate(o) for o in items], total, page, page_size
    )


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order_by_id(
    order_id: int,
    db: AsyncSession = Depends(get_db_util),
    current_user: TokenData = Depends(require_any_role)
):
    """Get an order. Customers can only see their own."""
    order = await OrderService.find_one(db, order_id)
    if current_user.role == Role.CUSTOMER.value and order.user_id != current_user.user_id:
        raise NotFoundError("Order", order_id)
    return order


@router.patch("/{order_id}", response_model=OrderResponse)
async def update_order(
    order_id: int,
    dto: UpdateOrderDto,
    db: AsyncSession = Depends(get_db_util),
    current_user: TokenData = Depends(require_admin_or_staff)
):
    """Update order status or shipping details (Admin/Staff only)"""
    return await OrderService.update(db, order_id, dto)


@router.delete("/{order_id}")
@skip_interceptor
async def delete_order(
    order_id: int,
    db: AsyncSession = Depends(get_db_util),
    current_user: TokenData = Depends(require_admin)
):
    """Soft delete order (Admin only)"""
    await OrderService.remove(db, order_id)
    return {"message": "Order deleted successfully"}

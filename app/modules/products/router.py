"""
Products Router. Shoppers browse enabled products; Admin/Staff manage the catalog.
"""

from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db.engine import get_db_util
from app.core.pagination import build_paginated_response
from app.core.response_interceptor import CustomAPIRoute, skip_interceptor
from app.modules.users.auth import (
    TokenData,
    require_admin,
    require_admin_or_staff,
)
from .service import ProductService
from .schemas import (
    CreateProductDto,
    ProductPageResponse,
    ProductResponse,
    StockAdjustmentDto,
    UpdateProductDto,
)

router = APIRouter(prefix="/products", tags=["products"], route_class=CustomAPIRoute)


@router.post("", response_model=ProductResponse)
async def create_product(
    dto: CreateProductDto,
    db: AsyncSession = Depends(get_db_util),
    current_user: TokenData = Depends(require_admin_or_staff)
):
    """Create a new product (Admin/Staff only)"""
    return await ProductService.create(db, dto)


@router.get("", response_model=ProductPageResponse)
async def get_all_products(
    search: Optional[str] = Query(None, description="Search by name"),
    category_id: Optional[int] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(25, ge=1, le=100),
    db: AsyncSession = Depends(get_db_util),
):
    """List enabled products, newest first"""
    items, total = await ProductService.find_all(
        db, search=search, category_id=category_id, page=page, page_size=page_size
    )
    return build_paginated_response(
        [ProductResponse.model_validate(p) for p in items], total, page, page_size
    )


@router.get("/admin", response_model=ProductPageResponse)
async def get_all_products_admin(
    search: Optional[str] = Query(None, description="Search by name"),
    category_id: Optional[int] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(25, ge=1, le=100),
    db: AsyncSession = Depends(get_db_util),
    current_user: TokenData = Depends(require_admin_or_staff)
):
    """List all products including disabled ones (Admin/Staff only)"""
    items, total = await ProductService.find_all(
        db,
        search=search,
        category_id=category_id,
        include_disabled=True,
        page=page,
        page_size=page_size,
    )
    return build_paginated_response(
        [ProductResponse.model_validate(p) for p in items], total, page, page_size
    )


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product_by_id(product_id: int, db: AsyncSession = Depends(get_db_util)):
    return await ProductService.find_one(db, product_id)


@router.patch("/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: int,
    dto: UpdateProductDto,
    db: AsyncSession = Depends(get_db_util),
    current_user: TokenData = Depends(require_admin_or_staff)
):
    """Update product information (Admin/Staff only)"""
    return await ProductService.update(db, product_id, dto)


@router.post("/{product_id}/stock", response_model=ProductResponse)
async def adjust_product_stock(
    product_id: int,
    dto: StockAdjustmentDto,
    db: AsyncSession = Depends(get_db_util),
    current_user: TokenData = Depends(require_admin_or_staff)
):
    """Restock or deduct stock (Admin/Staff only)"""
    return await ProductService.adjust_stock(db, product_id, dto.delta)


@router.delete("/{product_id}")
@skip_interceptor
async def delete_product(
    product_id: int,
    db: AsyncSession = Depends(get_db_util),
    current_user: TokenData = Depends(require_admin)
):
    """Soft delete product (Admin only)"""
    await ProductService.remove(db, product_id)
    return {"message": "Product deleted successfully"}

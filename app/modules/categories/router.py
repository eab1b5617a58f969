"""
Categories Router. Reads are public; writes need Admin/Staff.
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db.engine import get_db_util
from app.core.response_interceptor import CustomAPIRoute, skip_interceptor
from app.modules.users.auth import TokenData, require_admin, require_admin_or_staff
from .service import CategoryService
from .schemas import CategoryResponse, CreateCategoryDto, UpdateCategoryDto

router = APIRouter(prefix="/categories", tags=["categories"], route_class=CustomAPIRoute)


@router.post("", response_model=CategoryResponse)
async def create_category(
    dto: CreateCategoryDto,
    db: AsyncSession = Depends(get_db_util),
    current_user: TokenData = Depends(require_admin_or_staff)
):
    """Create a category (Admin/Staff only)"""
    return await CategoryService.create(db, dto)


@router.get("", response_model=List[CategoryResponse])
async def get_all_categories(
    parent_id: Optional[int] = Query(None, description="Only children of this category"),
    db: AsyncSession = Depends(get_db_util),
):
    return await CategoryService.find_all(db, parent_id)


@router.get("/{id_or_slug}", response_model=CategoryResponse)
async def get_category(id_or_slug: str, db: AsyncSession = Depends(get_db_util)):
    """Get a category by id or slug"""
    return await CategoryService.find_one(db, id_or_slug)


@router.patch("/{category_id}", response_model=CategoryResponse)
async def update_category(
    category_id: int,
    dto: UpdateCategoryDto,
    db: AsyncSession = Depends(get_db_util),
    current_user: TokenData = Depends(require_admin_or_staff)
):
    return await CategoryService.update(db, category_id, dto)


@router.delete("/{category_id}")
@skip_interceptor
async def delete_category(
    category_id: int,
    db: AsyncSession = Depends(get_db_util),
    current_user: TokenData = Depends(require_admin)
):
    """Soft delete category (Admin only)"""
    await CategoryService.remove(db, category_id)
    return {"message": "Category deleted successfully"}

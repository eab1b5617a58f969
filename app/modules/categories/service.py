"""
CategoryService - CRUD for product categories.
"""

from typing import List, Optional, Union
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ConflictError, NotFoundError, ValidationError
from app.core.utils import utcnow
from .models import Category
from .schemas import CreateCategoryDto, UpdateCategoryDto


class CategoryService:

    @staticmethod
    async def _ensure_unique(
        db: AsyncSession, name: Optional[str], slug: Optional[str], exclude_id: Optional[int] = None
    ) -> None:
        clauses = []
        if name:
            clauses.append(Category.name == name)
        if slug:
            clauses.append(Category.slug == slug)
        if not clauses:
            return

        query = select(Category.id).where(or_(*clauses), Category.deleted_at.is_(None))
        if exclude_id is not None:
            query = query.where(Category.id != exclude_id)
        if await db.scalar(query.limit(1)):
            raise ConflictError("A category with this name or slug already exists")

    @staticmethod
    async def create(db: AsyncSession, dto: CreateCategoryDto) -> Category:
        """
        Raises:
            ConflictError: duplicate name or slug
            NotFoundError: unknown parent category
        """
        await CategoryService._ensure_unique(db, dto.name, dto.slug)
        if dto.parent_id is not None:
            await CategoryService.find_one(db, dto.parent_id)

        category = Category(**dto.model_dump())
        db.add(category)
        await db.flush()
        await db.refresh(category)
        return category

    @staticmethod
    async def find_all(
        db: AsyncSession, parent_id: Optional[int] = None, include_disabled: bool = False
    ) -> List[Category]:
        query = select(Category).where(Category.deleted_at.is_(None))
        if parent_id is not None:
            query = query.where(Category.parent_id == parent_id)
        if not include_disabled:
            query = query.where(Category.is_enabled.is_(True))
        query = query.order_by(Category.name.asc())

        result = await db.execute(query)
        return list(result.scalars().all())

    @staticmethod
    async def find_one(db: AsyncSession, id_or_slug: Union[int, str]) -> Category:
        """
        Look a category up by numeric id or by slug.

        Raises:
            NotFoundError: If category not found or is soft-deleted
        """
        if isinstance(id_or_slug, int) or str(id_or_slug).isdigit():
            condition = Category.id == int(id_or_slug)
        else:
            condition = Category.slug == id_or_slug

        category = await db.scalar(
            select(Category).where(condition, Category.deleted_at.is_(None))
        )
        if not category:
            raise NotFoundError("Category", id_or_slug)
        return category

    @staticmethod
    async def update(db: AsyncSession, category_id: int, dto: UpdateCategoryDto) -> Category:
        category = await CategoryService.find_one(db, category_id)
        update_data = dto.model_dump(exclude_unset=True)

        if update_data.get("parent_id") == category_id:
            raise ValidationError("A category cannot be its own parent")
        await CategoryService._ensure_unique(
            db, update_data.get("name"), update_data.get("slug"), exclude_id=category_id
        )

        for key, value in update_data.items():
            setattr(category, key, value)

        await db.flush()
        await db.refresh(category)
        return category

    @staticmethod
    async def remove(db: AsyncSession, category_id: int) -> None:
        """Soft delete a category."""
        category = await CategoryService.find_one(db, category_id)
        category.deleted_at = utcnow()
        await db.flush()

"""
ProductService - catalog CRUD, stock adjustments and the cursor-paginated
product reader used by the admin dashboard.
"""

import logging
from typing import Dict, List, Optional, Tuple

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ConflictError, NotFoundError
from app.core.pagination import CursorPage, apply_keyset, order_by_keyset, paginate_query
from app.core.utils import utcnow
from app.modules.categories.service import CategoryService

from .schemas import CreateProductDto, ProductListOptions, UpdateProductDto
from .models import Product

logger = logging.getLogger(__name__)


class ProductService:
    """
    Product service. All methods are async and take the request's session.
    """

    @staticmethod
    async def create(db: AsyncSession, dto: CreateProductDto) -> Product:
        """
        Create a new product.

        Raises:
            NotFoundError: If the category does not exist
        """
        if dto.category_id is not None:
            await CategoryService.find_one(db, dto.category_id)

        product = Product(**dto.model_dump())
        db.add(product)
        await db.flush()
        await db.refresh(product)
        return product

    @staticmethod
    async def find_all(
        db: AsyncSession,
        search: Optional[str] = None,
        category_id: Optional[int] = None,
        include_disabled: bool = False,
        page: int = 1,
        page_size: int = 25,
    ) -> Tuple[List[Product], int]:
        """
        Offset-paginated product listing, newest first.

        Args:
            search: Optional case-insensitive match on the product name
            category_id: Optional category filter
            include_disabled: Also list disabled products (back office)

        Returns:
            (products, total_count)
        """
        query = select(Product).where(Product.deleted_at.is_(None))

        if not include_disabled:
            query = query.where(Product.is_enabled.is_(True))
        if category_id is not None:
            query = query.where(Product.category_id == category_id)
        if search:
            query = query.where(Product.name.ilike(f"%{search}%"))

        query = query.order_by(Product.created_at.desc(), Product.id.desc())
        return await paginate_query(db, query, page, page_size)

    @staticmethod
    async def find_one(db: AsyncSession, product_id: int) -> Product:
        """
        Raises:
            NotFoundError: If product not found or is soft-deleted
        """
        product = await db.scalar(
            select(Product).where(Product.id == product_id, Product.deleted_at.is_(None))
        )
        if not product:
            raise NotFoundError("Product", product_id)
        return product

    @staticmethod
    async def update(db: AsyncSession, product_id: int, dto: UpdateProductDto) -> Product:
        """
        Update only the fields present in the DTO.

        Raises:
            NotFoundError: If product or category not found
        """
        product = await ProductService.find_one(db, product_id)
        update_data = dto.model_dump(exclude_unset=True)

        if update_data.get("category_id") is not None:
            await CategoryService.find_one(db, update_data["category_id"])

        if update_data:
            for key, value in update_data.items():
                setattr(product, key, value)
            await db.flush()
            await db.refresh(product)

        return product

    @staticmethod
    async def remove(db: AsyncSession, product_id: int) -> None:
        """Soft delete a product by setting deleted_at."""
        product = await ProductService.find_one(db, product_id)
        product.deleted_at = utcnow()
        await db.flush()

    @staticmethod
    async def adjust_stock(db: AsyncSession, product_id: int, delta: int) -> Product:
        """
        Add delta (negative to deduct) to a product's stock.

        Raises:
            NotFoundError: If product not found
            ConflictError: If the stock would drop below zero
        """
        product = await ProductService.find_one(db, product_id)
        if product.stock + delta < 0:
            raise ConflictError(
                f"Insufficient stock for '{product.name}': {product.stock} available"
            )
        product.stock += delta
        await db.flush()
        await db.refresh(product)
        logger.info(f"Stock of product {product.id} adjusted by {delta} to {product.stock}")
        return product

    @staticmethod
    async def reserve_stock(db: AsyncSession, product: Product, quantity: int) -> None:
        """
        Deduct quantity from stock in one conditional UPDATE that only matches
        while the stored row still holds at least quantity units. The
        in-session product is refreshed afterwards.

        Raises:
            ConflictError: If fewer than quantity units are left in the database
        """
        result = await db.execute(
            update(Product)
            .where(
                Product.id == product.id,
                Product.deleted_at.is_(None),
                Product.stock >= quantity,
            )
            .values(stock=Product.stock - quantity)
            .execution_options(synchronize_session=False)
        )
        await db.refresh(product, ["stock"])
        if result.rowcount != 1:
            raise ConflictError(
                f"Insufficient stock for '{product.name}': {product.stock} available"
            )

    @staticmethod
    async def validate_products_exist(
        db: AsyncSession, product_ids: List[int]
    ) -> Dict[int, Product]:
        """
        Validate that all products exist and return them keyed by id.
        Single batched query.

        Raises:
            NotFoundError: If any product is missing or soft-deleted
        """
        if not product_ids:
            return {}

        result = await db.execute(
            select(Product).where(
                Product.id.in_(product_ids), Product.deleted_at.is_(None)
            )
        )
        products = result.scalars().all()

        found_ids = {p.id for p in products}
        missing_ids = set(product_ids) - found_ids
        if missing_ids:
            raise NotFoundError("Products", sorted(missing_ids))

        return {p.id: p for p in products}

    @staticmethod
    async def list_products(
        db: AsyncSession, options: Optional[ProductListOptions] = None
    ) -> CursorPage[Product]:
        """
        Cursor-paginated product reader.

        Rows are ordered by created_at (options.sort_order) with id as
        tiebreak. options.start_after is the id of the last row of the
        previous page.

        Raises:
            NotFoundError: If the start_after row does not exist
        """
        options = options or ProductListOptions()
        descending = options.sort_order == "desc"

        query = select(Product).where(Product.deleted_at.is_(None))
        if not options.fetch_all:
            query = query.where(Product.is_enabled.is_(options.is_enabled))
        if options.category_id is not None:
            query = query.where(Product.category_id == options.category_id)
        if options.featured is not None:
            query = query.where(Product.featured.is_(options.featured))

        if options.start_after is not None:
            anchor = await db.get(Product, options.start_after)
            if anchor is None:
                raise NotFoundError("Product", options.start_after)
            query = apply_keyset(
                query, Product.created_at, Product.id, anchor.created_at, anchor.id, descending
            )

        query = order_by_keyset(query, Product.created_at, Product.id, descending)
        result = await db.execute(query.limit(options.limit))
        products = list(result.scalars().all())

        return CursorPage(
            items=products,
            last_cursor=products[-1].id if products else None,
        )

"""
OrderService - checkout, order management and the cursor-paginated order
reader used by the admin dashboard.
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Iterable, List, Optional, Set, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.exceptions import ConflictError, NotFoundError, ValidationError
from app.core.pagination import CursorPage, apply_keyset, order_by_keyset, paginate_query
from app.core.utils import round_money, to_naive_utc, utcnow
from app.modules.products.service import ProductService

from .models import Order, OrderItem
from .schemas import CreateOrderDto, OrderListOptions, UpdateOrderDto

logger = logging.getLogger(__name__)

SORTABLE_COLUMNS = {
    "created_at": Order.created_at,
    "grand_total": Order.grand_total,
}


class OrderService:
    """
    Order service. All methods are async and take the request's session.
    """

    @staticmethod
    async def _load(db: AsyncSession, order_id: int) -> Optional[Order]:
        query = (
            select(Order)
            .where(Order.id == order_id, Order.deleted_at.is_(None))
            .options(selectinload(Order.items))
            .execution_options(populate_existing=True)
        )
        return await db.scalar(query)

    @staticmethod
    async def create(
        db: AsyncSession, dto: CreateOrderDto, user_id: Optional[int] = None
    ) -> Order:
        """
        Place an order.

        Prices and names are snapshotted from the catalog and the ordered
        quantities are deducted from stock in the same unit of work.

        Args:
            dto: Checkout payload
            user_id: Owner of the order, None for guest checkout

        Raises:
            NotFoundError: If any product does not exist
            ValidationError: If a product is disabled or discounts exceed prices
            ConflictError: If any product has insufficient stock
        """
        products = await ProductService.validate_products_exist(
            db, [item.product_id for item in dto.items]
        )

        order_items: List[OrderItem] = []
        subtotal = Decimal("0")
        for item in dto.items:
            product = products[item.product_id]
            if not product.is_enabled:
                raise ValidationError(f"Product '{product.name}' is not available")
            if product.stock < item.quantity:
                raise ConflictError(
                    f"Insufficient stock for '{product.name}': {product.stock} available"
                )
            if item.item_discount > product.price:
                raise ValidationError(f"Discount exceeds the price of '{product.name}'")

            final_unit_price = product.price - item.item_discount
            line_item_total = round_money(final_unit_price * item.quantity)
            subtotal += line_item_total

            await ProductService.reserve_stock(db, product, item.quantity)
            order_items.append(
                OrderItem(
                    product_id=product.id,
                    product_name=product.name,
                    quantity=item.quantity,
                    unit_price=product.price,
                    item_discount=item.item_discount,
                    final_unit_price=final_unit_price,
                    line_item_total=line_item_total,
                )
            )

        if dto.discount_amount > subtotal:
            raise ValidationError("Order discount exceeds the order subtotal")

        grand_total = subtotal - dto.discount_amount + dto.shipping_cost + dto.tax_amount
        address = dto.shipping_address

        order = Order(
            user_id=user_id,
            customer_email=dto.customer_email,
            shipping_name=address.name,
            shipping_phone=address.phone,
            shipping_address=address.address,
            shipping_city=address.city,
            shipping_state=address.state,
            shipping_zip_code=address.zip_code,
            shipping_country=address.country,
            subtotal=round_money(subtotal),
            discount_amount=dto.discount_amount,
            shipping_cost=dto.shipping_cost,
            tax_amount=dto.tax_amount,
            grand_total=round_money(grand_total),
            payment_method=dto.payment_method,
            transaction_id=dto.transaction_id,
            notes=dto.notes,
            items=order_items,
        )
        db.add(order)
        await db.flush()

        logger.info(
            f"Order {order.id} placed by {'user ' + str(user_id) if user_id else 'guest'}: "
            f"{len(order_items)} items, total {order.grand_total}"
        )
        return await OrderService._load(db, order.id)

    @staticmethod
    async def find_one(db: AsyncSession, order_id: int) -> Order:
        """
        Raises:
            NotFoundError: If order not found or is soft-deleted
        """
        order = await OrderService._load(db, order_id)
        if not order:
            raise NotFoundError("Order", order_id)
        return order

    @staticmethod
    async def find_all(
        db: AsyncSession,
        user_id: Optional[int] = None,
        order_status: Optional[str] = None,
        page: int = 1,
        page_size: int = 25,
    ) -> Tuple[List[Order], int]:
        """Offset-paginated order listing, newest first."""
        query = (
            select(Order)
            .where(Order.deleted_at.is_(None))
            .options(selectinload(Order.items))
        )
        if user_id is not None:
            query = query.where(Order.user_id == user_id)
        if order_status:
            query = query.where(Order.order_status == order_status)

        query = query.order_by(Order.created_at.desc(), Order.id.desc())
        return await paginate_query(db, query, page, page_size)

    @staticmethod
    async def update(db: AsyncSession, order_id: int, dto: UpdateOrderDto) -> Order:
        """
        Update status, payment and shipping details.

        Raises:
            NotFoundError: If order not found
        """
        order = await OrderService.find_one(db, order_id)
        update_data = dto.model_dump(mode="json", exclude_unset=True)

        for key, value in update_data.items():
            setattr(order, key, value)

        if update_data:
            await db.flush()
            logger.info(f"Order {order_id} updated: {sorted(update_data)}")

        return await OrderService._load(db, order_id)

    @staticmethod
    async def remove(db: AsyncSession, order_id: int) -> None:
        """Soft delete an order."""
        order = await OrderService.find_one(db, order_id)
        order.deleted_at = utcnow()
        await db.flush()

    @staticmethod
    async def list_orders(
        db: AsyncSession, options: Optional[OrderListOptions] = None
    ) -> CursorPage[Order]:
        """
        Cursor-paginated order reader.

        Orders are filtered by the given options (created_at range inclusive)
        and ordered by options.sort_by with id as tiebreak. Items are
        eager-loaded.

        Raises:
            NotFoundError: If the start_after order does not exist
        """
        options = options or OrderListOptions()
        sort_column = SORTABLE_COLUMNS[options.sort_by]
        descending = options.sort_order == "desc"

        query = (
            select(Order)
            .where(Order.deleted_at.is_(None))
            .options(selectinload(Order.items))
        )
        if options.user_id is not None:
            query = query.where(Order.user_id == options.user_id)
        if options.order_status:
            query = query.where(Order.order_status == options.order_status)
        if options.payment_status:
            query = query.where(Order.payment_status == options.payment_status)
        if options.customer_email:
            query = query.where(Order.customer_email == options.customer_email)
        if options.start_date is not None:
            query = query.where(Order.created_at >= to_naive_utc(options.start_date))
        if options.end_date is not None:
            query = query.where(Order.created_at <= to_naive_utc(options.end_date))

        if options.start_after is not None:
            anchor = await db.get(Order, options.start_after)
            if anchor is None:
                raise NotFoundError("Order", options.start_after)
            query = apply_keyset(
                query,
                sort_column,
                Order.id,
                getattr(anchor, options.sort_by),
                anchor.id,
                descending,
            )

        query = order_by_keyset(query, sort_column, Order.id, descending)
        result = await db.execute(query.limit(options.limit))
        orders = list(result.scalars().all())

        return CursorPage(
            items=orders,
            last_cursor=orders[-1].id if orders else None,
        )

    @staticmethod
    async def find_customers_with_orders_before(
        db: AsyncSession, user_ids: Iterable[int], before: datetime
    ) -> Set[int]:
        """
        Return the users among user_ids who placed at least one order
        strictly before the given instant.
        """
        user_ids = set(user_ids)
        if not user_ids:
            return set()

        query = (
            select(Order.user_id)
            .where(
                Order.user_id.in_(user_ids),
                Order.created_at < to_naive_utc(before),
                Order.deleted_at.is_(None),
            )
            .distinct()
        )
        result = await db.execute(query)
        return set(result.scalars().all())

"""
Builders for orders, items and products used across the test suite.
"""

from datetime import datetime
from decimal import Decimal

from app.modules.categories.models import Category
from app.modules.orders.models import Order, OrderItem
from app.modules.products.models import Product
from app.modules.users.models import Role, User


# In-memory builders for the aggregation tests. Nothing here touches a session.

def build_order(
    order_id: int,
    grand_total,
    created_at: datetime,
    user_id=None,
    order_status: str = "Pending",
    payment_method="Card",
    items=(),
) -> Order:
    order = Order(
        id=order_id,
        user_id=user_id,
        customer_email=f"buyer{order_id}@example.com",
        shipping_name="Buyer",
        shipping_address="1 Main St",
        shipping_city="Springfield",
        shipping_zip_code="12345",
        subtotal=Decimal(str(grand_total)),
        grand_total=Decimal(str(grand_total)),
        payment_method=payment_method,
        payment_status="Paid",
        order_status=order_status,
        created_at=created_at,
    )
    order.items = list(items)
    return order


def build_item(product_id: int, product_name: str, quantity: int, line_total) -> OrderItem:
    line_total = Decimal(str(line_total))
    return OrderItem(
        product_id=product_id,
        product_name=product_name,
        quantity=quantity,
        unit_price=line_total / quantity,
        item_discount=Decimal("0"),
        final_unit_price=line_total / quantity,
        line_item_total=line_total,
    )


def build_product(product_id: int, stock: int, category_id=None, is_enabled=True) -> Product:
    return Product(
        id=product_id,
        name=f"Product {product_id}",
        price=Decimal("10.00"),
        stock=stock,
        category_id=category_id,
        is_enabled=is_enabled,
        featured=False,
    )


# Persisted seeders for service and router tests

async def seed_category(db, name="Shoes", slug="shoes") -> Category:
    category = Category(name=name, slug=slug)
    db.add(category)
    await db.flush()
    return category


async def seed_user(db, username="shopper", role=Role.CUSTOMER) -> User:
    user = User(username=username, password="x", name=username, role=role)
    db.add(user)
    await db.flush()
    return user


async def seed_product(db, name="Sneaker", price="50.00", stock=20, category_id=None,
                       is_enabled=True, created_at=None) -> Product:
    product = Product(
        name=name,
        price=Decimal(price),
        stock=stock,
        category_id=category_id,
        is_enabled=is_enabled,
    )
    if created_at is not None:
        product.created_at = created_at
    db.add(product)
    await db.flush()
    return product


async def seed_order(db, grand_total, created_at, user_id=None, order_status="Pending",
                     payment_method="Card", items=()) -> Order:
    order = build_order(
        None, grand_total, created_at, user_id=user_id, order_status=order_status,
        payment_method=payment_method, items=items,
    )
    db.add(order)
    await db.flush()
    return order

"""
Pagination utilities shared by all services.

Two flavours:
- Offset pagination (page / page_size) for admin list endpoints.
- Cursor pagination ("start after row X") for readers that must walk a whole
  collection in a stable order, e.g. the dashboard aggregation.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Generic, List, Optional, Tuple, TypeVar

from sqlalchemy import and_, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.selectable import Select

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Upper bound on rows per round trip for the cursor readers
MAX_CURSOR_PAGE_SIZE = 1000


async def paginate_query(
    db: AsyncSession,
    query: Select,
    page: int = 1,
    page_size: int = 25,
) -> Tuple[List[Any], int]:
    """
    Apply offset-based pagination to a SQLAlchemy query.

    IMPORTANT: Query should already have:
    - WHERE clauses (including soft-delete filters)
    - Eager loading (selectinload) to prevent N+1 queries
    - ORDER BY clause

    Args:
        db: SQLAlchemy async session
        query: Base query with filters and ordering already applied
        page: Page number (1-indexed, default 1)
        page_size: Items per page (default 25)

    Returns:
        Tuple of (paginated_items, total_count)
    """
    # Count over a subquery so every WHERE clause and join is preserved
    count_query = select(func.count()).select_from(query.order_by(None).subquery())
    total = (await db.execute(count_query)).scalar() or 0

    offset = (page - 1) * page_size
    result = await db.execute(query.offset(offset).limit(page_size))
    items = result.scalars().unique().all()

    return list(items), total


def build_paginated_response(
    items: List[Any],
    total: int,
    page: int,
    page_size: int,
) -> dict:
    """
    Build a standardized paginated response dictionary.

    Returns:
        Dict with keys: items, total, page, page_size, total_pages, has_more
    """
    total_pages = (total + page_size - 1) // page_size if total > 0 else 0
    has_more = page < total_pages

    return {
        "items": items,
        "total": total,
        "page": page,
        "page_size": page_size,
        "total_pages": total_pages,
        "has_more": has_more,
    }


@dataclass
class CursorPage(Generic[T]):
    """
    One page of a cursor-paginated read.

    last_cursor is the id of the last row in items (None for an empty page);
    pass it back as start_after to read the next page.
    """

    items: List[T] = field(default_factory=list)
    last_cursor: Optional[int] = None


def apply_keyset(
    query: Select,
    sort_column,
    id_column,
    anchor_value: Any,
    anchor_id: int,
    descending: bool = False,
) -> Select:
    """
    Restrict a query to rows strictly after the anchor row in
    (sort_column, id_column) order.

    The primary key breaks ties so rows sharing a sort value are neither
    skipped nor repeated across pages.
    """
    if descending:
        predicate = or_(
            sort_column < anchor_value,
            and_(sort_column == anchor_value, id_column < anchor_id),
        )
    else:
        predicate = or_(
            sort_column > anchor_value,
            and_(sort_column == anchor_value, id_column > anchor_id),
        )
    return query.where(predicate)


def order_by_keyset(query: Select, sort_column, id_column, descending: bool = False) -> Select:
    if descending:
        return query.order_by(sort_column.desc(), id_column.desc())
    return query.order_by(sort_column.asc(), id_column.asc())


async def collect_all_pages(
    fetch_page: Callable[[int, Optional[int]], Awaitable[CursorPage[T]]],
    page_size: int,
) -> List[T]:
    """
    Read every page from a cursor-paginated reader, one round trip at a time.

    Stops when a page is empty, shorter than page_size, or carries no cursor.
    Errors raised by fetch_page propagate and nothing collected so far is
    returned.

    Args:
        fetch_page: async callable (limit, start_after) -> CursorPage
        page_size: rows requested per round trip

    Returns:
        All rows in reader order
    """
    rows: List[T] = []
    cursor: Optional[int] = None

    while True:
        page = await fetch_page(page_size, cursor)
        if not page.items:
            break
        rows.extend(page.items)
        cursor = page.last_cursor
        if cursor is None or len(page.items) < page_size:
            break

    logger.debug(f"Collected {len(rows)} rows in pages of {page_size}")
    return rows

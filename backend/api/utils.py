"""
Shared API utility functions.
"""

from math import ceil
from typing import Any

from sqlalchemy import Select, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession


def escape_like(value: str) -> str:
    """Escape LIKE wildcards for safe use in SQL LIKE/ILIKE patterns."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def search_filter(columns: list[Any], search: str):
    """OR of case-insensitive substring matches across the given columns."""
    pattern = f"%{escape_like(search)}%"
    return or_(*(column.ilike(pattern, escape="\\") for column in columns))


async def paginate(db: AsyncSession, query: Select, page: int, page_size: int) -> tuple[list, int]:
    """
    Run a select with offset pagination.

    Returns:
        (items on the requested page, total matching rows)
    """
    count_query = select(func.count()).select_from(query.order_by(None).subquery())
    total = (await db.execute(count_query)).scalar_one()

    offset = (page - 1) * page_size
    result = await db.execute(query.offset(offset).limit(page_size))
    return list(result.scalars().unique().all()), total


def total_pages(total: int, page_size: int) -> int:
    return ceil(total / page_size) if total > 0 else 0

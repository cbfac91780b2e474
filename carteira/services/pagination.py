"""Offset pagination for searchable list queries."""

import math
from typing import Any

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession


def page_offset(page: int, page_size: int) -> int:
    return (max(page, 1) - 1) * page_size


def count_pages(total: int, page_size: int, *, minimum: int = 0) -> int:
    return max(minimum, math.ceil(total / page_size))


async def count_rows(db: AsyncSession, stmt: Select) -> int:
    count_query = select(func.count()).select_from(stmt.order_by(None).subquery())
    total_result = await db.execute(count_query)
    return total_result.scalar() or 0


async def paginate(
    db: AsyncSession,
    stmt: Select,
    page: int,
    page_size: int,
) -> tuple[list[Any], int]:
    """Return one page of ``stmt`` scalars plus the total match count."""
    total = await count_rows(db, stmt)
    result = await db.execute(stmt.limit(page_size).offset(page_offset(page, page_size)))
    return list(result.scalars().unique().all()), total

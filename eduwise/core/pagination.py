from typing import Any, Callable, List, Tuple

from fastapi import Query
from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from eduwise.core.schemas import PageMeta, PaginatedResponse

DEFAULT_LIMIT = 20
MAX_LIMIT = 100


class PageParams:
    """Query dependency: ?page=1&limit=20."""

    def __init__(
        self,
        page: int = Query(1, ge=1, description="1-based page number"),
        limit: int = Query(DEFAULT_LIMIT, ge=1, le=MAX_LIMIT, description="Items per page"),
    ) -> None:
        self.page = page
        self.limit = limit


def page_meta(total: int, page: int, limit: int) -> PageMeta:
    total_pages = (total + limit - 1) // limit if limit else 0
    return PageMeta(total=total, page=page, limit=limit, total_pages=total_pages)


async def fetch_page(db: AsyncSession, stmt: Select, params: PageParams) -> Tuple[List[Any], int]:
    """Run stmt for one page; returns (rows, total rows matching the filters)."""
    count_stmt = select(func.count()).select_from(stmt.order_by(None).subquery())
    total = (await db.execute(count_stmt)).scalar_one()
    offset = (params.page - 1) * params.limit
    result = await db.execute(stmt.offset(offset).limit(params.limit))
    return list(result.scalars().all()), total


async def paginate(
    db: AsyncSession,
    stmt: Select,
    params: PageParams,
    to_response: Callable[[Any], Any],
) -> PaginatedResponse:
    rows, total = await fetch_page(db, stmt, params)
    return PaginatedResponse(
        data=[to_response(r) for r in rows],
        meta=page_meta(total, params.page, params.limit),
    )

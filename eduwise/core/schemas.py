"""Envelope shared by every list endpoint: {data, meta: {total, page, limit, totalPages}}."""
from typing import Generic, List, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class PageMeta(BaseModel):
    total: int
    page: int
    limit: int
    total_pages: int = Field(..., alias="totalPages")

    class Config:
        populate_by_name = True


class PaginatedResponse(BaseModel, Generic[T]):
    data: List[T]
    meta: PageMeta

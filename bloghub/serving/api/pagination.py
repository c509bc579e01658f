"""
Pagination Envelope

List endpoints answer with ``{"data": [...], "pagination": {...}}``. Pages are
1-indexed and never clamped: a page past the end returns an empty ``data``.
"""

import math
from typing import Generic, List, Sequence, TypeVar

from pydantic import Field

from bloghub.analytics.schemas import CamelModel

T = TypeVar("T")


class PaginationMeta(CamelModel):
    """Pagination metadata"""
    page: int
    limit: int
    total: int
    total_pages: int


class Page(CamelModel, Generic[T]):
    """Paginated list response"""
    data: List[T] = Field(default_factory=list)
    pagination: PaginationMeta


def page_offset(page: int, limit: int) -> int:
    """Row offset of the first item on ``page``."""
    return (page - 1) * limit


def total_pages(total: int, limit: int) -> int:
    """ceil(total / limit)"""
    return math.ceil(total / limit) if limit > 0 else 0


def paginate(items: Sequence[T], page: int, limit: int, total: int) -> Page[T]:
    """Wrap one page of items with its pagination metadata."""
    return Page(
        data=list(items),
        pagination=PaginationMeta(
            page=page,
            limit=limit,
            total=total,
            total_pages=total_pages(total, limit),
        ),
    )

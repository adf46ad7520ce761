"""Offset pagination shared by list endpoints."""
import math
from dataclasses import dataclass
from typing import List, Optional, Tuple

from ninja import Schema

DEFAULT_LIMIT = 10
MAX_LIMIT = 100


@dataclass(frozen=True)
class PageMeta:
    total: int
    page: int
    limit: int
    total_pages: int
    has_next: bool
    has_prev: bool


class PageMetaOut(Schema):
    total: int
    page: int
    limit: int
    total_pages: int
    has_next: bool
    has_prev: bool


def clamp(page: Optional[int], limit: Optional[int], max_limit: int = MAX_LIMIT) -> Tuple[int, int]:
    """Normalize page/limit query values: both at least 1, limit capped."""
    page = max(int(page or 1), 1)
    limit = min(max(int(limit or DEFAULT_LIMIT), 1), max_limit)
    return page, limit


def paginate(queryset, page: Optional[int] = 1, limit: Optional[int] = DEFAULT_LIMIT,
             max_limit: int = MAX_LIMIT) -> Tuple[List, PageMeta]:
    """
    Slice a queryset (or list) into one page.

    Returns the rows of the requested page and the pagination metadata.
    """
    page, limit = clamp(page, limit, max_limit)
    total = len(queryset) if isinstance(queryset, list) else queryset.count()
    offset = (page - 1) * limit
    rows = list(queryset[offset:offset + limit])
    total_pages = math.ceil(total / limit) if total else 0
    meta = PageMeta(
        total=total,
        page=page,
        limit=limit,
        total_pages=total_pages,
        has_next=page < total_pages,
        has_prev=page > 1,
    )
    return rows, meta

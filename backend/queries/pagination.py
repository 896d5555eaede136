"""Offset pagination for transaction listing."""

from __future__ import annotations

import math
from dataclasses import dataclass


DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10


@dataclass(frozen=True, slots=True)
class PageWindow:
    page: int
    limit: int
    offset: int
    total: int
    total_pages: int


def normalize_page(page: int | None) -> int:
    return page if page is not None and page > 0 else DEFAULT_PAGE


def normalize_limit(limit: int | None) -> int:
    return limit if limit is not None and limit > 0 else DEFAULT_LIMIT


def paginate(total: int, page: int | None = None, limit: int | None = None) -> PageWindow:
    """Return the offset window and page-count metadata.

    Absent or non-positive ``page``/``limit`` fall back to 1 and 10.
    """

    resolved_page = normalize_page(page)
    resolved_limit = normalize_limit(limit)
    total = max(total, 0)
    return PageWindow(
        page=resolved_page,
        limit=resolved_limit,
        offset=(resolved_page - 1) * resolved_limit,
        total=total,
        total_pages=math.ceil(total / resolved_limit),
    )

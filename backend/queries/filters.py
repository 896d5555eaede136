"""Compile sparse transaction filters into a user-scoped predicate."""

from __future__ import annotations

import calendar
from datetime import datetime, timezone
from uuid import UUID

from shared.models import TransactionFilters, TransactionPredicate


_END_OF_DAY_MICROSECOND = 999000


def month_bounds(year: int, month: int) -> tuple[datetime, datetime]:
    """Return the closed interval covering one calendar month (UTC)."""

    last_day = calendar.monthrange(year, month)[1]
    start = datetime(year, month, 1, tzinfo=timezone.utc)
    end = datetime(year, month, last_day, 23, 59, 59, _END_OF_DAY_MICROSECOND, tzinfo=timezone.utc)
    return start, end


def year_bounds(year: int) -> tuple[datetime, datetime]:
    """Return the closed interval covering one calendar year (UTC)."""

    start = datetime(year, 1, 1, tzinfo=timezone.utc)
    end = datetime(year, 12, 31, 23, 59, 59, _END_OF_DAY_MICROSECOND, tzinfo=timezone.utc)
    return start, end


def compile_transaction_filters(filters: TransactionFilters | None, user_id: UUID) -> TransactionPredicate:
    """Return the conjunctive predicate for ``filters`` scoped to ``user_id``.

    - ``search`` is a case-insensitive substring match on the title; blank
      text means no filter.
    - ``month`` and ``year`` together restrict to that month, ``year`` alone
      to that year, ``month`` alone restricts nothing.
    - ``page``/``limit`` are ignored here; see ``backend.queries.pagination``.
    """

    if filters is None:
        return TransactionPredicate(user_id=user_id)

    search = filters.search if filters.search and filters.search.strip() else None

    date_from: datetime | None = None
    date_to: datetime | None = None
    if filters.year is not None and filters.month is not None:
        date_from, date_to = month_bounds(filters.year, filters.month)
    elif filters.year is not None:
        date_from, date_to = year_bounds(filters.year)

    return TransactionPredicate(
        user_id=user_id,
        title_contains=search,
        type=filters.type,
        category_id=filters.category_id,
        date_from=date_from,
        date_to=date_to,
    )

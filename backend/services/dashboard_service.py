"""Dashboard aggregates: month totals, recent activity and category usage."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal
from uuid import UUID

from backend.queries.filters import compile_transaction_filters
from backend.repositories.categories_repository import CategoriesRepository
from backend.repositories.transactions_repository import TransactionsRepository
from backend.reporting import (
    MonthlyReportCategoryRow,
    MonthlyReportData,
    MonthlyReportTransactionRow,
    generate_monthly_report_pdf,
)
from shared.models import (
    Category,
    CategoryStat,
    DashboardSummary,
    Transaction,
    TransactionFilters,
    TransactionType,
)


RECENT_TRANSACTIONS_LIMIT = 5
CATEGORY_STATS_LIMIT = 5
UNCATEGORIZED_LABEL = "Uncategorized"


def _resolve_period(month: int | None, year: int | None, today: date | None) -> tuple[int, int]:
    reference = today or datetime.now(timezone.utc).date()
    return month or reference.month, year or reference.year


def _sum(transactions: list[Transaction], kind: TransactionType) -> Decimal:
    return sum((row.amount for row in transactions if row.type == kind), Decimal("0"))


@dataclass(slots=True)
class DashboardService:
    transactions_repository: TransactionsRepository
    categories_repository: CategoriesRepository

    def _month_transactions(self, user_id: UUID, month: int, year: int) -> list[Transaction]:
        predicate = compile_transaction_filters(TransactionFilters(month=month, year=year), user_id)
        return self.transactions_repository.find_transactions(predicate)

    def _category_stats(self, user_id: UUID, categories: list[Category]) -> list[CategoryStat]:
        all_transactions = self.transactions_repository.find_transactions(
            compile_transaction_filters(None, user_id)
        )
        counts: dict[UUID, int] = defaultdict(int)
        totals: dict[UUID, Decimal] = defaultdict(lambda: Decimal("0"))
        for row in all_transactions:
            if row.category_id is None:
                continue
            counts[row.category_id] += 1
            totals[row.category_id] += row.amount

        return [
            CategoryStat(category=category, count=counts[category.id], total=totals[category.id])
            for category in categories[:CATEGORY_STATS_LIMIT]
        ]

    def summary(
        self,
        user_id: UUID,
        month: int | None = None,
        year: int | None = None,
        *,
        today: date | None = None,
    ) -> DashboardSummary:
        """Return month income/expense/balance plus recent transactions and category usage.

        Month and year default to the current UTC month.
        """

        month, year = _resolve_period(month, year, today)
        month_rows = self._month_transactions(user_id, month, year)
        income = _sum(month_rows, TransactionType.INCOME)
        expense = _sum(month_rows, TransactionType.EXPENSE)

        categories = self.categories_repository.list_categories(user_id)
        by_id = {category.id: category for category in categories}
        recent = self.transactions_repository.find_transactions(
            compile_transaction_filters(None, user_id),
            limit=RECENT_TRANSACTIONS_LIMIT,
        )

        return DashboardSummary(
            month=month,
            year=year,
            income=income,
            expense=expense,
            balance=income - expense,
            recent_transactions=[
                row.model_copy(update={"category": by_id.get(row.category_id)}) if row.category_id else row
                for row in recent
            ],
            categories=self._category_stats(user_id, categories),
        )

    def report_pdf(
        self,
        user_id: UUID,
        month: int | None = None,
        year: int | None = None,
        *,
        today: date | None = None,
    ) -> tuple[bytes, MonthlyReportData]:
        """Render the month report and return the PDF bytes with the data used."""

        month, year = _resolve_period(month, year, today)
        month_rows = self._month_transactions(user_id, month, year)
        names = {category.id: category.name for category in self.categories_repository.list_categories(user_id)}

        expense_by_category: dict[str, Decimal] = defaultdict(lambda: Decimal("0"))
        for row in month_rows:
            if row.type != TransactionType.EXPENSE:
                continue
            label = names.get(row.category_id, UNCATEGORIZED_LABEL) if row.category_id else UNCATEGORIZED_LABEL
            expense_by_category[label] += row.amount

        income = _sum(month_rows, TransactionType.INCOME)
        expense = _sum(month_rows, TransactionType.EXPENSE)
        data = MonthlyReportData(
            period_label=f"{year:04d}-{month:02d}",
            income=income,
            expense=expense,
            balance=income - expense,
            count=len(month_rows),
            categories=[
                MonthlyReportCategoryRow(name=name, amount=amount)
                for name, amount in expense_by_category.items()
                if amount > 0
            ],
            transactions=[
                MonthlyReportTransactionRow(
                    date=row.date.date().isoformat(),
                    title=row.title,
                    category=names.get(row.category_id, UNCATEGORIZED_LABEL) if row.category_id else UNCATEGORIZED_LABEL,
                    type=row.type.value,
                    amount=row.amount,
                )
                for row in month_rows
            ],
        )
        return generate_monthly_report_pdf(data), data

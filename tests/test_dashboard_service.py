"""Tests for dashboard aggregates and the monthly PDF report."""

from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import Decimal

from backend.reporting import MonthlyReportCategoryRow, MonthlyReportData, generate_monthly_report_pdf
from backend.reporting.monthly_report import summarize_categories
from shared.models import TransactionType
from tests.fakes import add_category, add_transaction, build_services, register_user


def _seed():
    services = build_services()
    alice = register_user(services).user
    bob = register_user(services, name="Bob", email="bob@example.com").user
    food = add_category(services, alice.id, "Food")
    salary = add_category(services, alice.id, "Salary")

    add_transaction(
        services,
        alice.id,
        title="Paycheck",
        amount="1000.00",
        type=TransactionType.INCOME,
        date=datetime(2024, 3, 1, tzinfo=timezone.utc),
        category_id=salary.id,
    )
    add_transaction(
        services, alice.id, title="Groceries", amount="200.00", date=datetime(2024, 3, 5, tzinfo=timezone.utc),
        category_id=food.id,
    )
    add_transaction(services, alice.id, title="Taxi", amount="50.00", date=datetime(2024, 3, 20, tzinfo=timezone.utc))
    add_transaction(
        services, alice.id, title="Old groceries", amount="80.00", date=datetime(2024, 2, 10, tzinfo=timezone.utc),
        category_id=food.id,
    )
    add_transaction(services, bob.id, title="Bob rent", amount="999.00", date=datetime(2024, 3, 2, tzinfo=timezone.utc))
    return services, services.operations.dashboard_service, alice, food, salary


def test_summary_totals_for_requested_month() -> None:
    _, service, alice, _, _ = _seed()

    summary = service.summary(alice.id, month=3, year=2024)

    assert (summary.month, summary.year) == (3, 2024)
    assert summary.income == Decimal("1000.00")
    assert summary.expense == Decimal("250.00")
    assert summary.balance == Decimal("750.00")


def test_summary_defaults_to_current_month() -> None:
    _, service, alice, _, _ = _seed()

    summary = service.summary(alice.id, today=date(2024, 2, 15))

    assert (summary.month, summary.year) == (2, 2024)
    assert summary.expense == Decimal("80.00")
    assert summary.income == Decimal("0")


def test_summary_recent_transactions_are_own_and_most_recent_first() -> None:
    _, service, alice, food, _ = _seed()

    summary = service.summary(alice.id, month=3, year=2024)

    assert [row.title for row in summary.recent_transactions] == ["Taxi", "Groceries", "Paycheck", "Old groceries"]
    assert summary.recent_transactions[1].category == food


def test_summary_category_stats_cover_all_transactions() -> None:
    _, service, alice, _, _ = _seed()

    stats = {stat.category.name: stat for stat in service.summary(alice.id, month=3, year=2024).categories}

    assert stats["Food"].count == 2
    assert stats["Food"].total == Decimal("280.00")
    assert stats["Salary"].count == 1


def test_report_pdf_contains_month_data() -> None:
    _, service, alice, _, _ = _seed()

    pdf_bytes, data = service.report_pdf(alice.id, month=3, year=2024)

    assert pdf_bytes.startswith(b"%PDF")
    assert data.period_label == "2024-03"
    assert data.count == 3
    assert data.balance == Decimal("750.00")
    assert {row.name: row.amount for row in data.categories} == {
        "Food": Decimal("200.00"),
        "Uncategorized": Decimal("50.00"),
    }
    assert [row.title for row in data.transactions] == ["Taxi", "Groceries", "Paycheck"]


def test_report_pdf_renders_empty_month() -> None:
    pdf_bytes = generate_monthly_report_pdf(
        MonthlyReportData(
            period_label="2024-07",
            income=Decimal("0"),
            expense=Decimal("0"),
            balance=Decimal("0"),
            count=0,
        )
    )

    assert pdf_bytes.startswith(b"%PDF")


def test_summarize_categories_folds_small_slices_into_other() -> None:
    rows = [MonthlyReportCategoryRow(name=f"C{index}", amount=Decimal(index + 1)) for index in range(10)]

    summarized = summarize_categories(rows)

    assert len(summarized) == 9
    assert summarized[0].name == "C9"
    assert summarized[-1] == MonthlyReportCategoryRow(name="Other", amount=Decimal("3"))

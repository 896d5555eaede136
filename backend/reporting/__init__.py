"""Reporting utilities for backend-generated documents."""

from backend.reporting.monthly_report import (
    MonthlyReportCategoryRow,
    MonthlyReportData,
    MonthlyReportTransactionRow,
    generate_monthly_report_pdf,
)

__all__ = [
    "MonthlyReportCategoryRow",
    "MonthlyReportData",
    "MonthlyReportTransactionRow",
    "generate_monthly_report_pdf",
]

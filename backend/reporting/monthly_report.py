"""Generate the monthly dashboard report PDF."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from io import BytesIO
from datetime import date

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.pdfgen.canvas import Canvas
from reportlab.platypus import Image, PageBreak, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle


TRANSACTIONS_DISPLAY_LIMIT = 250
_PIE_SLICES = 8


@dataclass(slots=True)
class MonthlyReportCategoryRow:
    """Expense total for one category."""

    name: str
    amount: Decimal


@dataclass(slots=True)
class MonthlyReportTransactionRow:
    date: str
    title: str
    category: str
    type: str
    amount: Decimal


@dataclass(slots=True)
class MonthlyReportData:
    """Input payload for monthly report rendering."""

    period_label: str
    income: Decimal
    expense: Decimal
    balance: Decimal
    count: int
    categories: list[MonthlyReportCategoryRow] = field(default_factory=list)
    transactions: list[MonthlyReportTransactionRow] = field(default_factory=list)


def format_amount(value: Decimal) -> str:
    return f"{value.quantize(Decimal('0.01'), rounding=ROUND_HALF_UP):,.2f}"


def _autopct_threshold(pct: float) -> str:
    return f"{pct:.1f}%" if pct >= 3 else ""


def summarize_categories(categories: list[MonthlyReportCategoryRow]) -> list[MonthlyReportCategoryRow]:
    """Keep the largest slices and fold the remainder into one "Other" row."""

    ordered = sorted(categories, key=lambda row: row.amount, reverse=True)
    top_rows = ordered[:_PIE_SLICES]
    other_total = sum((row.amount for row in ordered[_PIE_SLICES:]), Decimal("0"))
    if other_total > 0:
        top_rows.append(MonthlyReportCategoryRow(name="Other", amount=other_total))
    return top_rows


def _build_pie_chart(categories: list[MonthlyReportCategoryRow]) -> bytes:
    rows = summarize_categories(categories)
    labels = [row.name for row in rows]
    values = [float(row.amount) for row in rows]

    fig, ax = plt.subplots(figsize=(6.2, 3.6), dpi=140)
    wedges, _, _ = ax.pie(
        values,
        labels=None,
        autopct=_autopct_threshold,
        startangle=90,
        wedgeprops={"width": 0.45, "edgecolor": "white"},
        pctdistance=0.78,
    )
    ax.legend(
        wedges,
        labels,
        title="Categories",
        loc="center left",
        bbox_to_anchor=(1.0, 0.5),
        fontsize=8,
        frameon=False,
    )
    ax.set_title("Expenses by category")
    ax.axis("equal")

    image_buffer = BytesIO()
    fig.savefig(image_buffer, format="png", bbox_inches="tight")
    plt.close(fig)
    image_buffer.seek(0)
    return image_buffer.read()


class _FooterCanvas(Canvas):
    def __init__(self, *args, generated_on: str, **kwargs):
        super().__init__(*args, **kwargs)
        self._generated_on = generated_on
        self._saved_page_states: list[dict] = []

    def showPage(self) -> None:  # noqa: N802 (ReportLab API)
        self._saved_page_states.append(dict(self.__dict__))
        self._startPage()

    def save(self) -> None:
        page_count = len(self._saved_page_states)
        for state in self._saved_page_states:
            self.__dict__.update(state)
            self._draw_footer(page_count=page_count)
            super().showPage()
        super().save()

    def _draw_footer(self, *, page_count: int) -> None:
        self.setFont("Helvetica", 8)
        self.setFillColor(colors.HexColor("#8A8F98"))
        self.drawString(20 * mm, 10 * mm, f"Generated on {self._generated_on}")
        self.drawRightString(190 * mm, 10 * mm, f"Page {self._pageNumber}/{page_count}")


def _build_kpi_cards(data: MonthlyReportData) -> Table:
    styles = getSampleStyleSheet()
    card_style = ParagraphStyle(
        name="KpiCard",
        parent=styles["BodyText"],
        fontSize=10,
        leading=14,
        textColor=colors.HexColor("#1F2937"),
    )
    cells = [
        [
            Paragraph("<b>Balance</b><br/>" + format_amount(data.balance), card_style),
            Paragraph("<b>Income</b><br/>" + format_amount(data.income), card_style),
            Paragraph("<b>Expenses</b><br/>" + format_amount(data.expense), card_style),
        ]
    ]
    table = Table(cells, colWidths=[58 * mm, 58 * mm, 58 * mm])
    table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, -1), colors.HexColor("#F4F6F8")),
                ("BOX", (0, 0), (-1, -1), 0.6, colors.HexColor("#DDE2E8")),
                ("INNERGRID", (0, 0), (-1, -1), 0.4, colors.HexColor("#DDE2E8")),
                ("LEFTPADDING", (0, 0), (-1, -1), 8),
                ("RIGHTPADDING", (0, 0), (-1, -1), 8),
                ("TOPPADDING", (0, 0), (-1, -1), 8),
                ("BOTTOMPADDING", (0, 0), (-1, -1), 8),
            ]
        )
    )
    return table


def _striped(table_data: list[list[str]], base: list[tuple]) -> TableStyle:
    style = list(base)
    for row_index in range(1, len(table_data)):
        if row_index % 2 == 0:
            style.append(("BACKGROUND", (0, row_index), (-1, row_index), colors.HexColor("#FAFBFC")))
    return TableStyle(style)


def _build_transactions_table(data: MonthlyReportData) -> Table:
    def _truncate_text(value: str, max_length: int = 36) -> str:
        if len(value) <= max_length:
            return value
        return value[: max_length - 1].rstrip() + "…"

    table_data = [["Date", "Title", "Category", "Amount"]]
    if not data.transactions:
        table_data.append(["-", "No transactions", "-", format_amount(Decimal("0"))])
    else:
        for row in data.transactions[:TRANSACTIONS_DISPLAY_LIMIT]:
            sign = "+" if row.type == "income" else "-"
            table_data.append(
                [
                    row.date,
                    _truncate_text(row.title),
                    row.category,
                    f"{sign} {format_amount(row.amount)}",
                ]
            )

    table = Table(table_data, colWidths=[28 * mm, 62 * mm, 58 * mm, 30 * mm], repeatRows=1)
    table.setStyle(
        _striped(
            table_data,
            [
                ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#EEF1F4")),
                ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                ("GRID", (0, 0), (-1, -1), 0.25, colors.HexColor("#D7DCE2")),
                ("ALIGN", (3, 1), (3, -1), "RIGHT"),
                ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
                ("TOPPADDING", (0, 0), (-1, -1), 4),
                ("BOTTOMPADDING", (0, 0), (-1, -1), 4),
            ],
        )
    )
    return table


def generate_monthly_report_pdf(data: MonthlyReportData) -> bytes:
    """Render a 2-page month report: KPIs and category split, then transaction detail."""

    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        rightMargin=16 * mm,
        leftMargin=16 * mm,
        topMargin=16 * mm,
        bottomMargin=14 * mm,
    )
    styles = getSampleStyleSheet()
    section_title_style = ParagraphStyle(name="SectionTitle", parent=styles["Heading2"], spaceAfter=4, fontSize=12)
    subtitle_style = ParagraphStyle(name="Subtitle", parent=styles["BodyText"], fontSize=9, textColor=colors.HexColor("#6B7280"))

    story = [
        Paragraph("Monthly report", styles["Title"]),
        Spacer(1, 1 * mm),
        Paragraph(f"Period: {data.period_label}", styles["BodyText"]),
        Paragraph(f"{data.count} transactions", subtitle_style),
        Spacer(1, 5 * mm),
        _build_kpi_cards(data),
        Spacer(1, 6 * mm),
        Paragraph("Expenses by category", section_title_style),
        Spacer(1, 1 * mm),
    ]

    if not data.categories:
        story.append(Paragraph("No expenses for this period.", styles["BodyText"]))
    else:
        pie_bytes = _build_pie_chart(data.categories)
        story.append(Image(BytesIO(pie_bytes), width=166 * mm, height=92 * mm))
        story.append(Spacer(1, 3 * mm))

        total_categories = sum((row.amount for row in data.categories), Decimal("0"))
        table_data = [["Category", "Amount", "Share (%)"]]
        for row in sorted(data.categories, key=lambda item: item.amount, reverse=True)[:10]:
            ratio = (row.amount / total_categories * Decimal("100")) if total_categories > 0 else Decimal("0")
            table_data.append([
                row.name,
                format_amount(row.amount),
                f"{ratio.quantize(Decimal('0.1'), rounding=ROUND_HALF_UP)}%",
            ])

        table = Table(table_data, colWidths=[90 * mm, 50 * mm, 20 * mm], repeatRows=1)
        table.setStyle(
            _striped(
                table_data,
                [
                    ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#EEF1F4")),
                    ("GRID", (0, 0), (-1, -1), 0.25, colors.HexColor("#D7DCE2")),
                    ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                    ("ALIGN", (1, 1), (-1, -1), "RIGHT"),
                    ("TOPPADDING", (0, 0), (-1, -1), 4),
                    ("BOTTOMPADDING", (0, 0), (-1, -1), 4),
                ],
            )
        )
        story.append(table)

    story.append(PageBreak())
    story.append(Paragraph("Transactions", styles["Title"]))
    story.append(Spacer(1, 2 * mm))
    if len(data.transactions) > TRANSACTIONS_DISPLAY_LIMIT:
        story.append(Paragraph(f"List truncated to {TRANSACTIONS_DISPLAY_LIMIT} transactions.", styles["Italic"]))
        story.append(Spacer(1, 2 * mm))
    story.append(_build_transactions_table(data))

    generated_on = date.today().isoformat()
    doc.build(
        story,
        canvasmaker=lambda *args, **kwargs: _FooterCanvas(*args, generated_on=generated_on, **kwargs),
    )
    buffer.seek(0)
    return buffer.read()

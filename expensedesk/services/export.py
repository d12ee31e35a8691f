"""
Report export: RFC 4180 CSV text and a printable PDF document.

Both renderers work on an already filtered receipt list and keep its order.
The PDF is built locally with reportlab.
"""
from __future__ import annotations

import csv
import io
from datetime import date
from typing import Iterable, Optional
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import landscape, letter
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from expensedesk.schemas import Receipt, ReportSummary, User
from expensedesk.services.query import breakdown

CSV_HEADER = ["Date", "Store", "Category", "Subcategory", "Total", "Status", "Notes"]

_GRID_STYLE = [
    ("BACKGROUND", (0, 0), (-1, 0), colors.lightgrey),
    ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
    ("GRID", (0, 0), (-1, -1), 0.5, colors.black),
    ("VALIGN", (0, 0), (-1, -1), "TOP"),
    ("BOTTOMPADDING", (0, 0), (-1, 0), 6),
]


def to_csv(receipts: Iterable[Receipt]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\r\n")
    writer.writerow(CSV_HEADER)
    for r in receipts:
        writer.writerow([
            r.date.isoformat(),
            r.store,
            r.category,
            r.subcategory,
            f"{r.total:.2f}",
            r.status,
            r.notes,
        ])
    return buf.getvalue()


def _period_label(date_from: Optional[date], date_to: Optional[date]) -> str:
    if date_from and date_to:
        return f"{date_from.isoformat()} to {date_to.isoformat()}"
    if date_from:
        return f"From {date_from.isoformat()}"
    if date_to:
        return f"Through {date_to.isoformat()}"
    return "All dates"


def to_pdf(
    receipts: list[Receipt],
    summary: ReportSummary,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    users: Optional[Iterable[User]] = None,
    currency: str = "$",
) -> bytes:
    """Render the expense report as PDF bytes."""
    names = {u.id: u.full_name for u in (users or [])}

    buf = io.BytesIO()
    doc = SimpleDocTemplate(
        buf,
        pagesize=landscape(letter),
        rightMargin=36, leftMargin=36,
        topMargin=36, bottomMargin=36,
        title="Expense Report",
    )
    styles = getSampleStyleSheet()
    cell = styles["BodyText"]
    story = []

    story.append(Paragraph("Expense Report", styles["Title"]))
    story.append(Paragraph(f"Period: {escape(_period_label(date_from, date_to))}", styles["Normal"]))
    story.append(Spacer(1, 12))

    # Summary block
    sdata = [
        ["Total Expenses", "Approved", "Pending", "Receipts", "Average"],
        [
            f"{currency}{summary.total_amount:.2f}",
            f"{currency}{summary.approved_amount:.2f}",
            f"{currency}{summary.pending_amount:.2f}",
            str(summary.receipt_count),
            f"{currency}{summary.average:.2f}",
        ],
    ]
    stable = Table(sdata, colWidths=[120] * 5)
    stable.setStyle(TableStyle(_GRID_STYLE + [("ALIGN", (0, 0), (-1, -1), "CENTER")]))
    story.append(stable)
    story.append(Spacer(1, 18))

    # Itemised table
    headers = ["Date", "Employee", "Store", "Category", "Items", "Total", "Status", "Notes"]
    rows = [headers]
    for r in receipts:
        items = "<br/>".join(
            escape(f"{i.quantity} x {i.name} @ {currency}{i.price:.2f}") for i in r.items
        )
        rows.append([
            r.date.isoformat(),
            Paragraph(escape(names.get(r.user_id, r.user_id)), cell),
            Paragraph(escape(r.store), cell),
            Paragraph(escape(f"{r.category} / {r.subcategory}"), cell),
            Paragraph(items, cell),
            f"{currency}{r.total:.2f}",
            r.status,
            Paragraph(escape(r.notes), cell),
        ])
    rows.append([""] * 4 + ["Total:", f"{currency}{summary.total_amount:.2f}", "", ""])

    table = Table(rows, colWidths=[62, 80, 95, 95, 170, 60, 58, 100], repeatRows=1)
    table.setStyle(TableStyle(_GRID_STYLE + [
        ("ALIGN", (5, 0), (5, -1), "RIGHT"),
        ("FONTNAME", (0, -1), (-1, -1), "Helvetica-Bold"),
    ]))
    story.append(table)

    # Category summary
    by_category = breakdown(receipts, "category")
    if by_category:
        story.append(Spacer(1, 18))
        story.append(Paragraph("Summary by Category", styles["Heading3"]))
        cdata = [["Category", "Total"]]
        cdata += [[row.label, f"{currency}{row.value:.2f}"] for row in by_category]
        ctable = Table(cdata, colWidths=[200, 100])
        ctable.setStyle(TableStyle(_GRID_STYLE + [("ALIGN", (1, 0), (1, -1), "RIGHT")]))
        story.append(ctable)

    doc.build(story)
    return buf.getvalue()


def report_filename(kind: str, today: Optional[date] = None) -> str:
    today = today or date.today()
    return f"expense-report-{today.isoformat()}.{kind}"

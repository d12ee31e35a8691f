"""
Report queries over a receipt snapshot.

All functions are pure: they take receipts (usually ``store.get_receipts()``)
and never touch the store. Empty input yields zeroed summaries and empty
breakdowns.
"""
from __future__ import annotations

import calendar
import re
from datetime import date, timedelta
from typing import Iterable, Optional

from expensedesk.schemas import (
    BreakdownRow,
    DashboardCounts,
    Receipt,
    ReportFilter,
    ReportSummary,
    User,
)

ALL = ("", "all")

HELP_TEXT = "I can help you analyze expense data. Try asking 'How much did Jane spend?'"
_SPEND_QUESTION = re.compile(r"how\s+much\s+did\s+([A-Za-z][A-Za-z'-]*)\s+spend", re.IGNORECASE)


# ---------------------------------------------------------------------------
# Filtering
# ---------------------------------------------------------------------------

def _matches(receipt: Receipt, criteria: ReportFilter) -> bool:
    if criteria.date_from and receipt.date < criteria.date_from:
        return False
    if criteria.date_to and receipt.date > criteria.date_to:
        return False
    if criteria.employee not in ALL and receipt.user_id != criteria.employee:
        return False
    if criteria.category not in ALL and receipt.category != criteria.category:
        return False
    if criteria.status not in ALL and receipt.status != criteria.status:
        return False
    if criteria.flagged is not None and receipt.flagged != criteria.flagged:
        return False
    if criteria.search:
        needle = criteria.search.lower()
        if needle not in receipt.store.lower() and needle not in receipt.category.lower():
            return False
    return True


def filter_receipts(receipts: Iterable[Receipt], criteria: ReportFilter) -> list[Receipt]:
    """All receipts matching every active criterion, in input order."""
    return [r for r in receipts if _matches(r, criteria)]


def scope_for_user(receipts: Iterable[Receipt], user: User) -> list[Receipt]:
    """Supervisors see everything; employees only their own receipts."""
    if user.is_supervisor:
        return list(receipts)
    return [r for r in receipts if r.user_id == user.id]


# ---------------------------------------------------------------------------
# Aggregates
# ---------------------------------------------------------------------------

def _sum(receipts: Iterable[Receipt]) -> float:
    return sum(r.total for r in receipts)


def summarize(receipts: list[Receipt]) -> ReportSummary:
    count = len(receipts)
    total = _sum(receipts)
    return ReportSummary(
        total_amount=round(total, 2),
        approved_amount=round(_sum(r for r in receipts if r.status == "approved"), 2),
        pending_amount=round(_sum(r for r in receipts if r.status == "pending"), 2),
        rejected_amount=round(_sum(r for r in receipts if r.status == "rejected"), 2),
        receipt_count=count,
        average=round(total / count, 2) if count else 0.0,
    )


def breakdown(
    receipts: Iterable[Receipt],
    group_by: str = "category",
    users: Optional[Iterable[User]] = None,
) -> list[BreakdownRow]:
    """Sum receipt totals per category, employee or month.

    Category and employee rows keep first-encounter order; month rows are
    sorted chronologically.
    """
    names = {u.id: u.first_name for u in (users or [])}
    totals: dict[str, float] = {}
    labels: dict[str, str] = {}

    for r in receipts:
        if group_by == "category":
            key = label = r.category
        elif group_by == "employee":
            key = r.user_id
            label = names.get(r.user_id, r.user_id)
        elif group_by == "month":
            key = label = r.date.strftime("%Y-%m")
        else:
            raise ValueError(f"Unsupported group_by: {group_by}")
        totals[key] = totals.get(key, 0.0) + r.total
        labels.setdefault(key, label)

    rows = [BreakdownRow(key=k, label=labels[k], value=round(v, 2)) for k, v in totals.items()]
    if group_by == "month":
        rows.sort(key=lambda row: row.key)
    return rows


def status_counts(receipts: list[Receipt]) -> DashboardCounts:
    return DashboardCounts(
        total=len(receipts),
        pending=sum(1 for r in receipts if r.status == "pending"),
        approved=sum(1 for r in receipts if r.status == "approved"),
        rejected=sum(1 for r in receipts if r.status == "rejected"),
        flagged=sum(1 for r in receipts if r.flagged),
    )


def approved_spend(receipts: Iterable[Receipt], user_id: str) -> tuple[float, int]:
    """``(amount, count)`` of one employee's approved receipts."""
    approved = [r for r in receipts if r.user_id == user_id and r.status == "approved"]
    return round(_sum(approved), 2), len(approved)


# ---------------------------------------------------------------------------
# Date presets
# ---------------------------------------------------------------------------

def preset_range(name: str, today: Optional[date] = None) -> tuple[date, date]:
    today = today or date.today()
    if name == "this_month":
        last_day = calendar.monthrange(today.year, today.month)[1]
        return today.replace(day=1), today.replace(day=last_day)
    if name == "last_30":
        return today - timedelta(days=30), today
    if name == "last_90":
        return today - timedelta(days=90), today
    raise ValueError(f"Unknown date preset: {name}")


# ---------------------------------------------------------------------------
# Expense assistant
# ---------------------------------------------------------------------------

def answer_spend_question(
    question: str,
    receipts: list[Receipt],
    users: Iterable[User],
    currency: str = "$",
) -> str:
    m = _SPEND_QUESTION.search(question or "")
    if not m:
        return HELP_TEXT

    name = m.group(1)
    user = next((u for u in users if u.first_name.lower() == name.lower()), None)
    if user is None:
        return f"I couldn't find {name.capitalize()} in the system."

    amount, count = approved_spend(receipts, user.id)
    noun = "receipt" if count == 1 else "receipts"
    return (
        f"{user.first_name}'s approved expenses total {currency}{amount:.2f} "
        f"across {count} {noun}."
    )

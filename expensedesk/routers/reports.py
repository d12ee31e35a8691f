"""
Dashboard, report and export endpoints.

GET  /api/dashboard              — status counts + most recent receipts
GET  /api/reports/summary        — filtered totals and breakdown
GET  /api/reports/export.csv     — filtered receipts as CSV
GET  /api/reports/export.pdf     — printable report
POST /api/assistant              — "How much did Jane spend?"
"""
from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Response

from expensedesk.config import settings
from expensedesk.routers.deps import current_user, get_store
from expensedesk.schemas import (
    AssistantRequest,
    AssistantResponse,
    DashboardResponse,
    GroupBy,
    Receipt,
    ReportFilter,
    ReportResponse,
    User,
)
from expensedesk.services.export import report_filename, to_csv, to_pdf
from expensedesk.services.query import (
    answer_spend_question,
    breakdown,
    filter_receipts,
    preset_range,
    scope_for_user,
    status_counts,
    summarize,
)
from expensedesk.store import EntityStore

logger = logging.getLogger(__name__)
router = APIRouter()

RECENT_LIMIT = 5


def report_filter(
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    preset: Optional[str] = None,
    employee: str = "all",
    category: str = "all",
    status: str = "all",
    flagged: Optional[bool] = None,
) -> ReportFilter:
    """Query parameters -> ReportFilter; a preset overrides explicit dates."""
    if preset:
        try:
            date_from, date_to = preset_range(preset)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
    return ReportFilter(
        date_from=date_from,
        date_to=date_to,
        employee=employee,
        category=category,
        status=status,
        flagged=flagged,
    )


def _filtered(store: EntityStore, user: User, criteria: ReportFilter) -> list[Receipt]:
    return filter_receipts(scope_for_user(store.get_receipts(), user), criteria)


# ── GET /api/dashboard ───────────────────────────────────────────────────
@router.get("/dashboard", response_model=DashboardResponse)
def dashboard(user: User = Depends(current_user), store: EntityStore = Depends(get_store)):
    receipts = scope_for_user(store.get_receipts(), user)
    recent = sorted(receipts, key=lambda r: r.date, reverse=True)[:RECENT_LIMIT]
    return DashboardResponse(counts=status_counts(receipts), recent=recent)


# ── GET /api/reports/summary ─────────────────────────────────────────────
@router.get("/reports/summary", response_model=ReportResponse)
def report_summary(
    group_by: GroupBy = "category",
    criteria: ReportFilter = Depends(report_filter),
    user: User = Depends(current_user),
    store: EntityStore = Depends(get_store),
):
    receipts = _filtered(store, user, criteria)
    logger.info("Report for %s: %d receipts, group_by=%s", user.id, len(receipts), group_by)
    return ReportResponse(
        filters=criteria,
        summary=summarize(receipts),
        breakdown=breakdown(receipts, group_by, store.get_users()),
    )


# ── GET /api/reports/export.csv ──────────────────────────────────────────
@router.get("/reports/export.csv")
def export_csv(
    criteria: ReportFilter = Depends(report_filter),
    user: User = Depends(current_user),
    store: EntityStore = Depends(get_store),
):
    receipts = _filtered(store, user, criteria)
    filename = report_filename("csv")
    return Response(
        content=to_csv(receipts),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


# ── GET /api/reports/export.pdf ──────────────────────────────────────────
@router.get("/reports/export.pdf")
def export_pdf(
    criteria: ReportFilter = Depends(report_filter),
    user: User = Depends(current_user),
    store: EntityStore = Depends(get_store),
):
    receipts = _filtered(store, user, criteria)
    pdf = to_pdf(
        receipts,
        summarize(receipts),
        date_from=criteria.date_from,
        date_to=criteria.date_to,
        users=store.get_users(),
        currency=settings.CURRENCY_SYMBOL,
    )
    filename = report_filename("pdf")
    logger.info("Rendered PDF report (%d receipts, %d bytes)", len(receipts), len(pdf))
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


# ── POST /api/assistant ──────────────────────────────────────────────────
@router.post("/assistant", response_model=AssistantResponse)
def assistant(
    req: AssistantRequest,
    user: User = Depends(current_user),
    store: EntityStore = Depends(get_store),
):
    answer = answer_spend_question(
        req.question,
        scope_for_user(store.get_receipts(), user),
        store.get_users(),
        currency=settings.CURRENCY_SYMBOL,
    )
    return AssistantResponse(answer=answer)

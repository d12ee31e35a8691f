"""
Receipt endpoints.

POST   /api/receipts                 — submit a receipt (status forced to pending)
GET    /api/receipts                 — list receipts visible to the caller
GET    /api/receipts/{id}            — get one receipt
DELETE /api/receipts/{id}            — delete a receipt
POST   /api/receipts/{id}/approve    — supervisor approval
POST   /api/receipts/{id}/reject     — supervisor rejection (reason required)
POST   /api/receipts/{id}/flag       — toggle the review flag
"""
from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends

from expensedesk.catalog import CATEGORIES
from expensedesk.routers.deps import current_user, get_lifecycle, get_store
from expensedesk.schemas import (
    ApproveRequest,
    Receipt,
    ReceiptDraft,
    RejectRequest,
    ReportFilter,
    SubmitRequest,
    User,
)
from expensedesk.services import ReceiptLifecycle
from expensedesk.services.query import filter_receipts, scope_for_user
from expensedesk.store import EntityStore

logger = logging.getLogger(__name__)
router = APIRouter()


# ── GET /api/categories ──────────────────────────────────────────────────
@router.get("/categories")
def list_categories():
    return CATEGORIES


# ── POST /api/receipts ───────────────────────────────────────────────────
@router.post("/receipts", response_model=Receipt, status_code=201)
def submit_receipt(
    req: SubmitRequest,
    user: User = Depends(current_user),
    lifecycle: ReceiptLifecycle = Depends(get_lifecycle),
):
    draft = ReceiptDraft(**req.model_dump(exclude={"suggestions"}))
    return lifecycle.submit(draft, user, suggestions=req.suggestions)


# ── GET /api/receipts ────────────────────────────────────────────────────
@router.get("/receipts", response_model=list[Receipt])
def list_receipts(
    status: str = "all",
    category: str = "all",
    employee: str = "all",
    flagged: Optional[bool] = None,
    search: str = "",
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    user: User = Depends(current_user),
    store: EntityStore = Depends(get_store),
):
    criteria = ReportFilter(
        date_from=date_from,
        date_to=date_to,
        employee=employee,
        category=category,
        status=status,
        flagged=flagged,
        search=search,
    )
    receipts = filter_receipts(scope_for_user(store.get_receipts(), user), criteria)
    logger.info("Listing %d receipts for %s", len(receipts), user.id)
    return receipts


# ── GET /api/receipts/{receipt_id} ───────────────────────────────────────
@router.get("/receipts/{receipt_id}", response_model=Receipt)
def get_receipt(
    receipt_id: str,
    user: User = Depends(current_user),
    lifecycle: ReceiptLifecycle = Depends(get_lifecycle),
):
    return lifecycle.get(receipt_id, user)


# ── DELETE /api/receipts/{receipt_id} ────────────────────────────────────
@router.delete("/receipts/{receipt_id}")
def delete_receipt(
    receipt_id: str,
    user: User = Depends(current_user),
    lifecycle: ReceiptLifecycle = Depends(get_lifecycle),
):
    lifecycle.delete(receipt_id, user)
    return {"message": "Receipt deleted successfully", "receipt_id": receipt_id}


# ── POST /api/receipts/{receipt_id}/approve ──────────────────────────────
@router.post("/receipts/{receipt_id}/approve", response_model=Receipt)
def approve_receipt(
    receipt_id: str,
    req: Optional[ApproveRequest] = None,
    user: User = Depends(current_user),
    lifecycle: ReceiptLifecycle = Depends(get_lifecycle),
):
    return lifecycle.approve(receipt_id, user, comment=req.comment if req else None)


# ── POST /api/receipts/{receipt_id}/reject ───────────────────────────────
@router.post("/receipts/{receipt_id}/reject", response_model=Receipt)
def reject_receipt(
    receipt_id: str,
    req: RejectRequest,
    user: User = Depends(current_user),
    lifecycle: ReceiptLifecycle = Depends(get_lifecycle),
):
    return lifecycle.reject(receipt_id, user, req.reason)


# ── POST /api/receipts/{receipt_id}/flag ─────────────────────────────────
@router.post("/receipts/{receipt_id}/flag", response_model=Receipt)
def flag_receipt(
    receipt_id: str,
    user: User = Depends(current_user),
    lifecycle: ReceiptLifecycle = Depends(get_lifecycle),
):
    return lifecycle.toggle_flag(receipt_id, user)

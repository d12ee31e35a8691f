"""
Receipt lifecycle: submission, supervisor decisions and flagging.

    pending ──approve──▶ approved
       │
       └────reject───▶ rejected      (reason required)

``flagged`` is a side channel that can only change while a receipt is
pending. Every mutation goes through ``EntityStore.update_receipt``.
"""
from __future__ import annotations

import logging
import math
from datetime import date, datetime, timezone
from typing import Optional, Union

from expensedesk.catalog import CATEGORIES, is_valid_subcategory
from expensedesk.errors import InvalidTransition, NotFound, ValidationError
from expensedesk.pipeline.prefill import apply_suggestions
from expensedesk.schemas import (
    ExtractionSuggestions,
    LineItem,
    Receipt,
    ReceiptDraft,
    User,
)
from expensedesk.services.capabilities import (
    can_delete,
    can_review,
    can_submit,
    can_view,
    require,
)
from expensedesk.store import EntityStore

logger = logging.getLogger(__name__)


def parse_price(value: Union[float, str, None]) -> Optional[float]:
    """Return a finite, non-negative price or ``None``."""
    if value is None or isinstance(value, bool):
        return None
    try:
        text = str(value).strip().lstrip("$")
        if "," in text and "." in text:
            text = text.replace(",", "")  # thousands separators
        price = float(text)
    except ValueError:
        return None
    if not math.isfinite(price) or price < 0:
        return None
    return price


def compute_total(items: list[LineItem]) -> float:
    return round(sum(item.price * item.quantity for item in items), 2)


def validate_draft(draft: ReceiptDraft) -> list[LineItem]:
    """Check *draft* and return its parsed line items.

    Raises ``ValidationError`` listing every missing or invalid field.
    """
    errors: list[str] = []

    if not draft.store.strip():
        errors.append("store")
    if draft.category not in CATEGORIES:
        errors.append("category")
    if not is_valid_subcategory(draft.category, draft.subcategory):
        errors.append("subcategory")
    if not (draft.image or "").strip():
        errors.append("image")

    items: list[LineItem] = []
    if not draft.items:
        errors.append("items")
    for idx, item in enumerate(draft.items):
        name = item.name.strip()
        price = parse_price(item.price)
        quantity = item.quantity
        if not name:
            errors.append(f"items[{idx}].name")
        if price is None:
            errors.append(f"items[{idx}].price")
        if quantity is None or quantity < 1:
            errors.append(f"items[{idx}].quantity")
        if name and price is not None and quantity and quantity >= 1:
            items.append(LineItem(name=name, price=price, quantity=quantity))

    if errors:
        raise ValidationError(
            "Missing or invalid fields: " + ", ".join(errors), fields=errors
        )
    return items


class ReceiptLifecycle:
    def __init__(self, store: EntityStore):
        self.store = store

    # ── helpers ──────────────────────────────────────────────────────────
    def _load(self, receipt_id: str) -> Receipt:
        receipt = self.store.get_receipt(receipt_id)
        if receipt is None:
            raise NotFound("Receipt", receipt_id)
        return receipt

    def _load_pending(self, receipt_id: str, action: str) -> Receipt:
        receipt = self._load(receipt_id)
        if receipt.status != "pending":
            logger.warning(
                "Refused %s on receipt %s (status=%s)", action, receipt_id, receipt.status
            )
            raise InvalidTransition(receipt_id, receipt.status, action)
        return receipt

    def _update(self, receipt_id: str, **fields) -> Receipt:
        updated = self.store.update_receipt(receipt_id, **fields)
        if updated is None:
            raise NotFound("Receipt", receipt_id)
        return updated

    # ── operations ───────────────────────────────────────────────────────
    def submit(
        self,
        draft: ReceiptDraft,
        user: User,
        suggestions: Optional[ExtractionSuggestions] = None,
    ) -> Receipt:
        require(can_submit(user), "User may not submit receipts")
        if self.store.get_user(user.id) is None:
            raise NotFound("User", user.id)

        draft = apply_suggestions(draft, suggestions)
        items = validate_draft(draft)

        receipt = Receipt(
            user_id=user.id,
            date=draft.date or date.today(),
            store=draft.store.strip(),
            category=draft.category,
            subcategory=draft.subcategory,
            items=items,
            total=compute_total(items),
            status="pending",
            flagged=False,
            comment=(draft.comment or "").strip() or None,
            image=(draft.image or "").strip(),
            submitted_at=datetime.now(timezone.utc),
        )
        stored = self.store.add_receipt(receipt)
        logger.info(
            "Receipt %s submitted by %s: %s %.2f", stored.id, user.id, stored.store, stored.total
        )
        return stored

    def get(self, receipt_id: str, user: User) -> Receipt:
        receipt = self._load(receipt_id)
        require(can_view(user, receipt), "Receipt belongs to another employee")
        return receipt

    def approve(self, receipt_id: str, reviewer: User, comment: Optional[str] = None) -> Receipt:
        require(can_review(reviewer), "Only supervisors can approve receipts")
        self._load_pending(receipt_id, "approve")

        fields = {
            "status": "approved",
            "reviewed_at": datetime.now(timezone.utc),
            "reviewed_by": reviewer.id,
        }
        if comment and comment.strip():
            fields["comment"] = comment.strip()
        updated = self._update(receipt_id, **fields)
        logger.info("Receipt %s approved by %s", receipt_id, reviewer.id)
        return updated

    def reject(self, receipt_id: str, reviewer: User, reason: Optional[str]) -> Receipt:
        require(can_review(reviewer), "Only supervisors can reject receipts")
        if not (reason or "").strip():
            raise ValidationError("A rejection reason is required", fields=["reason"])
        self._load_pending(receipt_id, "reject")

        updated = self._update(
            receipt_id,
            status="rejected",
            rejection_reason=reason.strip(),
            reviewed_at=datetime.now(timezone.utc),
            reviewed_by=reviewer.id,
        )
        logger.info("Receipt %s rejected by %s", receipt_id, reviewer.id)
        return updated

    def toggle_flag(self, receipt_id: str, reviewer: User) -> Receipt:
        require(can_review(reviewer), "Only supervisors can flag receipts")
        receipt = self._load_pending(receipt_id, "flag")

        updated = self._update(receipt_id, flagged=not receipt.flagged)
        logger.info(
            "Receipt %s %s by %s",
            receipt_id, "flagged" if updated.flagged else "unflagged", reviewer.id,
        )
        return updated

    def delete(self, receipt_id: str, user: User) -> None:
        receipt = self._load(receipt_id)
        require(can_delete(user, receipt), "Receipt cannot be deleted by this user")
        self.store.delete_receipt(receipt_id)
        logger.info("Receipt %s deleted by %s", receipt_id, user.id)

"""
Merge extraction suggestions into a receipt draft.

Suggestions only fill what the submitter left blank; typed values always win.
"""
from __future__ import annotations

from typing import Optional

from expensedesk.schemas import DraftItem, ExtractionSuggestions, ReceiptDraft


def _has_items(draft: ReceiptDraft) -> bool:
    return any(item.name.strip() or item.price not in (None, "") for item in draft.items)


def apply_suggestions(
    draft: ReceiptDraft, suggestions: Optional[ExtractionSuggestions]
) -> ReceiptDraft:
    if suggestions is None or suggestions.is_empty:
        return draft

    updates: dict = {}
    if not draft.store.strip() and suggestions.store:
        updates["store"] = suggestions.store
    if draft.date is None and suggestions.date:
        updates["date"] = suggestions.date
    if not _has_items(draft) and suggestions.items:
        updates["items"] = [
            DraftItem(name=i.name, price=i.price, quantity=i.quantity)
            for i in suggestions.items
        ]
    return draft.model_copy(update=updates)

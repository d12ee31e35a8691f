"""
Typed errors raised by the receipt services.

Every error carries a machine-readable ``code`` so the HTTP layer (and any
other caller) can branch on type rather than on message text.

    ExpenseDeskError
    +-- ValidationError     missing / invalid input, store untouched
    +-- InvalidTransition   lifecycle step not allowed from current status
    +-- NotFound            unknown receipt / user / department id
    +-- PermissionDenied    role does not allow the operation
"""
from __future__ import annotations

from typing import Optional


class ExpenseDeskError(Exception):
    code = "EXPENSEDESK_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"detail": self.message, "code": self.code}


class ValidationError(ExpenseDeskError):
    code = "VALIDATION_ERROR"

    def __init__(self, message: str, fields: Optional[list[str]] = None):
        super().__init__(message)
        self.fields = list(fields or [])

    def to_dict(self) -> dict:
        body = super().to_dict()
        body["fields"] = self.fields
        return body


class InvalidTransition(ExpenseDeskError):
    code = "INVALID_TRANSITION"

    def __init__(self, receipt_id: str, status: str, action: str):
        super().__init__(f"Cannot {action} receipt {receipt_id}: status is {status}")
        self.receipt_id = receipt_id
        self.status = status
        self.action = action


class NotFound(ExpenseDeskError):
    code = "NOT_FOUND"

    def __init__(self, kind: str, ident: str):
        super().__init__(f"{kind} not found: {ident}")
        self.kind = kind
        self.ident = ident


class PermissionDenied(ExpenseDeskError):
    code = "PERMISSION_DENIED"

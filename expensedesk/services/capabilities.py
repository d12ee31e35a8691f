"""
Role checks, evaluated once at the start of each service operation.
"""
from __future__ import annotations

from expensedesk.errors import PermissionDenied
from expensedesk.schemas import Receipt, User


def can_submit(user: User) -> bool:
    return user.role in ("employee", "supervisor")


def can_review(user: User) -> bool:
    """Approve, reject and flag."""
    return user.is_supervisor


def can_view(user: User, receipt: Receipt) -> bool:
    return user.is_supervisor or receipt.user_id == user.id


def can_delete(user: User, receipt: Receipt) -> bool:
    if user.is_supervisor:
        return True
    return receipt.user_id == user.id and receipt.status == "pending"


def can_manage_users(user: User) -> bool:
    return user.is_supervisor


def require(allowed: bool, message: str) -> None:
    if not allowed:
        raise PermissionDenied(message)

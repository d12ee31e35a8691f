"""
Dict-backed store. Every read returns copies so callers can never mutate
the stored records.
"""
from __future__ import annotations

import logging
from typing import Iterable, Optional

from expensedesk.schemas import Department, Receipt, User
from expensedesk.store.base import (
    IMMUTABLE_RECEIPT_FIELDS,
    EntityStore,
    derive_members,
    new_id,
)

logger = logging.getLogger(__name__)


class InMemoryStore(EntityStore):
    def __init__(
        self,
        users: Iterable[User] = (),
        departments: Iterable[Department] = (),
        receipts: Iterable[Receipt] = (),
    ):
        self._users: dict[str, User] = {}
        self._departments: dict[str, Department] = {}
        self._receipts: dict[str, Receipt] = {}
        self.import_records(users, departments, receipts)

    # ── receipts ─────────────────────────────────────────────────────────
    def get_receipts(self) -> list[Receipt]:
        return [r.model_copy(deep=True) for r in self._receipts.values()]

    def get_receipt(self, receipt_id: str) -> Optional[Receipt]:
        rec = self._receipts.get(receipt_id)
        return rec.model_copy(deep=True) if rec else None

    def add_receipt(self, receipt: Receipt) -> Receipt:
        stored = receipt.model_copy(deep=True, update={"id": new_id(), "status": "pending"})
        self._receipts[stored.id] = stored
        return stored.model_copy(deep=True)

    def update_receipt(self, receipt_id: str, **fields) -> Optional[Receipt]:
        rec = self._receipts.get(receipt_id)
        if rec is None:
            return None
        changes = {k: v for k, v in fields.items() if k not in IMMUTABLE_RECEIPT_FIELDS}
        updated = rec.model_copy(deep=True, update=changes)
        self._receipts[receipt_id] = updated
        return updated.model_copy(deep=True)

    def delete_receipt(self, receipt_id: str) -> bool:
        return self._receipts.pop(receipt_id, None) is not None

    # ── users ────────────────────────────────────────────────────────────
    def get_users(self) -> list[User]:
        return [u.model_copy() for u in self._users.values()]

    def get_user(self, user_id: str) -> Optional[User]:
        user = self._users.get(user_id)
        return user.model_copy() if user else None

    def add_user(self, user: User) -> User:
        stored = user.model_copy(update={"id": user.id or new_id()})
        self._users[stored.id] = stored
        return stored.model_copy()

    def update_user(self, user_id: str, **fields) -> Optional[User]:
        user = self._users.get(user_id)
        if user is None:
            return None
        fields.pop("id", None)
        updated = user.model_copy(update=fields)
        self._users[user_id] = updated
        return updated.model_copy()

    def delete_user(self, user_id: str) -> bool:
        return self._users.pop(user_id, None) is not None

    # ── departments ──────────────────────────────────────────────────────
    def _with_members(self, dept: Department) -> Department:
        return dept.model_copy(
            update={"employee_ids": derive_members(dept, self._users.values())}
        )

    def get_departments(self) -> list[Department]:
        return [self._with_members(d) for d in self._departments.values()]

    def get_department(self, department_id: str) -> Optional[Department]:
        dept = self._departments.get(department_id)
        return self._with_members(dept) if dept else None

    def add_department(self, department: Department) -> Department:
        stored = department.model_copy(
            update={"id": department.id or new_id(), "employee_ids": []}
        )
        self._departments[stored.id] = stored
        return self._with_members(stored)

    def update_department(self, department_id: str, **fields) -> Optional[Department]:
        dept = self._departments.get(department_id)
        if dept is None:
            return None
        fields.pop("id", None)
        fields.pop("employee_ids", None)
        updated = dept.model_copy(update=fields)
        self._departments[department_id] = updated
        return self._with_members(updated)

    # ── bulk load ────────────────────────────────────────────────────────
    def import_records(
        self,
        users: Iterable[User] = (),
        departments: Iterable[Department] = (),
        receipts: Iterable[Receipt] = (),
    ) -> None:
        for user in users:
            self._users[user.id] = user.model_copy()
        for dept in departments:
            self._departments[dept.id] = dept.model_copy(update={"employee_ids": []})
        for rec in receipts:
            self._receipts[rec.id] = rec.model_copy(deep=True)
        logger.debug(
            "Loaded %d users, %d departments, %d receipts",
            len(self._users), len(self._departments), len(self._receipts),
        )

"""
Repository interface for users, departments and receipts.

The receipt services depend only on ``EntityStore``; the concrete store is
injected (``InMemoryStore`` for tests and embedding, ``SqlStore`` for the
HTTP application).
"""
from __future__ import annotations

import uuid
from abc import ABC, abstractmethod
from typing import Iterable, Optional

from expensedesk.schemas import Department, Receipt, User

# Fields that never change once a receipt exists
IMMUTABLE_RECEIPT_FIELDS = frozenset({"id", "user_id"})


def new_id() -> str:
    return str(uuid.uuid4())


def derive_members(department: Department, users: Iterable[User]) -> list[str]:
    """Member ids of *department*, read from each user's department name."""
    return [
        u.id
        for u in users
        if u.department == department.name and u.id != department.supervisor_id
    ]


class EntityStore(ABC):
    # ── receipts ─────────────────────────────────────────────────────────
    @abstractmethod
    def get_receipts(self) -> list[Receipt]:
        """Snapshot of every receipt, in insertion order."""

    @abstractmethod
    def get_receipt(self, receipt_id: str) -> Optional[Receipt]:
        ...

    @abstractmethod
    def add_receipt(self, receipt: Receipt) -> Receipt:
        """Store *receipt* under a fresh id with status ``pending``."""

    @abstractmethod
    def update_receipt(self, receipt_id: str, **fields) -> Optional[Receipt]:
        """Merge *fields* into the receipt; ``None`` when the id is unknown."""

    @abstractmethod
    def delete_receipt(self, receipt_id: str) -> bool:
        ...

    # ── users ────────────────────────────────────────────────────────────
    @abstractmethod
    def get_users(self) -> list[User]:
        ...

    @abstractmethod
    def get_user(self, user_id: str) -> Optional[User]:
        ...

    @abstractmethod
    def add_user(self, user: User) -> User:
        ...

    @abstractmethod
    def update_user(self, user_id: str, **fields) -> Optional[User]:
        ...

    @abstractmethod
    def delete_user(self, user_id: str) -> bool:
        ...

    # ── departments ──────────────────────────────────────────────────────
    @abstractmethod
    def get_departments(self) -> list[Department]:
        ...

    @abstractmethod
    def get_department(self, department_id: str) -> Optional[Department]:
        ...

    @abstractmethod
    def add_department(self, department: Department) -> Department:
        ...

    @abstractmethod
    def update_department(self, department_id: str, **fields) -> Optional[Department]:
        ...

    # ── bulk load ────────────────────────────────────────────────────────
    @abstractmethod
    def import_records(
        self,
        users: Iterable[User] = (),
        departments: Iterable[Department] = (),
        receipts: Iterable[Receipt] = (),
    ) -> None:
        """Load records as-is, keeping their ids and statuses."""

    # ── shared lookups ───────────────────────────────────────────────────
    def find_user_by_email(self, email: str) -> Optional[User]:
        needle = email.strip().lower()
        for user in self.get_users():
            if user.email.lower() == needle:
                return user
        return None

    def find_department_by_name(self, name: str) -> Optional[Department]:
        for dept in self.get_departments():
            if dept.name == name:
                return dept
        return None

    def is_empty(self) -> bool:
        return not self.get_users()

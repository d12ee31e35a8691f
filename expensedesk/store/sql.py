"""
SQLAlchemy-backed store. Each mutation commits on the session it was
given, so one call is one unit of work.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Iterable, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from expensedesk.models import DepartmentModel, ReceiptModel, UserModel
from expensedesk.schemas import Department, LineItem, Receipt, User
from expensedesk.store.base import (
    IMMUTABLE_RECEIPT_FIELDS,
    EntityStore,
    derive_members,
    new_id,
)

logger = logging.getLogger(__name__)


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """SQLite drops tzinfo on the way out; stored values are always UTC."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def transform_receipt(row: ReceiptModel) -> Receipt:
    """ReceiptModel -> Receipt"""
    return Receipt(
        id=row.id,
        user_id=row.user_id,
        date=row.date,
        store=row.store,
        category=row.category,
        subcategory=row.subcategory,
        items=[LineItem(**item) for item in (row.items_json or [])],
        total=row.total,
        status=row.status,
        flagged=bool(row.flagged),
        comment=row.comment,
        rejection_reason=row.rejection_reason,
        image=row.image or "",
        submitted_at=_as_utc(row.submitted_at),
        reviewed_at=_as_utc(row.reviewed_at),
        reviewed_by=row.reviewed_by,
    )


def transform_user(row: UserModel) -> User:
    """UserModel -> User"""
    return User(
        id=row.id,
        first_name=row.first_name,
        last_name=row.last_name or "",
        email=row.email,
        role=row.role,
        department=row.department or "",
    )


def _items_json(items) -> list[dict]:
    return [
        item.model_dump() if isinstance(item, LineItem) else LineItem(**item).model_dump()
        for item in items
    ]


def _receipt_row(receipt: Receipt, seq: int) -> ReceiptModel:
    data = receipt.model_dump(exclude={"items"})
    return ReceiptModel(seq=seq, items_json=_items_json(receipt.items), **data)


class SqlStore(EntityStore):
    def __init__(self, db: Session):
        self.db = db

    # ── receipts ─────────────────────────────────────────────────────────
    def get_receipts(self) -> list[Receipt]:
        rows = (
            self.db.query(ReceiptModel)
            .order_by(ReceiptModel.seq)
            .all()
        )
        return [transform_receipt(r) for r in rows]

    def _next_seq(self) -> int:
        return (self.db.query(func.max(ReceiptModel.seq)).scalar() or 0) + 1

    def _receipt_row_by_id(self, receipt_id: str) -> Optional[ReceiptModel]:
        return self.db.query(ReceiptModel).filter(ReceiptModel.id == receipt_id).first()

    def get_receipt(self, receipt_id: str) -> Optional[Receipt]:
        row = self._receipt_row_by_id(receipt_id)
        return transform_receipt(row) if row else None

    def add_receipt(self, receipt: Receipt) -> Receipt:
        row = _receipt_row(
            receipt.model_copy(update={"id": new_id(), "status": "pending"}),
            self._next_seq(),
        )
        self.db.add(row)
        self.db.commit()
        logger.info("Stored receipt %s", row.id)
        return transform_receipt(row)

    def update_receipt(self, receipt_id: str, **fields) -> Optional[Receipt]:
        row = self._receipt_row_by_id(receipt_id)
        if row is None:
            return None
        for key, value in fields.items():
            if key in IMMUTABLE_RECEIPT_FIELDS:
                continue
            if key == "items":
                row.items_json = _items_json(value)
            else:
                setattr(row, key, value)
        self.db.commit()
        return transform_receipt(row)

    def delete_receipt(self, receipt_id: str) -> bool:
        row = self._receipt_row_by_id(receipt_id)
        if row is None:
            return False
        self.db.delete(row)
        self.db.commit()
        logger.info("Deleted receipt %s", receipt_id)
        return True

    # ── users ────────────────────────────────────────────────────────────
    def get_users(self) -> list[User]:
        rows = self.db.query(UserModel).order_by(UserModel.id).all()
        return [transform_user(r) for r in rows]

    def _user_row_by_id(self, user_id: str) -> Optional[UserModel]:
        return self.db.query(UserModel).filter(UserModel.id == user_id).first()

    def get_user(self, user_id: str) -> Optional[User]:
        row = self._user_row_by_id(user_id)
        return transform_user(row) if row else None

    def add_user(self, user: User) -> User:
        row = UserModel(**user.model_dump(exclude={"id"}), id=user.id or new_id())
        self.db.add(row)
        self.db.commit()
        return transform_user(row)

    def update_user(self, user_id: str, **fields) -> Optional[User]:
        row = self._user_row_by_id(user_id)
        if row is None:
            return None
        fields.pop("id", None)
        for key, value in fields.items():
            setattr(row, key, value)
        self.db.commit()
        return transform_user(row)

    def delete_user(self, user_id: str) -> bool:
        row = self._user_row_by_id(user_id)
        if row is None:
            return False
        self.db.delete(row)
        self.db.commit()
        return True

    # ── departments ──────────────────────────────────────────────────────
    def _transform_department(self, row: DepartmentModel) -> Department:
        dept = Department(id=row.id, name=row.name, supervisor_id=row.supervisor_id)
        dept.employee_ids = derive_members(dept, self.get_users())
        return dept

    def get_departments(self) -> list[Department]:
        rows = self.db.query(DepartmentModel).order_by(DepartmentModel.name).all()
        return [self._transform_department(r) for r in rows]

    def _department_row_by_id(self, department_id: str) -> Optional[DepartmentModel]:
        return (
            self.db.query(DepartmentModel)
            .filter(DepartmentModel.id == department_id)
            .first()
        )

    def get_department(self, department_id: str) -> Optional[Department]:
        row = self._department_row_by_id(department_id)
        return self._transform_department(row) if row else None

    def add_department(self, department: Department) -> Department:
        row = DepartmentModel(
            id=department.id or new_id(),
            name=department.name,
            supervisor_id=department.supervisor_id,
        )
        self.db.add(row)
        self.db.commit()
        return self._transform_department(row)

    def update_department(self, department_id: str, **fields) -> Optional[Department]:
        row = self._department_row_by_id(department_id)
        if row is None:
            return None
        for key in ("name", "supervisor_id"):
            if key in fields:
                setattr(row, key, fields[key])
        self.db.commit()
        return self._transform_department(row)

    # ── bulk load ────────────────────────────────────────────────────────
    def import_records(
        self,
        users: Iterable[User] = (),
        departments: Iterable[Department] = (),
        receipts: Iterable[Receipt] = (),
    ) -> None:
        for user in users:
            self.db.add(UserModel(**user.model_dump()))
        for dept in departments:
            self.db.add(
                DepartmentModel(id=dept.id, name=dept.name, supervisor_id=dept.supervisor_id)
            )
        seq = self._next_seq()
        for offset, rec in enumerate(receipts):
            self.db.add(_receipt_row(rec, seq + offset))
        self.db.commit()

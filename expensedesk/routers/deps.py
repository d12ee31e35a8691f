"""
Shared FastAPI dependencies: store, services and the session user.

There is no authentication: the caller's identity is trusted from the
``X-User-Id`` header.
"""
from __future__ import annotations

from typing import Optional

from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from expensedesk.config import settings
from expensedesk.database import get_db
from expensedesk.schemas import User
from expensedesk.services import Directory, ReceiptLifecycle
from expensedesk.store import EntityStore, SqlStore


def get_store(db: Session = Depends(get_db)) -> EntityStore:
    return SqlStore(db)


def get_lifecycle(store: EntityStore = Depends(get_store)) -> ReceiptLifecycle:
    return ReceiptLifecycle(store)


def get_directory(store: EntityStore = Depends(get_store)) -> Directory:
    return Directory(
        store,
        mock_password=settings.MOCK_PASSWORD,
        mock_token=settings.MOCK_TOKEN,
    )


def current_user(
    x_user_id: Optional[str] = Header(default=None),
    store: EntityStore = Depends(get_store),
) -> User:
    if not x_user_id:
        raise HTTPException(status_code=401, detail="X-User-Id header required")
    user = store.get_user(x_user_id)
    if user is None:
        raise HTTPException(status_code=401, detail="Unknown user")
    return user

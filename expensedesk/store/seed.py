"""
Demo dataset loaded into an empty store.
"""
from __future__ import annotations

import datetime as dt
import logging

from expensedesk.schemas import Department, LineItem, Receipt, User
from expensedesk.store.base import EntityStore

logger = logging.getLogger(__name__)

PLACEHOLDER_IMAGE = "https://placehold.co/600x400"


def demo_users() -> list[User]:
    return [
        User(id="1", first_name="John", last_name="Doe", email="john@example.com",
             role="supervisor", department="Engineering"),
        User(id="2", first_name="Jane", last_name="Smith", email="jane@example.com",
             role="employee", department="Engineering"),
        User(id="3", first_name="Mike", last_name="Johnson", email="mike@example.com",
             role="employee", department="Engineering"),
    ]


def demo_departments() -> list[Department]:
    return [Department(id="1", name="Engineering", supervisor_id="1")]


def demo_receipts() -> list[Receipt]:
    return [
        Receipt(
            id="1",
            user_id="2",
            date=dt.date(2024, 4, 15),
            store="Office Depot",
            total=156.78,
            category="Office",
            subcategory="Supplies",
            items=[
                LineItem(name="Printer Paper", price=45.99, quantity=2),
                LineItem(name="Ink Cartridge", price=64.80, quantity=1),
            ],
            status="pending",
            image=PLACEHOLDER_IMAGE,
            submitted_at=dt.datetime(2024, 4, 15, 9, 0, tzinfo=dt.timezone.utc),
        ),
        Receipt(
            id="2",
            user_id="2",
            date=dt.date(2024, 4, 14),
            store="Delta Airlines",
            total=450.00,
            category="Travel",
            subcategory="Airfare",
            items=[LineItem(name="Flight Ticket", price=450.00, quantity=1)],
            status="approved",
            image=PLACEHOLDER_IMAGE,
            submitted_at=dt.datetime(2024, 4, 14, 9, 0, tzinfo=dt.timezone.utc),
            reviewed_by="1",
        ),
    ]


def seed_demo_data(store: EntityStore) -> bool:
    """Load the demo dataset when *store* holds no users. Returns True if loaded."""
    if not store.is_empty():
        return False
    store.import_records(demo_users(), demo_departments(), demo_receipts())
    logger.info("Demo data loaded")
    return True

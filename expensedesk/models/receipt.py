"""
SQLAlchemy model for receipt persistence.
"""
from sqlalchemy import Boolean, Column, Date, DateTime, Float, Integer, JSON, String, Text

from expensedesk.database import Base


class ReceiptModel(Base):
    __tablename__ = "receipts"

    id = Column(String, primary_key=True)
    seq = Column(Integer, nullable=False, index=True)  # insertion order
    user_id = Column(String, nullable=False, index=True)
    date = Column(Date, nullable=False)
    store = Column(String, nullable=False)
    category = Column(String, nullable=False)
    subcategory = Column(String, nullable=False)
    items_json = Column(JSON, nullable=False, default=list)  # [{name, price, quantity}]
    total = Column(Float, nullable=False, default=0.0)
    status = Column(String, nullable=False, default="pending")  # pending, approved, rejected
    flagged = Column(Boolean, nullable=False, default=False)
    comment = Column(Text)
    rejection_reason = Column(Text)
    image = Column(Text, nullable=False, default="")  # data URI or URL
    submitted_at = Column(DateTime(timezone=True))
    reviewed_at = Column(DateTime(timezone=True))
    reviewed_by = Column(String)

"""
expensedesk schemas — canonical Pydantic v2 models shared by the store,
the receipt services and the HTTP layer.
"""
from __future__ import annotations

import datetime as dt
from typing import Literal, Optional, Union

from pydantic import BaseModel, Field

Role = Literal["employee", "supervisor"]
ReceiptStatus = Literal["pending", "approved", "rejected"]
GroupBy = Literal["category", "employee", "month"]


# ---------------------------------------------------------------------------
# People
# ---------------------------------------------------------------------------

class User(BaseModel):
    id: str = ""
    first_name: str
    last_name: str = ""
    email: str
    role: Role = "employee"
    department: str = Field("", description="Department name")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def is_supervisor(self) -> bool:
        return self.role == "supervisor"


class Department(BaseModel):
    id: str = ""
    name: str
    supervisor_id: str
    employee_ids: list[str] = Field(
        default_factory=list,
        description="Derived from User.department; never written directly",
    )


# ---------------------------------------------------------------------------
# Receipts
# ---------------------------------------------------------------------------

class LineItem(BaseModel):
    name: str
    price: float = Field(..., ge=0)
    quantity: int = Field(1, ge=1)


class Receipt(BaseModel):
    id: str = ""
    user_id: str
    date: dt.date
    store: str
    category: str
    subcategory: str
    items: list[LineItem] = Field(default_factory=list)
    total: float = 0.0
    status: ReceiptStatus = "pending"
    flagged: bool = False
    comment: Optional[str] = None
    rejection_reason: Optional[str] = None
    image: str = ""
    submitted_at: Optional[dt.datetime] = None
    reviewed_at: Optional[dt.datetime] = None
    reviewed_by: Optional[str] = None

    @property
    def notes(self) -> str:
        """Single notes value: the rejection reason wins over the comment."""
        return self.rejection_reason or self.comment or ""


class DraftItem(BaseModel):
    """A line item as typed by the submitter; price may still be text."""
    name: str = ""
    price: Optional[Union[float, str]] = None
    quantity: Optional[int] = 1


class ReceiptDraft(BaseModel):
    """Unvalidated receipt input. Validation happens in the lifecycle."""
    date: Optional[dt.date] = None
    store: str = ""
    category: str = ""
    subcategory: str = ""
    items: list[DraftItem] = Field(default_factory=list)
    image: Optional[str] = None
    comment: Optional[str] = None


# ---------------------------------------------------------------------------
# Text extraction
# ---------------------------------------------------------------------------

class ExtractionSuggestions(BaseModel):
    """Best-effort pre-fill values read from a receipt image."""
    store: Optional[str] = None
    date: Optional[dt.date] = None
    items: list[LineItem] = Field(default_factory=list)
    total: Optional[float] = None
    raw_text: str = ""

    @property
    def is_empty(self) -> bool:
        return not (self.store or self.date or self.items or self.total is not None)


# ---------------------------------------------------------------------------
# Reports
# ---------------------------------------------------------------------------

class ReportFilter(BaseModel):
    date_from: Optional[dt.date] = None
    date_to: Optional[dt.date] = None
    employee: str = Field("all", description="User id or 'all'")
    category: str = "all"
    status: str = "all"
    flagged: Optional[bool] = None
    search: str = ""


class ReportSummary(BaseModel):
    total_amount: float = 0.0
    approved_amount: float = 0.0
    pending_amount: float = 0.0
    rejected_amount: float = 0.0
    receipt_count: int = 0
    average: float = 0.0


class BreakdownRow(BaseModel):
    key: str
    label: str
    value: float


class DashboardCounts(BaseModel):
    total: int = 0
    pending: int = 0
    approved: int = 0
    rejected: int = 0
    flagged: int = 0


# ---------------------------------------------------------------------------
# API request / response envelopes
# ---------------------------------------------------------------------------

class SubmitRequest(ReceiptDraft):
    suggestions: Optional[ExtractionSuggestions] = None


class ApproveRequest(BaseModel):
    comment: Optional[str] = None


class RejectRequest(BaseModel):
    reason: str = ""


class ReportResponse(BaseModel):
    filters: ReportFilter
    summary: ReportSummary
    breakdown: list[BreakdownRow] = Field(default_factory=list)


class DashboardResponse(BaseModel):
    counts: DashboardCounts
    recent: list[Receipt] = Field(default_factory=list)


class AssistantRequest(BaseModel):
    question: str


class AssistantResponse(BaseModel):
    answer: str

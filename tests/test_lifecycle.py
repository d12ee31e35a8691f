"""
Receipt lifecycle — submission, approval, rejection, flagging.
"""
import datetime as dt

import pytest

from expensedesk.errors import InvalidTransition, NotFound, PermissionDenied, ValidationError
from expensedesk.schemas import DraftItem, ExtractionSuggestions, LineItem, ReceiptDraft, User
from expensedesk.services import ReceiptLifecycle
from expensedesk.services.lifecycle import compute_total, parse_price


def _draft(**overrides) -> ReceiptDraft:
    data = dict(
        date=dt.date(2024, 4, 20),
        store="Staples",
        category="Office",
        subcategory="Supplies",
        items=[
            DraftItem(name="Pens", price="3.35", quantity=3),
            DraftItem(name="Stapler", price=12.99, quantity=1),
        ],
        image="data:image/png;base64,AAAA",
    )
    data.update(overrides)
    return ReceiptDraft(**data)


@pytest.fixture()
def lifecycle(store):
    return ReceiptLifecycle(store)


@pytest.fixture()
def supervisor(users):
    return users["1"]


@pytest.fixture()
def jane(users):
    return users["2"]


class TestSubmit:
    def test_submit_computes_total(self, lifecycle, jane):
        receipt = lifecycle.submit(_draft(), jane)
        assert receipt.total == round(3.35 * 3 + 12.99, 2)
        assert receipt.status == "pending"
        assert receipt.flagged is False
        assert receipt.user_id == "2"
        assert receipt.submitted_at is not None

    @pytest.mark.parametrize(
        "items",
        [
            [DraftItem(name="A", price="0.10", quantity=3)],
            [DraftItem(name="A", price="19.99", quantity=7), DraftItem(name="B", price="0.01")],
            [DraftItem(name="A", price="0", quantity=1)],
        ],
    )
    def test_total_is_rounded_sum(self, lifecycle, jane, items):
        receipt = lifecycle.submit(_draft(items=items), jane)
        expected = round(sum(float(i.price) * i.quantity for i in items), 2)
        assert receipt.total == expected

    def test_missing_fields_are_listed(self, lifecycle, jane, store):
        with pytest.raises(ValidationError) as exc:
            lifecycle.submit(_draft(store=" ", subcategory="", image=None), jane)
        assert set(exc.value.fields) == {"store", "subcategory", "image"}
        assert len(store.get_receipts()) == 2

    def test_subcategory_must_belong_to_category(self, lifecycle, jane):
        with pytest.raises(ValidationError) as exc:
            lifecycle.submit(_draft(category="Travel", subcategory="Supplies"), jane)
        assert exc.value.fields == ["subcategory"]

    def test_unknown_category(self, lifecycle, jane):
        with pytest.raises(ValidationError) as exc:
            lifecycle.submit(_draft(category="Snacks"), jane)
        assert "category" in exc.value.fields

    def test_invalid_items(self, lifecycle, jane):
        items = [
            DraftItem(name="", price="1.00"),
            DraftItem(name="Ink", price="abc"),
            DraftItem(name="Paper", price="-2"),
            DraftItem(name="Clips", price="1.00", quantity=0),
        ]
        with pytest.raises(ValidationError) as exc:
            lifecycle.submit(_draft(items=items), jane)
        assert exc.value.fields == [
            "items[0].name",
            "items[1].price",
            "items[2].price",
            "items[3].quantity",
        ]

    def test_no_items(self, lifecycle, jane):
        with pytest.raises(ValidationError) as exc:
            lifecycle.submit(_draft(items=[]), jane)
        assert exc.value.fields == ["items"]

    def test_date_defaults_to_today(self, lifecycle, jane):
        receipt = lifecycle.submit(_draft(date=None), jane)
        assert receipt.date == dt.date.today()

    def test_unknown_owner(self, lifecycle):
        ghost = User(id="404", first_name="Ghost", email="ghost@example.com")
        with pytest.raises(NotFound):
            lifecycle.submit(_draft(), ghost)

    def test_suggestions_fill_blanks_only(self, lifecycle, jane):
        suggestions = ExtractionSuggestions(
            store="OCR Store",
            date=dt.date(2024, 1, 2),
            items=[LineItem(name="Scanned", price=5.0, quantity=2)],
        )
        draft = _draft(store="", date=None)
        receipt = lifecycle.submit(draft, jane, suggestions=suggestions)
        assert receipt.store == "OCR Store"
        assert receipt.date == dt.date(2024, 1, 2)
        # typed items win over scanned ones
        assert [i.name for i in receipt.items] == ["Pens", "Stapler"]

    def test_suggestions_still_validated(self, lifecycle, jane):
        suggestions = ExtractionSuggestions(store="OCR Store")
        with pytest.raises(ValidationError) as exc:
            lifecycle.submit(_draft(store="", image=""), jane, suggestions=suggestions)
        assert exc.value.fields == ["image"]


class TestApproveReject:
    def test_approve_pending(self, lifecycle, supervisor):
        receipt = lifecycle.approve("1", supervisor, comment="ok")
        assert receipt.status == "approved"
        assert receipt.comment == "ok"
        assert receipt.reviewed_by == "1"
        assert receipt.reviewed_at is not None
        assert receipt.reviewed_at.utcoffset() == dt.timedelta(0)

    def test_approve_already_approved(self, lifecycle, supervisor, store):
        with pytest.raises(InvalidTransition) as exc:
            lifecycle.approve("2", supervisor)
        assert exc.value.status == "approved"
        assert store.get_receipt("2").status == "approved"

    def test_reject_requires_reason(self, lifecycle, supervisor, store):
        with pytest.raises(ValidationError):
            lifecycle.reject("1", supervisor, "")
        with pytest.raises(ValidationError):
            lifecycle.reject("1", supervisor, "   ")
        assert store.get_receipt("1").status == "pending"

    def test_reject_sets_reason(self, lifecycle, supervisor):
        receipt = lifecycle.reject("1", supervisor, "Missing itemised invoice")
        assert receipt.status == "rejected"
        assert receipt.rejection_reason == "Missing itemised invoice"
        assert receipt.notes == "Missing itemised invoice"

    def test_terminal_states_are_final(self, lifecycle, supervisor):
        lifecycle.reject("1", supervisor, "duplicate")
        with pytest.raises(InvalidTransition):
            lifecycle.approve("1", supervisor)
        with pytest.raises(InvalidTransition):
            lifecycle.reject("1", supervisor, "again")

    def test_employee_cannot_review(self, lifecycle, jane, store):
        with pytest.raises(PermissionDenied):
            lifecycle.approve("1", jane)
        with pytest.raises(PermissionDenied):
            lifecycle.toggle_flag("1", jane)
        assert store.get_receipt("1").status == "pending"

    def test_unknown_receipt(self, lifecycle, supervisor):
        with pytest.raises(NotFound):
            lifecycle.approve("missing", supervisor)


class TestFlag:
    def test_toggle(self, lifecycle, supervisor):
        assert lifecycle.toggle_flag("1", supervisor).flagged is True
        assert lifecycle.toggle_flag("1", supervisor).flagged is False

    def test_flag_is_independent_of_status(self, lifecycle, supervisor):
        lifecycle.toggle_flag("1", supervisor)
        receipt = lifecycle.approve("1", supervisor)
        assert receipt.status == "approved"
        assert receipt.flagged is True

    def test_only_pending_can_be_flagged(self, lifecycle, supervisor):
        with pytest.raises(InvalidTransition):
            lifecycle.toggle_flag("2", supervisor)


class TestViewAndDelete:
    def test_owner_can_view(self, lifecycle, jane):
        assert lifecycle.get("1", jane).id == "1"

    def test_other_employee_cannot_view(self, lifecycle, users):
        with pytest.raises(PermissionDenied):
            lifecycle.get("1", users["3"])

    def test_owner_deletes_pending(self, lifecycle, jane, store):
        lifecycle.delete("1", jane)
        assert store.get_receipt("1") is None

    def test_owner_cannot_delete_decided(self, lifecycle, jane):
        with pytest.raises(PermissionDenied):
            lifecycle.delete("2", jane)

    def test_supervisor_deletes_any(self, lifecycle, supervisor, store):
        lifecycle.delete("2", supervisor)
        assert store.get_receipt("2") is None


class TestHelpers:
    def test_parse_price(self):
        assert parse_price("12.50") == 12.5
        assert parse_price(" $3 ") == 3.0
        assert parse_price(0) == 0.0
        assert parse_price("") is None
        assert parse_price("nan") is None
        assert parse_price("-1") is None
        assert parse_price(None) is None

    def test_parse_price_thousands_separator(self):
        assert parse_price("1,234.50") == 1234.5
        assert parse_price("$12,000.00") == 12000.0
        assert parse_price("1,5") is None

    def test_compute_total(self):
        items = [LineItem(name="Printer Paper", price=45.99, quantity=2),
                 LineItem(name="Ink Cartridge", price=64.80, quantity=1)]
        assert compute_total(items) == 156.78

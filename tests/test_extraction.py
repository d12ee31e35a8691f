"""
Receipt text extraction — parsing, pre-fill merge and failure handling.
"""
import io
from datetime import date

import pytest
from PIL import Image
from pytesseract import TesseractNotFoundError

import expensedesk.pipeline as pipeline
from expensedesk.pipeline import apply_suggestions, extract_suggestions
from expensedesk.pipeline.parser import find_date, find_total, parse_receipt_text
from expensedesk.schemas import DraftItem, ExtractionSuggestions, LineItem, ReceiptDraft

SAMPLE = """\
WALMART SUPERCENTER
(555) 123-4567
03/14/2024 10:22
Milk 2 x 3.49
Bread 2.50
Multiple Pack Batteries 7.99
SUBTOTAL 17.47
TAX 0.50
TOTAL 17.97
VISA 17.97
"""


class TestParser:
    def test_sample_receipt(self):
        s = parse_receipt_text(SAMPLE)
        assert s.store == "WALMART SUPERCENTER"
        assert s.date == date(2024, 3, 14)
        assert s.total == 17.97
        assert [(i.name, i.price, i.quantity) for i in s.items] == [
            ("Milk", 3.49, 2),
            ("Bread", 2.50, 1),
            ("Multiple Pack Batteries", 7.99, 1),
        ]
        assert s.raw_text == SAMPLE

    def test_blank_text(self):
        s = parse_receipt_text("")
        assert s.is_empty
        assert s.items == []

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("Date: 2024-01-05", date(2024, 1, 5)),
            ("25/12/2023", date(2023, 12, 25)),
            ("1/2/24", date(2024, 1, 2)),
            ("99/99/2024", None),
        ],
    )
    def test_find_date(self, text, expected):
        assert find_date(text) == expected

    def test_thousands_separator(self):
        s = parse_receipt_text("BEST BUY\nLaptop 1,234.50\nTOTAL $1,234.50\n")
        assert [(i.name, i.price) for i in s.items] == [("Laptop", 1234.5)]
        assert s.total == 1234.5

    def test_total_skips_subtotal(self):
        assert find_total(["Subtotal 5.00", "Sub Total 5.00"]) is None
        assert find_total(["Total 4,50", "Grand Total 9.99"]) == 9.99


class TestPrefill:
    def test_fills_blank_fields(self):
        draft = ReceiptDraft(category="Office", items=[DraftItem()])
        s = ExtractionSuggestions(
            store="Staples", date=date(2024, 4, 1), items=[LineItem(name="Pens", price=2.0)]
        )
        merged = apply_suggestions(draft, s)
        assert merged.store == "Staples"
        assert merged.date == date(2024, 4, 1)
        assert [(i.name, i.price) for i in merged.items] == [("Pens", 2.0)]
        assert merged.category == "Office"

    def test_typed_values_win(self):
        draft = ReceiptDraft(
            store="Mine", date=date(2024, 5, 5), items=[DraftItem(name="Paper", price="4")]
        )
        s = ExtractionSuggestions(
            store="Other", date=date(2024, 4, 1), items=[LineItem(name="Pens", price=2.0)]
        )
        merged = apply_suggestions(draft, s)
        assert merged.store == "Mine"
        assert merged.date == date(2024, 5, 5)
        assert merged.items[0].name == "Paper"

    def test_empty_suggestions_are_a_no_op(self):
        draft = ReceiptDraft(store="")
        assert apply_suggestions(draft, ExtractionSuggestions()) is draft
        assert apply_suggestions(draft, None) is draft


class TestExtractSuggestions:
    def test_parses_read_text(self, monkeypatch):
        monkeypatch.setattr(pipeline, "read_text", lambda *a, **kw: SAMPLE)
        s = extract_suggestions(b"fake")
        assert s.store == "WALMART SUPERCENTER"
        assert s.total == 17.97

    @pytest.mark.parametrize("exc", [TesseractNotFoundError(), OSError("bad image")])
    def test_failure_yields_empty_suggestions(self, monkeypatch, exc):
        def boom(*a, **kw):
            raise exc

        monkeypatch.setattr(pipeline, "read_text", boom)
        s = extract_suggestions(b"fake")
        assert s.is_empty
        assert s.raw_text == ""

    def test_undecodable_image(self):
        assert extract_suggestions(b"not an image").is_empty

    def test_oversized_image(self, monkeypatch):
        buf = io.BytesIO()
        Image.new("1", (40, 40)).save(buf, format="PNG")
        monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 100)
        assert extract_suggestions(buf.getvalue()).is_empty

    def test_timeout_yields_empty_suggestions(self, monkeypatch):
        def slow(*a, **kw):
            raise RuntimeError("Tesseract process timeout")

        monkeypatch.setattr(pipeline, "read_text", slow)
        assert extract_suggestions(b"fake").is_empty

"""
Regex post-processing of OCR text into pre-fill suggestions.

Heuristic and forgiving: anything that does not parse is simply left out.
"""
from __future__ import annotations

import re
from datetime import date
from typing import Optional

from expensedesk.schemas import ExtractionSuggestions, LineItem

AMOUNT_REGEX = r"(\d{1,3}(?:,\d{3})+\.\d{2}|\d+[.,]\d{2})"
_AMOUNT_AT_END = re.compile(r"^(?P<head>.*?)\s*\$?" + AMOUNT_REGEX + r"\s*$")
_QTY_AT_PRICE = re.compile(r"^(?P<name>.*?)\s+(?P<qty>\d+)\s*[xX@]\s*\$?" + AMOUNT_REGEX + r"$")

_ISO_DATE = re.compile(r"\b(\d{4})\s*[./-]\s*(\d{1,2})\s*[./-]\s*(\d{1,2})\b")
_NUMERIC_DATE = re.compile(r"\b(\d{1,2})[./-](\d{1,2})[./-](\d{4}|\d{2})\b")

NOISE_WORDS = re.compile(
    r"\b(duplicate|copy|thank you|tax invoice|invoice|receipt|welcome)\b", re.IGNORECASE
)
NON_ITEM_WORDS = re.compile(
    r"\b(total|subtotal|sub total|tax|vat|change|cash|balance|amount due|visa|mastercard"
    r"|amex|debit|credit|tip|tender|discount)\b",
    re.IGNORECASE,
)


def _clean_line(s: str) -> str:
    return re.sub(r"\s+", " ", (s or "").strip())


def _amount(s: str) -> float:
    if "," in s and "." in s:
        return float(s.replace(",", ""))
    return float(s.replace(",", "."))


def _is_noise_line(line: str) -> bool:
    return len(line) < 3 or bool(NOISE_WORDS.search(line))


def find_store(lines: list[str]) -> Optional[str]:
    """Merchant name: first line near the top with letters that is not an item."""
    for line in lines[:8]:
        if _is_noise_line(line) or _AMOUNT_AT_END.match(line):
            continue
        digits = re.sub(r"\D", "", line)
        if len(digits) >= 6:
            continue  # phone numbers, addresses
        if re.search(r"[A-Za-z]", line):
            return re.sub(r"^[^A-Za-z0-9]+", "", line).strip()
    return None


def _safe_date(year: int, month: int, day: int) -> Optional[date]:
    if year < 100:
        year += 2000
    try:
        return date(year, month, day)
    except ValueError:
        return None


def find_date(text: str) -> Optional[date]:
    for m in _ISO_DATE.finditer(text):
        found = _safe_date(int(m.group(1)), int(m.group(2)), int(m.group(3)))
        if found:
            return found
    for m in _NUMERIC_DATE.finditer(text):
        first, second, year = int(m.group(1)), int(m.group(2)), int(m.group(3))
        # month first unless that cannot be a month
        month, day = (second, first) if first > 12 else (first, second)
        found = _safe_date(year, month, day)
        if found:
            return found
    return None


def find_items(lines: list[str]) -> list[LineItem]:
    items: list[LineItem] = []
    for line in lines:
        if NON_ITEM_WORDS.search(line):
            continue
        m = _AMOUNT_AT_END.match(line)
        if not m:
            continue
        head = m.group("head").strip()
        price, quantity = _amount(m.group(2)), 1

        qm = _QTY_AT_PRICE.match(line)
        if qm:
            head = qm.group("name").strip()
            quantity = max(1, int(qm.group("qty")))
            price = _amount(qm.group(3))

        if not re.search(r"[A-Za-z]", head) or _ISO_DATE.search(head) or _NUMERIC_DATE.search(head):
            continue
        items.append(LineItem(name=head, price=price, quantity=quantity))
    return items


def find_total(lines: list[str]) -> Optional[float]:
    """Last amount on the bottom-most ``total`` line that is not a subtotal."""
    for line in reversed(lines):
        low = line.lower()
        if "total" not in low or "sub" in low:
            continue
        matches = re.findall(AMOUNT_REGEX, line)
        if matches:
            return _amount(matches[-1])
    return None


def parse_receipt_text(text: str) -> ExtractionSuggestions:
    lines = [_clean_line(l) for l in (text or "").splitlines() if l.strip()]
    return ExtractionSuggestions(
        store=find_store(lines),
        date=find_date(text or ""),
        items=find_items(lines),
        total=find_total(lines),
        raw_text=text or "",
    )

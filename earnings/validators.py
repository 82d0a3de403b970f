"""Validation and normalisation helpers for daily ledger entries."""

from __future__ import annotations

import re
from datetime import date
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from .exceptions import ValidationError
from .models import ZERO, DailyEntry, Expense

DATE_PATTERN = re.compile(r"^[0-9]{4}-[0-9]{2}-[0-9]{2}$")

# Two fraction digits plus twelve integer digits stay exact as a float.
MAX_VALUE = Decimal("1000000000000")

ExpenseRow = Tuple[object, object]


def _quantize_two_decimals(amount: Decimal) -> Decimal:
    """Round the amount to two decimal places using HALF_UP rounding."""
    return amount.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def _to_decimal(raw: object) -> Optional[Decimal]:
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, Decimal):
        value = raw
    else:
        text = str(raw).strip()
        if not text:
            return None
        try:
            value = Decimal(text)
        except (InvalidOperation, ValueError):
            return None
    if not value.is_finite():
        return None
    return value


def exceeds_limit(raw: object) -> bool:
    """True for finite numbers at or beyond ``MAX_VALUE`` in magnitude."""
    value = _to_decimal(raw)
    return value is not None and abs(value) >= MAX_VALUE


def parse_decimal(raw: object) -> Optional[Decimal]:
    """Parse raw form input into a finite Decimal, or ``None`` if it is not numeric.

    Values at or beyond ``MAX_VALUE`` count as not numeric, which keeps every
    stored amount exact through a JSON float.
    """
    value = _to_decimal(raw)
    if value is None or abs(value) >= MAX_VALUE:
        return None
    return value


def parse_non_negative(raw: object) -> Decimal:
    """Blank, garbage and negative values all collapse to zero."""
    value = parse_decimal(raw)
    if value is None or value < 0:
        return ZERO
    return _quantize_two_decimals(value)


def parse_positive(raw: object) -> Optional[Decimal]:
    value = parse_decimal(raw)
    if value is None or value <= 0:
        return None
    quantized = _quantize_two_decimals(value)
    # 0.001 rounds to 0.00, which would no longer be a positive amount.
    return quantized if quantized > 0 else None


def is_valid_date(value: object) -> bool:
    """True for real calendar dates written as zero-padded ``YYYY-MM-DD``."""
    if not isinstance(value, str) or not DATE_PATTERN.fullmatch(value):
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


def normalize_expenses(rows: Optional[Iterable[ExpenseRow]]) -> Tuple[Expense, ...]:
    """Keep rows with a non-empty category and a positive amount, in input order."""
    if rows is None:
        return ()
    kept: List[Expense] = []
    for category, amount in rows:
        name = category.strip() if isinstance(category, str) else ""
        value = parse_positive(amount)
        if not name or value is None:
            continue
        kept.append(Expense(category=name, amount=value))
    return tuple(kept)


def normalize_entry(
    hours: object = None,
    tips: object = None,
    expenses: Optional[Iterable[ExpenseRow]] = None,
    notes: object = None,
) -> DailyEntry:
    """Turn raw form-like values into a well-formed DailyEntry. Never fails."""
    return DailyEntry(
        hours=parse_non_negative(hours),
        tips=parse_non_negative(tips),
        expenses=normalize_expenses(expenses),
        notes=notes.strip() if isinstance(notes, str) else "",
    )


def _expense_rows(raw: Sequence[object]) -> List[ExpenseRow]:
    rows: List[ExpenseRow] = []
    for item in raw:
        if isinstance(item, Mapping):
            rows.append((item.get("category"), item.get("amount")))
        elif isinstance(item, (list, tuple)) and len(item) == 2:
            rows.append((item[0], item[1]))
    return rows


def entry_from_payload(payload: Mapping[str, Any]) -> DailyEntry:
    """Lenient hydration of a stored or submitted ``{hours, tips, expenses, notes}`` object."""
    raw_expenses = payload.get("expenses")
    rows = _expense_rows(raw_expenses) if isinstance(raw_expenses, list) else []
    return normalize_entry(
        hours=payload.get("hours"),
        tips=payload.get("tips"),
        expenses=rows,
        notes=payload.get("notes"),
    )


def _ensure_numeric(value: object, field: str, key: str) -> None:
    if value is None:
        return
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal, str)):
        raise ValidationError(f"{key}: {field} must be numeric")
    if isinstance(value, str) and not value.strip():
        return
    if exceeds_limit(value):
        raise ValidationError(f"{key}: {field} must be below {MAX_VALUE}")
    if isinstance(value, str) and parse_decimal(value) is None:
        raise ValidationError(f"{key}: {field} must be numeric")


def validate_import_payload(payload: object) -> Dict[str, DailyEntry]:
    """Strictly check an imported ledger, then normalise every entry.

    Raises ValidationError on the first structural problem so the caller can
    reject the whole import.
    """
    if not isinstance(payload, Mapping):
        raise ValidationError("Imported ledger must be a JSON object keyed by date")

    entries: Dict[str, DailyEntry] = {}
    for key, raw in payload.items():
        if not is_valid_date(key):
            raise ValidationError(f"Invalid date key: {key!r}")
        if not isinstance(raw, Mapping):
            raise ValidationError(f"{key}: entry must be an object")
        _ensure_numeric(raw.get("hours"), "hours", key)
        _ensure_numeric(raw.get("tips"), "tips", key)
        expenses = raw.get("expenses")
        if expenses is not None:
            if not isinstance(expenses, list):
                raise ValidationError(f"{key}: expenses must be a list")
            for item in expenses:
                if not isinstance(item, Mapping):
                    raise ValidationError(f"{key}: each expense must be an object")
                if exceeds_limit(item.get("amount")):
                    raise ValidationError(f"{key}: expense amount must be below {MAX_VALUE}")
        notes = raw.get("notes")
        if notes is not None and not isinstance(notes, str):
            raise ValidationError(f"{key}: notes must be a string")
        entries[key] = entry_from_payload(raw)
    return entries

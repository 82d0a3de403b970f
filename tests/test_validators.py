"""Entry normalisation and import validation tests."""

from __future__ import annotations

from decimal import Decimal

import pytest

from earnings.exceptions import ValidationError
from earnings.models import DEFAULT_ENTRY, Expense
from earnings.validators import (
    entry_from_payload,
    is_valid_date,
    normalize_entry,
    validate_import_payload,
)


def test_blank_and_garbage_numbers_become_zero():
    entry = normalize_entry(hours="", tips="abc", expenses=[], notes="")

    assert entry == DEFAULT_ENTRY
    assert entry.hours == Decimal("0")
    assert entry.tips == Decimal("0")


@pytest.mark.parametrize("raw", [None, "nan", "Infinity", "-3", True])
def test_non_finite_negative_and_odd_values_become_zero(raw):
    assert normalize_entry(tips=raw).tips == Decimal("0")


def test_numbers_are_parsed_and_rounded_to_cents():
    entry = normalize_entry(hours=" 5.5 ", tips="100.005")

    assert entry.hours == Decimal("5.50")
    assert entry.tips == Decimal("100.01")


def test_invalid_expense_rows_are_dropped_in_order():
    entry = normalize_entry(
        expenses=[
            ("food", "20"),
            ("", "5"),
            ("   ", "5"),
            ("fuel", "0"),
            ("parking", "-2"),
            ("snacks", "x"),
            (" coffee ", "3.5"),
        ]
    )

    assert entry.expenses == (
        Expense(category="food", amount=Decimal("20")),
        Expense(category="coffee", amount=Decimal("3.50")),
    )


def test_amount_rounding_to_zero_is_not_positive():
    assert normalize_entry(expenses=[("food", "0.001")]).expenses == ()


def test_notes_are_trimmed():
    assert normalize_entry(notes="  long shift \n").notes == "long shift"


@pytest.mark.parametrize(
    "value, expected",
    [
        ("2024-02-29", True),
        ("2023-02-29", False),
        ("2024-3-01", False),
        ("2024-13-01", False),
        ("20240301", False),
        ("", False),
        (None, False),
    ],
)
def test_is_valid_date(value, expected):
    assert is_valid_date(value) is expected


def test_entry_from_payload_accepts_stored_shape():
    entry = entry_from_payload(
        {
            "hours": 5,
            "tips": 100,
            "expenses": [{"category": "food", "amount": 20}, {"category": "", "amount": 1}],
            "notes": "ok",
        }
    )

    assert entry.tips == Decimal("100")
    assert [expense.category for expense in entry.expenses] == ["food"]


def test_import_payload_rejects_bad_keys_and_shapes():
    with pytest.raises(ValidationError):
        validate_import_payload([])
    with pytest.raises(ValidationError):
        validate_import_payload({"2024-02-30": {"tips": 1}})
    with pytest.raises(ValidationError):
        validate_import_payload({"2024-03-01": "tips"})
    with pytest.raises(ValidationError):
        validate_import_payload({"2024-03-01": {"tips": "lots"}})
    with pytest.raises(ValidationError):
        validate_import_payload({"2024-03-01": {"expenses": {"food": 1}}})
    with pytest.raises(ValidationError):
        validate_import_payload({"2024-03-01": {"expenses": ["food"]}})
    with pytest.raises(ValidationError):
        validate_import_payload({"2024-03-01": {"notes": 3}})


def test_import_payload_normalises_valid_entries():
    entries = validate_import_payload(
        {"2024-03-01": {"tips": "100", "expenses": [{"category": "food", "amount": 0}]}}
    )

    assert entries["2024-03-01"].tips == Decimal("100")
    assert entries["2024-03-01"].expenses == ()


@pytest.mark.parametrize("raw", ["1e30", "9" * 29, "1000000000000", "-1e30"])
def test_huge_numbers_are_treated_as_invalid(raw):
    entry = normalize_entry(hours=raw, tips=raw, expenses=[("food", raw)])

    assert entry.hours == Decimal("0")
    assert entry.tips == Decimal("0")
    assert entry.expenses == ()


def test_largest_accepted_amount_is_kept():
    entry = normalize_entry(tips="999999999999.99")

    assert entry.tips == Decimal("999999999999.99")


@pytest.mark.parametrize(
    "raw",
    [
        {"2024-03-01": {"tips": Decimal("1E+30")}},
        {"2024-03-01": {"hours": "9" * 29}},
        {"2024-03-01": {"expenses": [{"category": "food", "amount": 10 ** 30}]}},
    ],
)
def test_import_payload_rejects_out_of_range_numbers(raw):
    with pytest.raises(ValidationError):
        validate_import_payload(raw)

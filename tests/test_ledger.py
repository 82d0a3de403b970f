"""Ledger store, persistence and import/export tests."""

from __future__ import annotations

import json
from decimal import Decimal

import pytest

from earnings.exceptions import PersistenceError, ValidationError
from earnings.ledger import LedgerStore
from earnings.models import DEFAULT_ENTRY


def test_missing_date_returns_default_entry(store):
    assert store.get("2024-03-01") is DEFAULT_ENTRY
    assert store.keys() == []


def test_put_replaces_whole_entry(store, make_entry):
    store.put("2024-03-01", make_entry(tips="100", expenses=[("food", "20")], notes="first"))
    store.put("2024-03-01", make_entry(tips="80"))

    entry = store.get("2024-03-01")
    assert entry.tips == Decimal("80")
    assert entry.expenses == ()
    assert entry.notes == ""


def test_put_with_invalid_date_is_a_noop(store, make_entry):
    assert store.put("2024-3-1", make_entry(tips="10")) is False
    assert store.put("not a date", make_entry(tips="10")) is False
    assert len(store) == 0


def test_explicit_zero_entries_are_kept(store, make_entry):
    store.put("2024-03-02", make_entry())
    store.put("2024-03-01", make_entry(tips="5"))

    assert store.keys() == ["2024-03-01", "2024-03-02"]


def test_writes_go_through_to_storage(storage, store, make_entry):
    store.put("2024-03-01", make_entry(tips="100", hours="5", expenses=[("food", "20")]))

    reloaded = LedgerStore.load(storage)
    assert reloaded.get("2024-03-01") == store.get("2024-03-01")


def test_malformed_stored_json_means_empty_ledger(storage):
    storage.save("ledger.json", "{not json")

    assert len(LedgerStore.load(storage)) == 0


def test_stored_ledger_skips_bad_keys(storage):
    storage.save(
        "ledger.json",
        json.dumps({"2024-03-01": {"tips": 10}, "yesterday": {"tips": 5}, "2024-03-02": 7}),
    )

    assert LedgerStore.load(storage).keys() == ["2024-03-01"]


def test_export_import_round_trip(storage, store, make_entry):
    store.put("2024-03-01", make_entry(tips="100", hours="5", expenses=[("food", "20")]))
    store.put("2024-03-02", make_entry(tips="12.34", expenses=[("fuel", "7.5"), ("food", "3")]))
    store.put("2024-02-29", make_entry(notes="leap day"))

    exported = store.to_json(indent=2)
    other = LedgerStore()
    other.replace_all(json.loads(exported))

    assert other.snapshot() == store.snapshot()

    third = LedgerStore()
    third.import_json(exported)
    assert third.snapshot() == store.snapshot()


def test_export_is_pretty_printed(store, make_entry):
    store.put("2024-03-01", make_entry(tips="1"))

    assert '\n  "2024-03-01": {\n    "hours"' in store.to_json(indent=2)


def test_corrupt_import_leaves_ledger_untouched(storage, store, make_entry):
    store.put("2024-03-01", make_entry(tips="100"))
    before = storage.load("ledger.json")

    with pytest.raises(ValidationError):
        store.replace_all({"2024-03-05": {"tips": 1}, "bogus": {"tips": 2}})
    with pytest.raises(ValidationError):
        store.import_json("{truncated")

    assert store.keys() == ["2024-03-01"]
    assert storage.load("ledger.json") == before


def test_replace_all_accepts_entries_and_drops_old_dates(store, make_entry):
    store.put("2024-01-01", make_entry(tips="1"))

    store.replace_all({"2024-03-01": make_entry(tips="50")})

    assert store.keys() == ["2024-03-01"]
    assert store.get("2024-03-01").tips == Decimal("50")


def test_failed_write_rolls_back(make_entry):
    class BrokenStorage:
        def save(self, key, text):
            raise PersistenceError("disk full")

    store = LedgerStore(BrokenStorage())

    with pytest.raises(PersistenceError):
        store.put("2024-03-01", make_entry(tips="5"))
    assert len(store) == 0


def test_entries_between_is_inclusive(store, make_entry):
    for day in ("2024-02-29", "2024-03-01", "2024-03-31", "2024-04-01"):
        store.put(day, make_entry(tips="1"))

    dates = [day for day, _ in store.entries_between("2024-03-01", "2024-03-31")]
    assert dates == ["2024-03-01", "2024-03-31"]


def test_stored_ledger_with_huge_numbers_still_loads(storage):
    storage.save(
        "ledger.json",
        '{"2024-03-01": {"tips": 1e30, "hours": 5, "expenses": [{"category": "food", "amount": 1e30}]}}',
    )

    entry = LedgerStore.load(storage).get("2024-03-01")
    assert entry.tips == Decimal("0")
    assert entry.hours == Decimal("5")
    assert entry.expenses == ()


def test_import_with_huge_numbers_is_rejected(store, make_entry):
    store.put("2024-03-01", make_entry(tips="100"))

    with pytest.raises(ValidationError):
        store.import_json('{"2024-03-02": {"tips": 1e30}}')
    assert store.keys() == ["2024-03-01"]


def test_round_trip_at_largest_amount(store, make_entry):
    store.put(
        "2024-03-01",
        make_entry(tips="999999999999.99", hours="123456789012.34", expenses=[("rent", "987654321098.76")]),
    )

    other = LedgerStore()
    other.import_json(store.to_json(indent=2))

    assert other.snapshot() == store.snapshot()
    assert other.get("2024-03-01").tips == Decimal("999999999999.99")

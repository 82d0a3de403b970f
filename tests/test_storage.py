"""JSON storage tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from earnings.exceptions import PersistenceError
from earnings.ledger import LedgerStore
from earnings.validators import normalize_entry


def test_missing_key_loads_as_none(storage):
    assert storage.load("ledger.json") is None


def test_save_then_load(storage, tmp_path):
    storage.save("weekly_goal.txt", "650")

    assert storage.load("weekly_goal.txt") == "650"
    assert not (tmp_path / "weekly_goal.txt.tmp").exists()


def test_failed_rename_is_a_persistence_error(storage, monkeypatch):
    def broken_replace(self, target):
        raise OSError("rename failed")

    monkeypatch.setattr(Path, "replace", broken_replace)

    with pytest.raises(PersistenceError):
        storage.save("ledger.json", "{}")


def test_failed_rename_rolls_back_the_ledger(storage, monkeypatch):
    store = LedgerStore.load(storage)
    store.put("2024-03-01", normalize_entry(tips="10"))

    def broken_replace(self, target):
        raise OSError("rename failed")

    monkeypatch.setattr(Path, "replace", broken_replace)

    with pytest.raises(PersistenceError):
        store.put("2024-03-02", normalize_entry(tips="20"))
    assert store.keys() == ["2024-03-01"]

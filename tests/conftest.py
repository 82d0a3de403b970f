"""Shared fixtures for the earnings ledger tests."""

from __future__ import annotations

import pytest

from earnings.config import Settings
from earnings.ledger import LedgerStore
from earnings.services import GoalService, SummaryService
from earnings.storage import JSONStorage
from earnings.validators import normalize_entry


@pytest.fixture
def settings(tmp_path):
    return Settings(data_dir=tmp_path)


@pytest.fixture
def storage(tmp_path):
    return JSONStorage(tmp_path)


@pytest.fixture
def store(storage):
    return LedgerStore.load(storage)


@pytest.fixture
def summaries(store, settings):
    return SummaryService(store, settings)


@pytest.fixture
def goals(storage, summaries, settings):
    return GoalService(storage, summaries, settings)


@pytest.fixture
def make_entry():
    def _make(tips="0", hours="0", expenses=(), notes=""):
        return normalize_entry(hours=hours, tips=tips, expenses=list(expenses), notes=notes)

    return _make

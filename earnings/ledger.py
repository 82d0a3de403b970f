"""The ledger store: one DailyEntry per calendar date."""

from __future__ import annotations

import json
import logging
import threading
from decimal import Decimal
from typing import Dict, List, Mapping, Optional, Tuple

from .exceptions import PersistenceError, ValidationError
from .models import DEFAULT_ENTRY, DailyEntry
from .storage import JSONStorage
from .validators import entry_from_payload, is_valid_date, validate_import_payload

logger = logging.getLogger(__name__)

DEFAULT_LEDGER_KEY = "ledger.json"


def parse_ledger_text(text: str) -> Dict[str, DailyEntry]:
    """Parse exported/imported JSON text strictly. Raises ValidationError."""
    try:
        payload = json.loads(text, parse_float=Decimal)
    except (json.JSONDecodeError, TypeError) as exc:
        raise ValidationError("Ledger data is not valid JSON") from exc
    return validate_import_payload(payload)


def _recover_stored(text: Optional[str]) -> Dict[str, DailyEntry]:
    # Stored data favours availability: bad documents mean "no data" and bad
    # keys are skipped instead of failing the whole load.
    if text is None:
        return {}
    try:
        payload = json.loads(text, parse_float=Decimal)
    except json.JSONDecodeError:
        logger.warning("Stored ledger is not valid JSON; starting with an empty ledger")
        return {}
    if not isinstance(payload, dict):
        logger.warning("Stored ledger is not a JSON object; starting with an empty ledger")
        return {}
    entries: Dict[str, DailyEntry] = {}
    for key, raw in payload.items():
        if not is_valid_date(key) or not isinstance(raw, dict):
            logger.warning("Skipping malformed stored entry %r", key)
            continue
        entries[key] = entry_from_payload(raw)
    return entries


class LedgerStore:
    """Owns the date -> DailyEntry mapping and writes through to storage."""

    def __init__(
        self,
        storage: Optional[JSONStorage] = None,
        key: str = DEFAULT_LEDGER_KEY,
        entries: Optional[Mapping[str, DailyEntry]] = None,
    ) -> None:
        self._storage = storage
        self._key = key
        self._entries: Dict[str, DailyEntry] = dict(entries or {})
        self._lock = threading.RLock()

    @classmethod
    def load(cls, storage: JSONStorage, key: str = DEFAULT_LEDGER_KEY) -> "LedgerStore":
        """Hydrate a store from persisted text."""
        entries = _recover_stored(storage.load(key))
        logger.debug("Loaded %d ledger entries from %s", len(entries), key)
        return cls(storage, key, entries)

    # Public API -----------------------------------------------------------
    def get(self, date: str) -> DailyEntry:
        with self._lock:
            return self._entries.get(date, DEFAULT_ENTRY)

    def has(self, date: str) -> bool:
        with self._lock:
            return date in self._entries

    def put(self, date: str, entry: DailyEntry) -> bool:
        """Replace the whole entry for ``date``. Invalid dates are ignored."""
        if not is_valid_date(date):
            logger.warning("Ignoring entry for invalid date %r", date)
            return False
        with self._lock:
            updated = dict(self._entries)
            updated[date] = entry
            self._swap(updated)
        return True

    def replace_all(self, new_ledger: Mapping[str, object]) -> None:
        """Swap in a whole new ledger, or raise ValidationError and keep the old one.

        Values may be DailyEntry instances or raw ``{hours, tips, ...}`` objects.
        """
        if isinstance(new_ledger, Mapping):
            new_ledger = {
                key: value.to_dict() if isinstance(value, DailyEntry) else value
                for key, value in new_ledger.items()
            }
        entries = validate_import_payload(new_ledger)
        self._swap(entries)
        logger.info("Replaced ledger with %d entries", len(entries))

    def import_json(self, text: str) -> int:
        entries = parse_ledger_text(text)
        self._swap(entries)
        logger.info("Imported %d ledger entries", len(entries))
        return len(entries)

    def keys(self) -> List[str]:
        with self._lock:
            return sorted(self._entries)

    def entries_between(self, start: str, end: str) -> List[Tuple[str, DailyEntry]]:
        """Stored entries with ``start <= date <= end`` in date order."""
        with self._lock:
            return sorted(
                ((date, entry) for date, entry in self._entries.items() if start <= date <= end),
                key=lambda item: item[0],
            )

    def snapshot(self) -> Dict[str, DailyEntry]:
        with self._lock:
            return dict(sorted(self._entries.items()))

    def to_dict(self) -> Dict[str, Dict[str, object]]:
        return {date: entry.to_dict() for date, entry in self.snapshot().items()}

    def to_json(self, indent: Optional[int] = None) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    # Internal helpers -----------------------------------------------------
    def _persist(self) -> None:
        if self._storage is None:
            return
        self._storage.save(self._key, self.to_json())

    def _swap(self, entries: Dict[str, DailyEntry]) -> None:
        with self._lock:
            previous = self._entries
            self._entries = entries
            try:
                self._persist()
            except PersistenceError:
                # Keep memory and disk in agreement when the write fails.
                self._entries = previous
                raise

"""Core business logic package for the tip earnings ledger."""

from .config import Settings
from .exceptions import PersistenceError, ValidationError
from .ledger import LedgerStore
from .models import (
    DEFAULT_ENTRY,
    ChartSeries,
    DailyEntry,
    DailySummary,
    EntryCopied,
    Expense,
    GoalAccepted,
    GoalProgress,
    GoalRejected,
    MonthlySummary,
    NoPriorEntry,
    PeriodSummary,
    WeeklySummary,
)
from .services import GoalService, SummaryService, aggregate, compute_tax, progress
from .storage import JSONStorage
from .validators import normalize_entry

__all__ = [
    "DEFAULT_ENTRY",
    "ChartSeries",
    "DailyEntry",
    "DailySummary",
    "EntryCopied",
    "Expense",
    "GoalAccepted",
    "GoalProgress",
    "GoalRejected",
    "GoalService",
    "JSONStorage",
    "LedgerStore",
    "MonthlySummary",
    "NoPriorEntry",
    "PeriodSummary",
    "PersistenceError",
    "Settings",
    "SummaryService",
    "ValidationError",
    "WeeklySummary",
    "aggregate",
    "compute_tax",
    "normalize_entry",
    "progress",
]

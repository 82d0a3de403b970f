"""Data models for the earnings ledger domain."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Tuple

__all__ = [
    "ZERO",
    "Expense",
    "DailyEntry",
    "DEFAULT_ENTRY",
    "DailySummary",
    "PeriodSummary",
    "WeeklySummary",
    "MonthlySummary",
    "GoalProgress",
    "ChartPoint",
    "ChartSeries",
    "GoalAccepted",
    "GoalRejected",
    "EntryCopied",
    "NoPriorEntry",
]

ZERO = Decimal("0.00")


def _money(value: Decimal) -> str:
    return f"{value:.2f}"


@dataclass(frozen=True)
class Expense:
    category: str
    amount: Decimal

    def to_dict(self) -> Dict[str, Any]:
        return {"category": self.category, "amount": float(self.amount)}


@dataclass(frozen=True)
class DailyEntry:
    hours: Decimal = ZERO
    tips: Decimal = ZERO
    expenses: Tuple[Expense, ...] = ()
    notes: str = ""

    @property
    def total_expenses(self) -> Decimal:
        return sum((expense.amount for expense in self.expenses), start=ZERO)

    def to_dict(self) -> Dict[str, Any]:
        """Serialise the entry to the stored JSON shape (numbers, not strings)."""
        return {
            "hours": float(self.hours),
            "tips": float(self.tips),
            "expenses": [expense.to_dict() for expense in self.expenses],
            "notes": self.notes,
        }


# Returned for any date without an explicit entry.
DEFAULT_ENTRY = DailyEntry()


@dataclass(frozen=True)
class DailySummary:
    date: str
    hours: Decimal
    income: Decimal
    expenses: Decimal
    net: Decimal
    hourly_rate: Decimal

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date,
            "hours": _money(self.hours),
            "income": _money(self.income),
            "expenses": _money(self.expenses),
            "net": _money(self.net),
            "hourly_rate": _money(self.hourly_rate),
        }


@dataclass(frozen=True)
class PeriodSummary:
    start: str
    end: str
    total_income: Decimal
    total_expenses: Decimal
    net: Decimal
    entry_count: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "start": self.start,
            "end": self.end,
            "total_income": _money(self.total_income),
            "total_expenses": _money(self.total_expenses),
            "net": _money(self.net),
            "entry_count": self.entry_count,
        }


@dataclass(frozen=True)
class WeeklySummary:
    year: int
    week: int
    start: str
    end: str
    total_income: Decimal
    total_expenses: Decimal
    net: Decimal
    entry_count: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "year": self.year,
            "week": self.week,
            "start": self.start,
            "end": self.end,
            "total_income": _money(self.total_income),
            "total_expenses": _money(self.total_expenses),
            "net": _money(self.net),
            "entry_count": self.entry_count,
        }


@dataclass(frozen=True)
class MonthlySummary:
    year: int
    month: int
    start: str
    end: str
    total_income: Decimal
    total_expenses: Decimal
    net: Decimal
    entry_count: int
    taxable_income: Decimal
    tax: Decimal
    net_savings: Decimal

    @property
    def label(self) -> str:
        return date(self.year, self.month, 1).strftime("%B %Y")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "year": self.year,
            "month": self.month,
            "label": self.label,
            "start": self.start,
            "end": self.end,
            "total_income": _money(self.total_income),
            "total_expenses": _money(self.total_expenses),
            "net": _money(self.net),
            "entry_count": self.entry_count,
            "taxable_income": _money(self.taxable_income),
            "tax": _money(self.tax),
            "net_savings": _money(self.net_savings),
        }


@dataclass(frozen=True)
class GoalProgress:
    goal: Decimal
    income: Decimal
    ratio: Decimal  # unclamped percentage, may exceed 100
    percentage: Decimal  # clamped to [0, 100] for display

    def to_dict(self) -> Dict[str, Any]:
        return {
            "goal": _money(self.goal),
            "income": _money(self.income),
            "ratio": _money(self.ratio),
            "percentage": _money(self.percentage),
        }


@dataclass(frozen=True)
class ChartPoint:
    day: int
    income: Decimal


@dataclass(frozen=True)
class ChartSeries:
    year: int
    month: int
    points: List[ChartPoint] = field(default_factory=list)
    max_income: Decimal = Decimal("100")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "year": self.year,
            "month": self.month,
            "points": [
                {"day": point.day, "income": _money(point.income)} for point in self.points
            ],
            "max_income": _money(self.max_income),
        }


# Named outcomes for user actions that may be refused.


@dataclass(frozen=True)
class GoalAccepted:
    goal: Decimal


@dataclass(frozen=True)
class GoalRejected:
    value: object
    current_goal: Decimal
    reason: str = "Weekly goal must be a positive number"


@dataclass(frozen=True)
class EntryCopied:
    source_date: str
    target_date: str
    entry: DailyEntry


@dataclass(frozen=True)
class NoPriorEntry:
    source_date: str
    target_date: str

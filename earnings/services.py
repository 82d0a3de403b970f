"""Framework-agnostic business services for the earnings ledger."""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import List, Optional, Tuple, Union

from .config import Settings
from .exceptions import ValidationError
from .ledger import LedgerStore
from .models import (
    ZERO,
    ChartPoint,
    ChartSeries,
    DailySummary,
    EntryCopied,
    GoalAccepted,
    GoalProgress,
    GoalRejected,
    MonthlySummary,
    NoPriorEntry,
    PeriodSummary,
    WeeklySummary,
)
from .periods import (
    format_date,
    month_days,
    month_key,
    month_range,
    previous_day,
    week_of,
    week_range,
)
from .storage import JSONStorage
from .validators import is_valid_date, parse_decimal

logger = logging.getLogger(__name__)

TAX_THRESHOLD = Decimal("1050")
TAX_RATE = Decimal("0.20")
HUNDRED = Decimal("100")
CHART_FLOOR = Decimal("100")


def aggregate(store: LedgerStore, start: str, end: str) -> PeriodSummary:
    """Totals over stored entries with ``start <= date <= end``.

    Missing dates contribute nothing; only stored keys are visited.
    """
    total_income = ZERO
    total_expenses = ZERO
    count = 0
    for _, entry in store.entries_between(start, end):
        total_income += entry.tips
        total_expenses += entry.total_expenses
        count += 1
    return PeriodSummary(
        start=start,
        end=end,
        total_income=total_income,
        total_expenses=total_expenses,
        net=total_income - total_expenses,
        entry_count=count,
    )


def _as_decimal(value: object) -> Decimal:
    # str() first so floats keep their printed value rather than binary noise.
    return value if isinstance(value, Decimal) else Decimal(str(value))


def taxable_income(income: Decimal, threshold: Decimal = TAX_THRESHOLD) -> Decimal:
    return max(ZERO, _as_decimal(income) - threshold)


def compute_tax(
    income: Decimal, threshold: Decimal = TAX_THRESHOLD, rate: Decimal = TAX_RATE
) -> Decimal:
    """Flat ``rate`` on the part of a month's income above ``threshold``."""
    return taxable_income(income, threshold) * rate


def progress(weekly_income: Decimal, goal: Decimal) -> GoalProgress:
    """Share of ``goal`` reached; ``ratio`` is unclamped, ``percentage`` sits in [0, 100]."""
    goal = _as_decimal(goal)
    if goal <= 0:
        raise ValueError("goal must be positive")
    income = _as_decimal(weekly_income)
    ratio = income / goal * HUNDRED
    return GoalProgress(
        goal=goal,
        income=income,
        ratio=ratio,
        percentage=min(HUNDRED, max(ZERO, ratio)),
    )


def export_filename(prefix: str, today: date, ext: str = "json") -> str:
    return f"{prefix}_{format_date(today)}.{ext}"


def _check_month(year: int, month: int) -> None:
    if not 1 <= month <= 12 or not 1 <= year <= 9999:
        raise ValidationError(f"Invalid month: {year}-{month}")


class SummaryService:
    """Derives day, week, month and chart views from a ledger store."""

    def __init__(self, store: LedgerStore, settings: Optional[Settings] = None) -> None:
        self._store = store
        self._settings = settings or Settings()

    @property
    def store(self) -> LedgerStore:
        return self._store

    def daily_summary(self, day: str) -> DailySummary:
        entry = self._store.get(day)
        expenses = entry.total_expenses
        hourly_rate = entry.tips / entry.hours if entry.hours > 0 else ZERO
        return DailySummary(
            date=day,
            hours=entry.hours,
            income=entry.tips,
            expenses=expenses,
            net=entry.tips - expenses,
            hourly_rate=hourly_rate,
        )

    def range_summary(self, start: str, end: str) -> PeriodSummary:
        if not is_valid_date(start) or not is_valid_date(end):
            raise ValidationError("start and end must be YYYY-MM-DD dates")
        return aggregate(self._store, start, end)

    def monthly_summary(self, year: int, month: int) -> MonthlySummary:
        _check_month(year, month)
        start, end = month_range(year, month)
        period = aggregate(self._store, start, end)
        threshold = self._settings.tax_threshold
        tax = compute_tax(period.total_income, threshold, self._settings.tax_rate)
        return MonthlySummary(
            year=year,
            month=month,
            start=start,
            end=end,
            total_income=period.total_income,
            total_expenses=period.total_expenses,
            net=period.net,
            entry_count=period.entry_count,
            taxable_income=taxable_income(period.total_income, threshold),
            tax=tax,
            net_savings=period.total_income - period.total_expenses - tax,
        )

    def weekly_summary(self, year: int, week: int) -> WeeklySummary:
        if not 1 <= week <= 53:
            raise ValidationError("week must be between 1 and 53")
        try:
            start, end = week_range(year, week, self._settings.week_scheme)
        except (ValueError, OverflowError) as exc:
            raise ValidationError(str(exc)) from exc
        period = aggregate(self._store, start, end)
        return WeeklySummary(
            year=year,
            week=week,
            start=start,
            end=end,
            total_income=period.total_income,
            total_expenses=period.total_expenses,
            net=period.net,
            entry_count=period.entry_count,
        )

    def current_week(self, today: date) -> Tuple[int, int]:
        return week_of(today, self._settings.week_scheme)

    def history(self) -> List[MonthlySummary]:
        """Monthly summaries for every month holding an entry, newest first."""
        months = sorted({month_key(day) for day in self._store.keys()}, reverse=True)
        return [self.monthly_summary(year, month) for year, month in months]

    def monthly_series(self, year: int, month: int) -> ChartSeries:
        _check_month(year, month)
        points = [
            ChartPoint(day=day, income=self._store.get(key).tips)
            for day, key in month_days(year, month)
        ]
        peak = max((point.income for point in points), default=ZERO)
        return ChartSeries(
            year=year,
            month=month,
            points=points,
            max_income=peak if peak > 0 else CHART_FLOOR,
        )

    def copy_previous_day(self, day: str) -> Union[EntryCopied, NoPriorEntry]:
        if not is_valid_date(day):
            raise ValidationError(f"Invalid date: {day!r}")
        try:
            source = previous_day(day)
        except OverflowError as exc:
            raise ValidationError(f"No calendar day precedes {day}") from exc
        if not self._store.has(source):
            return NoPriorEntry(source_date=source, target_date=day)
        entry = self._store.get(source)
        self._store.put(day, entry)
        logger.info("Copied entry from %s to %s", source, day)
        return EntryCopied(source_date=source, target_date=day, entry=entry)

    def export_filename(self, today: date) -> str:
        return export_filename(self._settings.export_prefix, today)


class GoalService:
    """Holds the weekly income goal and persists it as a plain decimal string."""

    def __init__(
        self,
        storage: Optional[JSONStorage],
        summaries: SummaryService,
        settings: Optional[Settings] = None,
    ) -> None:
        self._storage = storage
        self._summaries = summaries
        self._settings = settings or Settings()
        self._goal = self._settings.default_goal
        self.load()

    @property
    def goal(self) -> Decimal:
        return self._goal

    def load(self) -> None:
        if self._storage is None:
            return
        raw = self._storage.load(self._settings.goal_key)
        if raw is None:
            return
        value = parse_decimal(raw)
        if value is None or value <= 0:
            logger.warning("Stored weekly goal %r is invalid; using %s", raw, self._goal)
            return
        self._goal = value

    def set_goal(self, value: object) -> Union[GoalAccepted, GoalRejected]:
        parsed = parse_decimal(value)
        if parsed is None or parsed <= 0:
            return GoalRejected(value=value, current_goal=self._goal)
        if self._storage is not None:
            self._storage.save(self._settings.goal_key, format(parsed, "f"))
        self._goal = parsed
        return GoalAccepted(goal=parsed)

    def progress(self, weekly_income: Decimal) -> GoalProgress:
        return progress(weekly_income, self._goal)

    def weekly_progress(self, year: int, week: int) -> GoalProgress:
        return self.progress(self._summaries.weekly_summary(year, week).total_income)

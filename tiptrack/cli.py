"""Console interface for the tip earnings ledger."""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from earnings.config import Settings
from earnings.exceptions import PersistenceError, ValidationError
from earnings.ledger import LedgerStore
from earnings.models import GoalRejected, NoPriorEntry
from earnings.services import GoalService, SummaryService
from earnings.storage import JSONStorage
from earnings.validators import is_valid_date, normalize_entry


def _parse_date(value: str) -> str:
    if not is_valid_date(value):
        raise argparse.ArgumentTypeError(
            f"Invalid date '{value}'. Expected format YYYY-MM-DD."
        )
    return value


def _parse_month(value: str) -> Tuple[int, int]:
    try:
        year, month = (int(part) for part in value.split("-"))
    except ValueError as exc:
        raise argparse.ArgumentTypeError(
            f"Invalid month '{value}'. Expected format YYYY-MM."
        ) from exc
    if not 1 <= month <= 12:
        raise argparse.ArgumentTypeError(f"Invalid month '{value}'.")
    return year, month


def _load_services(settings: Settings) -> Tuple[LedgerStore, SummaryService, GoalService]:
    storage = JSONStorage(settings.data_dir)
    store = LedgerStore.load(storage, settings.ledger_key)
    summaries = SummaryService(store, settings)
    goals = GoalService(storage, summaries, settings)
    return store, summaries, goals


def _format_entry(day: str, entry: Dict[str, Any]) -> str:
    lines = [f"[{day}] hours {entry['hours']:.2f} | tips {entry['tips']:.2f}"]
    for expense in entry["expenses"]:
        lines.append(f"  - {expense['category']}: {expense['amount']:.2f}")
    lines.append(f"  Notes: {entry['notes'] or '-'}")
    return "\n".join(lines) + "\n"


def _format_record(title: str, record: Dict[str, Any]) -> str:
    width = max(len(key) for key in record)
    rows = [f"  {key.ljust(width)}  {value}" for key, value in record.items()]
    return title + "\n" + "\n".join(rows) + "\n"


def handle_entry(args: argparse.Namespace, store: LedgerStore, summaries: SummaryService) -> int:
    if args.command == "set":
        entry = normalize_entry(
            hours=args.hours,
            tips=args.tips,
            expenses=args.expense or [],
            notes=args.notes,
        )
        store.put(args.date, entry)
        print("Entry saved:\n" + _format_entry(args.date, entry.to_dict()))
    elif args.command == "show":
        print(_format_entry(args.date, store.get(args.date).to_dict()))
        print(_format_record("Daily summary:", summaries.daily_summary(args.date).to_dict()))
    elif args.command == "copy-prev":
        outcome = summaries.copy_previous_day(args.date)
        if isinstance(outcome, NoPriorEntry):
            print(f"No data found for {outcome.source_date}", file=sys.stderr)
            return 1
        print(f"Copied data from {outcome.source_date}")
    return 0


def handle_summary(args: argparse.Namespace, summaries: SummaryService) -> int:
    if args.command == "day":
        record = summaries.daily_summary(args.date).to_dict()
    elif args.command == "week":
        year, week = args.year, args.week
        if year is None or week is None:
            year, week = summaries.current_week(date.today())
        record = summaries.weekly_summary(year, week).to_dict()
    elif args.command == "month":
        today = date.today()
        year, month = args.month or (today.year, today.month)
        record = summaries.monthly_summary(year, month).to_dict()
    else:
        record = summaries.range_summary(args.start, args.end).to_dict()
    print(_format_record(f"Summary ({args.command}):", record))
    return 0


def handle_history(summaries: SummaryService) -> int:
    months = summaries.history()
    if not months:
        print("No entries recorded yet.")
        return 0
    for summary in months:
        record = summary.to_dict()
        print(
            f"{record['label']}\n"
            f"  Total Income: {record['total_income']}\n"
            f"  Total Expenses: {record['total_expenses']}\n"
            f"  Tax Paid: {record['tax']}\n"
            f"  Net Savings: {record['net_savings']}\n"
        )
    return 0


def handle_goal(args: argparse.Namespace, summaries: SummaryService, goals: GoalService) -> int:
    if args.command == "set":
        outcome = goals.set_goal(args.value)
        if isinstance(outcome, GoalRejected):
            print(
                f"{outcome.reason}; keeping {outcome.current_goal:.2f}", file=sys.stderr
            )
            return 1
        print(f"Weekly goal set to {outcome.goal:.2f}")
    elif args.command == "show":
        print(f"Weekly goal: {goals.goal:.2f}")
    elif args.command == "progress":
        year, week = args.year, args.week
        if year is None or week is None:
            year, week = summaries.current_week(date.today())
        result = goals.weekly_progress(year, week)
        print(
            f"Week {week}/{year}: {result.income:.2f} / {result.goal:.2f} "
            f"({result.percentage:.0f}%, actual {result.ratio:.1f}%)"
        )
    return 0


def handle_chart(args: argparse.Namespace, summaries: SummaryService) -> int:
    today = date.today()
    year, month = args.month or (today.year, today.month)
    series = summaries.monthly_series(year, month)
    width = 40
    for point in series.points:
        bar = "#" * int(point.income / series.max_income * width)
        print(f"{point.day:>2} {bar} {point.income:.2f}")
    return 0


def handle_export(args: argparse.Namespace, store: LedgerStore, summaries: SummaryService) -> int:
    output_dir: Path = args.output_dir
    output_dir.mkdir(parents=True, exist_ok=True)
    path = output_dir / summaries.export_filename(date.today())
    path.write_text(store.to_json(indent=2), encoding="utf-8")
    print(f"Exported {len(store)} entries to {path}")
    return 0


def handle_import(args: argparse.Namespace, store: LedgerStore) -> int:
    text = Path(args.file).read_text(encoding="utf-8")
    count = store.import_json(text)
    print(f"Imported {count} entries.")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Tip earnings ledger CLI")
    parser.add_argument(
        "--data-dir",
        type=Path,
        help="Directory to store ledger data (default: $TIPTRACK_DATA_DIR or ./data)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="entity", required=True)

    entry_parser = subparsers.add_parser("entry", help="Record or inspect a day")
    entry_sub = entry_parser.add_subparsers(dest="command", required=True)

    entry_set = entry_sub.add_parser("set", help="Replace the entry for a date")
    entry_set.add_argument("date", type=_parse_date)
    entry_set.add_argument("--hours")
    entry_set.add_argument("--tips")
    entry_set.add_argument(
        "--expense",
        nargs=2,
        action="append",
        metavar=("CATEGORY", "AMOUNT"),
        help="Add an expense row (repeatable)",
    )
    entry_set.add_argument("--notes", default="")

    entry_show = entry_sub.add_parser("show", help="Show the entry and daily summary")
    entry_show.add_argument("date", type=_parse_date)

    entry_copy = entry_sub.add_parser("copy-prev", help="Copy the previous day's entry")
    entry_copy.add_argument("date", type=_parse_date)

    summary_parser = subparsers.add_parser("summary", help="Period summaries")
    summary_sub = summary_parser.add_subparsers(dest="command", required=True)

    summary_day = summary_sub.add_parser("day", help="Summary for one date")
    summary_day.add_argument("date", type=_parse_date)

    summary_week = summary_sub.add_parser("week", help="Weekly totals (default: this week)")
    summary_week.add_argument("--year", type=int)
    summary_week.add_argument("--week", type=int)

    summary_month = summary_sub.add_parser("month", help="Monthly totals with tax")
    summary_month.add_argument("month", nargs="?", type=_parse_month, help="YYYY-MM")

    summary_range = summary_sub.add_parser("range", help="Totals over an inclusive range")
    summary_range.add_argument("start", type=_parse_date)
    summary_range.add_argument("end", type=_parse_date)

    subparsers.add_parser("history", help="Monthly history, newest first")

    goal_parser = subparsers.add_parser("goal", help="Weekly income goal")
    goal_sub = goal_parser.add_subparsers(dest="command", required=True)
    goal_set = goal_sub.add_parser("set", help="Set the weekly goal")
    goal_set.add_argument("value")
    goal_sub.add_parser("show", help="Show the weekly goal")
    goal_progress = goal_sub.add_parser("progress", help="Progress towards the goal")
    goal_progress.add_argument("--year", type=int)
    goal_progress.add_argument("--week", type=int)

    chart_parser = subparsers.add_parser("chart", help="Daily income chart for a month")
    chart_parser.add_argument("month", nargs="?", type=_parse_month, help="YYYY-MM")

    export_parser = subparsers.add_parser("export", help="Export the ledger as JSON")
    export_parser.add_argument("--output-dir", type=Path, default=Path("."))

    import_parser = subparsers.add_parser("import", help="Replace the ledger from a JSON export")
    import_parser.add_argument("file", type=Path)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    settings = Settings.from_env()
    if args.data_dir is not None:
        settings = replace(settings, data_dir=args.data_dir)

    try:
        store, summaries, goals = _load_services(settings)
        if args.entity == "entry":
            return handle_entry(args, store, summaries)
        if args.entity == "summary":
            return handle_summary(args, summaries)
        if args.entity == "history":
            return handle_history(summaries)
        if args.entity == "goal":
            return handle_goal(args, summaries, goals)
        if args.entity == "chart":
            return handle_chart(args, summaries)
        if args.entity == "export":
            return handle_export(args, store, summaries)
        if args.entity == "import":
            return handle_import(args, store)
        parser.error(f"Unknown entity: {args.entity}")  # pragma: no cover
    except ValidationError as exc:
        print(f"Validation error: {exc}", file=sys.stderr)
        return 1
    except PersistenceError as exc:
        print(f"Storage error: {exc}", file=sys.stderr)
        return 1
    except UnicodeDecodeError as exc:
        print(f"File error: not valid UTF-8 text ({exc.reason})", file=sys.stderr)
        return 1
    except OSError as exc:
        print(f"File error: {exc}", file=sys.stderr)
        return 1
    return 2


if __name__ == "__main__":
    raise SystemExit(main())

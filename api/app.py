"""Flask REST API exposing the tip earnings ledger services."""

from __future__ import annotations

from dataclasses import replace
from datetime import date
from pathlib import Path
from typing import Any, Dict, Optional

from flask import Flask, Response, jsonify, request
from flask_cors import CORS

from earnings.config import Settings
from earnings.exceptions import PersistenceError, ValidationError
from earnings.ledger import LedgerStore
from earnings.models import GoalRejected, NoPriorEntry
from earnings.services import GoalService, SummaryService
from earnings.storage import JSONStorage
from earnings.validators import entry_from_payload, is_valid_date


def create_app(data_dir: Optional[Path] = None, settings: Optional[Settings] = None) -> Flask:
    app = Flask(__name__)

    settings = settings or Settings.from_env()
    if data_dir is not None:
        settings = replace(settings, data_dir=Path(data_dir))

    if settings.env_name in {"dev", "development"}:
        CORS(app, resources={r"/*": {"origins": "*"}}, supports_credentials=True)
    elif settings.allowed_origins:
        CORS(
            app,
            resources={r"/*": {"origins": list(settings.allowed_origins)}},
            supports_credentials=True,
        )
    else:
        CORS(app)

    storage = JSONStorage(settings.data_dir)
    store = LedgerStore.load(storage, settings.ledger_key)
    summaries = SummaryService(store, settings)
    goals = GoalService(storage, summaries, settings)

    def _success(payload: Any, status: int = 200):
        return jsonify(payload), status

    def _handle_error(exc: Exception, status: int, message: str):
        app.logger.error("%s: %s", message, exc)
        return jsonify({"error": message, "details": str(exc)}), status

    @app.errorhandler(ValidationError)
    def handle_validation_error(exc: ValidationError):
        return _handle_error(exc, 400, "Validation error")

    @app.errorhandler(PersistenceError)
    def handle_persistence_error(exc: PersistenceError):
        return _handle_error(exc, 500, "Persistence error")

    def _json_body() -> Any:
        if not request.is_json:
            raise ValidationError("Request content must be application/json")
        data = request.get_json(silent=True)
        if data is None:
            raise ValidationError("Malformed JSON body")
        return data

    def _require_date(value: str) -> str:
        if not is_valid_date(value):
            raise ValidationError(f"Invalid date: {value!r}")
        return value

    def _entry_payload(day: str) -> Dict[str, Any]:
        return {"date": day, **store.get(day).to_dict()}

    @app.get("/entries")
    def list_entries():
        items = [{"date": day, **entry} for day, entry in store.to_dict().items()]
        return _success({"items": items})

    @app.get("/entries/<day>")
    def get_entry(day: str):
        return _success(_entry_payload(_require_date(day)))

    @app.put("/entries/<day>")
    def put_entry(day: str):
        _require_date(day)
        payload = _json_body()
        if not isinstance(payload, dict):
            raise ValidationError("Entry must be a JSON object")
        store.put(day, entry_from_payload(payload))
        return _success(_entry_payload(day))

    @app.post("/entries/<day>/copy-previous")
    def copy_previous(day: str):
        outcome = summaries.copy_previous_day(_require_date(day))
        if isinstance(outcome, NoPriorEntry):
            return _success(
                {
                    "error": "NoPriorEntry",
                    "details": f"No data found for {outcome.source_date}",
                },
                404,
            )
        return _success({"copied_from": outcome.source_date, **_entry_payload(day)})

    @app.get("/summary/day/<day>")
    def day_summary(day: str):
        return _success(summaries.daily_summary(_require_date(day)).to_dict())

    @app.get("/summary/week/<int:year>/<int:week>")
    def week_summary(year: int, week: int):
        return _success(summaries.weekly_summary(year, week).to_dict())

    @app.get("/summary/month/<int:year>/<int:month>")
    def month_summary(year: int, month: int):
        return _success(summaries.monthly_summary(year, month).to_dict())

    @app.get("/summary")
    def range_summary():
        start = request.args.get("start", "")
        end = request.args.get("end", "")
        return _success(summaries.range_summary(start, end).to_dict())

    @app.get("/overview")
    def overview():
        today = date.today()
        year, week = summaries.current_week(today)
        weekly = summaries.weekly_summary(year, week)
        return _success({
            "month": summaries.monthly_summary(today.year, today.month).to_dict(),
            "week": weekly.to_dict(),
            "goal": goals.progress(weekly.total_income).to_dict(),
            "chart": summaries.monthly_series(today.year, today.month).to_dict(),
        })

    @app.get("/history")
    def history():
        return _success({"items": [summary.to_dict() for summary in summaries.history()]})

    @app.get("/goal")
    def get_goal():
        return _success({"goal": f"{goals.goal:.2f}"})

    @app.put("/goal")
    def set_goal():
        payload = _json_body()
        value = payload.get("goal") if isinstance(payload, dict) else payload
        outcome = goals.set_goal(value)
        if isinstance(outcome, GoalRejected):
            return _success(
                {
                    "error": "GoalRejected",
                    "details": outcome.reason,
                    "goal": f"{outcome.current_goal:.2f}",
                },
                400,
            )
        return _success({"goal": f"{outcome.goal:.2f}"})

    @app.get("/goal/progress/<int:year>/<int:week>")
    def goal_progress(year: int, week: int):
        return _success(goals.weekly_progress(year, week).to_dict())

    @app.get("/chart/<int:year>/<int:month>")
    def chart(year: int, month: int):
        return _success(summaries.monthly_series(year, month).to_dict())

    @app.get("/export")
    def export():
        filename = summaries.export_filename(date.today())
        return Response(
            store.to_json(indent=2),
            mimetype="application/json",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )

    @app.post("/import")
    def import_ledger():
        # Parse the raw body ourselves so numbers keep their decimal precision.
        count = store.import_json(request.get_data(as_text=True))
        return _success({"imported": count})

    return app

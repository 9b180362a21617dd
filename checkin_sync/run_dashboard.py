"""Command-line utility for inspecting dashboard data.

Three subcommands are available:

``stats``
    Compute dashboard counts from a JSON file holding a list of submission
    records as returned by the backend (``checkin_type``, ``answers_json``...).
``history``
    Reconcile submissions against a question schema. The schema file holds
    either a list of questionnaires (each with ``questions``) or a bare list of
    questions::

        [
            {"id": 1, "key": "q1", "title": "Mood", "question_type": "scale"},
            ...
        ]

``dashboard``
    Run one full load against the live backend and print the resulting state.

Results are written as JSON to stdout or to ``--output`` if provided.
"""
from __future__ import annotations

import argparse
import asyncio
import dataclasses
import json
import logging
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Sequence

from api_clients.checkin_client import convert_questionnaires, convert_submission_response
from models.checkin_models import Questionnaire, QuestionnaireQuestion, SubmissionResponse

from .config import SyncSettings
from .geolocation import StaticGeolocation
from .models import Coordinates, DashboardStats, QuestionSchema, ReconciledHistoryEntry, Submission
from .orchestrator import DashboardState, SyncOrchestrator
from .reconciler import SubmissionReconciler
from .stats import compute_dashboard_stats


def _load_json(path: Path) -> Any:
    with path.open() as handle:
        return json.load(handle)


def load_submissions(path: Path) -> list[Submission]:
    records = _load_json(path)
    if isinstance(records, dict):
        records = [records]
    return [convert_submission_response(SubmissionResponse.model_validate(record)) for record in records]


def load_schema(path: Path) -> list[QuestionSchema]:
    records = _load_json(path)
    if isinstance(records, dict):
        records = [records]
    if records and all("questions" in record for record in records):
        return convert_questionnaires(Questionnaire.model_validate(record) for record in records)
    wrapper = Questionnaire(id=0, questions=[QuestionnaireQuestion.model_validate(r) for r in records])
    return convert_questionnaires([wrapper])


def _to_jsonable(value: Any) -> Any:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: _to_jsonable(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        return [_to_jsonable(item) for item in value]
    if isinstance(value, dict):
        return {str(k): _to_jsonable(v) for k, v in value.items()}
    return value


def stats_to_dict(stats: DashboardStats) -> dict:
    return _to_jsonable(stats)


def entry_to_dict(entry: ReconciledHistoryEntry) -> dict:
    return _to_jsonable(entry)


def state_to_dict(state: DashboardState) -> dict:
    return _to_jsonable(state)


def run_history(
    submissions: Sequence[Submission],
    schema: Sequence[QuestionSchema],
    submission_ids: Sequence[int] | None = None,
) -> list[dict]:
    reconciler = SubmissionReconciler()
    wanted = set(submission_ids or ())
    return [
        entry_to_dict(reconciler.reconcile(submission, schema))
        for submission in submissions
        if not wanted or submission.id in wanted
    ]


async def run_dashboard(coordinates: Coordinates | None, settings: SyncSettings) -> dict:  # pragma: no cover - live backend
    orchestrator = SyncOrchestrator.create(StaticGeolocation(coordinates), settings=settings)
    state = await orchestrator.load_initial()
    orchestrator.close()
    return state_to_dict(state)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Inspect check-in dashboard data")
    parser.add_argument("--output", type=Path, help="Optional output JSON file")
    parser.add_argument("--indent", type=int, default=None, help="Pretty-print JSON with the given indent")
    parser.add_argument("--verbose", action="store_true", help="Enable info logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    stats_parser = subparsers.add_parser("stats", help="Compute dashboard counts from a submissions file")
    stats_parser.add_argument("--submissions", type=Path, required=True, help="JSON file of submission records")

    history_parser = subparsers.add_parser("history", help="Reconcile submissions against a question schema")
    history_parser.add_argument("--submissions", type=Path, required=True, help="JSON file of submission records")
    history_parser.add_argument("--schema", type=Path, required=True, help="JSON file of questionnaires or questions")
    history_parser.add_argument(
        "--submission-id",
        type=int,
        action="append",
        help="Only reconcile this submission (may be repeated)",
    )

    dashboard_parser = subparsers.add_parser("dashboard", help="Load the live dashboard once")
    dashboard_parser.add_argument("--latitude", type=float, help="Device latitude")
    dashboard_parser.add_argument("--longitude", type=float, help="Device longitude")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING)

    if args.command == "stats":
        results: Any = stats_to_dict(compute_dashboard_stats(load_submissions(args.submissions)))
    elif args.command == "history":
        results = run_history(load_submissions(args.submissions), load_schema(args.schema), args.submission_id)
    else:  # pragma: no cover - live backend
        coordinates = None
        if args.latitude is not None and args.longitude is not None:
            coordinates = Coordinates(latitude=args.latitude, longitude=args.longitude)
        results = asyncio.run(run_dashboard(coordinates, SyncSettings.from_env()))

    output_text = json.dumps(results, indent=args.indent)
    if args.output:
        args.output.write_text(output_text)
    else:
        print(output_text)
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())

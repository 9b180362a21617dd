#!/usr/bin/env python3
"""Export reconciled submission history as a flat CSV table, one row per answer."""
from __future__ import annotations

import argparse
from pathlib import Path
from typing import Iterable, Sequence

import pandas as pd

from checkin_sync.history import HistoryFilter, SortOption, filter_submissions, sort_submissions
from checkin_sync.models import QuestionSchema, Submission
from checkin_sync.reconciler import SubmissionReconciler
from checkin_sync.run_dashboard import load_schema, load_submissions

COLUMNS = [
    "submission_id",
    "checkin_type",
    "status",
    "submitted_at",
    "question_id",
    "question_title",
    "answer",
    "question_type",
]


def build_history_frame(
    submissions: Iterable[Submission],
    schema: Sequence[QuestionSchema],
) -> pd.DataFrame:
    """Return answers for every submission; submissions with no matched answers are kept as one empty row."""

    reconciler = SubmissionReconciler()
    rows: list[dict] = []
    for submission in submissions:
        entry = reconciler.reconcile(submission, schema)
        base = {
            "submission_id": entry.submission_id,
            "checkin_type": entry.checkin_type.value,
            "status": entry.status.value,
            "submitted_at": entry.submitted_at,
        }
        if not entry.answers:
            rows.append({**base, "question_id": pd.NA, "question_title": None, "answer": None, "question_type": None})
            continue
        for answer in entry.answers:
            rows.append(
                {
                    **base,
                    "question_id": answer.question_id,
                    "question_title": answer.title,
                    "answer": answer.answer_text,
                    "question_type": answer.question_type,
                }
            )
    frame = pd.DataFrame(rows, columns=COLUMNS)
    frame["question_id"] = frame["question_id"].astype("Int64")
    return frame


def summarise_answers(frame: pd.DataFrame) -> pd.DataFrame:
    """Count answered questions per check-in type."""

    answered = frame.dropna(subset=["question_id"])
    return (
        answered.groupby("checkin_type")
        .agg(submissions=("submission_id", "nunique"), answers=("question_id", "count"))
        .reset_index()
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Export reconciled check-in history to CSV")
    parser.add_argument("--submissions", type=Path, required=True, help="JSON file of submission records")
    parser.add_argument("--schema", type=Path, required=True, help="JSON file of questionnaires or questions")
    parser.add_argument(
        "--filter",
        choices=[f.value for f in HistoryFilter],
        default=HistoryFilter.ALL.value,
        help="Only include one check-in type",
    )
    parser.add_argument(
        "--sort",
        choices=[s.value for s in SortOption],
        default=SortOption.NEWEST_FIRST.value,
        help="Submission ordering",
    )
    parser.add_argument("--output", type=Path, help="Destination CSV (defaults to stdout)")
    parser.add_argument("--summary", action="store_true", help="Print per-type answer counts instead")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    submissions = filter_submissions(load_submissions(args.submissions), HistoryFilter(args.filter))
    submissions = sort_submissions(submissions, SortOption(args.sort))
    frame = build_history_frame(submissions, load_schema(args.schema))

    if args.summary:
        print(summarise_answers(frame).to_string(index=False))
        return 0
    if args.output:
        frame.to_csv(args.output, index=False)
    else:
        print(frame.to_csv(index=False), end="")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

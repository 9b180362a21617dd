import json
from pathlib import Path

import pandas as pd

from checkin_sync.models import QuestionSchema, Submission
from history_report import build_history_frame, main, summarise_answers

SCHEMA = [
    QuestionSchema(id=1, key="q1", title="First", question_type="text"),
    QuestionSchema(id=2, key="q2", title="Second", question_type="text"),
]


def _submission(idx: int, checkin_type: str, answers: dict) -> Submission:
    return Submission(
        id=idx,
        checkin_type=checkin_type,
        status="completed",
        submitted_at="2025-09-24T16:44:00Z",
        answers=answers,
    )


def test_build_history_frame_one_row_per_answer():
    frame = build_history_frame(
        [_submission(1, "WEEKLY", {"2": "B", "q1": "A"}), _submission(2, "DAILY", {})],
        SCHEMA,
    )

    assert list(frame["submission_id"]) == [1, 1, 2]
    assert list(frame["answer"][:2]) == ["A", "B"]
    assert pd.isna(frame["question_id"].iloc[2])


def test_summarise_answers_counts_per_type():
    frame = build_history_frame(
        [
            _submission(1, "WEEKLY", {"q1": "A", "q2": "B"}),
            _submission(2, "WEEKLY", {"q1": "C"}),
            _submission(3, "DAILY", {}),
        ],
        SCHEMA,
    )

    summary = summarise_answers(frame).set_index("checkin_type")

    assert summary.loc["weekly", "submissions"] == 2
    assert summary.loc["weekly", "answers"] == 3
    assert "daily" not in summary.index


def test_main_writes_filtered_csv(tmp_path: Path):
    submissions = tmp_path / "submissions.json"
    submissions.write_text(
        json.dumps(
            [
                {"id": 1, "checkin_type": "Weekly", "status": "completed",
                 "submitted_at": "2025-09-21T08:00:00Z", "answers_json": {"q1": "A"}},
                {"id": 2, "checkin_type": "Daily", "status": "completed",
                 "submitted_at": "2025-09-22T08:00:00Z", "answers_json": {"1": "Z"}},
            ]
        )
    )
    schema = tmp_path / "schema.json"
    schema.write_text(json.dumps([{"id": 1, "key": "q1", "title": "First", "question_type": "text"}]))
    output = tmp_path / "history.csv"

    main(["--submissions", str(submissions), "--schema", str(schema), "--filter", "weekly", "--output", str(output)])

    frame = pd.read_csv(output)
    assert list(frame["submission_id"]) == [1]
    assert list(frame["answer"]) == ["A"]

from datetime import datetime, timedelta, timezone

import pytest

from checkin_sync.errors import ParseError
from checkin_sync.models import CheckinStatus, CheckinType, QuestionSchema, Submission
from checkin_sync.reconciler import SubmissionReconciler, format_answer, parse_timestamp, reconcile


def _question(qid: int, key: str, title: str | None = None) -> QuestionSchema:
    return QuestionSchema(id=qid, key=key, title=title or f"Question {qid}", question_type="text")


def _submission(answers: dict, **overrides) -> Submission:
    fields = {
        "id": 43,
        "checkin_type": "WEEKLY",
        "status": "completed",
        "submitted_at": "2025-09-24T16:44:00Z",
        "answers": answers,
    }
    fields.update(overrides)
    return Submission(**fields)


def test_answers_matched_by_id_and_key_in_id_order():
    schema = [_question(1, "q1"), _question(2, "q2")]
    entry = reconcile(_submission({"2": "B", "q1": "A"}), schema)

    assert [(a.question_id, a.answer_text) for a in entry.answers] == [(1, "A"), (2, "B")]


def test_key_fallback_when_id_missing():
    schema = [QuestionSchema(id=7, key="mood", title="Mood", question_type="single_choice")]
    entry = reconcile(_submission({"mood": "happy"}), schema)

    assert len(entry.answers) == 1
    answer = entry.answers[0]
    assert answer.question_id == 7
    assert answer.answer_text == "happy"
    assert answer.title == "Mood"
    assert answer.question_type == "single_choice"


def test_id_lookup_wins_over_key():
    schema = [_question(5, "sleep")]
    entry = reconcile(_submission({"5": "by-id", "sleep": "by-key"}), schema)

    assert entry.answers[0].answer_text == "by-id"


def test_unanswered_questions_are_omitted():
    schema = [_question(1, "q1"), _question(2, "q2"), _question(3, "q3")]
    entry = reconcile(_submission({"3": "C", "unrelated": "x"}), schema)

    assert [a.question_id for a in entry.answers] == [3]


def test_answers_sorted_regardless_of_schema_order():
    schema = [_question(9, "c"), _question(2, "a"), _question(5, "b")]
    entry = reconcile(_submission({"a": "1", "b": "2", "c": "3"}), schema)

    assert [a.question_id for a in entry.answers] == [2, 5, 9]


def test_unknown_type_defaults_to_one_time():
    entry = reconcile(_submission({}, checkin_type="bogus"), [])

    assert entry.checkin_type is CheckinType.ONE_TIME


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("daily", CheckinType.DAILY),
        ("Weekly", CheckinType.WEEKLY),
        ("MONTHLY", CheckinType.MONTHLY),
        ("one_time", CheckinType.ONE_TIME),
    ],
)
def test_type_parsing_is_case_insensitive(raw, expected):
    assert CheckinType.from_string(raw) is expected


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("submitted", CheckinStatus.COMPLETED),
        ("PENDING_REVIEW", CheckinStatus.PENDING),
        ("In Progress", CheckinStatus.IN_PROGRESS),
        ("error", CheckinStatus.FAILED),
        ("archived", CheckinStatus.COMPLETED),
    ],
)
def test_status_parsing(raw, expected):
    assert CheckinStatus.from_string(raw) is expected


def test_submission_metadata_is_carried_over():
    submission = _submission(
        {},
        reviewed_at="2025-09-24T17:00:00Z",
        reviewer_note="Needs improvement",
        reviewed_by="healthcare professional",
        questionnaire_id=1,
        alert_level="low",
    )
    entry = reconcile(submission, [])

    assert entry.submission_id == 43
    assert entry.submitted_at == datetime(2025, 9, 24, 16, 44, tzinfo=timezone.utc)
    assert entry.reviewed_at == datetime(2025, 9, 24, 17, 0, tzinfo=timezone.utc)
    assert entry.reviewer_note == "Needs improvement"
    assert entry.reviewed_by == "healthcare professional"
    assert entry.questionnaire_id == 1
    assert entry.alert_level == "low"


def test_unparsable_submitted_at_defaults_to_now():
    fixed_now = datetime(2026, 1, 1, tzinfo=timezone.utc)
    reconciler = SubmissionReconciler(now=lambda: fixed_now)

    entry = reconciler.reconcile(_submission({}, submitted_at="24/09/2025", reviewed_at="soon"), [])

    assert entry.submitted_at == fixed_now
    assert entry.reviewed_at is None


def test_parse_timestamp_accepts_offset_and_rejects_fractional():
    parsed = parse_timestamp("2025-09-24T18:44:00+02:00")
    assert parsed == datetime(2025, 9, 24, 16, 44, tzinfo=timezone.utc)
    assert parsed.utcoffset() == timedelta(0)

    with pytest.raises(ParseError):
        parse_timestamp("2025-09-24T16:44:00.123Z")
    with pytest.raises(ParseError):
        parse_timestamp("")


def test_non_string_answers_are_rendered():
    schema = [_question(1, "walk"), _question(2, "days"), _question(3, "symptoms")]
    entry = reconcile(_submission({"1": True, "days": 5, "3": ["cough", "fatigue"]}), schema)

    assert [a.answer_text for a in entry.answers] == ["true", "5", "cough, fatigue"]


def test_none_answer_falls_through_to_key():
    schema = [_question(1, "q1")]
    entry = reconcile(_submission({"1": None, "q1": "A"}), schema)

    assert entry.answers[0].answer_text == "A"


def test_format_answer_rejects_unknown_types():
    with pytest.raises(ParseError):
        format_answer(object())
    assert format_answer({"b": 1, "a": 2}) == '{"a": 2, "b": 1}'


def test_unrenderable_answer_falls_back_to_str():
    class Opaque:
        def __str__(self) -> str:
            return "opaque"

    entry = reconcile(_submission({"1": Opaque()}), [_question(1, "q1")])

    assert entry.answers[0].answer_text == "opaque"

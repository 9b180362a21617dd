"""Join question schemas against raw submission answers to rebuild history entries."""
from __future__ import annotations

import json
import logging
from collections.abc import Mapping, Sequence
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from .errors import ParseError
from .models import (
    CheckinStatus,
    CheckinType,
    QuestionAnswer,
    QuestionSchema,
    ReconciledHistoryEntry,
    Submission,
)

logger = logging.getLogger(__name__)

_TIME_FORMAT = "%Y-%m-%dT%H:%M:%SZ"
_OFFSET_TIME_FORMAT = "%Y-%m-%dT%H:%M:%S%z"

_MISSING = object()


def parse_timestamp(value: str | None) -> datetime:
    """Parse a backend timestamp such as ``2025-09-24T16:44:00Z`` into aware UTC."""

    if not value:
        raise ParseError("Empty timestamp")
    try:
        parsed = datetime.strptime(value, _TIME_FORMAT)
        return parsed.replace(tzinfo=timezone.utc)
    except ValueError:
        pass
    try:
        return datetime.strptime(value, _OFFSET_TIME_FORMAT).astimezone(timezone.utc)
    except ValueError:
        raise ParseError(f"Unsupported timestamp {value!r}") from None


def format_answer(value: Any) -> str:
    """Render a raw answer value as display text."""

    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, Sequence):
        return ", ".join(format_answer(item) for item in value)
    if isinstance(value, Mapping):
        try:
            return json.dumps(value, sort_keys=True)
        except (TypeError, ValueError) as exc:
            raise ParseError(f"Unserializable answer {value!r}") from exc
    raise ParseError(f"Unsupported answer type {type(value).__name__}")


def _lookup_answer(answers: Mapping[str, Any], question: QuestionSchema) -> Any:
    value = answers.get(str(question.id))
    if value is not None:
        return value
    value = answers.get(question.key) if question.key else None
    if value is not None:
        return value
    return _MISSING


class SubmissionReconciler:
    """Builds :class:`ReconciledHistoryEntry` objects from submissions and schemas.

    Answers are looked up by the stringified question id first and by the
    question key second. Questions with no answer are left out, and the result
    is ordered by question id. Reconciliation is pure and never raises for bad
    data: unparsable timestamps and answers fall back to documented defaults.
    """

    def __init__(self, *, now: Callable[[], datetime] | None = None) -> None:
        self._now = now or (lambda: datetime.now(timezone.utc))

    def reconcile(self, submission: Submission, schema: Sequence[QuestionSchema]) -> ReconciledHistoryEntry:
        answers = self.match_answers(submission, schema)
        return ReconciledHistoryEntry(
            submission_id=submission.id,
            checkin_type=CheckinType.from_string(submission.checkin_type),
            status=CheckinStatus.from_string(submission.status),
            submitted_at=self._submitted_at(submission),
            answers=tuple(answers),
            questionnaire_id=submission.questionnaire_id,
            reviewed_at=self._reviewed_at(submission),
            reviewer_note=submission.reviewer_note,
            reviewed_by=submission.reviewed_by,
            alert_level=submission.alert_level,
        )

    def match_answers(self, submission: Submission, schema: Sequence[QuestionSchema]) -> list[QuestionAnswer]:
        matched: list[QuestionAnswer] = []
        for question in schema:
            value = _lookup_answer(submission.answers, question)
            if value is _MISSING:
                continue
            matched.append(
                QuestionAnswer(
                    question_id=question.id,
                    title=question.title,
                    subtitle=question.subtitle,
                    answer_text=self._answer_text(submission, question, value),
                    question_type=question.question_type,
                )
            )

        if logger.isEnabledFor(logging.DEBUG):
            known = {str(q.id) for q in schema} | {q.key for q in schema}
            unmatched = sorted(k for k in submission.answers if k not in known)
            if unmatched:
                logger.debug("Submission %s has answers outside the schema: %s", submission.id, unmatched)

        matched.sort(key=lambda answer: answer.question_id)
        return matched

    def _answer_text(self, submission: Submission, question: QuestionSchema, value: Any) -> str:
        try:
            return format_answer(value)
        except ParseError as exc:
            logger.warning("Submission %s question %s: %s", submission.id, question.id, exc)
            return str(value)

    def _submitted_at(self, submission: Submission) -> datetime:
        try:
            return parse_timestamp(submission.submitted_at)
        except ParseError as exc:
            logger.warning("Submission %s: %s, using current time", submission.id, exc)
            return self._now()

    def _reviewed_at(self, submission: Submission) -> Optional[datetime]:
        if not submission.reviewed_at:
            return None
        try:
            return parse_timestamp(submission.reviewed_at)
        except ParseError as exc:
            logger.warning("Submission %s: %s, dropping review time", submission.id, exc)
            return None


def reconcile(submission: Submission, schema: Sequence[QuestionSchema]) -> ReconciledHistoryEntry:
    """Module-level convenience wrapper using a default reconciler."""

    return SubmissionReconciler().reconcile(submission, schema)

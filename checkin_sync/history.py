"""Filtering and ordering of the submission history list."""
from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Iterable

from .errors import ParseError
from .models import CheckinType, Submission
from .reconciler import parse_timestamp


class HistoryFilter(str, Enum):
    ALL = "all"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    ONE_TIME = "one_time"


class SortOption(str, Enum):
    NEWEST_FIRST = "newest_first"
    OLDEST_FIRST = "oldest_first"
    TYPE_ASCENDING = "type_ascending"
    TYPE_DESCENDING = "type_descending"


_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _submitted_key(submission: Submission) -> datetime:
    # Unparsable timestamps sort as the oldest entries.
    try:
        return parse_timestamp(submission.submitted_at)
    except ParseError:
        return _EPOCH


def filter_submissions(submissions: Iterable[Submission], history_filter: HistoryFilter) -> list[Submission]:
    if history_filter is HistoryFilter.ALL:
        return list(submissions)
    wanted = CheckinType(history_filter.value)
    return [s for s in submissions if CheckinType.from_string(s.checkin_type) is wanted]


def sort_submissions(submissions: Iterable[Submission], option: SortOption) -> list[Submission]:
    items = list(submissions)
    if option is SortOption.NEWEST_FIRST:
        return sorted(items, key=_submitted_key, reverse=True)
    if option is SortOption.OLDEST_FIRST:
        return sorted(items, key=_submitted_key)
    descending = option is SortOption.TYPE_DESCENDING
    return sorted(
        items,
        key=lambda s: CheckinType.from_string(s.checkin_type).display_name,
        reverse=descending,
    )

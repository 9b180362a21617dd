from checkin_sync.history import HistoryFilter, SortOption, filter_submissions, sort_submissions
from checkin_sync.models import Submission


def _submission(idx: int, checkin_type: str, submitted_at: str) -> Submission:
    return Submission(id=idx, checkin_type=checkin_type, status="completed", submitted_at=submitted_at)


SUBMISSIONS = [
    _submission(1, "DAILY", "2025-09-20T08:00:00Z"),
    _submission(2, "WEEKLY", "2025-09-22T08:00:00Z"),
    _submission(3, "MONTHLY", "2025-09-21T08:00:00Z"),
    _submission(4, "mystery", "not a date"),
]


def test_filter_all_keeps_everything():
    assert [s.id for s in filter_submissions(SUBMISSIONS, HistoryFilter.ALL)] == [1, 2, 3, 4]


def test_filter_uses_history_type_default():
    # Unknown types are shown under one-time in the history list.
    assert [s.id for s in filter_submissions(SUBMISSIONS, HistoryFilter.ONE_TIME)] == [4]
    assert [s.id for s in filter_submissions(SUBMISSIONS, HistoryFilter.WEEKLY)] == [2]


def test_sort_by_date():
    assert [s.id for s in sort_submissions(SUBMISSIONS, SortOption.NEWEST_FIRST)] == [2, 3, 1, 4]
    assert [s.id for s in sort_submissions(SUBMISSIONS, SortOption.OLDEST_FIRST)] == [4, 1, 3, 2]


def test_sort_by_type_name():
    ascending = [s.id for s in sort_submissions(SUBMISSIONS, SortOption.TYPE_ASCENDING)]
    descending = [s.id for s in sort_submissions(SUBMISSIONS, SortOption.TYPE_DESCENDING)]

    assert ascending == [1, 3, 4, 2]
    assert descending == [2, 4, 3, 1]

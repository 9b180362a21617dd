"""Dashboard statistics derived from the submission list."""
from __future__ import annotations

import logging
from collections import Counter
from typing import Iterable

from .models import CheckinType, DashboardStats, Submission

logger = logging.getLogger(__name__)

_STATS_TYPES = {
    "daily": CheckinType.DAILY,
    "weekly": CheckinType.WEEKLY,
    "monthly": CheckinType.MONTHLY,
    "one_time": CheckinType.ONE_TIME,
}


def classify_for_stats(checkin_type: str | None) -> CheckinType:
    """Classify a raw type for counting; unrecognized types count as daily.

    This deliberately differs from :meth:`CheckinType.from_string`, which is
    used for history entries and falls back to one-time.
    """

    return _STATS_TYPES.get((checkin_type or "").strip().lower(), CheckinType.DAILY)


def compute_dashboard_stats(submissions: Iterable[Submission]) -> DashboardStats:
    """Count submissions per cadence. One-time submissions are excluded everywhere."""

    counts: Counter[CheckinType] = Counter()
    for submission in submissions:
        kind = classify_for_stats(submission.checkin_type)
        if kind.value != (submission.checkin_type or "").strip().lower():
            logger.debug("Unknown check-in type %r counted as daily", submission.checkin_type)
        counts[kind] += 1

    daily = counts[CheckinType.DAILY]
    weekly = counts[CheckinType.WEEKLY]
    monthly = counts[CheckinType.MONTHLY]
    logger.debug("Skipped %d one-time submissions", counts[CheckinType.ONE_TIME])
    return DashboardStats(
        total_checkins=daily + weekly + monthly,
        daily_count=daily,
        weekly_count=weekly,
        monthly_count=monthly,
        medication_count=0,
    )

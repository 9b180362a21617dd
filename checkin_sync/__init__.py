"""Client-side check-in data synchronization and reconciliation."""

from .cache import ExpiringCache
from .errors import CheckinSyncError, ParseError, SubmissionNotFound, TransportError
from .models import (
    CheckinStatus,
    CheckinType,
    Coordinates,
    DashboardStats,
    QuestionAnswer,
    QuestionSchema,
    ReconciledHistoryEntry,
    Submission,
    WeatherSnapshot,
)
from .reconciler import SubmissionReconciler
from .stats import compute_dashboard_stats

__all__ = [
    "CheckinStatus",
    "CheckinSyncError",
    "CheckinType",
    "Coordinates",
    "DashboardStats",
    "ExpiringCache",
    "ParseError",
    "QuestionAnswer",
    "QuestionSchema",
    "ReconciledHistoryEntry",
    "Submission",
    "SubmissionNotFound",
    "SubmissionReconciler",
    "TransportError",
    "WeatherSnapshot",
    "compute_dashboard_stats",
]

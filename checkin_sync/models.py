"""Core data models for check-in synchronization."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Mapping, Optional, Sequence


class CheckinType(str, Enum):
    """Canonical check-in cadence."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    ONE_TIME = "one_time"

    @classmethod
    def from_string(cls, value: str | None) -> "CheckinType":
        """Lenient parse used for history entries; unknown values become ``ONE_TIME``."""

        normalized = (value or "").strip().upper()
        return _CHECKIN_TYPE_LOOKUP.get(normalized, cls.ONE_TIME)

    @property
    def display_name(self) -> str:
        if self is CheckinType.ONE_TIME:
            return "One-time"
        return self.value.capitalize()


_CHECKIN_TYPE_LOOKUP = {
    "DAILY": CheckinType.DAILY,
    "WEEKLY": CheckinType.WEEKLY,
    "MONTHLY": CheckinType.MONTHLY,
    "ONE_TIME": CheckinType.ONE_TIME,
}


class CheckinStatus(str, Enum):
    """Review status of a submission."""

    COMPLETED = "completed"
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    FAILED = "failed"

    @classmethod
    def from_string(cls, value: str | None) -> "CheckinStatus":
        """Lenient parse; unknown values become ``COMPLETED``."""

        normalized = (value or "").strip().lower()
        return _CHECKIN_STATUS_LOOKUP.get(normalized, cls.COMPLETED)


_CHECKIN_STATUS_LOOKUP = {
    "completed": CheckinStatus.COMPLETED,
    "submitted": CheckinStatus.COMPLETED,
    "pending": CheckinStatus.PENDING,
    "pending_review": CheckinStatus.PENDING,
    "in_progress": CheckinStatus.IN_PROGRESS,
    "in progress": CheckinStatus.IN_PROGRESS,
    "failed": CheckinStatus.FAILED,
    "error": CheckinStatus.FAILED,
}


@dataclass(frozen=True)
class Coordinates:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class DashboardStats:
    """Aggregate counts derived from the full submission list."""

    total_checkins: int = 0
    daily_count: int = 0
    weekly_count: int = 0
    monthly_count: int = 0
    medication_count: int = 0


@dataclass(frozen=True)
class AirQuality:
    aqi: int
    pm25: float
    pm10: float
    o3: float
    no2: float
    co: float
    so2: float
    status: str


@dataclass(frozen=True)
class PollenData:
    grass_pollen: int = 0
    tree_pollen: int = 0
    ragweed_pollen: int = 0
    grass_pollen_risk: str = "Not Available"
    tree_pollen_risk: str = "Not Available"
    ragweed_pollen_risk: str = "Not Available"


@dataclass(frozen=True)
class WeatherSnapshot:
    """Environmental conditions for the user's location, as last fetched."""

    location: str
    timestamp: str
    air_quality: AirQuality
    pollen: PollenData = field(default_factory=PollenData)


@dataclass(frozen=True)
class QuestionSchema:
    """A single question definition within a questionnaire."""

    id: int
    key: str
    title: str
    question_type: str
    subtitle: Optional[str] = None
    sequence: int = 0


@dataclass(frozen=True)
class Submission:
    """A questionnaire submission exactly as received from the backend."""

    id: int
    checkin_type: str
    status: str
    submitted_at: str
    answers: Mapping[str, Any] = field(default_factory=dict)
    questionnaire_id: Optional[int] = None
    reviewed_at: Optional[str] = None
    reviewer_note: Optional[str] = None
    reviewed_by: Optional[str] = None
    alert_level: Optional[str] = None


@dataclass(frozen=True)
class QuestionAnswer:
    question_id: int
    title: str
    answer_text: str
    question_type: str
    subtitle: Optional[str] = None


@dataclass(frozen=True)
class ReconciledHistoryEntry:
    """Human-readable view of a past submission joined against its schema."""

    submission_id: int
    checkin_type: CheckinType
    status: CheckinStatus
    submitted_at: datetime
    answers: Sequence[QuestionAnswer] = field(default_factory=tuple)
    questionnaire_id: Optional[int] = None
    reviewed_at: Optional[datetime] = None
    reviewer_note: Optional[str] = None
    reviewed_by: Optional[str] = None
    alert_level: Optional[str] = None

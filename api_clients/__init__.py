"""API clients and helpers for external services."""

from .air_quality_client import (
    convert_air_quality_response,
    fetch_air_quality,
    fetch_air_quality_sync,
    fetch_weather_snapshot,
    location_label,
)
from .checkin_client import (
    CheckinClient,
    convert_questionnaires,
    convert_submission_response,
    fetch_points_total,
    fetch_question_schema,
    fetch_submissions,
    submit_answers,
)
from .zorgam_backend_client import ZorgamBackendClient

__all__ = [
    "CheckinClient",
    "ZorgamBackendClient",
    "convert_air_quality_response",
    "convert_questionnaires",
    "convert_submission_response",
    "fetch_air_quality",
    "fetch_air_quality_sync",
    "fetch_points_total",
    "fetch_question_schema",
    "fetch_submissions",
    "fetch_weather_snapshot",
    "location_label",
    "submit_answers",
]

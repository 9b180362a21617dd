"""Runtime settings for the dashboard sync engine."""
from __future__ import annotations

import os

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models import Coordinates

# get check-in backend environment variables
ZORGAM_API_BASE_URL = os.getenv("ZORGAM_API_BASE_URL", "https://zorgm-api-q7ppsor5da-uc.a.run.app/api/v1")
ZORGAM_SESSION_TOKEN = os.getenv("ZORGAM_SESSION_TOKEN")
ZORGAM_AIR_QUALITY_URL = os.getenv(
    "ZORGAM_AIR_QUALITY_URL",
    "https://airquality.googleapis.com/v1/currentConditions:lookup",
)
ZORGAM_AIR_QUALITY_API_KEY = os.getenv("ZORGAM_AIR_QUALITY_API_KEY")

# San Francisco, used when the device location cannot be resolved.
DEFAULT_FALLBACK_COORDINATES = Coordinates(latitude=37.7749, longitude=-122.4194)


class SyncSettings(BaseSettings):
    """Timing knobs for caching, refresh and UI signals, in seconds.

    Every field can be overridden with a ``ZORGAM_``-prefixed environment
    variable (``ZORGAM_WEATHER_TTL=600``). ``fallback_coordinates`` takes a
    JSON object: ``ZORGAM_FALLBACK_COORDINATES='{"latitude": 9.93, "longitude": 76.26}'``.
    """

    # weather cache
    weather_ttl: float = 3600.0
    refresh_interval: float = 1800.0

    # location
    location_grace: float = 3.0
    fallback_coordinates: Coordinates = DEFAULT_FALLBACK_COORDINATES

    # celebration
    celebration_seconds: float = 3.0
    points_popup_seconds: float = 4.0

    points_fallback: int = 0

    model_config = SettingsConfigDict(env_prefix="ZORGAM_", env_file=".env", extra="ignore", frozen=True)

    @field_validator("weather_ttl", "refresh_interval")
    @classmethod
    def _positive(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("must be positive")
        return value

    @field_validator("location_grace", "celebration_seconds", "points_popup_seconds", "points_fallback")
    @classmethod
    def _not_negative(cls, value: float) -> float:
        if value < 0:
            raise ValueError("must be >= 0")
        return value

    @classmethod
    def from_env(cls) -> "SyncSettings":
        """Build settings from defaults, ``.env`` and ``ZORGAM_*`` variables."""

        return cls()

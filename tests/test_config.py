import pytest
from pydantic import ValidationError

from checkin_sync.config import DEFAULT_FALLBACK_COORDINATES, SyncSettings
from checkin_sync.models import Coordinates


def test_defaults():
    settings = SyncSettings()

    assert settings.weather_ttl == 3600
    assert settings.refresh_interval == 1800
    assert settings.location_grace == 3
    assert settings.celebration_seconds == 3
    assert settings.points_popup_seconds == 4
    assert settings.fallback_coordinates == DEFAULT_FALLBACK_COORDINATES
    assert settings.points_fallback == 0


def test_from_env_overrides(monkeypatch):
    monkeypatch.setenv("ZORGAM_WEATHER_TTL", "60")
    monkeypatch.setenv("ZORGAM_FALLBACK_COORDINATES", '{"latitude": 9.9312, "longitude": 76.2673}')
    monkeypatch.setenv("ZORGAM_POINTS_FALLBACK", "1250")

    settings = SyncSettings.from_env()

    assert settings.weather_ttl == 60
    assert settings.fallback_coordinates == Coordinates(latitude=9.9312, longitude=76.2673)
    assert settings.points_fallback == 1250
    assert settings.refresh_interval == 1800


def test_keyword_arguments_win_over_environment(monkeypatch):
    monkeypatch.setenv("ZORGAM_LOCATION_GRACE", "10")

    assert SyncSettings(location_grace=0).location_grace == 0


def test_from_env_rejects_non_numeric(monkeypatch):
    monkeypatch.setenv("ZORGAM_REFRESH_INTERVAL", "soon")

    with pytest.raises(ValidationError, match="refresh_interval"):
        SyncSettings.from_env()


@pytest.mark.parametrize("field", ["weather_ttl", "refresh_interval"])
def test_non_positive_intervals_rejected(field):
    with pytest.raises(ValidationError):
        SyncSettings(**{field: 0})


def test_negative_points_fallback_rejected():
    with pytest.raises(ValidationError):
        SyncSettings(points_fallback=-1)


def test_settings_are_immutable():
    settings = SyncSettings()

    with pytest.raises(ValidationError):
        settings.weather_ttl = 1

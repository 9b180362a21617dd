"""Client helpers for the air-quality current conditions endpoint."""
from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import ValidationError

from models.checkin_models import AirQualityLocation, AirQualityRequest, AirQualityResponse

from checkin_sync.config import ZORGAM_AIR_QUALITY_API_KEY, ZORGAM_AIR_QUALITY_URL
from checkin_sync.errors import TransportError
from checkin_sync.models import AirQuality, Coordinates, PollenData, WeatherSnapshot

DEFAULT_AIR_QUALITY_URL = ZORGAM_AIR_QUALITY_URL

# (lat_min, lat_max, lon_min, lon_max, label)
_KNOWN_LOCATIONS: tuple[tuple[float, float, float, float, str], ...] = (
    (37.0, 38.0, -123.0, -122.0, "San Francisco, CA"),
    (9.0, 10.0, 76.0, 77.0, "Kochi, India"),
    (12.0, 13.0, 77.0, 78.0, "Bangalore, India"),
    (19.0, 20.0, 72.0, 73.0, "Mumbai, India"),
    (28.0, 29.0, 77.0, 78.0, "New Delhi, India"),
)


def _build_payload(coordinates: Coordinates) -> dict[str, Any]:
    request = AirQualityRequest(
        location=AirQualityLocation(latitude=coordinates.latitude, longitude=coordinates.longitude)
    )
    return request.model_dump()


def _build_params(api_key: str | None) -> dict[str, str]:
    key = api_key if api_key is not None else ZORGAM_AIR_QUALITY_API_KEY
    return {"key": key} if key else {}


def _parse_response(data: Any, url: str) -> AirQualityResponse:
    try:
        return AirQualityResponse.model_validate(data)
    except ValidationError as exc:
        logging.error(f"Air quality response from {url} failed validation: {exc}")
        raise TransportError("weather", f"Invalid air quality payload: {exc}") from exc


async def fetch_air_quality(
    coordinates: Coordinates,
    *,
    base_url: str = DEFAULT_AIR_QUALITY_URL,
    api_key: str | None = None,
    client: httpx.AsyncClient | None = None,
    timeout: float | httpx.Timeout = 10.0,
) -> AirQualityResponse:
    """Fetch current air-quality conditions for a coordinate pair.

    Parameters
    ----------
    coordinates:
        Location to look up.
    base_url:
        Fully qualified URL of the ``currentConditions:lookup`` endpoint.
    api_key:
        API key passed as the ``key`` query parameter. Defaults to
        ``ZORGAM_AIR_QUALITY_API_KEY``.
    client:
        Optional shared ``httpx.AsyncClient``. If not provided, a new client is
        created for the request and closed before returning.
    timeout:
        Timeout passed to ``httpx.AsyncClient`` when an internal client is created.

    Raises
    ------
    TransportError
        On any network, HTTP status or payload failure.
    """

    close_client = False
    if client is None:
        client = httpx.AsyncClient(timeout=timeout)
        close_client = True

    try:
        response = await client.post(
            base_url,
            params=_build_params(api_key),
            json=_build_payload(coordinates),
            headers={"Content-Type": "application/json"},
        )
        logging.info(f"Air quality lookup for {coordinates.latitude}, {coordinates.longitude} returned {response.status_code}")
        response.raise_for_status()
        data = response.json()
    except httpx.HTTPError as exc:
        logging.error(f"Air quality lookup failed for {base_url}: {exc}")
        raise TransportError("weather", str(exc) or exc.__class__.__name__) from exc
    except ValueError as exc:
        logging.error(f"Air quality response from {base_url} is not JSON: {exc}")
        raise TransportError("weather", "Response body is not JSON") from exc
    finally:
        if close_client:
            await client.aclose()
    return _parse_response(data, base_url)


def fetch_air_quality_sync(
    coordinates: Coordinates,
    *,
    base_url: str = DEFAULT_AIR_QUALITY_URL,
    api_key: str | None = None,
    client: httpx.Client | None = None,
    timeout: float | httpx.Timeout = 10.0,
) -> AirQualityResponse:
    """Synchronous wrapper around :func:`fetch_air_quality`.

    Useful for scripts or environments where ``async`` is not convenient.
    """

    close_client = False
    if client is None:
        client = httpx.Client(timeout=timeout)
        close_client = True

    try:
        response = client.post(
            base_url,
            params=_build_params(api_key),
            json=_build_payload(coordinates),
            headers={"Content-Type": "application/json"},
        )
        response.raise_for_status()
        data = response.json()
    except httpx.HTTPError as exc:
        logging.error(f"Air quality lookup failed for {base_url}: {exc}")
        raise TransportError("weather", str(exc) or exc.__class__.__name__) from exc
    except ValueError as exc:
        logging.error(f"Air quality response from {base_url} is not JSON: {exc}")
        raise TransportError("weather", "Response body is not JSON") from exc
    finally:
        if close_client:
            client.close()
    return _parse_response(data, base_url)


def location_label(coordinates: Coordinates) -> str:
    lat, lon = coordinates.latitude, coordinates.longitude
    for lat_min, lat_max, lon_min, lon_max, label in _KNOWN_LOCATIONS:
        if lat_min <= lat <= lat_max and lon_min <= lon <= lon_max:
            return label
    return f"{lat:.4f}, {lon:.4f}"


def convert_air_quality_response(response: AirQualityResponse, coordinates: Coordinates) -> WeatherSnapshot:
    index = response.indexes[0] if response.indexes else None
    concentrations: dict[str, float] = {}
    for pollutant in response.pollutants or []:
        if pollutant.concentration is not None:
            concentrations[pollutant.code] = pollutant.concentration.value

    return WeatherSnapshot(
        location=location_label(coordinates),
        timestamp=response.dateTime,
        air_quality=AirQuality(
            aqi=index.aqi if index else 0,
            pm25=concentrations.get("pm25", 0.0),
            pm10=concentrations.get("pm10", 0.0),
            o3=concentrations.get("o3", 0.0),
            no2=concentrations.get("no2", 0.0),
            co=concentrations.get("co", 0.0),
            so2=concentrations.get("so2", 0.0),
            status=index.category if index else "Unknown",
        ),
        # The air-quality API carries no pollen data.
        pollen=PollenData(),
    )


async def fetch_weather_snapshot(
    coordinates: Coordinates,
    *,
    client: httpx.AsyncClient | None = None,
    **kwargs: Any,
) -> WeatherSnapshot:
    response = await fetch_air_quality(coordinates, client=client, **kwargs)
    return convert_air_quality_response(response, coordinates)


__all__ = [
    "DEFAULT_AIR_QUALITY_URL",
    "convert_air_quality_response",
    "fetch_air_quality",
    "fetch_air_quality_sync",
    "fetch_weather_snapshot",
    "location_label",
]

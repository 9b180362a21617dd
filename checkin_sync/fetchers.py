"""Fetchers wrapping the remote calls behind each derived dashboard dataset."""
from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Generic, Optional, Sequence, TypeVar

from api_clients.air_quality_client import fetch_weather_snapshot
from api_clients.checkin_client import fetch_points_total, fetch_submissions

from .cache import ExpiringCache
from .errors import TransportError
from .geolocation import GeolocationProvider
from .models import Coordinates, DashboardStats, Submission, WeatherSnapshot
from .stats import compute_dashboard_stats

logger = logging.getLogger(__name__)

T = TypeVar("T")

SubmissionsLoader = Callable[[], Awaitable[Sequence[Submission]]]
PointsLoader = Callable[[], Awaitable[int]]
WeatherLookup = Callable[[Coordinates], Awaitable[WeatherSnapshot]]


class DerivedDataFetcher(ABC, Generic[T]):
    """Fetches one dataset; reports failures as ``TransportError`` and never substitutes a fallback."""

    dataset: str = ""

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if not cls.dataset:
            raise ValueError(f"Fetcher {cls.__name__} must define a non-empty dataset")

    def __init__(self, cache: Optional[ExpiringCache[T]] = None) -> None:
        self.cache = cache

    @abstractmethod
    async def fetch(self) -> T:
        """Fetch a fresh value from the remote source."""

    async def _run(self, loader: Callable[[], Awaitable[T]]) -> T:
        # Cancellation is not an Exception and passes through untouched.
        try:
            value = await loader()
        except TransportError:
            raise
        except Exception as exc:
            raise TransportError(self.dataset, str(exc) or exc.__class__.__name__) from exc
        if self.cache is not None:
            self.cache.put(value)
        logger.debug("Fetched %s", self.dataset)
        return value

    def __repr__(self) -> str:  # pragma: no cover - convenience only
        return f"<{self.__class__.__name__} dataset={self.dataset!r}>"


class StatsFetcher(DerivedDataFetcher[DashboardStats]):
    """Downloads the full submission list and derives dashboard counts from it."""

    dataset = "stats"

    def __init__(self, load_submissions: SubmissionsLoader | None = None) -> None:
        super().__init__()
        self._load_submissions = load_submissions or fetch_submissions
        self.submissions: tuple[Submission, ...] = ()

    async def fetch(self) -> DashboardStats:
        submissions = await self._run(self._load_submissions)
        self.submissions = tuple(submissions)
        logger.info("Loaded %d submissions", len(self.submissions))
        return compute_dashboard_stats(self.submissions)


class PointsFetcher(DerivedDataFetcher[int]):
    dataset = "points"

    def __init__(self, load_points: PointsLoader | None = None) -> None:
        super().__init__()
        self._load_points = load_points or fetch_points_total

    async def fetch(self) -> int:
        return await self._run(self._load_points)


class WeatherFetcher(DerivedDataFetcher[WeatherSnapshot]):
    """Looks up conditions for the device location and caches the result."""

    dataset = "weather"

    def __init__(
        self,
        cache: ExpiringCache[WeatherSnapshot],
        geolocation: GeolocationProvider,
        *,
        lookup: WeatherLookup | None = None,
        location_grace: float = 3.0,
    ) -> None:
        super().__init__(cache)
        self._geolocation = geolocation
        self._lookup = lookup or fetch_weather_snapshot
        self._location_grace = location_grace

    async def resolve_coordinates(self) -> Optional[Coordinates]:
        """Return the device position, waiting once for the grace period if it is not known yet."""

        self._geolocation.request_permission()
        coordinates = self._geolocation.current_coordinates()
        if coordinates is None and self._location_grace > 0:
            logger.info("Location unavailable, waiting %.1fs", self._location_grace)
            await asyncio.sleep(self._location_grace)
            coordinates = self._geolocation.current_coordinates()
        return coordinates

    async def fetch(self, coordinates: Optional[Coordinates] = None) -> WeatherSnapshot:
        return await self._run(lambda: self._lookup_at(coordinates))

    async def _lookup_at(self, coordinates: Optional[Coordinates]) -> WeatherSnapshot:
        if coordinates is None:
            coordinates = await self.resolve_coordinates()
        if coordinates is None:
            raise TransportError(self.dataset, "Location not available")
        return await self._lookup(coordinates)

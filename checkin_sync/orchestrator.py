"""Dashboard synchronization engine.

``SyncOrchestrator`` owns the dashboard's observable state and is the only
component that coordinates across datasets: it runs the ordered bootstrap
(stats, points, weather), bypasses the weather TTL on a forced refresh, drives
the periodic weather check, and reacts to the state-changed event published
after an assessment submission.
"""
from __future__ import annotations

import asyncio
import dataclasses
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional, Sequence, Set, TypeVar

from api_clients.checkin_client import fetch_question_schema

from .cache import ExpiringCache
from .config import SyncSettings
from .errors import SubmissionNotFound, TransportError
from .events import STATE_CHANGED, EventBus, default_bus
from .fetchers import PointsFetcher, StatsFetcher, WeatherFetcher
from .geolocation import GeolocationProvider
from .models import (
    DashboardStats,
    QuestionSchema,
    ReconciledHistoryEntry,
    Submission,
    WeatherSnapshot,
)
from .reconciler import SubmissionReconciler
from .scheduler import RefreshScheduler

logger = logging.getLogger(__name__)

T = TypeVar("T")

SchemaLoader = Callable[[str, Optional[int]], Awaitable[Sequence[QuestionSchema]]]
StateObserver = Callable[["DashboardState"], None]


@dataclass(frozen=True)
class DashboardState:
    """Snapshot of everything the dashboard presents."""

    stats: Optional[DashboardStats] = None
    points_total: int = 0
    earned_points: int = 0
    weather: Optional[WeatherSnapshot] = None
    loading: bool = False
    error_message: Optional[str] = None
    celebration_active: bool = False
    points_popup_active: bool = False
    initial_load_complete: bool = False


class SyncOrchestrator:
    """Coordinates fetchers, the weather cache and UI signals for the dashboard."""

    def __init__(
        self,
        *,
        stats_fetcher: StatsFetcher,
        points_fetcher: PointsFetcher,
        weather_fetcher: WeatherFetcher,
        bus: EventBus | None = None,
        settings: SyncSettings | None = None,
        schema_loader: SchemaLoader | None = None,
        reconciler: SubmissionReconciler | None = None,
    ) -> None:
        if weather_fetcher.cache is None:
            raise ValueError("weather_fetcher must own a cache")
        self._stats_fetcher = stats_fetcher
        self._points_fetcher = points_fetcher
        self._weather_fetcher = weather_fetcher
        self._weather_cache: ExpiringCache[WeatherSnapshot] = weather_fetcher.cache
        self._bus = bus or default_bus
        self._settings = settings or SyncSettings()
        self._schema_loader = schema_loader or fetch_question_schema
        self._reconciler = reconciler or SubmissionReconciler()

        self._state = DashboardState()
        self._observers: list[StateObserver] = []
        self._submissions: Dict[int, Submission] = {}
        self._inflight: Dict[str, asyncio.Task[Any]] = {}
        self._timers: Set[asyncio.TimerHandle] = set()
        self._unsubscribe: Optional[Callable[[], None]] = None
        self._scheduler = RefreshScheduler(
            self._settings.refresh_interval,
            self._weather_cache.is_valid,
            self.refresh_weather_if_needed,
            name="weather",
        )

    @classmethod
    def create(
        cls,
        geolocation: GeolocationProvider,
        *,
        settings: SyncSettings | None = None,
        bus: EventBus | None = None,
    ) -> "SyncOrchestrator":
        """Build an orchestrator wired to the live backend and air-quality clients."""

        settings = settings or SyncSettings.from_env()
        weather_cache: ExpiringCache[WeatherSnapshot] = ExpiringCache(settings.weather_ttl)
        return cls(
            stats_fetcher=StatsFetcher(),
            points_fetcher=PointsFetcher(),
            weather_fetcher=WeatherFetcher(
                weather_cache,
                geolocation,
                location_grace=settings.location_grace,
            ),
            bus=bus,
            settings=settings,
        )

    # -- observable state -------------------------------------------------

    @property
    def state(self) -> DashboardState:
        return self._state

    @property
    def stats(self) -> Optional[DashboardStats]:
        return self._state.stats

    @property
    def points_total(self) -> int:
        return self._state.points_total

    @property
    def weather(self) -> Optional[WeatherSnapshot]:
        return self._state.weather

    @property
    def loading(self) -> bool:
        return self._state.loading

    @property
    def celebration_active(self) -> bool:
        return self._state.celebration_active

    @property
    def points_popup_active(self) -> bool:
        return self._state.points_popup_active

    @property
    def initial_load_complete(self) -> bool:
        return self._state.initial_load_complete

    @property
    def scheduler(self) -> RefreshScheduler:
        return self._scheduler

    def subscribe(self, observer: StateObserver) -> Callable[[], None]:
        """Register ``observer`` for every state change; returns an unsubscribe callable."""

        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    def _update(self, **changes: Any) -> None:
        new_state = dataclasses.replace(self._state, **changes)
        if new_state == self._state:
            return
        self._state = new_state
        for observer in list(self._observers):
            try:
                observer(new_state)
            except Exception:
                logger.exception("Dashboard state observer %r failed", observer)

    # -- lifecycle ----------------------------------------------------------

    def start(self) -> None:
        """Subscribe to state-changed events and start the weather scheduler."""

        if self._unsubscribe is None:
            self._unsubscribe = self._bus.subscribe(STATE_CHANGED, self.on_external_state_changed)
        self._scheduler.start()

    def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self._scheduler.stop()
        for handle in list(self._timers):
            handle.cancel()
        self._timers.clear()
        self._update(celebration_active=False, points_popup_active=False)

    async def __aenter__(self) -> "SyncOrchestrator":
        self.start()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        self.close()

    # -- public operations ----------------------------------------------------

    async def load_initial(self) -> DashboardState:
        """Load stats, points and weather in that order.

        A failing dataset falls back on its own and never stops the others.
        """

        self._update(loading=True, error_message=None)
        failed: list[str] = []
        if not await self._refresh_stats(fallback=True):
            failed.append("stats")
        if not await self._refresh_points(fallback=True):
            failed.append("points")
        if not await self._refresh_weather():
            failed.append("weather")

        error_message = f"Could not load {', '.join(failed)}" if failed else None
        self._update(loading=False, error_message=error_message, initial_load_complete=True)
        return self._state

    async def force_refresh(self) -> DashboardState:
        self._weather_cache.invalidate()
        logger.info("Weather cache cleared for manual refresh")
        return await self.load_initial()

    async def refresh_weather_if_needed(self) -> None:
        if self._weather_cache.is_valid():
            logger.debug("Weather data is still fresh, skipping refresh")
            return
        await self._refresh_weather()

    async def on_external_state_changed(self) -> None:
        """Refresh points and stats after a submission, then celebrate."""

        if not self._state.initial_load_complete:
            logger.debug("Ignoring state change before initial load")
            return

        previous = self._state.points_total
        await self._refresh_points(fallback=False)
        await self._refresh_stats(fallback=False)
        earned = max(0, self._state.points_total - previous)

        self._update(earned_points=earned, celebration_active=True, points_popup_active=True)
        self._clear_later(self._settings.celebration_seconds, "celebration_active")
        self._clear_later(self._settings.points_popup_seconds, "points_popup_active")

    async def reconciled_history(self, submission_id: int) -> ReconciledHistoryEntry:
        """Rebuild the question/answer view of a past submission.

        Raises ``SubmissionNotFound`` for an unknown id and ``TransportError``
        if the question schema cannot be fetched.
        """

        submission = self._submissions.get(submission_id)
        if submission is None:
            await self._refresh_stats(fallback=False)
            submission = self._submissions.get(submission_id)
        if submission is None:
            raise SubmissionNotFound(submission_id)

        schema = await self._schema_loader(submission.checkin_type, submission.questionnaire_id)
        entry = self._reconciler.reconcile(submission, schema)
        logger.info(
            "Reconciled %d answers for submission %s", len(entry.answers), submission_id
        )
        return entry

    def cache_status(self) -> str:
        age = self._weather_cache.age()
        if self._weather_cache.is_valid() and age is not None:
            return f"Weather data cached and valid (age {int(age)}s)"
        return "No valid weather cache"

    # -- dataset refreshes ------------------------------------------------------

    async def _single_flight(self, key: str, factory: Callable[[], Awaitable[T]]) -> T:
        task = self._inflight.get(key)
        if task is None:
            task = asyncio.get_running_loop().create_task(_await(factory))
            self._inflight[key] = task
            task.add_done_callback(lambda done, key=key: self._forget(key, done))
        return await asyncio.shield(task)

    def _forget(self, key: str, task: asyncio.Task[Any]) -> None:
        if self._inflight.get(key) is task:
            del self._inflight[key]

    async def _refresh_stats(self, *, fallback: bool) -> bool:
        try:
            stats = await self._single_flight("stats", self._stats_fetcher.fetch)
        except TransportError as exc:
            if fallback:
                logger.warning("Failed to load submissions, using empty stats: %s", exc)
                self._update(stats=DashboardStats())
            else:
                logger.warning("Background stats refresh failed: %s", exc)
            return False
        self._submissions = {submission.id: submission for submission in self._stats_fetcher.submissions}
        self._update(stats=stats)
        return True

    async def _refresh_points(self, *, fallback: bool) -> bool:
        try:
            total = await self._single_flight("points", self._points_fetcher.fetch)
        except TransportError as exc:
            if fallback:
                logger.warning(
                    "Failed to load points, using %d: %s", self._settings.points_fallback, exc
                )
                self._update(points_total=self._settings.points_fallback)
            else:
                logger.warning("Background points refresh failed: %s", exc)
            return False
        self._update(points_total=total)
        return True

    async def _refresh_weather(self) -> bool:
        cached = self._weather_cache.get()
        if cached is not None:
            logger.debug("Using cached weather data")
            self._update(weather=cached)
            return True
        try:
            weather = await self._single_flight("weather", self._fetch_weather_with_fallback)
        except TransportError as exc:
            logger.warning("Weather unavailable: %s", exc)
            return False
        self._update(weather=weather)
        return True

    async def _fetch_weather_with_fallback(self) -> WeatherSnapshot:
        try:
            return await self._weather_fetcher.fetch()
        except TransportError as exc:
            logger.warning("Weather lookup failed (%s), retrying with fallback location", exc)
        return await self._weather_fetcher.fetch(self._settings.fallback_coordinates)

    def _clear_later(self, delay: float, flag: str) -> None:
        loop = asyncio.get_running_loop()
        handle: Optional[asyncio.TimerHandle] = None

        def clear() -> None:
            self._timers.discard(handle)
            self._update(**{flag: False})

        handle = loop.call_later(delay, clear)
        self._timers.add(handle)


async def _await(factory: Callable[[], Awaitable[T]]) -> T:
    return await factory()

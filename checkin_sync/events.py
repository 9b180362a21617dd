"""Process-wide broadcast channel for app events."""
from __future__ import annotations

import asyncio
import inspect
import logging
from collections import defaultdict
from typing import Any, Awaitable, Callable, Dict, List, Set, Union

logger = logging.getLogger(__name__)

# Posted after an assessment is submitted successfully; carries no payload.
STATE_CHANGED = "assessment_submitted"

Handler = Callable[[], Union[None, Awaitable[None]]]


class EventBus:
    """Broadcasts payload-free events to any number of subscribers.

    Delivery order across subscribers is unspecified. Coroutine handlers are
    scheduled as tasks on the running loop; ``publish`` returns those tasks.
    """

    def __init__(self) -> None:
        self._handlers: Dict[str, List[Handler]] = defaultdict(list)
        self._pending: Set[asyncio.Task[Any]] = set()

    def subscribe(self, event: str, handler: Handler) -> Callable[[], None]:
        self._handlers[event].append(handler)

        def unsubscribe() -> None:
            self.unsubscribe(event, handler)

        return unsubscribe

    def unsubscribe(self, event: str, handler: Handler) -> None:
        handlers = self._handlers.get(event)
        if handlers and handler in handlers:
            handlers.remove(handler)

    def subscriber_count(self, event: str) -> int:
        return len(self._handlers.get(event, ()))

    def publish(self, event: str) -> list[asyncio.Task[Any]]:
        tasks: list[asyncio.Task[Any]] = []
        for handler in list(self._handlers.get(event, ())):
            try:
                result = handler()
            except Exception:
                logger.exception("Handler %r failed for event %s", handler, event)
                continue
            if inspect.isawaitable(result):
                try:
                    loop = asyncio.get_running_loop()
                except RuntimeError:
                    logger.warning("No running event loop; dropping async handler for %s", event)
                    if inspect.iscoroutine(result):
                        result.close()
                    continue
                task = loop.create_task(_as_coroutine(result))
                self._pending.add(task)
                task.add_done_callback(self._pending.discard)
                task.add_done_callback(lambda done, handler=handler: _log_failure(done, handler, event))
                tasks.append(task)
        return tasks


async def _as_coroutine(awaitable: Awaitable[Any]) -> Any:
    return await awaitable


def _log_failure(task: asyncio.Task[Any], handler: Handler, event: str) -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error("Async handler %r failed for event %s", handler, event, exc_info=exc)


default_bus = EventBus()

import asyncio
import logging

import pytest

from checkin_sync.assessments import AssessmentService
from checkin_sync.errors import TransportError
from checkin_sync.events import STATE_CHANGED, EventBus
from checkin_sync.models import CheckinType, Submission


def test_sync_handlers_run_immediately_and_can_unsubscribe():
    bus = EventBus()
    received = []
    unsubscribe = bus.subscribe(STATE_CHANGED, lambda: received.append("first"))
    bus.subscribe(STATE_CHANGED, lambda: received.append("second"))

    assert bus.publish(STATE_CHANGED) == []
    unsubscribe()
    bus.publish(STATE_CHANGED)

    assert sorted(received) == ["first", "second", "second"]
    assert bus.subscriber_count(STATE_CHANGED) == 1


def test_failing_handler_does_not_block_others():
    bus = EventBus()
    received = []

    def broken():
        raise RuntimeError("boom")

    bus.subscribe(STATE_CHANGED, broken)
    bus.subscribe(STATE_CHANGED, lambda: received.append("ok"))
    bus.publish(STATE_CHANGED)

    assert received == ["ok"]


def test_async_handler_without_loop_is_dropped():
    bus = EventBus()

    async def handler():  # pragma: no cover - never awaited
        raise AssertionError("should not run")

    bus.subscribe(STATE_CHANGED, handler)

    assert bus.publish(STATE_CHANGED) == []


@pytest.mark.asyncio
async def test_async_handlers_are_scheduled_as_tasks():
    bus = EventBus()
    received = []

    async def handler():
        await asyncio.sleep(0)
        received.append("done")

    bus.subscribe(STATE_CHANGED, handler)
    tasks = bus.publish(STATE_CHANGED)
    await asyncio.gather(*tasks)

    assert received == ["done"]


@pytest.mark.asyncio
async def test_failing_async_handler_is_logged(caplog):
    bus = EventBus()

    async def broken():
        raise RuntimeError("refresh exploded")

    bus.subscribe(STATE_CHANGED, broken)

    with caplog.at_level(logging.ERROR, logger="checkin_sync.events"):
        results = await asyncio.gather(*bus.publish(STATE_CHANGED), return_exceptions=True)
        await asyncio.sleep(0)

    assert isinstance(results[0], RuntimeError)
    records = [r for r in caplog.records if r.name == "checkin_sync.events"]
    assert len(records) == 1
    assert records[0].exc_info[1] is results[0]
    assert STATE_CHANGED in records[0].getMessage()


@pytest.mark.asyncio
async def test_submit_publishes_state_changed():
    bus = EventBus()
    published = []
    bus.subscribe(STATE_CHANGED, lambda: published.append(True))
    sent = []

    async def submitter(questionnaire_id, checkin_type, answers):
        sent.append((questionnaire_id, checkin_type, answers))
        return Submission(id=77, checkin_type=checkin_type, status="submitted", submitted_at="2025-09-24T16:44:00Z")

    service = AssessmentService(submitter=submitter, bus=bus)
    submission = await service.submit(1, CheckinType.DAILY, {"mood": "happy"})

    assert submission.id == 77
    assert sent == [(1, "DAILY", {"mood": "happy"})]
    assert published == [True]


@pytest.mark.asyncio
async def test_failed_submit_does_not_publish():
    bus = EventBus()
    published = []
    bus.subscribe(STATE_CHANGED, lambda: published.append(True))

    async def submitter(questionnaire_id, checkin_type, answers):
        raise TransportError("/questionnaires/submit", "down")

    service = AssessmentService(submitter=submitter, bus=bus)
    with pytest.raises(TransportError):
        await service.submit(1, "weekly", {"q1": "A"})

    assert published == []


@pytest.mark.asyncio
async def test_submit_rejects_empty_answers():
    async def submitter(*args):  # pragma: no cover
        raise AssertionError("should not be called")

    with pytest.raises(ValueError):
        await AssessmentService(submitter=submitter, bus=EventBus()).submit(1, "daily", {})

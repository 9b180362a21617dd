"""Assessment submission."""
from __future__ import annotations

import logging
from typing import Awaitable, Callable, Mapping

from api_clients.checkin_client import submit_answers

from .events import STATE_CHANGED, EventBus, default_bus
from .models import CheckinType, Submission

logger = logging.getLogger(__name__)

Submitter = Callable[[int, str, Mapping[str, str]], Awaitable[Submission]]


class AssessmentService:
    """Posts completed assessments and announces them on the event bus."""

    def __init__(self, *, submitter: Submitter | None = None, bus: EventBus | None = None) -> None:
        self._submitter = submitter or submit_answers
        self._bus = bus or default_bus

    async def submit(
        self,
        questionnaire_id: int,
        checkin_type: CheckinType | str,
        answers: Mapping[str, str],
    ) -> Submission:
        """Submit ``answers``; publishes ``STATE_CHANGED`` only when the backend accepts them.

        Raises ``ValueError`` for an empty answer set and ``TransportError`` if
        the backend call fails.
        """

        if not answers:
            raise ValueError("No answers to submit")
        raw_type = checkin_type.value if isinstance(checkin_type, CheckinType) else checkin_type
        submission = await self._submitter(questionnaire_id, raw_type.upper(), dict(answers))
        logger.info("Questionnaire %s submitted as %s", questionnaire_id, submission.id)
        self._bus.publish(STATE_CHANGED)
        return submission

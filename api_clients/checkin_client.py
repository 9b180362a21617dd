"""
Check-in API client for submissions, points and questionnaires.
"""
import logging
from typing import Any, Iterable, Mapping, Optional, Sequence

import httpx
from pydantic import ValidationError

from api_clients.zorgam_backend_client import ZorgamBackendClient
from models.checkin_models import (
    PointsTotalResponse,
    Questionnaire,
    QuestionnaireSubmissionRequest,
    SubmissionResponse,
)

from checkin_sync.errors import TransportError
from checkin_sync.models import QuestionSchema, Submission

SUBMISSIONS_ENDPOINT = "/questionnaires/submissions/me"
POINTS_TOTAL_ENDPOINT = "/points/me/total"
QUESTIONNAIRE_ENDPOINT = "/questionnaires/{questionnaire_id}"
QUESTIONNAIRES_BY_TYPE_ENDPOINT = "/questionnaires"
SUBMIT_ENDPOINT = "/questionnaires/submit"


class CheckinClient:
    """
    Client for making check-in API calls via ZorgamBackendClient.
    """

    def __init__(self, client: Optional[ZorgamBackendClient] = None):
        self.client = client or ZorgamBackendClient()

    async def _request(self, method: str, endpoint: str, params=None, json_data=None) -> Any:
        try:
            return await self.client._make_request(
                method=method,
                endpoint=endpoint,
                params=params,
                json_data=json_data,
            )
        except httpx.HTTPError as exc:
            raise TransportError(endpoint, str(exc) or exc.__class__.__name__) from exc

    async def get_submissions(self) -> list[SubmissionResponse]:
        """Get every submission made by the signed-in user."""
        payload = await self._request("GET", SUBMISSIONS_ENDPOINT)
        if isinstance(payload, dict):
            payload = payload.get("items", payload.get("submissions"))
        if not isinstance(payload, list):
            raise TransportError(SUBMISSIONS_ENDPOINT, f"Unexpected submissions payload: {payload!r}")
        try:
            return [SubmissionResponse.model_validate(item) for item in payload]
        except ValidationError as exc:
            raise TransportError(SUBMISSIONS_ENDPOINT, f"Invalid submission record: {exc}") from exc

    async def get_points_total(self) -> int:
        """Get the signed-in user's point total."""
        payload = await self._request("GET", POINTS_TOTAL_ENDPOINT)
        # The endpoint has returned both a bare integer and an object.
        if isinstance(payload, bool):
            raise TransportError(POINTS_TOTAL_ENDPOINT, f"Unexpected points payload: {payload!r}")
        if isinstance(payload, int):
            total = payload
        else:
            try:
                total = PointsTotalResponse.model_validate(payload).totalPoints
            except ValidationError as exc:
                raise TransportError(POINTS_TOTAL_ENDPOINT, f"Invalid points payload: {exc}") from exc
        return max(0, total)

    async def get_questionnaires(
        self,
        checkin_type: str,
        questionnaire_id: Optional[int] = None,
    ) -> list[Questionnaire]:
        """Get questionnaire definitions by id, or every questionnaire for a check-in type."""
        if questionnaire_id is not None:
            endpoint = QUESTIONNAIRE_ENDPOINT.format(questionnaire_id=questionnaire_id)
        else:
            endpoint = QUESTIONNAIRES_BY_TYPE_ENDPOINT
        payload = await self._request("GET", endpoint, params={"checkin_type": checkin_type})
        items = payload if isinstance(payload, list) else [payload]
        try:
            return [Questionnaire.model_validate(item) for item in items]
        except ValidationError as exc:
            raise TransportError(endpoint, f"Invalid questionnaire payload: {exc}") from exc

    async def submit_questionnaire(
        self,
        questionnaire_id: int,
        checkin_type: str,
        answers: Mapping[str, str],
    ) -> SubmissionResponse:
        request_data = QuestionnaireSubmissionRequest(
            questionnaire_id=questionnaire_id,
            checkin_type=checkin_type,
            answers_json=dict(answers),
        )
        payload = await self._request(
            "POST",
            SUBMIT_ENDPOINT,
            json_data=request_data.model_dump(by_alias=True),
        )
        try:
            return SubmissionResponse.model_validate(payload)
        except ValidationError as exc:
            raise TransportError(SUBMIT_ENDPOINT, f"Invalid submission response: {exc}") from exc


_client: CheckinClient | None = None


def _get_client() -> CheckinClient:
    global _client
    if _client is None:
        _client = CheckinClient()
    return _client


def convert_submission_response(response: SubmissionResponse) -> Submission:
    return Submission(
        id=response.id,
        checkin_type=response.checkinType,
        status=response.status,
        submitted_at=response.submittedAt,
        answers=dict(response.answersJson),
        questionnaire_id=response.questionnaireId,
        reviewed_at=response.reviewedAt,
        reviewer_note=response.nurseComments,
        reviewed_by=response.reviewedByNurse,
        alert_level=response.alertLevel,
    )


def convert_questionnaires(questionnaires: Iterable[Questionnaire]) -> list[QuestionSchema]:
    """Flatten questionnaires into one schema, keeping questionnaire then question order."""
    schema: list[QuestionSchema] = []
    for questionnaire in questionnaires:
        for question in questionnaire.questions:
            schema.append(
                QuestionSchema(
                    id=question.id,
                    key=question.key,
                    title=question.title,
                    question_type=question.questionType,
                    subtitle=question.subtitle,
                    sequence=question.sequence,
                )
            )
    return schema


async def fetch_submissions(client: Optional[CheckinClient] = None) -> list[Submission]:
    checkin_client = client or _get_client()
    responses = await checkin_client.get_submissions()
    return [convert_submission_response(response) for response in responses]


async def fetch_points_total(client: Optional[CheckinClient] = None) -> int:
    checkin_client = client or _get_client()
    return await checkin_client.get_points_total()


async def fetch_question_schema(
    checkin_type: str,
    questionnaire_id: Optional[int] = None,
    client: Optional[CheckinClient] = None,
) -> Sequence[QuestionSchema]:
    logging.info(f"Fetching question schema for {checkin_type} questionnaire {questionnaire_id}")
    checkin_client = client or _get_client()
    questionnaires = await checkin_client.get_questionnaires(checkin_type, questionnaire_id)
    return convert_questionnaires(questionnaires)


async def submit_answers(
    questionnaire_id: int,
    checkin_type: str,
    answers: Mapping[str, str],
    client: Optional[CheckinClient] = None,
) -> Submission:
    logging.info(f"Submitting {len(answers)} answers for questionnaire {questionnaire_id}")
    checkin_client = client or _get_client()
    response = await checkin_client.submit_questionnaire(questionnaire_id, checkin_type, answers)
    return convert_submission_response(response)

"""
Check-in backend and air-quality API models.
"""
from typing import Any, Dict, Optional, List
from pydantic import BaseModel, Field, ConfigDict


class QuestionnaireOption(BaseModel):
    """
    Model for a selectable questionnaire option.
    """
    model_config = ConfigDict(populate_by_name=True)

    id: int = Field(description="Option ID")
    label: str = Field(default="", description="Display label")
    value: str = Field(default="", description="Submitted value")


class QuestionnaireQuestion(BaseModel):
    """
    Model for a questionnaire question.
    """
    model_config = ConfigDict(populate_by_name=True)

    id: int = Field(description="Question ID")
    title: str = Field(default="", description="Question title")
    subtitle: Optional[str] = Field(default=None, description="Question subtitle")
    questionType: str = Field(default="text", alias="question_type", description="Question type")
    options: List[QuestionnaireOption] = Field(default_factory=list, description="Options")
    isRequired: bool = Field(default=False, alias="is_required", description="Is required")
    key: str = Field(default="", description="Question key")
    sequence: int = Field(default=0, description="Display sequence")


class Questionnaire(BaseModel):
    """
    Model for a questionnaire and its questions.
    """
    model_config = ConfigDict(populate_by_name=True)

    id: int = Field(description="Questionnaire ID")
    title: str = Field(default="", description="Title")
    description: str = Field(default="", description="Description")
    questions: List[QuestionnaireQuestion] = Field(default_factory=list, description="Questions")


class SubmissionResponse(BaseModel):
    """
    Model for a submitted questionnaire as returned by the backend.
    """
    model_config = ConfigDict(populate_by_name=True)

    id: int = Field(description="Submission ID")
    userId: Optional[int] = Field(default=None, alias="user_id", description="User ID")
    questionnaireId: Optional[int] = Field(default=None, alias="questionnaire_id", description="Questionnaire ID")
    checkinType: str = Field(default="", alias="checkin_type", description="Check-in type")
    answersJson: Dict[str, Any] = Field(default_factory=dict, alias="answers_json", description="Raw answers")
    status: str = Field(default="", description="Status")
    nurseComments: Optional[str] = Field(default=None, alias="nurse_comments", description="Reviewer note")
    reviewedByNurse: Optional[str] = Field(default=None, alias="reviewed_by_nurse", description="Reviewer")
    reviewedAt: Optional[str] = Field(default=None, alias="reviewed_at", description="Reviewed at")
    submittedAt: str = Field(default="", alias="submitted_at", description="Submitted at")
    alertLevel: Optional[str] = Field(default=None, alias="alert_level", description="Alert level")


class PointsTotalResponse(BaseModel):
    """
    Model for the points total response.
    """
    model_config = ConfigDict(populate_by_name=True)

    totalPoints: int = Field(default=0, alias="total_points", description="Total points")


# Request models
class QuestionnaireSubmissionRequest(BaseModel):
    """
    Request model for submitting questionnaire answers.
    """
    model_config = ConfigDict(populate_by_name=True)

    questionnaireId: int = Field(alias="questionnaire_id", description="Questionnaire ID")
    checkinType: str = Field(alias="checkin_type", description="Check-in type")
    answersJson: Dict[str, str] = Field(alias="answers_json", description="Answers keyed by question id or key")
    status: str = Field(default="completed", description="Submission status")


# Air-quality API
class AirQualityLocation(BaseModel):
    latitude: float
    longitude: float


class AirQualityRequest(BaseModel):
    """
    Request model for the air-quality current conditions lookup.
    """
    location: AirQualityLocation
    extraComputations: List[str] = Field(
        default_factory=lambda: [
            "LOCAL_AQI",
            "HEALTH_RECOMMENDATIONS",
            "POLLUTANT_ADDITIONAL_INFO",
            "DOMINANT_POLLUTANT_CONCENTRATION",
            "POLLUTANT_CONCENTRATION",
        ]
    )
    languageCode: str = "en"


class AirQualityIndex(BaseModel):
    code: str = Field(default="", description="Index code")
    displayName: str = Field(default="", description="Display name")
    aqi: int = Field(default=0, description="Air quality index")
    aqiDisplay: str = Field(default="", description="Formatted index")
    category: str = Field(default="Unknown", description="Category")
    dominantPollutant: Optional[str] = Field(default=None, description="Dominant pollutant")


class PollutantConcentration(BaseModel):
    value: float = Field(default=0.0, description="Concentration value")
    units: str = Field(default="", description="Units")


class Pollutant(BaseModel):
    code: str = Field(description="Pollutant code")
    displayName: str = Field(default="", description="Display name")
    concentration: Optional[PollutantConcentration] = Field(default=None, description="Concentration")


class AirQualityResponse(BaseModel):
    """
    Model for the air-quality current conditions response.
    """
    dateTime: str = Field(default="", description="Observation time")
    regionCode: str = Field(default="", description="Region code")
    indexes: List[AirQualityIndex] = Field(default_factory=list, description="Indexes")
    pollutants: Optional[List[Pollutant]] = Field(default=None, description="Pollutants")

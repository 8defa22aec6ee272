from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Generic, Optional, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """Base for models exchanged as camelCase JSON (LLM replies and the HTTP API)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Difficulty(str, Enum):
    foundation = "Foundation"
    intermediate = "Intermediate"
    advanced = "Advanced"
    ukmla = "UKMLA"


class ScoreScale(str, Enum):
    ten_point = "1-10"
    percentage = "0-100"


class ActivityType(str, Enum):
    answer = "answer"
    practice = "practice"
    review = "review"
    achievement = "achievement"
    gap = "gap"


class ResourceType(str, Enum):
    guideline = "guideline"
    questionbank = "questionbank"
    ukmla = "ukmla"
    other = "other"


class ResourceLink(CamelModel):
    title: str
    url: str
    type: Optional[str] = None


RelatedResource = Union[str, ResourceLink]


# ===== AI Gateway =====


class GeneratedQuestion(CamelModel):
    specialty: str
    difficulty: Difficulty
    scenario: str = Field(min_length=1)
    question: str = Field(min_length=1)
    model_answer: str = ""
    strengths: list[str] = Field(min_length=1)
    areas_for_improvement: list[str] = Field(min_length=1)
    learning_points: list[str] = Field(min_length=1)
    related_resources: list[RelatedResource] = Field(default_factory=list)


class AnswerEvaluation(CamelModel):
    score: float
    # Providers disagree on the scale; it is reported, never renormalized.
    score_scale: ScoreScale
    model_answer: str = ""
    strengths: list[str] = Field(default_factory=list)
    areas_for_improvement: list[str] = Field(default_factory=list)
    learning_points: list[str] = Field(default_factory=list)
    related_resources: list[RelatedResource] = Field(default_factory=list)

    @field_validator("score", mode="before")
    @classmethod
    def _coerce_score(cls, value: Any) -> Any:
        # "75%" and "8/10" show up in free-text replies
        if isinstance(value, str):
            text = value.strip().rstrip("%").strip()
            if "/" in text:
                text = text.split("/", 1)[0].strip()
            return float(text)
        return value


class ProviderOutcome(BaseModel):
    provider: str
    succeeded: bool
    sticky: bool = False
    error: Optional[str] = None


class GatewayResult(BaseModel, Generic[T]):
    provider: str
    value: T
    attempts: list[ProviderOutcome] = Field(default_factory=list)


# ===== Persistence records =====


class Specialty(CamelModel):
    id: Optional[int] = None
    name: str
    description: str = ""
    question_count: int = 0
    mastery_percentage: int = 0


class StoredQuestion(CamelModel):
    id: Optional[int] = None
    specialty_id: int
    user_id: Optional[int] = None
    difficulty: str
    scenario: str
    question: str
    model_answer: str
    strengths: list[str] = Field(default_factory=list)
    areas_for_improvement: list[str] = Field(default_factory=list)
    learning_points: list[str] = Field(default_factory=list)
    related_resources: list[RelatedResource] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=datetime.utcnow)


class StoredAnswer(CamelModel):
    id: Optional[int] = None
    question_id: int
    user_id: int
    answer: str
    evaluation: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=datetime.utcnow)


class Attempt(CamelModel):
    id: Optional[int] = None
    question_id: int
    user_id: int
    score: int
    score_scale: ScoreScale = ScoreScale.ten_point
    created_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def percent(self) -> float:
        if self.score_scale == ScoreScale.percentage:
            return float(self.score)
        return float(self.score) * 10.0


class ActivityLogEntry(CamelModel):
    id: Optional[int] = None
    user_id: int
    type: ActivityType
    title: str
    description: str
    duration: int = 0
    created_at: datetime = Field(default_factory=datetime.utcnow)


class UserStats(CamelModel):
    user_id: int
    questions_answered: int = 0
    accuracy_rate: int = 0
    questions_weekly_change: int = 0
    accuracy_weekly_change: int = 0
    strongest_area: Optional[str] = None
    strongest_area_accuracy: int = 0
    weakest_area: Optional[str] = None
    weakest_area_accuracy: int = 0
    active_days: int = 0
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class Resource(CamelModel):
    id: Optional[int] = None
    type: ResourceType
    title: str
    description: str
    url: str
    organization: Optional[str] = None
    publisher: Optional[str] = None
    tags: list[str] = Field(default_factory=list)


# ===== Aggregate reads =====


class SpecialtyPerformance(CamelModel):
    name: str
    questions: int
    accuracy: float


class DifficultyPerformance(CamelModel):
    name: str
    questions: int
    accuracy: float


class ProgressPoint(CamelModel):
    date: str
    questions_attempted: int
    accuracy: float


class DayActivity(CamelModel):
    day: str
    questions: int
    minutes: int


# ===== HTTP API =====


class UserProfile(CamelModel):
    id: int
    name: str
    role: str


class ActivityView(CamelModel):
    id: int
    title: str
    description: str
    icon: str
    time_ago: str


class GenerateQuestionsRequest(CamelModel):
    specialty: str = Field(min_length=1)
    difficulty: Difficulty
    count: int = Field(ge=1, le=20)
    topics: Optional[str] = None


class QuestionSummary(CamelModel):
    id: int
    specialty: str
    difficulty: str
    scenario: str
    question: str


class GenerateQuestionsResponse(CamelModel):
    provider: Optional[str]
    questions: list[QuestionSummary]


class SubmitAnswerRequest(CamelModel):
    question_id: int
    answer: str = Field(min_length=1)


class SubmitAnswerResponse(StoredAnswer):
    provider: Optional[str]


class BatchAnswersRequest(CamelModel):
    answers: list[SubmitAnswerRequest]


class BatchItemResult(CamelModel):
    question_id: int
    status: str  # success|error
    evaluation: Optional[dict[str, Any]] = None
    message: Optional[str] = None


class BatchAnswersResponse(CamelModel):
    provider: Optional[str] = None
    results: list[BatchItemResult]


class FeedbackView(CamelModel):
    id: int
    specialty: str
    difficulty: str
    scenario: str
    question: str
    user_answer: str
    score: float = 0
    score_scale: Optional[ScoreScale] = None
    model_answer: str = ""
    strengths: list[str] = Field(default_factory=list)
    areas_for_improvement: list[str] = Field(default_factory=list)
    learning_points: list[str] = Field(default_factory=list)
    related_resources: list[RelatedResource] = Field(default_factory=list)


class PerformanceSummary(CamelModel):
    total_questions: int
    overall_accuracy: int
    active_days: int
    by_difficulty: list[DifficultyPerformance]


class ProviderStatus(CamelModel):
    order: list[str]
    failed: list[str]
    current: Optional[str]

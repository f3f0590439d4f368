"""Quiz questions, answers and the scoring request/response contract."""

from enum import Enum
from typing import Dict, List, Optional, Union

from pydantic import Field

from talent_engine.models.base import WireModel


class QuestionType(str, Enum):
    MULTIPLE_CHOICE = "multiple_choice"
    SLIDER = "slider"
    FREETEXT = "freetext"


class QuizQuestion(WireModel):
    id: str
    type: QuestionType
    question: str
    dimension: Optional[str] = None
    category: Optional[str] = None
    scoring_rubric: Optional[Dict[str, float]] = None
    options: Optional[List[str]] = None
    slider_min: Optional[float] = None
    slider_max: Optional[float] = None
    module_id: Optional[str] = None


class QuizAnswer(WireModel):
    question_id: str
    answer: Union[int, float, str]


class DimensionScore(WireModel):
    """One scored atom for a question."""

    dimension: str
    score: int = Field(ge=0, le=100)
    rationale: str = ""
    confidence: float = Field(ge=0, le=1, default=1.0)
    source_kind: Optional[QuestionType] = None
    weight: float = Field(gt=0, le=1, default=1.0)


class QuizScore(WireModel):
    question_id: str
    dimension_scores: List[DimensionScore]


class QuizScoringRequest(WireModel):
    answers: List[QuizAnswer]
    questions: List[QuizQuestion]


class QuizScoringResponse(WireModel):
    scores: List[QuizScore] = []
    dimension_summary: Dict[str, int] = {}
    dimension_confidence: Dict[str, int] = {}

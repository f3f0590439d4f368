"""Evidence atoms and the confidence views derived from them."""

from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import ConfigDict, Field

from talent_engine.models.base import WireModel


class SourceType(str, Enum):
    QUIZ = "quiz"
    SESSION = "session"
    DATA_SOURCE = "data_source"


ALL_SOURCE_TYPES = (SourceType.QUIZ, SourceType.SESSION, SourceType.DATA_SOURCE)


class ConfidenceSource(WireModel):
    """A single scored observation. Immutable once created."""

    model_config = ConfigDict(frozen=True)

    type: SourceType
    dimension: str
    score: float = Field(ge=0, le=100)
    evidence: str = ""
    timestamp: datetime
    origin: Optional[str] = None            # e.g. "gmail" for data_source atoms


class DimensionConfidence(WireModel):
    """Confidence for one dimension; always a pure function of `sources`."""

    dimension: str
    confidence: int = Field(ge=0, le=100)
    source_count: int = Field(ge=0)
    source_types: List[SourceType] = []
    sources: List[ConfidenceSource] = []


class ConfidenceProfile(WireModel):
    dimensions: Dict[str, DimensionConfidence] = {}
    overall_confidence: int = Field(ge=0, le=100, default=0)
    last_updated: datetime


class DimensionGap(WireModel):
    """Ephemeral view: a dimension below the target confidence."""

    dimension: str
    current_confidence: int = Field(ge=0, le=100)
    target_confidence: int = Field(ge=0, le=100)
    missing_source_types: List[SourceType] = []
    importance: float = Field(ge=0, le=1)

    @property
    def deficit(self) -> int:
        return self.target_confidence - self.current_confidence

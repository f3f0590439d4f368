"""Profile inputs (signals, session insights, data insights) and outputs."""

from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Union

from pydantic import Field

from talent_engine.models.base import WireModel


class UserSignal(WireModel):
    """A talent signal extracted from connected data or a live session."""

    id: str = ""
    signal: str
    source: str = ""
    evidence: str = ""
    confidence: float = Field(ge=0, le=100)     # 0-1 or 0-100, normalized on use
    dimensions: List[str] = []
    timestamp: Optional[datetime] = None


class SessionInsight(WireModel):
    """An observation made during a live conversational session."""

    timestamp: Optional[datetime] = None
    observation: str = ""
    category: str                               # see SESSION_INSIGHT_CATEGORIES
    confidence: float = Field(ge=0, le=100)
    evidence: str = ""


class DataInsight(WireModel):
    """Themes/skills/interests extracted from one connected data source."""

    source: str                                 # "gmail", "drive", ...
    summary: str = ""
    themes: List[str] = []
    skills: List[str] = []
    interests: List[str] = []
    raw_token_count: int = 0


class LocationFlexibility(str, Enum):
    ANYWHERE = "anywhere"
    PREFER_REMOTE = "prefer_remote"
    SPECIFIC_LOCATION = "specific_location"
    NO_PREFERENCE = "no_preference"


class UserConstraints(WireModel):
    """Practical constraints; carried through the profile untouched."""

    location_flexibility: Optional[LocationFlexibility] = None
    salary_priority: Optional[str] = None       # critical | important | flexible
    time_availability: Optional[str] = None     # full_time | part_time | flexible | transitioning
    education_willingness: Optional[str] = None  # none | short_courses | certificate | degree
    relocation_willingness: Optional[str] = None  # yes | maybe | no


class ProfileBuilderInput(WireModel):
    # Raw dimension label -> score or list of scores (0-100)
    quiz_dimension_scores: Dict[str, Union[float, List[float]]] = {}
    signals: List[UserSignal] = []
    session_insights: List[SessionInsight] = []
    constraints: Optional[UserConstraints] = None
    dimension_confidence: Dict[str, float] = {}


class ComputedProfile(WireModel):
    riasec_code: str = Field(min_length=3, max_length=3)
    dimension_scores: Dict[str, int] = {}
    confidence_scores: Dict[str, int] = {}
    constraints: Optional[UserConstraints] = None


class SnapshotTrigger(str, Enum):
    INITIAL = "initial"
    QUIZ_COMPLETED = "quiz_completed"
    SESSION_COMPLETED = "session_completed"
    SOURCE_ANALYZED = "source_analyzed"
    REFLECTION = "reflection"
    CHALLENGE_COMPLETED = "challenge_completed"


class ProfileSnapshot(WireModel):
    """One point on a profile's evolution timeline."""

    version: int = Field(ge=1)
    timestamp: datetime
    computed_profile: ComputedProfile
    dimension_scores: Dict[str, int]
    riasec_code: str
    trigger: SnapshotTrigger
    deltas: Optional[Dict[str, int]] = None

"""Agent State snapshot and the actions the orchestrator recommends."""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List

from pydantic import Field

from talent_engine.models.base import WireModel
from talent_engine.models.evidence import ConfidenceProfile, DimensionGap


class QuizModuleId(str, Enum):
    INTERESTS = "interests"
    WORK_VALUES = "work_values"
    STRENGTHS_SKILLS = "strengths_skills"
    LEARNING_ENVIRONMENT = "learning_environment"
    CONSTRAINTS = "constraints"


class ActionType(str, Enum):
    REQUEST_ADDITIONAL_DATA = "request_additional_data"
    ANALYZE_SOURCE = "analyze_source"
    RUN_QUIZ_MODULE = "run_quiz_module"
    PROBE_DIMENSION = "probe_dimension"
    START_SESSION = "start_session"
    GENERATE_REPORT = "generate_report"
    REFINE_REPORT_SECTION = "refine_report_section"


class ActionPriority(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


PRIORITY_ORDER: Dict[ActionPriority, int] = {
    ActionPriority.CRITICAL: 0,
    ActionPriority.HIGH: 1,
    ActionPriority.MEDIUM: 2,
    ActionPriority.LOW: 3,
}


class AgentState(WireModel):
    """Read-only snapshot handed to the orchestrator."""

    connected_sources: List[str] = []
    quiz_completed_modules: List[QuizModuleId] = []
    quiz_in_progress_modules: List[QuizModuleId] = []
    session_completed: bool = False
    session_insights_count: int = Field(ge=0, default=0)
    confidence_profile: ConfidenceProfile
    gaps: List[DimensionGap] = []
    report_generated: bool = False
    overall_confidence: int = Field(ge=0, le=100, default=0)


class AgentAction(WireModel):
    """A recommendation. Produced fresh on every evaluation, never persisted."""

    type: ActionType
    priority: ActionPriority
    reason: str
    confidence_impact: int = Field(ge=0, le=30)  # Estimated gain in points
    blocked_by: List[str] = []
    metadata: Dict[str, Any] = {}


class AgentDecision(WireModel):
    """Decision-log entry summarising one evaluation."""

    id: str
    timestamp: datetime
    action: ActionType
    reason: str
    confidence_before: int
    confidence_after: int
    outcome: str = "pending"                    # pending | completed | skipped
    metadata: Dict[str, Any] = {}


class ModuleRecommendation(WireModel):
    module: QuizModuleId
    reason: str
    expected_impact: int = Field(ge=0, le=25)
    score: float = 0.0


class SourceRecommendation(WireModel):
    source: str
    reason: str
    expected_impact: int = Field(ge=0, le=25)
    dimensions: List[str] = []
    score: float = 0.0

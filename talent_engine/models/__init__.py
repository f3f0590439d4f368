"""Talent engine data models."""

from talent_engine.models.agent import (
    ActionPriority,
    ActionType,
    AgentAction,
    AgentDecision,
    AgentState,
    ModuleRecommendation,
    QuizModuleId,
    SourceRecommendation,
)
from talent_engine.models.evidence import (
    ConfidenceProfile,
    ConfidenceSource,
    DimensionConfidence,
    DimensionGap,
    SourceType,
)
from talent_engine.models.profile import (
    ComputedProfile,
    DataInsight,
    ProfileBuilderInput,
    ProfileSnapshot,
    SessionInsight,
    SnapshotTrigger,
    UserConstraints,
    UserSignal,
)
from talent_engine.models.quiz import (
    DimensionScore,
    QuestionType,
    QuizAnswer,
    QuizQuestion,
    QuizScore,
    QuizScoringRequest,
    QuizScoringResponse,
)

__all__ = [
    "ActionPriority",
    "ActionType",
    "AgentAction",
    "AgentDecision",
    "AgentState",
    "ComputedProfile",
    "ConfidenceProfile",
    "ConfidenceSource",
    "DataInsight",
    "DimensionConfidence",
    "DimensionGap",
    "DimensionScore",
    "ModuleRecommendation",
    "ProfileBuilderInput",
    "ProfileSnapshot",
    "QuestionType",
    "QuizAnswer",
    "QuizModuleId",
    "QuizQuestion",
    "QuizScore",
    "QuizScoringRequest",
    "QuizScoringResponse",
    "SessionInsight",
    "SnapshotTrigger",
    "SourceRecommendation",
    "SourceType",
    "UserConstraints",
    "UserSignal",
]

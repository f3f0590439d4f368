"""
Action Orchestrator: recommends what the user should do next.

Behavioral Contract:
- Accepts a read-only AgentState snapshot; never mutates it
- Runs every rule on every call (no short-circuiting) and holds no state
  between calls
- Returns actions sorted critical > high > medium > low; ties keep the
  order in which rules emitted them
- Recommends only; executing an action is the caller's business
"""

import logging
from datetime import datetime
from typing import Callable, Dict, List, Optional, Sequence
from uuid import uuid4

from talent_engine.agent.coverage import (
    ALL_DATA_SOURCES,
    BEHAVIORAL_GAP_DIMENSIONS,
    DIMENSION_SOURCE_AFFINITY,
)
from talent_engine.confidence.gaps import DEFAULT_TARGET_CONFIDENCE, identify_gaps
from talent_engine.models.agent import (
    PRIORITY_ORDER,
    ActionPriority,
    ActionType,
    AgentAction,
    AgentDecision,
    AgentState,
    ModuleRecommendation,
    QuizModuleId,
    SourceRecommendation,
)
from talent_engine.models.evidence import ConfidenceProfile, DimensionGap, SourceType
from talent_engine.psychometrics.stats import round_half_up
from talent_engine.quiz.modules import MODULE_DIMENSION_COVERAGE, available_modules

logger = logging.getLogger(__name__)

REPORT_GENERATION_THRESHOLD = 60
CAREER_MATCH_THRESHOLD = 50
HIGH_CONFIDENCE = 70
LOW_CONFIDENCE = 30

MAX_SOURCE_RECOMMENDATIONS = 2
MAX_PROBE_IMPACT = 30
MAX_RECOMMENDATION_IMPACT = 25

Rule = Callable[[AgentState], List[AgentAction]]


def _gap_value(gap: DimensionGap) -> float:
    return gap.importance * (gap.target_confidence - gap.current_confidence)


def _dimension_list(dimensions: Sequence[str]) -> str:
    listed = ", ".join(dimensions[:3])
    return listed + ("..." if len(dimensions) > 3 else "")


def recommend_next_module(
    gaps: Sequence[DimensionGap],
    candidate_modules: Sequence[QuizModuleId],
) -> Optional[ModuleRecommendation]:
    """
    Pick the module whose covered dimensions carry the most gap value.

    Score = sum of importance * deficit over covered gaps; the first
    candidate wins exact ties.
    """
    if not candidate_modules:
        return None

    best_module = candidate_modules[0]
    best_score = -1.0
    best_dimensions: List[str] = []

    for module in candidate_modules:
        covered = MODULE_DIMENSION_COVERAGE.get(module, ())
        hits = [g for g in gaps if g.dimension in covered]
        score = sum(_gap_value(g) for g in hits)
        logger.debug("Module %s scores %.2f over %d gaps", module.value, score, len(hits))
        if score > best_score:
            best_module = module
            best_score = score
            best_dimensions = [g.dimension for g in hits]

    if best_dimensions:
        reason = (
            f'Module "{best_module.value}" covers {len(best_dimensions)} weak dimensions '
            f"({_dimension_list(best_dimensions)}). Taking this quiz will improve "
            f"confidence in these areas."
        )
    else:
        reason = (
            f'Module "{best_module.value}" hasn\'t been completed yet. '
            f"It will expand your profile coverage."
        )

    return ModuleRecommendation(
        module=best_module,
        reason=reason,
        expected_impact=max(0, min(round_half_up(best_score / 2), MAX_RECOMMENDATION_IMPACT)),
        score=max(best_score, 0.0),
    )


def recommend_data_sources(
    gaps: Sequence[DimensionGap],
    connected_sources: Sequence[str],
) -> List[SourceRecommendation]:
    """Unconnected sources ranked by summed gap value of the dimensions they inform."""
    connected = set(connected_sources)
    totals: Dict[str, float] = {}
    dimensions: Dict[str, List[str]] = {}

    for gap in gaps:
        for source in DIMENSION_SOURCE_AFFINITY.get(gap.dimension, ()):
            if source in connected:
                continue
            totals[source] = totals.get(source, 0.0) + _gap_value(gap)
            dimensions.setdefault(source, []).append(gap.dimension)

    ranked = sorted(totals, key=lambda s: -totals[s])
    return [
        SourceRecommendation(
            source=source,
            reason=(
                f"Connecting {source} would strengthen {len(dimensions[source])} weak "
                f"dimensions ({_dimension_list(dimensions[source])})."
            ),
            expected_impact=max(0, min(round_half_up(totals[source] / 3), MAX_RECOMMENDATION_IMPACT)),
            dimensions=dimensions[source],
            score=totals[source],
        )
        for source in ranked
    ]


def source_has_evidence(profile: ConfidenceProfile, source: str) -> bool:
    for dc in profile.dimensions.values():
        for atom in dc.sources:
            if atom.type != SourceType.DATA_SOURCE:
                continue
            if atom.origin == source or atom.evidence.startswith(source):
                return True
    return False


class ActionOrchestrator:
    """
    Rule-based planner. Each rule looks at the snapshot and may emit
    actions; the combined list is priority-sorted.
    """

    def __init__(self):
        self._rules: List[Rule] = []
        self._register_default_rules()

    def _register_default_rules(self) -> None:
        self._rules = [
            self._rule_connect_first_source,
            self._rule_analyze_connected_sources,
            self._rule_next_quiz_module,
            self._rule_probe_weak_dimensions,
            self._rule_start_session,
            self._rule_generate_report,
            self._rule_refine_report,
            self._rule_additional_sources,
        ]

    def evaluate(self, state: AgentState) -> List[AgentAction]:
        actions: List[AgentAction] = []
        for rule in self._rules:
            actions.extend(rule(state))
        ranked = sort_by_priority(actions)
        logger.info(
            "Evaluated state: %d actions (overall confidence %d, %d gaps)",
            len(ranked), state.overall_confidence, len(state.gaps),
        )
        return ranked

    # --- Rules ---

    def _rule_connect_first_source(self, state: AgentState) -> List[AgentAction]:
        if state.connected_sources:
            return []
        return [AgentAction(
            type=ActionType.REQUEST_ADDITIONAL_DATA,
            priority=ActionPriority.CRITICAL,
            reason=(
                "No data sources connected. Connect at least one data source "
                "to begin building your profile."
            ),
            confidence_impact=25,
            metadata={"suggestedSources": ",".join(ALL_DATA_SOURCES)},
        )]

    def _rule_analyze_connected_sources(self, state: AgentState) -> List[AgentAction]:
        actions = []
        for source in dict.fromkeys(state.connected_sources):
            if source_has_evidence(state.confidence_profile, source):
                continue
            actions.append(AgentAction(
                type=ActionType.ANALYZE_SOURCE,
                priority=ActionPriority.HIGH,
                reason=(
                    f'Connected source "{source}" has not been analyzed yet. Analyzing it '
                    f"will extract career signals and improve dimension confidence."
                ),
                confidence_impact=15,
                metadata={"source": source},
            ))
        return actions

    def _rule_next_quiz_module(self, state: AgentState) -> List[AgentAction]:
        candidates = available_modules(
            state.quiz_completed_modules, state.quiz_in_progress_modules
        )
        recommended = recommend_next_module(state.gaps, candidates)
        if recommended is None:
            return []
        return [AgentAction(
            type=ActionType.RUN_QUIZ_MODULE,
            priority=quiz_priority(state),
            reason=recommended.reason,
            confidence_impact=recommended.expected_impact,
            metadata={"module": recommended.module.value},
        )]

    def _rule_probe_weak_dimensions(self, state: AgentState) -> List[AgentAction]:
        actions = []
        for gap in state.gaps:
            if gap.current_confidence >= LOW_CONFIDENCE or not gap.missing_source_types:
                continue
            missing = ", ".join(t.value for t in gap.missing_source_types)
            actions.append(AgentAction(
                type=ActionType.PROBE_DIMENSION,
                priority=ActionPriority.MEDIUM,
                reason=(
                    f'Dimension "{gap.dimension}" has very low confidence '
                    f"({gap.current_confidence}%). Missing evidence from: {missing}."
                ),
                confidence_impact=max(0, min(gap.deficit, MAX_PROBE_IMPACT)),
                metadata={
                    "dimension": gap.dimension,
                    "currentConfidence": gap.current_confidence,
                },
            ))
        return actions

    def _rule_start_session(self, state: AgentState) -> List[AgentAction]:
        if (
            len(state.quiz_completed_modules) < 2
            or state.session_completed
            or state.session_insights_count > 0
        ):
            return []
        if state.overall_confidence >= CAREER_MATCH_THRESHOLD:
            reason = (
                "You have enough quiz data to benefit from a live session. A session "
                "will strengthen weak dimensions through adaptive conversation."
            )
        else:
            reason = (
                "A live session will help fill confidence gaps that quiz alone cannot "
                "address, especially for behavioral and communication dimensions."
            )
        return [AgentAction(
            type=ActionType.START_SESSION,
            priority=session_priority(state),
            reason=reason,
            confidence_impact=20,
        )]

    def _rule_generate_report(self, state: AgentState) -> List[AgentAction]:
        if state.report_generated:
            return []
        confidence = state.overall_confidence
        if confidence >= REPORT_GENERATION_THRESHOLD:
            return [AgentAction(
                type=ActionType.GENERATE_REPORT,
                priority=ActionPriority.HIGH,
                reason=(
                    f"Overall confidence is {confidence}% (above "
                    f"{REPORT_GENERATION_THRESHOLD}% threshold). Ready to generate "
                    f"your talent report."
                ),
                confidence_impact=0,
            )]
        if confidence >= CAREER_MATCH_THRESHOLD:
            return [AgentAction(
                type=ActionType.GENERATE_REPORT,
                priority=ActionPriority.LOW,
                reason=(
                    f"Overall confidence is {confidence}%, enough for a preliminary "
                    f"report, but additional data would improve career match accuracy. "
                    f"Consider completing more modules or connecting additional "
                    f"sources first."
                ),
                confidence_impact=0,
            )]
        return []

    def _rule_refine_report(self, state: AgentState) -> List[AgentAction]:
        if not state.report_generated or state.overall_confidence < HIGH_CONFIDENCE:
            return []
        return [AgentAction(
            type=ActionType.REFINE_REPORT_SECTION,
            priority=ActionPriority.MEDIUM,
            reason=(
                "New data has been collected since the report was generated. Refining "
                "weak sections with updated evidence would improve accuracy."
            ),
            confidence_impact=5,
        )]

    def _rule_additional_sources(self, state: AgentState) -> List[AgentAction]:
        unconnected = [s for s in ALL_DATA_SOURCES if s not in state.connected_sources]
        if not state.gaps or not unconnected or not state.connected_sources:
            return []
        recommendations = recommend_data_sources(state.gaps, state.connected_sources)
        return [
            AgentAction(
                type=ActionType.REQUEST_ADDITIONAL_DATA,
                priority=ActionPriority.MEDIUM,
                reason=rec.reason,
                confidence_impact=rec.expected_impact,
                metadata={"source": rec.source},
            )
            for rec in recommendations[:MAX_SOURCE_RECOMMENDATIONS]
        ]


def quiz_priority(state: AgentState) -> ActionPriority:
    if not state.quiz_completed_modules:
        return ActionPriority.HIGH
    if state.overall_confidence < LOW_CONFIDENCE:
        return ActionPriority.HIGH
    if state.overall_confidence < CAREER_MATCH_THRESHOLD:
        return ActionPriority.MEDIUM
    return ActionPriority.LOW


def session_priority(state: AgentState) -> ActionPriority:
    behavioral = [g for g in state.gaps if g.dimension in BEHAVIORAL_GAP_DIMENSIONS]
    if len(behavioral) >= 2:
        return ActionPriority.HIGH
    if behavioral:
        return ActionPriority.MEDIUM
    return ActionPriority.LOW


def sort_by_priority(actions: Sequence[AgentAction]) -> List[AgentAction]:
    """Stable sort: equal priorities keep emission order."""
    return sorted(actions, key=lambda a: PRIORITY_ORDER[a.priority])


_default_orchestrator = ActionOrchestrator()


def evaluate_state(state: AgentState) -> List[AgentAction]:
    """Pure State -> [Action] entry point."""
    return _default_orchestrator.evaluate(state)


def build_agent_state(
    confidence_profile: ConfidenceProfile,
    connected_sources: Sequence[str] = (),
    quiz_completed_modules: Sequence[QuizModuleId] = (),
    quiz_in_progress_modules: Sequence[QuizModuleId] = (),
    session_completed: bool = False,
    session_insights_count: int = 0,
    report_generated: bool = False,
    target_confidence: int = DEFAULT_TARGET_CONFIDENCE,
) -> AgentState:
    """Assemble a snapshot whose gaps are derived from the profile itself."""
    return AgentState(
        connected_sources=list(connected_sources),
        quiz_completed_modules=list(quiz_completed_modules),
        quiz_in_progress_modules=list(quiz_in_progress_modules),
        session_completed=session_completed,
        session_insights_count=session_insights_count,
        confidence_profile=confidence_profile,
        gaps=identify_gaps(confidence_profile, target_confidence),
        report_generated=report_generated,
        overall_confidence=confidence_profile.overall_confidence,
    )


def make_decision(
    state: AgentState,
    actions: Sequence[AgentAction],
    now: Optional[datetime] = None,
) -> AgentDecision:
    """Decision-log entry for the top recommendation of an evaluation."""
    if actions:
        top = actions[0]
        action_type = top.type
        reason = f"Evaluated state -> top recommendation: {top.reason}"
    else:
        action_type = ActionType.ANALYZE_SOURCE
        reason = "No actions recommended; profile is complete."
    return AgentDecision(
        id=f"decision_{uuid4().hex[:12]}",
        timestamp=now or datetime.utcnow(),
        action=action_type,
        reason=reason,
        confidence_before=state.overall_confidence,
        confidence_after=state.overall_confidence,
        metadata={"totalActions": len(actions)},
    )

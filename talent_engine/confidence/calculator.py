"""
Dimension Confidence Calculator.

Turns the evidence atoms collected for a dimension into a single 0-100
confidence score, and assembles a full ConfidenceProfile from quiz scores,
session insights and connected-source insights.

Behavioral Contract:
- compute_dimension_confidence() is pure: same atoms (in any order) -> same value
- An empty evidence list yields 0, never an error
- Agreement is measured in absolute points (max - min <= 15)
"""

import logging
import math
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Sequence

from talent_engine.models.evidence import (
    ConfidenceProfile,
    ConfidenceSource,
    DimensionConfidence,
    SourceType,
)
from talent_engine.models.profile import ComputedProfile, DataInsight, SessionInsight
from talent_engine.models.quiz import QuizScore
from talent_engine.psychometrics.dimensions import (
    SESSION_CATEGORY_DIMENSION_WEIGHTS,
    canonical_dimension,
    dimension_importance,
    normalize_session_category,
)
from talent_engine.psychometrics.stats import (
    clamp,
    clamp_score,
    mean,
    normalize_unit_confidence,
    round_half_up,
)

logger = logging.getLogger(__name__)

SOURCE_DIVERSITY_MULTIPLIERS: Dict[int, float] = {
    1: 0.6,
    2: 0.8,
}
MAX_SOURCE_DIVERSITY_MULTIPLIER = 1.0
EVIDENCE_COUNT_DIVISOR = 3
AGREEMENT_BONUS_POINTS = 10
AGREEMENT_RANGE_POINTS = 15

DATA_INSIGHT_SIGNAL_SCORE = 65

# Keyword (substring of a theme/skill/interest) -> dimension
DATA_KEYWORD_DIMENSIONS = (
    ("technical", "Realistic"),
    ("engineering", "Realistic"),
    ("building", "Realistic"),
    ("mechanical", "Realistic"),
    ("research", "Investigative"),
    ("analysis", "Investigative"),
    ("data", "Investigative"),
    ("science", "Investigative"),
    ("design", "Artistic"),
    ("creative", "Artistic"),
    ("writing", "Artistic"),
    ("art", "Artistic"),
    ("music", "Artistic"),
    ("teaching", "Social"),
    ("mentoring", "Social"),
    ("counseling", "Social"),
    ("helping", "Social"),
    ("leadership", "Enterprising"),
    ("management", "Enterprising"),
    ("sales", "Enterprising"),
    ("business", "Enterprising"),
    ("organizing", "Conventional"),
    ("planning", "Conventional"),
    ("accounting", "Conventional"),
    ("administrative", "Conventional"),
    ("communication", "communication"),
    ("presenting", "communication"),
    ("coding", "technical_aptitude"),
    ("programming", "technical_aptitude"),
    ("software", "technical_aptitude"),
    ("problem", "problem_solving"),
    ("debugging", "problem_solving"),
    ("team", "teamwork"),
    ("collaboration", "teamwork"),
)


def diversity_multiplier(type_count: int) -> float:
    return SOURCE_DIVERSITY_MULTIPLIERS.get(type_count, MAX_SOURCE_DIVERSITY_MULTIPLIER)


def compute_dimension_confidence(
    dimension: str, sources: Sequence[ConfidenceSource]
) -> int:
    """
    Confidence for one dimension from its evidence atoms.

    base * diversity * min(count/3, 1) + agreement bonus, clamped to
    [0, 100] and rounded. `dimension` is accepted for symmetry with the
    evidence log; atoms are not filtered by it.
    """
    if not sources:
        return 0

    scores = sorted(s.score for s in sources)
    base_score = mean(scores)

    type_count = len({s.type for s in sources})
    evidence_factor = min(len(scores) / EVIDENCE_COUNT_DIVISOR, 1.0)

    agreement_bonus = 0
    if len(scores) > 1 and (scores[-1] - scores[0]) <= AGREEMENT_RANGE_POINTS:
        agreement_bonus = AGREEMENT_BONUS_POINTS

    raw = base_score * diversity_multiplier(type_count) * evidence_factor + agreement_bonus
    return clamp_score(raw)


def build_dimension_confidence(
    dimension: str, sources: Sequence[ConfidenceSource]
) -> DimensionConfidence:
    present = {s.type for s in sources}
    return DimensionConfidence(
        dimension=dimension,
        confidence=compute_dimension_confidence(dimension, sources),
        source_count=len(sources),
        source_types=[t for t in SourceType if t in present],
        sources=list(sources),
    )


def overall_confidence(dimensions: Iterable[DimensionConfidence]) -> int:
    """Importance-weighted mean of dimension confidences; 0 when empty."""
    pairs = sorted(
        (dimension_importance(d.dimension), d.confidence) for d in dimensions
    )
    total_weight = math.fsum(w for w, _ in pairs)
    if total_weight <= 0:
        return 0
    return round_half_up(math.fsum(w * c for w, c in pairs) / total_weight)


def profile_from_sources(
    sources_by_dimension: Dict[str, List[ConfidenceSource]],
    now: Optional[datetime] = None,
) -> ConfidenceProfile:
    dimensions = {
        dim: build_dimension_confidence(dim, sources)
        for dim, sources in sources_by_dimension.items()
        if sources
    }
    return ConfidenceProfile(
        dimensions=dimensions,
        overall_confidence=overall_confidence(dimensions.values()),
        last_updated=now or datetime.utcnow(),
    )


def compute_profile_confidence(
    profile: Optional[ComputedProfile],
    data_insights: Sequence[DataInsight],
    quiz_scores: Sequence[QuizScore],
    session_insights: Sequence[SessionInsight],
    now: Optional[datetime] = None,
) -> ConfidenceProfile:
    """
    Build a ConfidenceProfile from every kind of assessment evidence.

    Computed-profile scores only fill dimensions with no other evidence.
    """
    now = now or datetime.utcnow()
    by_dimension: Dict[str, List[ConfidenceSource]] = {}

    def add(dimension: str, type_: SourceType, score: float, evidence: str,
            timestamp: datetime, origin: Optional[str] = None) -> None:
        dim = canonical_dimension(dimension)
        by_dimension.setdefault(dim, []).append(ConfidenceSource(
            type=type_,
            dimension=dim,
            score=clamp(score),
            evidence=evidence,
            timestamp=timestamp,
            origin=origin,
        ))

    for qs in quiz_scores:
        for ds in qs.dimension_scores:
            add(ds.dimension, SourceType.QUIZ, ds.score, ds.rationale, now)

    for insight in session_insights:
        category = normalize_session_category(insight.category)
        if category is None:
            logger.warning("Ignoring session insight with unknown category %r", insight.category)
            continue
        score = normalize_unit_confidence(insight.confidence) * 100
        for dim in SESSION_CATEGORY_DIMENSION_WEIGHTS[category]:
            add(dim, SourceType.SESSION, score, insight.observation, insight.timestamp or now)

    for insight in data_insights:
        for dim, term in extract_dimension_signals(insight):
            add(
                dim,
                SourceType.DATA_SOURCE,
                DATA_INSIGHT_SIGNAL_SCORE,
                f'{insight.source}: "{term}"',
                now,
                origin=insight.source,
            )

    if profile is not None:
        for dim, score in sorted(profile.dimension_scores.items()):
            if not by_dimension.get(canonical_dimension(dim)):
                add(dim, SourceType.QUIZ, score, "Computed profile score", now)

    return profile_from_sources(by_dimension, now)


def extract_dimension_signals(insight: DataInsight) -> List[tuple]:
    """(dimension, matched term) pairs; first matching term wins per dimension."""
    matched: Dict[str, str] = {}
    for term in [*insight.themes, *insight.skills, *insight.interests]:
        lower = term.lower()
        for keyword, dimension in DATA_KEYWORD_DIMENSIONS:
            if keyword in lower and dimension not in matched:
                matched[dimension] = term
    return list(matched.items())

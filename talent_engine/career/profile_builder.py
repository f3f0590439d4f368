"""
Profile Builder: merges quiz scores, talent signals and session insights
into calibrated dimension scores and a RIASEC code.

Pipeline:
  normalize quiz scores (winsorized per canonical dimension)
  → additive signal / session boosts
  → RIASEC z-score calibration (0.7 raw + 0.3 normalized)
  → top-3 code, ties broken by declaration order
  → per-dimension confidence from evidence coverage

Pure and deterministic; boosts are summed per dimension with math.fsum so
the order of signals and insights never matters.
"""

import logging
import math
from typing import Dict, List, Mapping, Optional, Sequence, Union

from talent_engine.models.profile import (
    ComputedProfile,
    ProfileBuilderInput,
    SessionInsight,
    UserConstraints,
    UserSignal,
)
from talent_engine.psychometrics.dimensions import (
    BEHAVIORAL_FACTORS,
    RIASEC_DIMENSIONS,
    RIASEC_LETTERS,
    SESSION_CATEGORY_DIMENSION_WEIGHTS,
    canonical_dimension,
    normalize_session_category,
)
from talent_engine.psychometrics.stats import (
    clamp,
    clamp_score,
    mean,
    normalize_unit_confidence,
    population_std,
    round_half_up,
    winsorized_mean,
    z_to_score,
)

logger = logging.getLogger(__name__)

SIGNAL_BOOST_SCALE = 10
SESSION_BEHAVIORAL_SCALE = 100
SESSION_RIASEC_SCALE = 12

CALIBRATION_RAW_WEIGHT = 0.7
CALIBRATION_NORMALIZED_WEIGHT = 0.3

CONFIDENCE_BASELINE = 15
QUIZ_PRESENT_BONUS = 45
SUPPORT_POINTS_PER_ITEM = 5
SUPPORT_POINTS_CAP = 15
BROAD_COVERAGE_DIMENSIONS = 8
BROAD_COVERAGE_BONUS = 10
SUPPLIED_CONFIDENCE_WEIGHT = 0.4

RawScores = Mapping[str, Union[float, Sequence[float]]]


def normalize_quiz_scores(raw_scores: RawScores) -> Dict[str, int]:
    """Group raw labels under canonical names, winsorize, average, round."""
    grouped: Dict[str, List[float]] = {}
    for raw_dim, value in raw_scores.items():
        values = [value] if isinstance(value, (int, float)) else list(value)
        grouped.setdefault(canonical_dimension(raw_dim), []).extend(float(v) for v in values)

    return {
        dim: round_half_up(winsorized_mean(values))
        for dim, values in sorted(grouped.items())
        if values
    }


def session_scale(dimension: str) -> int:
    if dimension in BEHAVIORAL_FACTORS:
        return SESSION_BEHAVIORAL_SCALE
    return SESSION_RIASEC_SCALE


def calibrate_riasec(scores: Mapping[str, float]) -> Dict[str, float]:
    """
    Blend each RIASEC score with its z-score mapped onto 50 ± 15.

    Compresses outliers while keeping rank order; a flat profile maps
    every dimension to the same value.
    """
    raw = [scores.get(dim, 0.0) for dim in RIASEC_DIMENSIONS]
    mu = mean(raw)
    sd = population_std(raw)

    calibrated: Dict[str, float] = {}
    for dim, value in zip(RIASEC_DIMENSIONS, raw):
        z = (value - mu) / sd if sd > 0 else 0.0
        normalized = z_to_score(z)
        calibrated[dim] = clamp(
            CALIBRATION_RAW_WEIGHT * value + CALIBRATION_NORMALIZED_WEIGHT * normalized
        )
        logger.debug("RIASEC %s raw=%.2f z=%.3f calibrated=%.2f", dim, value, z, calibrated[dim])
    return calibrated


def compute_riasec_code(dimension_scores: Mapping[str, float]) -> str:
    """Top three RIASEC letters, highest first; ties keep declaration order."""
    ranked = sorted(
        RIASEC_DIMENSIONS,
        key=lambda dim: -dimension_scores.get(dim, 0),
    )
    return "".join(RIASEC_LETTERS[dim] for dim in ranked[:3])


def _collect_boosts(
    signals: Sequence[UserSignal],
    session_insights: Sequence[SessionInsight],
):
    boosts: Dict[str, List[float]] = {}
    signal_support: Dict[str, int] = {}
    session_support: Dict[str, int] = {}

    for signal in signals:
        confidence = normalize_unit_confidence(signal.confidence)
        for dim in dict.fromkeys(canonical_dimension(d) for d in signal.dimensions):
            boosts.setdefault(dim, []).append(confidence * SIGNAL_BOOST_SCALE)
            signal_support[dim] = signal_support.get(dim, 0) + 1

    for insight in session_insights:
        category = normalize_session_category(insight.category)
        if category is None:
            logger.warning("Skipping session insight with unknown category %r", insight.category)
            continue
        confidence = normalize_unit_confidence(insight.confidence)
        for dim, weight in SESSION_CATEGORY_DIMENSION_WEIGHTS[category].items():
            boosts.setdefault(dim, []).append(confidence * weight * session_scale(dim))
            session_support[dim] = session_support.get(dim, 0) + 1

    return boosts, signal_support, session_support


def _confidence_for(
    dim: str,
    quiz_scores: Mapping[str, int],
    signal_support: Mapping[str, int],
    session_support: Mapping[str, int],
    supplied: Mapping[str, float],
) -> int:
    baseline = CONFIDENCE_BASELINE
    if dim in quiz_scores:
        baseline += QUIZ_PRESENT_BONUS
    baseline += min(SUPPORT_POINTS_CAP, signal_support.get(dim, 0) * SUPPORT_POINTS_PER_ITEM)
    baseline += min(SUPPORT_POINTS_CAP, session_support.get(dim, 0) * SUPPORT_POINTS_PER_ITEM)
    if len(quiz_scores) >= BROAD_COVERAGE_DIMENSIONS:
        baseline += BROAD_COVERAGE_BONUS

    if dim in supplied:
        blended = (
            (1 - SUPPLIED_CONFIDENCE_WEIGHT) * baseline
            + SUPPLIED_CONFIDENCE_WEIGHT * clamp(supplied[dim])
        )
        return clamp_score(blended)
    return clamp_score(baseline)


def build_computed_profile(
    quiz_dimension_scores: RawScores,
    signals: Optional[Sequence[UserSignal]] = None,
    session_insights: Optional[Sequence[SessionInsight]] = None,
    constraints: Optional[UserConstraints] = None,
    dimension_confidence: Optional[Mapping[str, float]] = None,
) -> ComputedProfile:
    """Build a ComputedProfile. Identical inputs always give the identical code."""
    quiz_scores = normalize_quiz_scores(quiz_dimension_scores)
    boosts, signal_support, session_support = _collect_boosts(
        signals or [], session_insights or []
    )

    scores: Dict[str, float] = {dim: 0.0 for dim in RIASEC_DIMENSIONS}
    scores.update((dim, float(v)) for dim, v in quiz_scores.items())
    for dim, values in sorted(boosts.items()):
        scores[dim] = clamp(scores.get(dim, 0.0) + math.fsum(values))

    scores.update(calibrate_riasec(scores))
    # Ranked on unrounded calibrated values; rounding can manufacture ties
    riasec_code = compute_riasec_code(scores)

    ordered_dims = list(RIASEC_DIMENSIONS) + sorted(
        d for d in scores if d not in RIASEC_DIMENSIONS
    )
    dimension_scores = {dim: clamp_score(scores[dim]) for dim in ordered_dims}

    supplied = {
        canonical_dimension(dim): value
        for dim, value in sorted((dimension_confidence or {}).items())
    }
    confidence_scores = {
        dim: _confidence_for(dim, quiz_scores, signal_support, session_support, supplied)
        for dim in ordered_dims
    }

    return ComputedProfile(
        riasec_code=riasec_code,
        dimension_scores=dimension_scores,
        confidence_scores=confidence_scores,
        constraints=constraints,
    )


def build_from_input(data: ProfileBuilderInput) -> ComputedProfile:
    return build_computed_profile(
        quiz_dimension_scores=data.quiz_dimension_scores,
        signals=data.signals,
        session_insights=data.session_insights,
        constraints=data.constraints,
        dimension_confidence=data.dimension_confidence,
    )

"""
Profile Evolution: applies small, bounded adjustments to an existing
profile as new evidence (reflections, challenges) arrives, and emits a
snapshot for the profile timeline.
"""

from datetime import datetime
from typing import Dict, Mapping, NamedTuple, Optional, Sequence

from talent_engine.career.profile_builder import compute_riasec_code
from talent_engine.models.profile import ComputedProfile, ProfileSnapshot, SnapshotTrigger
from talent_engine.psychometrics.stats import clamp, clamp_score, round_half_up

MAX_ADJUSTMENT_PER_DIM = 5
MAX_DRIFT_PER_DIM = 30
DEFAULT_SCORE = 50
DEFAULT_CONFIDENCE = 20
SIGNAL_MENTION_CONFIDENCE = 3


class EvolveResult(NamedTuple):
    updated_profile: ComputedProfile
    snapshot: ProfileSnapshot
    deltas: Dict[str, int]


def evolve_profile(
    current: ComputedProfile,
    new_signals: Sequence[str],
    adjustments: Mapping[str, float],
    trigger: SnapshotTrigger,
    version: int,
    now: Optional[datetime] = None,
) -> EvolveResult:
    scores = dict(current.dimension_scores)
    confidences = dict(current.confidence_scores)
    deltas: Dict[str, int] = {}

    for dim, raw in sorted(adjustments.items()):
        step = clamp(raw, -MAX_ADJUSTMENT_PER_DIM, MAX_ADJUSTMENT_PER_DIM)
        before = scores.get(dim, DEFAULT_SCORE)
        original = current.dimension_scores.get(dim, DEFAULT_SCORE)

        lower = max(0, original - MAX_DRIFT_PER_DIM)
        upper = min(100, original + MAX_DRIFT_PER_DIM)
        after = round_half_up(clamp(before + step, lower, upper))

        if after != before:
            deltas[dim] = after - before
        scores[dim] = after
        confidences[dim] = clamp_score(
            confidences.get(dim, DEFAULT_CONFIDENCE) + abs(step) * 2
        )

    for signal in new_signals:
        text = signal.lower()
        for dim in scores:
            if dim.lower() in text:
                confidences[dim] = clamp_score(
                    confidences.get(dim, DEFAULT_CONFIDENCE) + SIGNAL_MENTION_CONFIDENCE
                )

    updated = ComputedProfile(
        riasec_code=compute_riasec_code(scores),
        dimension_scores=scores,
        confidence_scores=confidences,
        constraints=current.constraints,
    )
    snapshot = ProfileSnapshot(
        version=version,
        timestamp=now or datetime.utcnow(),
        computed_profile=updated,
        dimension_scores=scores,
        riasec_code=updated.riasec_code,
        trigger=trigger,
        deltas=deltas or None,
    )
    return EvolveResult(updated, snapshot, deltas)

"""
Evaluation metrics for profile-builder quality.

All metrics are pure and return a value in [0, 1].
"""

import logging
import math
from typing import List, Sequence

from pydantic import BaseModel

from talent_engine.career.profile_builder import build_from_input
from talent_engine.models.profile import ProfileBuilderInput

logger = logging.getLogger(__name__)

POSITION_WEIGHTS = (3, 2, 1)
DEFAULT_STABILITY_RUNS = 5


class StabilityReport(BaseModel):
    runs: int
    codes: List[str]
    stability: float

    @property
    def stable(self) -> bool:
        return self.stability == 1.0


def riasec_accuracy(computed: str, expected: str) -> float:
    """
    Position-weighted agreement between two RIASEC codes.

    A letter in the right position earns its full weight (3, 2, 1); a
    letter present elsewhere in the code earns half.
    """
    if not computed or not expected:
        return 0.0

    score = 0.0
    max_score = 0
    for i, letter in enumerate(expected[:3]):
        weight = POSITION_WEIGHTS[i]
        max_score += weight
        idx = computed.find(letter)
        if idx == i:
            score += weight
        elif idx != -1:
            score += weight * 0.5
    return score / max_score if max_score else 0.0


def stability_score(codes: Sequence[str]) -> float:
    """Mean pairwise riasec_accuracy; 1.0 for a single run."""
    if len(codes) <= 1:
        return 1.0
    pairs = [
        riasec_accuracy(codes[i], codes[j])
        for i in range(len(codes))
        for j in range(i + 1, len(codes))
    ]
    return math.fsum(pairs) / len(pairs)


def recommendation_overlap(computed: Sequence[str], expected: Sequence[str]) -> float:
    """Case-insensitive Jaccard similarity; two empty lists agree fully."""
    if not computed and not expected:
        return 1.0
    if not computed or not expected:
        return 0.0

    a = {s.lower() for s in computed}
    b = {s.lower() for s in expected}
    return len(a & b) / len(a | b)


def run_stability_benchmark(inputs: ProfileBuilderInput, runs: int = DEFAULT_STABILITY_RUNS) -> StabilityReport:
    codes = [build_from_input(inputs).riasec_code for _ in range(runs)]
    report = StabilityReport(runs=runs, codes=codes, stability=stability_score(codes))
    if not report.stable:
        logger.warning("RIASEC code unstable across %d runs: %s", runs, codes)
    return report

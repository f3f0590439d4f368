"""Gap Identifier: ranks under-evidenced dimensions for remediation."""

from typing import List

from talent_engine.models.evidence import (
    ALL_SOURCE_TYPES,
    ConfidenceProfile,
    DimensionGap,
)
from talent_engine.psychometrics.dimensions import dimension_importance

DEFAULT_TARGET_CONFIDENCE = 60


def identify_gaps(
    confidence_profile: ConfidenceProfile,
    target_confidence: int = DEFAULT_TARGET_CONFIDENCE,
) -> List[DimensionGap]:
    """
    Every dimension strictly below target, most important first, then
    weakest first. Consumers usually only read the head of this list.
    """
    gaps: List[DimensionGap] = []
    for dimension, dc in sorted(confidence_profile.dimensions.items()):
        if dc.confidence >= target_confidence:
            continue
        present = set(dc.source_types) | {s.type for s in dc.sources}
        gaps.append(DimensionGap(
            dimension=dimension,
            current_confidence=dc.confidence,
            target_confidence=target_confidence,
            missing_source_types=[t for t in ALL_SOURCE_TYPES if t not in present],
            importance=dimension_importance(dimension),
        ))

    gaps.sort(key=lambda g: (-g.importance, g.current_confidence))
    return gaps

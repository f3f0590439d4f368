"""Tests for the Gap Identifier."""

from datetime import datetime
from typing import Dict, List, Tuple

from talent_engine.confidence.gaps import DEFAULT_TARGET_CONFIDENCE, identify_gaps
from talent_engine.models.evidence import (
    ConfidenceProfile,
    ConfidenceSource,
    DimensionConfidence,
    SourceType,
)

NOW = datetime(2026, 3, 1, 12, 0, 0)


def _make_profile(dims: Dict[str, Tuple[int, List[SourceType]]]) -> ConfidenceProfile:
    """Profile with hand-set confidences, one atom per listed source type."""
    dimensions = {}
    for name, (confidence, types) in dims.items():
        dimensions[name] = DimensionConfidence(
            dimension=name,
            confidence=confidence,
            source_count=len(types),
            source_types=types,
            sources=[
                ConfidenceSource(type=t, dimension=name, score=50, timestamp=NOW)
                for t in types
            ],
        )
    return ConfidenceProfile(dimensions=dimensions, overall_confidence=0, last_updated=NOW)


class TestIdentifyGaps:
    def test_importance_dominates_confidence(self):
        # Realistic: importance 0.8; adaptability: importance 0.5
        profile = _make_profile({
            "adaptability": (5, [SourceType.QUIZ]),
            "Realistic": (20, [SourceType.QUIZ]),
        })
        gaps = identify_gaps(profile)
        assert [g.dimension for g in gaps] == ["Realistic", "adaptability"]
        assert gaps[0].importance == 0.8
        assert gaps[1].importance == 0.5

    def test_weakest_first_within_equal_importance(self):
        profile = _make_profile({
            "Social": (40, [SourceType.QUIZ]),
            "Artistic": (10, [SourceType.QUIZ]),
            "Investigative": (25, [SourceType.QUIZ]),
        })
        gaps = identify_gaps(profile)
        assert [g.dimension for g in gaps] == ["Artistic", "Investigative", "Social"]

    def test_full_ties_fall_back_to_name(self):
        profile = _make_profile({
            "Social": (30, [SourceType.QUIZ]),
            "Artistic": (30, [SourceType.QUIZ]),
        })
        assert [g.dimension for g in identify_gaps(profile)] == ["Artistic", "Social"]

    def test_strictly_below_target(self):
        profile = _make_profile({
            "Realistic": (DEFAULT_TARGET_CONFIDENCE, [SourceType.QUIZ]),
            "Social": (DEFAULT_TARGET_CONFIDENCE - 1, [SourceType.QUIZ]),
        })
        gaps = identify_gaps(profile)
        assert [g.dimension for g in gaps] == ["Social"]
        assert gaps[0].target_confidence == DEFAULT_TARGET_CONFIDENCE
        assert gaps[0].deficit == 1

    def test_custom_target(self):
        profile = _make_profile({"Realistic": (65, [SourceType.QUIZ])})
        assert identify_gaps(profile, 60) == []
        assert len(identify_gaps(profile, 80)) == 1

    def test_missing_source_types(self):
        profile = _make_profile({
            "communication": (30, [SourceType.SESSION]),
            "teamwork": (10, []),
        })
        gaps = {g.dimension: g for g in identify_gaps(profile)}
        assert gaps["communication"].missing_source_types == [
            SourceType.QUIZ, SourceType.DATA_SOURCE,
        ]
        assert gaps["teamwork"].missing_source_types == list(SourceType)

    def test_unlisted_dimension_uses_default_importance(self):
        profile = _make_profile({"Risk_Tolerance": (10, [SourceType.QUIZ])})
        assert identify_gaps(profile)[0].importance == 0.5

    def test_empty_profile_has_no_gaps(self):
        assert identify_gaps(_make_profile({})) == []

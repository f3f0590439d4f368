"""
Dimension catalogue: the canonical psychometric and vocational axes.

Every component that groups evidence by dimension goes through
normalize_dimension_name() first, so "realistic", "Realistic " and
"REALISTIC" all land in the same bucket. The weight tables here are plain
immutable mappings; nothing dispatches on dimension type.
"""

import re
from types import MappingProxyType
from typing import Dict, Mapping, Optional

RIASEC_DIMENSIONS = (
    "Realistic",
    "Investigative",
    "Artistic",
    "Social",
    "Enterprising",
    "Conventional",
)

RIASEC_LETTERS: Mapping[str, str] = MappingProxyType({
    "Realistic": "R",
    "Investigative": "I",
    "Artistic": "A",
    "Social": "S",
    "Enterprising": "E",
    "Conventional": "C",
})

SKILL_DIMENSIONS = (
    "analytical_thinking",
    "creative_thinking",
    "communication",
    "leadership",
    "teamwork",
    "problem_solving",
    "adaptability",
    "emotional_intelligence",
    "technical_aptitude",
    "work_values",
)

WORK_VALUE_DIMENSIONS = (
    "Autonomy",
    "Stability",
    "Helping_Others",
    "Achievement",
    "Variety",
    "Recognition",
)

LEARNING_ENVIRONMENT_DIMENSIONS = (
    "Learning_Style",
    "Environment_Preference",
    "Risk_Tolerance",
)

CONSTRAINT_DIMENSIONS = (
    "Location",
    "Salary",
    "Time",
    "Education",
    "Relocation",
)

# Observed directly in a live session rather than inferred from answers
BEHAVIORAL_FACTORS = (
    "engagement",
    "hesitation",
    "emotional_intensity",
    "clarity_structure",
    "collaboration_orientation",
)

ALL_DIMENSIONS = (
    RIASEC_DIMENSIONS
    + SKILL_DIMENSIONS
    + WORK_VALUE_DIMENSIONS
    + LEARNING_ENVIRONMENT_DIMENSIONS
    + CONSTRAINT_DIMENSIONS
    + BEHAVIORAL_FACTORS
)

SESSION_INSIGHT_CATEGORIES = (
    "engagement",
    "hesitation",
    "emotional_intensity",
    "clarity_structure",
    "collaboration_orientation",
    "body_language",
    "voice_tone",
    "enthusiasm",
    "analytical",
    "creative",
    "interpersonal",
)

# How critical each dimension is for career recommendations
DIMENSION_IMPORTANCE: Mapping[str, float] = MappingProxyType({
    "Realistic": 0.8,
    "Investigative": 0.8,
    "Artistic": 0.8,
    "Social": 0.8,
    "Enterprising": 0.8,
    "Conventional": 0.8,
    "analytical_thinking": 0.7,
    "creative_thinking": 0.7,
    "communication": 0.7,
    "leadership": 0.6,
    "teamwork": 0.6,
    "problem_solving": 0.7,
    "adaptability": 0.5,
    "emotional_intelligence": 0.5,
    "technical_aptitude": 0.7,
    "work_values": 0.6,
})
DEFAULT_IMPORTANCE = 0.5

SESSION_CATEGORY_DIMENSION_WEIGHTS: Mapping[str, Mapping[str, float]] = MappingProxyType({
    "engagement": MappingProxyType({
        "engagement": 0.75,
        "Enterprising": 0.35,
        "Social": 0.3,
    }),
    "hesitation": MappingProxyType({
        "hesitation": 0.9,
        "adaptability": 0.3,
        "emotional_intelligence": 0.2,
    }),
    "emotional_intensity": MappingProxyType({
        "emotional_intensity": 0.6,
        "emotional_intelligence": 0.35,
        "Artistic": 0.2,
    }),
    "clarity_structure": MappingProxyType({
        "clarity_structure": 0.5,
        "analytical_thinking": 0.6,
        "Conventional": 0.35,
    }),
    "collaboration_orientation": MappingProxyType({
        "collaboration_orientation": 0.6,
        "teamwork": 0.55,
        "Social": 0.4,
    }),
    "body_language": MappingProxyType({
        "engagement": 0.5,
        "communication": 0.4,
        "emotional_intelligence": 0.3,
    }),
    "voice_tone": MappingProxyType({
        "emotional_intensity": 0.4,
        "communication": 0.5,
        "leadership": 0.3,
    }),
    "enthusiasm": MappingProxyType({
        "engagement": 0.7,
        "Enterprising": 0.3,
        "creative_thinking": 0.25,
    }),
    "analytical": MappingProxyType({
        "clarity_structure": 0.5,
        "analytical_thinking": 0.7,
        "Investigative": 0.45,
    }),
    "creative": MappingProxyType({
        "creative_thinking": 0.75,
        "Artistic": 0.5,
    }),
    "interpersonal": MappingProxyType({
        "collaboration_orientation": 0.55,
        "teamwork": 0.5,
        "Social": 0.5,
    }),
})


def _alias_key(raw: str) -> str:
    return re.sub(r"[\s\-]+", "_", raw.strip().lower())


def _build_alias_lookup() -> Dict[str, str]:
    lookup: Dict[str, str] = {}
    for dim in ALL_DIMENSIONS:
        key = _alias_key(dim)
        lookup[key] = dim
        lookup[key.replace("_", "")] = dim
    # Legacy labels from older quiz banks
    lookup["helpingotherssocialimpact"] = "Helping_Others"
    lookup["analytical_ability"] = "analytical_thinking"
    lookup["analyticalability"] = "analytical_thinking"
    lookup["interpersonal_skills"] = "communication"
    lookup["interpersonalskills"] = "communication"
    lookup["technical_skills"] = "technical_aptitude"
    return lookup


_ALIAS_LOOKUP: Mapping[str, str] = MappingProxyType(_build_alias_lookup())

_CATEGORY_ALIASES: Mapping[str, str] = MappingProxyType({
    "bodylanguage": "body_language",
    "voicetone": "voice_tone",
    "emotionalintensity": "emotional_intensity",
    "claritystructure": "clarity_structure",
    "collaborationorientation": "collaboration_orientation",
})


def normalize_dimension_name(raw: str) -> Optional[str]:
    """Map a raw dimension label to its canonical name, or None if unknown."""
    return _ALIAS_LOOKUP.get(_alias_key(raw))


def canonical_dimension(raw: str) -> str:
    """Canonical name when known, otherwise the trimmed raw label."""
    return normalize_dimension_name(raw) or raw.strip()


def normalize_session_category(raw: str) -> Optional[str]:
    key = _alias_key(raw)
    if key in SESSION_CATEGORY_DIMENSION_WEIGHTS:
        return key
    return _CATEGORY_ALIASES.get(key.replace("_", ""))


def dimension_importance(dimension: str) -> float:
    return DIMENSION_IMPORTANCE.get(dimension, DEFAULT_IMPORTANCE)

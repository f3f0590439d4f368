"""Static lookup tables used by the action orchestrator."""

from types import MappingProxyType
from typing import Mapping, Tuple

ALL_DATA_SOURCES: Tuple[str, ...] = ("gmail", "drive", "notion", "chatgpt", "file_upload")

# Dimensions a live session measures better than a quiz does
BEHAVIORAL_GAP_DIMENSIONS: Tuple[str, ...] = (
    "communication",
    "emotional_intelligence",
    "teamwork",
    "leadership",
)

# Dimension -> data sources most likely to carry evidence for it
DIMENSION_SOURCE_AFFINITY: Mapping[str, Tuple[str, ...]] = MappingProxyType({
    "communication": ("gmail", "notion"),
    "Social": ("gmail", "notion"),
    "Investigative": ("drive", "chatgpt"),
    "analytical_thinking": ("drive", "chatgpt"),
    "technical_aptitude": ("drive", "file_upload"),
    "Realistic": ("drive", "file_upload"),
    "Artistic": ("drive", "notion"),
    "creative_thinking": ("notion", "drive"),
    "Enterprising": ("gmail", "drive"),
    "leadership": ("gmail", "drive"),
    "Conventional": ("drive", "gmail"),
    "teamwork": ("gmail", "notion"),
    "problem_solving": ("chatgpt", "drive"),
    "work_values": ("gmail", "chatgpt"),
    "adaptability": ("chatgpt", "notion"),
    "emotional_intelligence": ("gmail", "chatgpt"),
})

"""
Session Summarizer: collapses the raw artifacts of one live session into
de-duplicated insights and signals before they become evidence.

Behavioral Contract:
- Insights with the same category and normalized observation merge into one;
  confidence is the mean of the merged (0-1 normalized) confidences
- Signals with the same normalized text merge; their dimensions are unioned
- Signal dimensions are canonicalized and widened with dimensions inferred
  from the signal text and from matching insight categories
- Output is ordered by timestamp (latest timestamp of each merged group)
- Deterministic: no ids or clocks are drawn at call time
"""

import logging
import re
from datetime import datetime
from typing import Dict, List, NamedTuple, Optional, Sequence

from talent_engine.models.profile import SessionInsight, UserSignal
from talent_engine.psychometrics.dimensions import (
    SESSION_CATEGORY_DIMENSION_WEIGHTS,
    normalize_dimension_name,
    normalize_session_category,
)
from talent_engine.psychometrics.stats import mean, normalize_unit_confidence

logger = logging.getLogger(__name__)

SUMMARY_SOURCE = "live_session_summary"
MAX_INSIGHT_EVIDENCE_CHARS = 400
MAX_SIGNAL_EVIDENCE_CHARS = 500
INFERENCE_WEIGHT_THRESHOLD = 0.5


class SessionSummary(NamedTuple):
    insights: List[SessionInsight]
    signals: List[UserSignal]


class _Group:
    def __init__(self, first, evidence: str):
        self.first = first
        self.evidence = evidence
        self.confidences: List[float] = []
        self.timestamp: Optional[datetime] = None
        self.dimensions: Dict[str, None] = {}

    def add(self, confidence: float, timestamp: Optional[datetime], evidence: str, limit: int) -> None:
        self.confidences.append(normalize_unit_confidence(confidence))
        if timestamp is not None and (self.timestamp is None or timestamp > self.timestamp):
            self.timestamp = timestamp
        if evidence and evidence not in self.evidence:
            merged = f"{self.evidence}; {evidence}" if self.evidence else evidence
            self.evidence = merged[:limit]


def normalize_text(text: str) -> str:
    return re.sub(r"[^a-z0-9]+", " ", text.strip().lower()).strip()


def _by_timestamp(item) -> datetime:
    return item.timestamp or datetime.min


def summarize_insights(insights: Sequence[SessionInsight]) -> List[SessionInsight]:
    groups: Dict[str, _Group] = {}
    for insight in insights:
        key = f"{insight.category}:{normalize_text(insight.observation)}"
        group = groups.get(key)
        if group is None:
            group = groups[key] = _Group(insight, "")
        group.add(insight.confidence, insight.timestamp, insight.evidence, MAX_INSIGHT_EVIDENCE_CHARS)

    summarized = [
        SessionInsight(
            timestamp=group.timestamp,
            category=group.first.category,
            observation=group.first.observation,
            confidence=mean(group.confidences),
            evidence=group.evidence,
        )
        for group in groups.values()
    ]
    if len(summarized) < len(insights):
        logger.debug("Merged %d session insights into %d", len(insights), len(summarized))
    return sorted(summarized, key=_by_timestamp)


def infer_dimensions(text: str, insights: Sequence[SessionInsight]) -> List[str]:
    """Dimensions named in the text, plus strong dimensions of insight categories it mentions."""
    lower = text.lower()
    inferred: Dict[str, None] = {}

    for token in re.split(r"[^a-z0-9_]+", lower):
        dim = normalize_dimension_name(token) if token else None
        if dim:
            inferred[dim] = None

    for insight in insights:
        if insight.category.replace("_", " ") not in lower:
            continue
        category = normalize_session_category(insight.category)
        if category is None:
            continue
        for dim, weight in SESSION_CATEGORY_DIMENSION_WEIGHTS[category].items():
            if weight >= INFERENCE_WEIGHT_THRESHOLD:
                inferred[dim] = None

    return list(inferred)


def summarize_signals(
    signals: Sequence[UserSignal], insights: Sequence[SessionInsight]
) -> List[UserSignal]:
    groups: Dict[str, _Group] = {}
    for signal in signals:
        key = normalize_text(signal.signal)
        group = groups.get(key)
        if group is None:
            group = groups[key] = _Group(signal, "")
        group.add(signal.confidence, signal.timestamp, signal.evidence, MAX_SIGNAL_EVIDENCE_CHARS)
        for raw in signal.dimensions:
            dim = normalize_dimension_name(raw)
            if dim:
                group.dimensions[dim] = None

    summarized = []
    for index, group in enumerate(groups.values()):
        for dim in infer_dimensions(f"{group.first.signal} {group.evidence}", insights):
            group.dimensions[dim] = None
        stamp = group.timestamp.strftime("%Y%m%dT%H%M%S") if group.timestamp else "0"
        summarized.append(UserSignal(
            id=f"signal_summarized_{stamp}_{index}",
            signal=group.first.signal,
            source=SUMMARY_SOURCE,
            evidence=group.evidence,
            confidence=mean(group.confidences),
            dimensions=list(group.dimensions),
            timestamp=group.timestamp,
        ))
    return sorted(summarized, key=_by_timestamp)


def summarize_session_artifacts(
    insights: Sequence[SessionInsight],
    signals: Sequence[UserSignal],
) -> SessionSummary:
    """Collapse one session's insights and signals; insights feed signal inference."""
    summarized_insights = summarize_insights(insights)
    return SessionSummary(
        insights=summarized_insights,
        signals=summarize_signals(signals, summarized_insights),
    )

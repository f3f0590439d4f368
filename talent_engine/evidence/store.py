"""
Evidence Store: the append-only log of evidence atoms, keyed by dimension.

Updated by: quiz scoring, session summaries, data-source analysis
Queried by: Confidence Calculator (every recomputation)

Atoms are never edited. Wiping evidence is a user-initiated action handled
outside the engine; clear_dimension() and reset() exist only so that layer
can drop the backing data, after which the next profile() reflects it.
"""

import logging
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from talent_engine.confidence.calculator import profile_from_sources
from talent_engine.models.evidence import ConfidenceProfile, ConfidenceSource
from talent_engine.psychometrics.dimensions import canonical_dimension

logger = logging.getLogger(__name__)


class EvidenceStore:
    """
    In-memory evidence log for one user.
    Durable storage is the caller's concern.
    """

    def __init__(self):
        self._log: Dict[str, List[ConfidenceSource]] = {}

    def append(self, source: ConfidenceSource) -> ConfidenceSource:
        """Append one atom under its canonical dimension name."""
        dimension = canonical_dimension(source.dimension)
        if dimension != source.dimension:
            source = source.model_copy(update={"dimension": dimension})
        self._log.setdefault(dimension, []).append(source)
        return source

    def extend(self, sources: Iterable[ConfidenceSource]) -> List[ConfidenceSource]:
        return [self.append(s) for s in sources]

    def get(self, dimension: str) -> List[ConfidenceSource]:
        """Evidence for one dimension, in append order."""
        return list(self._log.get(canonical_dimension(dimension), []))

    def dimensions(self) -> List[str]:
        return sorted(d for d, sources in self._log.items() if sources)

    def all(self) -> Dict[str, List[ConfidenceSource]]:
        return {d: list(self._log[d]) for d in self.dimensions()}

    def count(self) -> int:
        return sum(len(sources) for sources in self._log.values())

    def profile(self, now: Optional[datetime] = None) -> ConfidenceProfile:
        """Recompute the Confidence Profile from the full log."""
        return profile_from_sources(self.all(), now)

    def clear_dimension(self, dimension: str) -> int:
        """Drop one dimension's evidence after an external wipe."""
        removed = self._log.pop(canonical_dimension(dimension), [])
        logger.info("Cleared %d evidence atoms for %s", len(removed), dimension)
        return len(removed)

    def reset(self) -> None:
        logger.info("Cleared evidence log (%d atoms)", self.count())
        self._log = {}

"""
Statistics helpers shared by the confidence calculator, profile builder
and quiz scorer.

All reductions are order-independent: sums go through math.fsum (exactly
rounded, so permutation-invariant) and winsorizing works on a sorted copy.
"""

import math
from typing import Iterable, List, Sequence, Tuple


def clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def clamp_score(value: float) -> int:
    """Round (half up) and clamp to an integer score in [0, 100]."""
    return round_half_up(clamp(value))


def mean(values: Sequence[float]) -> float:
    if not values:
        return 0.0
    return math.fsum(values) / len(values)


def population_std(values: Sequence[float]) -> float:
    if not values:
        return 0.0
    mu = mean(values)
    return math.sqrt(math.fsum((v - mu) ** 2 for v in values) / len(values))


def winsorize_bounds(values: Iterable[float]) -> Tuple[float, float]:
    """Bounds used by winsorize(): 2nd-smallest / 2nd-largest, or [0, 100]."""
    ordered = sorted(clamp(v) for v in values)
    if len(ordered) < 4:
        return 0.0, 100.0
    return ordered[1], ordered[-2]


def winsorize(values: Iterable[float]) -> List[float]:
    """
    Clamp extremes to the 2nd-smallest / 2nd-largest value.

    With fewer than four values nothing is trimmed; every value is only
    clamped into [0, 100]. The result is in ascending order.
    """
    ordered = sorted(clamp(v) for v in values)
    low, high = winsorize_bounds(ordered)
    return [clamp(v, low, high) for v in ordered]


def winsorized_mean(values: Iterable[float]) -> float:
    return mean(winsorize(values))


def weighted_mean(pairs: Iterable[Tuple[float, float]]) -> float:
    """Mean of (value, weight) pairs; 0 when the total weight is 0."""
    pairs = sorted(pairs)
    total_weight = math.fsum(w for _, w in pairs)
    if total_weight <= 0:
        return 0.0
    return math.fsum(v * w for v, w in pairs) / total_weight


def z_to_score(z: float, center: float = 50.0, spread: float = 15.0) -> float:
    return clamp(center + z * spread)


def normalize_unit_confidence(value: float) -> float:
    """Accept a confidence on 0-1 or 0-100 and return it on 0-1."""
    if value > 1:
        value = value / 100.0
    return clamp(value, 0.0, 1.0)

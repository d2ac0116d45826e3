"""Small statistics helpers shared by confidence scoring and pattern detection."""

import math
from typing import Sequence


def clamp(value: float, lower: float = 0.0, upper: float = 1.0) -> float:
    """Clamp value into [lower, upper]."""
    return max(lower, min(upper, value))


def mean(values: Sequence[float]) -> float:
    """Arithmetic mean; 0.0 for an empty sequence."""
    if not values:
        return 0.0
    return math.fsum(values) / len(values)


def population_stdev(values: Sequence[float]) -> float:
    """Population standard deviation; 0.0 for fewer than two values."""
    if len(values) < 2:
        return 0.0
    avg = mean(values)
    return math.sqrt(math.fsum((v - avg) ** 2 for v in values) / len(values))


def coefficient_of_variation(values: Sequence[float]) -> float:
    """
    Population standard deviation divided by the mean.

    A zero mean gives 0.0 when every value is zero and infinity otherwise,
    so callers comparing against a threshold reject the series.
    """
    if not values:
        return 0.0
    avg = mean(values)
    if avg == 0:
        return 0.0 if all(v == 0 for v in values) else math.inf
    return population_stdev(values) / abs(avg)

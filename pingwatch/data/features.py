"""
Numeric summaries over sample values.

Shared by the statistics engine and the forecast methods so that both agree on
what "mean" and "standard deviation" mean.

Design:
- Population standard deviation (divide by N, not N-1)
- Empty input is the caller's problem; these helpers raise on it
- Values are never rounded
"""

import statistics
from typing import Dict, Iterable, List, Sequence

from .schema import Sample


def sample_values(samples: Iterable[Sample]) -> List[float]:
    """Extract raw values, preserving order."""
    return [sample.value for sample in samples]


def mean(values: Sequence[float]) -> float:
    return statistics.fmean(values)


def population_std(values: Sequence[float]) -> float:
    """
    Population standard deviation.

    A single value has a standard deviation of 0.
    """
    return statistics.pstdev(values)


def summarize(values: Sequence[float]) -> Dict[str, float]:
    """
    Compute the descriptive statistics used by baseline snapshots.

    Args:
        values: Non-empty sequence of sample values

    Returns:
        Dict with keys: mean, std_dev, variance, min, max, median, count
    """
    avg = statistics.fmean(values)
    variance = statistics.pvariance(values)
    return {
        "mean": avg,
        "std_dev": variance ** 0.5,
        "variance": variance,
        "min": min(values),
        "max": max(values),
        "median": statistics.median(values),
        "count": len(values),
    }

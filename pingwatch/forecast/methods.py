"""
Deterministic forecasting methods.

Both methods are simple and explainable on purpose:
- Exponential smoothing over the whole window
- Simple moving average over the last ``period`` values

The band is ``band_z`` standard deviations of the raw values either side of
the forecast, with the lower bound floored at 0 because latencies cannot be
negative. The upper bound is not clamped.
"""

from __future__ import annotations

from typing import Sequence, Tuple

from pingwatch.core.exceptions import InsufficientDataError
from pingwatch.data.features import mean, population_std

EXPONENTIAL_SMOOTHING = "exponential-smoothing"
SIMPLE_MOVING_AVERAGE = "simple-moving-average"


def exponential_smoothing(values: Sequence[float], alpha: float) -> float:
    """
    Single exponential smoothing, seeded with the first value.

    Example:
        [100, 200, 100] with alpha=0.3 -> 100 -> 130 -> 121
    """
    if not values:
        raise InsufficientDataError("exponential smoothing needs at least one value")

    smoothed = values[0]
    for value in values[1:]:
        smoothed = alpha * value + (1.0 - alpha) * smoothed
    return smoothed


def simple_moving_average(values: Sequence[float], period: int) -> Tuple[float, float]:
    """
    Mean and population standard deviation of the last ``period`` values.

    Returns:
        Tuple of (sma, std_dev)
    """
    if period < 1 or len(values) < period:
        raise InsufficientDataError(f"need at least {period} values, got {len(values)}")

    recent = list(values[-period:])
    return mean(recent), population_std(recent)


def confidence_band(center: float, std_dev: float, band_z: float) -> Tuple[float, float]:
    """Return (lower, upper) with the lower bound floored at 0."""
    half_width = band_z * std_dev
    return max(0.0, center - half_width), center + half_width

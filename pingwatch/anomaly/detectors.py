"""
Detection rules for individual samples.

Implements explainable rules:
- Z-score against the rolling baseline
- Absolute threshold on the raw value

Each rule returns an Anomaly or None and never raises for degenerate input.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from pingwatch.core.exceptions import DegenerateBaselineError
from pingwatch.data.schema import Sample

from .schema import Anomaly, AnomalySeverity, AnomalyType, StatisticsSnapshot
from .scoring import SeverityMapper


@dataclass
class ZScoreDetector:
    """
    Z-score detector.

    A baseline with zero standard deviation has no meaningful z-score, so the
    rule is skipped for it.
    """

    threshold: float
    severity_mapper: SeverityMapper

    def compute(self, observed: float, baseline: StatisticsSnapshot) -> float:
        if baseline.std_dev == 0:
            raise DegenerateBaselineError("baseline standard deviation is zero")
        return (observed - baseline.mean) / baseline.std_dev

    def evaluate(self, sample: Sample, baseline: StatisticsSnapshot) -> Optional[Anomaly]:
        try:
            zscore = self.compute(sample.value, baseline)
        except DegenerateBaselineError:
            return None

        if abs(zscore) < self.threshold:
            return None

        severity = self.severity_mapper.zscore_severity(zscore)
        return Anomaly(
            timestamp=sample.timestamp,
            sample_ref=sample.id,
            type=AnomalyType.ZSCORE,
            severity=severity,
            actual_value=sample.value,
            expected_value=baseline.mean,
            deviation=sample.value - baseline.mean,
            z_score=zscore,
            alert_triggered=severity == AnomalySeverity.CRITICAL,
            metadata={"std_dev": baseline.std_dev, "threshold": self.threshold},
        )


@dataclass
class ThresholdDetector:
    """
    Absolute threshold detector.

    Fires on the raw value alone; the baseline is not consulted.
    """

    threshold: float

    def evaluate(self, sample: Sample) -> Optional[Anomaly]:
        if sample.value < self.threshold:
            return None

        return Anomaly(
            timestamp=sample.timestamp,
            sample_ref=sample.id,
            type=AnomalyType.THRESHOLD,
            severity=AnomalySeverity.HIGH,
            actual_value=sample.value,
            expected_value=self.threshold,
            deviation=sample.value - self.threshold,
            threshold=self.threshold,
            alert_triggered=True,
            metadata={"threshold_ms": self.threshold},
        )

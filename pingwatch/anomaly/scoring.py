"""
Severity mapping for anomalies.

Maps deviations to severity levels with configurable thresholds.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from pingwatch.core.config import DetectionConfig

from .schema import AnomalySeverity

SEVERITY_ORDER = [
    AnomalySeverity.LOW,
    AnomalySeverity.MEDIUM,
    AnomalySeverity.HIGH,
    AnomalySeverity.CRITICAL,
]


@dataclass
class SeverityMapper:
    """
    Maps z-scores to severity levels.

    Grades are evaluated on |z|; the highest qualifying grade wins.
    """

    thresholds: DetectionConfig

    def zscore_severity(self, zscore: float) -> AnomalySeverity:
        z = abs(zscore)
        if z >= self.thresholds.zscore_critical:
            return AnomalySeverity.CRITICAL
        if z >= self.thresholds.zscore_high:
            return AnomalySeverity.HIGH
        if z >= self.thresholds.zscore_threshold:
            return AnomalySeverity.MEDIUM
        return AnomalySeverity.LOW


def overall_severity(*severities: AnomalySeverity) -> Optional[AnomalySeverity]:
    """
    Return the highest severity among inputs, or None if there are none.
    """

    if not severities:
        return None
    highest_index = max(SEVERITY_ORDER.index(s) for s in severities)
    return SEVERITY_ORDER[highest_index]

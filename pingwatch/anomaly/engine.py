"""
Anomaly detection engine.

Judges a single new sample against a pre-computed baseline snapshot. The
engine holds no state between calls: every anomaly it returns is a new
entity, and it does not deduplicate against anomalies emitted earlier.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

from pingwatch.core.config import DetectionConfig, config
from pingwatch.data.schema import Sample

from .detectors import ThresholdDetector, ZScoreDetector
from .schema import Anomaly, StatisticsSnapshot
from .scoring import SeverityMapper

logger = logging.getLogger(__name__)


@dataclass
class AnomalyDetector:
    """
    Deterministic per-sample anomaly detector.

    Notes:
    - Baselines with fewer than min_samples samples are not trusted; nothing fires.
    - The z-score and threshold rules are independent; both may fire, in that order.
    """

    settings: Optional[DetectionConfig] = None

    def __post_init__(self) -> None:
        if self.settings is None:
            self.settings = config.detection
        self._z_detector = ZScoreDetector(
            threshold=self.settings.zscore_threshold,
            severity_mapper=SeverityMapper(self.settings),
        )
        self._threshold_detector = ThresholdDetector(
            threshold=self.settings.absolute_threshold_ms
        )

    def detect(self, sample: Sample, snapshot: StatisticsSnapshot) -> List[Anomaly]:
        if snapshot.sample_count < self.settings.min_samples:
            logger.info(
                f"Insufficient data for anomaly detection "
                f"({snapshot.sample_count} < {self.settings.min_samples})"
            )
            return []

        anomalies: List[Anomaly] = []

        zscore_anomaly = self._z_detector.evaluate(sample, snapshot)
        if zscore_anomaly is not None:
            anomalies.append(zscore_anomaly)

        threshold_anomaly = self._threshold_detector.evaluate(sample)
        if threshold_anomaly is not None:
            anomalies.append(threshold_anomaly)

        if anomalies:
            logger.warning(f"Detected {len(anomalies)} anomalies for sample {sample.id}")

        return anomalies

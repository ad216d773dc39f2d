"""
Monitor service.

Wires the statistics, detection and forecast engines to the storage and
notification adapters. This is what the ping scheduler and the HTTP API call.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence

from pingwatch.anomaly import AnomalyDetector, StatisticsEngine, overall_severity
from pingwatch.anomaly.schema import Anomaly, StatisticsSnapshot
from pingwatch.core.config import Config, config
from pingwatch.data.schema import Sample
from pingwatch.forecast import ForecastEngine, Prediction, Predictor

from .notifications import LoggingNotificationSink, NotificationSink
from .store import AnomalyRepository, InMemorySampleStore

logger = logging.getLogger("backend.monitor")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class MonitorService:
    """
    Host-side orchestration of the decision pipeline.

    record_sample: store -> snapshot -> detect -> persist -> publish.
    """

    samples: InMemorySampleStore = field(default_factory=InMemorySampleStore)
    anomalies: AnomalyRepository = field(default_factory=AnomalyRepository)
    sinks: List[NotificationSink] = field(default_factory=lambda: [LoggingNotificationSink()])
    predictors: Sequence[Predictor] = ()
    settings: Config = field(default_factory=lambda: config)
    predictor_timeout_ms: int = 10_000

    def __post_init__(self) -> None:
        self.statistics = StatisticsEngine(self.samples, settings=self.settings.statistics)
        self.detector = AnomalyDetector(settings=self.settings.detection)
        self.forecaster = ForecastEngine(
            self.samples,
            predictors=self.predictors,
            settings=self.settings.forecast,
            predictor_timeout_ms=self.predictor_timeout_ms,
        )

    @property
    def default_window_hours(self) -> int:
        return self.settings.statistics.default_window_hours

    def _window_hours(self, window_hours: Optional[int]) -> int:
        if window_hours is None:
            return self.default_window_hours
        if window_hours < 1:
            raise ValueError("window_hours must be positive")
        return window_hours

    def compute_or_fetch_statistics(
        self, window_hours: Optional[int] = None, now: Optional[datetime] = None
    ) -> StatisticsSnapshot:
        return self.statistics.snapshot(self._window_hours(window_hours), now or _utcnow())

    def detect_anomalies(self, sample: Sample, snapshot: StatisticsSnapshot) -> List[Anomaly]:
        return self.detector.detect(sample, snapshot)

    def predict_next(
        self, window_hours: Optional[int] = None, now: Optional[datetime] = None
    ) -> Optional[Prediction]:
        return self.forecaster.predict(self._window_hours(window_hours), now=now)

    def predict_sma(
        self,
        window_hours: Optional[int] = None,
        period: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> Optional[Prediction]:
        return self.forecaster.predict_sma(
            self._window_hours(window_hours),
            self.settings.forecast.default_sma_period if period is None else period,
            now=now,
        )

    def record_sample(self, sample: Sample, now: Optional[datetime] = None) -> List[Anomaly]:
        """
        Record a probe result and classify it.

        The baseline is taken after the sample is stored, so it includes it.

        Returns:
            Anomalies emitted for the sample (usually none)
        """
        now = now or sample.timestamp
        self.samples.add(sample)
        self._publish("publish_sample", sample)

        snapshot = self.compute_or_fetch_statistics(self.default_window_hours, now)
        detected = self.detect_anomalies(sample, snapshot)

        for anomaly in detected:
            self.anomalies.save(anomaly)
            self._publish("publish_anomaly", anomaly)

        if detected:
            worst = overall_severity(*(a.severity for a in detected))
            logger.warning(f"Sample {sample.id} flagged: {len(detected)} anomalies, worst={worst.value}")
        return detected

    def statistics_history(self, window_hours: Optional[int] = None, limit: int = 100) -> List[StatisticsSnapshot]:
        return self.statistics.history(self._window_hours(window_hours), limit)

    def confidence_bands(self, window_hours: Optional[int] = None, now: Optional[datetime] = None) -> Dict[str, float]:
        snapshot = self.compute_or_fetch_statistics(window_hours, now)
        return {
            "mean": snapshot.mean,
            "lower": snapshot.confidence_lower,
            "upper": snapshot.confidence_upper,
            "confidence_level": snapshot.confidence_level,
            "std_dev": snapshot.std_dev,
        }

    def acknowledge(self, anomaly_id: str) -> Optional[Anomaly]:
        return self.anomalies.acknowledge(anomaly_id)

    def _publish(self, method: str, item: object) -> None:
        for sink in self.sinks:
            try:
                getattr(sink, method)(item)
            except Exception:
                logger.exception("Notification sink %s failed", type(sink).__name__)

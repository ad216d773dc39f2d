"""
Notification sinks.

Fire-and-forget fan-out of new samples and anomalies. A sink that raises must
not break the detection pipeline, so MonitorService logs and drops sink errors.
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from typing import List

from pingwatch.anomaly.schema import Anomaly
from pingwatch.data.schema import Sample

logger = logging.getLogger("backend.notifications")


class NotificationSink(ABC):
    """Abstract interface for downstream delivery."""

    @abstractmethod
    def publish_sample(self, sample: Sample) -> None:
        ...

    @abstractmethod
    def publish_anomaly(self, anomaly: Anomaly) -> None:
        ...


class LoggingNotificationSink(NotificationSink):
    """Writes every event to the log."""

    def publish_sample(self, sample: Sample) -> None:
        logger.info("New sample %s: %.2fms at %s", sample.id, sample.value, sample.timestamp.isoformat())

    def publish_anomaly(self, anomaly: Anomaly) -> None:
        log = logger.warning if anomaly.alert_triggered else logger.info
        log(
            "Anomaly %s (%s, %s): actual=%.2f expected=%.2f",
            anomaly.id,
            anomaly.type.value,
            anomaly.severity.value,
            anomaly.actual_value,
            anomaly.expected_value,
        )


class RecordingNotificationSink(NotificationSink):
    """Keeps published events in memory for observers polling the backend."""

    def __init__(self, max_events: int = 500) -> None:
        if max_events < 1:
            raise ValueError("max_events must be at least 1")
        self.max_events = max_events
        self.samples: List[Sample] = []
        self.anomalies: List[Anomaly] = []
        self._lock = threading.Lock()

    def publish_sample(self, sample: Sample) -> None:
        with self._lock:
            self.samples.append(sample)
            del self.samples[: -self.max_events]

    def publish_anomaly(self, anomaly: Anomaly) -> None:
        with self._lock:
            self.anomalies.append(anomaly)
            del self.anomalies[: -self.max_events]

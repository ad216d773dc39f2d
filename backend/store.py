"""
In-process storage adapters.

InMemorySampleStore implements the SampleSource port; AnomalyRepository keeps
emitted anomalies and applies acknowledgments. Both are thread-safe so the
threaded HTTP server can share them.
"""

from __future__ import annotations

import bisect
import math
import threading
from datetime import datetime
from typing import Dict, List, Optional

from pingwatch.anomaly.schema import Anomaly, AnomalySeverity
from pingwatch.core.exceptions import StorageError
from pingwatch.data.schema import Sample
from pingwatch.data.sources import SampleSource


class InMemorySampleStore(SampleSource):
    """
    Samples kept sorted by timestamp.

    Samples with equal timestamps keep insertion order.
    """

    def __init__(self) -> None:
        self._samples: List[Sample] = []
        self._keys: List[datetime] = []
        self._by_id: Dict[str, Sample] = {}
        self._lock = threading.Lock()

    def add(self, sample: Sample) -> Sample:
        with self._lock:
            if sample.id in self._by_id:
                raise StorageError(f"Duplicate sample id: {sample.id}")
            index = bisect.bisect_right(self._keys, sample.timestamp)
            self._keys.insert(index, sample.timestamp)
            self._samples.insert(index, sample)
            self._by_id[sample.id] = sample
        return sample

    def samples_since(self, since: datetime) -> List[Sample]:
        with self._lock:
            index = bisect.bisect_right(self._keys, since)
            return self._samples[index:]

    def get(self, sample_id: str) -> Optional[Sample]:
        return self._by_id.get(sample_id)

    def latest(self) -> Optional[Sample]:
        with self._lock:
            return self._samples[-1] if self._samples else None

    def page(self, page: int = 1, limit: int = 20) -> Dict[str, object]:
        """Newest-first page of samples with pagination metadata."""
        page = max(page, 1)
        limit = max(limit, 1)
        with self._lock:
            newest_first = list(reversed(self._samples))
        total = len(newest_first)
        start = (page - 1) * limit
        return {
            "data": newest_first[start : start + limit],
            "meta": {
                "total": total,
                "page": page,
                "limit": limit,
                "total_pages": math.ceil(total / limit),
            },
        }

    def __len__(self) -> int:
        return len(self._samples)


class AnomalyRepository:
    """
    Stores anomalies and applies the acknowledge transition.

    Anomalies are immutable; acknowledging one replaces the stored record with
    an acknowledged copy.
    """

    def __init__(self) -> None:
        self._anomalies: Dict[str, Anomaly] = {}
        self._lock = threading.Lock()

    def save(self, anomaly: Anomaly) -> Anomaly:
        with self._lock:
            self._anomalies[anomaly.id] = anomaly
        return anomaly

    def get(self, anomaly_id: str) -> Optional[Anomaly]:
        return self._anomalies.get(anomaly_id)

    def list(
        self,
        limit: int = 50,
        severity: Optional[AnomalySeverity] = None,
    ) -> List[Anomaly]:
        """Anomalies newest first, optionally filtered by severity."""
        with self._lock:
            items = list(self._anomalies.values())
        if severity is not None:
            items = [a for a in items if a.severity == severity]
        items.sort(key=lambda a: a.timestamp, reverse=True)
        return items[:limit]

    def acknowledge(self, anomaly_id: str) -> Optional[Anomaly]:
        with self._lock:
            anomaly = self._anomalies.get(anomaly_id)
            if anomaly is None:
                return None
            acknowledged = anomaly.model_copy(update={"acknowledged": True})
            self._anomalies[anomaly_id] = acknowledged
        return acknowledged

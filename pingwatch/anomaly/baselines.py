"""
Rolling baseline snapshots.

The statistics engine summarizes every sample in a trailing window and caches
the result per window size. Cached snapshots are reused until they go stale,
then superseded by a freshly computed one. Snapshots are immutable; a cached
entry is only ever replaced as a whole.
"""

from __future__ import annotations

import logging
import math
import threading
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from pingwatch.core.config import StatisticsConfig, config
from pingwatch.data.features import sample_values, summarize
from pingwatch.data.sources import SampleSource

from .schema import StatisticsSnapshot

logger = logging.getLogger(__name__)


def empty_snapshot(
    window_start: datetime,
    window_end: datetime,
    window_size_hours: int,
    confidence_level: float = 0.95,
) -> StatisticsSnapshot:
    """Zero-valued snapshot for a window with no samples."""
    return StatisticsSnapshot(
        window_start=window_start,
        window_end=window_end,
        window_size_hours=window_size_hours,
        mean=0.0,
        std_dev=0.0,
        min=0.0,
        max=0.0,
        sample_count=0,
        confidence_lower=0.0,
        confidence_upper=0.0,
        confidence_level=confidence_level,
        created_at=window_end,
    )


@dataclass
class SnapshotCache:
    """
    Latest snapshot per window size, plus the superseded ones.

    Writers publish a fully built snapshot with a single assignment under a
    lock; readers never take the lock. Last completed write wins.
    """

    staleness: timedelta
    max_history: int = 1000
    _latest: Dict[int, StatisticsSnapshot] = field(default_factory=dict)
    _history: Dict[int, List[StatisticsSnapshot]] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock)

    def get(self, window_size_hours: int) -> Optional[StatisticsSnapshot]:
        return self._latest.get(window_size_hours)

    def is_stale(self, snapshot: StatisticsSnapshot, now: datetime) -> bool:
        return now - snapshot.created_at > self.staleness

    def fresh(self, window_size_hours: int, now: datetime) -> Optional[StatisticsSnapshot]:
        """Return the cached snapshot if it exists and is not stale."""
        snapshot = self.get(window_size_hours)
        if snapshot is None or self.is_stale(snapshot, now):
            return None
        return snapshot

    def put(self, snapshot: StatisticsSnapshot) -> None:
        key = snapshot.window_size_hours
        with self._lock:
            history = self._history.setdefault(key, [])
            history.append(snapshot)
            if len(history) > self.max_history:
                del history[: len(history) - self.max_history]
            self._latest[key] = snapshot

    def history(self, window_size_hours: int, limit: int = 100) -> List[StatisticsSnapshot]:
        """Snapshots for a window size, newest first."""
        snapshots = list(self._history.get(window_size_hours, ()))
        snapshots.reverse()
        return snapshots[:limit]


class StatisticsEngine:
    """
    Computes and caches rolling statistics snapshots.

    Notes:
    - Standard deviation is the population one (divide by N).
    - An empty window yields the zero-valued snapshot, which is never cached,
      so a later sample count check sees the real baseline once data arrives.
    - Sample source failures propagate to the caller unchanged.
    """

    def __init__(
        self,
        source: SampleSource,
        settings: Optional[StatisticsConfig] = None,
        cache: Optional[SnapshotCache] = None,
    ) -> None:
        self.source = source
        self.settings = settings or config.statistics
        self.cache = cache or SnapshotCache(
            staleness=timedelta(minutes=self.settings.staleness_minutes)
        )

    def snapshot(self, window_size_hours: int, now: datetime) -> StatisticsSnapshot:
        """
        Return the current snapshot for a window size, recomputing it when stale.

        Args:
            window_size_hours: Trailing window length in hours
            now: Reference time for the window and the staleness check

        Returns:
            Cached snapshot if younger than the staleness threshold, else a new one
        """
        cached = self.cache.fresh(window_size_hours, now)
        if cached is not None:
            return cached
        return self.compute(window_size_hours, now)

    def compute(self, window_size_hours: int, now: datetime) -> StatisticsSnapshot:
        """Compute a snapshot from the sample source, bypassing the cache check."""
        window_start = now - timedelta(hours=window_size_hours)
        logger.info(f"Calculating rolling statistics for {window_size_hours}h window")

        samples = self.source.samples_since(window_start)
        if not samples:
            logger.warning(f"No samples found in {window_size_hours}h window")
            return empty_snapshot(
                window_start, now, window_size_hours, self.settings.confidence_level
            )

        values = sample_values(samples)
        stats = summarize(values)
        margin = self.settings.confidence_z * stats["std_dev"] / math.sqrt(stats["count"])

        snapshot = StatisticsSnapshot(
            window_start=window_start,
            window_end=now,
            window_size_hours=window_size_hours,
            mean=stats["mean"],
            std_dev=stats["std_dev"],
            min=stats["min"],
            max=stats["max"],
            sample_count=stats["count"],
            confidence_lower=stats["mean"] - margin,
            confidence_upper=stats["mean"] + margin,
            confidence_level=self.settings.confidence_level,
            created_at=now,
            metadata={"median": stats["median"], "variance": stats["variance"]},
        )
        self.cache.put(snapshot)

        logger.info(
            f"Statistics calculated: mean={snapshot.mean:.2f}, "
            f"std_dev={snapshot.std_dev:.2f}, n={snapshot.sample_count}"
        )
        return snapshot

    def history(self, window_size_hours: int, limit: int = 100) -> List[StatisticsSnapshot]:
        return self.cache.history(window_size_hours, limit)

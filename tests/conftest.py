"""
Pytest configuration and shared fixtures.

Provides sample factories, an in-memory sample store and baseline snapshots
for unit and integration tests.
"""

from datetime import datetime, timedelta, timezone
from typing import Callable, List, Sequence

import pytest

from backend.store import InMemorySampleStore
from pingwatch.anomaly.schema import StatisticsSnapshot
from pingwatch.data.schema import Sample

T0 = datetime(2025, 2, 7, 12, 0, tzinfo=timezone.utc)


def make_samples(
    values: Sequence[float],
    start: datetime = T0,
    step: timedelta = timedelta(minutes=5),
) -> List[Sample]:
    """Build evenly spaced samples, oldest first."""
    return [
        Sample(id=f"s-{i:04d}", timestamp=start + i * step, value=value)
        for i, value in enumerate(values)
    ]


def make_snapshot(mean: float = 100.0, std_dev: float = 10.0, sample_count: int = 50) -> StatisticsSnapshot:
    return StatisticsSnapshot(
        window_start=T0 - timedelta(hours=24),
        window_end=T0,
        window_size_hours=24,
        mean=mean,
        std_dev=std_dev,
        min=mean - 3 * std_dev,
        max=mean + 3 * std_dev,
        sample_count=sample_count,
        confidence_lower=mean - 1.0,
        confidence_upper=mean + 1.0,
        confidence_level=0.95,
        created_at=T0,
    )


@pytest.fixture
def t0() -> datetime:
    return T0


@pytest.fixture
def sample_factory() -> Callable[..., List[Sample]]:
    return make_samples


@pytest.fixture
def snapshot_factory() -> Callable[..., StatisticsSnapshot]:
    return make_snapshot


@pytest.fixture
def baseline() -> StatisticsSnapshot:
    """Baseline of 50 samples with mean 100ms and std dev 10ms."""
    return make_snapshot()


@pytest.fixture
def store() -> InMemorySampleStore:
    return InMemorySampleStore()


@pytest.fixture
def filled_store(store) -> Callable[[Sequence[float]], InMemorySampleStore]:
    """Factory filling the store with samples ending just before T0."""

    def _fill(values: Sequence[float], step: timedelta = timedelta(minutes=5)) -> InMemorySampleStore:
        start = T0 - step * len(values)
        for sample in make_samples(values, start=start, step=step):
            store.add(sample)
        return store

    return _fill


def pytest_configure(config):
    """
    Pytest hook for custom configuration.

    Registers custom markers used throughout tests.
    """
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running (deferred CI)"
    )

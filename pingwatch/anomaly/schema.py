"""
Schema definitions for baselines and anomalies.

All outputs are deterministic and explainable. Each anomaly references its
sample, the value it expected and how far off the sample was.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field


class AnomalySeverity(str, Enum):
    """Severity levels for anomalies, LOW < MEDIUM < HIGH < CRITICAL."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class AnomalyType(str, Enum):
    """Rule that produced an anomaly."""

    ZSCORE = "z-score"
    THRESHOLD = "threshold"
    PREDICTION_ERROR = "prediction-error"


class StatisticsSnapshot(BaseModel):
    """
    Point-in-time statistical summary of a trailing window.

    Fields:
    - window_start/window_end: bounds of the window the samples came from
    - window_size_hours: cache key; one live snapshot per window size
    - mean/std_dev/min/max: over sample values (population std dev)
    - sample_count: number of samples used (0 means the zero-valued snapshot)
    - confidence_lower/upper: mean -/+ z * std_dev / sqrt(n)
    - created_at: computation time, drives the staleness check
    - metadata: median and variance for non-empty windows
    """

    model_config = ConfigDict(frozen=True)

    window_start: datetime
    window_end: datetime
    window_size_hours: int = Field(ge=1)
    mean: float
    std_dev: float = Field(ge=0.0)
    min: float
    max: float
    sample_count: int = Field(ge=0)
    confidence_lower: float
    confidence_upper: float
    confidence_level: float = Field(0.95, gt=0.0, lt=1.0)
    created_at: datetime
    metadata: Dict[str, float] = Field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return self.sample_count == 0


class Anomaly(BaseModel):
    """
    Classified anomaly for a single sample.

    Fields:
    - id: unique identifier, used by the host to acknowledge it
    - timestamp: timestamp of the offending sample
    - sample_ref: id of the offending sample (lookup only)
    - type: rule that fired
    - severity: categorical severity
    - actual_value/expected_value: observed value and the reference it was judged against
    - deviation: actual_value - expected_value
    - z_score: standardized deviation (z-score rule only)
    - threshold: absolute threshold crossed (threshold rule only)
    - alert_triggered: True if the anomaly should page someone
    - acknowledged: flipped by the host layer, never by the detector
    - metadata: rule parameters used for the decision
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid4()))
    timestamp: datetime
    sample_ref: str
    type: AnomalyType
    severity: AnomalySeverity
    actual_value: float
    expected_value: float
    deviation: float
    z_score: Optional[float] = None
    threshold: Optional[float] = None
    alert_triggered: bool = False
    acknowledged: bool = False
    metadata: Dict[str, Any] = Field(default_factory=dict)

"""
Canonical sample schema for the latency pipeline.

A Sample is one probe observation: when it was taken and the measured value
(response time in milliseconds for HTTP probes). Samples are owned by the
sample source; the engines only read them.

Design rationale:
- Minimal fields (only what the baseline, rules and forecasts need)
- Immutable once recorded
- Timestamps are timezone-aware UTC
"""

from datetime import datetime, timezone
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Sample(BaseModel):
    """
    Single recorded probe measurement.

    Attributes:
        id: Identifier used by anomalies to point back at the sample
        timestamp: UTC datetime when the probe completed
        value: Measured value (milliseconds for response times)
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(
        default_factory=lambda: str(uuid4()),
        min_length=1,
        description="Sample identifier",
    )

    timestamp: datetime = Field(
        ...,
        description="UTC timestamp of the measurement",
    )

    value: float = Field(
        ...,
        allow_inf_nan=False,
        description="Measured value",
    )

    @field_validator("timestamp")
    @classmethod
    def _ensure_utc(cls, value: datetime) -> datetime:
        # Naive datetimes are assumed to already be UTC
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

"""
Application configuration for PingWatch.

Provides environment-aware settings with conservative defaults. Window sizes,
staleness, detection thresholds and forecast constants are all configurable to
avoid hard-coded "magic numbers" in the engines.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class StatisticsConfig(BaseModel):
	"""
	Configuration for rolling baseline snapshots.

	Notes:
	- default_window_hours: trailing window used when the caller gives none.
	- staleness_minutes: cached snapshots older than this are recomputed.
	- confidence_z: 1.96 gives a 95% band around the mean.
	"""

	default_window_hours: int = Field(24, ge=1)
	staleness_minutes: float = Field(5.0, gt=0.0)
	confidence_level: float = Field(0.95, gt=0.0, lt=1.0)
	confidence_z: float = Field(1.96, gt=0.0)


class DetectionConfig(BaseModel):
	"""
	Thresholds for the anomaly rules.

	Rationale:
	- min_samples keeps a thin baseline from producing alerts.
	- Z-score grades are evaluated on |z|, highest qualifying grade wins.
	- absolute_threshold_ms fires regardless of how noisy the baseline is.
	"""

	min_samples: int = Field(10, ge=1)
	zscore_threshold: float = Field(3.0, gt=0.0, description="Gate and MEDIUM grade")
	zscore_high: float = Field(4.0, gt=0.0, description="HIGH grade")
	zscore_critical: float = Field(5.0, gt=0.0, description="CRITICAL grade")
	absolute_threshold_ms: float = Field(5000.0, gt=0.0)


class ForecastConfig(BaseModel):
	"""
	Forecast configuration.

	Notes:
	- smoothing_alpha: weight of the newest value (higher means more reactive).
	- band_z: multiplier of the sample standard deviation for the band.
	"""

	min_samples: int = Field(5, ge=1)
	smoothing_alpha: float = Field(0.3, gt=0.0, le=1.0)
	band_z: float = Field(1.96, gt=0.0)
	default_sma_period: int = Field(10, ge=1)


class Config(BaseSettings):
	"""
	Global configuration with environment overrides.
	"""

	model_config = SettingsConfigDict(
		env_prefix="PINGWATCH_",
		env_file=".env",
		env_nested_delimiter="__",
		extra="ignore",
	)

	log_level: str = Field("INFO", description="Default logging level")
	logs_dir: Path = Field(Path("logs"), description="Directory for log files")
	log_max_bytes: int = Field(10 * 1024 * 1024, ge=1024, description="Rotate log files at this size")
	log_backup_count: int = Field(5, ge=0, description="Rotated log files to keep")
	statistics: StatisticsConfig = StatisticsConfig()
	detection: DetectionConfig = DetectionConfig()
	forecast: ForecastConfig = ForecastConfig()

	def model_post_init(self, __context: object) -> None:
		self.logs_dir.mkdir(parents=True, exist_ok=True)


config = Config()

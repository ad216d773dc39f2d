"""
Anomaly module: rolling baselines and per-sample anomaly classification.

Implements cached statistics snapshots, explainable detection rules, severity
grading and the anomaly records they emit.
"""

from .baselines import SnapshotCache, StatisticsEngine, empty_snapshot
from .detectors import ThresholdDetector, ZScoreDetector
from .engine import AnomalyDetector
from .schema import Anomaly, AnomalySeverity, AnomalyType, StatisticsSnapshot
from .scoring import SeverityMapper, overall_severity

__all__ = [
	"AnomalyDetector",
	"Anomaly",
	"AnomalySeverity",
	"AnomalyType",
	"StatisticsSnapshot",
	"StatisticsEngine",
	"SnapshotCache",
	"empty_snapshot",
	"ZScoreDetector",
	"ThresholdDetector",
	"SeverityMapper",
	"overall_severity",
]

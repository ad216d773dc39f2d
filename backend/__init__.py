"""
Host layer: in-process storage, notification sinks and the monitor service
that wires them to the pingwatch engines.
"""

from .monitor import MonitorService
from .notifications import LoggingNotificationSink, NotificationSink, RecordingNotificationSink
from .store import AnomalyRepository, InMemorySampleStore

__all__ = [
    "MonitorService",
    "NotificationSink",
    "LoggingNotificationSink",
    "RecordingNotificationSink",
    "AnomalyRepository",
    "InMemorySampleStore",
]

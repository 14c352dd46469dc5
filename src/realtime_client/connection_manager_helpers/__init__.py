"""Helper classes for RealtimeConnectionManager."""

from .metrics_tracker import ConnectionMetrics, MetricsTracker
from .notification_manager import FanOutNotifier
from .state_manager import ConnectionStateManager
from .status_reporter import build_status

__all__ = [
    "ConnectionMetrics",
    "ConnectionStateManager",
    "FanOutNotifier",
    "MetricsTracker",
    "build_status",
]

"""Dashboard orchestration: dependency guard, level streaming and the controller."""

from cardio_dashboard.orchestration.controller import DashboardController
from cardio_dashboard.orchestration.guard import require_signal_bundle, risk_payload
from cardio_dashboard.orchestration.streamer import ParameterStreamer, validate_level

__all__ = [
    "DashboardController",
    "ParameterStreamer",
    "require_signal_bundle",
    "risk_payload",
    "validate_level",
]

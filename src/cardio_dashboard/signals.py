"""Application-wide signal/slot event bus between the controller and the GUI.

The controller runs on the event-loop thread; these signals carry its
snapshots to GUI widgets, which Qt delivers on the GUI thread through
queued connections.
"""
from PySide6.QtCore import QObject, Signal

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from cardio_dashboard.core.data_models import DashboardSnapshot


class AppSignals(QObject):
    """Central event bus with custom Qt signals for application-wide communication.

    Example:
        >>> signals = get_app_signals()
        >>> signals.state_changed.connect(window.render)
        >>> controller.add_listener(signals.state_changed.emit)
    """

    # Controller state
    state_changed = Signal(object)  # Emits: DashboardSnapshot

    def __init__(self):
        """Initialize the signal bus."""
        super().__init__()


# Global singleton instance
_app_signals: AppSignals | None = None


def get_app_signals() -> AppSignals:
    """Get the global AppSignals singleton."""
    global _app_signals
    if _app_signals is None:
        _app_signals = AppSignals()
    return _app_signals

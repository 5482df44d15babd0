"""Status bar listing in-flight operations."""
from PySide6.QtWidgets import QStatusBar
from loguru import logger

from cardio_dashboard.core.data_models import DashboardSnapshot, OperationKind


class AppStatusBar(QStatusBar):
    """Status bar that summarizes operation activity.

    Example displays:
    - "Ready"
    - "Working: Generate ECG, Train Model"
    - "Ready | Abnormality level 50% | Channel: Abnormal"
    """

    def __init__(self, parent=None):
        super().__init__(parent)
        self.showMessage("Ready")
        logger.debug("AppStatusBar initialized")

    def update_from_snapshot(self, snapshot: DashboardSnapshot):
        """Rebuild the message from a controller snapshot."""
        pending = [kind.label for kind in OperationKind if snapshot.is_pending(kind)]
        activity = f"Working: {', '.join(pending)}" if pending else "Ready"
        message = (
            f"{activity} | Abnormality level {snapshot.abnormality_level * 100:.0f}% | "
            f"Channel: {snapshot.active_channel.value.capitalize()}"
        )
        self.showMessage(message)

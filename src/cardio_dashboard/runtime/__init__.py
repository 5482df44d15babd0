"""Event-loop hosting for the orchestration core."""

from cardio_dashboard.runtime.loop_worker import EventLoopWorker

__all__ = ["EventLoopWorker"]

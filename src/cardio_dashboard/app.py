"""CardioDashboard application entry point.

Registered as the console script entry point in pyproject.toml.
"""
from __future__ import annotations

import sys

from loguru import logger
from PySide6.QtWidgets import QApplication

from cardio_dashboard.config import LoggingConfig, get_config


def configure_logging(config: LoggingConfig) -> None:
    """Replace loguru's default sink with stderr and rotating file sinks."""
    logger.remove()
    logger.add(
        sys.stderr,
        format=(
            "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
            "<level>{message}</level>"
        ),
        level=config.level,
    )
    if config.log_file:
        logger.add(
            config.log_file,
            rotation=config.rotation,
            retention=config.retention,
            level=config.file_level,
        )


def main() -> None:
    """Launch the CardioDashboard application."""
    config = get_config()
    configure_logging(config.logging)

    logger.info(f"Starting CardioDashboard (backend: {config.backend.base_url})")

    app = QApplication(sys.argv)
    app.setApplicationName("CardioDashboard")
    app.setApplicationVersion("0.1.0")

    from cardio_dashboard.gui.main_window import MainWindow
    from cardio_dashboard.orchestration.controller import DashboardController
    from cardio_dashboard.runtime.loop_worker import EventLoopWorker
    from cardio_dashboard.signals import get_app_signals

    worker = EventLoopWorker()
    worker.start()
    worker.wait_ready()

    # httpx.AsyncClient must be created on the loop that will use it
    controller = worker.submit(DashboardController.from_config, config).result()

    signals = get_app_signals()
    window = MainWindow(controller, worker.submit, config.gui)
    signals.state_changed.connect(window.render)
    worker.submit(controller.add_listener, signals.state_changed.emit).result()
    window.render(worker.submit(controller.snapshot).result())
    window.show()

    logger.info("CardioDashboard window displayed")
    exit_code = app.exec()

    worker.stop(before_stop=controller.aclose)
    logger.info("CardioDashboard closed")
    sys.exit(exit_code)

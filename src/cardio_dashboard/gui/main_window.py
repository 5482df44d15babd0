"""Main dashboard window.

Pure view: renders DashboardSnapshot values and forwards user actions to the
controller through a dispatch callable (normally EventLoopWorker.submit, so
every controller call runs on the event-loop thread).
"""
from __future__ import annotations

from typing import Any, Callable

from PySide6.QtCore import Qt
from PySide6.QtGui import QAction, QPixmap
from PySide6.QtWidgets import (
    QGridLayout,
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QMessageBox,
    QPushButton,
    QScrollArea,
    QSlider,
    QTabBar,
    QVBoxLayout,
    QWidget,
)
from loguru import logger

from cardio_dashboard.config import GUIConfig, get_config, get_help_text, get_keysequence
from cardio_dashboard.core.data_models import (
    ActiveChannel,
    DashboardSnapshot,
    ModelMetrics,
    OperationKind,
    RiskAssessment,
    RiskLevel,
)
from cardio_dashboard.gui.plot_widget import EcgPlotWidget
from cardio_dashboard.gui.status_bar import AppStatusBar
from cardio_dashboard.processing.projection import project_arrays

Dispatch = Callable[..., Any]

_OPERATION_SHORTCUTS = {
    OperationKind.GENERATE_SIGNAL: "op_generate_signal",
    OperationKind.TRAIN_MODEL: "op_train_model",
    OperationKind.COMPUTE_RISK: "op_compute_risk",
    OperationKind.RENDER_CHART: "op_render_chart",
}


def format_percent(value: float, decimals: int = 0) -> str:
    """Format a [0, 1] fraction as a percentage string."""
    return f"{value * 100:.{decimals}f}%"


class MainWindow(QMainWindow):
    """Dashboard window: actions, level slider, ECG plot, risk, metrics, chart.

    Args:
        controller: DashboardController whose methods are dispatched
        dispatch: Callable(func, *args) that runs func on the controller's loop
        config: GUI configuration (defaults to the global config)
    """

    def __init__(self, controller, dispatch: Dispatch, config: GUIConfig | None = None):
        super().__init__()

        self.controller = controller
        self.dispatch = dispatch
        self.config = config or get_config().gui
        self._snapshot: DashboardSnapshot | None = None

        self.setWindowTitle("CardioDashboard")
        self.resize(self.config.window_width, self.config.window_height)

        content = QWidget()
        layout = QVBoxLayout(content)

        self.error_label = QLabel()
        self.error_label.setWordWrap(True)
        self.error_label.setStyleSheet(
            "QLabel { background-color: #fdecea; color: #611a15; padding: 8px; border-radius: 4px; }"
        )
        self.error_label.hide()
        layout.addWidget(self.error_label)

        layout.addWidget(self._build_actions_box())
        layout.addWidget(self._build_signal_box())

        results_row = QHBoxLayout()
        results_row.addWidget(self._build_risk_box())
        results_row.addWidget(self._build_metrics_box())
        layout.addLayout(results_row)

        layout.addWidget(self._build_chart_box())
        layout.addStretch(1)

        scroll = QScrollArea()
        scroll.setWidgetResizable(True)
        scroll.setWidget(content)
        self.setCentralWidget(scroll)

        self.status_bar = AppStatusBar(self)
        self.setStatusBar(self.status_bar)

        self._build_menus()

        logger.info("MainWindow initialized")

    # ---- Construction ----

    def _build_actions_box(self) -> QGroupBox:
        box = QGroupBox("Actions")
        box_layout = QVBoxLayout(box)

        buttons_row = QHBoxLayout()
        handlers = {
            OperationKind.GENERATE_SIGNAL: self._on_generate_signal,
            OperationKind.TRAIN_MODEL: self._on_train_model,
            OperationKind.COMPUTE_RISK: self._on_compute_risk,
            OperationKind.RENDER_CHART: self._on_render_chart,
        }
        self.operation_buttons: dict[OperationKind, QPushButton] = {}
        for kind, handler in handlers.items():
            button = QPushButton(kind.label)
            button.clicked.connect(handler)
            buttons_row.addWidget(button)
            self.operation_buttons[kind] = button
        buttons_row.addStretch(1)
        box_layout.addLayout(buttons_row)

        self.level_label = QLabel()
        box_layout.addWidget(self.level_label)

        self.level_slider = QSlider(Qt.Orientation.Horizontal)
        self.level_slider.setRange(0, self.config.level_slider_steps)
        self.level_slider.setMaximumWidth(400)
        self.level_slider.valueChanged.connect(self._on_slider_changed)
        box_layout.addWidget(self.level_slider)

        self._show_level(self.controller.abnormality_level)
        self._set_slider(self.controller.abnormality_level)
        return box

    def _build_signal_box(self) -> QGroupBox:
        self.signal_box = QGroupBox("ECG Data")
        box_layout = QVBoxLayout(self.signal_box)

        self.channel_tabs = QTabBar()
        self.channel_tabs.addTab("Normal ECG")
        self.channel_tabs.addTab("Abnormal ECG")
        self.channel_tabs.currentChanged.connect(self._on_tab_changed)
        box_layout.addWidget(self.channel_tabs)

        self.plot_widget = EcgPlotWidget(self.config)
        self.plot_widget.setMinimumHeight(self.config.chart_max_height)
        box_layout.addWidget(self.plot_widget)

        self.signal_type_label = QLabel()
        box_layout.addWidget(self.signal_type_label)

        self.signal_box.hide()
        return self.signal_box

    def _build_risk_box(self) -> QGroupBox:
        self.risk_box = QGroupBox("Heart Failure Risk Assessment")
        box_layout = QVBoxLayout(self.risk_box)

        self.risk_probability_label = QLabel()
        font = self.risk_probability_label.font()
        font.setPointSize(font.pointSize() * 2)
        self.risk_probability_label.setFont(font)
        box_layout.addWidget(self.risk_probability_label)

        self.risk_level_label = QLabel()
        self.risk_factors_label = QLabel()
        self.risk_factors_label.setWordWrap(True)
        self.recommendations_label = QLabel()
        self.recommendations_label.setWordWrap(True)
        box_layout.addWidget(self.risk_level_label)
        box_layout.addWidget(self.risk_factors_label)
        box_layout.addWidget(self.recommendations_label)

        self.risk_box.hide()
        return self.risk_box

    def _build_metrics_box(self) -> QGroupBox:
        self.metrics_box = QGroupBox("Model Metrics")
        grid = QGridLayout(self.metrics_box)

        self.metric_labels: dict[str, QLabel] = {}
        for row, (key, caption) in enumerate([("accuracy", "Accuracy"), ("f1", "F1 Score"), ("roc_auc", "ROC AUC")]):
            grid.addWidget(QLabel(caption), row, 0)
            value_label = QLabel()
            value_label.setAlignment(Qt.AlignmentFlag.AlignRight)
            grid.addWidget(value_label, row, 1)
            self.metric_labels[key] = value_label

        self.metrics_box.hide()
        return self.metrics_box

    def _build_chart_box(self) -> QGroupBox:
        self.chart_box = QGroupBox("ECG Chart")
        box_layout = QVBoxLayout(self.chart_box)
        self.chart_label = QLabel()
        self.chart_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        box_layout.addWidget(self.chart_label)
        self.chart_box.hide()
        return self.chart_box

    def _build_menus(self):
        dashboard_menu = self.menuBar().addMenu("&Dashboard")
        for kind, action_name in _OPERATION_SHORTCUTS.items():
            action = QAction(kind.label, self)
            action.setShortcut(get_keysequence(action_name))
            action.triggered.connect(self.operation_buttons[kind].click)
            dashboard_menu.addAction(action)

        dashboard_menu.addSeparator()
        for channel, action_name in [
            (ActiveChannel.NORMAL, "channel_normal"),
            (ActiveChannel.ABNORMAL, "channel_abnormal"),
        ]:
            action = QAction(f"{channel.value.capitalize()} ECG", self)
            action.setShortcut(get_keysequence(action_name))
            action.triggered.connect(lambda checked=False, c=channel: self.channel_tabs.setCurrentIndex(c.tab_index))
            dashboard_menu.addAction(action)

        dismiss_action = QAction("Dismiss Error", self)
        dismiss_action.setShortcut(get_keysequence("dismiss_error"))
        dismiss_action.triggered.connect(lambda: self.dispatch(self.controller.dismiss_error))
        dashboard_menu.addAction(dismiss_action)

        dashboard_menu.addSeparator()
        quit_action = QAction("E&xit", self)
        quit_action.setShortcut(get_keysequence("app_quit"))
        quit_action.triggered.connect(self.close)
        dashboard_menu.addAction(quit_action)

        help_menu = self.menuBar().addMenu("&Help")
        shortcuts_action = QAction("Keyboard Shortcuts", self)
        shortcuts_action.setShortcut(get_keysequence("help_show"))
        shortcuts_action.triggered.connect(
            lambda: QMessageBox.information(self, "Keyboard Shortcuts", get_help_text())
        )
        help_menu.addAction(shortcuts_action)

    # ---- User actions ----

    def _on_generate_signal(self):
        self.dispatch(self.controller.generate_signal)

    def _on_train_model(self):
        self.dispatch(self.controller.train_model)

    def _on_compute_risk(self):
        self.dispatch(self.controller.request_compute_risk)

    def _on_render_chart(self):
        self.dispatch(self.controller.render_chart)

    def _on_tab_changed(self, index: int):
        self.dispatch(self.controller.set_active_channel, ActiveChannel.from_tab_index(index))

    def _on_slider_changed(self, value: int):
        level = value / self.config.level_slider_steps
        # Immediate local feedback; the snapshot confirms it shortly after
        self._show_level(level)
        self.dispatch(self.controller.set_abnormality_level, level)

    # ---- Rendering ----

    def render(self, snapshot: DashboardSnapshot):
        """Redraw every widget from a snapshot."""
        self._snapshot = snapshot

        if snapshot.error_message:
            self.error_label.setText(snapshot.error_message)
            self.error_label.show()
        else:
            self.error_label.hide()

        for kind, button in self.operation_buttons.items():
            pending = snapshot.is_pending(kind)
            button.setText("Working..." if pending else kind.label)
            button.setEnabled(not pending)
        self.operation_buttons[OperationKind.COMPUTE_RISK].setEnabled(snapshot.can_compute_risk)

        self._show_level(snapshot.abnormality_level)
        self._set_slider(snapshot.abnormality_level)

        self._render_signal(snapshot)
        self._render_risk(snapshot.risk_assessment)
        self._render_metrics(snapshot.model_metrics)
        self._render_chart(snapshot)
        self.status_bar.update_from_snapshot(snapshot)

    def _render_signal(self, snapshot: DashboardSnapshot):
        if snapshot.signal_bundle is None:
            self.signal_box.hide()
            self.plot_widget.clear_series()
            return

        channel = snapshot.active_channel
        self.channel_tabs.blockSignals(True)
        self.channel_tabs.setCurrentIndex(channel.tab_index)
        self.channel_tabs.blockSignals(False)

        times, amplitudes = project_arrays(snapshot.signal_bundle, channel)
        self.plot_widget.set_series(times, amplitudes, channel)
        self.signal_type_label.setText(f"Signal Type: {channel.value.capitalize()}")
        self.signal_box.show()

    def _render_risk(self, risk: RiskAssessment | None):
        if risk is None:
            self.risk_box.hide()
            return

        colors = {
            RiskLevel.LOW: self.config.risk_color_low,
            RiskLevel.MODERATE: self.config.risk_color_moderate,
            RiskLevel.HIGH: self.config.risk_color_high,
        }
        self.risk_probability_label.setText(f"{risk.probability_percent:g}% Risk")
        self.risk_probability_label.setStyleSheet(f"QLabel {{ color: {colors[risk.risk_level]}; }}")
        self.risk_level_label.setText(f"Risk Level: {risk.risk_level.value}")

        if risk.risk_factors:
            self.risk_factors_label.setText("Risk Factors:\n" + "\n".join(f"  • {f}" for f in risk.risk_factors))
            self.risk_factors_label.show()
        else:
            self.risk_factors_label.hide()
        self.recommendations_label.setText(
            "Recommendations:\n" + "\n".join(f"  • {r}" for r in risk.recommendations)
        )
        self.risk_box.show()

    def _render_metrics(self, metrics: ModelMetrics | None):
        if metrics is None:
            self.metrics_box.hide()
            return
        self.metric_labels["accuracy"].setText(format_percent(metrics.accuracy, 2))
        self.metric_labels["f1"].setText(format_percent(metrics.f1, 2))
        self.metric_labels["roc_auc"].setText(format_percent(metrics.roc_auc, 2))
        self.metrics_box.show()

    def _render_chart(self, snapshot: DashboardSnapshot):
        chart = snapshot.chart_image
        if chart is None:
            self.chart_box.hide()
            return

        pixmap = QPixmap()
        try:
            loaded = pixmap.loadFromData(chart.to_bytes())
        except ValueError as e:
            logger.warning(f"Chart payload could not be decoded: {e}")
            loaded = False

        if loaded:
            if pixmap.height() > self.config.chart_max_height:
                pixmap = pixmap.scaledToHeight(
                    self.config.chart_max_height, Qt.TransformationMode.SmoothTransformation
                )
            self.chart_label.setPixmap(pixmap)
        else:
            self.chart_label.setText("Chart image could not be displayed")
        self.chart_box.show()

    def _show_level(self, level: float):
        self.level_label.setText(f"Abnormality Level: {format_percent(level)}")

    def _set_slider(self, level: float):
        self.level_slider.blockSignals(True)
        self.level_slider.setValue(round(level * self.config.level_slider_steps))
        self.level_slider.blockSignals(False)

"""PyQtGraph plot widget for the projected ECG series."""
from __future__ import annotations

import numpy as np
import pyqtgraph as pg
from loguru import logger

from cardio_dashboard.config import GUIConfig, get_config
from cardio_dashboard.core.data_models import ActiveChannel


class EcgPlotWidget(pg.PlotWidget):
    """Line plot of the active channel's amplitude over time.

    Only ever receives freshly projected arrays; it holds no reference to the
    signal bundle itself.
    """

    def __init__(self, config: GUIConfig | None = None, parent=None):
        super().__init__(parent=parent)

        self.config = config or get_config().gui
        self.plot_curve: pg.PlotDataItem | None = None
        self._setup_plot()

        logger.debug("EcgPlotWidget initialized")

    def _setup_plot(self):
        """Configure plot appearance and settings."""
        plot_item = self.plotItem
        self.setBackground(self.config.plot_background)
        plot_item.showGrid(x=True, y=True, alpha=self.config.grid_alpha)
        plot_item.setLabel("bottom", "Time", units="s")
        plot_item.setLabel("left", "Amplitude")
        plot_item.addLegend()

        view_box = plot_item.getViewBox()
        view_box.setMouseMode(view_box.PanMode)
        view_box.setAspectLocked(False)

    def set_series(self, times: np.ndarray, amplitudes: np.ndarray, channel: ActiveChannel):
        """Replace the plotted series.

        Args:
            times: Time axis of the projection
            amplitudes: Amplitudes of the active channel
            channel: Channel the amplitudes belong to (used for the title)
        """
        pen = pg.mkPen(color=self.config.plot_line_color, width=1)
        if self.plot_curve is None:
            self.plot_curve = self.plotItem.plot(times, amplitudes, pen=pen, name="ECG Signal")
        else:
            self.plot_curve.setData(times, amplitudes)

        self.plotItem.setTitle(f"{channel.value.capitalize()} ECG")
        if len(times) > 0:
            self.plotItem.getViewBox().autoRange(padding=0.05)

    def clear_series(self):
        """Remove the plotted series."""
        if self.plot_curve is not None:
            self.plot_curve.setData([], [])
        self.plotItem.setTitle(None)

    @property
    def num_points(self) -> int:
        """Number of points currently plotted."""
        if self.plot_curve is None or self.plot_curve.xData is None:
            return 0
        return len(self.plot_curve.xData)

"""GUI components for CardioDashboard."""
from .main_window import MainWindow
from .plot_widget import EcgPlotWidget
from .status_bar import AppStatusBar

__all__ = [
    "MainWindow",
    "EcgPlotWidget",
    "AppStatusBar",
]

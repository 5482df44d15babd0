"""CardioDashboard: desktop client for the synthetic ECG risk backend."""

__version__ = "0.1.0"

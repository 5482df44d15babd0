"""Derived, plot-ready views of the signal bundle."""

from cardio_dashboard.processing.projection import project, project_arrays

__all__ = [
    "project",
    "project_arrays",
]

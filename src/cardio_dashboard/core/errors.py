"""Exception hierarchy for the dashboard orchestration core.

Every failure that reaches the user-facing error slot is a DashboardError
with a single human-readable message. InvalidTransition is the exception
that is never surfaced (duplicate click on a pending operation).
"""
from __future__ import annotations


class DashboardError(Exception):
    """Base class for all dashboard errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class PreconditionError(DashboardError):
    """A dependency between operations is not satisfied."""


class ValidationError(DashboardError, ValueError):
    """User input is out of range or otherwise invalid."""


class NetworkError(DashboardError):
    """The backend could not be reached."""


class ServerError(DashboardError):
    """The backend answered with a non-success status."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class MalformedResponseError(ServerError):
    """The backend answered 2xx but the payload could not be decoded."""


class InvalidTransition(DashboardError):
    """Operation lifecycle transition not allowed from the current status."""

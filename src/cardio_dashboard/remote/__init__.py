"""Backend transport and the remote operation gateway."""

from cardio_dashboard.remote.client import BackendClient
from cardio_dashboard.remote.endpoints import Endpoint, Endpoints
from cardio_dashboard.remote.gateway import (
    FAILURE_MESSAGES,
    RemoteOperationGateway,
)

__all__ = [
    "BackendClient",
    "Endpoint",
    "Endpoints",
    "FAILURE_MESSAGES",
    "RemoteOperationGateway",
]

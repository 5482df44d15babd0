"""Core data models, errors and the operation status store for CardioDashboard."""

from .data_models import (
    ActiveChannel,
    ChartImage,
    DashboardSnapshot,
    ModelMetrics,
    OperationKind,
    OperationResult,
    OperationState,
    OperationStatus,
    RiskAssessment,
    RiskLevel,
    SignalBundle,
    SignalPoint,
    StaleRiskPolicy,
)
from .errors import (
    DashboardError,
    InvalidTransition,
    MalformedResponseError,
    NetworkError,
    PreconditionError,
    ServerError,
    ValidationError,
)
from .status_store import OperationStatusStore

__all__ = [
    "ActiveChannel",
    "ChartImage",
    "DashboardSnapshot",
    "ModelMetrics",
    "OperationKind",
    "OperationResult",
    "OperationState",
    "OperationStatus",
    "RiskAssessment",
    "RiskLevel",
    "SignalBundle",
    "SignalPoint",
    "StaleRiskPolicy",
    "DashboardError",
    "InvalidTransition",
    "MalformedResponseError",
    "NetworkError",
    "PreconditionError",
    "ServerError",
    "ValidationError",
    "OperationStatusStore",
]

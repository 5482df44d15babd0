"""Per-operation lifecycle store with typed result slots.

Pure state container: no I/O, no awaiting. Each operation kind has exactly
one live OperationState, created Idle and only ever replaced, never removed.
Results land in a slot matching the kind of the operation that produced them.
"""
from __future__ import annotations

from typing import Any, Callable

import attrs
from loguru import logger

from cardio_dashboard.core.data_models import (
    ChartImage,
    ModelMetrics,
    OperationKind,
    OperationState,
    OperationStatus,
    RiskAssessment,
    SignalBundle,
)
from cardio_dashboard.core.errors import InvalidTransition

# Result type accepted by succeed() for each kind
SLOT_TYPES: dict[OperationKind, type] = {
    OperationKind.GENERATE_SIGNAL: SignalBundle,
    OperationKind.TRAIN_MODEL: ModelMetrics,
    OperationKind.COMPUTE_RISK: RiskAssessment,
    OperationKind.RENDER_CHART: ChartImage,
}

StoreListener = Callable[[OperationKind], None]


class OperationStatusStore:
    """Holds OperationState per kind plus the latest result of each kind.

    Transitions:
    - begin:   any non-Pending status -> Pending (clears error message)
    - succeed: Pending -> Succeeded (stores result, clears error message)
    - fail:    Pending -> Failed (stores message, result slot untouched)
    - reset:   any -> Idle

    A second begin() while Pending raises InvalidTransition, so at most one
    remote call per kind can ever be in flight.
    """

    def __init__(self):
        self._states: dict[OperationKind, OperationState] = {
            kind: OperationState(kind=kind) for kind in OperationKind
        }
        self._results: dict[OperationKind, Any] = {kind: None for kind in OperationKind}
        self._listeners: list[StoreListener] = []

    # ---- Queries ----

    def state(self, kind: OperationKind) -> OperationState:
        return self._states[kind]

    def states(self) -> dict[OperationKind, OperationState]:
        """Copy of all operation states keyed by kind."""
        return dict(self._states)

    def is_pending(self, kind: OperationKind) -> bool:
        return self._states[kind].is_pending

    def result(self, kind: OperationKind) -> Any:
        return self._results[kind]

    @property
    def signal_bundle(self) -> SignalBundle | None:
        return self._results[OperationKind.GENERATE_SIGNAL]

    @property
    def model_metrics(self) -> ModelMetrics | None:
        return self._results[OperationKind.TRAIN_MODEL]

    @property
    def risk_assessment(self) -> RiskAssessment | None:
        return self._results[OperationKind.COMPUTE_RISK]

    @property
    def chart_image(self) -> ChartImage | None:
        return self._results[OperationKind.RENDER_CHART]

    # ---- Transitions ----

    def begin(self, kind: OperationKind) -> None:
        """Mark kind as in flight.

        Raises:
            InvalidTransition: If kind is already Pending
        """
        current = self._states[kind]
        if current.is_pending:
            raise InvalidTransition(f"{kind.label} is already in progress")
        self._set(kind, OperationStatus.PENDING, None)

    def succeed(self, kind: OperationKind, data: Any) -> None:
        """Complete kind successfully and store its result.

        Passing None completes the operation without touching the result slot.

        Raises:
            InvalidTransition: If kind is not Pending
            TypeError: If data does not match the kind's result type
        """
        self._require_pending(kind, "succeed")
        expected = SLOT_TYPES[kind]
        if data is not None and not isinstance(data, expected):
            raise TypeError(f"{kind.value} result must be {expected.__name__}, got {type(data).__name__}")

        if data is not None:
            self._results[kind] = data
            # A new bundle makes any risk computed from the old one meaningless
            if kind is OperationKind.GENERATE_SIGNAL:
                self._results[OperationKind.COMPUTE_RISK] = None
        self._set(kind, OperationStatus.SUCCEEDED, None)

    def fail(self, kind: OperationKind, message: str) -> None:
        """Mark kind as failed; any previous result stays visible.

        Raises:
            InvalidTransition: If kind is not Pending
        """
        self._require_pending(kind, "fail")
        self._set(kind, OperationStatus.FAILED, message)

    def reset(self, kind: OperationKind) -> None:
        """Return kind to Idle. Results are kept."""
        self._set(kind, OperationStatus.IDLE, None)

    def clear_risk(self) -> None:
        """Drop the current RiskAssessment, if any."""
        if self._results[OperationKind.COMPUTE_RISK] is not None:
            logger.debug("Risk assessment cleared")
            self._results[OperationKind.COMPUTE_RISK] = None
            self._notify(OperationKind.COMPUTE_RISK)

    # ---- Listeners ----

    def add_listener(self, listener: StoreListener) -> None:
        """Call listener(kind) after every transition of kind."""
        self._listeners.append(listener)

    def remove_listener(self, listener: StoreListener) -> None:
        self._listeners.remove(listener)

    # ---- Internals ----

    def _require_pending(self, kind: OperationKind, transition: str) -> None:
        if not self._states[kind].is_pending:
            raise InvalidTransition(
                f"Cannot {transition} {kind.value}: status is {self._states[kind].status.value}"
            )

    def _set(self, kind: OperationKind, status: OperationStatus, message: str | None) -> None:
        self._states[kind] = attrs.evolve(self._states[kind], status=status, error_message=message)
        logger.debug(f"{kind.value} -> {status.value}")
        self._notify(kind)

    def _notify(self, kind: OperationKind) -> None:
        for listener in list(self._listeners):
            listener(kind)

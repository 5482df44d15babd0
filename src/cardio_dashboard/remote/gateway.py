"""Remote operation gateway.

Wraps each backend operation behind one contract: begin the operation in the
status store, issue the call, then succeed or fail it. Returns a structured
OperationResult instead of raising, so callers never need try/except around
a button handler.
"""
from __future__ import annotations

import asyncio
from typing import Any, Callable, Sequence

from loguru import logger

from cardio_dashboard.core.data_models import (
    ActiveChannel,
    ChartImage,
    ModelMetrics,
    OperationKind,
    OperationResult,
    RiskAssessment,
    SignalBundle,
)
from cardio_dashboard.core.errors import (
    DashboardError,
    InvalidTransition,
    MalformedResponseError,
)
from cardio_dashboard.core.status_store import OperationStatusStore
from cardio_dashboard.remote.client import BackendClient
from cardio_dashboard.remote.endpoints import Endpoints

FAILURE_MESSAGES = {
    OperationKind.GENERATE_SIGNAL: "Failed to generate ECG data",
    OperationKind.TRAIN_MODEL: "Failed to train model",
    OperationKind.COMPUTE_RISK: "Failed to calculate heart failure risk",
    OperationKind.RENDER_CHART: "Failed to fetch ECG chart",
}

Decoder = Callable[[Any], Any]

_DECODERS: dict[OperationKind, Decoder] = {
    OperationKind.GENERATE_SIGNAL: SignalBundle.from_response,
    OperationKind.TRAIN_MODEL: ModelMetrics.from_response,
    OperationKind.RENDER_CHART: ChartImage.from_response,
}


class RemoteOperationGateway:
    """Runs the four tracked backend operations against a status store.

    Args:
        store: Status store receiving begin/succeed/fail transitions
        client: HTTP transport
        endpoints: Route table (defaults to the standard backend routes)
    """

    def __init__(
        self,
        store: OperationStatusStore,
        client: BackendClient,
        endpoints: Endpoints | None = None,
    ):
        self.store = store
        self.client = client
        self.endpoints = endpoints or Endpoints()

    async def invoke(
        self,
        kind: OperationKind,
        payload: Any = None,
        *,
        decode: Decoder | None = None,
        still_current: Callable[[], bool] | None = None,
    ) -> OperationResult:
        """Run one operation end to end.

        Args:
            kind: Operation to run
            payload: JSON body; None sends no body
            decode: Turns the response body into the kind's result type
            still_current: Checked on success; if it returns False the result
                is dropped and the operation still completes as Succeeded

        Returns:
            OperationResult. A duplicate call while kind is Pending returns a
            skipped result and performs no request.
        """
        try:
            self.store.begin(kind)
        except InvalidTransition as e:
            logger.warning(f"Ignoring duplicate request: {e}")
            return OperationResult(kind=kind, error=e)

        logger.info(f"{kind.label}: started")
        decode = decode or _DECODERS[kind]
        try:
            raw = await self.client.call(self.endpoints.for_kind(kind), payload)
            data = self._decode(kind, decode, raw)
        except DashboardError as e:
            message = f"{FAILURE_MESSAGES[kind]}: {e}"
            logger.error(f"{kind.label} failed: {e!r}")
            self.store.fail(kind, message)
            return OperationResult(kind=kind, error=e, message=message)
        except asyncio.CancelledError:
            logger.warning(f"{kind.label}: cancelled while waiting for backend")
            self.store.fail(kind, f"{FAILURE_MESSAGES[kind]}: cancelled")
            raise
        except Exception as e:
            # Anything unexpected still has to release the Pending state
            message = f"{FAILURE_MESSAGES[kind]}: unexpected error ({type(e).__name__})"
            logger.exception(f"{kind.label} failed unexpectedly")
            self.store.fail(kind, message)
            return OperationResult(kind=kind, error=e, message=message)

        if still_current is not None and not still_current():
            logger.warning(f"{kind.label}: response arrived for a stale selection, discarding")
            self.store.succeed(kind, None)
            return OperationResult(kind=kind)

        self.store.succeed(kind, data)
        logger.info(f"{kind.label}: succeeded")
        return OperationResult(kind=kind, data=data)

    @staticmethod
    def _decode(kind: OperationKind, decode: Decoder, raw: Any) -> Any:
        try:
            return decode(raw)
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise MalformedResponseError(f"unexpected {kind.value} response ({e})") from e

    # ---- Per-operation helpers ----

    async def generate_signal(self) -> OperationResult:
        return await self.invoke(OperationKind.GENERATE_SIGNAL)

    async def train_model(self) -> OperationResult:
        return await self.invoke(OperationKind.TRAIN_MODEL)

    async def compute_risk(
        self,
        amplitudes: Sequence[float],
        channel: ActiveChannel,
        still_current: Callable[[], bool] | None = None,
    ) -> OperationResult:
        """Score the given amplitude sequence.

        The body is the bare JSON array of amplitudes, not a wrapping object.
        """
        return await self.invoke(
            OperationKind.COMPUTE_RISK,
            [float(a) for a in amplitudes],
            decode=lambda raw: RiskAssessment.from_response(raw, channel),
            still_current=still_current,
        )

    async def render_chart(self) -> OperationResult:
        return await self.invoke(OperationKind.RENDER_CHART)

    async def set_abnormality_level(self, level: float) -> None:
        """Push a new abnormality level. Untracked by the status store.

        Raises:
            NetworkError, ServerError: Backend call failed
        """
        await self.client.call(self.endpoints.set_abnormality_level, {"level": level})

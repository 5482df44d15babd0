"""Dashboard controller: the single owner of all dashboard state.

Composes the status store, gateway, dependency guard and parameter streamer
behind explicit transition methods. Views never mutate state; they register
a listener and receive an immutable DashboardSnapshot after every change.

All methods must run on the one event loop that owns the controller.
"""
from __future__ import annotations

from types import MappingProxyType
from typing import TYPE_CHECKING, Callable

from loguru import logger

from cardio_dashboard.core.data_models import (
    ActiveChannel,
    DashboardSnapshot,
    OperationKind,
    OperationResult,
    OperationStatus,
    StaleRiskPolicy,
)
from cardio_dashboard.core.errors import PreconditionError, ValidationError
from cardio_dashboard.core.status_store import OperationStatusStore
from cardio_dashboard.orchestration.guard import require_signal_bundle, risk_payload
from cardio_dashboard.orchestration.streamer import DEFAULT_LEVEL, ParameterStreamer
from cardio_dashboard.processing.projection import project
from cardio_dashboard.remote.client import BackendClient
from cardio_dashboard.remote.endpoints import Endpoints
from cardio_dashboard.remote.gateway import RemoteOperationGateway

if TYPE_CHECKING:
    from cardio_dashboard.config.settings import AppConfig

SnapshotListener = Callable[[DashboardSnapshot], None]


class DashboardController:
    """Orchestrates the four backend operations and the view state around them.

    Args:
        gateway: Gateway bound to the store this controller reads from
        initial_level: Starting abnormality level
        initial_channel: Channel selected at startup
        stale_risk_policy: Whether a risk response that arrives after the
            channel changed (or the bundle was replaced) is applied or dropped
    """

    def __init__(
        self,
        gateway: RemoteOperationGateway,
        initial_level: float = DEFAULT_LEVEL,
        initial_channel: ActiveChannel = ActiveChannel.NORMAL,
        stale_risk_policy: StaleRiskPolicy = StaleRiskPolicy.APPLY,
    ):
        self.gateway = gateway
        self.store: OperationStatusStore = gateway.store
        self.stale_risk_policy = stale_risk_policy
        self.streamer = ParameterStreamer(
            gateway.set_abnormality_level,
            initial_level=initial_level,
            on_error=self._report_error,
        )
        self._channel = initial_channel
        self._error_message: str | None = None
        self._listeners: list[SnapshotListener] = []

        self.store.add_listener(self._on_store_transition)

    @classmethod
    def from_config(cls, config: AppConfig, client: BackendClient | None = None) -> DashboardController:
        """Build store, transport and gateway from application config."""
        backend = config.backend
        if client is None:
            client = BackendClient(base_url=backend.base_url, timeout=backend.timeout)
        gateway = RemoteOperationGateway(
            OperationStatusStore(), client, Endpoints.from_config(backend)
        )
        dashboard = config.dashboard
        return cls(
            gateway,
            initial_level=dashboard.initial_abnormality_level,
            initial_channel=ActiveChannel(dashboard.initial_channel),
            stale_risk_policy=StaleRiskPolicy(dashboard.stale_risk_policy),
        )

    # ---- State access ----

    @property
    def active_channel(self) -> ActiveChannel:
        return self._channel

    @property
    def abnormality_level(self) -> float:
        return self.streamer.level

    @property
    def error_message(self) -> str | None:
        return self._error_message

    def snapshot(self) -> DashboardSnapshot:
        """Immutable view of the current state; the projection is computed fresh."""
        bundle = self.store.signal_bundle
        return DashboardSnapshot(
            operations=MappingProxyType(self.store.states()),
            active_channel=self._channel,
            abnormality_level=self.streamer.level,
            projection=project(bundle, self._channel),
            signal_bundle=bundle,
            risk_assessment=self.store.risk_assessment,
            model_metrics=self.store.model_metrics,
            chart_image=self.store.chart_image,
            error_message=self._error_message,
        )

    def add_listener(self, listener: SnapshotListener) -> None:
        """Call listener(snapshot) after every state change."""
        self._listeners.append(listener)

    def remove_listener(self, listener: SnapshotListener) -> None:
        self._listeners.remove(listener)

    # ---- Remote operations ----

    async def generate_signal(self) -> OperationResult:
        return await self.gateway.generate_signal()

    async def train_model(self) -> OperationResult:
        return await self.gateway.train_model()

    async def render_chart(self) -> OperationResult:
        return await self.gateway.render_chart()

    async def request_compute_risk(self) -> OperationResult:
        """Score the active channel of the current bundle.

        The channel and its amplitudes are captured now, before the request
        is sent, so a later tab switch cannot change what is scored.

        Raises:
            PreconditionError: No ECG data yet; nothing is sent and the
                ComputeRisk status is left untouched
        """
        try:
            bundle = require_signal_bundle(self.store)
        except PreconditionError as e:
            self._report_error(e.message)
            raise

        channel = self._channel
        still_current = None
        if self.stale_risk_policy is StaleRiskPolicy.DISCARD:
            def still_current() -> bool:
                return self._channel is channel and self.store.signal_bundle is bundle

        return await self.gateway.compute_risk(risk_payload(bundle, channel), channel, still_current)

    # ---- Local transitions ----

    def set_active_channel(self, channel: ActiveChannel) -> None:
        """Select a channel; always clears the risk assessment."""
        if not isinstance(channel, ActiveChannel):
            raise TypeError(f"channel must be ActiveChannel, got {type(channel).__name__}")
        logger.info(f"Active channel: {channel.value}")
        self._channel = channel
        self.store.clear_risk()
        self._publish()

    def set_abnormality_level(self, value) -> float:
        """Update the abnormality level locally and stream it to the backend.

        Raises:
            ValidationError: If value is outside [0, 1]; the level is unchanged
        """
        try:
            level = self.streamer.set_level(value)
        except ValidationError as e:
            self._report_error(e.message)
            raise
        self._publish()
        return level

    def dismiss_error(self) -> None:
        self._error_message = None
        self._publish()

    async def aclose(self) -> None:
        """Let outstanding level pushes finish, then close the transport."""
        try:
            await self.streamer.wait_idle()
        finally:
            await self.gateway.client.aclose()
        logger.info("Dashboard controller closed")

    # ---- Internals ----

    def _on_store_transition(self, kind: OperationKind) -> None:
        state = self.store.state(kind)
        if state.status is OperationStatus.PENDING:
            # Starting any action dismisses the previous error
            self._error_message = None
        elif state.status is OperationStatus.FAILED:
            self._error_message = state.error_message
        self._publish()

    def _report_error(self, message: str) -> None:
        logger.warning(f"Dashboard error: {message}")
        self._error_message = message
        self._publish()

    def _publish(self) -> None:
        if not self._listeners:
            return
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            listener(snapshot)

"""Dependency checks evaluated before an operation contacts the backend."""
from __future__ import annotations

from cardio_dashboard.core.data_models import ActiveChannel, SignalBundle
from cardio_dashboard.core.errors import PreconditionError
from cardio_dashboard.core.status_store import OperationStatusStore

SIGNAL_REQUIRED_MESSAGE = "ECG data required"


def require_signal_bundle(store: OperationStatusStore) -> SignalBundle:
    """Return the current bundle or refuse before any request is made.

    Raises:
        PreconditionError: If no GenerateSignal call has succeeded yet
    """
    bundle = store.signal_bundle
    if bundle is None:
        raise PreconditionError(SIGNAL_REQUIRED_MESSAGE)
    return bundle


def risk_payload(bundle: SignalBundle, channel: ActiveChannel) -> list[float]:
    """Amplitude sequence sent to risk scoring, captured at call time."""
    return bundle.amplitudes(channel).tolist()

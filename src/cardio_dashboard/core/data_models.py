"""Data models for the dashboard orchestration core.

Uses attrs with validators for type-safe, validated data containers. Models
that leave the core (bundles, assessments, snapshots) are frozen; the view
layer only ever sees immutable values.
"""
from __future__ import annotations

import base64
import binascii
from enum import Enum
from typing import Any, Mapping

import attrs
import numpy as np
from attrs import field, frozen

from cardio_dashboard.core.errors import InvalidTransition


class OperationKind(Enum):
    """The four independently tracked backend operations."""

    GENERATE_SIGNAL = "generate_signal"
    TRAIN_MODEL = "train_model"
    COMPUTE_RISK = "compute_risk"
    RENDER_CHART = "render_chart"

    @property
    def label(self) -> str:
        """Button caption used by the view."""
        return _KIND_LABELS[self]


_KIND_LABELS = {
    OperationKind.GENERATE_SIGNAL: "Generate ECG",
    OperationKind.TRAIN_MODEL: "Train Model",
    OperationKind.COMPUTE_RISK: "Calculate Heart Failure Risk",
    OperationKind.RENDER_CHART: "View ECG Chart",
}


class OperationStatus(Enum):
    """Lifecycle of a single operation kind."""

    IDLE = "idle"
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class ActiveChannel(Enum):
    """Signal variant selected by the Normal/Abnormal tab."""

    NORMAL = "normal"
    ABNORMAL = "abnormal"

    @property
    def tab_index(self) -> int:
        return 0 if self is ActiveChannel.NORMAL else 1

    @classmethod
    def from_tab_index(cls, index: int) -> ActiveChannel:
        return cls.NORMAL if index == 0 else cls.ABNORMAL


class RiskLevel(Enum):
    """Heart failure risk categories reported by the backend."""

    LOW = "Low"
    MODERATE = "Moderate"
    HIGH = "High"

    @classmethod
    def parse(cls, value: str) -> RiskLevel:
        """Parse a backend risk level string (case-insensitive)."""
        if not isinstance(value, str):
            raise TypeError(f"risk_level must be str, got {type(value).__name__}")
        for level in cls:
            if level.value.lower() == value.strip().lower():
                return level
        raise ValueError(f"Unknown risk level: {value!r}")


class StaleRiskPolicy(Enum):
    """What to do with a risk response that outlived its channel selection."""

    APPLY = "apply"  # Observed dashboard behavior
    DISCARD = "discard"


def _as_readonly_array(value: Any) -> np.ndarray:
    """Converter: copy into a non-writeable float64 array."""
    array = np.array(value, dtype=np.float64)
    array.setflags(write=False)
    return array


def _validate_ndarray_1d(instance, attribute, value):
    """Validator: ensure value is a 1D numpy array."""
    if not isinstance(value, np.ndarray):
        raise TypeError(f"{attribute.name} must be ndarray, got {type(value).__name__}")
    if value.ndim != 1:
        raise ValueError(f"{attribute.name} must be 1D, got shape {value.shape}")


def _validate_finite(instance, attribute, value):
    """Validator: ensure every element is a finite number."""
    if not np.all(np.isfinite(value)):
        raise ValueError(f"{attribute.name} must contain only finite values")


def _validate_unit_interval(instance, attribute, value):
    """Validator: ensure value lies in [0, 1]."""
    if not 0.0 <= value <= 1.0:
        raise ValueError(f"{attribute.name} must be in [0, 1], got {value}")


def _validate_percent(instance, attribute, value):
    """Validator: ensure value lies in [0, 100]."""
    if not 0.0 <= value <= 100.0:
        raise ValueError(f"{attribute.name} must be in [0, 100], got {value}")


def _validate_str_items(instance, attribute, value):
    """Validator: ensure a tuple contains only strings."""
    for item in value:
        if not isinstance(item, str):
            raise TypeError(f"{attribute.name} must contain only str, got {type(item).__name__}")


def _as_str_tuple(value: Any) -> tuple[str, ...]:
    if isinstance(value, str):
        raise TypeError("expected a sequence of strings, got a single str")
    return tuple(value)


def _as_float(value: Any) -> float:
    if isinstance(value, bool):
        raise TypeError("expected a number, got bool")
    return float(value)


@frozen
class OperationState:
    """Live status of one operation kind."""

    kind: OperationKind = field(validator=attrs.validators.instance_of(OperationKind))
    status: OperationStatus = field(
        default=OperationStatus.IDLE, validator=attrs.validators.instance_of(OperationStatus)
    )
    error_message: str | None = field(
        default=None, validator=attrs.validators.optional(attrs.validators.instance_of(str))
    )

    @property
    def is_pending(self) -> bool:
        return self.status is OperationStatus.PENDING


@frozen(eq=False)
class SignalBundle:
    """Synthetic ECG dataset: time axis plus normal and abnormal amplitudes.

    All three arrays are copied on construction and marked read-only, so a
    bundle can only be replaced as a whole, never patched in place.
    """

    time: np.ndarray = field(converter=_as_readonly_array, validator=[_validate_ndarray_1d, _validate_finite])
    normal_amplitude: np.ndarray = field(
        converter=_as_readonly_array, validator=[_validate_ndarray_1d, _validate_finite]
    )
    abnormal_amplitude: np.ndarray = field(
        converter=_as_readonly_array, validator=[_validate_ndarray_1d, _validate_finite]
    )

    def __attrs_post_init__(self):
        """Validate all three sequences have the same length."""
        n = len(self.time)
        if len(self.normal_amplitude) != n or len(self.abnormal_amplitude) != n:
            raise ValueError(
                f"time ({n}), normal_amplitude ({len(self.normal_amplitude)}) and "
                f"abnormal_amplitude ({len(self.abnormal_amplitude)}) must have same length"
            )

    @property
    def num_samples(self) -> int:
        return len(self.time)

    def amplitudes(self, channel: ActiveChannel) -> np.ndarray:
        """Amplitude array for the given channel."""
        if channel is ActiveChannel.NORMAL:
            return self.normal_amplitude
        return self.abnormal_amplitude

    @classmethod
    def from_response(cls, data: Mapping[str, Any]) -> SignalBundle:
        """Build from the backend's {time, normal_ecg, abnormal_ecg} payload."""
        return cls(
            time=data["time"],
            normal_amplitude=data["normal_ecg"],
            abnormal_amplitude=data["abnormal_ecg"],
        )


@frozen
class SignalPoint:
    """One plot-ready sample of the derived projection."""

    time: float
    amplitude: float


@frozen
class RiskAssessment:
    """Heart failure risk computed for one channel of the current bundle."""

    probability_percent: float = field(converter=_as_float, validator=_validate_percent)
    risk_level: RiskLevel = field(validator=attrs.validators.instance_of(RiskLevel))
    risk_factors: tuple[str, ...] = field(factory=tuple, converter=_as_str_tuple, validator=_validate_str_items)
    recommendations: tuple[str, ...] = field(factory=tuple, converter=_as_str_tuple, validator=_validate_str_items)
    channel: ActiveChannel = field(
        default=ActiveChannel.NORMAL, validator=attrs.validators.instance_of(ActiveChannel)
    )

    @classmethod
    def from_response(cls, data: Mapping[str, Any], channel: ActiveChannel) -> RiskAssessment:
        return cls(
            probability_percent=data["heart_failure_probability"],
            risk_level=RiskLevel.parse(data["risk_level"]),
            risk_factors=data.get("risk_factors", ()),
            recommendations=data.get("recommendations", ()),
            channel=channel,
        )


@frozen
class ModelMetrics:
    """Evaluation metrics of the most recently trained model."""

    accuracy: float = field(converter=_as_float, validator=_validate_unit_interval)
    f1: float = field(converter=_as_float, validator=_validate_unit_interval)
    roc_auc: float = field(converter=_as_float, validator=_validate_unit_interval)

    @classmethod
    def from_response(cls, data: Mapping[str, Any]) -> ModelMetrics:
        return cls(accuracy=data["accuracy"], f1=data["f1"], roc_auc=data["roc_auc"])


@frozen
class ChartImage:
    """Rendered chart as a base64 encoded image payload."""

    data: str = field(validator=attrs.validators.instance_of(str))
    mime_type: str = field(default="image/png", validator=attrs.validators.instance_of(str))

    @data.validator
    def _check_not_empty(self, attribute, value):
        if not value.strip():
            raise ValueError("chart image payload is empty")

    def to_bytes(self) -> bytes:
        """Decode the base64 payload."""
        try:
            return base64.b64decode(self.data)
        except binascii.Error as e:
            raise ValueError(f"chart image is not valid base64: {e}") from e

    def data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.data}"

    @classmethod
    def from_response(cls, payload: Any) -> ChartImage:
        """Accept either the bare base64 string or an {"image": ...} object."""
        if isinstance(payload, Mapping):
            return cls(data=payload["image"], mime_type=payload.get("mime_type", "image/png"))
        return cls(data=payload)


@frozen
class OperationResult:
    """Outcome of one gateway invocation.

    ``data`` is set on success, ``error`` on failure. A rejected duplicate
    invocation carries an InvalidTransition error and is ``skipped``.
    """

    kind: OperationKind
    data: Any = None
    error: Exception | None = None
    message: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def skipped(self) -> bool:
        return isinstance(self.error, InvalidTransition)


@frozen(eq=False)
class DashboardSnapshot:
    """Read-only view of the whole dashboard state, handed to the view layer."""

    operations: Mapping[OperationKind, OperationState]
    active_channel: ActiveChannel
    abnormality_level: float
    projection: tuple[SignalPoint, ...] = ()
    signal_bundle: SignalBundle | None = None
    risk_assessment: RiskAssessment | None = None
    model_metrics: ModelMetrics | None = None
    chart_image: ChartImage | None = None
    error_message: str | None = None

    def state(self, kind: OperationKind) -> OperationState:
        return self.operations[kind]

    def is_pending(self, kind: OperationKind) -> bool:
        return self.operations[kind].is_pending

    @property
    def can_compute_risk(self) -> bool:
        """Mirrors the enabled state of the risk button."""
        return self.signal_bundle is not None and not self.is_pending(OperationKind.COMPUTE_RISK)

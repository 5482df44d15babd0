"""Backend route table.

Each tracked operation maps to one HTTP route; the abnormality level push is
an untracked extra route.
"""
from __future__ import annotations

from typing import TYPE_CHECKING

import attrs
from attrs import field, frozen

from cardio_dashboard.core.data_models import OperationKind

if TYPE_CHECKING:
    from cardio_dashboard.config.settings import BackendConfig


@frozen
class Endpoint:
    """HTTP method and path of one backend route."""

    method: str = field(validator=attrs.validators.in_(["GET", "POST"]))
    path: str = field(validator=attrs.validators.instance_of(str))

    def __str__(self) -> str:
        return f"{self.method} {self.path}"


@frozen
class Endpoints:
    """All routes consumed by the gateway."""

    generate_signal: Endpoint = Endpoint("POST", "/api/generate-ecg")
    train_model: Endpoint = Endpoint("POST", "/api/train-model")
    compute_risk: Endpoint = Endpoint("POST", "/api/calculate-heart-failure-risk")
    render_chart: Endpoint = Endpoint("GET", "/api/plot-ecg")
    set_abnormality_level: Endpoint = Endpoint("POST", "/api/set-abnormality-level")

    def for_kind(self, kind: OperationKind) -> Endpoint:
        return getattr(self, kind.value)

    @classmethod
    def from_config(cls, config: BackendConfig) -> Endpoints:
        return cls(
            generate_signal=Endpoint("POST", config.generate_signal_path),
            train_model=Endpoint("POST", config.train_model_path),
            compute_risk=Endpoint("POST", config.compute_risk_path),
            render_chart=Endpoint("GET", config.render_chart_path),
            set_abnormality_level=Endpoint("POST", config.set_level_path),
        )

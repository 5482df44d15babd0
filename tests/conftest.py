"""Shared fixtures: an in-memory backend served through httpx.MockTransport."""
import asyncio
import os
from typing import Callable

import httpx
import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from cardio_dashboard.core import OperationStatusStore
from cardio_dashboard.orchestration import DashboardController
from cardio_dashboard.remote import BackendClient, RemoteOperationGateway

GENERATE_PATH = "/api/generate-ecg"
TRAIN_PATH = "/api/train-model"
RISK_PATH = "/api/calculate-heart-failure-risk"
CHART_PATH = "/api/plot-ecg"
LEVEL_PATH = "/api/set-abnormality-level"

ECG_PAYLOAD = {
    "time": [0, 1, 2],
    "normal_ecg": [0.1, 0.2, 0.1],
    "abnormal_ecg": [0.9, 0.1, 0.9],
}
METRICS_PAYLOAD = {"accuracy": 0.9, "f1": 0.85, "roc_auc": 0.95}
RISK_PAYLOAD = {
    "heart_failure_probability": 42.0,
    "risk_level": "Moderate",
    "risk_factors": ["ST segment elevation"],
    "recommendations": ["Consult a cardiologist"],
}
# Base64 of the 8-byte PNG signature
CHART_PAYLOAD = "iVBORw0KGgo="


class FakeBackend:
    """Scriptable backend that records every request it receives.

    Routes map a path to a factory producing a fresh httpx.Response. A path
    can be gated with an asyncio.Event so a test controls when it answers.
    """

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self._routes: dict[str, Callable[[httpx.Request], httpx.Response]] = {}
        self._gates: dict[str, asyncio.Event] = {}

    def route(self, path: str, json=None, status: int = 200, text: str | None = None):
        if text is not None:
            self._routes[path] = lambda request: httpx.Response(status, text=text)
        else:
            self._routes[path] = lambda request: httpx.Response(status, json=json)

    def route_undecodable(self, path: str):
        """Answer 200 with a body that claims gzip encoding but is not gzip."""
        self._routes[path] = lambda request: httpx.Response(
            200,
            content=b"not gzip at all",
            headers={"content-encoding": "gzip", "content-type": "application/json"},
        )

    def route_error(self, path: str, exc_type=httpx.ConnectError):
        def raise_error(request):
            raise exc_type("connection refused", request=request)

        self._routes[path] = raise_error

    def gate(self, path: str) -> asyncio.Event:
        """Hold responses on path until the returned event is set (call inside a loop)."""
        event = asyncio.Event()
        self._gates[path] = event
        return event

    def calls(self, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path == path]

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        gate = self._gates.get(request.url.path)
        if gate is not None:
            await gate.wait()
        factory = self._routes.get(request.url.path)
        if factory is None:
            return httpx.Response(404, json={"detail": "Not Found"})
        return factory(request)

    def client(self) -> BackendClient:
        http = httpx.AsyncClient(transport=httpx.MockTransport(self.handler), base_url="http://backend.test")
        return BackendClient(client=http)


@pytest.fixture
def backend():
    """FakeBackend answering every route successfully."""
    fake = FakeBackend()
    fake.route(GENERATE_PATH, json=ECG_PAYLOAD)
    fake.route(TRAIN_PATH, json=METRICS_PAYLOAD)
    fake.route(RISK_PATH, json=RISK_PAYLOAD)
    fake.route(CHART_PATH, json=CHART_PAYLOAD)
    fake.route(LEVEL_PATH, json={"status": "ok"})
    return fake


def make_gateway(backend: FakeBackend) -> RemoteOperationGateway:
    """Gateway with a fresh store talking to the fake backend."""
    return RemoteOperationGateway(OperationStatusStore(), backend.client())


def make_controller(backend: FakeBackend, **kwargs) -> DashboardController:
    """Controller over make_gateway; kwargs go to DashboardController."""
    return DashboardController(make_gateway(backend), **kwargs)

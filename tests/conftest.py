"""
Shared fixtures: fake Voyado / Dixa APIs on httpx.MockTransport and a
TestClient wired to them through dependency overrides.

Run:  pytest tests/ -v
"""

import json
from typing import Any, Callable, Dict, List, Tuple

import httpx
import pytest
from fastapi.testclient import TestClient

from app import dependencies
from app.config import Settings
from app.services.background_service import BackgroundJobs
from app.services.csat_orchestrator import CsatOrchestrator
from app.services.dixa_service import DixaService
from app.services.event_sink import EventSink
from app.services.review_orchestrator import ReviewOrchestrator
from app.services.voyado_service import VoyadoService

VOYADO_BASE_URL = "https://voyado.test/api/v3"
DIXA_BASE_URL = "https://dixa.test/v1"


class FakeApi:
    """
    Route table for httpx.MockTransport. Unregistered routes answer 404.
    A route's body may be a callable taking the request and returning an
    httpx.Response (or raising, to simulate network errors).
    """

    def __init__(self, prefix: str = ""):
        self.prefix = prefix
        self.routes: Dict[Tuple[str, str], Any] = {}
        self.requests: List[httpx.Request] = []

    def add(self, method: str, path: str, status: int = 200, json_body: Any = None,
            text: str = None, handler: Callable = None):
        self.routes[(method, self.prefix + path)] = (status, json_body, text, handler)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"message": "not found"})
        status, json_body, text, handler = route
        if handler is not None:
            return handler(request)
        if text is not None:
            return httpx.Response(status, text=text)
        return httpx.Response(status, json=json_body)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self._handle)

    def calls(self, method: str, path: str) -> List[httpx.Request]:
        full_path = self.prefix + path
        return [r for r in self.requests if r.method == method and r.url.path == full_path]

    def sent_json(self, method: str, path: str) -> List[Any]:
        return [json.loads(r.content) for r in self.calls(method, path)]


@pytest.fixture
def voyado_api():
    return FakeApi("/api/v3")


@pytest.fixture
def dixa_api():
    return FakeApi("/v1")


@pytest.fixture
def settings():
    return Settings(
        voyado_base_url=VOYADO_BASE_URL,
        voyado_api_key="test-api-key",
        dixa_api_token="env-token",
        dixa_email_integration_id="env-integration",
    )


@pytest.fixture
def voyado_service(voyado_api):
    return VoyadoService(VOYADO_BASE_URL, "test-api-key", transport=voyado_api.transport)


@pytest.fixture
def dixa_service(dixa_api):
    return DixaService(DIXA_BASE_URL, transport=dixa_api.transport)


@pytest.fixture
def event_sink():
    return EventSink(capacity=1)


@pytest.fixture
def background_jobs():
    return BackgroundJobs()


@pytest.fixture
def csat_orchestrator(voyado_service, event_sink, settings):
    return CsatOrchestrator(voyado_service, event_sink, settings.voyado_csat_schema_id)


@pytest.fixture
def review_orchestrator(voyado_service, dixa_service, settings):
    return ReviewOrchestrator(voyado_service, dixa_service, settings)


@pytest.fixture
def client(settings, voyado_service, dixa_service, event_sink, background_jobs,
           csat_orchestrator, review_orchestrator):
    from main import app

    app.dependency_overrides = {
        dependencies.get_settings: lambda: settings,
        dependencies.get_voyado_service: lambda: voyado_service,
        dependencies.get_dixa_service: lambda: dixa_service,
        dependencies.get_event_sink: lambda: event_sink,
        dependencies.get_background_jobs: lambda: background_jobs,
        dependencies.get_csat_orchestrator: lambda: csat_orchestrator,
        dependencies.get_review_orchestrator: lambda: review_orchestrator,
    }
    yield TestClient(app)
    app.dependency_overrides = {}


def rating_payload(score: int = 5, comment: str = "Great", email: str = "a@b.com", **conversation) -> dict:
    return {
        "event_id": "evt-123",
        "event_fqn": "CONVERSATION_RATED",
        "event_version": "1",
        "data": {
            "conversation": {
                "requester": {"name": "A", "email": email},
                **conversation,
            },
            "score": score,
            "comment": comment,
            "type": "Csat",
        },
    }


@pytest.fixture
def make_rating():
    return rating_payload

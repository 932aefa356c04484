"""Pytest configuration and fixtures for the ONTAP workflow core tests."""

import json
from typing import Any, Callable, Dict, List

import httpx
import pytest

from ontap_workflow.api_client import OntapAPIClient
from ontap_workflow.config import ClientConfig, OntapTarget


@pytest.fixture
def sample_target() -> OntapTarget:
    """Create a sample ONTAP target for testing."""
    return OntapTarget(
        host="cluster1.example.com",
        port=8443,
        username="admin",
        password="netapp123",
        allow_insecure_tls=True,
    )


@pytest.fixture
def sample_client_config() -> ClientConfig:
    """Create a sample client configuration for testing."""
    return ClientConfig(
        log_level="DEBUG",
        log_json=False,
    )


def json_response(status_code: int = 200, body: Any = None) -> httpx.Response:
    """Build an httpx response with a JSON body."""
    if body is None:
        return httpx.Response(status_code)
    return httpx.Response(
        status_code,
        content=json.dumps(body).encode(),
        headers={"content-type": "application/hal+json"},
    )


class RecordingHandler:
    """MockTransport handler that replays responses and records requests.

    Responses may be httpx responses, exceptions to raise, plain dicts
    (200 with that JSON body) or ``(status_code, body)`` tuples.
    """

    def __init__(self, responses: List[Any]) -> None:
        self.responses = list(responses)
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        if isinstance(response, tuple):
            return json_response(*response)
        if isinstance(response, dict):
            return json_response(200, response)
        return response


@pytest.fixture
def make_client(sample_target: OntapTarget) -> Callable[..., Any]:
    """Factory returning ``(client, handler)`` backed by a mock transport."""

    def _make(*responses: Any, **kwargs: Any):
        handler = RecordingHandler(list(responses))
        client = OntapAPIClient(
            sample_target,
            transport=httpx.MockTransport(handler),
            **kwargs,
        )
        return client, handler

    return _make


@pytest.fixture
def volume_page() -> Callable[..., Dict[str, Any]]:
    """Factory for a page of volume records with an optional next link."""

    def _page(names: List[str], next_href: str | None = None) -> Dict[str, Any]:
        page: Dict[str, Any] = {
            "records": [{"uuid": f"uuid-{n}", "name": n} for n in names],
            "num_records": len(names),
            "_links": {"self": {"href": "/api/storage/volumes"}},
        }
        if next_href:
            page["_links"]["next"] = {"href": next_href}
        return page

    return _page


@pytest.fixture
def env_with_target(monkeypatch):
    """Set environment variables with a test target."""
    monkeypatch.setenv("ONTAP_HOST", "cluster1.example.com")
    monkeypatch.setenv("ONTAP_PORT", "8443")
    monkeypatch.setenv("ONTAP_USERNAME", "admin")
    monkeypatch.setenv("ONTAP_PASSWORD", "netapp123")
    monkeypatch.setenv("ONTAP_ALLOW_INSECURE_TLS", "true")


@pytest.fixture
def env_without_target(monkeypatch):
    """Clear environment variables for target-free testing."""
    for var in ["ONTAP_HOST", "ONTAP_PORT", "ONTAP_USERNAME", "ONTAP_PASSWORD",
                "ONTAP_ALLOW_INSECURE_TLS", "ONTAP_MAX_PAGES", "JOB_TIMEOUT",
                "JOB_POLL_INTERVAL", "REQUEST_TIMEOUT", "LOG_LEVEL"]:
        monkeypatch.delenv(var, raising=False)

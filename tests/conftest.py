"""Pytest configuration and fixtures."""

from typing import Any, Dict, List, Optional

import pytest
import requests

from salesgrid.config.loader import DEFAULT_CONFIG, load_config
from salesgrid.retrieval.client import SalesApiClient

BASE_URL = "https://api.example.test"

SELLERS = [
    {"id": "seller_1", "name": "Alexey Petrov"},
    {"id": "seller_2", "name": "Maria Ivanova"},
]
CUSTOMERS = [
    {"id": "customer_1", "name": "Ivan Sidorov"},
    {"id": "customer_2", "name": "Olga Smirnova"},
]


def make_record(n: int) -> Dict[str, Any]:
    return {
        "receipt_id": f"receipt_{n}",
        "date": "2024-01-01",
        "seller_id": "seller_1" if n % 2 else "seller_2",
        "customer_id": "customer_2",
        "total_amount": 100.5 + n,
    }


class FakeResponse:
    def __init__(self, payload: Any = None, status_code: int = 200, url: str = ""):
        self._payload = payload
        self.status_code = status_code
        self.url = url

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error for url: {self.url}", response=self)

    def json(self) -> Any:
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class FakeSession:
    """Stands in for requests.Session; routes by path and records every call."""

    def __init__(self, routes: Optional[Dict[str, Any]] = None):
        self.routes: Dict[str, Any] = routes or {}
        self.calls: List[str] = []

    def calls_to(self, path: str) -> List[str]:
        return [url for url in self.calls if url.split("?", 1)[0].endswith(f"/{path}")]

    def get(self, url: str, headers=None, timeout=None) -> FakeResponse:
        self.calls.append(url)
        path = url[len(BASE_URL):].lstrip("/").split("?", 1)[0]
        route = self.routes.get(path)
        if route is None:
            return FakeResponse({"detail": "not found"}, status_code=404, url=url)
        if isinstance(route, Exception):
            raise route
        if callable(route):
            return route(url)
        return FakeResponse(route, url=url)


@pytest.fixture
def base_url():
    return BASE_URL


@pytest.fixture
def reference_routes():
    """Reference endpoints for a FakeSession route table."""
    return {"sellers": list(SELLERS), "customers": list(CUSTOMERS)}


@pytest.fixture(name="make_record")
def make_record_fixture():
    return make_record


@pytest.fixture
def make_response():
    """Factory for fake responses: make_response(payload, status_code=200, url="")."""
    return FakeResponse


@pytest.fixture
def make_session():
    """Factory for fake sessions: make_session(routes)."""
    return FakeSession


@pytest.fixture
def make_client():
    """Factory for an API client bound to the fake base URL."""

    def _make(session: FakeSession) -> SalesApiClient:
        return SalesApiClient(BASE_URL, session=session)

    return _make


@pytest.fixture
def fake_session(reference_routes):
    records = [make_record(n) for n in range(1, 4)]
    return FakeSession({"records": {"total": 23, "items": records}, **reference_routes})


@pytest.fixture
def client(fake_session, make_client):
    return make_client(fake_session)


@pytest.fixture
def config(tmp_path, monkeypatch):
    """Built-in defaults pointed at the fake base URL."""
    monkeypatch.delenv("SALESGRID_BASE_URL", raising=False)
    monkeypatch.chdir(tmp_path)
    cfg = load_config()
    cfg["api"]["base_url"] = BASE_URL
    assert cfg["version"] == DEFAULT_CONFIG["version"]
    return cfg

"""Pytest configuration and fixtures for AgroLink tests.

The AgroLink backend is replaced by `FakeBackend`, served through
`httpx.MockTransport`; the app itself is driven in-process through
`httpx.ASGITransport`. Nothing touches the network.
"""

import asyncio
import json
from typing import AsyncGenerator

import httpx
import pytest
import pytest_asyncio

from agrolink.clients.backend import BackendClient, get_http_client
from agrolink.main import app
from agrolink.schemas.harvest import HarvestRequest
from agrolink.wizard.sessions import WizardSessionStore, get_session_store

BACKEND_URL = "http://backend.test/api/"
HARVEST_ID = "665f1c2e9b1e8a0012a4b001"
OTHER_HARVEST_ID = "665f1c2e9b1e8a0012a4b002"
TOKEN = "agronomist-token"


def assigned_harvest(harvest_id: str = HARVEST_ID, **overrides) -> dict:
    data = {
        "_id": harvest_id,
        "crop": "Tomato",
        "harvestDate": "2024-03-15T00:00:00.000Z",
        "expectedYield": "1200",
        "status": "ACCEPTED",
        "personalizedData": {
            "farmLocation": "Nuwara Eliya",
            "soilType": "Loam",
            "farmSize": "5 acres",
        },
    }
    data.update(overrides)
    return data


# ── Fake AgroLink backend ────────────────────────────────────

class FakeBackend:
    """Records every request and answers with canned payloads.

    `overrides` maps (method, path) to (status_code, json_body) and wins over
    the default behaviour; `fail_with` raises a transport error instead.
    While `hold` is set, writes (POST/PUT) wait on it before being answered.
    """

    def __init__(self):
        self.assigned: list[dict] = [
            assigned_harvest(),
            assigned_harvest(OTHER_HARVEST_ID, crop="Carrot"),
        ]
        self.schedules: list[dict] = []
        self.requests: list[httpx.Request] = []
        self.overrides: dict[tuple[str, str], tuple[int, dict | None]] = {}
        self.fail_with: Exception | None = None
        self.hold: asyncio.Event | None = None
        self.held = 0

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and self._path(r) == path]

    @staticmethod
    def _path(request: httpx.Request) -> str:
        return request.url.path.removeprefix("/api")

    async def dispatch(self, request: httpx.Request) -> httpx.Response:
        if self.hold is not None and request.method in ("POST", "PUT"):
            self.held += 1
            await self.hold.wait()
        return self.handler(request)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail_with is not None:
            raise self.fail_with

        key = (request.method, self._path(request))
        if key in self.overrides:
            status_code, body = self.overrides[key]
            return httpx.Response(status_code, json=body)

        if key == ("GET", "/harvest/agronomist/assigned"):
            return httpx.Response(200, json={"items": self.assigned})
        if key == ("GET", "/harvest/schedules"):
            return httpx.Response(200, json={"harvests": self.schedules})
        if request.method == "POST" and key[1].endswith("/schedule"):
            body = json.loads(request.content)
            return httpx.Response(200, json={
                "message": "Harvest schedule created successfully",
                "harvest": {"_id": key[1].split("/")[2], "harvestSchedule": body},
            })
        if request.method == "PUT" and key[1].endswith("/schedule/status"):
            return httpx.Response(200, json={
                "message": "Harvest schedule status updated successfully",
            })
        return httpx.Response(404, json={"error": {"code": "NOT_FOUND", "message": "Route not found"}})


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest_asyncio.fixture
async def http_client(backend: FakeBackend) -> AsyncGenerator[httpx.AsyncClient, None]:
    async with httpx.AsyncClient(
        transport=httpx.MockTransport(backend.dispatch),
        base_url=BACKEND_URL,
    ) as http:
        yield http


@pytest.fixture
def backend_client(http_client: httpx.AsyncClient) -> BackendClient:
    return BackendClient(http_client, token=TOKEN)


@pytest.fixture
def harvest_request() -> HarvestRequest:
    return HarvestRequest.model_validate(assigned_harvest())


# ── App client ───────────────────────────────────────────────

@pytest.fixture
def session_store() -> WizardSessionStore:
    return WizardSessionStore(ttl_seconds=3600)


@pytest_asyncio.fixture
async def client(
    http_client: httpx.AsyncClient,
    session_store: WizardSessionStore,
) -> AsyncGenerator[httpx.AsyncClient, None]:
    """Test client with the backend and session store swapped out."""
    app.dependency_overrides[get_http_client] = lambda: http_client
    app.dependency_overrides[get_session_store] = lambda: session_store

    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://test",
    ) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers() -> dict:
    return {"Authorization": f"Bearer {TOKEN}"}


# ── Test Markers ─────────────────────────────────────────────

def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "api: API tests through the ASGI app")

"""Shared pytest fixtures for PromptForge tests."""
import os
import sys
import json
from pathlib import Path

# Add project root to path and configure settings BEFORE any app imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("REFINE_DELAY_MIN_MS", "0")
os.environ.setdefault("REFINE_DELAY_JITTER_MS", "0")

import httpx
import pytest
from sqlalchemy.orm import sessionmaker

from promptforge.core.database import build_engine, init_local_store
from promptforge.services.mock_refine_service import MockRefinementProvider
from promptforge.storage import LocalStore, RemoteMirror
from promptforge.workspace import PromptWorkspace


OWNER_ID = "owner-1"
REMOTE_URL = "https://remote.test"


class FakeRemote:
    """Stands in for the hosted backend behind an ``httpx.MockTransport``.

    ``mode`` is one of ``ok``, ``reject`` (HTTP 500) or ``down`` (connection
    error). Rows returned by list calls come from ``rows``.
    """

    def __init__(self):
        self.mode = "ok"
        self.rows = []
        self.requests = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.mode == "down":
            raise httpx.ConnectError("remote unreachable", request=request)
        if self.mode == "reject":
            return httpx.Response(500, json={"message": "boom"})
        if request.method == "GET":
            return httpx.Response(200, json=self.rows)
        return httpx.Response(201 if request.method == "POST" else 204)

    def calls(self, method=None, table=None):
        found = []
        for request in self.requests:
            if method and request.method != method:
                continue
            if table and not request.url.path.endswith(f"/rest/v1/{table}"):
                continue
            found.append(request)
        return found

    @staticmethod
    def body(request):
        return json.loads(request.content)


@pytest.fixture
def session_factory(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'local.db'}")
    init_local_store(engine)
    yield sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    engine.dispose()


@pytest.fixture
def store(session_factory):
    return LocalStore(session_factory)


@pytest.fixture
def remote():
    return FakeRemote()


@pytest.fixture
def http_client(remote):
    return httpx.AsyncClient(transport=httpx.MockTransport(remote.handler))


@pytest.fixture
def mirror(http_client):
    return RemoteMirror(REMOTE_URL, api_key="anon-key", access_token="user-token", client=http_client)


@pytest.fixture
def refiner():
    return MockRefinementProvider(min_delay_ms=0, jitter_ms=0)


@pytest.fixture
def workspace(store, mirror, refiner):
    return PromptWorkspace(OWNER_ID, store=store, mirror=mirror, refiner=refiner)

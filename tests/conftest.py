"""
Pytest configuration and fixtures for the CV dashboard tests.
"""

import json
from unittest.mock import AsyncMock

import httpx
import pytest
from fastapi.testclient import TestClient

from cv_dashboard.api.deps import get_ingestion_client, get_profile_service, get_search_engine
from cv_dashboard.core.app import app as fastapi_app
from cv_dashboard.services.profile_service import ProfileService
from cv_dashboard.services.search import SearchProviderClient, SearchRankingEngine
from cv_dashboard.services.store import SupabaseClient
from cv_dashboard.services.upload import IngestionClient


def make_row(record_id: str, created_at: str = "2024-05-01T10:00:00+00:00", **overrides) -> dict:
    row = {
        "id": record_id,
        "skills": json.dumps(["Python", "SQL"]),
        "experience": json.dumps(
            [
                {
                    "period": "2020-2024",
                    "company": "Acme",
                    "location": "Berlin",
                    "position": "Backend Engineer",
                    "details": ["Built APIs"],
                }
            ]
        ),
        "education": json.dumps([{"year": "2019", "degree": "BSc", "institution": "TU Berlin"}]),
        "file_url": f"https://x.supabase.co/storage/v1/object/public/CVs/{record_id}.pdf",
        "created_at": created_at,
        "updated_at": None,
    }
    row.update(overrides)
    return row


@pytest.fixture
def rows():
    return [
        make_row("r1", "2024-05-03T10:00:00+00:00"),
        make_row("r2", "2024-05-02T10:00:00+00:00", skills=["Go", "Kubernetes"]),
        make_row("r3", "2024-05-01T10:00:00+00:00", experience="[not json"),
    ]


@pytest.fixture
def store():
    """Record store double; every async method is an AsyncMock."""
    return AsyncMock(spec=SupabaseClient)


@pytest.fixture
def profile_service(store):
    return ProfileService(store)


def provider_transport(status_code: int = 200, body: str | bytes = "[]", calls: list | None = None):
    """MockTransport standing in for the search webhook."""

    def handler(request: httpx.Request) -> httpx.Response:
        if calls is not None:
            calls.append(json.loads(request.content))
        content = body.encode() if isinstance(body, str) else body
        return httpx.Response(status_code, content=content)

    return httpx.MockTransport(handler)


@pytest.fixture
def make_engine():
    def _make(status_code: int = 200, body: str | bytes = "[]", calls: list | None = None) -> SearchRankingEngine:
        client = SearchProviderClient(
            "https://search.test/webhook", transport=provider_transport(status_code, body, calls)
        )
        return SearchRankingEngine(client)

    return _make


@pytest.fixture
def search_hits():
    return json.dumps(
        [
            {"document": {"pageContent": "...", "metadata": {"supabase_record_id": "r1"}}, "score": 0.9},
            {"document": {"pageContent": "...", "metadata": {"supabase_id": "r2"}}, "score": 0.4},
        ]
    )


@pytest.fixture
def ingestion_requests():
    return []


@pytest.fixture
def make_ingestion_client(ingestion_requests):
    def _make(status_code: int = 200, error: Exception | None = None) -> IngestionClient:
        def handler(request: httpx.Request) -> httpx.Response:
            ingestion_requests.append(request)
            if error is not None:
                raise error
            return httpx.Response(status_code, json={"ok": status_code < 400})

        return IngestionClient("https://ingest.test/webhook", transport=httpx.MockTransport(handler))

    return _make


@pytest.fixture
def api(profile_service, make_engine, search_hits, make_ingestion_client):
    """TestClient with the process-wide services replaced by test doubles.

    The lifespan is not entered, so no Supabase configuration is needed.
    """
    state = {"engine": make_engine(body=search_hits), "ingestion": make_ingestion_client()}
    fastapi_app.dependency_overrides[get_profile_service] = lambda: profile_service
    fastapi_app.dependency_overrides[get_search_engine] = lambda: state["engine"]
    fastapi_app.dependency_overrides[get_ingestion_client] = lambda: state["ingestion"]
    client = TestClient(fastapi_app)
    client.state = state
    yield client
    fastapi_app.dependency_overrides.clear()

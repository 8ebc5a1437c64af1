"""Tests for the composer HTTP surface."""
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from services.composer.app.main import app, get_composer


class StubComposer:
    def __init__(self, results=None, error=None):
        self.results = results or []
        self.error = error
        self.requests = []

    async def run_digests(self, db, request):
        self.requests.append(request)
        if self.error:
            raise self.error
        return self.results


@pytest.fixture
def client():
    with patch("services.composer.app.main.init_db"):
        with TestClient(app) as test_client:
            yield test_client
    app.dependency_overrides.clear()


def test_digest_endpoint_returns_results(client):
    stub = StubComposer(results=[{"user_id": "u1", "success": True, "skipped": "no articles"}])
    app.dependency_overrides[get_composer] = lambda: stub

    response = client.post("/digest", json={"test_all": True})

    assert response.status_code == 200
    assert response.json() == {"success": True, "results": stub.results}
    assert stub.requests[0].test_all is True


def test_digest_endpoint_accepts_empty_body(client):
    stub = StubComposer()
    app.dependency_overrides[get_composer] = lambda: stub

    response = client.post("/digest")

    assert response.status_code == 200
    assert stub.requests[0].user_id is None


def test_digest_endpoint_outer_failure(client):
    app.dependency_overrides[get_composer] = lambda: StubComposer(error=RuntimeError("db down"))

    response = client.post("/digest", json={})

    assert response.status_code == 500
    assert response.json() == {"error": "db down"}


def test_liveness(client):
    assert client.get("/health/live").json() == {"status": "alive", "service": "composer"}

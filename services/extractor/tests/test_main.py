"""Tests for the extractor HTTP surface."""
import uuid

import pytest
from fastapi.testclient import TestClient

from services.extractor import crud
from services.extractor.main import app, get_pipeline
from shared.database.models.article import Article


class StubPipeline:
    def __init__(self, error=None):
        self.error = error
        self.processed = []
        self.failed = []

    async def process(self, request):
        self.processed.append(request)
        if self.error:
            raise self.error

    def mark_failed(self, request, error):
        self.failed.append((request.article_id, str(error)))
        return crud.mark_failed(request.article_id, str(error))


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def test_extract_success(client):
    stub = StubPipeline()
    app.dependency_overrides[get_pipeline] = lambda: stub
    article_id = str(uuid.uuid4())

    response = client.post("/extract", json={"article_id": article_id, "url": "https://example.com"})

    assert response.status_code == 200
    assert response.json() == {"success": True, "article_id": article_id}
    assert stub.processed[0].url == "https://example.com"


def test_extract_failure_marks_article_failed(client, db_session):
    article = Article(id=uuid.uuid4(), user_id=uuid.uuid4(), url="https://example.com")
    db_session.add(article)
    db_session.commit()
    stub = StubPipeline(error=RuntimeError("storage unavailable"))
    app.dependency_overrides[get_pipeline] = lambda: stub

    response = client.post("/extract", json={"article_id": str(article.id), "url": article.url})

    assert response.status_code == 500
    body = response.json()
    assert body["error"] == "storage unavailable"
    assert body["article_id"] == str(article.id)
    assert "RuntimeError" in body["stack"]
    stored = crud.get_article(article.id)
    assert stored.status == "failed"
    assert stored.description == "Extraction failed: storage unavailable"


def test_extract_malformed_body_is_500(client):
    app.dependency_overrides[get_pipeline] = lambda: StubPipeline()
    response = client.post("/extract", json={"url": "https://example.com"})
    assert response.status_code == 500
    assert response.json()["article_id"] is None


def test_health_endpoints(client):
    assert client.get("/health/live").json() == {"status": "alive", "service": "extractor"}
    report = client.get("/health").json()
    assert {check["name"] for check in report["checks"]} >= {"database", "completion", "xai"}
    assert client.get("/health/ready").json()["status"] == "ready"


def test_metrics_endpoint(client):
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "extractor_strategy_attempts_total" in response.text

"""Tests for the scheduler service."""
from unittest.mock import Mock, patch

import requests
import schedule
from fastapi.testclient import TestClient

from services.scheduler.src import main


def _response(payload):
    response = Mock()
    response.json.return_value = payload
    response.raise_for_status.return_value = None
    return response


def test_health_endpoint():
    client = TestClient(main.app)
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


@patch("services.scheduler.src.main.requests.post")
def test_trigger_digest_posts_to_composer(mock_post):
    mock_post.return_value = _response({"success": True, "results": [{"user_id": "u", "success": True}]})

    data = main.trigger_digest()

    assert data["success"] is True
    url = mock_post.call_args.args[0]
    assert url.endswith("/digest")
    assert mock_post.call_args.kwargs["json"] == {}


@patch("services.scheduler.src.main.requests.post")
def test_daily_job_reports_failure_after_retries(mock_post, monkeypatch):
    monkeypatch.setattr(main.trigger_digest.retry, "sleep", lambda seconds: None)
    mock_post.side_effect = requests.ConnectionError("composer down")

    assert main.daily_job() is False
    assert mock_post.call_count == 3


@patch("services.scheduler.src.main.requests.post")
def test_daily_job_success(mock_post):
    mock_post.return_value = _response({"success": True, "results": []})
    assert main.daily_job() is True


def test_register_jobs_uses_configured_time():
    scheduler = schedule.Scheduler()
    job = main.register_jobs(scheduler)
    assert job.at_time.strftime("%H:%M") == main.settings.scheduler.digest_time

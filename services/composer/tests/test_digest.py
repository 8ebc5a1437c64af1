import datetime as dt
import json
import uuid

import pytest

from services.composer.app.digest_utils import (DigestComposer,
                                                project_article,
                                                validate_digest,
                                                yesterday_utc)
from shared.config.settings import CompletionSettings, Settings
from shared.database.models.article import Article
from shared.database.models.digest import Digest
from shared.database.models.user_settings import UserSettings
from shared.schemas.messages import DigestRequest
from shared.utils.completion import CompletionClient

TARGET = dt.date(2026, 3, 14)

DIGEST_JSON = {
    "overall_summary": "You saved two pieces on databases and I noticed a theme.",
    "top_themes": ["databases", "performance", "tooling", "extra"],
    "articles": [{"article_id": "a1", "title": "One", "summary": "s", "highlights": ["h1", "h2", "h3"]}],
    "ai_insights": "Both articles chase write throughput.",
}


class DummyResponse:
    def __init__(self, content):
        msg = type("M", (), {"content": content})
        self.choices = [type("C", (), {"message": msg})]


class DummyCompletions:
    def __init__(self, content):
        self.content = content
        self.calls = []

    async def create(self, *args, **kw):
        self.calls.append(kw)
        if isinstance(self.content, Exception):
            raise self.content
        return DummyResponse(self.content)


class DummyClient:
    def __init__(self, content):
        self.completions = DummyCompletions(content)
        self.chat = self


def composer_with(content):
    settings = Settings(completion=CompletionSettings(api_key="k"))
    client = DummyClient(content)
    return DigestComposer(settings, completion=CompletionClient(settings.completion, client=client)), client


def add_ready_article(db, user_id, created_at, title="Storage engine rewrite", status="ready"):
    article = Article(
        id=uuid.uuid4(),
        user_id=user_id,
        url=f"https://example.com/{uuid.uuid4()}",
        title=title,
        description="desc",
        status=status,
        created_at=created_at,
        analysis={"summary": "An analysis summary", "key_points": ["k1", "k2", "k3"], "topics": ["db"]},
    )
    db.add(article)
    db.commit()
    return article


def test_project_article_prefers_analysis_summary():
    article = Article(id=uuid.uuid4(), title="T", url="u", description="d", analysis={"summary": "S"})
    projection = project_article(article)
    assert projection["summary"] == "S"
    assert projection["key_points"] == []
    assert projection["broader_context"] is None

    article.analysis = None
    assert project_article(article)["summary"] == "d"


def test_validate_digest_caps_lists():
    content = validate_digest(DIGEST_JSON, [])
    assert content.top_themes == ["databases", "performance", "tooling"]
    assert content.articles[0].highlights == ["h1", "h2"]


def test_validate_digest_rebuilds_missing_parts_from_projections():
    projections = [{"id": "a1", "title": "T", "url": "u", "summary": "S", "key_points": ["k1", "k2", "k3"]}]
    content = validate_digest(["not", "an", "object"], projections)
    assert content.overall_summary.startswith("You saved 1 articles")
    assert content.articles[0].article_id == "a1"
    assert content.articles[0].highlights == ["k1", "k2"]
    assert content.top_themes == []


def test_default_target_date_is_yesterday_utc():
    assert yesterday_utc() == dt.datetime.now(dt.timezone.utc).date() - dt.timedelta(days=1)


@pytest.mark.asyncio
async def test_user_without_articles_is_skipped(db_session):
    user_id = uuid.uuid4()
    db_session.add(UserSettings(user_id=user_id))
    db_session.commit()
    composer, client = composer_with(json.dumps(DIGEST_JSON))

    digest = await composer.generate_user_digest(
        db_session, user_id, *_bounds(TARGET), target_date=TARGET
    )
    results = await composer.run_digests(db_session, DigestRequest(date=TARGET))

    assert digest is None
    assert results == [{"user_id": str(user_id), "success": True, "skipped": "no articles"}]
    assert client.completions.calls == []


@pytest.mark.asyncio
async def test_digest_created_and_upserted(db_session):
    user_id = uuid.uuid4()
    db_session.add(UserSettings(user_id=user_id, fcm_token="device-token"))
    add_ready_article(db_session, user_id, dt.datetime(2026, 3, 14, 9, 30))
    add_ready_article(db_session, user_id, dt.datetime(2026, 3, 13, 9, 30), title="Day before")
    add_ready_article(db_session, user_id, dt.datetime(2026, 3, 14, 10, 0), status="analyzing")
    composer, client = composer_with("```json\n" + json.dumps(DIGEST_JSON) + "\n```")

    first = await composer.run_digests(db_session, DigestRequest(user_id=user_id, date=TARGET))
    second = await composer.run_digests(db_session, DigestRequest(user_id=user_id, date=TARGET))

    assert first[0]["success"] is True
    assert first[0]["digest_id"] == second[0]["digest_id"]
    assert db_session.query(Digest).count() == 1

    call = client.completions.calls[0]
    assert call["max_tokens"] == 2048
    prompt = call["messages"][1]["content"]
    assert "Articles saved (1 total)" in prompt
    assert "Day before" not in prompt

    digest = db_session.query(Digest).one()
    assert digest.date == TARGET
    assert digest.top_themes == ["databases", "performance", "tooling"]


@pytest.mark.asyncio
async def test_test_all_ignores_date_and_settings(db_session):
    user_id = uuid.uuid4()
    add_ready_article(db_session, user_id, dt.datetime(2020, 1, 1))
    composer, client = composer_with(json.dumps(DIGEST_JSON))

    results = await composer.run_digests(db_session, DigestRequest(test_all=True, date=TARGET))

    assert results[0]["user_id"] == str(user_id)
    assert results[0]["success"] is True
    assert "digest_id" in results[0]


@pytest.mark.asyncio
async def test_completion_failure_is_reported_per_user(db_session):
    user_id = uuid.uuid4()
    db_session.add(UserSettings(user_id=user_id))
    add_ready_article(db_session, user_id, dt.datetime(2026, 3, 14, 12, 0))
    composer, _ = composer_with("this is not json")

    results = await composer.run_digests(db_session, DigestRequest(date=TARGET))

    assert results[0]["success"] is False
    assert "Could not extract valid JSON" in results[0]["error"]


def _bounds(day):
    return dt.datetime.combine(day, dt.time.min), dt.datetime.combine(day, dt.time.max)

import datetime as dt
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from services.composer.app.crud import (get_digest_users, get_ready_articles,
                                        get_users_with_ready_articles,
                                        upsert_digest)
from services.composer.app.metrics import DIGESTS
from services.composer.app.notifications import send_push_notification
from shared.app_logging.logger import CorrelationContext, get_logger
from shared.config.settings import Settings
from shared.database.models.article import Article
from shared.database.models.digest import Digest
from shared.database.session import SessionLocal
from shared.schemas.messages import (DigestArticle, DigestContent,
                                     DigestOutcome, DigestRequest)
from shared.utils import template_engine
from shared.utils.completion import CompletionClient
from shared.utils.json_extract import extract_json_from_response

logger = get_logger("composer.digest_utils")

MAX_THEMES = 3
MAX_HIGHLIGHTS = 2


def get_db():
    """Get database session with proper error handling."""
    db = SessionLocal()
    try:
        yield db
    except Exception as e:
        logger.error(f"Database session error: {e}")
        db.rollback()
        raise
    finally:
        db.close()


def yesterday_utc() -> dt.date:
    return (dt.datetime.now(dt.timezone.utc) - dt.timedelta(days=1)).date()


def day_bounds(day: dt.date):
    return dt.datetime.combine(day, dt.time.min), dt.datetime.combine(day, dt.time.max)


def project_article(article: Article) -> Dict[str, Any]:
    """The condensed view of one article that goes into the digest prompt."""
    analysis = article.analysis or {}
    return {
        "id": str(article.id),
        "title": article.title,
        "url": article.url,
        "summary": analysis.get("summary") or article.description,
        "key_points": analysis.get("key_points") or [],
        "topics": analysis.get("topics") or [],
        "broader_context": analysis.get("broader_context"),
        "image_url": article.image_url,
    }


def _strings(items: Any, limit: int) -> List[str]:
    if not isinstance(items, list):
        return []
    return [item.strip() for item in items if isinstance(item, str) and item.strip()][:limit]


def _text(value: Any) -> Optional[str]:
    return value.strip() if isinstance(value, str) and value.strip() else None


def validate_digest(raw: Any, projections: List[Dict[str, Any]]) -> DigestContent:
    """Normalize an untrusted digest payload.

    Missing per-article entries are rebuilt from the projections that were
    sent in the prompt.
    """
    if not isinstance(raw, dict):
        raw = {}

    articles = []
    for item in raw.get("articles") if isinstance(raw.get("articles"), list) else []:
        if not isinstance(item, dict):
            continue
        articles.append(
            DigestArticle(
                article_id=str(item["article_id"]) if item.get("article_id") else None,
                title=_text(item.get("title")) or "",
                image_url=_text(item.get("image_url")),
                summary=_text(item.get("summary")) or "",
                highlights=_strings(item.get("highlights"), MAX_HIGHLIGHTS),
                url=_text(item.get("url")),
            )
        )
    if not articles:
        articles = [
            DigestArticle(
                article_id=p["id"],
                title=p.get("title") or "",
                image_url=p.get("image_url"),
                summary=p.get("summary") or "",
                highlights=_strings(p.get("key_points"), MAX_HIGHLIGHTS),
                url=p.get("url"),
            )
            for p in projections
        ]

    summary = _text(raw.get("overall_summary"))
    if not summary:
        summary = f"You saved {len(projections)} articles. Open each one below for the details."

    return DigestContent(
        overall_summary=summary,
        top_themes=_strings(raw.get("top_themes"), MAX_THEMES),
        articles=articles,
        ai_insights=_text(raw.get("ai_insights")),
    )


class DigestComposer:
    def __init__(self, settings: Settings, completion: Optional[CompletionClient] = None):
        self.settings = settings
        self.completion = completion or CompletionClient(settings.completion)

    async def generate_user_digest(
        self,
        db: Session,
        user_id: UUID,
        start: Optional[dt.datetime],
        end: Optional[dt.datetime],
        target_date: dt.date,
        test_all: bool = False,
    ) -> Optional[Digest]:
        """Build and store one user's digest. ``None`` when there is nothing to digest."""
        if test_all:
            articles = get_ready_articles(db, user_id)
        else:
            articles = get_ready_articles(db, user_id, start, end)
        if not articles:
            return None

        logger.info(f"Generating digest for user {user_id} with {len(articles)} articles (test_all={test_all})")
        projections = [project_article(article) for article in articles]
        prompt = template_engine.render("digest_prompt.j2", articles=projections)

        text = await self.completion.complete(prompt, max_tokens=self.settings.completion.digest_max_tokens)
        content = validate_digest(extract_json_from_response(text), projections)
        return upsert_digest(db, user_id, target_date, content)

    async def run_digests(self, db: Session, request: DigestRequest) -> List[Dict[str, Any]]:
        """Generate digests user by user and report one outcome per user."""
        target_date = request.date or yesterday_utc()
        start, end = day_bounds(target_date)

        if request.test_all:
            logger.info("Running in test mode over all ready articles")
            user_ids = get_users_with_ready_articles(db)
        else:
            user_ids = get_digest_users(db, request.user_id)
        logger.info(f"Composing digests for {len(user_ids)} users on {target_date}")

        results = []
        for user_id in user_ids:
            with CorrelationContext(str(user_id)):
                outcome = await self._run_one(db, user_id, start, end, target_date, request.test_all)
            DIGESTS.labels(outcome="error" if not outcome.success else ("skipped" if outcome.skipped else "created")).inc()
            results.append(outcome.to_response())
        return results

    async def _run_one(self, db, user_id, start, end, target_date, test_all) -> DigestOutcome:
        try:
            digest = await self.generate_user_digest(db, user_id, start, end, target_date, test_all)
        except Exception as e:
            logger.error(f"Failed to generate digest for user {user_id}: {e}")
            return DigestOutcome(user_id=str(user_id), success=False, error=str(e))

        if digest is None:
            return DigestOutcome(user_id=str(user_id), success=True, skipped="no articles")
        if not test_all:
            send_push_notification(db, user_id, digest)
        return DigestOutcome(user_id=str(user_id), success=True, digest_id=str(digest.id))

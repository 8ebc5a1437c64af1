import datetime as dt
from typing import List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from shared.app_logging.logger import get_logger
from shared.database.models.article import Article, ArticleStatus
from shared.database.models.digest import Digest
from shared.database.models.user_settings import UserSettings
from shared.schemas.messages import DigestContent

logger = get_logger("composer.crud")


def get_ready_articles(
    db: Session,
    user_id: UUID,
    start: Optional[dt.datetime] = None,
    end: Optional[dt.datetime] = None,
) -> List[Article]:
    """Ready articles for one user, newest first, optionally within [start, end]."""
    query = db.query(Article).filter(
        Article.user_id == user_id,
        Article.status == ArticleStatus.READY.value,
    )
    if start is not None and end is not None:
        query = query.filter(Article.created_at >= start, Article.created_at <= end)
    articles = query.order_by(Article.created_at.desc()).all()
    logger.info(f"Found {len(articles)} ready articles for user {user_id}")
    return articles


def get_users_with_ready_articles(db: Session) -> List[UUID]:
    rows = (
        db.query(Article.user_id)
        .filter(Article.status == ArticleStatus.READY.value)
        .distinct()
        .all()
    )
    return [row[0] for row in rows]


def get_digest_users(db: Session, user_id: Optional[UUID] = None) -> List[UUID]:
    """Users with a settings row, optionally narrowed to one."""
    query = db.query(UserSettings.user_id)
    if user_id is not None:
        query = query.filter(UserSettings.user_id == user_id)
    return [row[0] for row in query.all()]


def get_user_settings(db: Session, user_id: UUID) -> Optional[UserSettings]:
    return db.query(UserSettings).filter(UserSettings.user_id == user_id).one_or_none()


def upsert_digest(db: Session, user_id: UUID, date: dt.date, content: DigestContent) -> Digest:
    """Insert or replace the digest keyed by (user_id, date)."""
    try:
        digest = db.query(Digest).filter(Digest.user_id == user_id, Digest.date == date).one_or_none()
        if digest is None:
            digest = Digest(user_id=user_id, date=date)
            db.add(digest)
        digest.overall_summary = content.overall_summary
        digest.top_themes = content.top_themes
        digest.articles = [article.model_dump() for article in content.articles]
        digest.ai_insights = content.ai_insights
        db.commit()
        db.refresh(digest)
        logger.info(f"Saved digest {digest.id} for user {user_id} on {date}")
        return digest
    except Exception as e:
        db.rollback()
        logger.error(f"Error saving digest for user {user_id}: {e}")
        raise

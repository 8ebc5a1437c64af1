from typing import Any, Callable, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from shared.app_logging.logger import get_logger
from shared.database.models.article import Article, ArticleStatus
from shared.database.session import SessionLocal
from shared.utils.errors import ArticleNotFoundError

logger = get_logger("extractor.crud")

ERROR_DESCRIPTION_LIMIT = 500


def update_article(article_id: UUID, session_factory: Callable[[], Session] = SessionLocal, **fields: Any) -> None:
    """
    Write a subset of columns on one article. Last write wins.
    """
    session = session_factory()
    try:
        article = session.get(Article, article_id)
        if article is None:
            raise ArticleNotFoundError(f"Article {article_id} not found")
        for name, value in fields.items():
            setattr(article, name, value)
        session.commit()
        logger.debug(f"Updated article {article_id}: {sorted(fields)}")
    except Exception as e:
        session.rollback()
        logger.error(f"Error updating article {article_id}: {e}")
        raise
    finally:
        session.close()


def get_article(article_id: UUID, session_factory: Callable[[], Session] = SessionLocal) -> Optional[Article]:
    session = session_factory()
    try:
        return session.get(Article, article_id)
    finally:
        session.close()


def mark_failed(article_id: UUID, message: str, session_factory: Callable[[], Session] = SessionLocal) -> bool:
    """Best effort. Returns False, after logging, when the status write itself fails."""
    description = f"Extraction failed: {message}"[:ERROR_DESCRIPTION_LIMIT]
    try:
        update_article(
            article_id,
            session_factory=session_factory,
            status=ArticleStatus.FAILED.value,
            description=description,
        )
    except Exception as e:
        logger.error(f"Could not mark article {article_id} as failed: {e}")
        return False
    return True

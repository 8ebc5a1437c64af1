import logging

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from shared.app_logging.logger import get_logger
from shared.config.settings import get_settings

from .base import Base
from .models.article import Article  # noqa: F401
from .models.digest import Digest  # noqa: F401
from .models.user_settings import UserSettings  # noqa: F401

logger = get_logger("database")

settings = get_settings()
DATABASE_URL = settings.database.postgres_url

logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

logger.info(f"▶︎ Connecting to database: {DATABASE_URL.split('@')[1] if '@' in DATABASE_URL else DATABASE_URL}")


def _create_engine(url: str):
    if url.startswith("sqlite"):
        # One shared connection so an in-memory database survives across sessions.
        return create_engine(
            url,
            echo=settings.database.echo_sql,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(
        url,
        echo=settings.database.echo_sql,
        pool_size=10,
        max_overflow=20,
        pool_pre_ping=True,
        pool_recycle=3600,
    )


engine = _create_engine(DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)


def init_db():
    """Initialize database tables."""
    try:
        Base.metadata.create_all(bind=engine)
        logger.info("✅ Database initialized successfully")
    except Exception as e:
        logger.error(f"❌ Failed to initialize database: {e}")
        raise

"""Test environment: in-memory SQLite and no real collaborator credentials."""
import os

os.environ["POSTGRES_URL"] = "sqlite://"
for key in ("OPENROUTER_API_KEY", "JINA_API_KEY", "TAVILY_API_KEY", "XAI_API_KEY"):
    os.environ[key] = ""
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest  # noqa: E402

from shared.database.session import Base, SessionLocal, engine  # noqa: E402


@pytest.fixture
def db_session():
    """Fresh schema per test on the shared in-memory engine."""
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)

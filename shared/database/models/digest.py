import uuid

from sqlalchemy import JSON, Boolean, Column, Date, DateTime, Text, UniqueConstraint, Uuid, func

from shared.database.base import Base


class Digest(Base):
    """One cross-article digest per user per calendar date."""

    __tablename__ = "digests"
    __table_args__ = (UniqueConstraint("user_id", "date", name="digests_user_date_unique"),)

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)
    overall_summary = Column(Text, nullable=False)
    top_themes = Column(JSON, nullable=False, default=list)
    articles = Column(JSON, nullable=False, default=list)
    ai_insights = Column(Text, nullable=True)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    is_read = Column(Boolean, nullable=False, default=False)

import enum
import uuid

from sqlalchemy import JSON, Boolean, Column, DateTime, String, Text, UniqueConstraint, Uuid, func

from ..base import Base


class ArticleStatus(str, enum.Enum):
    PENDING = "pending"
    EXTRACTING = "extracting"
    ANALYZING = "analyzing"
    READY = "ready"
    FAILED = "failed"


class Article(Base):
    __tablename__ = "articles"
    __table_args__ = (UniqueConstraint("user_id", "url", name="articles_user_url_unique"),)

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), nullable=False, index=True)
    url = Column(Text, nullable=False)
    title = Column(Text, nullable=True)
    description = Column(Text, nullable=True)
    content = Column(Text, nullable=True)
    image_url = Column(Text, nullable=True)
    site_name = Column(Text, nullable=True)
    author = Column(Text, nullable=True)
    images = Column(JSON, nullable=False, default=list)
    comments = Column(JSON, nullable=False, default=list)
    analysis = Column(JSON, nullable=True)
    status = Column(String, nullable=False, default=ArticleStatus.PENDING.value, index=True)
    created_at = Column(DateTime, server_default=func.now(), nullable=False, index=True)
    read_at = Column(DateTime, nullable=True)
    is_archived = Column(Boolean, nullable=False, default=False)

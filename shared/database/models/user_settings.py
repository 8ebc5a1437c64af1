import uuid

from sqlalchemy import Boolean, Column, DateTime, Text, Time, Uuid, func

from shared.database.base import Base


class UserSettings(Base):
    __tablename__ = "user_settings"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), nullable=False, unique=True, index=True)
    digest_time = Column(Time, nullable=True)
    timezone = Column(Text, nullable=False, default="America/Los_Angeles")
    analyze_images = Column(Boolean, nullable=False, default=True)
    include_comments = Column(Boolean, nullable=False, default=True)
    push_notifications = Column(Boolean, nullable=False, default=True)
    fcm_token = Column(Text, nullable=True)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

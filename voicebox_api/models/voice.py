from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer, String, Text
from ..models import Base
from .moderation import ModerationStatus


class AnonymousVoice(Base):
    __tablename__ = "anonymous_voices"

    id = Column(Integer, primary_key=True, autoincrement=True)
    message = Column(Text, nullable=False)
    topic_tags = Column(String(500), nullable=True)
    status = Column(String(16), nullable=False, default=ModerationStatus.PENDING.value, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc), index=True)

    # column searched by the admin queue
    text_column = "message"

    def __repr__(self):
        return f"<AnonymousVoice(id={self.id}, status={self.status})>"

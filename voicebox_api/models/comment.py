from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer, String, Text
from ..models import Base
from .moderation import ModerationStatus


class Comment(Base):
    __tablename__ = "comments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    content = Column(Text, nullable=False)
    status = Column(String(16), nullable=False, default=ModerationStatus.PENDING.value, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc), index=True)

    text_column = "content"

    def __repr__(self):
        return f"<Comment(id={self.id}, status={self.status})>"

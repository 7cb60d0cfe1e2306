from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, String
from ..models import Base

ADMIN_CONFIG_ID = "singleton"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AdminConfig(Base):
    __tablename__ = "admin_config"

    id = Column(String(32), primary_key=True, default=ADMIN_CONFIG_ID)
    password_hash = Column(String(255), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    def __repr__(self):
        return f"<AdminConfig(id={self.id})>"

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_serializer


class VoiceCreate(BaseModel):
    message: Optional[str] = None
    topic_tags: Optional[str] = Field(None, validation_alias="topicTags")


class Voice(BaseModel):
    id: int
    message: str
    topic_tags: Optional[str] = Field(None, serialization_alias="topicTags")
    created_at: datetime = Field(..., serialization_alias="createdAt")

    @field_serializer("created_at")
    def _iso(self, value: datetime) -> str:
        return value.isoformat()

    class Config:
        from_attributes = True


class AdminVoice(Voice):
    status: str

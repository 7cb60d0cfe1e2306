from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_serializer


class CommentCreate(BaseModel):
    """
    Accepts either ``content`` or ``message`` for the comment text.
    """
    content: Optional[str] = None
    message: Optional[str] = None

    @property
    def text(self) -> Optional[str]:
        return self.content or self.message


class Comment(BaseModel):
    id: int
    content: str
    created_at: datetime = Field(..., serialization_alias="createdAt")

    @field_serializer("created_at")
    def _iso(self, value: datetime) -> str:
        return value.isoformat()

    def to_public(self) -> dict:
        data = self.model_dump(by_alias=True)
        # older clients read the text from "message"
        data["message"] = self.content
        return data

    class Config:
        from_attributes = True


class AdminComment(Comment):
    status: str

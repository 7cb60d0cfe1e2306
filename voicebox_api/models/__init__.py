from sqlalchemy.orm import declarative_base

Base = declarative_base()

from .moderation import ModerationStatus
from .admin import AdminConfig
from .voice import AnonymousVoice
from .comment import Comment

"""
SQLAlchemy database models.
"""

from .base import Base, TimestampMixin
from .organization import Organization
from .post import Post, PostStatus, Tag, post_tags
from .user import User

__all__ = [
    "Base",
    "TimestampMixin",
    "User",
    "Post",
    "PostStatus",
    "Tag",
    "post_tags",
    "Organization",
]

"""
Post and Tag database models.
"""

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, List, Optional
from uuid import uuid4

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Index, String, Table, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin

if TYPE_CHECKING:
    from .user import User


class PostStatus(str, Enum):
    """Post publication status."""

    PUBLISHED = "published"
    DRAFT = "draft"


# Many-to-many link between posts and tags
post_tags = Table(
    "post_tags",
    Base.metadata,
    Column(
        "post_id",
        UUID(as_uuid=False),
        ForeignKey("posts.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "tag_id",
        UUID(as_uuid=False),
        ForeignKey("tags.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)


class Post(Base, TimestampMixin):
    """A piece of content with a structured document body."""

    __tablename__ = "posts"

    id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid4()),
    )

    title: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    status: Mapped[str] = mapped_column(
        String(50),
        default=PostStatus.DRAFT.value,
        nullable=False,
        index=True,
    )

    # Structured document: JSON array of editor nodes
    content: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)
    """
    Structure:
    [
        {"type": "paragraph", "children": [{"text": "Hello", "bold": true}]},
        {"type": "layout", "layout": [1, 1], "children": [
            {"type": "layout-area", "children": [...]},
            {"type": "layout-area", "children": [...]}
        ]},
        {"type": "divider", "children": [{"text": ""}]}
    ]
    """
    # Plain text of `content`, kept in sync on write for search
    content_text: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    publish_date: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    author_id: Mapped[Optional[str]] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )

    author: Mapped[Optional["User"]] = relationship(
        "User",
        back_populates="posts",
    )
    tags: Mapped[List["Tag"]] = relationship(
        "Tag",
        secondary=post_tags,
        back_populates="posts",
    )

    __table_args__ = (
        Index("ix_posts_author", "author_id"),
        Index("ix_posts_status_publish_date", "status", "publish_date"),
    )

    def __repr__(self) -> str:
        title = (self.title or "")[:30]
        return f"<Post(id={self.id}, title={title}, status={self.status})>"

    @property
    def is_published(self) -> bool:
        return self.status == PostStatus.PUBLISHED.value


class Tag(Base, TimestampMixin):
    """A label that groups posts."""

    __tablename__ = "tags"

    id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid4()),
    )

    name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    posts: Mapped[List["Post"]] = relationship(
        "Post",
        secondary=post_tags,
        back_populates="tags",
    )

    def __repr__(self) -> str:
        return f"<Tag(id={self.id}, name={self.name})>"

"""
Request and response schemas for the User, Post, Tag and Organization lists.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator

from core.schema import DocumentValidationError, validate_document
from core.schema.lists import LISTS
from infrastructure.database.models.post import PostStatus

_POST_DOCUMENT = LISTS["Post"].fields["content"].document


def _check_document(value: Optional[list]) -> Optional[list]:
    if value is None:
        return value
    try:
        return validate_document(value, _POST_DOCUMENT)
    except DocumentValidationError as e:
        raise ValueError(str(e)) from e


# --- Shared ---


class RelatedItem(BaseModel):
    """Minimal reference to an item of another list."""

    id: str
    label: Optional[str] = None


class UserCard(BaseModel):
    """Author card: the fields shown for a post's author."""

    id: str
    name: str
    email: str

    model_config = ConfigDict(from_attributes=True)


class TagCard(BaseModel):
    id: str
    name: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class DeleteResponse(BaseModel):
    """Standard delete response."""

    success: bool
    message: str
    deleted_id: str


# --- User ---


class UserCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=72)


class UserUpdateRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=8, max_length=72)


class UserResponse(BaseModel):
    """User as returned by the API. The password never leaves the server."""

    id: str
    name: str
    email: str
    posts: list[RelatedItem] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class UserListResponse(BaseModel):
    items: list[UserResponse]
    total: int
    page: int
    page_size: int
    total_pages: int


# --- Tag ---


class TagCreateRequest(BaseModel):
    name: Optional[str] = Field(None, max_length=255)
    post_ids: list[UUID] = Field(default_factory=list)


class TagUpdateRequest(BaseModel):
    name: Optional[str] = Field(None, max_length=255)
    post_ids: Optional[list[UUID]] = None


class TagResponse(BaseModel):
    id: str
    name: Optional[str] = None
    posts: list[RelatedItem] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class TagListResponse(BaseModel):
    items: list[TagResponse]
    total: int
    page: int
    page_size: int
    total_pages: int


class InlineTagCreate(BaseModel):
    """Tag created together with a post."""

    name: str = Field(..., min_length=1, max_length=255)


class InlineAuthorCreate(BaseModel):
    """Author created together with a post. Users always need a password."""

    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=72)


# --- Post ---


class PostCreateRequest(BaseModel):
    title: Optional[str] = Field(None, max_length=500)
    status: PostStatus = PostStatus.DRAFT
    content: Optional[list[dict]] = None
    publish_date: Optional[datetime] = None
    author_id: Optional[UUID] = None
    new_author: Optional[InlineAuthorCreate] = None
    tag_ids: list[UUID] = Field(default_factory=list)
    new_tags: list[InlineTagCreate] = Field(default_factory=list, max_length=50)

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: Optional[list]) -> Optional[list]:
        return _check_document(v)

    @model_validator(mode="after")
    def one_author_source(self):
        if self.author_id is not None and self.new_author is not None:
            raise ValueError("Give either author_id or new_author, not both")
        return self


class PostUpdateRequest(BaseModel):
    """
    Partial update. Sending ``author_id: null`` disconnects the author and
    ``new_author`` replaces it with a freshly created user;
    ``tag_ids`` replaces the connected tags; ``new_tags`` are created and added.
    """

    title: Optional[str] = Field(None, max_length=500)
    status: Optional[PostStatus] = None
    content: Optional[list[dict]] = None
    publish_date: Optional[datetime] = None
    author_id: Optional[UUID] = None
    new_author: Optional[InlineAuthorCreate] = None
    tag_ids: Optional[list[UUID]] = None
    new_tags: list[InlineTagCreate] = Field(default_factory=list, max_length=50)

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: Optional[list]) -> Optional[list]:
        return _check_document(v)

    @model_validator(mode="after")
    def one_author_source(self):
        if self.author_id is not None and self.new_author is not None:
            raise ValueError("Give either author_id or new_author, not both")
        return self


class PostResponse(BaseModel):
    id: str
    title: Optional[str] = None
    status: str
    content: Optional[list[dict]] = None
    publish_date: Optional[datetime] = None
    author: Optional[UserCard] = None
    tags: list[TagCard] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PostListResponse(BaseModel):
    items: list[PostResponse]
    total: int
    page: int
    page_size: int
    total_pages: int


# --- Organization ---


class OrganizationCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    city: str = Field(..., min_length=1, max_length=255)
    country: str = Field(..., min_length=1, max_length=255)


class OrganizationUpdateRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    city: Optional[str] = Field(None, min_length=1, max_length=255)
    country: Optional[str] = Field(None, min_length=1, max_length=255)


class OrganizationResponse(BaseModel):
    id: str
    name: str
    city: str
    country: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class OrganizationListResponse(BaseModel):
    items: list[OrganizationResponse]
    total: int
    page: int
    page_size: int
    total_pages: int

"""
Loading items with their relationships and turning them into API responses.
"""

from typing import Optional
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from api.schemas.content import (
    PostResponse,
    RelatedItem,
    TagCard,
    TagResponse,
    UserCard,
    UserResponse,
)
from infrastructure.database.models import Post, Tag, User


def _not_found(list_key: str, item_id: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"{list_key} {item_id} not found",
    )


# --- Queries ---


def user_query():
    return select(User).options(selectinload(User.posts)).execution_options(populate_existing=True)


def post_query():
    return (
        select(Post)
        .options(selectinload(Post.author), selectinload(Post.tags))
        .execution_options(populate_existing=True)
    )


def tag_query():
    return select(Tag).options(selectinload(Tag.posts)).execution_options(populate_existing=True)


async def load_user(db: AsyncSession, user_id: str | UUID) -> User:
    user_id = str(user_id)
    result = await db.execute(user_query().where(User.id == user_id))
    user = result.scalar_one_or_none()
    if user is None:
        raise _not_found("User", user_id)
    return user


async def load_post(db: AsyncSession, post_id: str | UUID) -> Post:
    post_id = str(post_id)
    result = await db.execute(post_query().where(Post.id == post_id))
    post = result.scalar_one_or_none()
    if post is None:
        raise _not_found("Post", post_id)
    return post


async def load_tag(db: AsyncSession, tag_id: str | UUID) -> Tag:
    tag_id = str(tag_id)
    result = await db.execute(tag_query().where(Tag.id == tag_id))
    tag = result.scalar_one_or_none()
    if tag is None:
        raise _not_found("Tag", tag_id)
    return tag


# --- Responses ---


def user_response(user: User) -> UserResponse:
    return UserResponse(
        id=str(user.id),
        name=user.name,
        email=user.email,
        posts=[RelatedItem(id=str(p.id), label=p.title) for p in user.posts],
        created_at=user.created_at,
        updated_at=user.updated_at,
    )


def post_response(post: Post) -> PostResponse:
    author: Optional[UserCard] = None
    if post.author is not None:
        author = UserCard(id=str(post.author.id), name=post.author.name, email=post.author.email)
    return PostResponse(
        id=str(post.id),
        title=post.title,
        status=post.status,
        content=post.content,
        publish_date=post.publish_date,
        author=author,
        tags=[TagCard(id=str(t.id), name=t.name) for t in post.tags],
        created_at=post.created_at,
        updated_at=post.updated_at,
    )


def tag_response(tag: Tag) -> TagResponse:
    return TagResponse(
        id=str(tag.id),
        name=tag.name,
        posts=[RelatedItem(id=str(p.id), label=p.title) for p in tag.posts],
        created_at=tag.created_at,
        updated_at=tag.updated_at,
    )


async def user_to_response(db: AsyncSession, user_id: str | UUID) -> UserResponse:
    return user_response(await load_user(db, user_id))


async def post_to_response(db: AsyncSession, post_id: str | UUID) -> PostResponse:
    return post_response(await load_post(db, post_id))


async def tag_to_response(db: AsyncSession, tag_id: str | UUID) -> TagResponse:
    return tag_response(await load_tag(db, tag_id))

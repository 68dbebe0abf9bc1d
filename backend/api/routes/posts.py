"""
Post list API routes.

Posts connect to one author and many tags. Tags can be connected by id or
created inline together with the post.
"""

import logging
from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import desc, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from api.routes.auth import get_current_user
from api.schemas.content import (
    DeleteResponse,
    InlineAuthorCreate,
    InlineTagCreate,
    PostCreateRequest,
    PostListResponse,
    PostResponse,
    PostUpdateRequest,
)
from api.routes.users import add_user, email_taken
from api.serializers import load_post, post_query, post_response, post_to_response
from api.utils import paginate, search_filter, total_pages
from core.schema import document_to_text
from infrastructure.database.connection import get_db
from infrastructure.database.models.post import Post, PostStatus, Tag, post_tags
from infrastructure.database.models.user import User

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/posts", tags=["Posts"])


async def _resolve_author(db: AsyncSession, author_id: str) -> str:
    result = await db.execute(select(User.id).where(User.id == author_id))
    if result.scalar_one_or_none() is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Author {author_id} does not exist",
        )
    return author_id


async def _resolve_tags(
    db: AsyncSession,
    tag_ids: list[str],
    new_tags: list[InlineTagCreate],
) -> list[Tag]:
    """Existing tags by id (connect) plus freshly created ones (inline create)."""
    tags: list[Tag] = []
    unique_ids = list(dict.fromkeys(tag_ids))
    if unique_ids:
        result = await db.execute(select(Tag).where(Tag.id.in_(unique_ids)))
        found = {str(t.id): t for t in result.scalars().all()}
        missing = [tag_id for tag_id in unique_ids if tag_id not in found]
        if missing:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Tags do not exist: {', '.join(missing)}",
            )
        tags.extend(found[tag_id] for tag_id in unique_ids)

    for new_tag in new_tags:
        tag = Tag(name=new_tag.name)
        db.add(tag)
        tags.append(tag)
    return tags


async def _add_inline_author(db: AsyncSession, new_author: InlineAuthorCreate) -> User:
    author = await add_user(db, **new_author.model_dump())
    try:
        await db.flush()
    except IntegrityError:
        await db.rollback()
        raise email_taken()
    return author


async def _commit(db: AsyncSession) -> None:
    # A racing inline author insert surfaces as a unique email violation
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise email_taken()


@router.get("", response_model=PostListResponse)
async def list_posts(
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(20, ge=1, le=100, description="Items per page"),
    status_filter: Optional[PostStatus] = Query(None, alias="status", description="Filter by status"),
    author_id: Optional[UUID] = Query(None, description="Filter by author"),
    tag_id: Optional[UUID] = Query(None, description="Filter by tag"),
    search: Optional[str] = Query(None, description="Search in title and content"),
    db: AsyncSession = Depends(get_db),
):
    """List posts, most recently published first."""
    query = post_query()
    if status_filter:
        query = query.where(Post.status == status_filter.value)
    if author_id:
        query = query.where(Post.author_id == str(author_id))
    if tag_id:
        query = query.join(post_tags, post_tags.c.post_id == Post.id).where(post_tags.c.tag_id == str(tag_id))
    if search:
        query = query.where(search_filter([Post.title, Post.content_text], search))
    query = query.order_by(desc(Post.publish_date), desc(Post.created_at), Post.id)

    posts, total = await paginate(db, query, page, page_size)
    return PostListResponse(
        items=[post_response(p) for p in posts],
        total=total,
        page=page,
        page_size=page_size,
        total_pages=total_pages(total, page_size),
    )


@router.get("/{post_id}", response_model=PostResponse)
async def get_post(post_id: UUID, db: AsyncSession = Depends(get_db)):
    return await post_to_response(db, post_id)


@router.post("", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
async def create_post(
    post_data: PostCreateRequest,
    current_user: Annotated[User, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
):
    """Create a post. New posts start as drafts unless a status is given."""
    author_id = None
    if post_data.author_id:
        author_id = await _resolve_author(db, str(post_data.author_id))
    elif post_data.new_author:
        author_id = (await _add_inline_author(db, post_data.new_author)).id
    tags = await _resolve_tags(db, [str(t) for t in post_data.tag_ids], post_data.new_tags)

    post = Post(
        title=post_data.title,
        status=post_data.status.value,
        content=post_data.content,
        content_text=document_to_text(post_data.content) or None,
        publish_date=post_data.publish_date,
        author_id=author_id,
        tags=tags,
    )
    db.add(post)
    await _commit(db)

    logger.info("Post created", extra={"user_id": str(current_user.id), "list_key": "Post"})
    return await post_to_response(db, post.id)


@router.patch("/{post_id}", response_model=PostResponse)
async def update_post(
    post_id: UUID,
    update_data: PostUpdateRequest,
    current_user: Annotated[User, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
):
    post = await load_post(db, post_id)
    changes = update_data.model_dump(exclude_unset=True)

    if "status" in changes:
        if update_data.status is None:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail="status cannot be empty",
            )
        post.status = update_data.status.value
    if "title" in changes:
        post.title = update_data.title
    if "content" in changes:
        post.content = update_data.content
        post.content_text = document_to_text(update_data.content) or None
    if "publish_date" in changes:
        post.publish_date = update_data.publish_date
    if "author_id" in changes:
        post.author_id = (
            await _resolve_author(db, str(update_data.author_id)) if update_data.author_id else None
        )
    if update_data.new_author:
        post.author_id = (await _add_inline_author(db, update_data.new_author)).id

    if update_data.tag_ids is not None or update_data.new_tags:
        base_ids = (
            [str(t) for t in update_data.tag_ids]
            if update_data.tag_ids is not None
            else [str(t.id) for t in post.tags]
        )
        post.tags = await _resolve_tags(db, base_ids, update_data.new_tags)

    await _commit(db)
    return await post_to_response(db, post.id)


@router.delete("/{post_id}", response_model=DeleteResponse)
async def delete_post(
    post_id: UUID,
    current_user: Annotated[User, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
):
    post = await load_post(db, post_id)
    await db.delete(post)
    await db.commit()

    logger.info("Post deleted", extra={"user_id": str(current_user.id), "list_key": "Post"})
    return DeleteResponse(success=True, message="Post deleted", deleted_id=str(post_id))

"""
Tag list API routes.
"""

import logging
from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from api.routes.auth import get_current_user
from api.schemas.content import (
    DeleteResponse,
    TagCreateRequest,
    TagListResponse,
    TagResponse,
    TagUpdateRequest,
)
from api.serializers import load_tag, tag_query, tag_response, tag_to_response
from api.utils import paginate, search_filter, total_pages
from infrastructure.database.connection import get_db
from infrastructure.database.models.post import Post, Tag
from infrastructure.database.models.user import User

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tags", tags=["Tags"])


async def _resolve_posts(db: AsyncSession, post_ids: list[str]) -> list[Post]:
    unique_ids = list(dict.fromkeys(post_ids))
    if not unique_ids:
        return []
    result = await db.execute(select(Post).where(Post.id.in_(unique_ids)))
    found = {str(p.id): p for p in result.scalars().all()}
    missing = [post_id for post_id in unique_ids if post_id not in found]
    if missing:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Posts do not exist: {', '.join(missing)}",
        )
    return [found[post_id] for post_id in unique_ids]


@router.get("", response_model=TagListResponse)
async def list_tags(
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(50, ge=1, le=100, description="Items per page"),
    search: Optional[str] = Query(None, description="Search in tag name"),
    db: AsyncSession = Depends(get_db),
):
    query = tag_query()
    if search:
        query = query.where(search_filter([Tag.name], search))
    query = query.order_by(Tag.name, Tag.id)

    tags, total = await paginate(db, query, page, page_size)
    return TagListResponse(
        items=[tag_response(t) for t in tags],
        total=total,
        page=page,
        page_size=page_size,
        total_pages=total_pages(total, page_size),
    )


@router.get("/{tag_id}", response_model=TagResponse)
async def get_tag(tag_id: UUID, db: AsyncSession = Depends(get_db)):
    return await tag_to_response(db, tag_id)


@router.post("", response_model=TagResponse, status_code=status.HTTP_201_CREATED)
async def create_tag(
    tag_data: TagCreateRequest,
    current_user: Annotated[User, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
):
    tag = Tag(name=tag_data.name, posts=await _resolve_posts(db, [str(p) for p in tag_data.post_ids]))
    db.add(tag)
    await db.commit()
    return await tag_to_response(db, tag.id)


@router.patch("/{tag_id}", response_model=TagResponse)
async def update_tag(
    tag_id: UUID,
    update_data: TagUpdateRequest,
    current_user: Annotated[User, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
):
    tag = await load_tag(db, tag_id)
    changes = update_data.model_dump(exclude_unset=True)
    if "name" in changes:
        tag.name = update_data.name
    if update_data.post_ids is not None:
        tag.posts = await _resolve_posts(db, [str(p) for p in update_data.post_ids])
    await db.commit()
    return await tag_to_response(db, tag.id)


@router.delete("/{tag_id}", response_model=DeleteResponse)
async def delete_tag(
    tag_id: UUID,
    current_user: Annotated[User, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
):
    tag = await load_tag(db, tag_id)
    await db.delete(tag)
    await db.commit()
    logger.info("Tag deleted", extra={"user_id": str(current_user.id), "list_key": "Tag"})
    return DeleteResponse(success=True, message="Tag deleted", deleted_id=str(tag_id))

"""
User list API routes.
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
    UserCreateRequest,
    UserListResponse,
    UserResponse,
    UserUpdateRequest,
)
from api.serializers import load_user, user_query, user_response, user_to_response
from api.utils import paginate, search_filter, total_pages
from core.security.password import password_hasher
from infrastructure.database.connection import get_db
from infrastructure.database.models.user import User

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["Users"])


def email_taken() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail="A user with this email already exists",
    )


async def _ensure_email_free(db: AsyncSession, email: str, exclude_id: Optional[str] = None) -> None:
    query = select(User.id).where(User.email == email)
    if exclude_id:
        query = query.where(User.id != exclude_id)
    if (await db.execute(query)).scalar_one_or_none():
        raise email_taken()


async def add_user(db: AsyncSession, name: str, email: str, password: str) -> User:
    """
    Add a new user to the session with a hashed password.

    The caller commits. Raises 409 when the email is already taken.
    """
    email = email.lower()
    await _ensure_email_free(db, email)
    user = User(name=name, email=email, password_hash=password_hasher.hash(password))
    db.add(user)
    return user


@router.get("", response_model=UserListResponse)
async def list_users(
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(20, ge=1, le=100, description="Items per page"),
    email: Optional[str] = Query(None, description="Filter by exact email"),
    search: Optional[str] = Query(None, description="Search in name and email"),
    db: AsyncSession = Depends(get_db),
):
    """List users, newest first."""
    query = user_query()
    if email:
        query = query.where(User.email == email.lower())
    if search:
        query = query.where(search_filter([User.name, User.email], search))
    query = query.order_by(desc(User.created_at), User.id)

    users, total = await paginate(db, query, page, page_size)
    return UserListResponse(
        items=[user_response(u) for u in users],
        total=total,
        page=page,
        page_size=page_size,
        total_pages=total_pages(total, page_size),
    )


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(user_id: UUID, db: AsyncSession = Depends(get_db)):
    return await user_to_response(db, user_id)


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    user_data: UserCreateRequest,
    current_user: Annotated[User, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
):
    """Create a user. Requires a signed-in user."""
    user = await add_user(db, user_data.name, user_data.email, user_data.password)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise email_taken()

    logger.info("User created", extra={"user_id": str(user.id), "list_key": "User"})
    return await user_to_response(db, user.id)


@router.patch("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: UUID,
    update_data: UserUpdateRequest,
    current_user: Annotated[User, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
):
    user = await load_user(db, user_id)
    changes = update_data.model_dump(exclude_unset=True)

    for required in ("name", "email", "password"):
        if required in changes and changes[required] is None:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=f"{required} is required",
            )

    if "email" in changes:
        email = changes["email"].lower()
        await _ensure_email_free(db, email, exclude_id=user.id)
        user.email = email
    if "name" in changes:
        user.name = changes["name"]
    if "password" in changes:
        user.password_hash = password_hasher.hash(changes["password"])

    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise email_taken()

    return await user_to_response(db, user.id)


@router.delete("/{user_id}", response_model=DeleteResponse)
async def delete_user(
    user_id: UUID,
    current_user: Annotated[User, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
):
    """Delete a user. Their posts stay, with the author cleared."""
    user = await load_user(db, user_id)
    for post in user.posts:
        post.author_id = None
    await db.delete(user)
    await db.commit()

    logger.info("User deleted", extra={"user_id": str(user_id), "list_key": "User"})
    return DeleteResponse(success=True, message="User deleted", deleted_id=str(user_id))

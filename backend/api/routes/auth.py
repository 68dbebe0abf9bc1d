"""
Authentication API routes: sign in, sign out, current session, first user.
"""

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from api.middleware.rate_limit import get_rate_limit, limiter
from api.schemas.auth import (
    CurrentSessionResponse,
    InitFirstItemRequest,
    InitStatusResponse,
    LoginRequest,
    SessionInfo,
    SessionTokenResponse,
)
from api.schemas.content import UserResponse
from api.serializers import user_to_response
from core.auth import Session, session_data_from_item
from core.security.password import password_hasher
from core.system import system_config
from infrastructure.config.settings import settings
from infrastructure.database.connection import get_db
from infrastructure.database.models.user import User

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])

auth_config = system_config.auth
session_strategy = system_config.session


def _get_cookie_kwargs(settings_obj) -> dict:
    """Return cookie kwargs based on environment.

    Cross-site (SameSite=None; Secure) in production, Lax for local development.
    """
    use_cross_site = settings_obj.is_production
    kwargs = dict(
        httponly=True,
        secure=use_cross_site,
        samesite="none" if use_cross_site else "lax",
        path="/",
    )
    if settings_obj.cookie_domain:
        kwargs["domain"] = settings_obj.cookie_domain
    return kwargs


def _set_session_cookie(response: JSONResponse, token: str, settings_obj) -> None:
    response.set_cookie(
        settings_obj.session_cookie_name,
        token,
        max_age=session_strategy.max_age,
        **_get_cookie_kwargs(settings_obj),
    )


def _clear_session_cookie(response: JSONResponse, settings_obj) -> None:
    response.delete_cookie(settings_obj.session_cookie_name, **_get_cookie_kwargs(settings_obj))


def _extract_token(request: Request, authorization: Optional[str]) -> Optional[str]:
    """Bearer header first (API clients, tests), then the session cookie."""
    if authorization and authorization.startswith("Bearer "):
        token = authorization.split(" ", 1)[1].strip()
        if token:
            return token
    return request.cookies.get(settings.session_cookie_name)


async def _load_session(db: AsyncSession, token: Optional[str]) -> tuple[Optional[Session], Optional[User]]:
    payload = session_strategy.get(token)
    if payload is None or payload.list_key != auth_config.list_key:
        return None, None

    result = await db.execute(select(User).where(User.id == payload.sub))
    user = result.scalar_one_or_none()
    if user is None:
        # Item was deleted after the session started
        return None, None

    session = Session(
        item_id=str(user.id),
        list_key=auth_config.list_key,
        data=session_data_from_item(user, auth_config.session_data),
    )
    return session, user


async def get_session(
    request: Request,
    authorization: Annotated[str | None, Header()] = None,
    db: AsyncSession = Depends(get_db),
) -> Optional[Session]:
    """Dependency resolving the current session, or None when signed out."""
    token = _extract_token(request, authorization)
    session, _ = await _load_session(db, token)
    return session


async def get_current_user(
    request: Request,
    authorization: Annotated[str | None, Header()] = None,
    db: AsyncSession = Depends(get_db),
) -> User:
    """Dependency requiring a signed-in user."""
    token = _extract_token(request, authorization)
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    session, user = await _load_session(db, token)
    if session is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired session",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def start_session(user: User, status_code: int = status.HTTP_200_OK) -> JSONResponse:
    """Issue a session token for the user; returned in the body and as the session cookie."""
    data = session_data_from_item(user, auth_config.session_data)
    token = session_strategy.start(str(user.id), auth_config.list_key, data=data)
    body = SessionTokenResponse(
        session_token=token,
        expires_in=session_strategy.max_age,
        session=SessionInfo(item_id=str(user.id), list_key=auth_config.list_key, data=data),
    )
    response = JSONResponse(content=body.model_dump(mode="json"), status_code=status_code)
    _set_session_cookie(response, token, settings)
    return response


async def _user_count(db: AsyncSession) -> int:
    return (await db.execute(select(func.count()).select_from(User))).scalar_one()


async def authenticate_with_password(db: AsyncSession, email: str, password: str) -> Optional[User]:
    """The user whose identity and secret match, or None."""
    result = await db.execute(select(User).where(User.email == email.lower()))
    user = result.scalar_one_or_none()

    # Always run bcrypt so the response time does not reveal unknown emails
    password_ok = password_hasher.verify(password, user.password_hash if user else None)
    if not user or not password_ok:
        return None

    if password_hasher.needs_rehash(user.password_hash):
        user.password_hash = password_hasher.hash(password)
    return user


def end_session() -> JSONResponse:
    """Sessions are stateless, so ending one only clears the cookie."""
    response = JSONResponse(content={"success": True})
    _clear_session_cookie(response, settings)
    return response


@router.post("/login", response_model=SessionTokenResponse)
@limiter.limit(get_rate_limit("login"))
async def login(
    request: Request,
    login_data: LoginRequest,
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    """
    Authenticate with email and password and start a session.
    """
    user = await authenticate_with_password(db, login_data.email, login_data.password)
    if user is None:
        logger.info("Failed sign-in attempt")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )

    # Persists a rehashed password, if any
    await db.commit()

    logger.info("User signed in", extra={"user_id": str(user.id)})
    return start_session(user)


@router.post("/logout")
async def logout() -> JSONResponse:
    """End the current session by clearing the session cookie."""
    return end_session()


@router.get("/session", response_model=CurrentSessionResponse)
async def current_session(
    session: Annotated[Optional[Session], Depends(get_session)],
) -> CurrentSessionResponse:
    """The current session, or ``null`` when signed out."""
    if session is None:
        return CurrentSessionResponse(session=None)
    return CurrentSessionResponse(
        session=SessionInfo(item_id=session.item_id, list_key=session.list_key, data=session.data)
    )


@router.get("/me", response_model=UserResponse)
async def get_me(
    current_user: Annotated[User, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
) -> UserResponse:
    """Profile of the signed-in user."""
    return await user_to_response(db, current_user.id)


@router.get("/init", response_model=InitStatusResponse)
async def init_status(db: AsyncSession = Depends(get_db)) -> InitStatusResponse:
    """Whether the first user still has to be created."""
    needs_init = auth_config.allows_init_first_item and await _user_count(db) == 0
    return InitStatusResponse(needs_init=needs_init, fields=list(auth_config.init_first_item_fields))


@router.post("/init", response_model=SessionTokenResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(get_rate_limit("init"))
async def create_initial_item(
    request: Request,
    init_data: InitFirstItemRequest,
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    """
    Create the first user and sign them in.

    Only possible while the User list is empty.
    """
    if not auth_config.allows_init_first_item:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Initial user creation is disabled",
        )
    if await _user_count(db) > 0:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Initial user already exists",
        )

    user = User(
        name=init_data.name,
        email=init_data.email.lower(),
        password_hash=password_hasher.hash(init_data.password),
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)

    logger.info("Initial user created", extra={"user_id": str(user.id)})
    return start_session(user, status_code=status.HTTP_201_CREATED)

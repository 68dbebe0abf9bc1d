"""
Admin UI access dependency.
"""

from typing import Annotated, Optional

from fastapi import Depends, HTTPException, status

from api.routes.auth import get_session
from core.auth import Session
from core.system import system_config


async def require_admin_access(
    session: Annotated[Optional[Session], Depends(get_session)],
) -> Session:
    """
    Dependency gating every admin UI endpoint on ``ui.is_access_allowed``.

    Raises:
        HTTPException: 401 when the predicate rejects the session
    """
    if not system_config.ui.is_access_allowed(session):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Sign in to access the admin UI",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return session

"""API Routes."""

from fastapi import APIRouter

from .admin import router as admin_router
from .auth import router as auth_router
from .health import router as health_router
from .organizations import router as organizations_router
from .posts import router as posts_router
from .tags import router as tags_router
from .users import router as users_router

# Create main API router
api_router = APIRouter()

api_router.include_router(health_router, tags=["Health"])
api_router.include_router(auth_router)
api_router.include_router(users_router)
api_router.include_router(posts_router)
api_router.include_router(tags_router)
api_router.include_router(organizations_router)
api_router.include_router(admin_router)

"""API v1 routes."""

from fastapi import APIRouter

from blog_api.api.v1 import auth, health, user

router = APIRouter()
router.include_router(health.router, tags=["health"])
router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(user.router, prefix="/user", tags=["user"])

"""API v1 router aggregation."""

from fastapi import APIRouter

from app.api.v1 import comments, notifications, posts, users

api_router = APIRouter()

# Include all endpoint routers
api_router.include_router(posts.router, prefix="/posts", tags=["Posts"])
api_router.include_router(comments.router, prefix="/comments", tags=["Comments"])
api_router.include_router(notifications.router, prefix="/notifications", tags=["Notifications"])
api_router.include_router(users.router, prefix="/users", tags=["Users"])

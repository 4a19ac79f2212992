"""API router configuration.

This module configures the main API router and includes all endpoint routers
for different features of the application.
"""

from fastapi import APIRouter

from app.api.endpoints import analytics, health, posts, users

api_router = APIRouter()

# Include all API routers
api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(posts.router, prefix="/posts", tags=["posts"])
api_router.include_router(analytics.router, prefix="/analytics", tags=["analytics"])
api_router.include_router(analytics.raw_router, prefix="/raw", tags=["raw"])

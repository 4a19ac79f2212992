from typing import Any, Dict, List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.async_session import get_async_db
from app.schemas.analytics import PostAnalyticsResponse
from app.services.async_analytics import AsyncAnalyticsService

router = APIRouter()
raw_router = APIRouter()


@router.get("/posts", response_model=PostAnalyticsResponse)
async def post_analytics(db: AsyncSession = Depends(get_async_db)):
    """Per-category post statistics and the top authors by post count."""
    category_analytics = await AsyncAnalyticsService.get_category_analytics(db)
    top_authors = await AsyncAnalyticsService.get_top_authors(db)

    return PostAnalyticsResponse(category_analytics=category_analytics, top_authors=top_authors)


@raw_router.get("/user-activity", response_model=List[Dict[str, Any]])
async def user_activity(db: AsyncSession = Depends(get_async_db)):
    """Run the raw SQL user activity report."""
    return await AsyncAnalyticsService.get_user_activity(db)

from typing import List

from pydantic import Field

from app.schemas.base import BaseSchema


class CategoryAnalytics(BaseSchema):
    category: str
    total_posts: int
    published_posts: int
    total_views: int


class AuthorCounts(BaseSchema):
    posts: int = 0
    comments: int = 0


class TopAuthor(BaseSchema):
    id: int
    name: str
    email: str
    count: AuthorCounts = Field(alias="_count")


class PostAnalyticsResponse(BaseSchema):
    category_analytics: List[CategoryAnalytics]
    top_authors: List[TopAuthor]

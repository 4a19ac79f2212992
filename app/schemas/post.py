"""Post schemas.

Request and response models for posts, including the search listing item
(author summary, categories and comment count) and the detail view.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from app.schemas.base import BaseSchema
from app.schemas.category import PostCategoryResponse
from app.schemas.comment import AuthorSummary, CommentWithAuthor


class PostResponse(BaseSchema):
    id: int
    title: str
    content: Optional[str] = None
    published: bool
    views: int
    author_id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class PostWithRelations(PostResponse):
    """Post with categories and comments, as nested under a user."""
    categories: List[PostCategoryResponse] = []
    comments: List[CommentWithAuthor] = []


class PostCount(BaseSchema):
    comments: int = 0


class PostSearchItem(PostResponse):
    author: AuthorSummary
    categories: List[PostCategoryResponse] = []
    count: PostCount = Field(default_factory=PostCount, alias="_count")


class PostDetailResponse(PostResponse):
    author: AuthorSummary
    categories: List[PostCategoryResponse] = []
    comments: List[CommentWithAuthor] = []

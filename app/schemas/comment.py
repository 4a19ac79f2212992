from datetime import datetime
from typing import Optional

from app.schemas.base import BaseSchema


class AuthorSummary(BaseSchema):
    id: int
    name: str
    email: str


class PostSummary(BaseSchema):
    id: int
    title: str


class CommentResponse(BaseSchema):
    id: int
    content: str
    author_id: int
    post_id: int
    created_at: Optional[datetime] = None


class CommentWithAuthor(CommentResponse):
    author: AuthorSummary


class CommentWithPost(CommentResponse):
    post: PostSummary

from datetime import datetime
from typing import Optional

from app.schemas.base import BaseSchema


class CategoryResponse(BaseSchema):
    id: int
    name: str
    color: Optional[str] = None


class PostCategoryResponse(BaseSchema):
    """A junction row together with the category it points at."""
    post_id: int
    category_id: int
    assigned_at: Optional[datetime] = None
    category: CategoryResponse

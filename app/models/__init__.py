"""Database models."""

# Import all models here to ensure they're recognized by SQLAlchemy
from app.models.category import Category
from app.models.comment import Comment
from app.models.post import Post
from app.models.post_category import PostCategory
from app.models.profile import Profile
from app.models.user import User, UserRole

__all__ = [
    "User",
    "UserRole",
    "Profile",
    "Post",
    "Category",
    "PostCategory",
    "Comment",
]

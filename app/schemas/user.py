"""User schemas.

This module contains Pydantic models for user data validation and serialization.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import Field, field_validator

from app.models.user import UserRole
from app.schemas.base import BaseSchema, check_email_format
from app.schemas.comment import CommentWithPost
from app.schemas.post import PostWithRelations
from app.schemas.profile import ProfileCreate, ProfileResponse, ProfileUpdate


class UserCreate(BaseSchema):
    """Schema for creating a user, optionally with a nested profile."""

    email: str
    name: str = Field(..., min_length=1, max_length=255)
    age: Optional[int] = Field(None, ge=0)
    role: Optional[UserRole] = None
    is_active: Optional[bool] = None
    profile: Optional[ProfileCreate] = None

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        return check_email_format(v)


class UserUpdate(BaseSchema):
    """Schema for partial user updates.

    Only fields present in the request body are written. A ``profile`` object
    is upserted: created when the user has none, updated otherwise.
    """

    email: Optional[str] = None
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    age: Optional[int] = Field(None, ge=0)
    role: Optional[UserRole] = None
    is_active: Optional[bool] = None
    profile: Optional[ProfileUpdate] = None

    @field_validator("email")
    @classmethod
    def check_email(cls, v: Optional[str]) -> Optional[str]:
        return check_email_format(v)


class UserResponse(BaseSchema):
    id: int
    email: str
    name: str
    age: Optional[int] = None
    role: UserRole
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class UserWithProfileResponse(UserResponse):
    profile: Optional[ProfileResponse] = None


class UserDetailResponse(UserWithProfileResponse):
    """User with every declared relation loaded."""

    posts: List[PostWithRelations] = []
    comments: List[CommentWithPost] = []

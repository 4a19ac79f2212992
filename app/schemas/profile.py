"""Profile schemas."""

from typing import Optional

from pydantic import Field

from app.schemas.base import BaseSchema


class ProfileBase(BaseSchema):
    bio: Optional[str] = None
    avatar: Optional[str] = Field(None, max_length=500)
    website: Optional[str] = Field(None, max_length=500)
    location: Optional[str] = Field(None, max_length=255)


class ProfileCreate(ProfileBase):
    """Profile payload nested in user creation."""
    pass


class ProfileUpdate(ProfileBase):
    """Profile payload nested in user updates; upserted onto the user."""
    pass


class ProfileResponse(ProfileBase):
    id: int
    user_id: int

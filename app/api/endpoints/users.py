"""User API endpoints.

Listing with pagination and filters, detail with every relation, creation with
a nested profile, partial update with profile upsert, and deletion.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.db.async_session import get_async_db
from app.models.user import UserRole
from app.schemas.base import PaginatedResponse, PaginationMeta
from app.schemas.user import (
    UserCreate,
    UserDetailResponse,
    UserResponse,
    UserUpdate,
    UserWithProfileResponse,
)
from app.services.async_user import AsyncUserService, page_count

router = APIRouter()


def _list_item(user, include_profile: bool) -> UserWithProfileResponse:
    if include_profile:
        return UserWithProfileResponse.model_validate(user)
    # Profile is not loaded, so it must not be touched
    return UserWithProfileResponse(**UserResponse.model_validate(user).model_dump(), profile=None)


@router.get("", response_model=PaginatedResponse[UserWithProfileResponse])
async def list_users(
    page: int = Query(1, ge=1, description="Page number"),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE, description="Items per page"),
    include_profile: bool = Query(False, description="Eagerly load each user's profile"),
    role: Optional[UserRole] = Query(None, description="Filter by role"),
    search: Optional[str] = Query(None, description="Case-insensitive match on name or email"),
    db: AsyncSession = Depends(get_async_db),
):
    """List users, newest first."""
    users, total = await AsyncUserService.list_users(
        db=db,
        page=page,
        limit=limit,
        role=role,
        search=search,
        include_profile=include_profile,
    )

    return PaginatedResponse[UserWithProfileResponse](
        data=[_list_item(user, include_profile) for user in users],
        pagination=PaginationMeta(page=page, limit=limit, total=total, total_pages=page_count(total, limit)),
    )


@router.get("/{user_id}", response_model=UserDetailResponse)
async def get_user(user_id: int, db: AsyncSession = Depends(get_async_db)):
    """Get a user with profile, posts, categories and comments."""
    return await AsyncUserService.get_user_detail(db=db, user_id=user_id)


@router.post("", response_model=UserWithProfileResponse, status_code=status.HTTP_201_CREATED)
async def create_user(user_data: UserCreate, db: AsyncSession = Depends(get_async_db)):
    """Create a new user, optionally with a profile."""
    return await AsyncUserService.create_user(db=db, user_data=user_data)


@router.put("/{user_id}", response_model=UserWithProfileResponse)
async def update_user(user_id: int, user_data: UserUpdate, db: AsyncSession = Depends(get_async_db)):
    """Update a user; a nested profile is created or updated."""
    return await AsyncUserService.update_user(db=db, user_id=user_id, user_data=user_data)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(user_id: int, db: AsyncSession = Depends(get_async_db)):
    """Delete a user."""
    await AsyncUserService.delete_user(db=db, user_id=user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

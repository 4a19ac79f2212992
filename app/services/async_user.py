"""Async user service.

This module contains the business logic for managing users and their nested
profile: paginated listing with filters, detail retrieval with every relation
eagerly loaded, creation, partial update with profile upsert, and deletion.
"""

import logging
import math
from typing import List, Optional, Tuple

from fastapi import HTTPException, status
from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import lazyload, selectinload

from app.models.comment import Comment
from app.models.post import Post
from app.models.post_category import PostCategory
from app.models.profile import Profile
from app.models.user import User, UserRole
from app.schemas.user import UserCreate, UserUpdate
from app.services.async_error_handler import AsyncErrorHandler, is_unique_violation

logger = logging.getLogger(__name__)


def page_count(total: int, limit: int) -> int:
    """Number of pages needed to show ``total`` rows, ``limit`` at a time."""
    return math.ceil(total / limit) if limit > 0 else 0


class AsyncUserService:
    """Async service class for user operations."""

    @staticmethod
    def _user_filters(role: Optional[UserRole] = None, search: Optional[str] = None) -> list:
        filters = []
        if role is not None:
            filters.append(User.role == role)
        if search:
            filters.append(or_(
                User.name.icontains(search, autoescape=True),
                User.email.icontains(search, autoescape=True),
            ))
        return filters

    @staticmethod
    async def list_users(
        db: AsyncSession,
        page: int = 1,
        limit: int = 10,
        role: Optional[UserRole] = None,
        search: Optional[str] = None,
        include_profile: bool = False,
    ) -> Tuple[List[User], int]:
        """Get one page of users matching the filters, and the total match count."""
        filters = AsyncUserService._user_filters(role, search)

        query = select(User).where(*filters)
        if include_profile:
            query = query.options(selectinload(User.profile))
        else:
            query = query.options(lazyload(User.profile))

        query = (
            query.order_by(User.created_at.desc(), User.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        result = await db.execute(query)
        users = result.scalars().all()

        count_result = await db.execute(select(func.count(User.id)).where(*filters))
        total = count_result.scalar() or 0

        return users, total

    @staticmethod
    async def get_user_detail(db: AsyncSession, user_id: int) -> User:
        """Get a user with profile, posts, categories, comments and comment authors."""
        result = await db.execute(
            select(User)
            .options(
                selectinload(User.profile),
                selectinload(User.posts).selectinload(Post.categories).selectinload(PostCategory.category),
                selectinload(User.posts).selectinload(Post.comments).selectinload(Comment.author),
                selectinload(User.comments).selectinload(Comment.post),
            )
            .where(User.id == user_id)
        )
        user = result.scalar_one_or_none()

        if not user:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
        return user

    @staticmethod
    async def get_user_with_profile(db: AsyncSession, user_id: int) -> Optional[User]:
        result = await db.execute(
            select(User)
            .options(selectinload(User.profile))
            .where(User.id == user_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def create_user(db: AsyncSession, user_data: UserCreate) -> User:
        """Create a user and, when given, its profile in the same commit."""
        values = user_data.model_dump(exclude={"profile"}, exclude_none=True)
        user = User(**values)

        if user_data.profile is not None:
            user.profile = Profile(**user_data.profile.model_dump())

        db.add(user)
        try:
            await db.commit()
        except IntegrityError as e:
            await db.rollback()
            if is_unique_violation(e):
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST, detail="Email already exists"
                )
            raise AsyncErrorHandler.handle_error(e, "create user")

        logger.info(f"Created user {user.id} <{user.email}>")
        return await AsyncUserService.get_user_with_profile(db, user.id)

    @staticmethod
    async def update_user(db: AsyncSession, user_id: int, user_data: UserUpdate) -> User:
        """Update scalar fields and upsert the nested profile."""
        user = await AsyncUserService.get_user_with_profile(db, user_id)

        if not user:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

        update_data = user_data.model_dump(exclude_unset=True, exclude={"profile"})
        for field, value in update_data.items():
            # Explicit nulls are ignored for required columns
            if value is None and field in ("email", "name", "role", "is_active"):
                continue
            setattr(user, field, value)

        if user_data.profile is not None:
            profile_data = user_data.profile.model_dump(exclude_unset=True)
            if user.profile is None:
                user.profile = Profile(**profile_data)
            else:
                for field, value in profile_data.items():
                    setattr(user.profile, field, value)

        try:
            await db.commit()
        except IntegrityError as e:
            await db.rollback()
            if is_unique_violation(e):
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST, detail="Email already exists"
                )
            raise AsyncErrorHandler.handle_error(e, "update user")

        return await AsyncUserService.get_user_with_profile(db, user_id)

    @staticmethod
    async def delete_user(db: AsyncSession, user_id: int) -> None:
        """Delete a user together with everything it owns."""
        user = await db.get(User, user_id)

        if not user:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

        await db.delete(user)
        await db.commit()
        logger.info(f"Deleted user {user_id}")

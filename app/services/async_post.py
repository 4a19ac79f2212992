from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple
import logging

from fastapi import HTTPException, status
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models.category import Category
from app.models.comment import Comment
from app.models.post import Post
from app.models.post_category import PostCategory
from app.models.user import User
from app.services.async_error_handler import async_transaction_rollback

logger = logging.getLogger(__name__)


class AsyncPostService:
    """Async service for post search, retrieval and ownership transfer."""

    @staticmethod
    def build_search_filters(
        q: Optional[str] = None,
        category: Optional[str] = None,
        author: Optional[str] = None,
        published: Optional[str] = None,
        min_views: Optional[int] = None,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
    ) -> list:
        """Build the conjunctive WHERE clauses for a post search.

        ``published`` is the raw query-string value: ``"true"`` selects
        published posts and any other value selects drafts.
        """
        filters = []

        if q:
            filters.append(or_(
                Post.title.icontains(q, autoescape=True),
                Post.content.icontains(q, autoescape=True),
            ))

        if category:
            filters.append(
                Post.categories.any(
                    PostCategory.category.has(func.lower(Category.name) == category.lower())
                )
            )

        if author:
            filters.append(Post.author.has(User.name.icontains(author, autoescape=True)))

        if published is not None:
            filters.append(Post.published == (published == "true"))

        if min_views is not None:
            filters.append(Post.views >= min_views)

        if date_from is not None:
            filters.append(Post.created_at >= date_from)
        if date_to is not None:
            filters.append(Post.created_at <= date_to)

        return filters

    @staticmethod
    async def search_posts(
        db: AsyncSession,
        page: int = 1,
        limit: int = 10,
        **criteria,
    ) -> Tuple[List[Post], int, Dict[int, int]]:
        """Search posts.

        Returns the page of posts (author and categories loaded), the total
        number of matches, and a mapping of post id to comment count.
        """
        filters = AsyncPostService.build_search_filters(**criteria)

        result = await db.execute(
            select(Post)
            .options(
                selectinload(Post.author),
                selectinload(Post.categories).selectinload(PostCategory.category),
            )
            .where(*filters)
            .order_by(Post.created_at.desc(), Post.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        posts = result.scalars().all()

        count_result = await db.execute(select(func.count(Post.id)).where(*filters))
        total = count_result.scalar() or 0

        comment_counts = await AsyncPostService.count_comments(db, [post.id for post in posts])
        return posts, total, comment_counts

    @staticmethod
    async def count_comments(db: AsyncSession, post_ids: Sequence[int]) -> Dict[int, int]:
        if not post_ids:
            return {}
        result = await db.execute(
            select(Comment.post_id, func.count(Comment.id))
            .where(Comment.post_id.in_(post_ids))
            .group_by(Comment.post_id)
        )
        return {post_id: count for post_id, count in result.all()}

    @staticmethod
    async def get_post_detail(db: AsyncSession, post_id: int) -> Post:
        result = await db.execute(
            select(Post)
            .options(
                selectinload(Post.author),
                selectinload(Post.categories).selectinload(PostCategory.category),
                selectinload(Post.comments).selectinload(Comment.author),
            )
            .where(Post.id == post_id)
        )
        post = result.scalar_one_or_none()

        if not post:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Post not found")
        return post

    @staticmethod
    async def transfer_post(db: AsyncSession, post_id: int, new_author_email: str) -> Tuple[Post, User]:
        """Reassign a post to the user owning ``new_author_email``.

        The author lookup, post lookup and reassignment run as one transaction;
        a missing author or post aborts it with a 400 and nothing is written.
        Returns the updated post and the previous author.
        """
        async with async_transaction_rollback(db):
            author_result = await db.execute(select(User).where(User.email == new_author_email))
            new_author = author_result.scalar_one_or_none()

            if not new_author:
                raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="New author not found")

            post_result = await db.execute(
                select(Post).options(selectinload(Post.author)).where(Post.id == post_id)
            )
            current_post = post_result.scalar_one_or_none()

            if not current_post:
                raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Post not found")

            previous_author = current_post.author
            current_post.author_id = new_author.id
            await db.flush()

            updated_result = await db.execute(
                select(Post)
                .options(
                    selectinload(Post.author),
                    selectinload(Post.categories).selectinload(PostCategory.category),
                )
                .where(Post.id == post_id)
                .execution_options(populate_existing=True)
            )
            updated_post = updated_result.scalar_one()

        logger.info(
            f"Transferred post {post_id} from user {previous_author.id} to user {new_author.id}"
        )
        return updated_post, previous_author

"""Async analytics service.

Read-only aggregate queries over posts, categories and authors, plus the
fixed raw SQL user activity report.
"""

from typing import Any, Dict, List

from sqlalchemy import case, desc, func, select, text
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.category import Category
from app.models.comment import Comment
from app.models.post import Post
from app.models.post_category import PostCategory
from app.models.user import User

TOP_AUTHORS_LIMIT = 5

# AVG has no COALESCE: users without posts report NULL.
USER_ACTIVITY_SQL = text("""
    SELECT
        u.id,
        u.name,
        u.email,
        COUNT(DISTINCT p.id) as post_count,
        COUNT(DISTINCT c.id) as comment_count,
        AVG(p.views) as avg_post_views,
        MAX(p.created_at) as last_post_date
    FROM users u
    LEFT JOIN posts p ON u.id = p.author_id
    LEFT JOIN comments c ON u.id = c.author_id
    WHERE u.is_active = true
    GROUP BY u.id, u.name, u.email
    ORDER BY post_count DESC, comment_count DESC
    LIMIT 10
""")


class AsyncAnalyticsService:
    """Async service for analytics queries."""

    @staticmethod
    async def get_category_analytics(db: AsyncSession) -> List[Dict[str, Any]]:
        """Per-category post count, published post count and total views."""
        published_flag = case((Post.published.is_(True), 1), else_=0)
        query = (
            select(
                Category.name,
                func.count(Post.id).label("total_posts"),
                func.coalesce(func.sum(published_flag), 0).label("published_posts"),
                func.coalesce(func.sum(Post.views), 0).label("total_views"),
            )
            .select_from(Category)
            .outerjoin(PostCategory, PostCategory.category_id == Category.id)
            .outerjoin(Post, Post.id == PostCategory.post_id)
            .group_by(Category.id, Category.name)
            .order_by(Category.id)
        )
        result = await db.execute(query)

        return [
            {
                "category": row.name,
                "total_posts": int(row.total_posts),
                "published_posts": int(row.published_posts),
                "total_views": int(row.total_views),
            }
            for row in result.all()
        ]

    @staticmethod
    async def get_top_authors(db: AsyncSession, limit: int = TOP_AUTHORS_LIMIT) -> List[Dict[str, Any]]:
        """Users with the most posts, with their post and comment counts."""
        post_count = (
            select(func.count(Post.id))
            .where(Post.author_id == User.id)
            .correlate(User)
            .scalar_subquery()
        )
        comment_count = (
            select(func.count(Comment.id))
            .where(Comment.author_id == User.id)
            .correlate(User)
            .scalar_subquery()
        )
        query = (
            select(
                User.id,
                User.name,
                User.email,
                post_count.label("post_count"),
                comment_count.label("comment_count"),
            )
            .order_by(desc(post_count), User.id)
            .limit(limit)
        )
        result = await db.execute(query)

        return [
            {
                "id": row.id,
                "name": row.name,
                "email": row.email,
                "count": {"posts": int(row.post_count), "comments": int(row.comment_count)},
            }
            for row in result.all()
        ]

    @staticmethod
    async def get_user_activity(db: AsyncSession) -> List[Dict[str, Any]]:
        """Run the raw user activity report and return its rows verbatim."""
        result = await db.execute(USER_ACTIVITY_SQL)
        return [dict(row) for row in result.mappings().all()]

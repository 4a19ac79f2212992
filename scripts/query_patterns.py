#!/usr/bin/env python3
"""
Advanced query patterns against the seeded blog schema.

Walks through relation loading, nested filtering, transactions, loading
strategies, pagination, aggregation, error handling and raw SQL. Expects the
database to have been seeded with ``seed_data/seed_blog.py`` first.

Usage:
    python scripts/query_patterns.py
"""

import asyncio
import os
import sys
import time

# Add the project root to the Python path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy import desc, func, select, text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.db.async_session import close_async_db_manager, get_async_db_manager
from app.models import Category, Comment, Post, PostCategory, Profile, User, UserRole
from app.services.async_error_handler import async_transaction_rollback, is_unique_violation
from app.services.async_user import page_count
from app.utils.logger import get_logger

logger = get_logger("QUERIES")

TX_DEMO_EMAIL = "transaction.user@example.com"


async def relation_queries(db: AsyncSession) -> None:
    logger.section_start("relation queries")

    # One-to-many with nested relations and ordered children
    result = await db.execute(
        select(User)
        .options(
            selectinload(User.profile),
            selectinload(User.posts)
            .selectinload(Post.categories)
            .selectinload(PostCategory.category),
            selectinload(User.posts).selectinload(Post.comments).selectinload(Comment.author),
        )
        .limit(1)
    )
    user = result.scalar_one_or_none()
    if user:
        posts = sorted(user.posts, key=lambda p: p.created_at, reverse=True)
        logger.info(f"User {user.name}: {len(posts)} posts, profile location={user.profile.location if user.profile else None}")
        for post in posts[:3]:
            names = ", ".join(pc.category.name for pc in post.categories)
            logger.info(f"  {post.title!r} [{names}] {len(post.comments)} comments")

    # Many-to-many through the association row
    result = await db.execute(
        select(Category)
        .options(
            selectinload(Category.posts.and_(PostCategory.post.has(Post.published.is_(True))))
            .selectinload(PostCategory.post)
            .selectinload(Post.author)
        )
    )
    for category in result.scalars().all():
        logger.info(f"Category {category.name}: {len(category.posts)} published posts")

    logger.section_end("relation queries")


async def complex_filtering(db: AsyncSession) -> None:
    logger.section_start("complex filtering")

    # Users with at least one published post in Technology
    result = await db.execute(
        select(User)
        .where(
            User.posts.any(
                (Post.published.is_(True))
                & Post.categories.any(PostCategory.category.has(Category.name == "Technology"))
            )
        )
        .order_by(User.id)
    )
    tech_writers = result.scalars().all()
    logger.info(f"Users with published Technology posts: {len(tech_writers)}")

    # Posts with comments from admins, or with many views
    result = await db.execute(
        select(Post)
        .where(
            Post.comments.any(Comment.author.has(User.role == UserRole.ADMIN))
            | (Post.views > 500)
        )
        .order_by(desc(Post.views))
        .limit(5)
    )
    for post in result.scalars().all():
        logger.info(f"  {post.title!r} ({post.views} views)")

    # Users that have no profile
    missing = await db.scalar(select(func.count(User.id)).where(~User.profile.has()))
    logger.info(f"Users without a profile: {missing}")

    logger.section_end("complex filtering")


async def transaction_examples(db: AsyncSession) -> None:
    logger.section_start("transactions")

    existing = await db.scalar(select(User).where(User.email == TX_DEMO_EMAIL))
    if existing:
        await db.delete(existing)
        await db.commit()

    # Successful transaction: a user and their first post commit together
    async with async_transaction_rollback(db):
        user = User(email=TX_DEMO_EMAIL, name="Transaction User",
                    profile=Profile(bio="Created within a transaction"))
        db.add(user)
        await db.flush()
        db.add(Post(title="Transaction Post", content="Created atomically with the user",
                    author_id=user.id, published=True))
    logger.success(f"Transaction committed: user id={user.id}")

    # Failing transaction: the raise rolls back the pending post
    try:
        async with async_transaction_rollback(db):
            db.add(Post(title="This post will not survive", author_id=user.id))
            await db.flush()
            raise RuntimeError("Simulated failure inside transaction")
    except RuntimeError as e:
        logger.warning(f"Transaction rolled back: {e}")

    survivors = await db.scalar(
        select(func.count(Post.id)).where(Post.title == "This post will not survive")
    )
    logger.info(f"Rolled-back posts present afterwards: {survivors}")

    logger.section_end("transactions")


async def loading_strategies(db: AsyncSession) -> None:
    logger.section_start("loading strategies")

    start = time.perf_counter()
    result = await db.execute(
        select(Post.id, Post.title, User.name.label("author_name"))
        .join(User, Post.author_id == User.id)
        .where(Post.published.is_(True))
    )
    columns = result.all()
    column_ms = (time.perf_counter() - start) * 1000

    start = time.perf_counter()
    result = await db.execute(
        select(Post)
        .options(
            selectinload(Post.author).selectinload(User.profile),
            selectinload(Post.categories).selectinload(PostCategory.category),
            selectinload(Post.comments),
        )
        .where(Post.published.is_(True))
    )
    entities = result.scalars().all()
    eager_ms = (time.perf_counter() - start) * 1000

    logger.info(f"Column select: {len(columns)} rows in {column_ms:.1f}ms")
    logger.info(f"Eager-loaded entities: {len(entities)} rows in {eager_ms:.1f}ms")

    logger.section_end("loading strategies")


async def pagination_examples(db: AsyncSession, page: int = 1, limit: int = 5) -> None:
    logger.section_start("pagination")

    conditions = (Post.published.is_(True),)
    total = await db.scalar(select(func.count(Post.id)).where(*conditions))
    result = await db.execute(
        select(Post)
        .options(selectinload(Post.author))
        .where(*conditions)
        .order_by(Post.created_at.desc(), Post.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    posts = result.scalars().all()

    logger.info(f"Page {page}/{page_count(total, limit)} ({total} published posts)")
    for post in posts:
        logger.info(f"  {post.id}: {post.title!r} by {post.author.name}")

    logger.section_end("pagination")


async def aggregation_examples(db: AsyncSession) -> None:
    logger.section_start("aggregation")

    result = await db.execute(
        select(User.role, func.count(User.id).label("users"), func.avg(User.age).label("avg_age"))
        .group_by(User.role)
    )
    for row in result.all():
        role = getattr(row.role, "value", row.role)
        logger.info(f"Role {role}: {row.users} users, avg age {float(row.avg_age or 0):.1f}")

    result = await db.execute(
        select(
            Category.name,
            func.count(PostCategory.post_id).label("posts"),
            func.coalesce(func.sum(Post.views), 0).label("views"),
        )
        .select_from(Category)
        .outerjoin(PostCategory, PostCategory.category_id == Category.id)
        .outerjoin(Post, Post.id == PostCategory.post_id)
        .group_by(Category.name)
        .order_by(desc("views"))
    )
    for row in result.all():
        logger.info(f"Category {row.name}: {row.posts} posts, {row.views} views")

    logger.section_end("aggregation")


async def error_handling_examples(db: AsyncSession) -> None:
    logger.section_start("error handling")

    any_user = await db.scalar(select(User).limit(1))

    # Unique constraint violation
    if any_user:
        email = any_user.email
        try:
            db.add(User(email=email, name="Duplicate"))
            await db.commit()
        except IntegrityError as e:
            await db.rollback()
            if is_unique_violation(e):
                logger.warning(f"Unique constraint violation on email {email}")
            else:
                raise

    # Missing row
    missing = await db.get(User, -1)
    if missing is None:
        logger.warning("User -1 not found")

    # Update only if the row still exists
    target = await db.get(Post, -1)
    if target is None:
        logger.info("Safe update skipped: post -1 does not exist")
    else:
        target.views += 1
        await db.commit()

    logger.section_end("error handling")


async def raw_sql_examples(db: AsyncSession) -> None:
    logger.section_start("raw sql")

    result = await db.execute(text("""
        SELECT
            u.name,
            u.email,
            COUNT(p.id) AS post_count,
            COALESCE(AVG(p.views), 0) AS avg_views
        FROM users u
        LEFT JOIN posts p ON p.author_id = u.id
        GROUP BY u.id, u.name, u.email
        HAVING COUNT(p.id) > 0
        ORDER BY post_count DESC
        LIMIT 5
    """))
    for row in result.mappings().all():
        logger.info(f"{row['name']} <{row['email']}>: {row['post_count']} posts, {float(row['avg_views']):.1f} avg views")

    result = await db.execute(
        text("UPDATE posts SET views = views + 1 WHERE published = :published"),
        {"published": True},
    )
    await db.commit()
    logger.success(f"Raw update touched {result.rowcount} posts")

    logger.section_end("raw sql")


async def main() -> None:
    manager = await get_async_db_manager()
    try:
        async with manager.create_session() as db:
            await relation_queries(db)
            await complex_filtering(db)
            await transaction_examples(db)
            await loading_strategies(db)
            await pagination_examples(db)
            await aggregation_examples(db)
            await error_handling_examples(db)
            await raw_sql_examples(db)
    except Exception as e:
        logger.error(f"Error in query examples: {e}")
        raise
    finally:
        await close_async_db_manager()


if __name__ == "__main__":
    asyncio.run(main())

#!/usr/bin/env python3
"""
Basic CRUD walkthrough against the blog schema.

Creates, reads, updates and deletes users and posts, then runs a few
aggregations. Rows created here use fixed demo emails and are removed at the
start of every run so the script can be repeated.

Usage:
    python scripts/basic_crud.py
"""

import asyncio
import os
import sys

# Add the project root to the Python path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy import and_, delete, func, or_, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.db.async_session import close_async_db_manager, get_async_db_manager
from app.models import Comment, Post, Profile, User
from app.utils.logger import get_logger

logger = get_logger("CRUD")

DEMO_EMAILS = ("john.doe@example.com", "jane.smith@example.com", "bob.wilson@example.com")


async def reset_demo_rows(db: AsyncSession) -> None:
    result = await db.execute(select(User).where(User.email.in_(DEMO_EMAILS)))
    for user in result.scalars().all():
        await db.delete(user)
    await db.commit()


async def create_examples(db: AsyncSession) -> tuple:
    logger.section_start("create")

    # Simple create
    john = User(email="john.doe@example.com", name="John Doe", age=30)
    db.add(john)
    await db.commit()
    logger.success(f"Created user: id={john.id} name={john.name}")

    # Create with a nested one-to-one row
    jane = User(
        email="jane.smith@example.com",
        name="Jane Smith",
        age=28,
        profile=Profile(bio="Software Developer", website="https://janesmith.dev", location="San Francisco"),
    )
    db.add(jane)
    await db.commit()
    logger.success(f"Created user with profile: {jane.name} -> {jane.profile.bio}")

    # Create referencing an existing row
    post = Post(
        title="Learning SQLAlchemy",
        content="SQLAlchemy is a powerful toolkit for working with databases...",
        published=True,
        author_id=john.id,
    )
    db.add(post)
    await db.commit()
    logger.success(f"Created post: id={post.id} title={post.title!r}")

    logger.section_end("create")
    return john, jane, post


async def read_examples(db: AsyncSession) -> None:
    logger.section_start("read")

    # Filter and select only some columns
    result = await db.execute(
        select(User.id, User.name, User.email, User.age)
        .where(User.age >= 25, User.is_active.is_(True))
        .order_by(User.created_at.desc())
        .limit(5)
    )
    for row in result.all():
        logger.info(f"User (age >= 25): {row.name} <{row.email}> age={row.age}")

    # Unique lookup with relations, loading only published posts
    result = await db.execute(
        select(User)
        .options(
            selectinload(User.profile),
            selectinload(User.posts.and_(Post.published.is_(True)))
            .selectinload(Post.comments)
            .selectinload(Comment.author),
        )
        .where(User.email == "jane.smith@example.com")
    )
    jane = result.scalar_one_or_none()
    if jane:
        logger.info(f"User with relations: {jane.name}, profile={jane.profile.bio!r}, published posts={len(jane.posts)}")

    # AND of conditions with a nested OR
    result = await db.execute(
        select(Post)
        .options(selectinload(Post.author))
        .where(
            and_(
                Post.published.is_(True),
                Post.views >= 100,
                or_(Post.title.ilike("%sqlalchemy%"), Post.content.ilike("%database%")),
            )
        )
    )
    for post in result.scalars().all():
        logger.info(f"Filtered post: {post.title!r} by {post.author.name} ({post.views} views)")

    logger.section_end("read")


async def update_examples(db: AsyncSession, john: User) -> None:
    logger.section_start("update")

    # Simple update through the identity map
    john.age = 31
    john.name = "John Doe Updated"
    await db.commit()
    logger.success(f"Updated user: {john.name} age={john.age}")

    # Nested update of the related profile
    result = await db.execute(
        select(User).options(selectinload(User.profile)).where(User.email == "jane.smith@example.com")
    )
    jane = result.scalar_one()
    jane.profile.bio = "Senior Software Developer & Tech Lead"
    jane.profile.location = "Remote"
    await db.commit()
    logger.success(f"Updated profile: {jane.profile.bio} ({jane.profile.location})")

    # Bulk update
    result = await db.execute(
        update(Post)
        .where(Post.author_id == john.id, Post.published.is_(False))
        .values(published=True)
    )
    await db.commit()
    logger.success(f"Updated posts count: {result.rowcount}")

    # Upsert keyed on the unique email
    stmt = pg_insert(User).values(email="bob.wilson@example.com", name="Bob Wilson", age=33)
    stmt = stmt.on_conflict_do_update(
        index_elements=[User.email],
        set_={"name": "Bob Wilson Updated", "age": 35},
    ).returning(User.id, User.name, User.age)
    result = await db.execute(stmt)
    bob = result.one()
    await db.commit()
    logger.success(f"Upserted user: id={bob.id} name={bob.name} age={bob.age}")

    logger.section_end("update")


async def delete_examples(db: AsyncSession, post: Post) -> None:
    logger.section_start("delete")

    await db.delete(post)
    await db.commit()
    logger.success(f"Deleted post: id={post.id}")

    result = await db.execute(
        delete(Post).where(Post.published.is_(False), Post.views < 10)
    )
    await db.commit()
    logger.success(f"Deleted posts count: {result.rowcount}")

    logger.section_end("delete")


async def aggregation_examples(db: AsyncSession) -> None:
    logger.section_start("aggregation")

    active_users = await db.scalar(select(func.count(User.id)).where(User.is_active.is_(True)))
    logger.info(f"Active users count: {active_users}")

    result = await db.execute(
        select(
            func.count(Post.id).label("count"),
            func.avg(Post.views).label("avg"),
            func.max(Post.views).label("max"),
            func.min(Post.views).label("min"),
            func.sum(Post.views).label("sum"),
        ).where(Post.published.is_(True))
    )
    stats = result.one()
    logger.info(f"Post statistics: {dict(stats._mapping)}")

    result = await db.execute(
        select(
            Post.author_id,
            func.count(Post.id).label("post_count"),
            func.avg(Post.views).label("avg_views"),
        )
        .group_by(Post.author_id)
        .having(func.count(Post.id) >= 2)
    )
    for row in result.all():
        logger.info(f"Author {row.author_id}: {row.post_count} posts, {float(row.avg_views or 0):.1f} avg views")

    logger.section_end("aggregation")


async def main() -> None:
    manager = await get_async_db_manager()
    try:
        async with manager.create_session() as db:
            await reset_demo_rows(db)
            john, jane, post = await create_examples(db)
            await read_examples(db)
            await update_examples(db, john)
            await delete_examples(db, post)
            await aggregation_examples(db)
    except Exception as e:
        logger.error(f"Error in CRUD examples: {e}")
        raise
    finally:
        await close_async_db_manager()


if __name__ == "__main__":
    asyncio.run(main())

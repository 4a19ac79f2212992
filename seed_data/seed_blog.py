#!/usr/bin/env python3
"""
Seed the database with a demo blog dataset.

Clears every table in foreign-key order, then creates the fixed categories,
users with profiles, posts assigned to random categories, and comments from
random users. Content is generated with Faker; the structure is always the
same, so reseeding reproduces the same user/profile/category counts.

Usage:
    python seed_data/seed_blog.py [--users 10] [--seed 42]
"""

import argparse
import asyncio
import os
import random
import sys
from typing import Dict, List, Optional

# Add the project root to the Python path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from faker import Faker
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.db.async_session import close_async_db_manager, get_async_db_manager
from app.models import Category, Comment, Post, PostCategory, Profile, User, UserRole
from app.utils.logger import get_logger

logger = get_logger("SEED")

# Children before parents
CLEAR_ORDER = (Comment, PostCategory, Post, Category, Profile, User)


class BlogSeeder:
    """Populates the schema with synthetic users, posts, categories and comments."""

    def __init__(self, db: AsyncSession, seed: Optional[int] = None):
        self.db = db
        self.fake = Faker()
        self.random = random.Random(seed)
        if seed is not None:
            self.fake.seed_instance(seed)

    async def clear(self) -> None:
        for model in CLEAR_ORDER:
            await self.db.execute(delete(model))
        await self.db.commit()
        # Bulk deletes bypass the identity map
        self.db.expunge_all()
        logger.info("🗑️  Cleared existing data")

    async def create_categories(self) -> List[Category]:
        categories = [Category(name=c["name"], color=c["color"]) for c in settings.SEED_CATEGORIES]
        self.db.add_all(categories)
        await self.db.commit()
        logger.info(f"📂 Created {len(categories)} categories")
        return categories

    async def create_users(self, count: int) -> List[User]:
        users = []
        for i in range(count):
            if i == 0:
                role = UserRole.ADMIN
            elif i == 1:
                role = UserRole.MODERATOR
            else:
                role = UserRole.USER

            user = User(
                email=self.fake.unique.email(),
                name=self.fake.name(),
                age=self.random.randint(18, 65),
                role=role,
                profile=Profile(
                    bio=self.fake.paragraph(),
                    avatar=self.fake.image_url(),
                    website=self.fake.url(),
                    location=f"{self.fake.city()}, {self.fake.country()}",
                ),
            )
            users.append(user)

        self.db.add_all(users)
        await self.db.commit()
        logger.info(f"👥 Created {len(users)} users with profiles")
        return users

    async def create_posts(self, users: List[User], categories: List[Category]) -> None:
        for user in users:
            for _ in range(self.random.randint(1, 5)):
                post = Post(
                    title=self.fake.sentence(),
                    content="\n\n".join(self.fake.paragraphs(nb=3)),
                    published=self.fake.boolean(),
                    views=self.random.randint(0, 1000),
                    author_id=user.id,
                )
                self.db.add(post)
                await self.db.flush()

                for category in self.random.sample(categories, self.random.randint(1, 3)):
                    self.db.add(PostCategory(post_id=post.id, category_id=category.id))

                for _ in range(self.random.randint(0, 5)):
                    commenter = self.random.choice(users)
                    self.db.add(Comment(
                        content=self.fake.paragraph(),
                        author_id=commenter.id,
                        post_id=post.id,
                    ))

        await self.db.commit()
        logger.info("📝 Created posts with categories and comments")

    async def collect_stats(self) -> Dict[str, int]:
        stats = {}
        for key, model in (
            ("users", User),
            ("profiles", Profile),
            ("posts", Post),
            ("categories", Category),
            ("comments", Comment),
            ("post_categories", PostCategory),
        ):
            result = await self.db.execute(select(func.count()).select_from(model))
            stats[key] = result.scalar() or 0
        return stats

    async def run(self, user_count: int) -> Dict[str, int]:
        logger.section_start("database seeding")
        await self.clear()
        categories = await self.create_categories()
        users = await self.create_users(user_count)
        await self.create_posts(users, categories)

        stats = await self.collect_stats()
        logger.success(f"📊 Database seeding completed! Statistics: {stats}")
        logger.section_end("database seeding")
        return stats


async def seed_database(db: AsyncSession, user_count: int = settings.SEED_USER_COUNT,
                        seed: Optional[int] = None) -> Dict[str, int]:
    """Clear and reseed the database through ``db``; returns row counts per table."""
    return await BlogSeeder(db, seed=seed).run(user_count)


async def main(user_count: int, seed: Optional[int]) -> None:
    manager = await get_async_db_manager()
    try:
        async with manager.create_session() as db:
            await seed_database(db, user_count=user_count, seed=seed)
    finally:
        await close_async_db_manager()


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Seed the database with demo blog data.")
    parser.add_argument("--users", type=int, default=settings.SEED_USER_COUNT, help="Number of users to create")
    parser.add_argument("--seed", type=int, default=None, help="Seed for reproducible content")
    return parser.parse_args(argv)


if __name__ == "__main__":
    args = parse_args()
    try:
        asyncio.run(main(args.users, args.seed))
    except Exception as e:
        logger.error(f"Error during seeding: {e}")
        sys.exit(1)

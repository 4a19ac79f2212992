"""
Integration tests for the blog seeder.
"""

import pytest
from sqlalchemy import func, select

from app.models import Category, User, UserRole
from seed_data.seed_blog import seed_database


@pytest.mark.asyncio
async def test_seed_database(async_session_factory):
    async with async_session_factory() as session:
        stats = await seed_database(session, user_count=6, seed=7)

    assert stats["users"] == 6
    assert stats["profiles"] == 6
    assert stats["categories"] == 4
    assert 6 <= stats["posts"] <= 30
    assert stats["post_categories"] >= stats["posts"]
    assert stats["comments"] <= stats["posts"] * 5

    async with async_session_factory() as session:
        roles = (await session.execute(select(User.role).order_by(User.id))).scalars().all()
        names = set((await session.execute(select(Category.name))).scalars().all())

    assert roles[:2] == [UserRole.ADMIN, UserRole.MODERATOR]
    assert set(roles[2:]) == {UserRole.USER}
    assert names == {"Technology", "Programming", "Design", "Business"}


@pytest.mark.asyncio
async def test_reseeding_replaces_data(async_session_factory):
    async with async_session_factory() as session:
        first = await seed_database(session, user_count=5)
    async with async_session_factory() as session:
        second = await seed_database(session, user_count=5)

    for key in ("users", "profiles", "categories"):
        assert first[key] == second[key]

    async with async_session_factory() as session:
        users = await session.scalar(select(func.count(User.id)))
    assert users == 5

"""
Async test configuration and fixtures for pytest.

Every test gets its own in-memory SQLite database with the full schema, an
async session bound to it, and an HTTP client whose requests use the same
database.
"""

from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import app.db.async_session as async_session_module
from app.db.async_session import AsyncDatabaseManager, get_async_db
from app.db.base_class import Base
from app.main import app
from app.models import Category, Comment, Post, PostCategory, Profile, User, UserRole


@pytest.fixture
def async_test_db_url() -> str:
    """Get the async test database URL."""
    return "sqlite+aiosqlite://"


@pytest_asyncio.fixture
async def async_engine(async_test_db_url):
    """Create an async engine over a fresh in-memory database with all tables."""
    engine = create_async_engine(
        async_test_db_url,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def async_session_factory(async_engine):
    return async_sessionmaker(
        bind=async_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture
async def async_db_session(async_session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create an async SQLAlchemy session for tests."""
    async with async_session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def async_client(async_engine, async_session_factory):
    """Create an HTTP client for the app, backed by the test database."""

    async def override_get_async_db():
        async with async_session_factory() as session:
            yield session

    app.dependency_overrides[get_async_db] = override_get_async_db
    # The health endpoint reads the global manager directly
    async_session_module._async_db_manager = AsyncDatabaseManager(engine=async_engine)

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides = {}
    async_session_module._async_db_manager = None


@pytest_asyncio.fixture
async def blog_data(async_session_factory) -> dict:
    """
    Create a small blog dataset and return the ids of what was created.

    alice (ADMIN, with profile): "Async SQLAlchemy in practice" (published,
    150 views, Technology) and "Draft notes" (draft, 5 views, Design).
    bob: "Design systems" (published, 40 views, Design + Technology) and one
    comment on alice's published post.
    carol: active, no posts. dave: inactive, no posts.
    Business has no posts.
    """
    now = datetime.now(timezone.utc)

    async with async_session_factory() as session:
        alice = User(
            email="alice@example.com",
            name="Alice Johnson",
            age=34,
            role=UserRole.ADMIN,
            created_at=now - timedelta(days=3),
            profile=Profile(bio="Backend engineer", location="Berlin"),
        )
        bob = User(email="bob@example.com", name="Bob Smith", age=27, created_at=now - timedelta(days=2))
        carol = User(email="carol@example.com", name="Carol White", created_at=now - timedelta(days=1))
        dave = User(email="dave@example.com", name="Dave Brown", is_active=False, created_at=now)
        technology = Category(name="Technology", color="#3B82F6")
        design = Category(name="Design", color="#F59E0B")
        business = Category(name="Business", color="#EF4444")
        session.add_all([alice, bob, carol, dave, technology, design, business])
        await session.flush()

        tech_post = Post(
            title="Async SQLAlchemy in practice",
            content="Sessions, engines and eager loading.",
            published=True,
            views=150,
            author_id=alice.id,
            created_at=now - timedelta(hours=3),
        )
        draft_post = Post(
            title="Draft notes",
            content="Unfinished thoughts about databases.",
            published=False,
            views=5,
            author_id=alice.id,
            created_at=now - timedelta(hours=2),
        )
        design_post = Post(
            title="Design systems",
            content="Tokens, components and documentation.",
            published=True,
            views=40,
            author_id=bob.id,
            created_at=now - timedelta(hours=1),
        )
        session.add_all([tech_post, draft_post, design_post])
        await session.flush()

        session.add_all([
            PostCategory(post_id=tech_post.id, category_id=technology.id),
            PostCategory(post_id=draft_post.id, category_id=design.id),
            PostCategory(post_id=design_post.id, category_id=design.id),
            PostCategory(post_id=design_post.id, category_id=technology.id),
            Comment(content="Great write-up!", author_id=bob.id, post_id=tech_post.id),
        ])
        await session.commit()

        return {
            "alice": alice.id,
            "bob": bob.id,
            "carol": carol.id,
            "dave": dave.id,
            "tech_post": tech_post.id,
            "draft_post": draft_post.id,
            "design_post": design_post.id,
            "technology": technology.id,
            "design": design.id,
            "business": business.id,
        }

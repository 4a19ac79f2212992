"""
Unit tests for the async user service.
"""

import pytest
from fastapi import HTTPException
from sqlalchemy import func, inspect, select

from app.models import Comment, Post, Profile, User, UserRole
from app.schemas.profile import ProfileCreate, ProfileUpdate
from app.schemas.user import UserCreate, UserUpdate
from app.services.async_user import AsyncUserService, page_count


def test_page_count():
    assert page_count(0, 10) == 0
    assert page_count(10, 10) == 1
    assert page_count(25, 10) == 3
    assert page_count(1, 100) == 1


@pytest.mark.asyncio
async def test_list_users_newest_first(async_db_session, blog_data):
    users, total = await AsyncUserService.list_users(async_db_session, page=1, limit=10)

    assert total == 4
    assert [user.email for user in users] == [
        "dave@example.com",
        "carol@example.com",
        "bob@example.com",
        "alice@example.com",
    ]


@pytest.mark.asyncio
async def test_list_users_pagination(async_db_session, blog_data):
    users, total = await AsyncUserService.list_users(async_db_session, page=2, limit=3)
    assert total == 4
    assert [user.email for user in users] == ["alice@example.com"]

    users, total = await AsyncUserService.list_users(async_db_session, page=5, limit=3)
    assert users == []
    assert total == 4


@pytest.mark.asyncio
async def test_list_users_filters(async_db_session, blog_data):
    admins, total = await AsyncUserService.list_users(async_db_session, role=UserRole.ADMIN)
    assert total == 1
    assert admins[0].email == "alice@example.com"

    matches, total = await AsyncUserService.list_users(async_db_session, search="ALICE")
    assert total == 1
    assert matches[0].name == "Alice Johnson"

    # Search also matches the email address
    matches, total = await AsyncUserService.list_users(async_db_session, search="bob@")
    assert total == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("term", ["_", "%", "a%e"])
async def test_list_users_search_wildcards_are_literal(async_db_session, blog_data, term):
    users, total = await AsyncUserService.list_users(async_db_session, search=term)
    assert total == 0
    assert users == []


@pytest.mark.asyncio
async def test_list_users_without_profile_leaves_it_unloaded(async_db_session, blog_data):
    users, _ = await AsyncUserService.list_users(async_db_session, role=UserRole.ADMIN)

    assert "profile" in inspect(users[0]).unloaded


@pytest.mark.asyncio
async def test_list_users_profile_loading(async_db_session, blog_data):
    users, _ = await AsyncUserService.list_users(
        async_db_session, role=UserRole.ADMIN, include_profile=True
    )
    assert users[0].profile is not None
    assert users[0].profile.bio == "Backend engineer"


@pytest.mark.asyncio
async def test_get_user_detail(async_db_session, blog_data):
    user = await AsyncUserService.get_user_detail(async_db_session, blog_data["alice"])

    assert user.profile.location == "Berlin"
    assert len(user.posts) == 2
    tech_post = next(post for post in user.posts if post.id == blog_data["tech_post"])
    assert [pc.category.name for pc in tech_post.categories] == ["Technology"]
    assert tech_post.comments[0].author.email == "bob@example.com"

    bob = await AsyncUserService.get_user_detail(async_db_session, blog_data["bob"])
    assert bob.profile is None
    assert bob.comments[0].post.title == "Async SQLAlchemy in practice"


@pytest.mark.asyncio
async def test_get_user_detail_not_found(async_db_session):
    with pytest.raises(HTTPException) as exc_info:
        await AsyncUserService.get_user_detail(async_db_session, 999)
    assert exc_info.value.status_code == 404
    assert exc_info.value.detail == "User not found"


@pytest.mark.asyncio
async def test_create_user_with_profile(async_db_session):
    user = await AsyncUserService.create_user(
        async_db_session,
        UserCreate(
            email="new.user@example.com",
            name="New User",
            age=22,
            profile=ProfileCreate(bio="Hello", website="https://example.com"),
        ),
    )

    assert user.id is not None
    assert user.role == UserRole.USER
    assert user.is_active is True
    assert user.profile.bio == "Hello"
    assert user.profile.user_id == user.id


@pytest.mark.asyncio
async def test_create_user_duplicate_email(async_db_session, blog_data):
    with pytest.raises(HTTPException) as exc_info:
        await AsyncUserService.create_user(
            async_db_session, UserCreate(email="alice@example.com", name="Another Alice")
        )
    assert exc_info.value.status_code == 400
    assert exc_info.value.detail == "Email already exists"

    count = await async_db_session.scalar(
        select(func.count(User.id)).where(User.email == "alice@example.com")
    )
    assert count == 1


@pytest.mark.asyncio
async def test_update_user_partial(async_db_session, blog_data):
    user = await AsyncUserService.update_user(
        async_db_session, blog_data["bob"], UserUpdate(name="Robert Smith")
    )

    assert user.name == "Robert Smith"
    assert user.email == "bob@example.com"
    assert user.age == 27


@pytest.mark.asyncio
async def test_update_user_creates_missing_profile(async_db_session, blog_data):
    user = await AsyncUserService.update_user(
        async_db_session, blog_data["bob"], UserUpdate(profile=ProfileUpdate(bio="Designer"))
    )
    assert user.profile is not None
    assert user.profile.bio == "Designer"

    user = await AsyncUserService.update_user(
        async_db_session, blog_data["bob"], UserUpdate(profile=ProfileUpdate(location="Lisbon"))
    )
    assert user.profile.bio == "Designer"
    assert user.profile.location == "Lisbon"

    profiles = await async_db_session.scalar(
        select(func.count(Profile.id)).where(Profile.user_id == blog_data["bob"])
    )
    assert profiles == 1


@pytest.mark.asyncio
async def test_update_user_duplicate_email(async_db_session, blog_data):
    with pytest.raises(HTTPException) as exc_info:
        await AsyncUserService.update_user(
            async_db_session, blog_data["bob"], UserUpdate(email="alice@example.com")
        )
    assert exc_info.value.status_code == 400
    assert exc_info.value.detail == "Email already exists"


@pytest.mark.asyncio
async def test_update_user_not_found(async_db_session):
    with pytest.raises(HTTPException) as exc_info:
        await AsyncUserService.update_user(async_db_session, 999, UserUpdate(name="Nobody"))
    assert exc_info.value.status_code == 404


@pytest.mark.asyncio
async def test_delete_user_removes_owned_rows(async_db_session, blog_data):
    await AsyncUserService.delete_user(async_db_session, blog_data["bob"])

    assert await async_db_session.get(User, blog_data["bob"]) is None
    posts = await async_db_session.scalar(
        select(func.count(Post.id)).where(Post.author_id == blog_data["bob"])
    )
    comments = await async_db_session.scalar(
        select(func.count(Comment.id)).where(Comment.author_id == blog_data["bob"])
    )
    assert posts == 0
    assert comments == 0


@pytest.mark.asyncio
async def test_delete_user_not_found(async_db_session):
    with pytest.raises(HTTPException) as exc_info:
        await AsyncUserService.delete_user(async_db_session, 999)
    assert exc_info.value.status_code == 404

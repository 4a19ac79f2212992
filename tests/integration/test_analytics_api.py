"""
Integration tests for the analytics and raw SQL endpoints.
"""

import pytest


@pytest.mark.asyncio
async def test_post_analytics(async_client, blog_data):
    response = await async_client.get("/api/analytics/posts")
    assert response.status_code == 200
    body = response.json()

    by_name = {row["category"]: row for row in body["categoryAnalytics"]}
    assert by_name["Technology"] == {
        "category": "Technology",
        "totalPosts": 2,
        "publishedPosts": 2,
        "totalViews": 190,
    }
    assert by_name["Business"]["totalPosts"] == 0

    top = body["topAuthors"][0]
    assert top["email"] == "alice@example.com"
    assert top["_count"] == {"posts": 2, "comments": 0}
    assert len(body["topAuthors"]) <= 5


@pytest.mark.asyncio
async def test_post_analytics_empty(async_client):
    response = await async_client.get("/api/analytics/posts")
    assert response.status_code == 200
    assert response.json() == {"categoryAnalytics": [], "topAuthors": []}


@pytest.mark.asyncio
async def test_raw_user_activity(async_client, blog_data):
    response = await async_client.get("/api/raw/user-activity")
    assert response.status_code == 200
    rows = response.json()

    assert rows[0]["email"] == "alice@example.com"
    assert rows[0]["post_count"] == 2
    assert {"id", "name", "email", "post_count", "comment_count", "avg_post_views", "last_post_date"} <= set(rows[0])
    assert "dave@example.com" not in {row["email"] for row in rows}

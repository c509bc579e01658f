"""
Integration Tests - Dashboard and Leaderboard Endpoints
"""
from datetime import timedelta

import pytest
from sqlalchemy import text

from bloghub.database.models import BlogStatus
from bloghub.serving.cache import analytics_cache

DASHBOARD = "/api/v1/admin/dashboard"
LEADERBOARD = "/api/v1/admin/leaderboard"


class TestDashboardAPI:
    """Tests for /admin/dashboard"""

    async def test_stats(self, client, factory):
        author = await factory.user()
        await factory.blog(author, views=4, likes=1)
        await factory.blog(author, status=BlogStatus.DRAFT)

        response = await client.get(f"{DASHBOARD}/stats")

        assert response.status_code == 200
        body = response.json()
        assert body["users"]["total"] == 2
        assert body["users"]["growthPercentage"] == 0
        assert body["blogs"] == {"total": 2, "published": 1, "drafts": 1, "last30Days": 2}
        assert body["engagement"] == {
            "totalViews": 4,
            "totalLikes": 1,
            "totalComments": 0,
            "totalEngagement": 1,
        }

    async def test_stats_on_empty_platform(self, client):
        response = await client.get(f"{DASHBOARD}/stats")

        assert response.status_code == 200
        assert response.json()["users"]["total"] == 0

    async def test_registration_trend(self, client, factory, now):
        await factory.user(created_at=now - timedelta(days=1))
        await factory.user(created_at=now - timedelta(days=50))

        response = await client.get(f"{DASHBOARD}/registration-trend", params={"days": 30})

        assert response.status_code == 200
        assert response.json() == {"trend": [{"date": "2025-06-14", "count": 1}]}

    async def test_publication_trend_default_window(self, client, factory, now):
        author = await factory.user()
        await factory.blog(author, published_at=now - timedelta(days=5))

        response = await client.get(f"{DASHBOARD}/publication-trend")

        assert response.json()["trend"] == [{"date": "2025-06-10", "count": 1}]

    async def test_engagement_trend(self, client, factory):
        author = await factory.user()
        await factory.blog(author, views=2, likes=1, comments=1)

        response = await client.get(f"{DASHBOARD}/engagement-trend")

        assert response.json()["trend"] == [
            {"date": "2025-06-14", "views": 2, "likes": 1, "comments": 1},
        ]

    async def test_rejects_non_positive_days(self, client):
        response = await client.get(f"{DASHBOARD}/registration-trend", params={"days": 0})

        assert response.status_code == 422


class TestLeaderboardAPI:
    """Tests for /admin/leaderboard"""

    async def test_top_bloggers(self, client, factory):
        leader = await factory.user(username="leader")
        runner_up = await factory.user(username="runnerup")
        await factory.blog(leader, views=20, likes=2)
        await factory.blog(runner_up, views=5)

        response = await client.get(f"{LEADERBOARD}/top-bloggers", params={"metric": "views", "limit": 5})

        assert response.status_code == 200
        body = response.json()
        assert body["metric"] == "views"
        assert [entry["username"] for entry in body["topBloggers"]] == ["leader", "runnerup"]

        first = body["topBloggers"][0]
        assert first["metric"] == 20
        assert first["metricName"] == "Total Views"
        assert first["totalBlogs"] == 1
        assert first["totalLikes"] == 2

    async def test_unknown_metric_is_empty(self, client, factory):
        await factory.blog(await factory.user(), views=3)

        response = await client.get(f"{LEADERBOARD}/top-bloggers", params={"metric": "followers"})

        assert response.status_code == 200
        assert response.json() == {"topBloggers": [], "metric": "followers"}

    async def test_limit_is_validated(self, client):
        assert (await client.get(f"{LEADERBOARD}/top-bloggers", params={"limit": 0})).status_code == 422
        assert (await client.get(f"{LEADERBOARD}/top-blogs", params={"limit": 101})).status_code == 422

    async def test_top_blogs_trending(self, client, factory, now):
        author = await factory.user(username="writer")
        hot = await factory.blog(author, published_at=now - timedelta(days=2), likes=10, comments=5)
        await factory.blog(author, published_at=now - timedelta(days=20), likes=10)

        response = await client.get(f"{LEADERBOARD}/top-blogs", params={"metric": "trending"})

        top = response.json()["topBlogs"]
        assert top[0]["id"] == str(hot.id)
        assert top[0]["metricValue"] == 10
        assert top[0]["author"]["username"] == "writer"
        assert top[0]["likes"] == 10
        assert top[0]["comments"] == 5

    async def test_rising_stars(self, client, factory, now):
        newcomer = await factory.user(username="newcomer", created_at=now - timedelta(days=10))
        await factory.blog(newcomer, views=50)
        await factory.blog(newcomer, views=60)

        response = await client.get(f"{LEADERBOARD}/rising-stars")

        stars = response.json()["risingStars"]
        assert len(stars) == 1
        assert stars[0]["username"] == "newcomer"
        assert stars[0]["avgViewsPerBlog"] == 55
        assert stars[0]["totalViews"] == 110


class TestDataAccessFailuresAPI:
    """A failing datastore yields 500 with a generic message"""

    @pytest.fixture
    async def views_dropped(self, test_engine):
        async with test_engine.begin() as conn:
            await conn.execute(text("DROP TABLE views"))

    async def test_stats(self, client, views_dropped):
        response = await client.get(f"{DASHBOARD}/stats")

        assert response.status_code == 500
        assert response.json() == {"detail": "Failed to fetch dashboard stats"}

    async def test_engagement_trend(self, client, views_dropped):
        response = await client.get(f"{DASHBOARD}/engagement-trend")

        assert response.status_code == 500
        assert response.json() == {"detail": "Failed to fetch engagement trend"}

    async def test_top_bloggers(self, client, views_dropped):
        response = await client.get(f"{LEADERBOARD}/top-bloggers")

        assert response.status_code == 500
        assert response.json() == {"detail": "Failed to fetch top bloggers"}


class TestTrendCaching:
    """Trend responses are cached per window length"""

    @pytest.fixture
    def memory_cache(self, monkeypatch):
        store = {}

        async def fake_get(key):
            return store.get(key)

        async def fake_set(key, value, ttl=None):
            store[key] = value
            return True

        monkeypatch.setattr(analytics_cache, "get", fake_get)
        monkeypatch.setattr(analytics_cache, "set", fake_set)
        return store

    async def test_second_request_is_served_from_cache(self, client, factory, now, memory_cache):
        await factory.user(created_at=now - timedelta(days=1))
        first = await client.get(f"{DASHBOARD}/registration-trend", params={"days": 7})

        await factory.user(created_at=now - timedelta(days=1))
        second = await client.get(f"{DASHBOARD}/registration-trend", params={"days": 7})

        assert "registration-trend:7" in memory_cache
        assert second.json() == first.json() == {"trend": [{"date": "2025-06-14", "count": 1}]}

    async def test_keyed_by_days(self, client, factory, now, memory_cache):
        await factory.user(created_at=now - timedelta(days=1))
        await client.get(f"{DASHBOARD}/publication-trend", params={"days": 7})
        await client.get(f"{DASHBOARD}/engagement-trend", params={"days": 14})

        await factory.user(created_at=now - timedelta(days=1))
        fresh = await client.get(f"{DASHBOARD}/registration-trend", params={"days": 14})

        assert {"publication-trend:7", "engagement-trend:14", "registration-trend:14"} <= set(memory_cache)
        assert fresh.json() == {"trend": [{"date": "2025-06-14", "count": 2}]}

"""
Integration Tests - Author Analytics Endpoints
"""
import uuid
from datetime import timedelta

from bloghub.database.models import BlogStatus

ANALYTICS = "/api/v1/analytics"


def as_user(user):
    return {"X-User-Id": str(user.id)}


class TestBlogAnalytics:
    """Tests for GET /analytics/blogs/{id}"""

    async def test_totals_and_views_over_time(self, client, factory, now):
        author = await factory.user()
        blog = await factory.blog(author, views=3, likes=2, comments=1)
        # Same three addresses again, a day earlier
        await factory.engage(blog, views=3, at=now - timedelta(days=2))

        response = await client.get(f"{ANALYTICS}/blogs/{blog.id}", headers=as_user(author))

        assert response.status_code == 200
        body = response.json()
        assert body["blogId"] == str(blog.id)
        assert body["analytics"] == {
            "totalViews": 6,
            "uniqueViews": 3,
            "totalLikes": 2,
            "totalComments": 1,
            "viewsOverTime": [
                {"date": "2025-06-13", "count": 3},
                {"date": "2025-06-14", "count": 3},
            ],
        }

    async def test_only_the_author(self, client, factory):
        author = await factory.user()
        stranger = await factory.user()
        blog = await factory.blog(author)

        response = await client.get(f"{ANALYTICS}/blogs/{blog.id}", headers=as_user(stranger))

        assert response.status_code == 403

    async def test_unknown_blog(self, client, factory):
        author = await factory.user()

        response = await client.get(f"{ANALYTICS}/blogs/{uuid.uuid4()}", headers=as_user(author))

        assert response.status_code == 404

    async def test_requires_actor(self, client, factory):
        blog = await factory.blog(await factory.user())

        response = await client.get(f"{ANALYTICS}/blogs/{blog.id}")

        assert response.status_code == 401


class TestMyAnalytics:
    """Tests for GET /analytics/me"""

    async def test_overview_and_top_blogs(self, client, factory):
        author = await factory.user()
        popular = await factory.blog(author, views=9, likes=2)
        quiet = await factory.blog(author, views=1, comments=1)
        draft = await factory.blog(author, status=BlogStatus.DRAFT)

        body = (await client.get(f"{ANALYTICS}/me", headers=as_user(author))).json()

        assert body["overview"] == {
            "totalBlogs": 3,
            "totalViews": 10,
            "totalLikes": 2,
            "totalComments": 1,
            "publishedBlogs": 2,
            "draftBlogs": 1,
        }
        assert [b["id"] for b in body["topBlogs"]] == [str(popular.id), str(quiet.id), str(draft.id)]

    async def test_top_blogs_capped_at_five(self, client, factory):
        author = await factory.user()
        for views in range(7):
            await factory.blog(author, views=views)

        body = (await client.get(f"{ANALYTICS}/me", headers=as_user(author))).json()

        assert [b["views"] for b in body["topBlogs"]] == [6, 5, 4, 3, 2]

    async def test_author_without_blogs(self, client, factory):
        author = await factory.user()

        body = (await client.get(f"{ANALYTICS}/me", headers=as_user(author))).json()

        assert body["overview"]["totalBlogs"] == 0
        assert body["topBlogs"] == []

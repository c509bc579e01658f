"""
Integration Tests - Content Moderation Endpoints
"""
import uuid

from sqlalchemy import select

from bloghub.database.models import AdminAction, Blog, BlogStatus, View

BLOGS = "/api/v1/admin/blogs"


async def _fetch_blog(session_factory, blog_id):
    async with session_factory() as session:
        return await session.get(Blog, blog_id)


async def _actions(session_factory):
    async with session_factory() as session:
        result = await session.execute(select(AdminAction.action))
        return result.scalars().all()


class TestListBlogs:
    """Tests for GET /admin/blogs"""

    async def test_lists_with_counts_and_author(self, client, factory):
        author = await factory.user(username="writer")
        await factory.blog(author, views=3, likes=1, comments=2)

        body = (await client.get(BLOGS)).json()

        assert body["pagination"]["total"] == 1
        entry = body["data"][0]
        assert entry["author"]["username"] == "writer"
        assert entry["counts"] == {"views": 3, "likes": 1, "comments": 2}
        assert entry["status"] == "PUBLISHED"
        assert entry["isFeatured"] is False

    async def test_filters(self, client, factory):
        author = await factory.user()
        other = await factory.user()
        featured = await factory.blog(author, is_featured=True)
        draft = await factory.blog(author, status=BlogStatus.DRAFT)
        flagged = await factory.blog(other, is_reported=True, report_count=2)

        async def ids(**params):
            body = (await client.get(BLOGS, params=params)).json()
            return {entry["id"] for entry in body["data"]}

        assert await ids(isFeatured="true") == {str(featured.id)}
        assert await ids(status="DRAFT") == {str(draft.id)}
        assert await ids(isReported="true") == {str(flagged.id)}
        assert await ids(authorId=str(other.id)) == {str(flagged.id)}
        assert await ids(isFeatured="false") == {str(draft.id), str(flagged.id)}

    async def test_search_title(self, client, factory):
        author = await factory.user()
        match = await factory.blog(author, title="Async SQLAlchemy tips")
        await factory.blog(author, title="Gardening")

        body = (await client.get(BLOGS, params={"search": "sqlalchemy"})).json()

        assert [entry["id"] for entry in body["data"]] == [str(match.id)]


class TestUpdateBlog:
    """Tests for PUT /admin/blogs/{id}"""

    async def test_unpublish_clears_published_flag(self, client, factory, admin_headers, session_factory):
        blog = await factory.blog(await factory.user())

        response = await client.put(f"{BLOGS}/{blog.id}", json={"status": "DRAFT"}, headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["blog"]["status"] == "DRAFT"
        assert response.json()["blog"]["published"] is False

        stored = await _fetch_blog(session_factory, blog.id)
        assert stored.status == BlogStatus.DRAFT
        assert stored.published is False

    async def test_publish_sets_timestamp(self, client, factory, admin_headers):
        blog = await factory.blog(await factory.user(), status=BlogStatus.DRAFT)

        response = await client.put(f"{BLOGS}/{blog.id}", json={"status": "PUBLISHED"}, headers=admin_headers)

        body = response.json()["blog"]
        assert body["published"] is True
        assert body["publishedAt"] is not None

    async def test_partial_update(self, client, factory, admin_headers, session_factory):
        blog = await factory.blog(await factory.user())

        response = await client.put(
            f"{BLOGS}/{blog.id}", json={"title": "Renamed", "isFeatured": True}, headers=admin_headers
        )

        assert response.status_code == 200
        stored = await _fetch_blog(session_factory, blog.id)
        assert stored.title == "Renamed"
        assert stored.is_featured is True
        assert stored.content == "Lorem ipsum"
        assert "BLOG_UPDATED" in await _actions(session_factory)

    async def test_unknown_blog(self, client, admin_headers):
        response = await client.put(f"{BLOGS}/{uuid.uuid4()}", json={"title": "x"}, headers=admin_headers)

        assert response.status_code == 404


class TestFeatureAndDelete:
    """Tests for toggle-feature and delete"""

    async def test_toggle_feature(self, client, factory, admin_headers, session_factory):
        blog = await factory.blog(await factory.user())

        first = await client.post(f"{BLOGS}/{blog.id}/toggle-feature", headers=admin_headers)
        second = await client.post(f"{BLOGS}/{blog.id}/toggle-feature", headers=admin_headers)

        assert first.json()["blog"]["isFeatured"] is True
        assert second.json()["blog"]["isFeatured"] is False
        actions = await _actions(session_factory)
        assert "BLOG_FEATURED" in actions
        assert "BLOG_UNFEATURED" in actions

    async def test_delete_removes_engagement(self, client, factory, admin_headers, session_factory):
        blog = await factory.blog(await factory.user(), views=2)

        response = await client.delete(f"{BLOGS}/{blog.id}", headers=admin_headers)

        assert response.status_code == 200
        assert await _fetch_blog(session_factory, blog.id) is None
        async with session_factory() as session:
            remaining = (await session.execute(select(View).where(View.blog_id == blog.id))).scalars().all()
        assert remaining == []

    async def test_delete_requires_actor(self, client, factory):
        blog = await factory.blog(await factory.user())

        response = await client.delete(f"{BLOGS}/{blog.id}")

        assert response.status_code == 401


class TestBulkActions:
    """Tests for the bulk endpoints"""

    async def test_empty_ids_rejected(self, client, admin_headers):
        for action in ("bulk-delete", "bulk-unpublish", "bulk-feature"):
            response = await client.post(f"{BLOGS}/{action}", json={"blogIds": []}, headers=admin_headers)

            assert response.status_code == 400
            assert response.json()["detail"] == "Invalid blog IDs"

    async def test_bulk_delete(self, client, factory, admin_headers, session_factory):
        author = await factory.user()
        first = await factory.blog(author)
        second = await factory.blog(author)
        kept = await factory.blog(author)

        response = await client.post(
            f"{BLOGS}/bulk-delete",
            json={"blogIds": [str(first.id), str(second.id)]},
            headers=admin_headers,
        )

        assert response.json()["affected"] == 2
        assert await _fetch_blog(session_factory, first.id) is None
        assert await _fetch_blog(session_factory, kept.id) is not None
        assert "BULK_BLOG_DELETE" in await _actions(session_factory)

    async def test_bulk_unpublish(self, client, factory, admin_headers, session_factory):
        blog = await factory.blog(await factory.user())

        response = await client.post(
            f"{BLOGS}/bulk-unpublish", json={"blogIds": [str(blog.id)]}, headers=admin_headers
        )

        assert response.json()["affected"] == 1
        stored = await _fetch_blog(session_factory, blog.id)
        assert stored.status == BlogStatus.DRAFT
        assert stored.published is False

    async def test_bulk_feature_and_unfeature(self, client, factory, admin_headers, session_factory):
        blog = await factory.blog(await factory.user())
        payload = {"blogIds": [str(blog.id)]}

        await client.post(f"{BLOGS}/bulk-feature", json=payload, headers=admin_headers)
        assert (await _fetch_blog(session_factory, blog.id)).is_featured is True

        await client.post(f"{BLOGS}/bulk-feature", json={**payload, "isFeatured": False}, headers=admin_headers)
        assert (await _fetch_blog(session_factory, blog.id)).is_featured is False

        actions = await _actions(session_factory)
        assert "BULK_BLOG_FEATURE" in actions
        assert "BULK_BLOG_UNFEATURE" in actions

"""
Test Suite Configuration
"""
from datetime import datetime, timedelta
from typing import AsyncGenerator, List, Optional

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from bloghub.analytics import AdminAnalyticsService
from bloghub.database.connection import create_session_factory, get_db_dependency, get_session_factory
from bloghub.database.models import (
    Base,
    Blog,
    BlogStatus,
    Comment,
    Like,
    User,
    UserRole,
    View,
)
from bloghub.serving.api.dependencies import get_analytics_service
from bloghub.serving.api.main import create_api_app

# Fixed "current time" for deterministic windows
NOW = datetime(2025, 6, 15, 12, 0, 0)


def days_ago(days: float) -> datetime:
    return NOW - timedelta(days=days)


@pytest.fixture
async def test_engine(tmp_path):
    """File-backed SQLite engine; one connection per session so concurrent reads work"""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'bloghub.db'}",
        poolclass=NullPool,
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine) -> async_sessionmaker[AsyncSession]:
    return create_session_factory(test_engine)


@pytest.fixture
async def test_db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Session for arranging and inspecting data"""
    async with session_factory() as session:
        yield session


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def clock():
    return lambda: NOW


@pytest.fixture
def service(session_factory, clock) -> AdminAnalyticsService:
    return AdminAnalyticsService(session_factory, clock=clock)


class DataFactory:
    """
    Builds users, blogs and engagement rows directly in the database.

    Likes need distinct users, so they come from a pool of "reader" accounts
    created on demand; readers joined a year before NOW.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self._readers: List[User] = []
        self._seq = 0

    def _next(self) -> int:
        self._seq += 1
        return self._seq

    async def user(
        self,
        username: Optional[str] = None,
        created_at: Optional[datetime] = None,
        role: UserRole = UserRole.USER,
        **fields,
    ) -> User:
        n = self._next()
        username = username or f"user{n}"
        user = User(
            email=f"{username}@example.com",
            username=username,
            full_name=f"User {n}",
            role=role,
            created_at=created_at or days_ago(365),
            **fields,
        )
        self.session.add(user)
        await self.session.commit()
        return user

    async def readers(self, n: int) -> List[User]:
        while len(self._readers) < n:
            self._readers.append(await self.user(username=f"reader{len(self._readers) + 1}"))
        return self._readers[:n]

    async def blog(
        self,
        author: User,
        status: BlogStatus = BlogStatus.PUBLISHED,
        published_at: Optional[datetime] = None,
        published: Optional[bool] = None,
        created_at: Optional[datetime] = None,
        views: int = 0,
        likes: int = 0,
        comments: int = 0,
        engaged_at: Optional[datetime] = None,
        **fields,
    ) -> Blog:
        n = self._next()
        is_published = status == BlogStatus.PUBLISHED
        if is_published and published_at is None:
            published_at = days_ago(10)
        blog = Blog(
            title=fields.pop("title", f"Blog {n}"),
            slug=f"blog-{n}",
            content="Lorem ipsum",
            status=status,
            published=is_published if published is None else published,
            published_at=published_at,
            author_id=author.id,
            created_at=created_at or published_at or days_ago(10),
            **fields,
        )
        self.session.add(blog)
        await self.session.commit()
        await self.engage(blog, views=views, likes=likes, comments=comments, at=engaged_at)
        return blog

    async def engage(
        self,
        blog: Blog,
        views: int = 0,
        likes: int = 0,
        comments: int = 0,
        at: Optional[datetime] = None,
    ) -> None:
        at = at or days_ago(1)
        readers = await self.readers(max(likes, 1 if comments else 0))

        for i in range(views):
            self.session.add(View(blog_id=blog.id, ip_address=f"10.0.0.{i % 250}", created_at=at))
        for reader in readers[:likes]:
            self.session.add(Like(blog_id=blog.id, user_id=reader.id, created_at=at))
        for _ in range(comments):
            self.session.add(Comment(blog_id=blog.id, user_id=readers[0].id, content="Nice", created_at=at))
        await self.session.commit()


@pytest.fixture
def factory(test_db) -> DataFactory:
    return DataFactory(test_db)


@pytest.fixture
async def admin(factory) -> User:
    return await factory.user(username="admin", role=UserRole.SUPER_ADMIN)


@pytest.fixture
def admin_headers(admin) -> dict:
    return {"X-User-Id": str(admin.id)}


@pytest.fixture
async def client(session_factory, clock) -> AsyncGenerator[AsyncClient, None]:
    """API client wired to the test database"""
    app = create_api_app(rate_limit=False)

    async def override_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_db_dependency] = override_db
    app.dependency_overrides[get_analytics_service] = lambda: AdminAnalyticsService(session_factory, clock=clock)

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

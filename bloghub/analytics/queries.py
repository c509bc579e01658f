"""
Analytics Query Layer

Read-only queries used by the analytics engine. Every call runs on its own
session from the injected factory, so independent queries can be awaited
concurrently. Driver and SQL failures surface as DataAccessError.
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional
import uuid

import structlog
from sqlalchemy import func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from bloghub.database.models import Blog, BlogStatus, Comment, Like, User, View
from bloghub.errors import DataAccessError

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class PublishedBlogRow:
    """A published blog with its author and nested engagement counts."""
    blog_id: uuid.UUID
    title: str
    slug: str
    published_at: Optional[datetime]
    author_id: uuid.UUID
    username: str
    full_name: Optional[str]
    avatar: Optional[str]
    author_created_at: datetime
    views: int
    likes: int
    comments: int


@dataclass(frozen=True)
class AuthorBlogRow:
    """One of an author's blogs with its engagement counts."""
    blog_id: uuid.UUID
    title: str
    slug: str
    published: bool
    views: int
    likes: int
    comments: int


def _day_key(value: Any) -> str:
    """Normalise a date-truncated value to YYYY-MM-DD across dialects."""
    if isinstance(value, (date, datetime)):
        return value.isoformat()[:10]
    return str(value)[:10]


def _count_per_blog(model):
    """Grouped sub-query: blog_id -> number of rows in ``model``."""
    return (
        select(model.blog_id.label("blog_id"), func.count(model.id).label("total"))
        .group_by(model.blog_id)
        .subquery()
    )


class AnalyticsQueries:
    """
    Filtered count, fetch and group-by primitives over the engagement tables.

    Example:
        queries = AnalyticsQueries(session_factory)
        users = await queries.count(User, User.created_at >= since)
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def _execute(self, stmt, operation: str) -> List[Any]:
        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                return list(result.all())
        except (SQLAlchemyError, OSError) as e:
            logger.error(
                "Analytics query failed",
                operation=operation,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise DataAccessError(f"Analytics query failed: {operation}", operation=operation) from e

    async def count(self, model, *criteria) -> int:
        """Count rows of ``model`` matching all criteria."""
        stmt = select(func.count()).select_from(model).where(*criteria)
        rows = await self._execute(stmt, f"count:{model.__tablename__}")
        return rows[0][0] or 0

    async def count_active_users(self, since: datetime) -> int:
        """Users who wrote a blog, a comment or a like since ``since``."""
        stmt = select(func.count(User.id)).where(
            or_(
                select(Blog.id).where(Blog.author_id == User.id, Blog.created_at >= since).exists(),
                select(Comment.id).where(Comment.user_id == User.id, Comment.created_at >= since).exists(),
                select(Like.id).where(Like.user_id == User.id, Like.created_at >= since).exists(),
            )
        )
        rows = await self._execute(stmt, "count_active_users")
        return rows[0][0] or 0

    async def count_by_day(self, column, *criteria) -> Dict[str, int]:
        """
        Group matching rows by the UTC date of ``column``.

        Only dates with at least one row are returned.
        """
        day = func.date(column)
        stmt = (
            select(day.label("day"), func.count().label("total"))
            .select_from(column.class_)
            .where(*criteria)
            .group_by(day)
            .order_by(day)
        )
        rows = await self._execute(stmt, f"count_by_day:{column.class_.__tablename__}")
        return {_day_key(row.day): row.total for row in rows if row.day is not None}

    async def published_blog_stats(
        self,
        published_since: Optional[datetime] = None,
        published_until: Optional[datetime] = None,
        author_created_since: Optional[datetime] = None,
        require_published_flag: bool = False,
    ) -> List[PublishedBlogRow]:
        """
        Fetch PUBLISHED blogs with author columns and view/like/comment counts.

        Args:
            published_since: Only blogs with published_at at or after this time
            published_until: Only blogs with published_at at or before this time
            author_created_since: Only blogs whose author joined at or after this time
            require_published_flag: Also require the ``published`` boolean
        """
        views = _count_per_blog(View)
        likes = _count_per_blog(Like)
        comments = _count_per_blog(Comment)

        criteria = [Blog.status == BlogStatus.PUBLISHED]
        if require_published_flag:
            criteria.append(Blog.published.is_(True))
        if published_since is not None:
            criteria.append(Blog.published_at >= published_since)
        if published_until is not None:
            criteria.append(Blog.published_at <= published_until)
        if author_created_since is not None:
            criteria.append(User.created_at >= author_created_since)

        stmt = (
            select(
                Blog.id.label("blog_id"),
                Blog.title,
                Blog.slug,
                Blog.published_at,
                User.id.label("author_id"),
                User.username,
                User.full_name,
                User.avatar,
                User.created_at.label("author_created_at"),
                func.coalesce(views.c.total, 0).label("views"),
                func.coalesce(likes.c.total, 0).label("likes"),
                func.coalesce(comments.c.total, 0).label("comments"),
            )
            .join(User, Blog.author_id == User.id)
            .outerjoin(views, views.c.blog_id == Blog.id)
            .outerjoin(likes, likes.c.blog_id == Blog.id)
            .outerjoin(comments, comments.c.blog_id == Blog.id)
            .where(*criteria)
        )
        rows = await self._execute(stmt, "published_blog_stats")
        return [PublishedBlogRow(**row._asdict()) for row in rows]

    async def blog_counts_by_author(self, author_ids: Iterable[uuid.UUID]) -> Dict[uuid.UUID, int]:
        """Total blogs (any status) authored by each of ``author_ids``."""
        ids = list(author_ids)
        if not ids:
            return {}

        stmt = (
            select(Blog.author_id, func.count(Blog.id).label("total"))
            .where(Blog.author_id.in_(ids))
            .group_by(Blog.author_id)
        )
        rows = await self._execute(stmt, "blog_counts_by_author")
        return {row.author_id: row.total for row in rows}

    async def count_distinct_viewers(self, blog_id: uuid.UUID) -> int:
        """Distinct (user_id, ip_address) pairs among a blog's views."""
        viewers = (
            select(View.user_id, View.ip_address)
            .where(View.blog_id == blog_id)
            .distinct()
            .subquery()
        )
        rows = await self._execute(select(func.count()).select_from(viewers), "count_distinct_viewers")
        return rows[0][0] or 0

    async def author_blog_stats(self, author_id: uuid.UUID) -> List[AuthorBlogRow]:
        """Every blog of one author, any status, with engagement counts."""
        views = _count_per_blog(View)
        likes = _count_per_blog(Like)
        comments = _count_per_blog(Comment)

        stmt = (
            select(
                Blog.id.label("blog_id"),
                Blog.title,
                Blog.slug,
                Blog.published,
                func.coalesce(views.c.total, 0).label("views"),
                func.coalesce(likes.c.total, 0).label("likes"),
                func.coalesce(comments.c.total, 0).label("comments"),
            )
            .outerjoin(views, views.c.blog_id == Blog.id)
            .outerjoin(likes, likes.c.blog_id == Blog.id)
            .outerjoin(comments, comments.c.blog_id == Blog.id)
            .where(Blog.author_id == author_id)
        )
        rows = await self._execute(stmt, "author_blog_stats")
        return [AuthorBlogRow(**row._asdict()) for row in rows]

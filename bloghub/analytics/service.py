"""
Admin Analytics Engine

Computes the platform overview, daily trends and leaderboards shown on the
admin dashboard. The engine is read-only and stateless: it is built from a
session factory and a clock, and every call reflects the data at call time.

Includes:
- Platform statistics with 30-day growth
- Sparse daily trends (registrations, publications, engagement)
- Top bloggers, top blogs and rising stars leaderboards
"""

import asyncio
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional, Union
import uuid

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from bloghub.analytics.metrics import (
    average_views_per_blog,
    engagement_rate,
    growth_percentage,
    trending_score,
)
from bloghub.analytics.queries import AnalyticsQueries, PublishedBlogRow
from bloghub.analytics.schemas import (
    AuthorSummary,
    BlogRanking,
    BloggerRanking,
    BlogStats,
    EngagementStats,
    EngagementTrendPoint,
    PlatformStats,
    RisingStar,
    TrendPoint,
    UserStats,
)
from bloghub.database.models import (
    Blog,
    BlogStatus,
    Comment,
    Like,
    User,
    View,
    utcnow,
)

logger = structlog.get_logger(__name__)


# =============================================================================
# CONFIGURATION
# =============================================================================

TOP_BLOGGER_METRICS = {
    "views": "Total Views",
    "likes": "Total Likes",
    "comments": "Total Comments",
    "engagement": "Engagement Rate %",
}

TOP_BLOG_METRICS = ("views", "likes", "comments", "trending")

TREND_KINDS = ("registration", "publication", "engagement")

RISING_STAR_WINDOW_DAYS = 30
RISING_STAR_MIN_VIEWS = 100


@dataclass
class _AuthorTotals:
    """Engagement summed over one author's published blogs."""
    author_id: uuid.UUID
    username: str
    full_name: Optional[str]
    avatar: Optional[str]
    joined_at: datetime
    views: int = 0
    likes: int = 0
    comments: int = 0


def _totals_by_author(rows: List[PublishedBlogRow]) -> Dict[uuid.UUID, _AuthorTotals]:
    totals: Dict[uuid.UUID, _AuthorTotals] = {}
    for row in rows:
        entry = totals.get(row.author_id)
        if entry is None:
            entry = totals[row.author_id] = _AuthorTotals(
                author_id=row.author_id,
                username=row.username,
                full_name=row.full_name,
                avatar=row.avatar,
                joined_at=row.author_created_at,
            )
        entry.views += row.views
        entry.likes += row.likes
        entry.comments += row.comments
    return totals


class AdminAnalyticsService:
    """
    Aggregation engine behind the admin dashboard.

    Example:
        service = AdminAnalyticsService(session_factory)
        stats = await service.get_platform_stats()
        leaders = await service.get_top_bloggers("views", limit=10)
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        clock: Callable[[], datetime] = utcnow,
        queries: Optional[AnalyticsQueries] = None,
    ):
        self.queries = queries or AnalyticsQueries(session_factory)
        self.clock = clock

    # -------------------------------------------------------------------------
    # Platform overview
    # -------------------------------------------------------------------------

    async def get_platform_stats(self) -> PlatformStats:
        """
        Platform-wide counts for users, blogs and engagement.

        The twelve counts run concurrently; if any fails the whole call fails.
        """
        now = self.clock()
        last_7_days = now - timedelta(days=7)
        last_30_days = now - timedelta(days=30)
        prior_window_start = now - timedelta(days=60)
        q = self.queries

        (
            total_users,
            users_last_30_days,
            users_prior_30_days,
            total_blogs,
            published_blogs,
            draft_blogs,
            blogs_last_30_days,
            total_views,
            total_likes,
            total_comments,
            active_users_7_days,
            active_users_30_days,
        ) = await asyncio.gather(
            q.count(User),
            q.count(User, User.created_at >= last_30_days),
            q.count(User, User.created_at >= prior_window_start, User.created_at < last_30_days),
            q.count(Blog),
            q.count(Blog, Blog.status == BlogStatus.PUBLISHED, Blog.published.is_(True)),
            q.count(Blog, Blog.status == BlogStatus.DRAFT),
            q.count(Blog, Blog.created_at >= last_30_days),
            q.count(View),
            q.count(Like),
            q.count(Comment),
            q.count_active_users(last_7_days),
            q.count_active_users(last_30_days),
        )

        stats = PlatformStats(
            users=UserStats(
                total=total_users,
                last_30_days=users_last_30_days,
                growth_percentage=growth_percentage(users_last_30_days, users_prior_30_days),
                active_7_days=active_users_7_days,
                active_30_days=active_users_30_days,
            ),
            blogs=BlogStats(
                total=total_blogs,
                published=published_blogs,
                drafts=draft_blogs,
                last_30_days=blogs_last_30_days,
            ),
            engagement=EngagementStats(
                total_views=total_views,
                total_likes=total_likes,
                total_comments=total_comments,
                total_engagement=total_likes + total_comments,
            ),
        )
        logger.info("Platform stats computed", users=total_users, blogs=total_blogs, views=total_views)
        return stats

    # -------------------------------------------------------------------------
    # Trends
    # -------------------------------------------------------------------------

    async def get_trend(
        self,
        kind: str,
        days: int = 30,
    ) -> Union[List[TrendPoint], List[EngagementTrendPoint]]:
        """
        Daily event counts over the last ``days`` days.

        Dates without events are omitted. Points are ordered by date.

        Args:
            kind: registration, publication or engagement
            days: Window length in days

        Raises:
            ValueError: If ``kind`` is not a known trend
        """
        if kind not in TREND_KINDS:
            raise ValueError(f"Unknown trend kind: {kind}. Expected one of {TREND_KINDS}")

        now = self.clock()
        start = now - timedelta(days=days)
        q = self.queries

        if kind == "registration":
            counts = await q.count_by_day(
                User.created_at, User.created_at >= start, User.created_at <= now
            )
            return [TrendPoint(date=day, count=total) for day, total in sorted(counts.items())]

        if kind == "publication":
            counts = await q.count_by_day(
                Blog.published_at,
                Blog.status == BlogStatus.PUBLISHED,
                Blog.published_at >= start,
                Blog.published_at <= now,
            )
            return [TrendPoint(date=day, count=total) for day, total in sorted(counts.items())]

        views, likes, comments = await asyncio.gather(
            q.count_by_day(View.created_at, View.created_at >= start, View.created_at <= now),
            q.count_by_day(Like.created_at, Like.created_at >= start, Like.created_at <= now),
            q.count_by_day(Comment.created_at, Comment.created_at >= start, Comment.created_at <= now),
        )
        return [
            EngagementTrendPoint(
                date=day,
                views=views.get(day, 0),
                likes=likes.get(day, 0),
                comments=comments.get(day, 0),
            )
            for day in sorted(set(views) | set(likes) | set(comments))
        ]

    async def get_registration_trend(self, days: int = 30) -> List[TrendPoint]:
        """New users per day."""
        return await self.get_trend("registration", days)

    async def get_publication_trend(self, days: int = 30) -> List[TrendPoint]:
        """Blogs published per day."""
        return await self.get_trend("publication", days)

    async def get_engagement_trend(self, days: int = 30) -> List[EngagementTrendPoint]:
        """Views, likes and comments per day."""
        return await self.get_trend("engagement", days)

    # -------------------------------------------------------------------------
    # Leaderboards
    # -------------------------------------------------------------------------

    async def get_top_bloggers(
        self,
        metric: str,
        limit: int = 10,
        days: Optional[int] = None,
    ) -> List[BloggerRanking]:
        """
        Rank authors by engagement on their published blogs.

        Args:
            metric: views, likes, comments or engagement (rate in percent)
            limit: Maximum number of entries
            days: Only count blogs published within the last ``days`` days

        Returns:
            Entries sorted by metric descending, ties by user id ascending.
            An unknown metric yields an empty list.
        """
        if metric not in TOP_BLOGGER_METRICS:
            logger.warning("Unknown top bloggers metric", metric=metric)
            return []

        now = self.clock()
        published_since = now - timedelta(days=days) if days else None
        rows = await self.queries.published_blog_stats(
            published_since=published_since,
            published_until=now if days else None,
        )
        totals = _totals_by_author(rows)
        blog_counts = await self.queries.blog_counts_by_author(totals.keys())

        entries = []
        for author in totals.values():
            if metric == "engagement":
                value = engagement_rate(author.views, author.likes, author.comments)
            else:
                value = getattr(author, metric)

            entries.append(BloggerRanking(
                id=author.author_id,
                username=author.username,
                full_name=author.full_name,
                avatar=author.avatar,
                total_blogs=blog_counts.get(author.author_id, 0),
                metric=value,
                metric_name=TOP_BLOGGER_METRICS[metric],
                total_views=author.views,
                total_likes=author.likes,
                total_comments=author.comments,
            ))

        entries.sort(key=lambda entry: (-entry.metric, entry.id))
        return entries[:limit]

    async def get_top_blogs(
        self,
        metric: str,
        limit: int = 10,
        days: Optional[int] = None,
    ) -> List[BlogRanking]:
        """
        Rank published blogs.

        Args:
            metric: views, likes, comments or trending
            limit: Maximum number of entries
            days: Only blogs published within the last ``days`` days

        Returns:
            Entries sorted by metric descending, ties by blog id ascending.
            An unknown metric yields an empty list.
        """
        if metric not in TOP_BLOG_METRICS:
            logger.warning("Unknown top blogs metric", metric=metric)
            return []

        now = self.clock()
        published_since = now - timedelta(days=days) if days else None
        rows = await self.queries.published_blog_stats(
            published_since=published_since,
            published_until=now if days else None,
            require_published_flag=True,
        )

        scored = []
        for row in rows:
            if metric == "trending":
                value = trending_score(row.likes, row.comments, row.published_at, now)
            else:
                value = getattr(row, metric)
            scored.append((value, row))

        scored.sort(key=lambda pair: (-pair[0], pair[1].blog_id))

        return [
            BlogRanking(
                id=row.blog_id,
                title=row.title,
                slug=row.slug,
                author=AuthorSummary(
                    id=row.author_id,
                    username=row.username,
                    full_name=row.full_name,
                    avatar=row.avatar,
                ),
                published_at=row.published_at,
                views=row.views,
                likes=row.likes,
                comments=row.comments,
                metric_value=value,
            )
            for value, row in scored[:limit]
        ]

    async def get_rising_stars(self, limit: int = 10) -> List[RisingStar]:
        """
        New authors whose published work already draws readers.

        Candidates joined within the last 30 days and have a published blog.
        Authors with 100 or fewer total views are dropped; the rest are
        ranked by average views per authored blog.
        """
        now = self.clock()
        rows = await self.queries.published_blog_stats(
            author_created_since=now - timedelta(days=RISING_STAR_WINDOW_DAYS),
        )
        totals = _totals_by_author(rows)
        blog_counts = await self.queries.blog_counts_by_author(totals.keys())

        stars = []
        for author in totals.values():
            if author.views <= RISING_STAR_MIN_VIEWS:
                continue

            total_blogs = blog_counts.get(author.author_id, 0)
            stars.append(RisingStar(
                id=author.author_id,
                username=author.username,
                full_name=author.full_name,
                avatar=author.avatar,
                joined_at=author.joined_at,
                total_blogs=total_blogs,
                total_views=author.views,
                total_likes=author.likes,
                total_comments=author.comments,
                avg_views_per_blog=average_views_per_blog(author.views, total_blogs),
            ))

        stars.sort(key=lambda star: (-star.avg_views_per_blog, star.id))
        logger.debug("Rising stars computed", candidates=len(totals), qualified=len(stars))
        return stars[:limit]

"""
Author Analytics Endpoints

Engagement figures an author sees for their own blogs.
"""

import asyncio
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from bloghub.analytics import AnalyticsQueries
from bloghub.analytics.schemas import CamelModel, TrendPoint
from bloghub.database.connection import get_db_dependency
from bloghub.database.models import Blog, Comment, Like, User, View
from bloghub.errors import DataAccessError
from bloghub.serving.api.dependencies import get_analytics_queries, get_current_actor

router = APIRouter()
logger = structlog.get_logger(__name__)

TOP_BLOGS_LIMIT = 5


class BlogAnalytics(CamelModel):
    total_views: int
    unique_views: int
    total_likes: int
    total_comments: int
    views_over_time: List[TrendPoint]


class BlogAnalyticsResponse(CamelModel):
    blog_id: UUID
    analytics: BlogAnalytics


class AuthorOverview(CamelModel):
    total_blogs: int = 0
    total_views: int = 0
    total_likes: int = 0
    total_comments: int = 0
    published_blogs: int = 0
    draft_blogs: int = 0


class AuthorTopBlog(CamelModel):
    id: UUID
    title: str
    slug: str
    views: int
    likes: int
    comments: int


class AuthorAnalyticsResponse(CamelModel):
    overview: AuthorOverview
    top_blogs: List[AuthorTopBlog]


@router.get("/blogs/{blog_id}", response_model=BlogAnalyticsResponse)
async def get_blog_analytics(
    blog_id: UUID,
    actor: User = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db_dependency),
    queries: AnalyticsQueries = Depends(get_analytics_queries),
) -> BlogAnalyticsResponse:
    """Totals, unique viewers and views per day for one of the caller's blogs."""
    blog = await db.get(Blog, blog_id)
    if blog is None:
        raise HTTPException(status_code=404, detail="Blog not found")
    if blog.author_id != actor.id:
        raise HTTPException(status_code=403, detail="Not authorized to view analytics for this blog")

    try:
        views, unique_views, likes, comments, per_day = await asyncio.gather(
            queries.count(View, View.blog_id == blog_id),
            queries.count_distinct_viewers(blog_id),
            queries.count(Like, Like.blog_id == blog_id),
            queries.count(Comment, Comment.blog_id == blog_id),
            queries.count_by_day(View.created_at, View.blog_id == blog_id),
        )
    except DataAccessError as e:
        logger.error("Get blog analytics failed", error=e.message, blog_id=str(blog_id))
        raise HTTPException(status_code=500, detail="Failed to fetch blog analytics")

    return BlogAnalyticsResponse(
        blog_id=blog_id,
        analytics=BlogAnalytics(
            total_views=views,
            unique_views=unique_views,
            total_likes=likes,
            total_comments=comments,
            views_over_time=[TrendPoint(date=day, count=n) for day, n in sorted(per_day.items())],
        ),
    )


@router.get("/me", response_model=AuthorAnalyticsResponse)
async def get_my_analytics(
    actor: User = Depends(get_current_actor),
    queries: AnalyticsQueries = Depends(get_analytics_queries),
) -> AuthorAnalyticsResponse:
    """Totals across the caller's blogs and their five most viewed."""
    try:
        rows = await queries.author_blog_stats(actor.id)
    except DataAccessError as e:
        logger.error("Get user analytics failed", error=e.message, user_id=str(actor.id))
        raise HTTPException(status_code=500, detail="Failed to fetch user analytics")

    overview = AuthorOverview(
        total_blogs=len(rows),
        total_views=sum(row.views for row in rows),
        total_likes=sum(row.likes for row in rows),
        total_comments=sum(row.comments for row in rows),
        published_blogs=sum(1 for row in rows if row.published),
        draft_blogs=sum(1 for row in rows if not row.published),
    )
    ranked = sorted(rows, key=lambda row: (-row.views, str(row.blog_id)))[:TOP_BLOGS_LIMIT]

    return AuthorAnalyticsResponse(
        overview=overview,
        top_blogs=[
            AuthorTopBlog(
                id=row.blog_id,
                title=row.title,
                slug=row.slug,
                views=row.views,
                likes=row.likes,
                comments=row.comments,
            )
            for row in ranked
        ],
    )

"""
Analytics Module
"""
from .queries import AnalyticsQueries, AuthorBlogRow, PublishedBlogRow
from .service import AdminAnalyticsService, TOP_BLOGGER_METRICS, TOP_BLOG_METRICS

__all__ = [
    "AnalyticsQueries",
    "AuthorBlogRow",
    "PublishedBlogRow",
    "AdminAnalyticsService",
    "TOP_BLOGGER_METRICS",
    "TOP_BLOG_METRICS",
]

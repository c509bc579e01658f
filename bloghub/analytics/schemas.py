"""
Analytics Result Records

Typed records returned by the analytics engine. Attributes are snake_case in
Python and serialised with camelCase keys for the dashboard frontend.
"""

from datetime import datetime
from typing import List, Optional, Union
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base record: camelCase on the wire, snake_case in code."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# =============================================================================
# PLATFORM STATS
# =============================================================================

class UserStats(CamelModel):
    """User counts and growth"""
    total: int
    last_30_days: int = Field(alias="last30Days")
    growth_percentage: float
    active_7_days: int = Field(alias="active7Days")
    active_30_days: int = Field(alias="active30Days")


class BlogStats(CamelModel):
    """Blog counts by status"""
    total: int
    published: int
    drafts: int
    last_30_days: int = Field(alias="last30Days")


class EngagementStats(CamelModel):
    """Engagement totals"""
    total_views: int
    total_likes: int
    total_comments: int
    total_engagement: int


class PlatformStats(CamelModel):
    """Platform overview for the admin dashboard"""
    users: UserStats
    blogs: BlogStats
    engagement: EngagementStats


# =============================================================================
# TRENDS
# =============================================================================

class TrendPoint(CamelModel):
    """Events on one UTC calendar date"""
    date: str
    count: int


class EngagementTrendPoint(CamelModel):
    """Views, likes and comments on one UTC calendar date"""
    date: str
    views: int = 0
    likes: int = 0
    comments: int = 0


class TrendResponse(CamelModel):
    trend: List[TrendPoint]


class EngagementTrendResponse(CamelModel):
    trend: List[EngagementTrendPoint]


# =============================================================================
# LEADERBOARDS
# =============================================================================

class AuthorSummary(CamelModel):
    """Public identity of a blog author"""
    id: UUID
    username: str
    full_name: Optional[str] = None
    avatar: Optional[str] = None


class BloggerRanking(AuthorSummary):
    """A user's position on the top bloggers leaderboard"""
    total_blogs: int
    metric: Union[int, float]
    metric_name: str
    total_views: int
    total_likes: int
    total_comments: int


class BlogRanking(CamelModel):
    """A blog's position on the top blogs leaderboard"""
    id: UUID
    title: str
    slug: str
    author: AuthorSummary
    published_at: Optional[datetime] = None
    views: int
    likes: int
    comments: int
    metric_value: Union[int, float]


class RisingStar(AuthorSummary):
    """A recently joined author whose posts draw above-threshold views"""
    joined_at: datetime
    total_blogs: int
    total_views: int
    total_likes: int
    total_comments: int
    avg_views_per_blog: int


class TopBloggersResponse(CamelModel):
    top_bloggers: List[BloggerRanking]
    metric: str


class TopBlogsResponse(CamelModel):
    top_blogs: List[BlogRanking]
    metric: str


class RisingStarsResponse(CamelModel):
    rising_stars: List[RisingStar]

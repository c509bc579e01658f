"""
Admin Leaderboard Endpoints

Top bloggers, top blogs and rising stars. An unknown ``metric`` returns an
empty leaderboard rather than an error.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
import structlog

from bloghub.analytics import AdminAnalyticsService
from bloghub.analytics.schemas import (
    RisingStarsResponse,
    TopBloggersResponse,
    TopBlogsResponse,
)
from bloghub.config import get_settings
from bloghub.errors import DataAccessError
from bloghub.serving.api.dependencies import get_analytics_service
from bloghub.serving.cache import analytics_cache

settings = get_settings()
router = APIRouter()
logger = structlog.get_logger(__name__)

DEFAULT_LIMIT = settings.analytics.default_limit
MAX_LIMIT = settings.analytics.max_limit


@router.get("/top-bloggers", response_model=TopBloggersResponse)
async def get_top_bloggers(
    metric: str = "views",
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=MAX_LIMIT),
    days: Optional[int] = Query(None, ge=1),
    service: AdminAnalyticsService = Depends(get_analytics_service),
) -> TopBloggersResponse:
    """Authors ranked by views, likes, comments or engagement rate."""
    logger.info("get_top_bloggers called", metric=metric, limit=limit, days=days)

    cache_key = f"top-bloggers:{metric}:{limit}:{days}"
    cached = await analytics_cache.get(cache_key)
    if cached:
        return TopBloggersResponse.model_validate(cached)

    try:
        top_bloggers = await service.get_top_bloggers(metric, limit, days)
    except DataAccessError as e:
        logger.error("Get top bloggers failed", error=e.message)
        raise HTTPException(status_code=500, detail="Failed to fetch top bloggers")

    response = TopBloggersResponse(top_bloggers=top_bloggers, metric=metric)
    await analytics_cache.set(cache_key, response.model_dump(mode="json", by_alias=True))
    return response


@router.get("/top-blogs", response_model=TopBlogsResponse)
async def get_top_blogs(
    metric: str = "views",
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=MAX_LIMIT),
    days: Optional[int] = Query(None, ge=1),
    service: AdminAnalyticsService = Depends(get_analytics_service),
) -> TopBlogsResponse:
    """Published blogs ranked by views, likes, comments or trending score."""
    logger.info("get_top_blogs called", metric=metric, limit=limit, days=days)

    # Trending scores decay with time, so they are never served from cache
    cache_key = f"top-blogs:{metric}:{limit}:{days}"
    if metric != "trending":
        cached = await analytics_cache.get(cache_key)
        if cached:
            return TopBlogsResponse.model_validate(cached)

    try:
        top_blogs = await service.get_top_blogs(metric, limit, days)
    except DataAccessError as e:
        logger.error("Get top blogs failed", error=e.message)
        raise HTTPException(status_code=500, detail="Failed to fetch top blogs")

    response = TopBlogsResponse(top_blogs=top_blogs, metric=metric)
    if metric != "trending":
        await analytics_cache.set(cache_key, response.model_dump(mode="json", by_alias=True))
    return response


@router.get("/rising-stars", response_model=RisingStarsResponse)
async def get_rising_stars(
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=MAX_LIMIT),
    service: AdminAnalyticsService = Depends(get_analytics_service),
) -> RisingStarsResponse:
    """Authors who joined in the last 30 days with over 100 views."""
    cache_key = f"rising-stars:{limit}"
    cached = await analytics_cache.get(cache_key)
    if cached:
        return RisingStarsResponse.model_validate(cached)

    try:
        rising_stars = await service.get_rising_stars(limit)
    except DataAccessError as e:
        logger.error("Get rising stars failed", error=e.message)
        raise HTTPException(status_code=500, detail="Failed to fetch rising stars")

    response = RisingStarsResponse(rising_stars=rising_stars)
    await analytics_cache.set(cache_key, response.model_dump(mode="json", by_alias=True))
    return response

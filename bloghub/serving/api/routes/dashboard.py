"""
Admin Dashboard Endpoints

Platform overview and daily trend series for the admin dashboard.
"""

from fastapi import APIRouter, Depends, HTTPException, Query
import structlog

from bloghub.analytics import AdminAnalyticsService
from bloghub.analytics.schemas import (
    EngagementTrendResponse,
    PlatformStats,
    TrendResponse,
)
from bloghub.config import get_settings
from bloghub.errors import DataAccessError
from bloghub.serving.api.dependencies import get_analytics_service
from bloghub.serving.cache import analytics_cache

settings = get_settings()
router = APIRouter()
logger = structlog.get_logger(__name__)

DEFAULT_DAYS = settings.analytics.default_trend_days


@router.get("/stats", response_model=PlatformStats)
async def get_dashboard_stats(
    service: AdminAnalyticsService = Depends(get_analytics_service),
) -> PlatformStats:
    """Platform overview: users, blogs and engagement totals."""
    cached = await analytics_cache.get("stats")
    if cached:
        logger.debug("Returning cached dashboard stats")
        return PlatformStats.model_validate(cached)

    try:
        stats = await service.get_platform_stats()
    except DataAccessError as e:
        logger.error("Get dashboard stats failed", error=e.message)
        raise HTTPException(status_code=500, detail="Failed to fetch dashboard stats")

    await analytics_cache.set("stats", stats.model_dump(mode="json", by_alias=True))
    return stats


@router.get("/registration-trend", response_model=TrendResponse)
async def get_registration_trend(
    days: int = Query(DEFAULT_DAYS, ge=1, le=3650),
    service: AdminAnalyticsService = Depends(get_analytics_service),
) -> TrendResponse:
    """New user registrations per day."""
    cache_key = f"registration-trend:{days}"
    cached = await analytics_cache.get(cache_key)
    if cached:
        return TrendResponse.model_validate(cached)

    try:
        trend = await service.get_registration_trend(days)
    except DataAccessError as e:
        logger.error("Get registration trend failed", error=e.message, days=days)
        raise HTTPException(status_code=500, detail="Failed to fetch registration trend")

    logger.info("Registration trend returned", days=days, points=len(trend))
    response = TrendResponse(trend=trend)
    await analytics_cache.set(cache_key, response.model_dump(mode="json", by_alias=True))
    return response


@router.get("/publication-trend", response_model=TrendResponse)
async def get_publication_trend(
    days: int = Query(DEFAULT_DAYS, ge=1, le=3650),
    service: AdminAnalyticsService = Depends(get_analytics_service),
) -> TrendResponse:
    """Blogs published per day."""
    cache_key = f"publication-trend:{days}"
    cached = await analytics_cache.get(cache_key)
    if cached:
        return TrendResponse.model_validate(cached)

    try:
        trend = await service.get_publication_trend(days)
    except DataAccessError as e:
        logger.error("Get publication trend failed", error=e.message, days=days)
        raise HTTPException(status_code=500, detail="Failed to fetch publication trend")

    logger.info("Publication trend returned", days=days, points=len(trend))
    response = TrendResponse(trend=trend)
    await analytics_cache.set(cache_key, response.model_dump(mode="json", by_alias=True))
    return response


@router.get("/engagement-trend", response_model=EngagementTrendResponse)
async def get_engagement_trend(
    days: int = Query(DEFAULT_DAYS, ge=1, le=3650),
    service: AdminAnalyticsService = Depends(get_analytics_service),
) -> EngagementTrendResponse:
    """Views, likes and comments per day."""
    cache_key = f"engagement-trend:{days}"
    cached = await analytics_cache.get(cache_key)
    if cached:
        return EngagementTrendResponse.model_validate(cached)

    try:
        trend = await service.get_engagement_trend(days)
    except DataAccessError as e:
        logger.error("Get engagement trend failed", error=e.message, days=days)
        raise HTTPException(status_code=500, detail="Failed to fetch engagement trend")

    logger.info("Engagement trend returned", days=days, points=len(trend))
    response = EngagementTrendResponse(trend=trend)
    await analytics_cache.set(cache_key, response.model_dump(mode="json", by_alias=True))
    return response

"""
Shared FastAPI Dependencies
"""

from uuid import UUID

from fastapi import Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
import structlog

from bloghub.analytics import AdminAnalyticsService, AnalyticsQueries
from bloghub.config import get_settings
from bloghub.database.connection import get_db_dependency, get_session_factory
from bloghub.database.models import User

settings = get_settings()
logger = structlog.get_logger(__name__)


async def get_current_actor(
    request: Request,
    db: AsyncSession = Depends(get_db_dependency),
) -> User:
    """
    Resolve the calling user from the gateway identity header.

    Authentication happens upstream; this only maps the forwarded id to a
    user so actions can be attributed.
    """
    raw_id = request.headers.get(settings.security.actor_header)
    if not raw_id:
        raise HTTPException(status_code=401, detail="Authentication required")

    try:
        actor_id = UUID(raw_id)
    except ValueError:
        raise HTTPException(status_code=401, detail="Authentication required")

    actor = await db.get(User, actor_id)
    if actor is None:
        logger.warning("Unknown actor", actor_id=raw_id)
        raise HTTPException(status_code=401, detail="User not found")
    return actor


def get_analytics_service(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> AdminAnalyticsService:
    """Analytics engine bound to the application's session factory."""
    return AdminAnalyticsService(session_factory)


def get_analytics_queries(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> AnalyticsQueries:
    """Read-only query layer bound to the application's session factory."""
    return AnalyticsQueries(session_factory)

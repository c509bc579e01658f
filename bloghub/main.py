"""
FastAPI Production Application

Main entry point for the BlogHub Admin API.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from redis.exceptions import RedisError
import structlog

from bloghub.config import get_settings
from bloghub.config.logging import configure_logging
from bloghub.database.connection import close_database, init_database
from bloghub.serving.api.main import create_api_app
from bloghub.serving.cache import close_redis, init_redis

settings = get_settings()
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    configure_logging()

    logger.info("Starting BlogHub Admin API", environment=settings.app_env)

    # The database is required; startup fails without it
    await init_database(create_tables=settings.is_development)

    # Analytics are served uncached when Redis is unavailable
    try:
        await init_redis()
    except (RedisError, OSError) as e:
        logger.warning("Redis init failed, caching disabled", error=str(e))

    yield

    logger.info("Shutting down...")
    await close_redis()
    await close_database()


app = create_api_app(lifespan=lifespan)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)

"""
FastAPI Application Factory

Creates and configures the admin API application.
"""

from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from bloghub.config import get_settings
from bloghub.serving.api.middleware import (
    RateLimitMiddleware,
    RequestLoggingMiddleware,
    SecurityHeadersMiddleware,
)
from bloghub.serving.api.routes import (
    audit_log_router,
    author_analytics_router,
    blogs_router,
    dashboard_router,
    health_router,
    leaderboard_router,
    moderation_router,
    platform_settings_router,
    users_router,
)

settings = get_settings()

API_PREFIX = "/api/v1"
ADMIN_PREFIX = f"{API_PREFIX}/admin"


def create_api_app(lifespan=None, rate_limit: Optional[bool] = None) -> FastAPI:
    """
    Create and configure FastAPI application.

    Args:
        lifespan: Startup/shutdown handler; tests pass none and wire the
            database through dependency overrides
        rate_limit: Install the rate limiter (defaults to on outside development)

    Returns:
        Configured FastAPI app instance
    """
    app = FastAPI(
        title="BlogHub Admin API",
        description="Back-office analytics, leaderboards and moderation for BlogHub",
        version=settings.version,
        docs_url="/docs" if not settings.is_production else None,
        redoc_url="/redoc" if not settings.is_production else None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.security.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=1000)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    if rate_limit is None:
        rate_limit = not settings.is_development
    if rate_limit:
        app.add_middleware(RateLimitMiddleware)

    app.include_router(health_router, prefix=API_PREFIX, tags=["Health"])
    app.include_router(dashboard_router, prefix=f"{ADMIN_PREFIX}/dashboard", tags=["Dashboard"])
    app.include_router(leaderboard_router, prefix=f"{ADMIN_PREFIX}/leaderboard", tags=["Leaderboard"])
    app.include_router(users_router, prefix=f"{ADMIN_PREFIX}/users", tags=["Users"])
    app.include_router(blogs_router, prefix=f"{ADMIN_PREFIX}/blogs", tags=["Content"])
    app.include_router(moderation_router, prefix=ADMIN_PREFIX, tags=["Moderation"])
    app.include_router(platform_settings_router, prefix=f"{ADMIN_PREFIX}/settings", tags=["Settings"])
    app.include_router(audit_log_router, prefix=f"{ADMIN_PREFIX}/audit-log", tags=["Audit"])
    app.include_router(author_analytics_router, prefix=f"{API_PREFIX}/analytics", tags=["Author Analytics"])

    @app.get(f"{API_PREFIX}/info")
    async def api_info():
        """API information endpoint."""
        return {
            "name": settings.app_name,
            "version": settings.version,
            "environment": settings.app_env,
            "documentation": "/docs",
        }

    return app

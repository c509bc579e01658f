"""
API Routes Module
"""
from .health import router as health_router
from .dashboard import router as dashboard_router
from .leaderboard import router as leaderboard_router
from .users import router as users_router
from .blogs import router as blogs_router
from .moderation import router as moderation_router
from .platform_settings import router as platform_settings_router
from .audit_log import router as audit_log_router
from .author_analytics import router as author_analytics_router

__all__ = [
    "health_router",
    "dashboard_router",
    "leaderboard_router",
    "users_router",
    "blogs_router",
    "moderation_router",
    "platform_settings_router",
    "audit_log_router",
    "author_analytics_router",
]

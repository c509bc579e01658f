"""
Serving Module
"""
from .cache import init_redis, close_redis, get_redis, cache_get, cache_set, analytics_cache

__all__ = [
    "init_redis",
    "close_redis",
    "get_redis",
    "cache_get",
    "cache_set",
    "analytics_cache",
]

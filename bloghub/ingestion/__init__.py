"""
Data Ingestion Module
"""
from .seed_db import (
    DEFAULT_PLATFORM_SETTINGS,
    seed_database,
    seed_demo_data,
    seed_platform_settings,
    seed_super_admin,
)

__all__ = [
    "DEFAULT_PLATFORM_SETTINGS",
    "seed_database",
    "seed_demo_data",
    "seed_platform_settings",
    "seed_super_admin",
]

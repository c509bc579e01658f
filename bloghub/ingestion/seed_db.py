"""
Database Seeder

Loads the bootstrap rows every deployment needs (the super admin and the
default platform settings) and, optionally, a generated demo dataset.
Re-running is safe: existing admins and settings are left untouched and demo
data is only loaded into a database without blogs.
"""

import json
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

import polars as pl
import structlog
from sqlalchemy import func, insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from bloghub.data.generators import DataGenerator
from bloghub.database.models import (
    Blog,
    Comment,
    Follow,
    Like,
    PlatformSetting,
    User,
    UserRole,
    UserStatus,
    View,
)

logger = structlog.get_logger(__name__)

SUPER_ADMIN_EMAIL = "admin@bloghub.com"
SUPER_ADMIN_USERNAME = "superadmin"

DEFAULT_PLATFORM_SETTINGS = [
    ("site_name", "BlogHub", "Platform name displayed across the site"),
    ("site_description", "A modern blogging platform for writers and readers", "Platform description for SEO"),
    ("registration_enabled", True, "Allow new user registrations"),
    ("email_verification_required", False, "Require email verification for new accounts"),
    ("comment_moderation", "auto_approve", "Comment moderation mode: auto_approve, review_all, or review_first"),
    ("max_upload_size", 5242880, "Maximum file upload size in bytes (default: 5MB)"),
    ("featured_blogs_count", 5, "Number of featured blogs to display on homepage"),
    ("trending_algorithm", "engagement", "Trending algorithm: views, engagement, or recent"),
]

# Load order respects foreign keys
DEMO_TABLES = [
    ("users", User),
    ("blogs", Blog),
    ("views", View),
    ("likes", Like),
    ("comments", Comment),
    ("follows", Follow),
]

UUID_COLUMNS = {"id", "author_id", "blog_id", "user_id", "follower_id", "following_id"}
CHUNK_SIZE = 1000


async def seed_super_admin(
    db: AsyncSession,
    email: str = SUPER_ADMIN_EMAIL,
    username: str = SUPER_ADMIN_USERNAME,
) -> User:
    """Create the super admin unless a user with that email exists."""
    admin = (await db.execute(select(User).where(User.email == email))).scalar_one_or_none()
    if admin is not None:
        logger.info("Super admin already present", email=email)
        return admin

    admin = User(
        email=email,
        username=username,
        full_name="Super Admin",
        bio="Platform Administrator",
        role=UserRole.SUPER_ADMIN,
        status=UserStatus.ACTIVE,
    )
    db.add(admin)
    await db.flush()
    logger.info("Super admin created", email=email, user_id=str(admin.id))
    return admin


async def seed_platform_settings(db: AsyncSession) -> int:
    """Insert the default settings that are missing; returns how many were added."""
    existing = set((await db.execute(select(PlatformSetting.key))).scalars().all())

    added = 0
    for key, value, description in DEFAULT_PLATFORM_SETTINGS:
        if key in existing:
            continue
        db.add(PlatformSetting(
            key=key,
            value=value if isinstance(value, str) else json.dumps(value),
            description=description,
        ))
        added += 1

    await db.flush()
    logger.info("Platform settings seeded", added=added, existing=len(existing))
    return added


def frame_records(df: pl.DataFrame) -> List[Dict[str, Any]]:
    """DataFrame rows as insert parameters, with UUID columns parsed."""
    records = df.to_dicts()
    for record in records:
        for column in UUID_COLUMNS.intersection(record):
            if record[column] is not None:
                record[column] = uuid.UUID(record[column])
    return records


async def load_frame(db: AsyncSession, model: Any, df: pl.DataFrame) -> int:
    """Bulk insert a DataFrame into ``model``'s table in chunks."""
    records = frame_records(df)
    for i in range(0, len(records), CHUNK_SIZE):
        await db.execute(insert(model), records[i:i + CHUNK_SIZE])

    logger.info("Loaded table", table=model.__tablename__, rows=len(records))
    return len(records)


async def seed_demo_data(
    db: AsyncSession,
    n_users: int = 100,
    n_blogs: int = 300,
    seed: int = 42,
    now: Optional[datetime] = None,
) -> Dict[str, int]:
    """
    Generate and load a demo dataset.

    Skipped when the database already holds blogs.

    Returns:
        Rows loaded per table
    """
    blog_count = (await db.execute(select(func.count(Blog.id)))).scalar() or 0
    if blog_count:
        logger.info("Demo data skipped, database already has blogs", blogs=blog_count)
        return {}

    data = DataGenerator(seed=seed).generate_all(n_users=n_users, n_blogs=n_blogs, now=now)

    loaded = {}
    for name, model in DEMO_TABLES:
        loaded[name] = await load_frame(db, model, data[name])
    return loaded


async def seed_database(
    db: AsyncSession,
    with_demo_data: bool = True,
    n_users: int = 100,
    n_blogs: int = 300,
    seed: int = 42,
) -> Dict[str, int]:
    """Seed bootstrap rows and, optionally, demo data within one session."""
    await seed_super_admin(db)
    summary = {"settings": await seed_platform_settings(db)}

    if with_demo_data:
        summary.update(await seed_demo_data(db, n_users=n_users, n_blogs=n_blogs, seed=seed))

    logger.info("Database seeding completed", **summary)
    return summary

"""
Unit Tests - Database Seeder
"""
import json

from sqlalchemy import func, select

from bloghub.database.models import Blog, Like, PlatformSetting, User, UserRole, View
from bloghub.ingestion import (
    DEFAULT_PLATFORM_SETTINGS,
    seed_database,
    seed_demo_data,
    seed_platform_settings,
    seed_super_admin,
)


async def _count(session, model) -> int:
    return (await session.execute(select(func.count()).select_from(model))).scalar()


class TestBootstrapSeed:
    """Tests for the super admin and default settings"""

    async def test_super_admin_created_once(self, test_db):
        first = await seed_super_admin(test_db)
        second = await seed_super_admin(test_db)
        await test_db.commit()

        assert first.id == second.id
        assert first.role == UserRole.SUPER_ADMIN
        assert await _count(test_db, User) == 1

    async def test_settings_seeded_once(self, test_db):
        assert await seed_platform_settings(test_db) == len(DEFAULT_PLATFORM_SETTINGS)
        assert await seed_platform_settings(test_db) == 0
        await test_db.commit()

        assert await _count(test_db, PlatformSetting) == len(DEFAULT_PLATFORM_SETTINGS)

    async def test_setting_values_are_json_or_plain_strings(self, test_db):
        await seed_platform_settings(test_db)
        await test_db.commit()

        rows = (await test_db.execute(select(PlatformSetting))).scalars().all()
        values = {row.key: row.value for row in rows}

        assert values["site_name"] == "BlogHub"
        assert json.loads(values["registration_enabled"]) is True
        assert json.loads(values["max_upload_size"]) == 5242880

    async def test_seed_database_without_demo(self, test_db):
        summary = await seed_database(test_db, with_demo_data=False)
        await test_db.commit()

        assert summary == {"settings": len(DEFAULT_PLATFORM_SETTINGS)}
        assert await _count(test_db, Blog) == 0


class TestDemoSeed:
    """Tests for loading generated demo data"""

    async def test_loads_every_table(self, test_db, now):
        loaded = await seed_demo_data(test_db, n_users=15, n_blogs=30, seed=3, now=now)
        await test_db.commit()

        assert loaded["users"] == 15
        assert loaded["blogs"] == 30
        assert await _count(test_db, User) == 15
        assert await _count(test_db, Blog) == 30
        assert await _count(test_db, View) == loaded["views"]
        assert await _count(test_db, Like) == loaded["likes"]

    async def test_skipped_when_blogs_exist(self, test_db, factory, now):
        await factory.blog(await factory.user())

        loaded = await seed_demo_data(test_db, n_users=5, n_blogs=5, seed=3, now=now)

        assert loaded == {}
        assert await _count(test_db, Blog) == 1

    async def test_seeded_data_feeds_the_dashboard(self, test_db, service, now):
        await seed_demo_data(test_db, n_users=15, n_blogs=30, seed=3, now=now)
        await test_db.commit()

        stats = await service.get_platform_stats()

        assert stats.users.total == 15
        assert stats.blogs.total == 30
        assert stats.blogs.published + stats.blogs.drafts <= stats.blogs.total

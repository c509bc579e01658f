"""
Synthetic Data Generator

Generates realistic BlogHub activity for development and demos:
- Users with roles, moderation status and signup dates
- Blogs across topics and publication states
- Views, likes, comments and follows with a long-tailed popularity curve

Every table is a polars DataFrame; identifiers are UUID strings and
timestamps are naive UTC datetimes.
"""

import random
import re
import uuid
from datetime import datetime, timedelta
from pathlib import Path
from typing import Dict, List, Optional

import numpy as np
import polars as pl
from faker import Faker

from bloghub.database.models import utcnow


# =============================================================================
# CONFIGURATION
# =============================================================================

TOPICS = [
    "Python", "Web Development", "Machine Learning", "DevOps", "Databases",
    "Career", "Productivity", "Design", "Security", "Open Source",
]

USER_ROLES = [("USER", 0.95), ("MODERATOR", 0.05)]
USER_STATUSES = [("ACTIVE", 0.93), ("SUSPENDED", 0.05), ("BANNED", 0.02)]
BLOG_STATUSES = [("PUBLISHED", 0.75), ("DRAFT", 0.20), ("ARCHIVED", 0.05)]

HISTORY_DAYS = 180
ANONYMOUS_VIEW_RATE = 0.4
MAX_VIEWS_PER_BLOG = 600


def slugify(text: str) -> str:
    """Lowercase, hyphen-separated URL slug."""
    return re.sub(r"[^a-z0-9]+", "-", text.lower()).strip("-")


def _weighted(rng: random.Random, choices) -> str:
    values, weights = zip(*choices)
    return rng.choices(values, weights=weights)[0]


def _uuid(rng: random.Random) -> str:
    """Random UUID4 string drawn from the seeded generator."""
    return str(uuid.UUID(int=rng.getrandbits(128), version=4))


def _between(rng: random.Random, start: datetime, end: datetime) -> datetime:
    """Uniform timestamp in [start, end]."""
    span = max((end - start).total_seconds(), 0)
    return start + timedelta(seconds=rng.uniform(0, span))


# =============================================================================
# GENERATORS
# =============================================================================

class UserGenerator:
    """Generate user accounts"""

    def __init__(self, fake: Faker, rng: random.Random):
        self.fake = fake
        self.rng = rng

    def generate(self, n: int = 100, now: Optional[datetime] = None) -> pl.DataFrame:
        """Generate n users who signed up within the history window"""
        now = now or utcnow()
        users = []

        for i in range(n):
            username = f"{self.fake.user_name()}{i}"
            created_at = _between(self.rng, now - timedelta(days=HISTORY_DAYS), now - timedelta(hours=1))
            status = _weighted(self.rng, USER_STATUSES)

            users.append({
                "id": _uuid(self.rng),
                "email": f"{username}@{self.fake.free_email_domain()}",
                "username": username,
                "full_name": self.fake.name(),
                "avatar": f"https://i.pravatar.cc/150?u={username}",
                "bio": self.fake.sentence(nb_words=12) if self.rng.random() < 0.6 else None,
                "role": _weighted(self.rng, USER_ROLES),
                "status": status,
                "suspended_at": _between(self.rng, created_at, now) if status != "ACTIVE" else None,
                "suspension_reason": "Community guidelines violation" if status != "ACTIVE" else None,
                "last_login_at": _between(self.rng, created_at, now),
                "created_at": created_at,
                "updated_at": created_at,
            })

        return pl.DataFrame(users, infer_schema_length=None)


class BlogGenerator:
    """Generate blogs written by existing users"""

    def __init__(self, users_df: pl.DataFrame, fake: Faker, rng: random.Random):
        self.authors = users_df.select("id", "created_at").to_dicts()
        self.fake = fake
        self.rng = rng

    def generate(self, n: int = 300, now: Optional[datetime] = None) -> pl.DataFrame:
        """Generate n blogs; a minority of prolific authors write most of them"""
        now = now or utcnow()
        weights = [1.0 / (rank + 1) for rank in range(len(self.authors))]
        blogs = []

        for _ in range(n):
            author = self.rng.choices(self.authors, weights=weights)[0]
            topic = self.rng.choice(TOPICS)
            title = f"{self.fake.sentence(nb_words=6).rstrip('.')} ({topic})"
            blog_id = _uuid(self.rng)
            created_at = _between(self.rng, author["created_at"], now)
            status = _weighted(self.rng, BLOG_STATUSES)
            published_at = _between(self.rng, created_at, now) if status == "PUBLISHED" else None
            content = "\n\n".join(self.fake.paragraphs(nb=4))

            blogs.append({
                "id": blog_id,
                "title": title,
                "slug": f"{slugify(title)}-{blog_id[:8]}",
                "content": content,
                "excerpt": content[:200],
                "status": status,
                "published": status == "PUBLISHED",
                "published_at": published_at,
                "is_featured": status == "PUBLISHED" and self.rng.random() < 0.05,
                "is_reported": False,
                "report_count": 0,
                "author_id": author["id"],
                "created_at": created_at,
                "updated_at": published_at or created_at,
            })

        return pl.DataFrame(blogs, infer_schema_length=None)


class EngagementGenerator:
    """Generate views, likes, comments and follows"""

    def __init__(
        self,
        users_df: pl.DataFrame,
        blogs_df: pl.DataFrame,
        fake: Faker,
        rng: random.Random,
        np_rng: np.random.Generator,
    ):
        self.user_ids = users_df["id"].to_list()
        self.published = blogs_df.filter(pl.col("status") == "PUBLISHED").select(
            "id", "author_id", "published_at"
        ).to_dicts()
        self.fake = fake
        self.rng = rng
        self.np_rng = np_rng

    def generate(self, now: Optional[datetime] = None) -> Dict[str, pl.DataFrame]:
        """Engagement tables keyed by name"""
        now = now or utcnow()
        views: List[dict] = []
        likes: List[dict] = []
        comments: List[dict] = []

        # Log-normal popularity: most blogs get a handful of views, a few go viral
        view_counts = np.minimum(
            self.np_rng.lognormal(mean=3.0, sigma=1.0, size=len(self.published)).astype(int),
            MAX_VIEWS_PER_BLOG,
        )

        for blog, n_views in zip(self.published, view_counts):
            start = blog["published_at"]

            for _ in range(int(n_views)):
                anonymous = self.rng.random() < ANONYMOUS_VIEW_RATE
                views.append({
                    "id": _uuid(self.rng),
                    "blog_id": blog["id"],
                    "user_id": None if anonymous else self.rng.choice(self.user_ids),
                    "ip_address": self.fake.ipv4(),
                    "created_at": _between(self.rng, start, now),
                })

            n_likes = min(int(n_views * self.rng.uniform(0.05, 0.3)), len(self.user_ids))
            for user_id in self.rng.sample(self.user_ids, n_likes):
                likes.append({
                    "id": _uuid(self.rng),
                    "blog_id": blog["id"],
                    "user_id": user_id,
                    "created_at": _between(self.rng, start, now),
                })

            for _ in range(int(n_views * self.rng.uniform(0.0, 0.1))):
                created_at = _between(self.rng, start, now)
                comments.append({
                    "id": _uuid(self.rng),
                    "blog_id": blog["id"],
                    "user_id": self.rng.choice(self.user_ids),
                    "content": self.fake.sentence(nb_words=15),
                    "created_at": created_at,
                    "updated_at": created_at,
                })

        return {
            "views": pl.DataFrame(views, schema=_VIEW_SCHEMA),
            "likes": pl.DataFrame(likes, schema=_LIKE_SCHEMA),
            "comments": pl.DataFrame(comments, schema=_COMMENT_SCHEMA),
            "follows": self._follows(now),
        }

    def _follows(self, now: datetime) -> pl.DataFrame:
        follows = []
        for follower_id in self.user_ids:
            candidates = [u for u in self.user_ids if u != follower_id]
            k = min(self.rng.randint(0, 8), len(candidates))
            for following_id in self.rng.sample(candidates, k):
                follows.append({
                    "follower_id": follower_id,
                    "following_id": following_id,
                    "created_at": _between(self.rng, now - timedelta(days=HISTORY_DAYS), now),
                })
        return pl.DataFrame(follows, schema=_FOLLOW_SCHEMA)


_VIEW_SCHEMA = {
    "id": pl.Utf8, "blog_id": pl.Utf8, "user_id": pl.Utf8,
    "ip_address": pl.Utf8, "created_at": pl.Datetime,
}
_LIKE_SCHEMA = {"id": pl.Utf8, "blog_id": pl.Utf8, "user_id": pl.Utf8, "created_at": pl.Datetime}
_COMMENT_SCHEMA = {
    "id": pl.Utf8, "blog_id": pl.Utf8, "user_id": pl.Utf8,
    "content": pl.Utf8, "created_at": pl.Datetime, "updated_at": pl.Datetime,
}
_FOLLOW_SCHEMA = {"follower_id": pl.Utf8, "following_id": pl.Utf8, "created_at": pl.Datetime}


# =============================================================================
# MAIN GENERATOR
# =============================================================================

class DataGenerator:
    """
    Demo dataset orchestrator.

    The same seed always yields the same dataset for a given ``now``.
    """

    def __init__(self, seed: int = 42, output_dir: Optional[str] = None):
        self.fake = Faker()
        self.fake.seed_instance(seed)
        self.rng = random.Random(seed)
        self.np_rng = np.random.default_rng(seed)
        self.output_dir = Path(output_dir) if output_dir else None

    def generate_all(
        self,
        n_users: int = 100,
        n_blogs: int = 300,
        now: Optional[datetime] = None,
        save: bool = False,
    ) -> Dict[str, pl.DataFrame]:
        """Generate users, blogs and every engagement table"""
        now = now or utcnow()

        users_df = UserGenerator(self.fake, self.rng).generate(n_users, now)
        blogs_df = BlogGenerator(users_df, self.fake, self.rng).generate(n_blogs, now)
        engagement = EngagementGenerator(users_df, blogs_df, self.fake, self.rng, self.np_rng).generate(now)

        data = {"users": users_df, "blogs": blogs_df, **engagement}

        if save:
            self._save_data(data)

        return data

    def _save_data(self, data: Dict[str, pl.DataFrame]) -> None:
        """Write each table as Parquet and CSV"""
        if self.output_dir is None:
            raise ValueError("output_dir is required to save generated data")
        self.output_dir.mkdir(parents=True, exist_ok=True)

        for name, df in data.items():
            df.write_parquet(self.output_dir / f"{name}.parquet")
            df.write_csv(self.output_dir / f"{name}.csv")

"""
Database Models - BlogHub Schema

This module defines the relational models behind the blogging platform and
its back office. The schema consists of:

Core Tables:
- User: Accounts with role and moderation status
- Blog: Posts with publication status
- Follow: Follower graph

Engagement Fact Tables:
- View: Blog views (optionally anonymous)
- Like: One like per user per blog
- Comment: Reader comments

Back Office Tables:
- UserReport: Reports filed against users or content
- ModerationNote: Internal notes left by moderators
- PlatformSetting: Key/value platform configuration
- AdminAction: Audit log of administrative actions
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional, List
import uuid

from sqlalchemy import (
    Boolean,
    DateTime,
    Enum as SQLEnum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all database models"""
    pass


def utcnow() -> datetime:
    """Naive UTC timestamp, the storage convention for every DateTime column."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


# =============================================================================
# ENUMERATIONS
# =============================================================================

class UserRole(str, Enum):
    """User role enumeration"""
    USER = "USER"
    MODERATOR = "MODERATOR"
    SUPER_ADMIN = "SUPER_ADMIN"


class UserStatus(str, Enum):
    """User moderation status enumeration"""
    ACTIVE = "ACTIVE"
    SUSPENDED = "SUSPENDED"
    BANNED = "BANNED"


class BlogStatus(str, Enum):
    """Blog publication status enumeration"""
    DRAFT = "DRAFT"
    PUBLISHED = "PUBLISHED"
    ARCHIVED = "ARCHIVED"


class ReportType(str, Enum):
    """Report category enumeration"""
    SPAM = "SPAM"
    INAPPROPRIATE = "INAPPROPRIATE"
    HARASSMENT = "HARASSMENT"
    COPYRIGHT = "COPYRIGHT"
    OTHER = "OTHER"


class ReportStatus(str, Enum):
    """Report lifecycle enumeration"""
    PENDING = "PENDING"
    RESOLVED = "RESOLVED"
    DISMISSED = "DISMISSED"


# =============================================================================
# CORE TABLES
# =============================================================================

class User(Base):
    """
    User Table

    Role and status are independent: a suspended super admin is valid.
    """
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    username: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    full_name: Mapped[Optional[str]] = mapped_column(String(100))
    avatar: Mapped[Optional[str]] = mapped_column(String(500))
    bio: Mapped[Optional[str]] = mapped_column(Text)

    role: Mapped[UserRole] = mapped_column(SQLEnum(UserRole), default=UserRole.USER, nullable=False)
    status: Mapped[UserStatus] = mapped_column(SQLEnum(UserStatus), default=UserStatus.ACTIVE, nullable=False)
    suspended_at: Mapped[Optional[datetime]] = mapped_column(DateTime)
    suspension_reason: Mapped[Optional[str]] = mapped_column(Text)
    last_login_at: Mapped[Optional[datetime]] = mapped_column(DateTime)

    # Audit
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    blogs: Mapped[List["Blog"]] = relationship(back_populates="author", cascade="all, delete-orphan", passive_deletes=True)
    comments: Mapped[List["Comment"]] = relationship(back_populates="user", cascade="all, delete-orphan", passive_deletes=True)
    likes: Mapped[List["Like"]] = relationship(back_populates="user", cascade="all, delete-orphan", passive_deletes=True)

    __table_args__ = (
        Index("ix_users_role", "role"),
        Index("ix_users_status", "status"),
        Index("ix_users_created_at", "created_at"),
    )


class Blog(Base):
    """
    Blog Table

    By convention a PUBLISHED blog has published=True and a published_at
    timestamp; the columns are not constrained against each other.
    """
    __tablename__ = "blogs"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    title: Mapped[str] = mapped_column(String(300), nullable=False)
    slug: Mapped[str] = mapped_column(String(350), unique=True, nullable=False)
    content: Mapped[str] = mapped_column(Text, default="", nullable=False)
    excerpt: Mapped[Optional[str]] = mapped_column(Text)

    status: Mapped[BlogStatus] = mapped_column(SQLEnum(BlogStatus), default=BlogStatus.DRAFT, nullable=False)
    published: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    published_at: Mapped[Optional[datetime]] = mapped_column(DateTime)

    # Moderation flags
    is_featured: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_reported: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    report_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    author_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )

    # Audit
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    author: Mapped["User"] = relationship(back_populates="blogs")
    views: Mapped[List["View"]] = relationship(back_populates="blog", cascade="all, delete-orphan", passive_deletes=True)
    likes: Mapped[List["Like"]] = relationship(back_populates="blog", cascade="all, delete-orphan", passive_deletes=True)
    comments: Mapped[List["Comment"]] = relationship(back_populates="blog", cascade="all, delete-orphan", passive_deletes=True)

    __table_args__ = (
        Index("ix_blogs_author", "author_id"),
        Index("ix_blogs_status", "status"),
        Index("ix_blogs_published_at", "published_at"),
    )


class Follow(Base):
    """Follower graph edge: follower_id follows following_id."""
    __tablename__ = "follows"

    follower_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )
    following_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)


# =============================================================================
# ENGAGEMENT FACT TABLES
# =============================================================================

class View(Base):
    """
    View Fact Table

    Grain: one row per blog view. user_id is null for anonymous readers.
    """
    __tablename__ = "views"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    blog_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("blogs.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="SET NULL")
    )
    ip_address: Mapped[Optional[str]] = mapped_column(String(45))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)

    blog: Mapped["Blog"] = relationship(back_populates="views")

    __table_args__ = (
        Index("ix_views_blog", "blog_id"),
        Index("ix_views_created_at", "created_at"),
    )


class Like(Base):
    """Like Fact Table"""
    __tablename__ = "likes"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    blog_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("blogs.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)

    blog: Mapped["Blog"] = relationship(back_populates="likes")
    user: Mapped["User"] = relationship(back_populates="likes")

    __table_args__ = (
        UniqueConstraint("user_id", "blog_id", name="uq_likes_user_blog"),
        Index("ix_likes_blog", "blog_id"),
        Index("ix_likes_created_at", "created_at"),
    )


class Comment(Base):
    """Comment Fact Table"""
    __tablename__ = "comments"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    blog_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("blogs.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow)

    blog: Mapped["Blog"] = relationship(back_populates="comments")
    user: Mapped["User"] = relationship(back_populates="comments")

    __table_args__ = (
        Index("ix_comments_blog", "blog_id"),
        Index("ix_comments_created_at", "created_at"),
    )


# =============================================================================
# BACK OFFICE TABLES
# =============================================================================

class UserReport(Base):
    """
    User Report Table

    A report against a user, optionally about one of their blogs.
    """
    __tablename__ = "user_reports"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    reporter_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    reported_user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    blog_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("blogs.id", ondelete="SET NULL")
    )

    target_type: Mapped[str] = mapped_column(String(50), nullable=False)
    target_id: Mapped[str] = mapped_column(String(100), nullable=False)
    report_type: Mapped[ReportType] = mapped_column(SQLEnum(ReportType), nullable=False)
    reason: Mapped[str] = mapped_column(Text, nullable=False)

    status: Mapped[ReportStatus] = mapped_column(SQLEnum(ReportStatus), default=ReportStatus.PENDING, nullable=False)
    resolution: Mapped[Optional[str]] = mapped_column(Text)
    resolved_at: Mapped[Optional[datetime]] = mapped_column(DateTime)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)

    reporter: Mapped["User"] = relationship(foreign_keys=[reporter_id])
    reported_user: Mapped["User"] = relationship(foreign_keys=[reported_user_id])
    blog: Mapped[Optional["Blog"]] = relationship()

    __table_args__ = (
        Index("ix_user_reports_status", "status"),
        Index("ix_user_reports_type", "report_type"),
    )


class ModerationNote(Base):
    """Internal moderator note attached to any target (user, blog, report)."""
    __tablename__ = "moderation_notes"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    moderator_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    target_type: Mapped[str] = mapped_column(String(50), nullable=False)
    target_id: Mapped[str] = mapped_column(String(100), nullable=False)
    note: Mapped[str] = mapped_column(Text, nullable=False)

    # Direct links for the common targets
    user_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE")
    )
    blog_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("blogs.id", ondelete="CASCADE")
    )

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)

    moderator: Mapped["User"] = relationship(foreign_keys=[moderator_id])

    __table_args__ = (
        Index("ix_moderation_notes_target", "target_type", "target_id"),
        Index("ix_moderation_notes_user", "user_id"),
    )


class PlatformSetting(Base):
    """
    Platform Setting Table

    Values are stored as text; non-string values are JSON encoded.
    """
    __tablename__ = "platform_settings"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    key: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow)


class AdminAction(Base):
    """
    Admin Action Table

    Append-only audit log of administrative actions.
    """
    __tablename__ = "admin_actions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    admin_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    action: Mapped[str] = mapped_column(String(100), nullable=False)
    target_type: Mapped[Optional[str]] = mapped_column(String(50))
    target_id: Mapped[Optional[str]] = mapped_column(String(100))
    details: Mapped[Optional[str]] = mapped_column(Text)
    ip_address: Mapped[Optional[str]] = mapped_column(String(45))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)

    admin: Mapped["User"] = relationship()

    __table_args__ = (
        Index("ix_admin_actions_admin", "admin_id"),
        Index("ix_admin_actions_action", "action"),
        Index("ix_admin_actions_created_at", "created_at"),
    )

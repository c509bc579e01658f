"""
Admin User Management Endpoints

Listing, inspection and moderation (role changes, suspension, bans,
reinstatement, deletion) of user accounts.
"""

from datetime import datetime
from typing import List, Literal, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from pydantic import Field
from sqlalchemy import and_, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from bloghub.analytics.metrics import average_views_per_blog, engagement_rate
from bloghub.analytics.schemas import AuthorSummary, CamelModel
from bloghub.database.connection import get_db_dependency
from bloghub.database.models import (
    Blog,
    BlogStatus,
    Comment,
    Follow,
    Like,
    ModerationNote,
    User,
    UserRole,
    UserStatus,
    View,
    utcnow,
)
from bloghub.serving.api.audit import log_admin_action
from bloghub.serving.api.dependencies import get_current_actor
from bloghub.serving.api.pagination import Page, page_offset, paginate
from bloghub.serving.cache import analytics_cache

router = APIRouter()
logger = structlog.get_logger(__name__)

RECENT_BLOGS_LIMIT = 10

SORT_COLUMNS = {
    "createdAt": User.created_at,
    "username": User.username,
    "email": User.email,
    "lastLoginAt": User.last_login_at,
}


class UserProfile(CamelModel):
    """User account as seen by moderators"""
    id: UUID
    username: str
    email: str
    full_name: Optional[str] = None
    avatar: Optional[str] = None
    role: UserRole
    status: UserStatus
    created_at: datetime
    last_login_at: Optional[datetime] = None
    suspended_at: Optional[datetime] = None
    suspension_reason: Optional[str] = None


class UserCounts(CamelModel):
    """Activity counts of a user"""
    blogs: int = 0
    comments: int = 0
    likes: int = 0
    followers: int = 0
    following: int = 0


class UserSummary(UserProfile):
    """User list entry"""
    counts: UserCounts


class BlogEngagement(CamelModel):
    """A user's blog with its engagement counts"""
    id: UUID
    title: str
    slug: str
    status: BlogStatus
    published_at: Optional[datetime] = None
    created_at: datetime
    views: int
    likes: int
    comments: int


class NoteEntry(CamelModel):
    """Moderation note on a user"""
    id: UUID
    note: str
    created_at: datetime
    moderator: AuthorSummary


class UserEngagementStats(CamelModel):
    """Engagement across all of a user's blogs"""
    total_views: int
    total_likes: int
    total_comments: int
    avg_views_per_blog: int
    engagement_rate: float


class UserDetail(CamelModel):
    """Full moderation view of a user"""
    user: UserSummary
    recent_blogs: List[BlogEngagement]
    notes: List[NoteEntry]
    stats: UserEngagementStats


class UserActionResponse(CamelModel):
    user: UserProfile
    message: str


class MessageResponse(CamelModel):
    message: str


class RoleUpdate(CamelModel):
    role: UserRole


class ModerationReason(CamelModel):
    reason: str = Field(min_length=1)


def _count_for_user(model, column):
    """Correlated count of ``model`` rows whose ``column`` points at the user."""
    return (
        select(func.count())
        .select_from(model)
        .where(column == User.id)
        .correlate(User)
        .scalar_subquery()
    )


def _user_with_counts():
    return select(
        User,
        _count_for_user(Blog, Blog.author_id).label("blogs"),
        _count_for_user(Comment, Comment.user_id).label("comments"),
        _count_for_user(Like, Like.user_id).label("likes"),
        _count_for_user(Follow, Follow.following_id).label("followers"),
        _count_for_user(Follow, Follow.follower_id).label("following"),
    )


def _summary(row) -> UserSummary:
    profile = UserProfile.model_validate(row.User)
    return UserSummary(
        **profile.model_dump(),
        counts=UserCounts(
            blogs=row.blogs,
            comments=row.comments,
            likes=row.likes,
            followers=row.followers,
            following=row.following,
        ),
    )


async def _get_user_or_404(db: AsyncSession, user_id: UUID) -> User:
    user = await db.get(User, user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.get("", response_model=Page[UserSummary])
async def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    search: Optional[str] = None,
    role: Optional[UserRole] = None,
    status: Optional[UserStatus] = None,
    sort_by: Literal["createdAt", "username", "email", "lastLoginAt"] = Query("createdAt", alias="sortBy"),
    sort_order: Literal["asc", "desc"] = Query("desc", alias="sortOrder"),
    db: AsyncSession = Depends(get_db_dependency),
) -> Page[UserSummary]:
    """List users with search, role/status filters and sorting."""
    logger.info("list_users called", page=page, limit=limit, search=search, role=role, status=status)

    conditions = []
    if search:
        pattern = f"%{search}%"
        conditions.append(or_(
            User.username.ilike(pattern),
            User.email.ilike(pattern),
            User.full_name.ilike(pattern),
        ))
    if role:
        conditions.append(User.role == role)
    if status:
        conditions.append(User.status == status)

    count_query = select(func.count(User.id))
    query = _user_with_counts()
    if conditions:
        count_query = count_query.where(and_(*conditions))
        query = query.where(and_(*conditions))

    total = (await db.execute(count_query)).scalar() or 0

    sort_column = SORT_COLUMNS[sort_by]
    order = sort_column.asc() if sort_order == "asc" else sort_column.desc()
    query = query.order_by(order, User.id).offset(page_offset(page, limit)).limit(limit)

    rows = (await db.execute(query)).all()
    logger.info("Users retrieved", count=len(rows), total=total)

    return paginate([_summary(row) for row in rows], page, limit, total)


@router.get("/{user_id}", response_model=UserDetail)
async def get_user_details(
    user_id: UUID,
    db: AsyncSession = Depends(get_db_dependency),
) -> UserDetail:
    """User profile with counts, recent blogs, moderation notes and engagement stats."""
    row = (await db.execute(_user_with_counts().where(User.id == user_id))).one_or_none()
    if row is None:
        raise HTTPException(status_code=404, detail="User not found")

    blog_rows = (await db.execute(
        select(
            Blog.id,
            Blog.title,
            Blog.slug,
            Blog.status,
            Blog.published_at,
            Blog.created_at,
            select(func.count(View.id)).where(View.blog_id == Blog.id).correlate(Blog).scalar_subquery().label("views"),
            select(func.count(Like.id)).where(Like.blog_id == Blog.id).correlate(Blog).scalar_subquery().label("likes"),
            select(func.count(Comment.id)).where(Comment.blog_id == Blog.id).correlate(Blog).scalar_subquery().label("comments"),
        )
        .where(Blog.author_id == user_id)
        .order_by(Blog.created_at.desc())
    )).all()
    blogs = [BlogEngagement.model_validate(blog_row._asdict()) for blog_row in blog_rows]

    note_rows = (await db.execute(
        select(ModerationNote, User)
        .join(User, ModerationNote.moderator_id == User.id)
        .where(ModerationNote.user_id == user_id)
        .order_by(ModerationNote.created_at.desc())
    )).all()
    notes = [
        NoteEntry(
            id=note.id,
            note=note.note,
            created_at=note.created_at,
            moderator=AuthorSummary.model_validate(moderator),
        )
        for note, moderator in note_rows
    ]

    total_views = sum(blog.views for blog in blogs)
    total_likes = sum(blog.likes for blog in blogs)
    total_comments = sum(blog.comments for blog in blogs)

    return UserDetail(
        user=_summary(row),
        recent_blogs=blogs[:RECENT_BLOGS_LIMIT],
        notes=notes,
        stats=UserEngagementStats(
            total_views=total_views,
            total_likes=total_likes,
            total_comments=total_comments,
            avg_views_per_blog=average_views_per_blog(total_views, len(blogs)),
            engagement_rate=engagement_rate(total_views, total_likes, total_comments),
        ),
    )


@router.put("/{user_id}/role", response_model=UserActionResponse)
async def update_user_role(
    user_id: UUID,
    body: RoleUpdate,
    request: Request,
    actor: User = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db_dependency),
) -> UserActionResponse:
    """Change a user's role."""
    user = await _get_user_or_404(db, user_id)
    user.role = body.role

    await log_admin_action(
        db, actor.id, "USER_ROLE_UPDATED", "USER", user_id,
        f"Role changed to {body.role.value}", request,
    )
    return UserActionResponse(user=UserProfile.model_validate(user), message="User role updated successfully")


async def _restrict(
    db: AsyncSession,
    user_id: UUID,
    status: UserStatus,
    reason: str,
) -> User:
    user = await _get_user_or_404(db, user_id)
    user.status = status
    user.suspended_at = utcnow()
    user.suspension_reason = reason
    return user


@router.post("/{user_id}/suspend", response_model=UserActionResponse)
async def suspend_user(
    user_id: UUID,
    body: ModerationReason,
    request: Request,
    actor: User = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db_dependency),
) -> UserActionResponse:
    """Suspend a user with a reason."""
    user = await _restrict(db, user_id, UserStatus.SUSPENDED, body.reason)
    await log_admin_action(db, actor.id, "USER_SUSPENDED", "USER", user_id, body.reason, request)
    return UserActionResponse(user=UserProfile.model_validate(user), message="User suspended successfully")


@router.post("/{user_id}/ban", response_model=UserActionResponse)
async def ban_user(
    user_id: UUID,
    body: ModerationReason,
    request: Request,
    actor: User = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db_dependency),
) -> UserActionResponse:
    """Ban a user with a reason."""
    user = await _restrict(db, user_id, UserStatus.BANNED, body.reason)
    await log_admin_action(db, actor.id, "USER_BANNED", "USER", user_id, body.reason, request)
    return UserActionResponse(user=UserProfile.model_validate(user), message="User banned successfully")


@router.post("/{user_id}/reinstate", response_model=UserActionResponse)
async def reinstate_user(
    user_id: UUID,
    request: Request,
    actor: User = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db_dependency),
) -> UserActionResponse:
    """Return a suspended or banned user to ACTIVE."""
    user = await _get_user_or_404(db, user_id)
    user.status = UserStatus.ACTIVE
    user.suspended_at = None
    user.suspension_reason = None

    await log_admin_action(db, actor.id, "USER_REINSTATED", "USER", user_id, request=request)
    return UserActionResponse(user=UserProfile.model_validate(user), message="User reinstated successfully")


@router.delete("/{user_id}", response_model=MessageResponse)
async def delete_user(
    user_id: UUID,
    request: Request,
    actor: User = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db_dependency),
) -> MessageResponse:
    """Delete a user and everything they authored."""
    user = await _get_user_or_404(db, user_id)
    details = f"Deleted user: {user.username} ({user.email})"

    await db.delete(user)
    await log_admin_action(db, actor.id, "USER_DELETED", "USER", user_id, details, request)
    await analytics_cache.invalidate_all()

    logger.info("User deleted", user_id=str(user_id))
    return MessageResponse(message="User deleted successfully")

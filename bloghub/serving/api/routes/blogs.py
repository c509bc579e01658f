"""
Admin Content Moderation Endpoints

Blog listing with moderation filters, edits, deletion, featuring and bulk
operations.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy import and_, delete, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
import structlog

from bloghub.analytics.schemas import AuthorSummary, CamelModel
from bloghub.database.connection import get_db_dependency
from bloghub.database.models import Blog, BlogStatus, Comment, Like, User, View, utcnow
from bloghub.serving.api.audit import log_admin_action
from bloghub.serving.api.dependencies import get_current_actor
from bloghub.serving.api.pagination import Page, page_offset, paginate
from bloghub.serving.cache import analytics_cache

router = APIRouter()
logger = structlog.get_logger(__name__)


class BlogCounts(CamelModel):
    views: int = 0
    likes: int = 0
    comments: int = 0


class BlogSummary(CamelModel):
    """Blog as seen by moderators"""
    id: UUID
    title: str
    slug: str
    excerpt: Optional[str] = None
    status: BlogStatus
    published: bool
    published_at: Optional[datetime] = None
    is_featured: bool
    is_reported: bool
    report_count: int
    created_at: datetime
    updated_at: Optional[datetime] = None
    author: AuthorSummary


class BlogListEntry(BlogSummary):
    counts: BlogCounts


class BlogUpdate(CamelModel):
    """Partial blog update; omitted fields are left unchanged"""
    title: Optional[str] = None
    content: Optional[str] = None
    excerpt: Optional[str] = None
    status: Optional[BlogStatus] = None
    is_featured: Optional[bool] = None


class BlogActionResponse(CamelModel):
    blog: BlogSummary
    message: str


class BulkBlogRequest(CamelModel):
    blog_ids: List[UUID]
    is_featured: Optional[bool] = None


class BulkActionResponse(CamelModel):
    affected: int
    message: str


class MessageResponse(CamelModel):
    message: str


def _count_for_blog(model):
    return (
        select(func.count(model.id))
        .where(model.blog_id == Blog.id)
        .correlate(Blog)
        .scalar_subquery()
    )


def apply_status(blog: Blog, status: BlogStatus, now: datetime) -> None:
    """Set ``status`` and keep the published flag and timestamp consistent."""
    blog.status = status
    if status == BlogStatus.PUBLISHED:
        blog.published = True
        if blog.published_at is None:
            blog.published_at = now
    else:
        blog.published = False


async def _get_blog_or_404(db: AsyncSession, blog_id: UUID) -> Blog:
    result = await db.execute(
        select(Blog).options(selectinload(Blog.author)).where(Blog.id == blog_id)
    )
    blog = result.scalar_one_or_none()
    if blog is None:
        raise HTTPException(status_code=404, detail="Blog not found")
    return blog


def _require_ids(body: BulkBlogRequest) -> List[UUID]:
    if not body.blog_ids:
        raise HTTPException(status_code=400, detail="Invalid blog IDs")
    return body.blog_ids


@router.get("", response_model=Page[BlogListEntry])
async def list_blogs(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    search: Optional[str] = None,
    status: Optional[BlogStatus] = None,
    author_id: Optional[UUID] = Query(None, alias="authorId"),
    is_reported: Optional[bool] = Query(None, alias="isReported"),
    is_featured: Optional[bool] = Query(None, alias="isFeatured"),
    db: AsyncSession = Depends(get_db_dependency),
) -> Page[BlogListEntry]:
    """List blogs, most recently updated first."""
    logger.info("list_blogs called", page=page, limit=limit, status=status, author_id=author_id)

    conditions = []
    if search:
        pattern = f"%{search}%"
        conditions.append(or_(Blog.title.ilike(pattern), Blog.content.ilike(pattern)))
    if status:
        conditions.append(Blog.status == status)
    if author_id:
        conditions.append(Blog.author_id == author_id)
    if is_reported is not None:
        conditions.append(Blog.is_reported == is_reported)
    if is_featured is not None:
        conditions.append(Blog.is_featured == is_featured)

    count_query = select(func.count(Blog.id))
    query = (
        select(
            Blog,
            _count_for_blog(View).label("views"),
            _count_for_blog(Like).label("likes"),
            _count_for_blog(Comment).label("comments"),
        )
        .options(selectinload(Blog.author))
    )
    if conditions:
        count_query = count_query.where(and_(*conditions))
        query = query.where(and_(*conditions))

    total = (await db.execute(count_query)).scalar() or 0
    query = (
        query.order_by(Blog.updated_at.desc(), Blog.id)
        .offset(page_offset(page, limit))
        .limit(limit)
    )
    rows = (await db.execute(query)).all()

    entries = [
        BlogListEntry(
            **BlogSummary.model_validate(row.Blog).model_dump(),
            counts=BlogCounts(views=row.views, likes=row.likes, comments=row.comments),
        )
        for row in rows
    ]
    logger.info("Blogs retrieved", count=len(entries), total=total)
    return paginate(entries, page, limit, total)


@router.post("/bulk-delete", response_model=BulkActionResponse)
async def bulk_delete_blogs(
    body: BulkBlogRequest,
    request: Request,
    actor: User = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db_dependency),
) -> BulkActionResponse:
    """Delete several blogs at once."""
    blog_ids = _require_ids(body)

    result = await db.execute(delete(Blog).where(Blog.id.in_(blog_ids)))
    await log_admin_action(
        db, actor.id, "BULK_BLOG_DELETE", "BLOG", ",".join(str(i) for i in blog_ids),
        f"Deleted {result.rowcount} blogs", request,
    )
    await analytics_cache.invalidate_all()

    return BulkActionResponse(affected=result.rowcount, message=f"{result.rowcount} blogs deleted successfully")


@router.post("/bulk-unpublish", response_model=BulkActionResponse)
async def bulk_unpublish_blogs(
    body: BulkBlogRequest,
    request: Request,
    actor: User = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db_dependency),
) -> BulkActionResponse:
    """Move several blogs back to DRAFT."""
    blog_ids = _require_ids(body)

    result = await db.execute(
        update(Blog)
        .where(Blog.id.in_(blog_ids))
        .values(status=BlogStatus.DRAFT, published=False, updated_at=utcnow())
    )
    await log_admin_action(
        db, actor.id, "BULK_BLOG_UNPUBLISH", "BLOG", ",".join(str(i) for i in blog_ids),
        f"Unpublished {result.rowcount} blogs", request,
    )
    await analytics_cache.invalidate_all()

    return BulkActionResponse(affected=result.rowcount, message=f"{result.rowcount} blogs unpublished successfully")


@router.post("/bulk-feature", response_model=BulkActionResponse)
async def bulk_feature_blogs(
    body: BulkBlogRequest,
    request: Request,
    actor: User = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db_dependency),
) -> BulkActionResponse:
    """Feature (or with ``isFeatured: false``, unfeature) several blogs."""
    blog_ids = _require_ids(body)
    featured = body.is_featured is not False

    result = await db.execute(
        update(Blog)
        .where(Blog.id.in_(blog_ids))
        .values(is_featured=featured, updated_at=utcnow())
    )
    await log_admin_action(
        db, actor.id, "BULK_BLOG_FEATURE" if featured else "BULK_BLOG_UNFEATURE", "BLOG",
        ",".join(str(i) for i in blog_ids), request=request,
    )

    verb = "featured" if featured else "unfeatured"
    return BulkActionResponse(affected=result.rowcount, message=f"{result.rowcount} blogs {verb} successfully")


@router.put("/{blog_id}", response_model=BlogActionResponse)
async def update_blog(
    blog_id: UUID,
    body: BlogUpdate,
    request: Request,
    actor: User = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db_dependency),
) -> BlogActionResponse:
    """Edit a blog's text, status or featured flag."""
    blog = await _get_blog_or_404(db, blog_id)

    if body.title:
        blog.title = body.title
    if body.content:
        blog.content = body.content
    if body.excerpt is not None:
        blog.excerpt = body.excerpt
    if body.status is not None:
        apply_status(blog, body.status, utcnow())
    if body.is_featured is not None:
        blog.is_featured = body.is_featured
    blog.updated_at = utcnow()

    await log_admin_action(db, actor.id, "BLOG_UPDATED", "BLOG", blog_id, f"Updated blog: {blog.title}", request)
    if body.status is not None:
        await analytics_cache.invalidate_all()

    return BlogActionResponse(blog=BlogSummary.model_validate(blog), message="Blog updated successfully")


@router.delete("/{blog_id}", response_model=MessageResponse)
async def delete_blog(
    blog_id: UUID,
    request: Request,
    actor: User = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db_dependency),
) -> MessageResponse:
    """Delete a blog with its views, likes and comments."""
    blog = await _get_blog_or_404(db, blog_id)
    title = blog.title

    await db.delete(blog)
    await log_admin_action(db, actor.id, "BLOG_DELETED", "BLOG", blog_id, f"Deleted blog: {title}", request)
    await analytics_cache.invalidate_all()

    return MessageResponse(message="Blog deleted successfully")


@router.post("/{blog_id}/toggle-feature", response_model=BlogActionResponse)
async def toggle_feature_blog(
    blog_id: UUID,
    request: Request,
    actor: User = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db_dependency),
) -> BlogActionResponse:
    """Flip a blog's featured flag."""
    blog = await _get_blog_or_404(db, blog_id)
    blog.is_featured = not blog.is_featured
    blog.updated_at = utcnow()

    action = "BLOG_FEATURED" if blog.is_featured else "BLOG_UNFEATURED"
    await log_admin_action(db, actor.id, action, "BLOG", blog_id, request=request)

    verb = "featured" if blog.is_featured else "unfeatured"
    return BlogActionResponse(blog=BlogSummary.model_validate(blog), message=f"Blog {verb} successfully")

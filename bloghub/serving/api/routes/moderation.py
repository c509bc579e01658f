"""
Admin Moderation Endpoints

User reports and internal moderation notes.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from pydantic import Field
from sqlalchemy import and_, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
import structlog

from bloghub.analytics.schemas import AuthorSummary, CamelModel
from bloghub.database.connection import get_db_dependency
from bloghub.database.models import (
    Blog,
    BlogStatus,
    ModerationNote,
    ReportStatus,
    ReportType,
    User,
    UserReport,
    utcnow,
)
from bloghub.serving.api.audit import log_admin_action
from bloghub.serving.api.dependencies import get_current_actor
from bloghub.serving.api.pagination import Page, page_offset, paginate

router = APIRouter()
logger = structlog.get_logger(__name__)

DEFAULT_DISMISSAL = "Report dismissed by moderator"


class ReportedBlog(CamelModel):
    id: UUID
    title: str
    slug: str
    status: BlogStatus


class ReportEntry(CamelModel):
    """User report with the people and blog involved"""
    id: UUID
    target_type: str
    target_id: str
    report_type: ReportType
    reason: str
    status: ReportStatus
    resolution: Optional[str] = None
    resolved_at: Optional[datetime] = None
    created_at: datetime
    reporter: AuthorSummary
    reported_user: AuthorSummary
    blog: Optional[ReportedBlog] = None


class ReportCreate(CamelModel):
    target_type: str = Field(min_length=1)
    target_id: str = Field(min_length=1)
    reason: str = Field(min_length=1)
    report_type: ReportType
    reported_user_id: UUID
    blog_id: Optional[UUID] = None


class ReportResolution(CamelModel):
    resolution: Optional[str] = None


class ReportDismissal(CamelModel):
    reason: Optional[str] = None


class ReportActionResponse(CamelModel):
    report: ReportEntry
    message: str


class NoteEntry(CamelModel):
    id: UUID
    target_type: str
    target_id: str
    note: str
    created_at: datetime
    moderator: AuthorSummary


class NoteCreate(CamelModel):
    target_type: str = Field(min_length=1)
    target_id: str = Field(min_length=1)
    note: str = Field(min_length=1)
    user_id: Optional[UUID] = None
    blog_id: Optional[UUID] = None


class NoteActionResponse(CamelModel):
    moderation_note: NoteEntry
    message: str


class NotesResponse(CamelModel):
    notes: List[NoteEntry]


def _report_query():
    return select(UserReport).options(
        selectinload(UserReport.reporter),
        selectinload(UserReport.reported_user),
        selectinload(UserReport.blog),
    )


async def _get_report_or_404(db: AsyncSession, report_id: UUID) -> UserReport:
    report = (await db.execute(_report_query().where(UserReport.id == report_id))).scalar_one_or_none()
    if report is None:
        raise HTTPException(status_code=404, detail="Report not found")
    return report


# =============================================================================
# REPORTS
# =============================================================================

@router.get("/reports", response_model=Page[ReportEntry])
async def list_reports(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    status: Optional[ReportStatus] = None,
    report_type: Optional[ReportType] = Query(None, alias="reportType"),
    db: AsyncSession = Depends(get_db_dependency),
) -> Page[ReportEntry]:
    """List reports, newest first."""
    conditions = []
    if status:
        conditions.append(UserReport.status == status)
    if report_type:
        conditions.append(UserReport.report_type == report_type)

    count_query = select(func.count(UserReport.id))
    query = _report_query()
    if conditions:
        count_query = count_query.where(and_(*conditions))
        query = query.where(and_(*conditions))

    total = (await db.execute(count_query)).scalar() or 0
    query = (
        query.order_by(UserReport.created_at.desc(), UserReport.id)
        .offset(page_offset(page, limit))
        .limit(limit)
    )
    reports = (await db.execute(query)).scalars().all()

    logger.info("Reports retrieved", count=len(reports), total=total, status=status)
    return paginate([ReportEntry.model_validate(r) for r in reports], page, limit, total)


@router.post("/reports", response_model=ReportActionResponse, status_code=201)
async def create_report(
    body: ReportCreate,
    actor: User = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db_dependency),
) -> ReportActionResponse:
    """File a report; a report about a blog flags that blog."""
    reported_user = await db.get(User, body.reported_user_id)
    if reported_user is None:
        raise HTTPException(status_code=404, detail="Reported user not found")

    blog = None
    if body.blog_id is not None:
        blog = await db.get(Blog, body.blog_id)
        if blog is None:
            raise HTTPException(status_code=404, detail="Blog not found")
        blog.is_reported = True
        blog.report_count = (blog.report_count or 0) + 1

    report = UserReport(
        reporter=actor,
        reported_user=reported_user,
        blog=blog,
        target_type=body.target_type,
        target_id=body.target_id,
        report_type=body.report_type,
        reason=body.reason,
        status=ReportStatus.PENDING,
        created_at=utcnow(),
    )
    db.add(report)
    await db.flush()

    logger.info("Report created", report_id=str(report.id), report_type=body.report_type.value)
    return ReportActionResponse(report=ReportEntry.model_validate(report), message="Report created successfully")


async def _close_report(
    db: AsyncSession,
    report_id: UUID,
    status: ReportStatus,
    resolution: Optional[str],
) -> UserReport:
    report = await _get_report_or_404(db, report_id)
    report.status = status
    report.resolved_at = utcnow()
    report.resolution = resolution
    return report


@router.post("/reports/{report_id}/resolve", response_model=ReportActionResponse)
async def resolve_report(
    report_id: UUID,
    body: ReportResolution,
    request: Request,
    actor: User = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db_dependency),
) -> ReportActionResponse:
    """Mark a report RESOLVED."""
    report = await _close_report(db, report_id, ReportStatus.RESOLVED, body.resolution)
    await log_admin_action(db, actor.id, "REPORT_RESOLVED", "REPORT", report_id, body.resolution, request)
    return ReportActionResponse(report=ReportEntry.model_validate(report), message="Report resolved successfully")


@router.post("/reports/{report_id}/dismiss", response_model=ReportActionResponse)
async def dismiss_report(
    report_id: UUID,
    body: ReportDismissal,
    request: Request,
    actor: User = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db_dependency),
) -> ReportActionResponse:
    """Mark a report DISMISSED."""
    report = await _close_report(db, report_id, ReportStatus.DISMISSED, body.reason or DEFAULT_DISMISSAL)
    await log_admin_action(db, actor.id, "REPORT_DISMISSED", "REPORT", report_id, body.reason, request)
    return ReportActionResponse(report=ReportEntry.model_validate(report), message="Report dismissed successfully")


# =============================================================================
# MODERATION NOTES
# =============================================================================

@router.get("/notes/{target_type}/{target_id}", response_model=NotesResponse)
async def get_moderation_notes(
    target_type: str,
    target_id: str,
    db: AsyncSession = Depends(get_db_dependency),
) -> NotesResponse:
    """Notes attached to a target, newest first."""
    result = await db.execute(
        select(ModerationNote)
        .options(selectinload(ModerationNote.moderator))
        .where(ModerationNote.target_type == target_type, ModerationNote.target_id == target_id)
        .order_by(ModerationNote.created_at.desc(), ModerationNote.id)
    )
    notes = result.scalars().all()
    return NotesResponse(notes=[NoteEntry.model_validate(n) for n in notes])


@router.post("/notes", response_model=NoteActionResponse, status_code=201)
async def add_moderation_note(
    body: NoteCreate,
    request: Request,
    actor: User = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db_dependency),
) -> NoteActionResponse:
    """Attach an internal note to a user, blog or report."""
    if body.user_id is not None and await db.get(User, body.user_id) is None:
        raise HTTPException(status_code=404, detail="User not found")
    if body.blog_id is not None and await db.get(Blog, body.blog_id) is None:
        raise HTTPException(status_code=404, detail="Blog not found")

    note = ModerationNote(
        moderator=actor,
        target_type=body.target_type,
        target_id=body.target_id,
        note=body.note,
        user_id=body.user_id,
        blog_id=body.blog_id,
        created_at=utcnow(),
    )
    db.add(note)
    await db.flush()

    await log_admin_action(db, actor.id, "MODERATION_NOTE_ADDED", body.target_type, body.target_id, body.note, request)
    return NoteActionResponse(moderation_note=NoteEntry.model_validate(note), message="Moderation note added successfully")

"""
Admin Audit Log Endpoint
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy import and_, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from bloghub.analytics.schemas import CamelModel
from bloghub.database.connection import get_db_dependency
from bloghub.database.models import AdminAction, UserRole
from bloghub.serving.api.pagination import Page, page_offset, paginate

router = APIRouter()


class Performer(CamelModel):
    id: UUID
    email: str
    username: str
    full_name: Optional[str] = None
    avatar: Optional[str] = None
    role: UserRole


class AuditEntry(CamelModel):
    id: UUID
    action: str
    performed_by: Performer
    target_type: Optional[str] = None
    target_id: Optional[str] = None
    details: Optional[str] = None
    ip_address: Optional[str] = None
    created_at: datetime


@router.get("", response_model=Page[AuditEntry])
async def get_audit_log(
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=200),
    action: Optional[str] = None,
    admin_id: Optional[UUID] = Query(None, alias="adminId"),
    db: AsyncSession = Depends(get_db_dependency),
) -> Page[AuditEntry]:
    """Administrative actions, newest first."""
    conditions = []
    if action:
        conditions.append(AdminAction.action == action)
    if admin_id:
        conditions.append(AdminAction.admin_id == admin_id)

    count_query = select(func.count(AdminAction.id))
    query = select(AdminAction).options(selectinload(AdminAction.admin))
    if conditions:
        count_query = count_query.where(and_(*conditions))
        query = query.where(and_(*conditions))

    total = (await db.execute(count_query)).scalar() or 0
    query = (
        query.order_by(AdminAction.created_at.desc(), AdminAction.id)
        .offset(page_offset(page, limit))
        .limit(limit)
    )
    actions = (await db.execute(query)).scalars().all()

    entries = [
        AuditEntry(
            id=entry.id,
            action=entry.action,
            performed_by=Performer.model_validate(entry.admin),
            target_type=entry.target_type,
            target_id=entry.target_id,
            details=entry.details,
            ip_address=entry.ip_address,
            created_at=entry.created_at,
        )
        for entry in actions
    ]
    return paginate(entries, page, limit, total)

"""
Admin Audit Trail

Records administrative actions in the admin_actions table. The audit row
is written in a savepoint, so a failed audit insert is logged rather than
raised and leaves the audited change intact.
"""

from typing import Optional
from uuid import UUID

from fastapi import Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from bloghub.database.models import AdminAction

logger = structlog.get_logger(__name__)


async def log_admin_action(
    db: AsyncSession,
    admin_id: UUID,
    action: str,
    target_type: Optional[str] = None,
    target_id: Optional[str] = None,
    details: Optional[str] = None,
    request: Optional[Request] = None,
) -> Optional[AdminAction]:
    """
    Append an entry to the audit log within the caller's session.

    Args:
        db: Session of the audited request
        admin_id: Acting administrator
        action: Action code, e.g. USER_SUSPENDED
        target_type: USER, BLOG, REPORT, SETTING, ...
        target_id: Identifier of the affected entity
        details: Free-form description
        request: Source of the client IP address
    """
    ip_address = request.client.host if request is not None and request.client else None
    entry = AdminAction(
        admin_id=admin_id,
        action=action,
        target_type=target_type,
        target_id=str(target_id) if target_id is not None else None,
        details=details,
        ip_address=ip_address,
    )

    # Errors from the audited change itself propagate to the caller
    await db.flush()

    try:
        async with db.begin_nested():
            db.add(entry)
    except SQLAlchemyError as e:
        logger.error("Failed to log admin action", action=action, error=str(e))
        return None

    logger.info(
        "Admin action recorded",
        action=action,
        admin_id=str(admin_id),
        target_type=target_type,
        target_id=entry.target_id,
    )
    return entry

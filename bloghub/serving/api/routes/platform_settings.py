"""
Platform Settings Endpoints

Key/value configuration edited from the admin console. Values are stored as
text; anything that is not a string is JSON encoded on write and decoded on
read.
"""

import json
from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import Field
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from bloghub.analytics.schemas import CamelModel
from bloghub.database.connection import get_db_dependency
from bloghub.database.models import PlatformSetting, User, utcnow
from bloghub.serving.api.audit import log_admin_action
from bloghub.serving.api.dependencies import get_current_actor

router = APIRouter()
logger = structlog.get_logger(__name__)


class SettingRecord(CamelModel):
    id: UUID
    key: str
    value: str
    description: Optional[str] = None
    updated_at: Optional[datetime] = None


class SettingsResponse(CamelModel):
    settings: Dict[str, Any]
    raw_settings: List[SettingRecord]


class SettingUpdate(CamelModel):
    key: str = Field(min_length=1, max_length=100)
    value: Any
    description: Optional[str] = None


class SettingActionResponse(CamelModel):
    setting: SettingRecord
    message: str


class MessageResponse(CamelModel):
    message: str


def encode_setting(value: Any) -> str:
    """Strings are stored verbatim, everything else as JSON."""
    return value if isinstance(value, str) else json.dumps(value)


def decode_setting(raw: str) -> Any:
    """JSON-decode a stored value, falling back to the raw string."""
    try:
        return json.loads(raw)
    except ValueError:
        return raw


@router.get("", response_model=SettingsResponse)
async def get_platform_settings(
    db: AsyncSession = Depends(get_db_dependency),
) -> SettingsResponse:
    """All settings as a decoded map plus the stored rows."""
    rows = (await db.execute(select(PlatformSetting).order_by(PlatformSetting.key))).scalars().all()
    return SettingsResponse(
        settings={row.key: decode_setting(row.value) for row in rows},
        raw_settings=[SettingRecord.model_validate(row) for row in rows],
    )


@router.put("", response_model=SettingActionResponse)
async def update_platform_setting(
    body: SettingUpdate,
    request: Request,
    actor: User = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db_dependency),
) -> SettingActionResponse:
    """Create or replace a setting."""
    value = encode_setting(body.value)

    setting = (await db.execute(
        select(PlatformSetting).where(PlatformSetting.key == body.key)
    )).scalar_one_or_none()
    if setting is None:
        setting = PlatformSetting(key=body.key)
        db.add(setting)
    setting.value = value
    setting.description = body.description
    setting.updated_at = utcnow()
    await db.flush()

    await log_admin_action(
        db, actor.id, "SETTINGS_UPDATED", "SETTING", setting.id,
        f"Updated {body.key} to {value}", request,
    )
    logger.info("Platform setting updated", key=body.key)
    return SettingActionResponse(setting=SettingRecord.model_validate(setting), message="Setting updated successfully")


@router.delete("/{key}", response_model=MessageResponse)
async def delete_platform_setting(
    key: str,
    request: Request,
    actor: User = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db_dependency),
) -> MessageResponse:
    """Remove a setting."""
    setting = (await db.execute(
        select(PlatformSetting).where(PlatformSetting.key == key)
    )).scalar_one_or_none()
    if setting is None:
        raise HTTPException(status_code=404, detail="Setting not found")

    await db.delete(setting)
    await log_admin_action(db, actor.id, "SETTING_DELETED", "SETTING", key, f"Deleted setting: {key}", request)
    return MessageResponse(message="Setting deleted successfully")

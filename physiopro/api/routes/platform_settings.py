"""The platform-wide settings document."""

from fastapi import APIRouter, Depends, HTTPException
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from physiopro.api.audit import audit
from physiopro.api.dependencies import require_admin
from physiopro.core.database import get_db
from physiopro.core.models import User
from physiopro.core.repository import SettingsRepository
from physiopro.core.schemas import PlatformSettings, PlatformSettingsUpdate

router = APIRouter(prefix="/settings")


@router.get("", response_model=PlatformSettings)
async def read_settings(
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> PlatformSettings:
    return PlatformSettings(**await SettingsRepository(db).get())


@router.patch("", response_model=PlatformSettings)
async def update_settings(
    data: PlatformSettingsUpdate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> PlatformSettings:
    """Merge the provided fields into the stored document."""
    changes = data.model_dump(exclude_unset=True)
    try:
        merged = PlatformSettings(**{**await SettingsRepository(db).get(), **changes})
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.errors(include_url=False, include_context=False))
    await SettingsRepository(db).update(merged.model_dump(include=set(changes)))
    await audit(db, admin, "Updated System Settings", "SystemSettings", SettingsRepository.RECORD_ID,
                {"fields": sorted(changes)})
    return merged

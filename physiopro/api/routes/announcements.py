"""Platform announcements."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from physiopro.api.audit import audit
from physiopro.api.dependencies import get_current_user, require_admin
from physiopro.core.database import get_db
from physiopro.core.models import User, new_id
from physiopro.core.repository import AnnouncementRepository
from physiopro.core.roles import is_internal_admin, is_patient
from physiopro.core.schemas import AnnouncementCreate, AnnouncementRead, AnnouncementUpdate

router = APIRouter(prefix="/announcements")


def audiences_for(user: User) -> list[str]:
    return ["all", "patients" if is_patient(user.role) else "clinicians"]


@router.get("", response_model=list[AnnouncementRead])
async def list_announcements(
    status: Optional[str] = Query(None),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Admins see everything; readers see what is published for them."""
    repo = AnnouncementRepository(db)
    if is_internal_admin(current_user.role):
        return await repo.list(status=status)
    return await repo.list(status="published", audiences=audiences_for(current_user))


@router.post("", response_model=AnnouncementRead, status_code=201)
async def create_announcement(
    data: AnnouncementCreate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    announcement = await AnnouncementRepository(db).create(
        id=new_id("anno"),
        created_at=datetime.now(timezone.utc),
        **data.model_dump(),
    )
    await audit(db, admin, "Created Announcement", "Announcement", announcement.id, {"title": announcement.title})
    return announcement


@router.put("/{announcement_id}", response_model=AnnouncementRead)
async def upsert_announcement(
    announcement_id: str,
    data: AnnouncementUpdate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    repo = AnnouncementRepository(db)
    changes = data.model_dump(exclude_unset=True)
    if not await repo.get_by_id(announcement_id) and not (data.title and data.content):
        raise HTTPException(status_code=422, detail="Title and content cannot be empty.")

    announcement, created = await repo.upsert(announcement_id, **changes)
    action = "Created Announcement" if created else "Updated Announcement"
    await audit(db, admin, action, "Announcement", announcement_id, {"title": announcement.title})
    return announcement


@router.delete("/{announcement_id}", status_code=204)
async def delete_announcement(
    announcement_id: str,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> None:
    if not await AnnouncementRepository(db).delete(announcement_id):
        raise HTTPException(status_code=404, detail="Announcement not found")
    await audit(db, admin, "Deleted Announcement", "Announcement", announcement_id)

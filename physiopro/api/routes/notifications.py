"""In-app notification inbox of the signed-in user."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from physiopro.api.dependencies import get_current_user
from physiopro.api.notify import inbox_of, notifications
from physiopro.core.database import get_db
from physiopro.core.models import User
from physiopro.core.schemas import NotificationRead

router = APIRouter(prefix="/notifications")


@router.get("", response_model=list[NotificationRead])
async def list_notifications(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Newest first, capped per recipient."""
    return await notifications(db).list(*inbox_of(current_user))


@router.post("/read-all")
async def mark_all_read(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> dict:
    updated = await notifications(db).mark_all_read(*inbox_of(current_user))
    return {"updated": updated}


@router.post("/{notification_id}/read", response_model=NotificationRead)
async def mark_read(
    notification_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    notification = await notifications(db).mark_read(notification_id, *inbox_of(current_user))
    if not notification:
        raise HTTPException(status_code=404, detail="Notification not found")
    return notification

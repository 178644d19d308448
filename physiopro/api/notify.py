"""In-app notification helpers for the three audiences."""

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from physiopro.config import get_settings
from physiopro.core.models import Notification, Patient, User
from physiopro.core.repository import NotificationRepository
from physiopro.core.roles import ADMIN_NOTIFICATION_USER, is_internal_admin, is_patient


def notifications(db: AsyncSession) -> NotificationRepository:
    return NotificationRepository(db, cap=get_settings().max_notifications_per_list)


def inbox_of(user: User) -> tuple[str, str]:
    """(audience, user_id) of a user's inbox; internal admins share one."""
    if is_internal_admin(user.role):
        return "admin", ADMIN_NOTIFICATION_USER
    if is_patient(user.role):
        return "patient", user.id
    return "clinician", user.id


async def notify_admins(
    db: AsyncSession,
    title: str,
    description: str,
    notification_type: str = "info",
    link: Optional[str] = None,
) -> Notification:
    return await notifications(db).push(
        "admin", ADMIN_NOTIFICATION_USER, title, description, notification_type, link
    )


async def notify_clinician(
    db: AsyncSession,
    clinician_id: str,
    title: str,
    description: str,
    notification_type: str = "info",
    link: Optional[str] = None,
) -> Notification:
    return await notifications(db).push("clinician", clinician_id, title, description, notification_type, link)


async def notify_patient(
    db: AsyncSession,
    patient: Patient,
    title: str,
    description: str,
    notification_type: str = "info",
    link: Optional[str] = None,
) -> Optional[Notification]:
    """Patients without a portal account have no inbox; nothing is stored."""
    if not patient.user_id:
        return None
    return await notifications(db).push("patient", patient.user_id, title, description, notification_type, link)

"""Clinician and patient direct messages.

Clinicians are addressed by their user id, patients by their patient record
id, so the same thread is visible from both sides.
"""

from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from physiopro.api.dependencies import get_current_user
from physiopro.core.database import get_db
from physiopro.core.models import Patient, User, new_id
from physiopro.core.repository import MessageRepository, PatientRepository, SettingsRepository, UserRepository
from physiopro.core.roles import is_clinician, is_patient
from physiopro.core.schemas import ConversationSummary, MessageCreate, MessageRead

router = APIRouter(prefix="/messages")

PREVIEW_LENGTH = 30


def preview(content: str) -> str:
    if len(content) > PREVIEW_LENGTH:
        return content[:PREVIEW_LENGTH] + "..."
    return content


async def _participant_id(db: AsyncSession, user: User) -> str:
    if is_clinician(user.role):
        return user.id
    if is_patient(user.role):
        patient = await PatientRepository(db).get_by_user_id(user.id)
        if not patient:
            raise HTTPException(status_code=404, detail="Patient record not found")
        return patient.id
    raise HTTPException(status_code=403, detail="Messaging is for clinicians and patients")


async def _counterpart_name(db: AsyncSession, user: User, counterpart_id: str) -> str | None:
    """Name of someone the user is allowed to message, else None."""
    if is_clinician(user.role):
        patient = await db.get(Patient, counterpart_id)
        if patient and patient.assigned_clinician_id == user.id:
            return patient.name
        return None
    patient = await PatientRepository(db).get_by_user_id(user.id)
    if patient and patient.assigned_clinician_id == counterpart_id:
        clinician = await UserRepository(db).get_by_id(counterpart_id)
        return clinician.name if clinician else None
    return None


@router.get("/conversations", response_model=list[ConversationSummary])
async def list_conversations(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> list[ConversationSummary]:
    me = await _participant_id(db, current_user)
    messages = await MessageRepository(db).list_involving(me)

    threads: dict[str, list] = {}
    for message in messages:
        other = message.receiver_id if message.sender_id == me else message.sender_id
        threads.setdefault(other, []).append(message)

    summaries = []
    for other, thread in threads.items():
        name = await _counterpart_name(db, current_user, other)
        if name is None:
            continue
        last = thread[-1]
        summaries.append(ConversationSummary(
            counterpart_id=other,
            counterpart_name=name,
            last_message=preview(last.content),
            last_message_time=last.timestamp,
            unread_count=sum(1 for m in thread if m.receiver_id == me and not m.is_read),
        ))
    summaries.sort(key=lambda s: s.last_message_time.replace(tzinfo=None), reverse=True)
    return summaries


@router.get("/{counterpart_id}", response_model=list[MessageRead])
async def read_thread(
    counterpart_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Full thread, oldest first; incoming messages are marked read."""
    me = await _participant_id(db, current_user)
    if await _counterpart_name(db, current_user, counterpart_id) is None:
        raise HTTPException(status_code=404, detail="Conversation not found")
    repo = MessageRepository(db)
    await repo.mark_thread_read(me, counterpart_id)
    return await repo.thread(me, counterpart_id)


@router.post("", response_model=MessageRead, status_code=201)
async def send_message(
    data: MessageCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    me = await _participant_id(db, current_user)
    if is_patient(current_user.role):
        settings = await SettingsRepository(db).get()
        if not settings.get("enable_patient_messaging", True):
            raise HTTPException(status_code=403, detail="Patient messaging is disabled")
    if await _counterpart_name(db, current_user, data.receiver_id) is None:
        raise HTTPException(status_code=404, detail="Recipient not found")

    return await MessageRepository(db).create(
        id=new_id("msg"),
        sender_id=me,
        sender_name=current_user.name,
        receiver_id=data.receiver_id,
        content=data.content,
        attachment_url=data.attachment_url,
        is_read=False,
        timestamp=datetime.now(timezone.utc),
    )

"""Clinician calendar."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from physiopro.api.dependencies import require_clinician
from physiopro.api.notify import notify_patient
from physiopro.api.routes.patients import get_owned_patient
from physiopro.core.database import get_db
from physiopro.core.models import Appointment, User, new_id
from physiopro.core.repository import AppointmentRepository
from physiopro.core.schemas import AppointmentCreate, AppointmentRead, AppointmentUpdate

router = APIRouter(prefix="/appointments")


def _as_utc_naive(value: datetime) -> datetime:
    """SQLite hands back naive UTC datetimes; compare on that footing."""
    if value.tzinfo:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


async def _get_owned(repo: AppointmentRepository, appointment_id: str, clinician: User) -> Appointment:
    appointment = await repo.get_by_id(appointment_id)
    if not appointment or appointment.clinician_id != clinician.id:
        raise HTTPException(status_code=404, detail="Appointment not found")
    return appointment


@router.get("", response_model=list[AppointmentRead])
async def list_appointments(
    status: Optional[str] = Query(None),
    clinician: User = Depends(require_clinician),
    db: AsyncSession = Depends(get_db),
):
    return await AppointmentRepository(db).list_for_clinician(clinician.id, status=status)


@router.post("", response_model=AppointmentRead, status_code=201)
async def create_appointment(
    data: AppointmentCreate,
    clinician: User = Depends(require_clinician),
    db: AsyncSession = Depends(get_db),
):
    patient = await get_owned_patient(db, data.patient_id, clinician)
    fields = data.model_dump()
    fields["title"] = data.title or f"{data.appointment_type or 'Appointment'} with {patient.name}"
    appointment = await AppointmentRepository(db).create(
        id=new_id("apt"),
        clinician_id=clinician.id,
        status="scheduled",
        **fields,
    )
    clinician.appointment_count = (clinician.appointment_count or 0) + 1
    await db.flush()
    await notify_patient(
        db, patient,
        "Appointment Scheduled",
        f"{appointment.title} on {appointment.start:%Y-%m-%d %H:%M}.",
        "info",
        "/patient/appointments",
    )
    return appointment


@router.put("/{appointment_id}", response_model=AppointmentRead)
async def update_appointment(
    appointment_id: str,
    data: AppointmentUpdate,
    clinician: User = Depends(require_clinician),
    db: AsyncSession = Depends(get_db),
):
    """Merge the provided fields into the appointment."""
    repo = AppointmentRepository(db)
    appointment = await _get_owned(repo, appointment_id, clinician)
    changes = data.model_dump(exclude_unset=True)
    start = changes.get("start", appointment.start)
    end = changes.get("end", appointment.end)
    if _as_utc_naive(end) <= _as_utc_naive(start):
        raise HTTPException(status_code=422, detail="End time must be after start time")
    await repo.update(appointment_id, **changes)
    return appointment


@router.delete("/{appointment_id}", status_code=204)
async def delete_appointment(
    appointment_id: str,
    clinician: User = Depends(require_clinician),
    db: AsyncSession = Depends(get_db),
) -> None:
    repo = AppointmentRepository(db)
    await _get_owned(repo, appointment_id, clinician)
    await repo.delete(appointment_id)

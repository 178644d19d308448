"""Clinician patient roster."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from physiopro.api.dependencies import require_clinician
from physiopro.api.notify import notify_clinician
from physiopro.core.database import get_db
from physiopro.core.models import Patient, User, new_id
from physiopro.core.repository import PatientRepository, ProgramRepository
from physiopro.core.schemas import PatientCreate, PatientRead, PatientUpdate, ProgramListItem

router = APIRouter(prefix="/patients")


async def get_owned_patient(db: AsyncSession, patient_id: str, clinician: User) -> Patient:
    """Load a patient on the clinician's caseload, else 404."""
    patient = await PatientRepository(db).get_by_id(patient_id)
    if not patient or patient.assigned_clinician_id != clinician.id:
        raise HTTPException(status_code=404, detail="Patient not found")
    return patient


@router.get("", response_model=list[PatientRead])
async def list_patients(
    search: Optional[str] = Query(None),
    clinician: User = Depends(require_clinician),
    db: AsyncSession = Depends(get_db),
):
    return await PatientRepository(db).list_for_clinician(clinician.id, search=search)


@router.get("/{patient_id}", response_model=PatientRead)
async def get_patient(
    patient_id: str,
    clinician: User = Depends(require_clinician),
    db: AsyncSession = Depends(get_db),
):
    return await get_owned_patient(db, patient_id, clinician)


@router.get("/{patient_id}/programs", response_model=list[ProgramListItem])
async def list_patient_programs(
    patient_id: str,
    clinician: User = Depends(require_clinician),
    db: AsyncSession = Depends(get_db),
) -> list[ProgramListItem]:
    patient = await get_owned_patient(db, patient_id, clinician)
    rows = await ProgramRepository(db).list_for_clinician(clinician.id)
    return [
        ProgramListItem.model_validate(program).model_copy(update={"patient_name": name})
        for program, name in rows
        if program.patient_id == patient.id
    ]


@router.post("", response_model=PatientRead, status_code=201)
async def create_patient(
    data: PatientCreate,
    clinician: User = Depends(require_clinician),
    db: AsyncSession = Depends(get_db),
):
    patient = await PatientRepository(db).create(
        id=new_id("p"),
        assigned_clinician_id=clinician.id,
        last_activity=datetime.now(timezone.utc),
        overall_adherence=0,
        **data.model_dump(),
    )
    clinician.patient_count = (clinician.patient_count or 0) + 1
    await db.flush()
    await notify_clinician(
        db, clinician.id,
        "New Patient Added",
        f"{patient.name} has been added to your patient roster.",
        "info",
        f"/clinician/patients/{patient.id}",
    )
    return patient


@router.put("/{patient_id}", response_model=PatientRead)
async def update_patient(
    patient_id: str,
    data: PatientUpdate,
    clinician: User = Depends(require_clinician),
    db: AsyncSession = Depends(get_db),
):
    await get_owned_patient(db, patient_id, clinician)
    return await PatientRepository(db).update(patient_id, **data.model_dump(exclude_unset=True))


@router.delete("/{patient_id}", status_code=204)
async def delete_patient(
    patient_id: str,
    clinician: User = Depends(require_clinician),
    db: AsyncSession = Depends(get_db),
) -> None:
    await get_owned_patient(db, patient_id, clinician)
    await PatientRepository(db).delete(patient_id)
    clinician.patient_count = max((clinician.patient_count or 0) - 1, 0)
    await db.flush()

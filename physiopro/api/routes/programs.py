"""Clinician exercise programs: build, assign and review patient feedback."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from physiopro.api.dependencies import require_clinician
from physiopro.api.notify import notify_patient
from physiopro.api.routes.patients import get_owned_patient
from physiopro.api.routes.program_templates import get_template
from physiopro.core.database import get_db
from physiopro.core.models import Patient, Program, User, new_id
from physiopro.core.repository import ExerciseRepository, ProgramRepository, SettingsRepository
from physiopro.core.schemas import ProgramCreate, ProgramListItem, ProgramRead, ProgramUpdate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/programs")


async def _get_owned_program(repo: ProgramRepository, program_id: str, clinician: User) -> Program:
    program = await repo.get_by_id(program_id)
    if not program or program.is_template or program.clinician_id != clinician.id:
        raise HTTPException(status_code=404, detail="Program not found")
    return program


def _fresh_steps(steps: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Copy template steps without any recorded feedback."""
    return [{**step, "feedback_history": []} for step in steps]


async def _assign(db: AsyncSession, program: Program, patient: Patient, updated: bool) -> None:
    """Make ``program`` the patient's current program and tell the patient."""
    patient.current_program_id = program.id
    if not program.assigned_date:
        program.assigned_date = date.today()
    await db.flush()

    settings = await SettingsRepository(db).get()
    if settings.get("notify_patient_on_program_assignment", True):
        verb = "updated" if updated else "assigned"
        await notify_patient(
            db, patient,
            f"Program {verb.capitalize()}: {program.name}",
            f'Your clinician has {verb} your exercise program. Check "My Program" in your portal.',
            "success",
            "/patient/program",
        )


async def _release(db: AsyncSession, program: Program, patient_id: Optional[str]) -> None:
    """Drop ``program`` as the current program of ``patient_id`` if it still is."""
    if not patient_id:
        return
    patient = await db.get(Patient, patient_id)
    if patient and patient.current_program_id == program.id:
        patient.current_program_id = None
        await db.flush()


@router.get("", response_model=list[ProgramListItem])
async def list_programs(
    search: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    clinician: User = Depends(require_clinician),
    db: AsyncSession = Depends(get_db),
) -> list[ProgramListItem]:
    rows = await ProgramRepository(db).list_for_clinician(clinician.id, search=search, status=status)
    return [
        ProgramListItem.model_validate(program).model_copy(update={"patient_name": name})
        for program, name in rows
    ]


@router.get("/{program_id}", response_model=ProgramRead)
async def get_program(
    program_id: str,
    clinician: User = Depends(require_clinician),
    db: AsyncSession = Depends(get_db),
):
    return await _get_owned_program(ProgramRepository(db), program_id, clinician)


@router.post("", response_model=ProgramRead, status_code=201)
async def create_program(
    data: ProgramCreate,
    clinician: User = Depends(require_clinician),
    db: AsyncSession = Depends(get_db),
):
    repo = ProgramRepository(db)
    patient = await get_owned_patient(db, data.patient_id, clinician) if data.patient_id else None

    fields = data.model_dump(mode="json", exclude={"template_id"})
    if data.template_id:
        template = await get_template(repo, data.template_id)
        if not data.exercises:
            fields["exercises"] = _fresh_steps(template.exercises or [])
        fields["description"] = data.description or template.description
        fields["category"] = data.category or template.category

    exercise_ids = [step["exercise_id"] for step in fields["exercises"]]
    known = await ExerciseRepository(db).get_many(exercise_ids)
    missing = [eid for eid in exercise_ids if eid not in known]
    if missing:
        raise HTTPException(status_code=422, detail=f"Unknown exercises: {', '.join(missing)}")

    program = await repo.create(id=new_id("prog"), clinician_id=clinician.id, is_template=False, **fields)
    if patient and program.status == "active":
        await _assign(db, program, patient, updated=False)
    logger.info(f"Program {program.id} created by {clinician.id}")
    return program


@router.put("/{program_id}", response_model=ProgramRead)
async def update_program(
    program_id: str,
    data: ProgramUpdate,
    clinician: User = Depends(require_clinician),
    db: AsyncSession = Depends(get_db),
):
    repo = ProgramRepository(db)
    program = await _get_owned_program(repo, program_id, clinician)
    changes = data.model_dump(mode="json", exclude_unset=True)
    if data.completion_date is not None:
        changes["completion_date"] = data.completion_date
    if data.patient_id:
        await get_owned_patient(db, data.patient_id, clinician)
    previous_patient_id = program.patient_id

    await repo.update(program_id, **changes)

    if previous_patient_id != program.patient_id or program.status != "active":
        await _release(db, program, previous_patient_id)

    if program.status == "active" and program.patient_id:
        patient = await get_owned_patient(db, program.patient_id, clinician)
        await _assign(db, program, patient, updated=patient.current_program_id == program.id)
    return program


@router.delete("/{program_id}", status_code=204)
async def delete_program(
    program_id: str,
    clinician: User = Depends(require_clinician),
    db: AsyncSession = Depends(get_db),
) -> None:
    repo = ProgramRepository(db)
    program = await _get_owned_program(repo, program_id, clinician)
    await _release(db, program, program.patient_id)
    await repo.delete(program_id)


@router.post("/{program_id}/exercises/{exercise_id}/acknowledge", response_model=ProgramRead)
async def acknowledge_feedback(
    program_id: str,
    exercise_id: str,
    clinician: User = Depends(require_clinician),
    db: AsyncSession = Depends(get_db),
):
    """Mark every feedback entry on one program exercise as reviewed."""
    repo = ProgramRepository(db)
    program = await _get_owned_program(repo, program_id, clinician)

    steps = [dict(step) for step in program.exercises or []]
    target = next((step for step in steps if step.get("exercise_id") == exercise_id), None)
    if target is None:
        raise HTTPException(status_code=404, detail="Exercise not in program")
    target["feedback_history"] = [
        {**entry, "acknowledged_by_clinician": True} for entry in target.get("feedback_history") or []
    ]
    program.exercises = steps
    await db.flush()

    if program.patient_id:
        patient = await db.get(Patient, program.patient_id)
        exercise = await ExerciseRepository(db).get_by_id(exercise_id)
        if patient:
            name = exercise.name if exercise else "Unknown Exercise"
            await notify_patient(
                db, patient,
                "Feedback Reviewed",
                f'Your clinician has reviewed your feedback for "{name}".',
                "info",
                "/patient/program",
            )
    return program

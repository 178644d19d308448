"""Patient portal: today's program, feedback, progress and appointments."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from physiopro.api.dependencies import get_current_patient, get_llm_router
from physiopro.api.notify import notify_clinician
from physiopro.core.database import get_db
from physiopro.core.models import Patient, Program, new_id
from physiopro.core.progress import adherence_rate, build_progress, is_completed, latest_pain_level
from physiopro.core.repository import (
    AppointmentRepository,
    ExerciseRepository,
    ProgramRepository,
    SettingsRepository,
)
from physiopro.core.schemas import (
    AppointmentRead,
    AppointmentRequest,
    ExerciseFeedbackSubmit,
    ExerciseRead,
    FeedbackEntry,
    MotivationRead,
    PatientProgress,
    PortalExercise,
    PortalProgram,
)
from physiopro.flows import (
    DEFAULT_SUGGESTION,
    FeedbackValidationFlow,
    FeedbackValidationInput,
    MotivationInput,
    PatientMotivatorFlow,
    fallback_message,
)
from physiopro.llm import LLMError, LLMRouter

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/me")

PAIN_WARNING_THRESHOLD = 6


async def _current_program(db: AsyncSession, patient: Patient) -> Optional[Program]:
    if not patient.current_program_id:
        return None
    program = await ProgramRepository(db).get_by_id(patient.current_program_id)
    if not program or program.patient_id != patient.id:
        return None
    return program


async def _require_program(db: AsyncSession, patient: Patient) -> Program:
    program = await _current_program(db, patient)
    if not program:
        raise HTTPException(status_code=404, detail="No program assigned")
    return program


def first_name(name: str) -> str:
    return name.split()[0] if name.strip() else name


def feedback_notification(exercise_name: str, patient: Patient, feedback: ExerciseFeedbackSubmit) -> dict:
    """Title, description, type and link of the clinician's feedback alert."""
    return {
        "title": f'Feedback on "{exercise_name}"',
        "description": (
            f"Patient {patient.name} reported pain: {feedback.pain_level}/10. "
            f'Comment: "{feedback.comments[:30]}..."'
        ),
        "notification_type": "warning" if feedback.pain_level > PAIN_WARNING_THRESHOLD else "info",
        "link": f"/clinician/patients/{patient.id}?tab=programs",
    }


@router.get("/program", response_model=PortalProgram)
async def my_program(
    patient: Patient = Depends(get_current_patient),
    db: AsyncSession = Depends(get_db),
) -> PortalProgram:
    program = await _require_program(db, patient)
    steps = program.exercises or []
    library = await ExerciseRepository(db).get_many([step["exercise_id"] for step in steps])

    exercises = []
    for step in steps:
        exercise = library.get(step["exercise_id"])
        exercises.append(PortalExercise.model_validate({
            **step,
            "exercise": ExerciseRead.model_validate(exercise) if exercise else None,
            "completed": is_completed(step),
        }))

    return PortalProgram(
        id=program.id,
        name=program.name,
        description=program.description,
        status=program.status,
        adherence_rate=program.adherence_rate,
        exercises=exercises,
    )


@router.post("/program/exercises/{exercise_id}/feedback", response_model=PortalProgram)
async def submit_feedback(
    exercise_id: str,
    data: ExerciseFeedbackSubmit,
    patient: Patient = Depends(get_current_patient),
    db: AsyncSession = Depends(get_db),
    llm: LLMRouter = Depends(get_llm_router),
) -> PortalProgram:
    """Validate the feedback with the model, then record it against the program."""
    program = await _require_program(db, patient)
    steps = [dict(step) for step in program.exercises or []]
    target = next((step for step in steps if step.get("exercise_id") == exercise_id), None)
    if target is None:
        raise HTTPException(status_code=404, detail="Exercise not in program")

    exercise = await ExerciseRepository(db).get_by_id(exercise_id)
    exercise_name = exercise.name if exercise else "Unknown Exercise"

    verdict = await FeedbackValidationFlow(llm).run(FeedbackValidationInput(
        exercise_name=exercise_name,
        pain_level=data.pain_level,
        comments=data.comments,
    ))
    if not verdict.is_valid:
        raise HTTPException(status_code=422, detail=verdict.suggestions or DEFAULT_SUGGESTION)

    entry = FeedbackEntry(
        timestamp=datetime.now(timezone.utc),
        pain_level=data.pain_level,
        comments=data.comments,
    )
    target["feedback_history"] = [*(target.get("feedback_history") or []), entry.model_dump(mode="json")]
    program.exercises = steps
    program.adherence_rate = adherence_rate(steps)
    patient.overall_adherence = program.adherence_rate
    patient.last_activity = datetime.now(timezone.utc)
    await db.flush()
    logger.info(f"Feedback recorded for patient {patient.id} on {exercise_id}")

    settings = await SettingsRepository(db).get()
    if patient.assigned_clinician_id and settings.get("notify_clinician_on_feedback", True):
        await notify_clinician(
            db, patient.assigned_clinician_id, **feedback_notification(exercise_name, patient, data)
        )

    return await my_program(patient=patient, db=db)


@router.get("/progress", response_model=PatientProgress)
async def my_progress(
    patient: Patient = Depends(get_current_patient),
    db: AsyncSession = Depends(get_db),
) -> PatientProgress:
    program = await _current_program(db, patient)
    steps = program.exercises if program else []
    return PatientProgress(**build_progress(steps or []))


@router.get("/motivation", response_model=MotivationRead)
async def my_motivation(
    patient: Patient = Depends(get_current_patient),
    db: AsyncSession = Depends(get_db),
    llm: LLMRouter = Depends(get_llm_router),
) -> MotivationRead:
    name = first_name(patient.name)
    program = await _current_program(db, patient)
    steps = (program.exercises or []) if program else []
    progress = build_progress(steps)

    upcoming = None
    pending = [step["exercise_id"] for step in steps if not is_completed(step)]
    if pending:
        library = await ExerciseRepository(db).get_many(pending)
        upcoming = next(
            (library[eid].name for eid in pending if eid in library and library[eid].difficulty == "Advanced"),
            None,
        )

    inputs = MotivationInput(
        patient_name=name,
        current_program_name=program.name if program else None,
        current_program_adherence=progress["completion_rate"] if program else None,
        workout_streak=progress["streak"],
        completed_exercises_today=bool(steps) and all(is_completed(step) for step in steps),
        upcoming_difficult_exercise=upcoming,
        recent_feedback_pain_level=latest_pain_level(steps),
    )
    try:
        result = await PatientMotivatorFlow(llm).run(inputs)
    except LLMError as e:
        logger.warning(f"Motivation message unavailable for {patient.id}: {e}")
        return MotivationRead(message=fallback_message(name))
    return MotivationRead(message=result.motivational_message)


@router.get("/appointments", response_model=list[AppointmentRead])
async def my_appointments(
    patient: Patient = Depends(get_current_patient),
    db: AsyncSession = Depends(get_db),
):
    return await AppointmentRepository(db).list_for_patient(patient.id)


@router.post("/appointments", response_model=AppointmentRead, status_code=201)
async def request_appointment(
    data: AppointmentRequest,
    patient: Patient = Depends(get_current_patient),
    db: AsyncSession = Depends(get_db),
):
    """Ask the assigned clinician for a slot; it stays pending until confirmed."""
    settings = await SettingsRepository(db).get()
    if not settings.get("enable_patient_self_scheduling", True):
        raise HTTPException(status_code=403, detail="Self-scheduling is disabled")
    if not patient.assigned_clinician_id:
        raise HTTPException(status_code=400, detail="No clinician assigned")

    appointment = await AppointmentRepository(db).create(
        id=new_id("apt"),
        patient_id=patient.id,
        clinician_id=patient.assigned_clinician_id,
        status="pending",
        title=f"{data.appointment_type or 'Appointment'} request from {patient.name}",
        **data.model_dump(),
    )
    await notify_clinician(
        db, patient.assigned_clinician_id,
        "Appointment Requested",
        f"{patient.name} requested an appointment on {data.start:%Y-%m-%d %H:%M}.",
        "info",
        "/clinician/appointments",
    )
    return appointment



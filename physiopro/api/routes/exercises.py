"""Exercise library: browsing for everyone, moderation and CRUD for admins."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from physiopro.api.audit import audit
from physiopro.api.dependencies import get_current_user, require_admin
from physiopro.api.routes.clinicians import csv_response
from physiopro.core.database import get_db
from physiopro.core.models import User, new_id
from physiopro.core.repository import ExerciseRepository
from physiopro.core.roles import is_internal_admin
from physiopro.core.schemas import (
    EXERCISE_CATEGORIES,
    ExerciseCreate,
    ExerciseRead,
    ExerciseStatusUpdate,
    ExerciseUpdate,
)
from physiopro.export import exercises_csv

router = APIRouter(prefix="/exercises")

STATUS_ACTIONS = {
    "active": "Approved Exercise",
    "rejected": "Rejected Exercise",
    "pending": "Updated Exercise",
}


@router.get("", response_model=list[ExerciseRead])
async def list_exercises(
    search: Optional[str] = Query(None),
    category: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    difficulty: Optional[str] = Query(None),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    if not is_internal_admin(current_user.role):
        status = "active"
    return await ExerciseRepository(db).list(
        search=search, category=category, status=status, difficulty=difficulty
    )


@router.get("/categories")
async def list_categories(current_user: User = Depends(get_current_user)) -> list[str]:
    return list(EXERCISE_CATEGORIES)


@router.get("/export")
async def export_exercises(
    search: Optional[str] = Query(None),
    category: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    difficulty: Optional[str] = Query(None),
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> Response:
    exercises = await ExerciseRepository(db).list(
        search=search, category=category, status=status, difficulty=difficulty
    )
    if not exercises:
        raise HTTPException(status_code=400, detail="No data to export")
    return csv_response(exercises_csv(exercises), "exercises_export.csv")


@router.get("/{exercise_id}", response_model=ExerciseRead)
async def get_exercise(
    exercise_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    exercise = await ExerciseRepository(db).get_by_id(exercise_id)
    if not exercise or (exercise.status != "active" and not is_internal_admin(current_user.role)):
        raise HTTPException(status_code=404, detail="Exercise not found")
    return exercise


@router.post("", response_model=ExerciseRead, status_code=201)
async def create_exercise(
    data: ExerciseCreate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    exercise = await ExerciseRepository(db).create(id=new_id("ex"), **data.model_dump())
    await audit(db, admin, "Created Exercise", "Exercise", exercise.id, {"name": exercise.name})
    return exercise


@router.put("/{exercise_id}", response_model=ExerciseRead)
async def update_exercise(
    exercise_id: str,
    data: ExerciseUpdate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    changes = data.model_dump(exclude_unset=True)
    exercise = await ExerciseRepository(db).update(exercise_id, **changes)
    if not exercise:
        raise HTTPException(status_code=404, detail="Exercise not found")
    await audit(db, admin, "Updated Exercise", "Exercise", exercise_id, {"fields": sorted(changes)})
    return exercise


@router.put("/{exercise_id}/status", response_model=ExerciseRead)
async def set_exercise_status(
    exercise_id: str,
    data: ExerciseStatusUpdate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    exercise = await ExerciseRepository(db).update(exercise_id, status=data.status)
    if not exercise:
        raise HTTPException(status_code=404, detail="Exercise not found")
    await audit(db, admin, STATUS_ACTIONS[data.status], "Exercise", exercise_id, {"status": data.status})
    return exercise


@router.post("/{exercise_id}/featured", response_model=ExerciseRead)
async def toggle_featured(
    exercise_id: str,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    repo = ExerciseRepository(db)
    exercise = await repo.get_by_id(exercise_id)
    if not exercise:
        raise HTTPException(status_code=404, detail="Exercise not found")
    await repo.update(exercise_id, is_featured=not exercise.is_featured)
    await audit(
        db, admin, "Updated Exercise", "Exercise", exercise_id, {"isFeatured": exercise.is_featured}
    )
    return exercise


@router.delete("/{exercise_id}", status_code=204)
async def delete_exercise(
    exercise_id: str,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> None:
    if not await ExerciseRepository(db).delete(exercise_id):
        raise HTTPException(status_code=404, detail="Exercise not found")
    await audit(db, admin, "Deleted Exercise", "Exercise", exercise_id)

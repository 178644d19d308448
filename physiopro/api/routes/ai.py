"""AI assistants: email drafting, exercise search, program building, feedback checks."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from physiopro.api.dependencies import get_current_user, get_llm_router, require_admin, require_clinician
from physiopro.api.rate_limit import SlidingWindowRateLimiter
from physiopro.config import get_settings
from physiopro.core.database import get_db
from physiopro.core.models import User
from physiopro.core.repository import ExerciseRepository, SettingsRepository
from physiopro.core.schemas import ExerciseRead, ProgramExercise
from physiopro.flows import (
    EmailDraftInput,
    EmailDraftOutput,
    EmailGeneratorFlow,
    ExerciseSearchFlow,
    ExerciseSearchInput,
    FeedbackValidationFlow,
    FeedbackValidationInput,
    FeedbackValidationOutput,
    ProgramBuilderFlow,
    ProgramBuilderInput,
    ProgramBuilderOutput,
    format_library,
    parse_params,
)
from physiopro.llm import LLMRouter

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ai")

ai_rate_limiter = SlidingWindowRateLimiter(
    max_requests=get_settings().ai_rate_limit_per_minute,
    window_seconds=60,
)


class ExerciseSearchResponse(BaseModel):
    query: str
    names: list[str]
    exercises: list[ExerciseRead]


class ProgramBuilderResponse(BaseModel):
    suggestion: ProgramBuilderOutput
    exercises: list[ProgramExercise]
    unmatched: list[str]


async def _require_ai_enabled(db: AsyncSession) -> None:
    settings = await SettingsRepository(db).get()
    if not settings.get("enable_ai_suggestions", True):
        raise HTTPException(status_code=403, detail="AI suggestions are disabled")


@router.post("/email-draft", response_model=EmailDraftOutput, dependencies=[Depends(ai_rate_limiter)])
async def draft_email(
    data: EmailDraftInput,
    admin: User = Depends(require_admin),
    llm: LLMRouter = Depends(get_llm_router),
) -> EmailDraftOutput:
    return await EmailGeneratorFlow(llm).run(data)


@router.post("/exercise-search", response_model=ExerciseSearchResponse, dependencies=[Depends(ai_rate_limiter)])
async def search_exercises(
    data: ExerciseSearchInput,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    llm: LLMRouter = Depends(get_llm_router),
) -> ExerciseSearchResponse:
    """Ask the model for exercise names, then keep the ones in the active library."""
    result = await ExerciseSearchFlow(llm).run(data)
    exercises = await ExerciseRepository(db).find_by_names(result.results)
    return ExerciseSearchResponse(
        query=data.query,
        names=result.results,
        exercises=[ExerciseRead.model_validate(e) for e in exercises],
    )


@router.post("/program-builder", response_model=ProgramBuilderResponse, dependencies=[Depends(ai_rate_limiter)])
async def build_program(
    data: ProgramBuilderInput,
    clinician: User = Depends(require_clinician),
    db: AsyncSession = Depends(get_db),
    llm: LLMRouter = Depends(get_llm_router),
) -> ProgramBuilderResponse:
    """Suggest or adjust a program using only exercises from the active library.

    The library sent by the caller is replaced with the server's own list. For
    initial suggestions the returned ``exercises`` are ready to drop into a
    program: names resolved to ids and parameter strings parsed.
    """
    await _require_ai_enabled(db)
    repo = ExerciseRepository(db)
    library = await repo.list(status="active")
    inputs = data.model_copy(update={"exercise_library": format_library([e.name for e in library])})

    suggestion = await ProgramBuilderFlow(llm).run(inputs)

    by_name = {e.name: e for e in library}
    exercises: list[ProgramExercise] = []
    unmatched: list[str] = []
    for index, name in enumerate(suggestion.suggested_exercises):
        exercise = by_name.get(name.strip())
        if not exercise:
            unmatched.append(name)
            continue
        params: Optional[str] = None
        if index < len(suggestion.suggested_parameters):
            params = suggestion.suggested_parameters[index]
        exercises.append(ProgramExercise(exercise_id=exercise.id, **parse_params(params)))

    if unmatched:
        logger.info(f"Program builder suggested {len(unmatched)} exercises outside the library")
    return ProgramBuilderResponse(suggestion=suggestion, exercises=exercises, unmatched=unmatched)


@router.post("/feedback-validate", response_model=FeedbackValidationOutput, dependencies=[Depends(ai_rate_limiter)])
async def validate_feedback(
    data: FeedbackValidationInput,
    current_user: User = Depends(get_current_user),
    llm: LLMRouter = Depends(get_llm_router),
) -> FeedbackValidationOutput:
    return await FeedbackValidationFlow(llm).run(data)

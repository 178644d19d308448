"""Dashboard numbers: platform overview for admins, adherence for clinicians."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from physiopro.api.dependencies import require_admin, require_clinician
from physiopro.api.routes.clinicians import csv_response
from physiopro.core.database import get_db
from physiopro.core.models import User
from physiopro.core.progress import adherence_tier, overall_adherence
from physiopro.core.repository import (
    BillingRepository,
    ExerciseRepository,
    PatientRepository,
    ProgramRepository,
    SupportTicketRepository,
    UserRepository,
)
from physiopro.core.roles import PROFESSIONAL_ROLES
from physiopro.core.schemas import AdherenceRow, AdherenceSummary, AdminOverview
from physiopro.export import adherence_csv

router = APIRouter(prefix="/analytics")


@router.get("/overview", response_model=AdminOverview)
async def admin_overview(
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> AdminOverview:
    by_status = await UserRepository(db).count_by_status(PROFESSIONAL_ROLES)
    exercises = await ExerciseRepository(db).count_by_status()
    return AdminOverview(
        clinicians_by_status=by_status,
        total_clinicians=sum(by_status.values()),
        total_patients=await PatientRepository(db).count(),
        active_exercises=exercises.get("active", 0),
        pending_exercises=exercises.get("pending", 0),
        open_tickets=await SupportTicketRepository(db).count_open(),
        pending_payment_verifications=await BillingRepository(db).count_pending_verifications(),
    )


async def adherence_rows(db: AsyncSession, clinician: User) -> list[AdherenceRow]:
    patients = await PatientRepository(db).list_for_clinician(clinician.id)
    programs = ProgramRepository(db)
    rows = []
    for patient in patients:
        program = await programs.get_by_id(patient.current_program_id) if patient.current_program_id else None
        rows.append(AdherenceRow(
            patient_id=patient.id,
            patient_name=patient.name,
            email=patient.email,
            current_program_id=patient.current_program_id,
            current_program_name=program.name if program else None,
            overall_adherence=patient.overall_adherence or 0,
            last_activity=patient.last_activity,
            adherence_status=adherence_tier(patient.overall_adherence or 0),
        ))
    return rows


@router.get("/adherence", response_model=AdherenceSummary)
async def adherence_summary(
    clinician: User = Depends(require_clinician),
    db: AsyncSession = Depends(get_db),
) -> AdherenceSummary:
    rows = await adherence_rows(db, clinician)
    tiers = [row.adherence_status for row in rows]
    return AdherenceSummary(
        overall_adherence=overall_adherence(row.overall_adherence for row in rows),
        high=tiers.count("High"),
        medium=tiers.count("Medium"),
        low=tiers.count("Low"),
        at_risk=[row for row in rows if row.adherence_status == "Low"],
        patients=rows,
    )


@router.get("/adherence/export")
async def export_adherence(
    clinician: User = Depends(require_clinician),
    db: AsyncSession = Depends(get_db),
) -> Response:
    rows = await adherence_rows(db, clinician)
    if not rows:
        raise HTTPException(status_code=400, detail="No data to export")
    return csv_response(adherence_csv(rows), "patient_adherence_report.csv")

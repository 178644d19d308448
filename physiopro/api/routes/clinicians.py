"""Admin management of clinician accounts."""

from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from physiopro.api.audit import audit
from physiopro.api.dependencies import require_admin
from physiopro.api.notify import notify_clinician
from physiopro.core.database import get_db
from physiopro.core.models import User, new_id
from physiopro.core.repository import UserRepository
from physiopro.core.roles import is_professional
from physiopro.core.schemas import (
    BulkStatusRequest,
    ClinicianCreate,
    ClinicianList,
    ClinicianRead,
    ClinicianSort,
    ClinicianUpdate,
    SelectionRequest,
)
from physiopro.export import clinicians_csv

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/clinicians")


def csv_response(content: str, filename: str) -> Response:
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


async def _get_clinician(repo: UserRepository, clinician_id: str) -> User:
    user = await repo.get_by_id(clinician_id)
    if not user or not is_professional(user.role):
        raise HTTPException(status_code=404, detail="Clinician not found")
    return user


@router.get("", response_model=ClinicianList)
async def list_clinicians(
    search: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    subscription_status: Optional[str] = Query(None),
    city: Optional[str] = Query(None),
    sort_by: ClinicianSort = Query("joinedDateDesc"),
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> ClinicianList:
    repo = UserRepository(db)
    items = await repo.list_clinicians(
        search=search,
        status=status,
        subscription_status=subscription_status,
        city=city,
        sort_by=sort_by,
    )
    return ClinicianList(
        items=[ClinicianRead.model_validate(u) for u in items],
        available_cities=await repo.available_cities(),
    )


@router.get("/{clinician_id}", response_model=ClinicianRead)
async def get_clinician(
    clinician_id: str,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> User:
    return await _get_clinician(UserRepository(db), clinician_id)


@router.post("", response_model=ClinicianRead, status_code=201)
async def add_clinician(
    data: ClinicianCreate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> User:
    repo = UserRepository(db)
    if await repo.get_by_email(data.email):
        raise HTTPException(status_code=409, detail="Email already registered")

    fields = data.model_dump()
    fields["subscription_status"] = data.subscription_status or ("active" if data.current_plan_id else "trial")
    fields["city"] = data.city or "Not Specified"
    user = await repo.create(
        id=new_id("doc"),
        joined_date=date.today(),
        patient_count=0,
        appointment_count=0,
        avatar_url=f"https://placehold.co/100x100.png?text={data.name[:2].upper()}",
        **fields,
    )
    await audit(db, admin, "Added Clinician", "User", user.id, {"email": user.email, "role": user.role})
    if user.status in ("active", "pending"):
        await notify_clinician(
            db, user.id,
            "Your PhysioPro Account is Ready!",
            f"Welcome, {user.name}! Your account has been created with {user.status} status.",
            "success",
            "/clinician/dashboard",
        )
    return user


@router.put("/{clinician_id}", response_model=ClinicianRead)
async def update_clinician(
    clinician_id: str,
    data: ClinicianUpdate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Replace fields in place; an unknown id with a full payload creates the record."""
    repo = UserRepository(db)
    existing = await repo.get_by_id(clinician_id)
    if existing and not is_professional(existing.role):
        raise HTTPException(status_code=404, detail="Clinician not found")
    if not existing and not (data.name and data.email and data.role):
        raise HTTPException(status_code=404, detail="Clinician not found")
    if data.email:
        owner = await repo.get_by_email(data.email)
        if owner and owner.id != clinician_id:
            raise HTTPException(status_code=409, detail="Email already registered")

    fields = data.model_dump(exclude_unset=True)
    if not existing:
        fields.setdefault("status", "active")
        fields.setdefault("subscription_status", "active" if data.current_plan_id else "trial")
        fields.setdefault("city", "Not Specified")
    user, created = await repo.upsert(clinician_id, **fields)
    await audit(db, admin, "Added Clinician" if created else "Updated Clinician", "User", user.id, fields)
    return user


@router.post("/{clinician_id}/suspend", response_model=ClinicianRead)
async def suspend_clinician(
    clinician_id: str,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> User:
    repo = UserRepository(db)
    user = await _get_clinician(repo, clinician_id)
    await repo.set_status(user.id, "suspended")
    await audit(db, admin, "Suspended Clinician", "User", user.id, {"name": user.name})
    return user


@router.post("/{clinician_id}/activate", response_model=ClinicianRead)
async def activate_clinician(
    clinician_id: str,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> User:
    repo = UserRepository(db)
    user = await _get_clinician(repo, clinician_id)
    await repo.set_status(user.id, "active")
    await audit(db, admin, "Activated Clinician", "User", user.id, {"name": user.name})
    return user


@router.delete("/{clinician_id}", response_model=ClinicianRead)
async def delete_clinician(
    clinician_id: str,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Soft delete: the account is kept and marked inactive."""
    repo = UserRepository(db)
    user = await _get_clinician(repo, clinician_id)
    await repo.set_status(user.id, "inactive")
    await audit(db, admin, "Deleted Clinician", "User", user.id, {"name": user.name, "email": user.email})
    return user


@router.post("/bulk-status", response_model=list[ClinicianRead])
async def bulk_status(
    body: BulkStatusRequest,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> list[User]:
    repo = UserRepository(db)
    users = await repo.list_clinicians(ids=body.ids)
    for user in users:
        await repo.set_status(user.id, body.status)
    await audit(
        db, admin, "Bulk Status Change", "User", None,
        {"ids": [u.id for u in users], "newStatus": body.status},
    )
    return list(users)


@router.post("/export")
async def export_clinicians(
    body: SelectionRequest,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> Response:
    if not body.ids:
        raise HTTPException(status_code=400, detail="No data to export")
    users = await UserRepository(db).list_clinicians(ids=body.ids)
    if not users:
        raise HTTPException(status_code=400, detail="No data to export")
    logger.info(f"Exporting {len(users)} clinicians for {admin.id}")
    return csv_response(clinicians_csv(users), "selected_clinicians.csv")

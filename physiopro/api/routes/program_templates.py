"""Reusable program templates curated by admins."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from physiopro.api.audit import audit
from physiopro.api.dependencies import get_current_user, require_admin
from physiopro.core.database import get_db
from physiopro.core.models import Program, User, new_id
from physiopro.core.repository import ProgramRepository
from physiopro.core.roles import is_internal_admin
from physiopro.core.schemas import ProgramRead, TemplateCreate, TemplateUpdate
from physiopro.core.seed import SYSTEM_CLINICIAN_ID

router = APIRouter(prefix="/program-templates")


async def get_template(repo: ProgramRepository, template_id: str) -> Program:
    template = await repo.get_by_id(template_id)
    if not template or not template.is_template:
        raise HTTPException(status_code=404, detail="Template not found")
    return template


@router.get("", response_model=list[ProgramRead])
async def list_templates(
    search: Optional[str] = Query(None),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Admins see every template; clinicians only usable ones."""
    usable_only = not is_internal_admin(current_user.role)
    return await ProgramRepository(db).list_templates(usable_only=usable_only, search=search)


@router.get("/{template_id}", response_model=ProgramRead)
async def read_template(
    template_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await get_template(ProgramRepository(db), template_id)


@router.post("", response_model=ProgramRead, status_code=201)
async def create_template(
    data: TemplateCreate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    fields = data.model_dump(mode="json")
    template = await ProgramRepository(db).create(
        id=new_id("tpl"),
        is_template=True,
        clinician_id=SYSTEM_CLINICIAN_ID,
        **fields,
    )
    await audit(db, admin, "Created Program Template", "ProgramTemplate", template.id, {"name": template.name})
    return template


@router.put("/{template_id}", response_model=ProgramRead)
async def update_template(
    template_id: str,
    data: TemplateUpdate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    repo = ProgramRepository(db)
    await get_template(repo, template_id)
    changes = data.model_dump(mode="json", exclude_unset=True)
    template = await repo.update(template_id, **changes)
    await audit(
        db, admin, "Updated Program Template", "ProgramTemplate", template_id, {"fields": sorted(changes)}
    )
    return template


@router.delete("/{template_id}", status_code=204)
async def delete_template(
    template_id: str,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> None:
    repo = ProgramRepository(db)
    template = await get_template(repo, template_id)
    await repo.delete(template.id)
    await audit(db, admin, "Deleted Program Template", "ProgramTemplate", template_id, {"name": template.name})

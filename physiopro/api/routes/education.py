"""Educational resources for patients."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from physiopro.api.audit import audit
from physiopro.api.dependencies import get_current_user, require_admin
from physiopro.core.database import get_db
from physiopro.core.models import User, new_id
from physiopro.core.repository import EducationRepository
from physiopro.core.roles import is_internal_admin
from physiopro.core.schemas import ResourceCreate, ResourceRead, ResourceUpdate

router = APIRouter(prefix="/education")


@router.get("", response_model=list[ResourceRead])
async def list_resources(
    search: Optional[str] = Query(None),
    resource_type: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    if not is_internal_admin(current_user.role):
        status = "published"
    return await EducationRepository(db).list(status=status, resource_type=resource_type, search=search)


@router.get("/{resource_id}", response_model=ResourceRead)
async def get_resource(
    resource_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    resource = await EducationRepository(db).get_by_id(resource_id)
    if not resource or (resource.status != "published" and not is_internal_admin(current_user.role)):
        raise HTTPException(status_code=404, detail="Resource not found")
    return resource


@router.post("", response_model=ResourceRead, status_code=201)
async def create_resource(
    data: ResourceCreate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    resource = await EducationRepository(db).create(id=new_id("edu"), **data.model_dump())
    await audit(db, admin, "Created Educational Resource", "EducationalResource", resource.id,
                {"title": resource.title})
    return resource


@router.put("/{resource_id}", response_model=ResourceRead)
async def update_resource(
    resource_id: str,
    data: ResourceUpdate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    changes = data.model_dump(exclude_unset=True)
    resource = await EducationRepository(db).update(resource_id, **changes)
    if not resource:
        raise HTTPException(status_code=404, detail="Resource not found")
    await audit(db, admin, "Updated Educational Resource", "EducationalResource", resource_id,
                {"fields": sorted(changes)})
    return resource


@router.delete("/{resource_id}", status_code=204)
async def delete_resource(
    resource_id: str,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> None:
    if not await EducationRepository(db).delete(resource_id):
        raise HTTPException(status_code=404, detail="Resource not found")
    await audit(db, admin, "Deleted Educational Resource", "EducationalResource", resource_id)

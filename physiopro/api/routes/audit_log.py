"""Read-only audit trail of admin actions."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from physiopro.api.dependencies import require_admin
from physiopro.core.database import get_db
from physiopro.core.models import User
from physiopro.core.repository import AuditLogRepository
from physiopro.core.schemas import AuditAdminUser, AuditLogFacets, AuditLogRead

router = APIRouter(prefix="/audit-log")


@router.get("", response_model=list[AuditLogRead])
async def list_entries(
    search: Optional[str] = Query(None),
    admin_user_id: Optional[str] = Query(None),
    action: Optional[str] = Query(None),
    limit: int = Query(200, ge=1, le=1000),
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await AuditLogRepository(db).list(
        search=search,
        admin_user_id=admin_user_id,
        action=action,
        limit=limit,
    )


@router.get("/facets", response_model=AuditLogFacets)
async def facets(
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> AuditLogFacets:
    users, actions = await AuditLogRepository(db).facets()
    return AuditLogFacets(
        admin_users=[AuditAdminUser(id=user_id, name=name) for user_id, name in users],
        actions=actions,
    )

"""Internal admin team: invitations, role and status changes."""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from physiopro.api.audit import audit
from physiopro.api.dependencies import require_admin
from physiopro.core.database import get_db
from physiopro.core.models import User, new_id
from physiopro.core.repository import UserRepository
from physiopro.core.roles import is_internal_admin
from physiopro.core.schemas import TeamMemberInvite, TeamMemberRead, TeamMemberUpdate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/team")


async def _get_member(repo: UserRepository, member_id: str) -> User:
    member = await repo.get_by_id(member_id)
    if not member or not is_internal_admin(member.role):
        raise HTTPException(status_code=404, detail="Team member not found")
    return member


def _initials(name: str) -> str:
    return "".join(part[0] for part in name.split() if part) or "P"


@router.get("", response_model=list[TeamMemberRead])
async def list_team(
    search: Optional[str] = Query(None),
    role: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await UserRepository(db).list_team(search=search, role=role, status=status)


@router.get("/{member_id}", response_model=TeamMemberRead)
async def get_member(
    member_id: str,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await _get_member(UserRepository(db), member_id)


@router.post("", response_model=TeamMemberRead, status_code=201)
async def invite_member(
    data: TeamMemberInvite,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    repo = UserRepository(db)
    if await repo.get_by_email(data.email):
        raise HTTPException(status_code=409, detail="Email already registered")

    member = await repo.create(
        id=new_id("tm"),
        name=data.name,
        email=data.email,
        role=data.role,
        status="pending_invitation",
        joined_date=date.today(),
        avatar_url=f"https://placehold.co/100x100.png?text={_initials(data.name)}",
        invited_by_admin_id=admin.id,
        invited_by_admin_name=admin.name,
        last_invitation_sent_at=datetime.now(timezone.utc),
    )
    await audit(
        db, admin, "Invited Team Member", "TeamMember", member.id,
        {"invitedEmail": member.email, "roleAssigned": member.role},
    )
    logger.info(f"Invitation to {member.email} simulated")
    return member


@router.put("/{member_id}", response_model=TeamMemberRead)
async def update_member(
    member_id: str,
    data: TeamMemberUpdate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    repo = UserRepository(db)
    member = await _get_member(repo, member_id)

    changes: dict = {}
    if data.role and data.role != member.role:
        changes.update(oldRole=member.role, newRole=data.role)
    if data.status and data.status != member.status:
        changes.update(oldStatus=member.status, newStatus=data.status)

    await repo.update(member_id, **data.model_dump(exclude_unset=True))
    if changes:
        await audit(
            db, admin, "Updated Team Member", "TeamMember", member_id,
            {"memberName": member.name, **changes},
        )
    return member


@router.delete("/{member_id}", status_code=204)
async def delete_member(
    member_id: str,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> None:
    repo = UserRepository(db)
    member = await _get_member(repo, member_id)
    if member.id == admin.id:
        raise HTTPException(status_code=400, detail="You cannot remove yourself")
    details = {"deletedMemberName": member.name, "deletedMemberEmail": member.email}
    await repo.delete(member_id)
    await audit(db, admin, "Deleted Team Member", "TeamMember", member_id, details)


@router.post("/{member_id}/resend-invitation", response_model=TeamMemberRead)
async def resend_invitation(
    member_id: str,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    repo = UserRepository(db)
    member = await _get_member(repo, member_id)
    await repo.update(member_id, last_invitation_sent_at=datetime.now(timezone.utc))
    await audit(db, admin, "Resent Invitation", "TeamMember", member_id, {"email": member.email})
    return member

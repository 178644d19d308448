"""Support tickets: anyone can open one, admins triage them."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from physiopro.api.audit import audit
from physiopro.api.dependencies import get_current_user, require_admin
from physiopro.api.notify import notify_admins
from physiopro.core.database import get_db
from physiopro.core.models import User, new_id
from physiopro.core.repository import SupportTicketRepository, UserRepository
from physiopro.core.roles import is_internal_admin
from physiopro.core.schemas import TicketAdminUpdate, TicketCreate, TicketRead

router = APIRouter(prefix="/support/tickets")


@router.post("", response_model=TicketRead, status_code=201)
async def open_ticket(
    data: TicketCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    ticket = await SupportTicketRepository(db).create(
        id=new_id("ticket"),
        user_id=current_user.id,
        user_name=current_user.name,
        user_email=current_user.email,
        subject=data.subject,
        description=data.description,
        status="open",
        priority="medium",
        internal_notes=[],
        created_at=datetime.now(timezone.utc),
    )
    await notify_admins(
        db,
        "New Support Ticket",
        f'{current_user.name} opened "{ticket.subject}".',
        "info",
        f"/admin/support?ticket={ticket.id}",
    )
    return ticket


@router.get("", response_model=list[TicketRead])
async def list_tickets(
    search: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    priority: Optional[str] = Query(None),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Admins see every ticket; other users see the ones they opened."""
    user_id = None if is_internal_admin(current_user.role) else current_user.id
    return await SupportTicketRepository(db).list(
        search=search, status=status, priority=priority, user_id=user_id
    )


@router.get("/{ticket_id}", response_model=TicketRead)
async def get_ticket(
    ticket_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    ticket = await SupportTicketRepository(db).get_by_id(ticket_id)
    if not ticket or (not is_internal_admin(current_user.role) and ticket.user_id != current_user.id):
        raise HTTPException(status_code=404, detail="Ticket not found")
    return ticket


@router.put("/{ticket_id}", response_model=TicketRead)
async def update_ticket(
    ticket_id: str,
    data: TicketAdminUpdate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    repo = SupportTicketRepository(db)
    if not await repo.get_by_id(ticket_id):
        raise HTTPException(status_code=404, detail="Ticket not found")

    changes = data.model_dump(exclude_unset=True, exclude={"internal_note"})
    if "assigned_to_admin_id" in changes:
        assignee_id = changes["assigned_to_admin_id"]
        assignee = await UserRepository(db).get_by_id(assignee_id) if assignee_id else None
        if assignee_id and (not assignee or not is_internal_admin(assignee.role)):
            raise HTTPException(status_code=404, detail="Team member not found")
        changes["assigned_to_admin_name"] = assignee.name if assignee else None

    note = None
    if data.internal_note and data.internal_note.strip():
        note = {
            "admin_id": admin.id,
            "admin_name": admin.name,
            "note": data.internal_note.strip(),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    ticket = await repo.update(ticket_id, note=note, **changes)
    await audit(db, admin, "Updated Support Ticket", "SupportTicket", ticket_id, {"fields": sorted(changes)})
    return ticket

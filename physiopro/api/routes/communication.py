"""Admin email composer; delivery is simulated and only logged."""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from physiopro.api.audit import audit
from physiopro.api.dependencies import require_admin
from physiopro.core.database import get_db
from physiopro.core.models import User
from physiopro.core.schemas import EmailSendRequest, EmailSendResult

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/communication")


@router.post("/email", response_model=EmailSendResult)
async def send_email(
    data: EmailSendRequest,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> EmailSendResult:
    recipients = sorted({r.strip() for r in data.recipients if r.strip()})
    logger.info(f"Simulated email '{data.subject}' from {admin.id} to {len(recipients)} recipients")
    await audit(db, admin, "Sent Email", "Email", None,
                {"subject": data.subject, "recipientCount": len(recipients)})
    return EmailSendResult(sent=True, recipient_count=len(recipients))

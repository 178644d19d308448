"""Audit trail helper for admin actions.

Every admin mutation records who did what to which record through
``AuditLogRepository`` inside the request's session.
"""

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from physiopro.core.models import User
from physiopro.core.repository import AuditLogRepository

logger = logging.getLogger(__name__)


async def audit(
    db: AsyncSession,
    admin: User,
    action: str,
    target_entity_type: Optional[str] = None,
    target_entity_id: Optional[str] = None,
    details: Optional[dict] = None,
) -> None:
    """Append an audit entry attributed to ``admin``."""
    await AuditLogRepository(db).add_entry(
        admin_user_id=admin.id,
        admin_user_name=admin.name,
        action=action,
        target_entity_type=target_entity_type,
        target_entity_id=target_entity_id,
        details=details,
    )
    logger.info(f"Audit: {admin.id} {action} {target_entity_type or ''}:{target_entity_id or ''}")

"""FastAPI auth dependencies: cookie JWT + API key dual-auth, role guards."""

from __future__ import annotations

import hmac

from fastapi import Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from physiopro.api.middleware import extract_api_key
from physiopro.config import get_settings
from physiopro.core.auth import ACCESS_COOKIE, decode_token
from physiopro.core.database import get_db
from physiopro.core.models import Patient, User
from physiopro.core.repository import PatientRepository, UserRepository
from physiopro.core.roles import UserStatus, is_clinician, is_internal_admin, is_patient
from physiopro.llm import LLMRouter

BLOCKED_STATUSES = (UserStatus.suspended.value, UserStatus.inactive.value)


async def get_current_user(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> User:
    """Resolve the signed-in account.

    Priority:
    1. physiopro_access cookie -> decode JWT -> load User
    2. API key (Bearer / X-API-Key) + X-User-Id header -> load User
    3. Raise 401
    """
    users = UserRepository(db)

    token = request.cookies.get(ACCESS_COOKIE)
    if token:
        claims = decode_token(token)
        if claims and claims.get("type") == "access" and claims.get("sub"):
            user = await users.get_by_id(claims["sub"])
            if user and user.status not in BLOCKED_STATUSES:
                return user

    settings = get_settings()
    if settings.api_key:
        provided_key = extract_api_key(request)
        if provided_key and hmac.compare_digest(provided_key, settings.api_key):
            user_id = request.headers.get("X-User-Id")
            if not user_id:
                raise HTTPException(status_code=400, detail="X-User-Id header required with an API key")
            user = await users.get_by_id(user_id)
            if user and user.status not in BLOCKED_STATUSES:
                return user

    raise HTTPException(status_code=401, detail="Not authenticated")


async def require_admin(current_user: User = Depends(get_current_user)) -> User:
    if not is_internal_admin(current_user.role):
        raise HTTPException(status_code=403, detail="Admin access required")
    return current_user


async def require_clinician(current_user: User = Depends(get_current_user)) -> User:
    if not is_clinician(current_user.role):
        raise HTTPException(status_code=403, detail="Clinician access required")
    return current_user


async def require_patient(current_user: User = Depends(get_current_user)) -> User:
    if not is_patient(current_user.role):
        raise HTTPException(status_code=403, detail="Patient access required")
    return current_user


async def get_current_patient(
    current_user: User = Depends(require_patient),
    db: AsyncSession = Depends(get_db),
) -> Patient:
    patient = await PatientRepository(db).get_by_user_id(current_user.id)
    if not patient:
        raise HTTPException(status_code=404, detail="Patient record not found")
    return patient


def get_llm_router(request: Request) -> LLMRouter:
    return request.app.state.llm_router

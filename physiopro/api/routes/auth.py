"""Auth routes: login, logout, sign-up for clinicians and patients, password reset."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.ext.asyncio import AsyncSession

from physiopro.api.dependencies import BLOCKED_STATUSES, get_current_user
from physiopro.api.notify import notify_patient
from physiopro.core.auth import (
    clear_auth_cookie,
    create_access_token,
    hash_password,
    set_auth_cookie,
    verify_password,
)
from physiopro.core.database import get_db
from physiopro.core.models import User, new_id
from physiopro.core.repository import PatientRepository, UserRepository
from physiopro.core.roles import PATIENT_ROLE
from physiopro.core.schemas import (
    AccountRead,
    ClinicianSignup,
    ForgotPasswordRequest,
    LoginRequest,
    PatientSignup,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth")

RESET_MESSAGE = "If an account exists for that email, a password reset link has been sent."


def _sign_in(response: Response, user: User) -> None:
    set_auth_cookie(response, create_access_token(user.id, user.role))


@router.post("/login", response_model=AccountRead)
async def login(
    body: LoginRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
) -> User:
    user = await UserRepository(db).get_by_email(body.email)

    if not user or not user.password_hash:
        raise HTTPException(status_code=401, detail="Invalid email or password")

    if not verify_password(body.password, user.password_hash):
        raise HTTPException(status_code=401, detail="Invalid email or password")

    if user.status in BLOCKED_STATUSES:
        raise HTTPException(status_code=403, detail=f"Account is {user.status}")

    user.last_login = datetime.now(timezone.utc)
    await db.flush()

    _sign_in(response, user)
    logger.info(f"User {user.id} signed in as {user.role}")
    return user


@router.post("/logout")
async def logout(response: Response) -> dict:
    clear_auth_cookie(response)
    return {"ok": True}


@router.post("/signup", response_model=AccountRead, status_code=201)
async def clinician_signup(
    body: ClinicianSignup,
    response: Response,
    db: AsyncSession = Depends(get_db),
) -> User:
    """Self-registration for clinicians; new accounts start on a trial."""
    users = UserRepository(db)
    if await users.get_by_email(body.email):
        raise HTTPException(status_code=409, detail="Email already registered")

    user = await users.create(
        id=new_id("doc"),
        name=body.full_name,
        email=body.email,
        role=body.role,
        status="active",
        password_hash=hash_password(body.password),
        subscription_status="trial",
        city="Not Specified",
        avatar_url=f"https://placehold.co/100x100.png?text={body.full_name[:2].upper()}",
    )
    _sign_in(response, user)
    return user


@router.post("/patient-signup", response_model=AccountRead, status_code=201)
async def patient_signup(
    body: PatientSignup,
    response: Response,
    db: AsyncSession = Depends(get_db),
) -> User:
    """Self-registration for patients; creates the account and its patient record."""
    users = UserRepository(db)
    if await users.get_by_email(body.email):
        raise HTTPException(status_code=409, detail="Email already registered")

    user = await users.create(
        id=new_id("usr"),
        name=body.full_name,
        email=body.email,
        role=PATIENT_ROLE,
        status="active",
        password_hash=hash_password(body.password),
        whatsapp_number=body.whatsapp_number,
    )
    patient = await PatientRepository(db).create(
        user_id=user.id,
        name=body.full_name,
        email=body.email,
        whatsapp_number=body.whatsapp_number,
        conditions=[],
        last_activity=datetime.now(timezone.utc),
        overall_adherence=0,
    )
    await notify_patient(
        db, patient,
        "Welcome to PhysioPro!",
        "Your account has been created. You can now access your patient portal.",
        "success",
        "/patient/dashboard",
    )
    _sign_in(response, user)
    return user


@router.get("/me", response_model=AccountRead)
async def me(current_user: User = Depends(get_current_user)) -> User:
    return current_user


@router.post("/forgot-password")
async def forgot_password(
    body: ForgotPasswordRequest,
    db: AsyncSession = Depends(get_db),
) -> dict:
    """Always answers the same way so account existence is not revealed."""
    user = await UserRepository(db).get_by_email(body.email)
    if user:
        logger.info(f"Password reset requested for {user.id}; delivery simulated")
    return {"message": RESET_MESSAGE}

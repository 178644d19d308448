"""Plans, subscriptions, invoices, coupons and manual payment verification."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from physiopro.api.audit import audit
from physiopro.api.dependencies import get_current_user, require_admin, require_clinician
from physiopro.api.notify import notify_admins, notify_clinician
from physiopro.core.database import get_db
from physiopro.core.models import User, new_id
from physiopro.core.repository import BillingRepository
from physiopro.core.roles import is_internal_admin
from physiopro.core.schemas import (
    CouponRead,
    CouponUpsert,
    InvoiceRead,
    PaymentSubmission,
    PaymentVerificationRead,
    PlanRead,
    PlanUpdate,
    SubscriptionRead,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/billing")


# --- Plans ---

@router.get("/plans", response_model=list[PlanRead])
async def list_plans(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Admins see every plan, everyone else only the ones on offer."""
    return await BillingRepository(db).list_plans(active_only=not is_internal_admin(current_user.role))


@router.put("/plans/{plan_id}", response_model=PlanRead)
async def update_plan(
    plan_id: str,
    data: PlanUpdate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    changes = data.model_dump(exclude_unset=True)
    plan = await BillingRepository(db).update_plan(plan_id, **changes)
    if not plan:
        raise HTTPException(status_code=404, detail="Plan not found")
    await audit(db, admin, "Updated Billing Plan", "Plan", plan_id, {"fields": sorted(changes)})
    return plan


# --- Subscriptions & invoices ---

@router.get("/subscriptions", response_model=list[SubscriptionRead])
async def list_subscriptions(
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await BillingRepository(db).list_subscriptions()


@router.get("/invoices", response_model=list[InvoiceRead])
async def list_invoices(
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await BillingRepository(db).list_invoices()


# --- Coupons ---

async def _save_coupon(
    db: AsyncSession,
    admin: User,
    coupon_id: Optional[str],
    data: CouponUpsert,
):
    repo = BillingRepository(db)
    clash = await repo.get_coupon_by_code(data.code)
    if clash and clash.id != coupon_id:
        raise HTTPException(status_code=409, detail=f"Coupon code {data.code} already exists")

    coupon, created = await repo.upsert_coupon(coupon_id or new_id("coupon"), **data.model_dump())
    action = "Created Coupon" if created else "Updated Coupon"
    await audit(db, admin, action, "Coupon", coupon.id, {"code": coupon.code})
    return coupon


@router.get("/coupons", response_model=list[CouponRead])
async def list_coupons(
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await BillingRepository(db).list_coupons()


@router.post("/coupons", response_model=CouponRead, status_code=201)
async def create_coupon(
    data: CouponUpsert,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await _save_coupon(db, admin, None, data)


@router.put("/coupons/{coupon_id}", response_model=CouponRead)
async def upsert_coupon(
    coupon_id: str,
    data: CouponUpsert,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await _save_coupon(db, admin, coupon_id, data)


# --- Manual payment verification ---

@router.post("/payments", response_model=PaymentVerificationRead, status_code=201)
async def submit_payment(
    data: PaymentSubmission,
    clinician: User = Depends(require_clinician),
    db: AsyncSession = Depends(get_db),
):
    """A clinician uploads a bank-transfer receipt for a plan."""
    repo = BillingRepository(db)
    plan = await repo.get_plan(data.requested_plan_id)
    if not plan or not plan.is_active:
        raise HTTPException(status_code=404, detail="Plan not found")

    verification = await repo.create_verification(
        id=new_id("ver"),
        clinician_id=clinician.id,
        clinician_name=clinician.name,
        clinician_email=clinician.email,
        requested_plan_id=plan.id,
        requested_plan_name=plan.name,
        requested_plan_price=plan.price,
        receipt_url=data.receipt_url,
        status="pending",
    )
    clinician.subscription_status = "pending_payment"
    clinician.requested_plan_id = plan.id
    await db.flush()

    await notify_admins(
        db,
        "New Payment Receipt Submitted",
        f"{clinician.name} submitted a receipt for the {plan.name} plan.",
        "payment",
        "/admin/billing?tab=verifications",
    )
    logger.info(f"Payment verification {verification.id} submitted by {clinician.id}")
    return verification


@router.get("/payments", response_model=list[PaymentVerificationRead])
async def list_payment_verifications(
    status: Optional[str] = Query(None),
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await BillingRepository(db).list_verifications(status=status)


async def _decide(db: AsyncSession, admin: User, verification_id: str, approved: bool):
    repo = BillingRepository(db)
    verification = await repo.get_verification(verification_id)
    if not verification:
        raise HTTPException(status_code=404, detail="Payment verification not found")
    if verification.status != "pending":
        raise HTTPException(status_code=409, detail=f"Payment verification already {verification.status}")

    clinician = await repo.decide_verification(verification, approved, admin.id)
    action = "Approved Payment" if approved else "Rejected Payment"
    await audit(
        db, admin, action, "PaymentVerification", verification.id,
        {"clinicianId": verification.clinician_id, "planId": verification.requested_plan_id},
    )

    if clinician:
        if approved:
            title = "Subscription Activated!"
            description = f"Your payment for the {verification.requested_plan_name} plan has been approved."
        else:
            title = "Payment Verification Issue"
            description = (
                f"We could not verify your payment for the {verification.requested_plan_name} plan. "
                "Please check the receipt and submit it again."
            )
        await notify_clinician(
            db, clinician.id, title, description, "success" if approved else "error", "/clinician/settings"
        )
    return verification


@router.post("/payments/{verification_id}/approve", response_model=PaymentVerificationRead)
async def approve_payment(
    verification_id: str,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await _decide(db, admin, verification_id, approved=True)


@router.post("/payments/{verification_id}/reject", response_model=PaymentVerificationRead)
async def reject_payment(
    verification_id: str,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await _decide(db, admin, verification_id, approved=False)

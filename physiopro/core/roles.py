"""Account roles, statuses and the role groupings used for access checks."""

import enum


class UserStatus(str, enum.Enum):
    active = "active"
    inactive = "inactive"
    pending = "pending"
    suspended = "suspended"
    pending_invitation = "pending_invitation"


class SubscriptionStatus(str, enum.Enum):
    active = "active"
    trial = "trial"
    pending_payment = "pending_payment"
    payment_rejected = "payment_rejected"
    cancelled = "cancelled"
    none = "none"


PROFESSIONAL_ROLES: tuple[str, ...] = (
    "Chiropractor",
    "Doctor",
    "Exercise Rehabilitation Instructor",
    "Nurse",
    "Nutritionist",
    "Osteopath",
    "Personal Trainer",
    "Physiotherapist",
    "Pilates Instructor",
    "Podiatrist",
    "Researcher",
    "S&C Coach",
    "Sport Massage Therapist",
    "Sports Scientist",
    "Sports Therapist",
    "Surgeon",
)

PATIENT_ROLE = "Patient"
CLINIC_OWNER_ROLE = "Clinic Owner"

SYSTEM_ROLES: tuple[str, ...] = (
    PATIENT_ROLE,
    "Admin",
    "Content Reviewer",
    "Moderator",
    "Finance Admin",
    CLINIC_OWNER_ROLE,
)

INTERNAL_ADMIN_ROLES: tuple[str, ...] = ("Admin", "Content Reviewer", "Moderator", "Finance Admin")

# Internal admins share one notification inbox under this user id.
ADMIN_NOTIFICATION_USER = "admin_system"

ALL_ROLES: tuple[str, ...] = PROFESSIONAL_ROLES + SYSTEM_ROLES


def is_professional(role: str) -> bool:
    return role in PROFESSIONAL_ROLES


def is_internal_admin(role: str) -> bool:
    return role in INTERNAL_ADMIN_ROLES


def is_clinician(role: str) -> bool:
    """Professionals and clinic owners can run a patient caseload."""
    return role in PROFESSIONAL_ROLES or role == CLINIC_OWNER_ROLE


def is_patient(role: str) -> bool:
    return role == PATIENT_ROLE

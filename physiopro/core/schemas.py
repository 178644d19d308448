"""Pydantic schemas for PhysioPro API I/O and form validation."""

from __future__ import annotations

import re
from datetime import date, datetime, timezone
from typing import Any, Literal, Optional, Union
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from physiopro.core.roles import INTERNAL_ADMIN_ROLES, PROFESSIONAL_ROLES

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
WHATSAPP_RE = re.compile(r"^\+?[1-9]\d{1,14}$")

UserStatusLiteral = Literal["active", "inactive", "pending", "suspended", "pending_invitation"]
SubscriptionStatusLiteral = Literal["active", "trial", "pending_payment", "payment_rejected", "cancelled", "none"]
Difficulty = Literal["Beginner", "Intermediate", "Advanced"]
ExerciseStatus = Literal["active", "pending", "rejected"]
ProgramStatus = Literal["draft", "active", "archived", "template", "completed"]
AppointmentStatus = Literal["scheduled", "completed", "cancelled", "pending", "rescheduled"]
AppointmentType = Literal["Initial Consultation", "Follow-up", "Routine Visit", "Telehealth Check-in"]
TicketStatus = Literal["open", "in_progress", "resolved", "closed"]
TicketPriority = Literal["low", "medium", "high"]
AnnouncementTarget = Literal["all", "clinicians", "patients"]
PublishStatus = Literal["draft", "published", "archived"]
NotificationType = Literal["info", "warning", "success", "error", "update", "payment"]
CouponType = Literal["percentage", "fixed_amount"]
PlanFrequency = Literal["/month", "/year", "one-time", ""]
ClinicianSort = Literal["joinedDateDesc", "joinedDateAsc", "nameAsc", "nameDesc"]

EXERCISE_CATEGORIES = ("Strength", "Flexibility", "Cardio", "Mobility", "Balance", "Plyometrics", "Rehab")


# --- Shared validators ---

def check_email(value: str) -> str:
    value = value.strip()
    if not EMAIL_RE.match(value):
        raise ValueError("Please enter a valid email address.")
    return value


def check_password_strength(value: str) -> str:
    if len(value) < 8:
        raise ValueError("Password must be at least 8 characters.")
    if not re.search(r"[a-z]", value):
        raise ValueError("Password must contain at least one lowercase letter.")
    if not re.search(r"[A-Z]", value):
        raise ValueError("Password must contain at least one uppercase letter.")
    if not re.search(r"[0-9]", value):
        raise ValueError("Password must contain at least one number.")
    if not re.search(r"[^a-zA-Z0-9]", value):
        raise ValueError("Password must contain at least one special character.")
    return value


def check_whatsapp(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    if not WHATSAPP_RE.match(value):
        raise ValueError("Invalid WhatsApp number format (e.g., +923001234567 or +1234567890).")
    return value


def check_optional_url(value: Optional[str]) -> Optional[str]:
    """Empty means unset; anything else must be an absolute http(s) URL."""
    if value is None or value.strip() == "":
        return None
    parsed = urlparse(value.strip())
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValueError("Please enter a valid URL.")
    return value.strip()


def split_comma_list(value: Any) -> Any:
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    return value


# --- Auth ---

class LoginRequest(BaseModel):
    email: str
    password: str


class ClinicianSignup(BaseModel):
    full_name: str = Field(min_length=2)
    email: str
    password: str
    confirm_password: str
    role: str
    terms: bool

    _email = field_validator("email")(check_email)
    _password = field_validator("password")(check_password_strength)

    @field_validator("role")
    @classmethod
    def _professional_role(cls, value: str) -> str:
        if value not in PROFESSIONAL_ROLES:
            raise ValueError("Please select your professional role.")
        return value

    @field_validator("terms")
    @classmethod
    def _terms_accepted(cls, value: bool) -> bool:
        if value is not True:
            raise ValueError("You must accept the terms and conditions.")
        return value

    @model_validator(mode="after")
    def _passwords_match(self) -> "ClinicianSignup":
        if self.password != self.confirm_password:
            raise ValueError("Passwords do not match.")
        return self


class PatientSignup(BaseModel):
    full_name: str = Field(min_length=2)
    email: str
    password: str
    confirm_password: str
    whatsapp_number: Optional[str] = None
    terms: bool

    _email = field_validator("email")(check_email)
    _password = field_validator("password")(check_password_strength)
    _whatsapp = field_validator("whatsapp_number")(check_whatsapp)

    @field_validator("terms")
    @classmethod
    def _terms_accepted(cls, value: bool) -> bool:
        if value is not True:
            raise ValueError("You must accept the terms and conditions.")
        return value

    @model_validator(mode="after")
    def _passwords_match(self) -> "PatientSignup":
        if self.password != self.confirm_password:
            raise ValueError("Passwords do not match.")
        return self


class ForgotPasswordRequest(BaseModel):
    email: str

    _email = field_validator("email")(check_email)


class AccountRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: str
    role: str
    status: str
    avatar_url: Optional[str] = None


# --- Clinicians (admin user management) ---

class ClinicianCreate(BaseModel):
    name: str = Field(min_length=2)
    email: str
    role: str
    status: UserStatusLiteral = "active"
    whatsapp_number: Optional[str] = None
    specialization: Optional[str] = None
    current_plan_id: Optional[str] = None
    subscription_status: Optional[SubscriptionStatusLiteral] = None
    city: Optional[str] = None

    _email = field_validator("email")(check_email)
    _whatsapp = field_validator("whatsapp_number")(check_whatsapp)

    @field_validator("role")
    @classmethod
    def _professional_role(cls, value: str) -> str:
        if value not in PROFESSIONAL_ROLES:
            raise ValueError(f"Unknown professional role: {value}")
        return value


class ClinicianUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=2)
    email: Optional[str] = None
    role: Optional[str] = None
    status: Optional[UserStatusLiteral] = None
    whatsapp_number: Optional[str] = None
    specialization: Optional[str] = None
    current_plan_id: Optional[str] = None
    subscription_status: Optional[SubscriptionStatusLiteral] = None
    city: Optional[str] = None

    _whatsapp = field_validator("whatsapp_number")(check_whatsapp)

    @field_validator("email")
    @classmethod
    def _email(cls, value: Optional[str]) -> Optional[str]:
        return check_email(value) if value is not None else None

    @field_validator("role")
    @classmethod
    def _professional_role(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and value not in PROFESSIONAL_ROLES:
            raise ValueError(f"Unknown professional role: {value}")
        return value


class ClinicianRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: str
    role: str
    status: str
    avatar_url: Optional[str] = None
    whatsapp_number: Optional[str] = None
    specialization: Optional[str] = None
    city: Optional[str] = None
    current_plan_id: Optional[str] = None
    subscription_status: Optional[str] = None
    payment_receipt_url: Optional[str] = None
    requested_plan_id: Optional[str] = None
    patient_count: int = 0
    appointment_count: int = 0
    joined_date: date
    last_login: Optional[datetime] = None


class ClinicianList(BaseModel):
    items: list[ClinicianRead]
    available_cities: list[str]


class SelectionRequest(BaseModel):
    ids: list[str]


class BulkStatusRequest(BaseModel):
    ids: list[str] = Field(min_length=1)
    status: UserStatusLiteral


# --- Team ---

class TeamMemberInvite(BaseModel):
    name: str = Field(min_length=2)
    email: str
    role: str

    _email = field_validator("email")(check_email)

    @field_validator("role")
    @classmethod
    def _admin_role(cls, value: str) -> str:
        if value not in INTERNAL_ADMIN_ROLES:
            raise ValueError(f"Unknown team role: {value}")
        return value


class TeamMemberUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=2)
    role: Optional[str] = None
    status: Optional[UserStatusLiteral] = None

    @field_validator("role")
    @classmethod
    def _admin_role(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and value not in INTERNAL_ADMIN_ROLES:
            raise ValueError(f"Unknown team role: {value}")
        return value


class TeamMemberRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: str
    role: str
    status: str
    avatar_url: Optional[str] = None
    joined_date: date
    last_login: Optional[datetime] = None
    invited_by_admin_id: Optional[str] = None
    invited_by_admin_name: Optional[str] = None
    last_invitation_sent_at: Optional[datetime] = None


# --- Audit log ---

class AuditLogRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    timestamp: datetime
    admin_user_id: str
    admin_user_name: str
    action: str
    target_entity_type: Optional[str] = None
    target_entity_id: Optional[str] = None
    details: Optional[dict[str, Any]] = None


class AuditAdminUser(BaseModel):
    id: str
    name: str


class AuditLogFacets(BaseModel):
    admin_users: list[AuditAdminUser]
    actions: list[str]


# --- Exercises ---

class ExerciseCreate(BaseModel):
    name: str = Field(min_length=3)
    description: str = Field(min_length=10)
    category: str = Field(min_length=1)
    difficulty: Difficulty
    body_parts: list[str] = Field(min_length=1)
    equipment: Optional[str] = None
    video_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    precautions: Optional[str] = None
    status: ExerciseStatus = "pending"
    is_featured: bool = False
    sets: Optional[str] = None
    reps: Optional[str] = None
    hold: Optional[str] = None

    _body_parts = field_validator("body_parts", mode="before")(split_comma_list)
    _video_url = field_validator("video_url")(check_optional_url)
    _thumbnail_url = field_validator("thumbnail_url")(check_optional_url)


class ExerciseUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=3)
    description: Optional[str] = Field(default=None, min_length=10)
    category: Optional[str] = None
    difficulty: Optional[Difficulty] = None
    body_parts: Optional[list[str]] = None
    equipment: Optional[str] = None
    video_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    precautions: Optional[str] = None
    status: Optional[ExerciseStatus] = None
    is_featured: Optional[bool] = None
    sets: Optional[str] = None
    reps: Optional[str] = None
    hold: Optional[str] = None

    _body_parts = field_validator("body_parts", mode="before")(split_comma_list)
    _video_url = field_validator("video_url")(check_optional_url)
    _thumbnail_url = field_validator("thumbnail_url")(check_optional_url)


class ExerciseStatusUpdate(BaseModel):
    status: ExerciseStatus


class ExerciseRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: str
    category: str
    difficulty: str
    body_parts: list[str]
    equipment: Optional[str] = None
    video_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    precautions: Optional[str] = None
    status: str
    is_featured: bool = False
    sets: Optional[str] = None
    reps: Optional[str] = None
    hold: Optional[str] = None


# --- Programs & templates ---

class FeedbackEntry(BaseModel):
    timestamp: datetime
    pain_level: int = Field(ge=1, le=10)
    comments: str = ""
    acknowledged_by_clinician: bool = False

    @field_validator("timestamp")
    @classmethod
    def _assume_utc(cls, v: datetime) -> datetime:
        return v if v.tzinfo else v.replace(tzinfo=timezone.utc)


class ProgramExercise(BaseModel):
    exercise_id: str
    sets: Optional[Union[int, str]] = None
    reps: Optional[Union[int, str]] = None
    duration: Optional[str] = None
    rest: Optional[str] = None
    notes: Optional[str] = None
    feedback_history: list[FeedbackEntry] = Field(default_factory=list)


class ProgramCreate(BaseModel):
    name: str = Field(min_length=3)
    patient_id: Optional[str] = None
    template_id: Optional[str] = None
    exercises: list[ProgramExercise] = Field(default_factory=list)
    status: ProgramStatus = "draft"
    description: Optional[str] = None
    category: Optional[str] = None


class ProgramUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=3)
    patient_id: Optional[str] = None
    exercises: Optional[list[ProgramExercise]] = None
    status: Optional[ProgramStatus] = None
    description: Optional[str] = None
    category: Optional[str] = None
    completion_date: Optional[date] = None


class TemplateCreate(BaseModel):
    name: str = Field(min_length=3)
    category: Optional[str] = None
    description: Optional[str] = None
    exercises: list[ProgramExercise] = Field(default_factory=list)
    status: ProgramStatus = "template"


class TemplateUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=3)
    category: Optional[str] = None
    description: Optional[str] = None
    exercises: Optional[list[ProgramExercise]] = None
    status: Optional[ProgramStatus] = None


class ProgramRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    patient_id: Optional[str] = None
    clinician_id: str
    exercises: list[ProgramExercise]
    status: str
    description: Optional[str] = None
    is_template: bool = False
    category: Optional[str] = None
    assigned_date: Optional[date] = None
    completion_date: Optional[date] = None
    adherence_rate: Optional[int] = None
    created_at: datetime


class ProgramListItem(ProgramRead):
    patient_name: Optional[str] = None


# --- Patients ---

class PatientCreate(BaseModel):
    name: str = Field(min_length=2)
    email: Optional[str] = None
    date_of_birth: Optional[date] = None
    gender: Optional[Literal["Male", "Female", "Other", "Prefer not to say"]] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    conditions: list[str] = Field(default_factory=list)
    medical_notes: Optional[str] = None
    whatsapp_number: Optional[str] = None
    avatar_url: Optional[str] = None

    _conditions = field_validator("conditions", mode="before")(split_comma_list)
    _whatsapp = field_validator("whatsapp_number")(check_whatsapp)

    @field_validator("email")
    @classmethod
    def _email(cls, value: Optional[str]) -> Optional[str]:
        return check_email(value) if value else None


class PatientUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=2)
    email: Optional[str] = None
    date_of_birth: Optional[date] = None
    gender: Optional[Literal["Male", "Female", "Other", "Prefer not to say"]] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    conditions: Optional[list[str]] = None
    medical_notes: Optional[str] = None
    current_program_id: Optional[str] = None
    whatsapp_number: Optional[str] = None

    _conditions = field_validator("conditions", mode="before")(split_comma_list)
    _whatsapp = field_validator("whatsapp_number")(check_whatsapp)


class PatientRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: Optional[str] = None
    name: str
    email: Optional[str] = None
    date_of_birth: Optional[date] = None
    gender: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    conditions: list[str]
    medical_notes: Optional[str] = None
    current_program_id: Optional[str] = None
    avatar_url: Optional[str] = None
    assigned_clinician_id: Optional[str] = None
    last_activity: Optional[datetime] = None
    overall_adherence: int = 0
    whatsapp_number: Optional[str] = None


# --- Appointments ---

class AppointmentCreate(BaseModel):
    patient_id: str
    start: datetime
    end: datetime
    title: Optional[str] = None
    appointment_type: Optional[AppointmentType] = None
    notes: Optional[str] = None
    city: Optional[str] = None

    @model_validator(mode="after")
    def _ordered(self) -> "AppointmentCreate":
        if self.end <= self.start:
            raise ValueError("Appointment end must be after its start.")
        return self


class AppointmentRequest(BaseModel):
    """A patient asking for a slot; the clinician confirms it later."""

    start: datetime
    end: datetime
    appointment_type: Optional[AppointmentType] = None
    patient_notes: Optional[str] = None

    @model_validator(mode="after")
    def _ordered(self) -> "AppointmentRequest":
        if self.end <= self.start:
            raise ValueError("Appointment end must be after its start.")
        return self


class AppointmentUpdate(BaseModel):
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    title: Optional[str] = None
    status: Optional[AppointmentStatus] = None
    appointment_type: Optional[AppointmentType] = None
    notes: Optional[str] = None
    city: Optional[str] = None


class AppointmentRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    patient_id: str
    clinician_id: str
    start: datetime
    end: datetime
    title: Optional[str] = None
    status: str
    appointment_type: Optional[str] = None
    notes: Optional[str] = None
    patient_notes: Optional[str] = None
    city: Optional[str] = None


# --- Messaging ---

class MessageCreate(BaseModel):
    receiver_id: str
    content: str = Field(min_length=1)
    attachment_url: Optional[str] = None


class MessageRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    sender_id: str
    sender_name: Optional[str] = None
    receiver_id: str
    content: str
    attachment_url: Optional[str] = None
    is_read: bool
    timestamp: datetime


class ConversationSummary(BaseModel):
    counterpart_id: str
    counterpart_name: str
    last_message: str
    last_message_time: datetime
    unread_count: int


# --- Billing ---

class PlanUpdate(BaseModel):
    name: Optional[str] = None
    price: Optional[str] = None
    frequency: Optional[PlanFrequency] = None
    features: Optional[list[str]] = None
    description: Optional[str] = None
    is_active: Optional[bool] = None
    cta_text: Optional[str] = None
    is_popular: Optional[bool] = None


class PlanRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    price: str
    frequency: str
    features: list[str]
    description: str
    is_active: bool
    cta_text: str
    is_popular: bool = False


class SubscriptionRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    user_name: str
    plan_name: str
    status: str
    next_billing_date: str
    amount: str
    trial_start_date: Optional[date] = None


class InvoiceRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    invoice_date: date
    amount: str
    status: str
    description: str
    user_name: str


class CouponUpsert(BaseModel):
    code: str = Field(min_length=1)
    coupon_type: CouponType
    value: float = Field(gt=0)
    is_active: bool = True
    expiration_date: Optional[date] = None
    usage_limit: Optional[int] = Field(default=None, ge=0)
    applicable_plans: list[str] = Field(default_factory=list)

    @field_validator("code")
    @classmethod
    def _upper(cls, value: str) -> str:
        value = value.strip().upper()
        if not value:
            raise ValueError("Coupon code is required.")
        return value


class CouponRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    code: str
    coupon_type: str
    value: float
    is_active: bool
    expiration_date: Optional[date] = None
    usage_limit: Optional[int] = None
    times_used: int = 0
    applicable_plans: list[str] = Field(default_factory=list)


class PaymentSubmission(BaseModel):
    requested_plan_id: str
    receipt_url: str

    @field_validator("receipt_url")
    @classmethod
    def _receipt_url(cls, value: str) -> str:
        checked = check_optional_url(value)
        if checked is None:
            raise ValueError("A receipt URL is required.")
        return checked


class PaymentVerificationRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    clinician_id: str
    clinician_name: str
    clinician_email: str
    requested_plan_id: str
    requested_plan_name: str
    requested_plan_price: str
    receipt_url: str
    status: str
    submission_date: datetime
    reviewed_by_admin_id: Optional[str] = None
    reviewed_at: Optional[datetime] = None


# --- Support ---

class TicketCreate(BaseModel):
    subject: str = Field(min_length=3)
    description: str = Field(min_length=10)


class TicketAdminUpdate(BaseModel):
    status: Optional[TicketStatus] = None
    priority: Optional[TicketPriority] = None
    assigned_to_admin_id: Optional[str] = None
    internal_note: Optional[str] = None


class InternalNote(BaseModel):
    admin_id: str
    admin_name: str
    note: str
    timestamp: datetime


class TicketRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    user_name: str
    user_email: str
    subject: str
    description: str
    status: str
    priority: str
    created_at: datetime
    updated_at: Optional[datetime] = None
    assigned_to_admin_id: Optional[str] = None
    assigned_to_admin_name: Optional[str] = None
    internal_notes: list[InternalNote] = Field(default_factory=list)


# --- Announcements ---

def _not_blank(value: str) -> str:
    if not value.strip():
        raise ValueError("Title and content cannot be empty.")
    return value.strip()


class AnnouncementCreate(BaseModel):
    title: str
    content: str
    target_audience: AnnouncementTarget = "all"
    status: PublishStatus = "draft"

    _title = field_validator("title")(_not_blank)
    _content = field_validator("content")(_not_blank)


class AnnouncementUpdate(BaseModel):
    title: Optional[str] = None
    content: Optional[str] = None
    target_audience: Optional[AnnouncementTarget] = None
    status: Optional[PublishStatus] = None

    @field_validator("title", "content")
    @classmethod
    def _not_blank_if_given(cls, value: Optional[str]) -> Optional[str]:
        return _not_blank(value) if value is not None else None


class AnnouncementRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    content: str
    target_audience: str
    status: str
    created_at: datetime


# --- Educational resources ---

class ResourceCreate(BaseModel):
    title: str = Field(min_length=3)
    resource_type: Literal["article", "video"]
    summary: str = Field(min_length=10)
    content: Optional[str] = None
    content_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    estimated_read_time: Optional[str] = None
    status: PublishStatus = "draft"

    _tags = field_validator("tags", mode="before")(split_comma_list)
    _content_url = field_validator("content_url")(check_optional_url)
    _thumbnail_url = field_validator("thumbnail_url")(check_optional_url)

    @model_validator(mode="after")
    def _has_body(self) -> "ResourceCreate":
        if self.resource_type == "video" and not self.content_url:
            raise ValueError("Video resources need a content URL.")
        if self.resource_type == "article" and not (self.content or self.content_url):
            raise ValueError("Articles need content or a content URL.")
        return self


class ResourceUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=3)
    summary: Optional[str] = Field(default=None, min_length=10)
    content: Optional[str] = None
    content_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    tags: Optional[list[str]] = None
    estimated_read_time: Optional[str] = None
    status: Optional[PublishStatus] = None

    _tags = field_validator("tags", mode="before")(split_comma_list)
    _content_url = field_validator("content_url")(check_optional_url)
    _thumbnail_url = field_validator("thumbnail_url")(check_optional_url)


class ResourceRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    resource_type: str
    summary: str
    content: Optional[str] = None
    content_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    estimated_read_time: Optional[str] = None
    status: str
    created_at: datetime
    updated_at: Optional[datetime] = None


# --- Notifications ---

class NotificationRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    title: str
    description: str
    notification_type: str
    link: Optional[str] = None
    is_read: bool
    timestamp: datetime


# --- Platform settings ---

class PlatformSettings(BaseModel):
    platform_name: str = "PhysioPro Platform"
    support_email: str = "support@physiopro.app"
    default_timezone: str = "America/New_York"
    default_language: str = "en"
    logo_url: Optional[str] = "https://placehold.co/150x50.png?text=YourLogo"
    enable_ai_suggestions: bool = True
    default_video_privacy: Literal["public", "unlisted", "private"] = "unlisted"
    allow_program_mod_requests: bool = False
    enable_patient_messaging: bool = True
    enable_patient_self_scheduling: bool = True
    enable_patient_self_registration: bool = False
    new_patient_welcome_message: str = (
        "Welcome to your personalized recovery journey! "
        "Your clinician will assign your program soon."
    )
    notify_clinician_on_feedback: bool = True
    notify_patient_on_program_assignment: bool = True
    smtp_server: str = "smtp.example.com"
    smtp_port: str = "587"
    smtp_username: str = "user@example.com"
    bank_account_name: str = "PhysioPro Inc."
    bank_name: str = "Global Secure Bank"
    bank_account_number: str = "123-456-7890"
    bank_swift_bic: str = "GSBKUS33"
    payment_reference_instructions: str = "Your Email or Clinic Name"

    _support_email = field_validator("support_email")(check_email)


class PlatformSettingsUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    platform_name: Optional[str] = None
    support_email: Optional[str] = None
    default_timezone: Optional[str] = None
    default_language: Optional[str] = None
    logo_url: Optional[str] = None
    enable_ai_suggestions: Optional[bool] = None
    default_video_privacy: Optional[Literal["public", "unlisted", "private"]] = None
    allow_program_mod_requests: Optional[bool] = None
    enable_patient_messaging: Optional[bool] = None
    enable_patient_self_scheduling: Optional[bool] = None
    enable_patient_self_registration: Optional[bool] = None
    new_patient_welcome_message: Optional[str] = None
    notify_clinician_on_feedback: Optional[bool] = None
    notify_patient_on_program_assignment: Optional[bool] = None
    smtp_server: Optional[str] = None
    smtp_port: Optional[str] = None
    smtp_username: Optional[str] = None
    bank_account_name: Optional[str] = None
    bank_name: Optional[str] = None
    bank_account_number: Optional[str] = None
    bank_swift_bic: Optional[str] = None
    payment_reference_instructions: Optional[str] = None


# --- Communication ---

class EmailSendRequest(BaseModel):
    recipients: list[str] = Field(min_length=1)
    subject: str = Field(min_length=1)
    body: str = Field(min_length=1)


class EmailSendResult(BaseModel):
    sent: bool
    recipient_count: int


# --- Patient portal ---

class ExerciseFeedbackSubmit(BaseModel):
    pain_level: int = Field(ge=1, le=10)
    comments: str = ""


class PortalExercise(ProgramExercise):
    exercise: Optional[ExerciseRead] = None
    completed: bool = False


class PortalProgram(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    status: str
    adherence_rate: Optional[int] = None
    exercises: list[PortalExercise]


class PatientProgress(BaseModel):
    streak: int
    badges: list[str]
    completion_rate: int
    total_workouts_completed: int
    total_exercises_completed: int


class MotivationRead(BaseModel):
    message: str


# --- Analytics ---

class AdherenceRow(BaseModel):
    patient_id: str
    patient_name: str
    email: Optional[str] = None
    current_program_id: Optional[str] = None
    current_program_name: Optional[str] = None
    overall_adherence: int
    last_activity: Optional[datetime] = None
    adherence_status: str


class AdherenceSummary(BaseModel):
    overall_adherence: float
    high: int
    medium: int
    low: int
    at_risk: list[AdherenceRow]
    patients: list[AdherenceRow]


class AdminOverview(BaseModel):
    clinicians_by_status: dict[str, int]
    total_clinicians: int
    total_patients: int
    active_exercises: int
    pending_exercises: int
    open_tickets: int
    pending_payment_verifications: int

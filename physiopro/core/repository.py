"""CRUD repositories for the PhysioPro data store."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional, Sequence

from sqlalchemy import delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from physiopro.core.models import (
    Announcement,
    Appointment,
    AuditLogEntry,
    ChatMessage,
    CouponCode,
    EducationalResource,
    Exercise,
    Invoice,
    Notification,
    Patient,
    PaymentVerification,
    PlatformSettingsRecord,
    PricingPlan,
    Program,
    SupportTicket,
    Subscription,
    User,
)
from physiopro.core.roles import INTERNAL_ADMIN_ROLES, PROFESSIONAL_ROLES

CLINICIAN_SORTS = {
    "joinedDateDesc": (User.joined_date.desc(), User.name),
    "joinedDateAsc": (User.joined_date.asc(), User.name),
    "nameAsc": (User.name.asc(),),
    "nameDesc": (User.name.desc(),),
}


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _apply(obj: Any, fields: dict[str, Any]) -> None:
    for k, v in fields.items():
        if v is not None:
            setattr(obj, k, v)


LIKE_ESCAPE = "\\"


def _contains(term: str) -> str:
    """LIKE pattern matching ``term`` literally anywhere, escaped with ``LIKE_ESCAPE``."""
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class UserRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, **kwargs) -> User:
        user = User(**kwargs)
        self.session.add(user)
        await self.session.flush()
        return user

    async def get_by_id(self, user_id: str) -> Optional[User]:
        return await self.session.get(User, user_id)

    async def get_by_email(self, email: str) -> Optional[User]:
        stmt = select(User).where(func.lower(User.email) == email.strip().lower())
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def update(self, user_id: str, **kwargs) -> Optional[User]:
        user = await self.get_by_id(user_id)
        if not user:
            return None
        _apply(user, kwargs)
        user.updated_at = _now()
        await self.session.flush()
        return user

    async def upsert(self, user_id: str, **kwargs) -> tuple[User, bool]:
        """Replace the record in place, else create it under ``user_id``."""
        user = await self.get_by_id(user_id)
        if user:
            _apply(user, kwargs)
            user.updated_at = _now()
            await self.session.flush()
            return user, False
        fields = {k: v for k, v in kwargs.items() if v is not None}
        return await self.create(id=user_id, **fields), True

    async def set_status(self, user_id: str, status: str) -> Optional[User]:
        return await self.update(user_id, status=status)

    async def list_clinicians(
        self,
        search: Optional[str] = None,
        status: Optional[str] = None,
        subscription_status: Optional[str] = None,
        city: Optional[str] = None,
        sort_by: str = "joinedDateDesc",
        ids: Optional[Sequence[str]] = None,
    ) -> Sequence[User]:
        stmt = select(User).where(User.role.in_(PROFESSIONAL_ROLES))
        if search:
            pattern = _contains(search)
            stmt = stmt.where(or_(
                User.name.ilike(pattern, escape=LIKE_ESCAPE),
                User.email.ilike(pattern, escape=LIKE_ESCAPE),
            ))
        if status:
            stmt = stmt.where(User.status == status)
        if subscription_status:
            stmt = stmt.where(User.subscription_status == subscription_status)
        if city:
            stmt = stmt.where(User.city == city)
        if ids is not None:
            stmt = stmt.where(User.id.in_(ids))
        stmt = stmt.order_by(*CLINICIAN_SORTS.get(sort_by, CLINICIAN_SORTS["joinedDateDesc"]))
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def available_cities(self) -> list[str]:
        stmt = (
            select(User.city)
            .where(User.role.in_(PROFESSIONAL_ROLES), User.city.is_not(None), User.city != "")
            .distinct()
            .order_by(User.city)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_team(
        self,
        search: Optional[str] = None,
        role: Optional[str] = None,
        status: Optional[str] = None,
    ) -> Sequence[User]:
        stmt = select(User).where(User.role.in_(INTERNAL_ADMIN_ROLES))
        if search:
            pattern = _contains(search)
            stmt = stmt.where(or_(
                User.name.ilike(pattern, escape=LIKE_ESCAPE),
                User.email.ilike(pattern, escape=LIKE_ESCAPE),
            ))
        if role:
            stmt = stmt.where(User.role == role)
        if status:
            stmt = stmt.where(User.status == status)
        result = await self.session.execute(stmt.order_by(User.name))
        return result.scalars().all()

    async def count_by_status(self, roles: Sequence[str]) -> dict[str, int]:
        stmt = select(User.status, func.count()).where(User.role.in_(roles)).group_by(User.status)
        result = await self.session.execute(stmt)
        return {status: count for status, count in result.all()}

    async def delete(self, user_id: str) -> bool:
        user = await self.get_by_id(user_id)
        if not user:
            return False
        await self.session.delete(user)
        await self.session.flush()
        return True


class PatientRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, **kwargs) -> Patient:
        patient = Patient(**kwargs)
        self.session.add(patient)
        await self.session.flush()
        return patient

    async def get_by_id(self, patient_id: str) -> Optional[Patient]:
        return await self.session.get(Patient, patient_id)

    async def get_by_user_id(self, user_id: str) -> Optional[Patient]:
        result = await self.session.execute(select(Patient).where(Patient.user_id == user_id))
        return result.scalars().first()

    async def list_for_clinician(self, clinician_id: str, search: Optional[str] = None) -> list[Patient]:
        stmt = select(Patient).where(Patient.assigned_clinician_id == clinician_id).order_by(Patient.name)
        result = await self.session.execute(stmt)
        patients = list(result.scalars().all())
        if search:
            term = search.lower()
            patients = [
                p for p in patients
                if term in p.name.lower()
                or term in (p.email or "").lower()
                or any(term in c.lower() for c in p.conditions or [])
            ]
        return patients

    async def count(self) -> int:
        result = await self.session.execute(select(func.count()).select_from(Patient))
        return result.scalar_one()

    async def update(self, patient_id: str, **kwargs) -> Optional[Patient]:
        patient = await self.get_by_id(patient_id)
        if not patient:
            return None
        _apply(patient, kwargs)
        await self.session.flush()
        return patient

    async def delete(self, patient_id: str) -> bool:
        patient = await self.get_by_id(patient_id)
        if not patient:
            return False
        await self.session.delete(patient)
        await self.session.flush()
        return True


class ExerciseRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, **kwargs) -> Exercise:
        exercise = Exercise(**kwargs)
        self.session.add(exercise)
        await self.session.flush()
        return exercise

    async def get_by_id(self, exercise_id: str) -> Optional[Exercise]:
        return await self.session.get(Exercise, exercise_id)

    async def get_many(self, exercise_ids: Sequence[str]) -> dict[str, Exercise]:
        if not exercise_ids:
            return {}
        result = await self.session.execute(select(Exercise).where(Exercise.id.in_(exercise_ids)))
        return {ex.id: ex for ex in result.scalars().all()}

    async def list(
        self,
        search: Optional[str] = None,
        category: Optional[str] = None,
        status: Optional[str] = None,
        difficulty: Optional[str] = None,
    ) -> Sequence[Exercise]:
        stmt = select(Exercise)
        if search:
            pattern = _contains(search)
            stmt = stmt.where(or_(
                Exercise.name.ilike(pattern, escape=LIKE_ESCAPE),
                Exercise.description.ilike(pattern, escape=LIKE_ESCAPE),
            ))
        if category:
            stmt = stmt.where(Exercise.category == category)
        if status:
            stmt = stmt.where(Exercise.status == status)
        if difficulty:
            stmt = stmt.where(Exercise.difficulty == difficulty)
        result = await self.session.execute(stmt.order_by(Exercise.name))
        return result.scalars().all()

    async def find_by_names(self, names: Sequence[str], active_only: bool = True) -> list[Exercise]:
        """Exact (trimmed) name matches, in the order the names were given."""
        wanted = [n.strip() for n in names if n and n.strip()]
        if not wanted:
            return []
        stmt = select(Exercise).where(Exercise.name.in_(wanted))
        if active_only:
            stmt = stmt.where(Exercise.status == "active")
        result = await self.session.execute(stmt)
        by_name = {ex.name: ex for ex in result.scalars().all()}
        return [by_name[n] for n in dict.fromkeys(wanted) if n in by_name]

    async def count_by_status(self) -> dict[str, int]:
        stmt = select(Exercise.status, func.count()).group_by(Exercise.status)
        result = await self.session.execute(stmt)
        return {status: count for status, count in result.all()}

    async def update(self, exercise_id: str, **kwargs) -> Optional[Exercise]:
        exercise = await self.get_by_id(exercise_id)
        if not exercise:
            return None
        _apply(exercise, kwargs)
        exercise.updated_at = _now()
        await self.session.flush()
        return exercise

    async def delete(self, exercise_id: str) -> bool:
        exercise = await self.get_by_id(exercise_id)
        if not exercise:
            return False
        await self.session.delete(exercise)
        await self.session.flush()
        return True


class ProgramRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, **kwargs) -> Program:
        program = Program(**kwargs)
        self.session.add(program)
        await self.session.flush()
        return program

    async def get_by_id(self, program_id: str) -> Optional[Program]:
        return await self.session.get(Program, program_id)

    async def list_for_clinician(
        self,
        clinician_id: str,
        search: Optional[str] = None,
        status: Optional[str] = None,
    ) -> list[tuple[Program, Optional[str]]]:
        """Programs with the assigned patient's name, newest first."""
        stmt = (
            select(Program, Patient.name)
            .outerjoin(Patient, Program.patient_id == Patient.id)
            .where(Program.clinician_id == clinician_id, Program.is_template.is_(False))
        )
        if status:
            stmt = stmt.where(Program.status == status)
        if search:
            pattern = _contains(search)
            stmt = stmt.where(or_(
                Patient.name.ilike(pattern, escape=LIKE_ESCAPE),
                Program.name.ilike(pattern, escape=LIKE_ESCAPE),
                Program.description.ilike(pattern, escape=LIKE_ESCAPE),
            ))
        result = await self.session.execute(stmt.order_by(Program.created_at.desc()))
        return [(program, name) for program, name in result.all()]

    async def list_templates(self, usable_only: bool = False, search: Optional[str] = None) -> Sequence[Program]:
        stmt = select(Program).where(Program.is_template.is_(True))
        if usable_only:
            stmt = stmt.where(Program.status.in_(("active", "template")))
        if search:
            pattern = _contains(search)
            stmt = stmt.where(or_(
                Program.name.ilike(pattern, escape=LIKE_ESCAPE),
                Program.category.ilike(pattern, escape=LIKE_ESCAPE),
            ))
        result = await self.session.execute(stmt.order_by(Program.created_at.desc()))
        return result.scalars().all()

    async def update(self, program_id: str, **kwargs) -> Optional[Program]:
        program = await self.get_by_id(program_id)
        if not program:
            return None
        _apply(program, kwargs)
        program.updated_at = _now()
        await self.session.flush()
        return program

    async def delete(self, program_id: str) -> bool:
        program = await self.get_by_id(program_id)
        if not program:
            return False
        await self.session.delete(program)
        await self.session.flush()
        return True


class AppointmentRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, **kwargs) -> Appointment:
        appointment = Appointment(**kwargs)
        self.session.add(appointment)
        await self.session.flush()
        return appointment

    async def get_by_id(self, appointment_id: str) -> Optional[Appointment]:
        return await self.session.get(Appointment, appointment_id)

    async def list_for_clinician(self, clinician_id: str, status: Optional[str] = None) -> Sequence[Appointment]:
        stmt = select(Appointment).where(Appointment.clinician_id == clinician_id)
        if status:
            stmt = stmt.where(Appointment.status == status)
        result = await self.session.execute(stmt.order_by(Appointment.start))
        return result.scalars().all()

    async def list_for_patient(self, patient_id: str) -> Sequence[Appointment]:
        stmt = select(Appointment).where(Appointment.patient_id == patient_id).order_by(Appointment.start)
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def update(self, appointment_id: str, **kwargs) -> Optional[Appointment]:
        appointment = await self.get_by_id(appointment_id)
        if not appointment:
            return None
        _apply(appointment, kwargs)
        await self.session.flush()
        return appointment

    async def delete(self, appointment_id: str) -> bool:
        appointment = await self.get_by_id(appointment_id)
        if not appointment:
            return False
        await self.session.delete(appointment)
        await self.session.flush()
        return True


class MessageRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, **kwargs) -> ChatMessage:
        message = ChatMessage(**kwargs)
        self.session.add(message)
        await self.session.flush()
        return message

    async def list_involving(self, participant_id: str) -> Sequence[ChatMessage]:
        stmt = (
            select(ChatMessage)
            .where(or_(ChatMessage.sender_id == participant_id, ChatMessage.receiver_id == participant_id))
            .order_by(ChatMessage.timestamp)
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def thread(self, a: str, b: str) -> Sequence[ChatMessage]:
        stmt = (
            select(ChatMessage)
            .where(or_(
                (ChatMessage.sender_id == a) & (ChatMessage.receiver_id == b),
                (ChatMessage.sender_id == b) & (ChatMessage.receiver_id == a),
            ))
            .order_by(ChatMessage.timestamp)
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def mark_thread_read(self, reader_id: str, counterpart_id: str) -> int:
        stmt = select(ChatMessage).where(
            ChatMessage.sender_id == counterpart_id,
            ChatMessage.receiver_id == reader_id,
            ChatMessage.is_read.is_(False),
        )
        result = await self.session.execute(stmt)
        unread = result.scalars().all()
        for message in unread:
            message.is_read = True
        await self.session.flush()
        return len(unread)


class AuditLogRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def add_entry(
        self,
        admin_user_id: str,
        admin_user_name: str,
        action: str,
        target_entity_type: Optional[str] = None,
        target_entity_id: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> AuditLogEntry:
        entry = AuditLogEntry(
            admin_user_id=admin_user_id,
            admin_user_name=admin_user_name,
            action=action,
            target_entity_type=target_entity_type,
            target_entity_id=target_entity_id,
            details=details,
            timestamp=_now(),
        )
        self.session.add(entry)
        await self.session.flush()
        return entry

    async def list(
        self,
        search: Optional[str] = None,
        admin_user_id: Optional[str] = None,
        action: Optional[str] = None,
        limit: int = 200,
    ) -> Sequence[AuditLogEntry]:
        stmt = select(AuditLogEntry)
        if search:
            pattern = _contains(search)
            stmt = stmt.where(or_(
                AuditLogEntry.action.ilike(pattern, escape=LIKE_ESCAPE),
                AuditLogEntry.admin_user_name.ilike(pattern, escape=LIKE_ESCAPE),
                AuditLogEntry.target_entity_id.ilike(pattern, escape=LIKE_ESCAPE),
            ))
        if admin_user_id:
            stmt = stmt.where(AuditLogEntry.admin_user_id == admin_user_id)
        if action:
            stmt = stmt.where(AuditLogEntry.action == action)
        stmt = stmt.order_by(AuditLogEntry.timestamp.desc()).limit(limit)
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def facets(self) -> tuple[list[tuple[str, str]], list[str]]:
        users = await self.session.execute(
            select(AuditLogEntry.admin_user_id, AuditLogEntry.admin_user_name)
            .distinct()
            .order_by(AuditLogEntry.admin_user_name)
        )
        actions = await self.session.execute(
            select(AuditLogEntry.action).distinct().order_by(AuditLogEntry.action)
        )
        seen: dict[str, str] = {}
        for user_id, name in users.all():
            seen.setdefault(user_id, name)
        return list(seen.items()), list(actions.scalars().all())


class AnnouncementRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, **kwargs) -> Announcement:
        announcement = Announcement(**kwargs)
        self.session.add(announcement)
        await self.session.flush()
        return announcement

    async def get_by_id(self, announcement_id: str) -> Optional[Announcement]:
        return await self.session.get(Announcement, announcement_id)

    async def list(
        self,
        status: Optional[str] = None,
        audiences: Optional[Sequence[str]] = None,
    ) -> Sequence[Announcement]:
        stmt = select(Announcement)
        if status:
            stmt = stmt.where(Announcement.status == status)
        if audiences:
            stmt = stmt.where(Announcement.target_audience.in_(audiences))
        result = await self.session.execute(stmt.order_by(Announcement.created_at.desc()))
        return result.scalars().all()

    async def upsert(self, announcement_id: str, **kwargs) -> tuple[Announcement, bool]:
        announcement = await self.get_by_id(announcement_id)
        if announcement:
            _apply(announcement, kwargs)
            announcement.updated_at = _now()
            await self.session.flush()
            return announcement, False
        fields = {k: v for k, v in kwargs.items() if v is not None}
        return await self.create(id=announcement_id, **fields), True

    async def delete(self, announcement_id: str) -> bool:
        announcement = await self.get_by_id(announcement_id)
        if not announcement:
            return False
        await self.session.delete(announcement)
        await self.session.flush()
        return True


class SupportTicketRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, **kwargs) -> SupportTicket:
        ticket = SupportTicket(**kwargs)
        self.session.add(ticket)
        await self.session.flush()
        return ticket

    async def get_by_id(self, ticket_id: str) -> Optional[SupportTicket]:
        return await self.session.get(SupportTicket, ticket_id)

    async def list(
        self,
        search: Optional[str] = None,
        status: Optional[str] = None,
        priority: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> Sequence[SupportTicket]:
        stmt = select(SupportTicket)
        if search:
            pattern = _contains(search)
            stmt = stmt.where(or_(
                SupportTicket.subject.ilike(pattern, escape=LIKE_ESCAPE),
                SupportTicket.user_name.ilike(pattern, escape=LIKE_ESCAPE),
                SupportTicket.user_email.ilike(pattern, escape=LIKE_ESCAPE),
                SupportTicket.description.ilike(pattern, escape=LIKE_ESCAPE),
            ))
        if status:
            stmt = stmt.where(SupportTicket.status == status)
        if priority:
            stmt = stmt.where(SupportTicket.priority == priority)
        if user_id:
            stmt = stmt.where(SupportTicket.user_id == user_id)
        result = await self.session.execute(stmt.order_by(SupportTicket.created_at.desc()))
        return result.scalars().all()

    async def count_open(self) -> int:
        stmt = select(func.count()).select_from(SupportTicket).where(SupportTicket.status.in_(("open", "in_progress")))
        result = await self.session.execute(stmt)
        return result.scalar_one()

    async def update(
        self,
        ticket_id: str,
        note: Optional[dict[str, Any]] = None,
        **kwargs,
    ) -> Optional[SupportTicket]:
        ticket = await self.get_by_id(ticket_id)
        if not ticket:
            return None
        # Assignment may be cleared, so None is written through.
        for key in ("assigned_to_admin_id", "assigned_to_admin_name"):
            if key in kwargs:
                setattr(ticket, key, kwargs.pop(key))
        _apply(ticket, kwargs)
        if note:
            ticket.internal_notes = [*(ticket.internal_notes or []), note]
        ticket.updated_at = _now()
        await self.session.flush()
        return ticket


class EducationRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, **kwargs) -> EducationalResource:
        now = _now()
        resource = EducationalResource(created_at=now, updated_at=now, **kwargs)
        self.session.add(resource)
        await self.session.flush()
        return resource

    async def get_by_id(self, resource_id: str) -> Optional[EducationalResource]:
        return await self.session.get(EducationalResource, resource_id)

    async def list(
        self,
        status: Optional[str] = None,
        resource_type: Optional[str] = None,
        search: Optional[str] = None,
    ) -> list[EducationalResource]:
        stmt = select(EducationalResource)
        if status:
            stmt = stmt.where(EducationalResource.status == status)
        if resource_type:
            stmt = stmt.where(EducationalResource.resource_type == resource_type)
        result = await self.session.execute(stmt.order_by(EducationalResource.created_at.desc()))
        resources = list(result.scalars().all())
        if search:
            term = search.lower()
            resources = [
                r for r in resources
                if term in r.title.lower()
                or term in r.summary.lower()
                or any(term in t.lower() for t in r.tags or [])
            ]
        return resources

    async def update(self, resource_id: str, **kwargs) -> Optional[EducationalResource]:
        resource = await self.get_by_id(resource_id)
        if not resource:
            return None
        _apply(resource, kwargs)
        resource.updated_at = _now()
        await self.session.flush()
        return resource

    async def delete(self, resource_id: str) -> bool:
        resource = await self.get_by_id(resource_id)
        if not resource:
            return False
        await self.session.delete(resource)
        await self.session.flush()
        return True


class NotificationRepository:
    def __init__(self, session: AsyncSession, cap: int = 20):
        self.session = session
        self.cap = cap

    async def push(
        self,
        audience: str,
        user_id: str,
        title: str,
        description: str,
        notification_type: str = "info",
        link: Optional[str] = None,
    ) -> Notification:
        """Add a notification and drop the recipient's oldest beyond the cap."""
        notification = Notification(
            audience=audience,
            user_id=user_id,
            title=title,
            description=description,
            notification_type=notification_type,
            link=link,
            is_read=False,
            timestamp=_now(),
        )
        self.session.add(notification)
        await self.session.flush()

        overflow = await self.session.execute(
            select(Notification.id)
            .where(Notification.audience == audience, Notification.user_id == user_id)
            .order_by(Notification.timestamp.desc())
            .offset(self.cap)
        )
        stale = list(overflow.scalars().all())
        if stale:
            await self.session.execute(delete(Notification).where(Notification.id.in_(stale)))
            await self.session.flush()
        return notification

    async def list(self, audience: str, user_id: str) -> Sequence[Notification]:
        stmt = (
            select(Notification)
            .where(Notification.audience == audience, Notification.user_id == user_id)
            .order_by(Notification.timestamp.desc())
            .limit(self.cap)
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def mark_read(self, notification_id: str, audience: str, user_id: str) -> Optional[Notification]:
        notification = await self.session.get(Notification, notification_id)
        if not notification or notification.audience != audience or notification.user_id != user_id:
            return None
        notification.is_read = True
        await self.session.flush()
        return notification

    async def mark_all_read(self, audience: str, user_id: str) -> int:
        stmt = select(Notification).where(
            Notification.audience == audience,
            Notification.user_id == user_id,
            Notification.is_read.is_(False),
        )
        result = await self.session.execute(stmt)
        unread = result.scalars().all()
        for notification in unread:
            notification.is_read = True
        await self.session.flush()
        return len(unread)


class BillingRepository:
    """Plans, subscriptions, invoices, coupons and manual payment requests."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_plans(self, active_only: bool = False) -> Sequence[PricingPlan]:
        stmt = select(PricingPlan)
        if active_only:
            stmt = stmt.where(PricingPlan.is_active.is_(True))
        result = await self.session.execute(stmt.order_by(PricingPlan.id))
        return result.scalars().all()

    async def get_plan(self, plan_id: str) -> Optional[PricingPlan]:
        return await self.session.get(PricingPlan, plan_id)

    async def update_plan(self, plan_id: str, **kwargs) -> Optional[PricingPlan]:
        plan = await self.get_plan(plan_id)
        if not plan:
            return None
        _apply(plan, kwargs)
        await self.session.flush()
        return plan

    async def list_subscriptions(self) -> Sequence[Subscription]:
        result = await self.session.execute(select(Subscription).order_by(Subscription.id))
        return result.scalars().all()

    async def list_invoices(self) -> Sequence[Invoice]:
        result = await self.session.execute(select(Invoice).order_by(Invoice.invoice_date.desc()))
        return result.scalars().all()

    async def list_coupons(self) -> Sequence[CouponCode]:
        result = await self.session.execute(select(CouponCode).order_by(CouponCode.code))
        return result.scalars().all()

    async def get_coupon(self, coupon_id: str) -> Optional[CouponCode]:
        return await self.session.get(CouponCode, coupon_id)

    async def get_coupon_by_code(self, code: str) -> Optional[CouponCode]:
        result = await self.session.execute(select(CouponCode).where(CouponCode.code == code.upper()))
        return result.scalar_one_or_none()

    async def upsert_coupon(self, coupon_id: Optional[str], **kwargs) -> tuple[CouponCode, bool]:
        coupon = await self.get_coupon(coupon_id) if coupon_id else None
        if coupon:
            for k, v in kwargs.items():
                setattr(coupon, k, v)
            await self.session.flush()
            return coupon, False
        fields = dict(kwargs)
        if coupon_id:
            fields["id"] = coupon_id
        coupon = CouponCode(**fields)
        self.session.add(coupon)
        await self.session.flush()
        return coupon, True

    async def create_verification(self, **kwargs) -> PaymentVerification:
        verification = PaymentVerification(submission_date=_now(), **kwargs)
        self.session.add(verification)
        await self.session.flush()
        return verification

    async def get_verification(self, verification_id: str) -> Optional[PaymentVerification]:
        return await self.session.get(PaymentVerification, verification_id)

    async def list_verifications(self, status: Optional[str] = None) -> Sequence[PaymentVerification]:
        stmt = select(PaymentVerification)
        if status:
            stmt = stmt.where(PaymentVerification.status == status)
        result = await self.session.execute(stmt.order_by(PaymentVerification.submission_date.desc()))
        return result.scalars().all()

    async def count_pending_verifications(self) -> int:
        stmt = (
            select(func.count())
            .select_from(PaymentVerification)
            .where(PaymentVerification.status == "pending")
        )
        result = await self.session.execute(stmt)
        return result.scalar_one()

    async def decide_verification(
        self,
        verification: PaymentVerification,
        approved: bool,
        admin_id: str,
    ) -> Optional[User]:
        """Close a pending request and move the clinician's subscription along."""
        verification.status = "approved" if approved else "rejected"
        verification.reviewed_by_admin_id = admin_id
        verification.reviewed_at = _now()

        clinician = await self.session.get(User, verification.clinician_id)
        if clinician:
            if approved:
                clinician.current_plan_id = verification.requested_plan_id
                clinician.subscription_status = "active"
                clinician.payment_receipt_url = verification.receipt_url
            else:
                clinician.subscription_status = "payment_rejected"
            clinician.requested_plan_id = None
            clinician.updated_at = _now()
        await self.session.flush()
        return clinician


class SettingsRepository:
    RECORD_ID = "platform"

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self) -> dict[str, Any]:
        record = await self.session.get(PlatformSettingsRecord, self.RECORD_ID)
        return dict(record.values) if record else {}

    async def update(self, changes: dict[str, Any]) -> dict[str, Any]:
        record = await self.session.get(PlatformSettingsRecord, self.RECORD_ID)
        if not record:
            record = PlatformSettingsRecord(id=self.RECORD_ID, values={})
            self.session.add(record)
        record.values = {**(record.values or {}), **changes}
        record.updated_at = _now()
        await self.session.flush()
        return dict(record.values)

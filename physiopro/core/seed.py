"""Demo fixture records loaded into an empty data store."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from physiopro.config import get_settings
from physiopro.core.auth import hash_password
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
    PlatformSettingsRecord,
    PricingPlan,
    Program,
    SupportTicket,
    Subscription,
    User,
)
from physiopro.core.roles import ADMIN_NOTIFICATION_USER
from physiopro.core.schemas import PlatformSettings

SYSTEM_CLINICIAN_ID = "admin-system"


def _ago(now: datetime, days: float = 0, minutes: float = 0) -> datetime:
    return now - timedelta(days=days, minutes=minutes)


def _clinicians() -> list[dict]:
    return [
        dict(id="doc1", name="Dr. Ayesha Khan", email="ayesha@medcare.com", role="Physiotherapist",
             status="active", joined_date=date(2024, 1, 12), patient_count=18, appointment_count=152,
             avatar_url="https://placehold.co/100x100.png?text=AK", specialization="Musculoskeletal Rehab",
             current_plan_id="plan_pro_monthly", subscription_status="active", city="Karachi"),
        dict(id="doc2", name="Dr. Usman Tariq", email="usman@brainclinic.com", role="Doctor",
             status="suspended", joined_date=date(2024, 3, 3), patient_count=5, appointment_count=32,
             avatar_url="https://placehold.co/100x100.png?text=UT", specialization="Neurology",
             current_plan_id="plan_basic_monthly", subscription_status="cancelled", city="Lahore"),
        dict(id="doc3", name="Dr. Sofia Alverez", email="sofia.a@health.org", role="Chiropractor",
             status="pending", joined_date=date(2024, 5, 1), patient_count=0, appointment_count=0,
             avatar_url="https://placehold.co/100x100.png?text=SA", specialization="Spinal Adjustments",
             subscription_status="trial", city="Islamabad"),
        dict(id="doc_current", name="Dr. Clinician (Demo)", email="dr.clinician@physiopro.app",
             role="Physiotherapist", status="active", joined_date=date(2023, 5, 1), patient_count=12,
             appointment_count=88, avatar_url="https://placehold.co/100x100.png?text=DC",
             specialization="Sports Injury Rehab", current_plan_id="plan_pro_monthly",
             subscription_status="active", city="Karachi"),
        dict(id="doc4", name="Dr. Ken Miles", email="ken.miles@health.org", role="Sports Therapist",
             status="active", joined_date=date(2023, 11, 15), patient_count=25, appointment_count=210,
             avatar_url="https://placehold.co/100x100.png?text=KM", whatsapp_number="+15551237890",
             current_plan_id="plan_pro_monthly", subscription_status="active", city="Lahore"),
        dict(id="doc5", name="Dr. Lena Ray", email="lena.ray@clinic.dev", role="Nutritionist",
             status="inactive", joined_date=date(2024, 2, 1), patient_count=10, appointment_count=45,
             avatar_url="https://placehold.co/100x100.png?text=LR", specialization="Pediatric Nutrition",
             subscription_status="none", city="Islamabad"),
    ]


def _team(now: datetime) -> list[dict]:
    return [
        dict(id="tm1", name="Alice Admin", email="alice.admin@physiopro.app", role="Admin", status="active",
             joined_date=date(2023, 1, 10), avatar_url="https://placehold.co/100x100.png?text=AA"),
        dict(id="tm2", name="Bob Reviewer", email="bob.reviewer@physiopro.app", role="Content Reviewer",
             status="active", joined_date=date(2023, 5, 15), avatar_url="https://placehold.co/100x100.png?text=BR"),
        dict(id="tm3", name="Charlie Moderator", email="charlie.mod@physiopro.app", role="Moderator",
             status="pending_invitation", joined_date=date(2024, 7, 20),
             avatar_url="https://placehold.co/100x100.png?text=CM", invited_by_admin_id="tm1",
             invited_by_admin_name="Alice Admin", last_invitation_sent_at=_ago(now, days=2)),
        dict(id="tm4", name="Diana Finance", email="diana.finance@physiopro.app", role="Finance Admin",
             status="inactive", joined_date=date(2023, 11, 1), avatar_url="https://placehold.co/100x100.png?text=DF"),
    ]


def _patients(now: datetime) -> list[dict]:
    return [
        dict(id="p1", user_id="usr_p1", name="Alice Green", email="alice.g@example.com", conditions=["Knee Rehab"],
             current_program_id="prog_alice_knee", avatar_url="https://placehold.co/60x60.png?text=AG",
             last_activity=_ago(now, days=1), overall_adherence=85, whatsapp_number="+12345678901"),
        dict(id="p2", user_id="usr_p2", name="Bob White", email="bob.w@example.com", conditions=["Shoulder Mobility"],
             current_program_id="prog_bob_shoulder", avatar_url="https://placehold.co/60x60.png?text=BW",
             last_activity=_ago(now, days=3), overall_adherence=60),
        dict(id="p3", user_id="usr_p3", name="Charlie Black", email="charlie.b@example.com",
             conditions=["Low Back Pain"], avatar_url="https://placehold.co/60x60.png?text=CB",
             last_activity=now, overall_adherence=95, whatsapp_number="+923001234567"),
        dict(id="p4", user_id="usr_p4", name="Diana Prince", email="diana.p@example.com",
             conditions=["Ankle Recovery"], avatar_url="https://placehold.co/60x60.png?text=DP",
             last_activity=_ago(now, days=5), overall_adherence=40),
    ]


def _exercises() -> list[dict]:
    return [
        dict(id="ex1", name="Standard Squat", description="A basic squat exercise. Keep back straight and engage core.",
             video_url="https://example.com/squat.mp4", thumbnail_url="https://placehold.co/100x100.png?text=Squat",
             category="Strength", body_parts=["Legs", "Glutes"], difficulty="Beginner", status="active",
             precautions="Keep back straight.", is_featured=True, sets="3", reps="10-12", hold=""),
        dict(id="ex2", name="Push Up", description="A classic push up. Maintain a straight line from head to heels.",
             thumbnail_url="https://placehold.co/100x100.png?text=PushUp", category="Strength",
             body_parts=["Chest", "Arms", "Core"], difficulty="Intermediate", status="pending",
             precautions="Engage core.", sets="3", reps="As many as possible", hold=""),
        dict(id="ex3", name="Plank", description="Hold a plank position, engaging core and glutes.", category="Core",
             body_parts=["Core"], difficulty="Beginner", status="active", video_url="https://example.com/plank.mp4",
             sets="3", reps="1", hold="30-60s"),
        dict(id="ex4", name="Bicep Curl", description="Curl dumbbells to work biceps. Avoid swinging the body.",
             thumbnail_url="https://placehold.co/100x100.png?text=Curl", category="Strength", body_parts=["Arms"],
             equipment="Dumbbells", difficulty="Beginner", status="rejected", precautions="Avoid swinging.",
             sets="3", reps="10-15", hold=""),
        dict(id="ex5", name="Hamstring Stretch",
             description="Gentle stretch for the back of the thigh. Hold for specified duration.",
             category="Flexibility", body_parts=["Legs"], difficulty="Beginner", status="active",
             sets="1-2", reps="1", hold="30s per leg"),
        dict(id="ex6", name="Advanced Lunge Matrix",
             description="Complex lunge variations for dynamic strength and balance.", category="Strength",
             body_parts=["Legs", "Core"], difficulty="Advanced", status="pending", is_featured=False,
             sets="2", reps="8 per lunge type", hold=""),
    ]


def _programs(now: datetime) -> list[dict]:
    def step(exercise_id: str, **params) -> dict:
        return {"exercise_id": exercise_id, "feedback_history": [], **params}

    return [
        dict(id="tpl1", name="ACL Rehab - Phase 1", is_template=True, category="Post-Surgery",
             description="Initial phase for ACL recovery, focusing on gentle motion and swelling reduction.",
             exercises=[step("ex1", sets=3, reps=15, notes="Slow and controlled."),
                        step("ex3", sets=3, reps=10, notes="Focus on range.")],
             clinician_id=SYSTEM_CLINICIAN_ID, created_at=_ago(now, days=5), status="template"),
        dict(id="tpl2", name="Rotator Cuff Strengthening - Basic", is_template=True, category="Shoulder",
             description="Fundamental exercises to improve rotator cuff strength and stability.",
             exercises=[step("ex2", sets=3, reps=12), step("ex5", sets=2, reps=1, duration="30s hold")],
             clinician_id=SYSTEM_CLINICIAN_ID, created_at=_ago(now, days=2), status="active"),
        dict(id="tpl3", name="Low Back Pain Relief - Gentle", is_template=True, category="Spine",
             description="Gentle mobility and stabilization exercises for acute low back pain.",
             exercises=[step("ex3", sets=2, reps=10)],
             clinician_id=SYSTEM_CLINICIAN_ID, created_at=now, status="draft"),
        dict(id="prog_alice_knee", name="Knee Rehab - Phase 2", patient_id="p1", clinician_id="doc_current",
             exercises=[step("ex1", sets=3, reps=10), step("ex5", sets=2, duration="30s")],
             created_at=datetime(2024, 7, 15, tzinfo=timezone.utc), status="active",
             assigned_date=date(2024, 7, 15), adherence_rate=85,
             description="Focus on strengthening and stability for Alice Green's knee."),
        dict(id="prog_bob_shoulder", name="Shoulder Mobility Advanced", patient_id="p2", clinician_id="doc_current",
             exercises=[step("ex2", sets=3, reps=12), step("ex6", sets=2, reps=8)],
             created_at=datetime(2024, 7, 20, tzinfo=timezone.utc), status="active",
             assigned_date=date(2024, 7, 20), adherence_rate=60,
             description="Bob White's advanced shoulder mobility and strengthening plan."),
        dict(id="prog_charlie_back_draft", name="Low Back Pain Initial Phase (Draft)", patient_id="p3",
             clinician_id="doc_current", exercises=[step("ex3", sets=2, reps=10, notes="Gentle holds")],
             created_at=datetime(2024, 7, 28, tzinfo=timezone.utc), status="draft",
             description="Initial gentle exercises for Charlie Black."),
    ]


def _audit_log(now: datetime) -> list[dict]:
    def at(value: str) -> datetime:
        return datetime.fromisoformat(value).replace(tzinfo=timezone.utc)

    return [
        dict(id="log1", timestamp=at("2024-07-28T10:30:00"), admin_user_id="adminUser1", admin_user_name="Super Admin",
             action="Updated Exercise", target_entity_type="Exercise", target_entity_id="ex1",
             details={"previousName": "Old Squat", "newName": "Standard Squat", "oldCategory": "Legs",
                      "newCategory": "Strength"}),
        dict(id="log2", timestamp=at("2024-07-28T07:30:00"), admin_user_id="adminUser2",
             admin_user_name="Content Reviewer Alice", action="Approved Exercise", target_entity_type="Exercise",
             target_entity_id="ex2", details={"approvedAt": "2024-07-28T07:30:00.000Z"}),
        dict(id="log3", timestamp=at("2024-07-27T12:30:00"), admin_user_id="adminUser1", admin_user_name="Super Admin",
             action="Suspended Clinician", target_entity_type="User", target_entity_id="doc2",
             details={"reason": "Policy violation", "suspensionDuration": "30 days"}),
        dict(id="log4", timestamp=at("2024-07-26T12:30:00"), admin_user_id="adminUser3",
             admin_user_name="Finance Manager Bob", action="Updated Billing Plan", target_entity_type="BillingPlan",
             target_entity_id="plan_pro_monthly", details={"oldPrice": "$69/month", "newPrice": "$79/month"}),
        dict(id="log5", timestamp=at("2024-07-28T12:00:00"), admin_user_id="adminUser1", admin_user_name="Super Admin",
             action="Created Announcement", target_entity_type="Announcement", target_entity_id="anno-new-feature",
             details={"title": "New AI Feature Launched!", "audience": "clinicians"}),
        dict(id="log6", timestamp=at("2024-07-27T18:45:00"), admin_user_id="adminUser2",
             admin_user_name="Content Reviewer Alice", action="Updated Program Template",
             target_entity_type="ProgramTemplate", target_entity_id="tpl-shoulder-rehab",
             details={"exercisesAdded": 2, "exercisesRemoved": 1}),
        dict(id="log7", timestamp=_ago(now, days=0.2), admin_user_id="adminUser1", admin_user_name="Super Admin",
             action="Invited Team Member", target_entity_type="TeamMember", target_entity_id="tm_new_invite",
             details={"invitedEmail": "new.admin@physiopro.app", "roleAssigned": "Moderator"}),
        dict(id="log8", timestamp=_ago(now, days=0.1), admin_user_id="adminUser1", admin_user_name="Super Admin",
             action="Updated Team Member", target_entity_type="TeamMember", target_entity_id="tm2",
             details={"memberName": "Bob Reviewer", "oldRole": "Content Reviewer", "newRole": "Admin",
                      "oldStatus": "active", "newStatus": "active"}),
        dict(id="log9", timestamp=now, admin_user_id="adminUser1", admin_user_name="Super Admin",
             action="Resent Invitation", target_entity_type="TeamMember", target_entity_id="tm3",
             details={"email": "charlie.mod@physiopro.app"}),
    ]


def _billing() -> tuple[list[dict], list[dict], list[dict], list[dict]]:
    plans = [
        dict(id="plan_basic_monthly", name="Basic Monthly", price="$29", frequency="/month",
             features=["AI Exercise Library (500 exercises)", "Basic Program Builder", "Up to 25 Patients",
                       "Standard Email Support"],
             description="Perfect for solo practitioners starting out.", is_active=True, cta_text="Get Started",
             is_popular=False),
        dict(id="plan_pro_monthly", name="Pro Monthly", price="$79", frequency="/month",
             features=["Full AI Exercise Library (2500+)", "AI Program Builder with suggestions",
                       "Up to 100 Patients", "Adherence Analytics", "Priority Email & Chat Support"],
             description="Ideal for growing practices needing more power and AI features.", is_active=True,
             cta_text="Choose Pro", is_popular=True),
        dict(id="plan_enterprise", name="Enterprise Solution", price="Custom", frequency="",
             features=["All Pro features", "Unlimited Patients & Clinicians", "White-Label Branding Options",
                       "Advanced Compliance (HIPAA/GDPR tools)", "Dedicated Account Manager & API Access",
                       "Custom Integrations"],
             description="Tailored for large clinics, hospitals, and organizations with specific needs.",
             is_active=True, cta_text="Contact Us", is_popular=False),
        dict(id="plan_legacy_basic", name="Legacy Basic", price="$19", frequency="/month",
             features=["Limited Exercise Library", "No AI Features", "Max 10 Patients"],
             description="Older plan, no longer offered for new subscriptions. Existing users only.",
             is_active=False, cta_text="N/A", is_popular=False),
    ]
    subscriptions = [
        dict(id="sub1", user_id="doc_current", user_name="Dr. Emily Carter", plan_name="Pro Monthly",
             status="active", next_billing_date="2024-08-15", amount="$79.00"),
        dict(id="sub2", user_id="clinic2", user_name="Clinic Excellence Group", plan_name="Enterprise Solution",
             status="active", next_billing_date="2024-08-20", amount="$299.00 (Custom)"),
        dict(id="sub3", user_id="user3", user_name="Dr. Alex Chen", plan_name="Basic Monthly", status="past_due",
             next_billing_date="2024-07-25", amount="$29.00"),
        dict(id="sub4", user_id="clinic4", user_name="Wellness Solutions LLC", plan_name="Pro Monthly",
             status="trial", trial_start_date=date(2024, 7, 10), next_billing_date="N/A (Trial)",
             amount="$0.00 (Trial)"),
    ]
    invoices = [
        dict(id="inv001", invoice_date=date(2024, 7, 15), amount="$79.00", status="paid",
             description="Pro Monthly - July 2024", user_name="Dr. Emily Carter"),
        dict(id="inv002", invoice_date=date(2024, 7, 20), amount="$299.00", status="paid",
             description="Enterprise Solution - July 2024", user_name="Clinic Excellence Group"),
        dict(id="inv003", invoice_date=date(2024, 6, 25), amount="$29.00", status="failed",
             description="Basic Monthly - June 2024", user_name="Dr. Alex Chen"),
        dict(id="inv004", invoice_date=date(2024, 7, 1), amount="$0.00", status="paid",
             description="Pro Monthly - Trial Start", user_name="Wellness Solutions LLC"),
    ]
    coupons = [
        dict(id="coupon1", code="WELCOME20", coupon_type="percentage", value=20, is_active=True,
             expiration_date=date(2024, 12, 31), usage_limit=100, times_used=25),
        dict(id="coupon2", code="SAVE10NOW", coupon_type="fixed_amount", value=10, is_active=True,
             expiration_date=date(2024, 9, 30), usage_limit=50, times_used=10),
        dict(id="coupon3", code="OLDPROMO", coupon_type="percentage", value=15, is_active=False,
             usage_limit=200, times_used=198),
    ]
    return plans, subscriptions, invoices, coupons


def _tickets(now: datetime) -> list[dict]:
    return [
        dict(id="ticket1", user_id="user123", user_name="Dr. Emily Carter", user_email="emily.carter@example.com",
             subject="Issue with AI Program Builder",
             description=(
                 "The AI suggestions are not loading for rotator cuff conditions. I tried refreshing the page "
                 "and clearing cache, but the issue persists. This is blocking my ability to create programs "
                 "efficiently. I need this resolved ASAP as I have several patients waiting."
             ),
             status="open", priority="high", created_at=_ago(now, days=1),
             internal_notes=[{
                 "admin_id": "admin1",
                 "admin_name": "Super Admin",
                 "note": "Investigating model response for rotator cuff query.",
                 "timestamp": _ago(now, days=0.5).isoformat(),
             }]),
        dict(id="ticket2", user_id="user456", user_name="John Doe (Patient)", user_email="john.doe@example.com",
             subject="Cannot log in to patient portal",
             description=(
                 "My password reset link is not working. I click it, but it says token expired, "
                 "even if I try immediately."
             ),
             status="in_progress", priority="medium", created_at=_ago(now, days=3),
             assigned_to_admin_id="tm2", assigned_to_admin_name="Bob Reviewer"),
        dict(id="ticket3", user_id="user789", user_name="Clinic Admin Sarah", user_email="sarah@clinic.com",
             subject="Billing query",
             description=(
                 "Need clarification on last month's invoice, specifically the charge for "
                 "\"Additional Telehealth Units\"."
             ),
             status="resolved", priority="low", created_at=_ago(now, days=5),
             assigned_to_admin_id="tm4", assigned_to_admin_name="Diana Finance", updated_at=now),
        dict(id="ticket4", user_id="user101", user_name="Dr. Alex Chen", user_email="alex.chen@example.com",
             subject="Feature Request: Bulk Exercise Upload",
             description=(
                 "It would be great to upload exercises via CSV. We have an existing library of 500+ "
                 "exercises we'd like to import."
             ),
             status="open", priority="medium", created_at=now),
    ]


def _announcements(now: datetime) -> list[dict]:
    return [
        dict(id="anno1", title="New AI Exercise Search Feature!",
             content="We've rolled out a new AI-powered search for the exercise library. Try natural language queries!",
             target_audience="clinicians", created_at=_ago(now, days=2), status="published"),
        dict(id="anno2", title="Scheduled Maintenance: Sat 2 AM - 4 AM EST",
             content="The platform will undergo scheduled maintenance this Saturday. Expect brief downtime.",
             target_audience="all", created_at=_ago(now, days=1), status="published"),
        dict(id="anno3", title="Upcoming Webinar: Maximizing Patient Engagement",
             content="Join us next Thursday for a webinar on new strategies for patient engagement. (Draft)",
             target_audience="clinicians", created_at=now, status="draft"),
    ]


def _appointments(now: datetime) -> list[dict]:
    def slot(days: int) -> tuple[datetime, datetime]:
        start = now + timedelta(days=days)
        return start, start + timedelta(hours=1)

    (s1, e1), (s2, e2), (s3, e3) = slot(1), slot(2), slot(-1)
    return [
        dict(id="apt1", patient_id="p1", clinician_id="doc_current", start=s1, end=e1,
             title="Follow-up for Alice", status="scheduled", appointment_type="Follow-up"),
        dict(id="apt2", patient_id="p2", clinician_id="doc_current", start=s2, end=e2,
             title="Initial Assessment Bob", status="scheduled", appointment_type="Initial Consultation"),
        dict(id="apt3", patient_id="p1", clinician_id="doc_current", start=s3, end=e3,
             title="Alice Previous Session", status="completed", appointment_type="Follow-up"),
    ]


def _messages(now: datetime) -> list[dict]:
    return [
        dict(id="msg1", sender_id="p1", receiver_id="doc_current", sender_name="Alice Green",
             content="Hi Dr. C, I had a question about exercise 2.", timestamp=_ago(now, minutes=15)),
        dict(id="msg2", sender_id="doc_current", receiver_id="p1", sender_name="Dr. Clinician (Demo)",
             content="Hi Alice, what can I help you with?", timestamp=_ago(now, minutes=10), is_read=True),
        dict(id="msg3", sender_id="p1", receiver_id="doc_current", sender_name="Alice Green",
             content="It felt a bit too strenuous on my knee.", timestamp=_ago(now, minutes=5)),
        dict(id="msg4", sender_id="doc_current", receiver_id="p1", sender_name="Dr. Clinician (Demo)",
             content="Okay, let's reduce the reps for now. Try 2 sets of 8.", timestamp=_ago(now, minutes=2),
             is_read=True),
        dict(id="msg5", sender_id="p1", receiver_id="doc_current", sender_name="Alice Green",
             content="Okay, I'll try that stretch.", timestamp=now),
        dict(id="msg6", sender_id="doc_current", receiver_id="p2", sender_name="Dr. Clinician (Demo)",
             content="Hi Bob, just checking in on your progress.", timestamp=_ago(now, days=1), is_read=True),
        dict(id="msg7", sender_id="p2", receiver_id="doc_current", sender_name="Bob White",
             content="Thanks for the update!", timestamp=_ago(now, days=30), is_read=True),
        dict(id="msg8", sender_id="p3", receiver_id="doc_current", sender_name="Charlie Black",
             content="Feeling much better today.", timestamp=_ago(now, days=3), is_read=True),
    ]


def _resources(now: datetime) -> list[dict]:
    return [
        dict(id="edu1", title="Understanding Your Knee Pain", resource_type="article",
             summary=(
                 "Learn about common causes of knee pain and when to see a specialist. This article covers "
                 "topics such as osteoarthritis, ligament injuries, and patellofemoral pain syndrome, offering "
                 "insights into symptoms and potential treatments."
             ),
             content=(
                 "Full article content for Understanding Your Knee Pain goes here... (More details about "
                 "osteoarthritis, ligament injuries, and patellofemoral pain syndrome.)"
             ),
             thumbnail_url="https://placehold.co/300x170.png?text=Knee+Pain",
             tags=["knee", "pain management", "osteoarthritis"], estimated_read_time="5 min read",
             status="published", created_at=_ago(now, days=10), updated_at=_ago(now, days=2)),
        dict(id="edu2", title="Benefits of Regular Stretching", resource_type="video",
             summary=(
                 "Discover how stretching can improve flexibility, reduce injury risk, and enhance recovery. "
                 "This video demonstrates key stretches for major muscle groups."
             ),
             content_url="https://www.youtube.com/watch?v=rokGy0huYEA",
             thumbnail_url="https://placehold.co/300x170.png?text=Stretching+Video",
             tags=["flexibility", "recovery", "warm-up"], estimated_read_time="3 min watch",
             status="published", created_at=_ago(now, days=5)),
        dict(id="edu3", title="Core Strengthening Essentials", resource_type="article",
             summary=(
                 "A guide to fundamental core exercises for better stability and posture. Includes "
                 "explanations of why core strength is vital and how to perform exercises like planks, "
                 "bird-dogs, and dead bugs safely."
             ),
             content=(
                 "Detailed guide on core exercises. Explains the importance of a strong core for everyday "
                 "activities and athletic performance."
             ),
             thumbnail_url="https://placehold.co/300x170.png?text=Core+Strength",
             tags=["core", "strength", "posture"], estimated_read_time="7 min read",
             status="published", created_at=_ago(now, days=8)),
        dict(id="edu4", title="Managing Lower Back Pain at Home", resource_type="video",
             summary=(
                 "Tips and exercises for alleviating common lower back pain without equipment. Focuses on "
                 "gentle mobility and self-care techniques."
             ),
             content_url="https://www.youtube.com/watch?v=dQw4w9WgXcQ",
             thumbnail_url="https://placehold.co/300x170.png?text=Back+Pain+Home",
             tags=["back pain", "home exercise", "self-care"], estimated_read_time="6 min watch",
             status="draft", created_at=_ago(now, days=3)),
        dict(id="edu5", title="Nutrition for Optimal Recovery", resource_type="article",
             summary=(
                 "Understand how diet plays a crucial role in healing and muscle repair after injury. Covers "
                 "macronutrients, micronutrients, and hydration strategies to support your body's recovery "
                 "process."
             ),
             content=(
                 "Comprehensive article on nutrition for recovery. Discusses the role of protein in muscle "
                 "repair, carbohydrates for energy replenishment and key vitamins and minerals."
             ),
             thumbnail_url="https://placehold.co/300x170.png?text=Recovery+Nutrition",
             tags=["nutrition", "recovery", "diet", "healing"], estimated_read_time="8 min read",
             status="published", created_at=_ago(now, days=12)),
        dict(id="edu6", title="Introduction to Telehealth in Physiotherapy", resource_type="article",
             summary=(
                 "What to expect from remote physiotherapy sessions and how to make the most of them. This "
                 "guide helps you prepare for virtual appointments and understand the benefits of telehealth."
             ),
             content=(
                 "An introductory guide to telehealth for physiotherapy patients. Explains how virtual "
                 "assessments are conducted and what technology is needed."
             ),
             thumbnail_url="https://placehold.co/300x170.png?text=Telehealth+Guide",
             tags=["telehealth", "patient guide", "virtual care"],
             status="archived", created_at=_ago(now, days=15), updated_at=_ago(now, days=1)),
    ]


def _notifications(now: datetime) -> list[dict]:
    return [
        dict(id="admin-init1", audience="admin", user_id=ADMIN_NOTIFICATION_USER, title="System Audit Log Enabled",
             description="Automated system logging is now active.", timestamp=_ago(now, days=2), is_read=True,
             notification_type="info"),
        dict(id="admin-support-ticket-new", audience="admin", user_id=ADMIN_NOTIFICATION_USER,
             title="New Support Ticket", description='Patient John Doe submitted: "Cannot log in..."',
             timestamp=_ago(now, days=0.5), is_read=False, notification_type="warning",
             link="/admin/support/tickets"),
        dict(id="clinician-init1", audience="clinician", user_id="doc_current", title="Welcome to PhysioPro!",
             description="Explore your dashboard and start managing patients.", timestamp=_ago(now, days=1),
             is_read=True, notification_type="success", link="/clinician/dashboard"),
        dict(id="patient-init1", audience="patient", user_id="usr_p1", title="Your Account is Ready",
             description="Welcome to your PhysioPro patient portal.", timestamp=_ago(now, days=3), is_read=True,
             notification_type="success", link="/patient/dashboard"),
    ]


async def seed_demo_data(session: AsyncSession) -> None:
    """Add the full demo fixture set to ``session``; the caller commits."""
    now = datetime.now(timezone.utc)
    password_hash = hash_password(get_settings().demo_password)

    for data in _clinicians() + _team(now):
        session.add(User(password_hash=password_hash, **data))

    patients = _patients(now)
    for data in patients:
        session.add(User(
            id=data["user_id"],
            name=data["name"],
            email=data["email"],
            role="Patient",
            status="active",
            password_hash=password_hash,
            avatar_url=data["avatar_url"],
            whatsapp_number=data.get("whatsapp_number"),
        ))
    await session.flush()

    for data in patients:
        session.add(Patient(assigned_clinician_id="doc_current", **data))
    for data in _exercises():
        session.add(Exercise(**data))
    await session.flush()

    for data in _programs(now):
        session.add(Program(**data))
    for data in _appointments(now):
        session.add(Appointment(**data))
    for data in _messages(now):
        session.add(ChatMessage(**data))
    for data in _audit_log(now):
        session.add(AuditLogEntry(**data))

    plans, subscriptions, invoices, coupons = _billing()
    for data in plans:
        session.add(PricingPlan(**data))
    for data in subscriptions:
        session.add(Subscription(**data))
    for data in invoices:
        session.add(Invoice(**data))
    for data in coupons:
        session.add(CouponCode(**data))

    for data in _tickets(now):
        session.add(SupportTicket(**data))
    for data in _announcements(now):
        session.add(Announcement(**data))
    for data in _resources(now):
        session.add(EducationalResource(**data))
    for data in _notifications(now):
        session.add(Notification(**data))

    session.add(PlatformSettingsRecord(id="platform", values=PlatformSettings().model_dump()))
    await session.flush()

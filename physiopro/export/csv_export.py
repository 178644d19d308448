"""CSV builders for admin and clinician downloads.

Output is plain comma-separated text joined with ``\\n``. A field is quoted
only when it contains a double quote, a comma or a newline, and embedded
quotes are doubled.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Iterable, Optional, Sequence

CLINICIAN_HEADERS = [
    "ID", "Name", "Email", "Role", "Specialization", "Account Status", "Joined Date",
    "Patient Count", "Appointment Count", "WhatsApp Number", "Current Plan ID",
    "Subscription Status", "City",
]

EXERCISE_HEADERS = [
    "ID", "Name", "Description", "Category", "Difficulty", "Body Parts", "Equipment", "Status",
    "Video URL", "Thumbnail URL", "Precautions", "Is Featured", "Default Sets", "Default Reps",
    "Default Hold",
]

ADHERENCE_HEADERS = [
    "Patient ID", "Patient Name", "Email", "Current Program ID", "Current Program Name",
    "Overall Adherence (%)", "Last Activity", "Adherence Status",
]


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def escape_csv_field(value: Any) -> str:
    text = _text(value)
    if '"' in text or "," in text or "\n" in text:
        return '"' + text.replace('"', '""') + '"'
    return text


def build_csv(headers: Sequence[str], rows: Iterable[Sequence[Any]]) -> str:
    lines = [",".join(escape_csv_field(h) for h in headers)]
    lines.extend(",".join(escape_csv_field(v) for v in row) for row in rows)
    return "\n".join(lines)


def _get(obj: Any, name: str) -> Optional[Any]:
    if isinstance(obj, dict):
        return obj.get(name)
    return getattr(obj, name, None)


def clinicians_csv(clinicians: Iterable[Any]) -> str:
    rows = (
        [
            _get(c, "id"), _get(c, "name"), _get(c, "email"), _get(c, "role"),
            _get(c, "specialization"), _get(c, "status"), _get(c, "joined_date"),
            _get(c, "patient_count"), _get(c, "appointment_count"), _get(c, "whatsapp_number"),
            _get(c, "current_plan_id"), _get(c, "subscription_status"), _get(c, "city"),
        ]
        for c in clinicians
    )
    return build_csv(CLINICIAN_HEADERS, rows)


def exercises_csv(exercises: Iterable[Any]) -> str:
    rows = (
        [
            _get(e, "id"), _get(e, "name"), _get(e, "description"), _get(e, "category"),
            _get(e, "difficulty"), "; ".join(_get(e, "body_parts") or []), _get(e, "equipment"),
            _get(e, "status"), _get(e, "video_url"), _get(e, "thumbnail_url"), _get(e, "precautions"),
            bool(_get(e, "is_featured")), _get(e, "sets"), _get(e, "reps"), _get(e, "hold"),
        ]
        for e in exercises
    )
    return build_csv(EXERCISE_HEADERS, rows)


def adherence_csv(rows: Iterable[Any]) -> str:
    data = (
        [
            _get(r, "patient_id"), _get(r, "patient_name"), _get(r, "email"),
            _get(r, "current_program_id"), _get(r, "current_program_name"),
            _get(r, "overall_adherence"), _get(r, "last_activity"), _get(r, "adherence_status"),
        ]
        for r in rows
    )
    return build_csv(ADHERENCE_HEADERS, data)

"""CSV export of clinician, exercise and adherence tables."""

from physiopro.export.csv_export import (
    ADHERENCE_HEADERS,
    CLINICIAN_HEADERS,
    EXERCISE_HEADERS,
    adherence_csv,
    build_csv,
    clinicians_csv,
    escape_csv_field,
    exercises_csv,
)

__all__ = [
    "ADHERENCE_HEADERS",
    "CLINICIAN_HEADERS",
    "EXERCISE_HEADERS",
    "adherence_csv",
    "build_csv",
    "clinicians_csv",
    "escape_csv_field",
    "exercises_csv",
]

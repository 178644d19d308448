"""Adherence, streak and badge calculations over program feedback."""

from __future__ import annotations

import math
from datetime import date, datetime, timedelta, timezone
from typing import Any, Iterable, Optional

HIGH_ADHERENCE = 80
MEDIUM_ADHERENCE = 60
EARLY_BIRD_HOUR = 8

BADGES = ("1_workout", "10_workouts", "25_workouts", "7_day_streak", "program_complete", "early_bird")


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _feedback(exercise: Any) -> list:
    if isinstance(exercise, dict):
        return exercise.get("feedback_history") or []
    return getattr(exercise, "feedback_history", None) or []


def _timestamp(entry: Any) -> datetime:
    value = entry.get("timestamp") if isinstance(entry, dict) else entry.timestamp
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    # Entries typed in by clinicians may lack an offset; they are read as UTC.
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def is_completed(exercise: Any) -> bool:
    """An exercise counts as done once the patient has left any feedback on it."""
    return len(_feedback(exercise)) > 0


def adherence_rate(exercises: Iterable[Any]) -> int:
    """Percentage of program exercises with feedback; 0 for an empty program."""
    exercises = list(exercises)
    if not exercises:
        return 0
    completed = sum(1 for ex in exercises if is_completed(ex))
    return _round_half_up(completed / len(exercises) * 100)


def adherence_tier(adherence: float) -> str:
    if adherence >= HIGH_ADHERENCE:
        return "High"
    if adherence >= MEDIUM_ADHERENCE:
        return "Medium"
    return "Low"


def overall_adherence(values: Iterable[float]) -> float:
    values = list(values)
    if not values:
        return 0.0
    return round(sum(values) / len(values), 1)


def feedback_times(exercises: Iterable[Any]) -> list[datetime]:
    return sorted(_timestamp(entry) for ex in exercises for entry in _feedback(ex))


def workout_streak(days: Iterable[date], today: date) -> int:
    """Consecutive days with a workout, ending today or yesterday."""
    active = set(days)
    if today in active:
        cursor = today
    elif today - timedelta(days=1) in active:
        cursor = today - timedelta(days=1)
    else:
        return 0

    streak = 0
    while cursor in active:
        streak += 1
        cursor -= timedelta(days=1)
    return streak


def earned_badges(
    workout_days: int,
    streak: int,
    program_complete: bool,
    early_bird: bool,
) -> list[str]:
    badges = []
    if workout_days >= 1:
        badges.append("1_workout")
    if workout_days >= 10:
        badges.append("10_workouts")
    if workout_days >= 25:
        badges.append("25_workouts")
    if streak >= 7:
        badges.append("7_day_streak")
    if program_complete:
        badges.append("program_complete")
    if early_bird:
        badges.append("early_bird")
    return badges


def build_progress(exercises: Iterable[Any], today: Optional[date] = None) -> dict[str, Any]:
    exercises = list(exercises)
    times = feedback_times(exercises)
    days = {t.date() for t in times}
    today = today or datetime.now(timezone.utc).date()

    streak = workout_streak(days, today)
    completed = sum(1 for ex in exercises if is_completed(ex))
    complete = bool(exercises) and completed == len(exercises)
    early = any(t.hour < EARLY_BIRD_HOUR for t in times)

    return {
        "streak": streak,
        "badges": earned_badges(len(days), streak, complete, early),
        "completion_rate": adherence_rate(exercises),
        "total_workouts_completed": len(days),
        "total_exercises_completed": completed,
    }


def latest_pain_level(exercises: Iterable[Any]) -> Optional[int]:
    latest: Optional[tuple[datetime, int]] = None
    for ex in exercises:
        for entry in _feedback(ex):
            ts = _timestamp(entry)
            pain = entry.get("pain_level") if isinstance(entry, dict) else entry.pain_level
            if latest is None or ts > latest[0]:
                latest = (ts, pain)
    return latest[1] if latest else None

"""Tests for adherence, streak and badge calculations."""

from __future__ import annotations

from datetime import date, datetime, timezone

from physiopro.core.progress import (
    adherence_rate,
    adherence_tier,
    build_progress,
    earned_badges,
    is_completed,
    latest_pain_level,
    overall_adherence,
    workout_streak,
)


def _entry(ts: str, pain: int = 2) -> dict:
    return {"pain_level": pain, "comments": "", "timestamp": ts, "acknowledged_by_clinician": False}


def _exercise(*entries: dict) -> dict:
    return {"exercise_id": "ex", "feedback_history": list(entries)}


# --- Adherence ---

def test_is_completed_needs_feedback():
    assert not is_completed(_exercise())
    assert is_completed(_exercise(_entry("2024-07-20T10:00:00Z")))


def test_adherence_rate_rounds_half_up():
    done = _exercise(_entry("2024-07-20T10:00:00Z"))
    assert adherence_rate([done, _exercise()]) == 50
    assert adherence_rate([done, _exercise(), _exercise()]) == 33
    assert adherence_rate([done, done, _exercise()]) == 67
    assert adherence_rate([done] * 7 + [_exercise()]) == 88


def test_adherence_rate_empty_program():
    assert adherence_rate([]) == 0


def test_adherence_tier_boundaries():
    assert adherence_tier(80) == "High"
    assert adherence_tier(79.9) == "Medium"
    assert adherence_tier(60) == "Medium"
    assert adherence_tier(59) == "Low"


def test_overall_adherence():
    assert overall_adherence([85, 60, 95, 40]) == 70.0
    assert overall_adherence([100, 33, 33]) == 55.3
    assert overall_adherence([]) == 0.0


# --- Streaks and badges ---

def test_streak_ending_today():
    today = date(2024, 7, 20)
    days = [date(2024, 7, 18), date(2024, 7, 19), date(2024, 7, 20)]
    assert workout_streak(days, today) == 3


def test_streak_ending_yesterday_still_counts():
    today = date(2024, 7, 20)
    assert workout_streak([date(2024, 7, 18), date(2024, 7, 19)], today) == 2


def test_streak_broken():
    today = date(2024, 7, 20)
    assert workout_streak([date(2024, 7, 17), date(2024, 7, 18)], today) == 0
    assert workout_streak([], today) == 0


def test_badges():
    assert earned_badges(0, 0, False, False) == []
    assert earned_badges(10, 7, True, True) == [
        "1_workout", "10_workouts", "7_day_streak", "program_complete", "early_bird",
    ]
    assert "25_workouts" in earned_badges(25, 0, False, False)


def test_build_progress():
    exercises = [
        _exercise(_entry("2024-07-19T07:30:00Z"), _entry("2024-07-20T18:00:00Z")),
        _exercise(_entry("2024-07-20T18:05:00Z")),
        _exercise(),
    ]
    progress = build_progress(exercises, today=date(2024, 7, 20))
    assert progress == {
        "streak": 2,
        "badges": ["1_workout", "early_bird"],
        "completion_rate": 67,
        "total_workouts_completed": 2,
        "total_exercises_completed": 2,
    }


def test_build_progress_accepts_datetimes():
    ts = datetime(2024, 7, 20, 9, 0, tzinfo=timezone.utc)
    exercises = [{"feedback_history": [{"pain_level": 3, "timestamp": ts}]}]
    progress = build_progress(exercises, today=date(2024, 7, 20))
    assert progress["badges"] == ["1_workout", "program_complete"]
    assert progress["streak"] == 1


def test_latest_pain_level():
    exercises = [
        _exercise(_entry("2024-07-19T10:00:00Z", pain=7)),
        _exercise(_entry("2024-07-20T10:00:00Z", pain=2), _entry("2024-07-18T10:00:00Z", pain=9)),
    ]
    assert latest_pain_level(exercises) == 2
    assert latest_pain_level([_exercise()]) is None


def test_naive_and_aware_timestamps_mix():
    exercises = [
        _exercise(_entry("2024-07-19T10:00:00", pain=6)),
        _exercise(_entry("2024-07-20T07:00:00+00:00", pain=3)),
    ]
    progress = build_progress(exercises, today=date(2024, 7, 20))
    assert progress["streak"] == 2
    assert latest_pain_level(exercises) == 3


def test_days_are_counted_in_utc():
    # 20:00 on the 19th in Los Angeles is 03:00 on the 20th in UTC.
    exercises = [_exercise(_entry("2024-07-19T20:00:00-07:00"))]
    assert build_progress(exercises, today=date(2024, 7, 20))["streak"] == 1
    assert build_progress(exercises, today=date(2024, 7, 21))["streak"] == 1
    assert build_progress(exercises, today=date(2024, 7, 22))["streak"] == 0
    assert "early_bird" in build_progress(exercises, today=date(2024, 7, 20))["badges"]


def test_default_today_is_utc():
    now = datetime.now(timezone.utc)
    exercises = [{"feedback_history": [{"pain_level": 2, "timestamp": now}]}]
    assert build_progress(exercises)["streak"] == 1

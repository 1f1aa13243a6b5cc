"""Scoring factors for ranking employees against an open slot.

Each factor returns ``(points, reasons)``. The point ranges are the
contract; the weight fractions in ``SCORING_WEIGHTS`` are labels only and
already agree with them.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from shiftboard.domain.entities import EmployeePreference, ShiftSlot, parse_hhmm

FactorResult = Tuple[float, List[str]]

FACTOR_POINTS = {
    "performance": 30,
    "attendance": 20,
    "hours_balance": 15,
    "availability": 15,
    "team_chemistry": 10,
    "training": 5,
    "preferences": 5,
}

SCORING_WEIGHTS = {name: points / 100 for name, points in FACTOR_POINTS.items()}


def clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


def _fmt(value: float) -> str:
    return f"{value:g}"


def is_time_in_preferred_range(slot: ShiftSlot, prefs: EmployeePreference) -> Optional[bool]:
    """True if the slot lies inside the preferred start-end range, None without one."""
    if not prefs.has_time_range:
        return None
    pref_start = parse_hhmm(prefs.preferred_start_time)
    pref_end = parse_hhmm(prefs.preferred_end_time)
    start, end = slot.start_minutes, slot.end_minutes
    if pref_end <= pref_start:
        pref_end += 24 * 60
        # after-midnight slots move into the same frame as the wrapped range
        if start < pref_start:
            start += 24 * 60
            end += 24 * 60
    return start >= pref_start and end <= pref_end


def performance_points(performance_score: Optional[float]) -> FactorResult:
    score = performance_score or 0.0
    points = clamp(score) / 100 * FACTOR_POINTS["performance"]
    reasons = []
    if score >= 80:
        reasons.append(f"High performer ({_fmt(score)})")
    elif score < 50:
        reasons.append(f"Performance concerns ({_fmt(score)})")
    return points, reasons


def attendance_points(reliability: Optional[float], neutral: float = 70.0) -> FactorResult:
    value = neutral if reliability is None else reliability
    points = clamp(value) / 100 * FACTOR_POINTS["attendance"]
    reasons = []
    if value >= 90:
        reasons.append(f"Excellent attendance ({_fmt(value)}%)")
    elif value < 70:
        reasons.append(f"Attendance concerns ({_fmt(value)}%)")
    return points, reasons


def hours_balance_points(hours_scheduled: float, ideal_hours: float = 30.0) -> FactorResult:
    """Reward under-scheduled employees, penalize over-scheduled ones."""
    diff = ideal_hours - hours_scheduled
    if diff > 10:
        return 15, [f"Under-scheduled ({_fmt(hours_scheduled)}h, needs {_fmt(diff)}h more)"]
    if diff > 5:
        return 12, [f"Could use more hours ({_fmt(hours_scheduled)}h)"]
    if diff >= -5:
        return 10, []
    if diff >= -10:
        return 5, [f"Already scheduled {_fmt(hours_scheduled)}h this week"]
    return 0, [f"Over-scheduled ({_fmt(hours_scheduled)}h)"]


def availability_points(
    already_scheduled: bool,
    day: str,
    slot: ShiftSlot,
    prefs: EmployeePreference,
) -> FactorResult:
    if already_scheduled:
        return 0, ["Already scheduled for this day"]

    points = 10
    reasons = []
    if day in prefs.preferred_days:
        points += 3
        reasons.append(f"Prefers {day}")
    if day in prefs.avoid_days:
        points -= 5
        reasons.append(f"Avoids {day}")
    bucket = slot.time_bucket
    if bucket in prefs.preferred_times:
        points += 2
        reasons.append(f"Prefers {bucket} shifts")
    in_range = is_time_in_preferred_range(slot, prefs)
    if in_range is True:
        points += 2
        reasons.append("Matches preferred time range")
    elif in_range is False:
        points -= 2
        reasons.append("Outside preferred time range")
    return min(points, FACTOR_POINTS["availability"]), reasons


def team_chemistry_points(same_side_count: int) -> FactorResult:
    # No pairing history is used; 8 is the neutral value.
    if same_side_count == 0:
        return 10, ["First person scheduled for this side"]
    return 8, []


def training_points(needs_training: bool) -> FactorResult:
    if needs_training:
        return 2, ["Training required"]
    return 5, []


def preference_points(day: str, slot: ShiftSlot, prefs: EmployeePreference) -> FactorResult:
    points = 5
    reasons = []
    if day in prefs.preferred_days:
        points = 5
        reasons.append("Preferred day match")
    elif prefs.preferred_days:
        points = 3

    if slot.time_bucket in prefs.preferred_times:
        points = min(5, points + 1)
        reasons.append("Preferred time match")

    if day in prefs.avoid_days:
        points = 0
        reasons.append("Day is on avoid list")
    return points, reasons


def confidence_for(score: float, high: float = 70.0, medium: float = 50.0) -> str:
    if score >= high:
        return "high"
    if score >= medium:
        return "medium"
    return "low"


def finalize_score(factors: dict) -> float:
    """Sum factor points, clamp to 0..100, round to one decimal."""
    return round(clamp(sum(factors.values())), 1)

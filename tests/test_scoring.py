"""Tests for scoring factors."""

import pytest

from shiftboard.domain.entities import EmployeePreference, EmployeeStats, ShiftSlot, Side
from shiftboard.engine.recommend import BLOCKED_REASON, RecommendationEngine, ScoringContext
from shiftboard.services import scoring
from shiftboard.services.stats import StatsAggregator


@pytest.fixture
def host(slots):
    return next(s for s in slots if s.id == "foh-host")


@pytest.fixture
def bartender(slots):
    return next(s for s in slots if s.id == "foh-bartender")


@pytest.fixture
def engine(grid, roster, guard, slots):
    return RecommendationEngine(grid, roster, guard, StatsAggregator(roster, slots))


def test_factor_ranges_sum_to_100():
    assert sum(scoring.FACTOR_POINTS.values()) == 100
    assert sum(scoring.SCORING_WEIGHTS.values()) == pytest.approx(1.0)


def test_ideal_employee_without_preferences_scores_90(host):
    prefs = EmployeePreference()
    factors = {
        "performance": scoring.performance_points(100)[0],
        "attendance": scoring.attendance_points(100)[0],
        "hours_balance": scoring.hours_balance_points(30)[0],
        "availability": scoring.availability_points(False, "Monday", host, prefs)[0],
        "team_chemistry": scoring.team_chemistry_points(0)[0],
        "training": scoring.training_points(False)[0],
        "preferences": scoring.preference_points("Monday", host, prefs)[0],
    }
    assert scoring.finalize_score(factors) == 90.0


def test_engine_scores_ideal_employee(engine, roster, host):
    context = ScoringContext(
        stats={
            "emp_a": EmployeeStats(
                hours_scheduled=30,
                attendance_reliability=100,
                performance_band="elite",
                performance_score=100,
            )
        },
    )
    result = engine.score(roster.require("emp_a"), host, "2025-07-07", context)

    assert result.score == 90.0
    assert result.confidence == "high"
    assert not result.blocked
    assert set(result.factors) == set(scoring.FACTOR_POINTS)
    assert "High performer (100)" in result.reasons
    assert "Excellent attendance (100%)" in result.reasons


def test_blocked_employee_scores_zero(engine, roster, host):
    result = engine.score(roster.require("emp_b"), host, "2025-07-09")

    assert result.score == 0
    assert result.blocked
    assert result.reasons == [BLOCKED_REASON]
    assert result.factors == {}


def test_performance_points():
    assert scoring.performance_points(None) == (0.0, ["Performance concerns (0)"])
    points, reasons = scoring.performance_points(85)
    assert points == pytest.approx(25.5)
    assert reasons == ["High performer (85)"]
    assert scoring.performance_points(60)[1] == []


def test_attendance_points_default_to_neutral():
    points, reasons = scoring.attendance_points(None)
    assert points == pytest.approx(14.0)
    assert reasons == []
    assert scoring.attendance_points(50)[1] == ["Attendance concerns (50%)"]


@pytest.mark.parametrize(
    "hours,expected",
    [(0, 15), (19, 15), (20, 12), (24, 12), (25, 10), (35, 10), (36, 5), (40, 5), (41, 0)],
)
def test_hours_balance_tiers(hours, expected):
    assert scoring.hours_balance_points(hours)[0] == expected


def test_availability_already_scheduled(host):
    assert scoring.availability_points(True, "Monday", host, EmployeePreference()) == (
        0,
        ["Already scheduled for this day"],
    )


def test_availability_preferences(host):
    assert scoring.availability_points(False, "Monday", host, EmployeePreference())[0] == 10
    prefers = EmployeePreference(preferred_days=["Monday"])
    assert scoring.availability_points(False, "Monday", host, prefers)[0] == 13
    avoids = EmployeePreference(avoid_days=["Monday"])
    assert scoring.availability_points(False, "Monday", host, avoids)[0] == 5


def test_availability_is_capped(host):
    prefs = EmployeePreference(
        preferred_days=["Monday"],
        preferred_times=["morning"],
        preferred_start_time="09:00",
        preferred_end_time="19:00",
    )
    points, reasons = scoring.availability_points(False, "Monday", host, prefs)
    assert points == 15
    assert "Matches preferred time range" in reasons


def test_time_range_crossing_midnight(bartender):
    late = EmployeePreference(preferred_start_time="15:00", preferred_end_time="01:00")
    early = EmployeePreference(preferred_start_time="09:00", preferred_end_time="17:00")

    assert scoring.is_time_in_preferred_range(bartender, late) is True
    assert scoring.is_time_in_preferred_range(bartender, early) is False
    assert scoring.is_time_in_preferred_range(bartender, EmployeePreference()) is None

    overnight = EmployeePreference(preferred_start_time="22:00", preferred_end_time="06:00")
    small_hours = ShiftSlot("late", "Late", Side.BOH, "01:00", "05:00", 4)
    assert scoring.is_time_in_preferred_range(small_hours, overnight) is True
    assert scoring.is_time_in_preferred_range(bartender, overnight) is False
    points, reasons = scoring.availability_points(False, "Monday", small_hours, overnight)
    assert points == 12
    assert "Matches preferred time range" in reasons


def test_preference_points(host):
    assert scoring.preference_points("Monday", host, EmployeePreference())[0] == 5
    other_day = EmployeePreference(preferred_days=["Friday"])
    assert scoring.preference_points("Monday", host, other_day)[0] == 3
    plus_time = EmployeePreference(preferred_days=["Friday"], preferred_times=["morning"])
    assert scoring.preference_points("Monday", host, plus_time)[0] == 4
    avoided = EmployeePreference(preferred_days=["Monday"], avoid_days=["Monday"])
    assert scoring.preference_points("Monday", host, avoided)[0] == 0


def test_team_chemistry_and_training():
    assert scoring.team_chemistry_points(0)[0] == 10
    assert scoring.team_chemistry_points(2)[0] == 8
    assert scoring.training_points(True) == (2, ["Training required"])
    assert scoring.training_points(False) == (5, [])


def test_confidence_levels():
    assert scoring.confidence_for(70) == "high"
    assert scoring.confidence_for(69.9) == "medium"
    assert scoring.confidence_for(50) == "medium"
    assert scoring.confidence_for(49.9) == "low"


def test_final_score_is_clamped_and_rounded():
    assert scoring.finalize_score({"a": 60, "b": 60}) == 100
    assert scoring.finalize_score({"a": -5}) == 0
    assert scoring.finalize_score({"a": 10.04, "b": 0.02}) == 10.1


@pytest.mark.parametrize(
    "start,bucket",
    [("05:00", "morning"), ("11:59", "morning"), ("12:00", "afternoon"), ("16:00", "afternoon"),
     ("17:00", "evening"), ("22:00", "night"), ("03:00", "night")],
)
def test_time_bucket(start, bucket):
    slot = ShiftSlot("x", "X", Side.FOH, start, "23:00", 8)
    assert slot.time_bucket == bucket

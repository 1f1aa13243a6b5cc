"""Tests for per-employee weekly statistics."""

import pytest

from shiftboard.domain.entities import (
    AttendanceSummary,
    RankingEntry,
    RankingSnapshot,
    ShiftSlot,
    Side,
)
from shiftboard.services.stats import StatsAggregator, performance_trend


def _snapshot(label, **bands):
    return RankingSnapshot(
        label,
        {band: [RankingEntry(uid, score=score) for uid, score in entries] for band, entries in bands.items()},
    )


@pytest.fixture
def current():
    return _snapshot(
        "Jun 30 - Jul 13",
        elite=[("emp_a", 95), ("emp_c", 90)],
        strong=[("emp_v", 82)],
        needsTraining=[("emp_w", 40)],
    )


def test_hours_and_shifts_from_slot_hours(roster, slots, grid):
    grid.assign("foh-host", "emp_a", "2025-07-07")
    grid.assign("foh-host", "emp_a", "2025-07-08")
    grid.assign("foh-bartender", "emp_a", "2025-07-09")

    stats = StatsAggregator(roster, slots).compute(grid.days)

    assert stats["emp_a"].shifts_scheduled == 3
    assert stats["emp_a"].hours_scheduled == 24
    assert stats["emp_c"].shifts_scheduled == 0
    assert stats["emp_c"].hours_scheduled == 0


def test_custom_slot_hours(roster):
    slots = [ShiftSlot("brunch", "Brunch", Side.FOH, "09:00", "15:00", 6)]
    days = {"2025-07-12": {"brunch": "emp_a"}, "2025-07-13": {"brunch": "emp_a"}}
    assert StatsAggregator(roster, slots).compute(days)["emp_a"].hours_scheduled == 12


def test_unknown_slot_counts_default_hours(roster, slots):
    stats = StatsAggregator(roster, slots).compute({"2025-07-07": {"retired-slot": "emp_a"}})
    assert stats["emp_a"].hours_scheduled == 8


def test_assigned_employee_missing_from_roster_gets_stats(roster, slots):
    stats = StatsAggregator(roster, slots).compute({"2025-07-07": {"foh-host": "former"}})
    assert stats["former"].shifts_scheduled == 1


def test_reliability_defaults_to_neutral(roster, slots):
    attendance = {"emp_a": AttendanceSummary(reliability=92)}
    stats = StatsAggregator(roster, slots, attendance=attendance).compute({})

    assert stats["emp_a"].attendance_reliability == 92
    assert stats["emp_c"].attendance_reliability == 70


def test_ranking_positions_run_across_bands(roster, slots, current):
    stats = StatsAggregator(roster, slots, current_ranking=current).compute({})

    assert stats["emp_a"].ranking_position == 1
    assert stats["emp_c"].ranking_position == 2
    assert stats["emp_v"].ranking_position == 3
    assert stats["emp_w"].ranking_position == 4
    assert stats["emp_v"].performance_band == "strong"
    assert stats["emp_v"].performance_score == 82
    assert stats["emp_w"].needs_training
    assert not stats["emp_a"].needs_training
    assert stats["emp_e"].performance_band is None


def test_trend_band_dominates_score(current):
    previous = _snapshot("Jun 16 - Jun 29", strong=[("emp_a", 99)], elite=[("emp_v", 85)])
    assert performance_trend("emp_a", current, previous) == "↑"
    assert performance_trend("emp_v", current, previous) == "↓"


def test_trend_same_band_compares_score(current):
    previous = _snapshot("Jun 16 - Jun 29", elite=[("emp_a", 90), ("emp_c", 92)], needsTraining=[("emp_w", 40)])
    assert performance_trend("emp_a", current, previous) == "↑"
    assert performance_trend("emp_c", current, previous) == "↓"
    assert performance_trend("emp_w", current, previous) == "→"


def test_trend_missing_data(current):
    previous = _snapshot("Jun 16 - Jun 29", elite=[("emp_a", 90)])
    assert performance_trend("emp_c", current, previous) is None
    assert performance_trend("emp_a", current, None) is None
    assert performance_trend("emp_a", None, previous) is None


def test_compute_sets_trend(roster, slots, current):
    previous = _snapshot("Jun 16 - Jun 29", strong=[("emp_a", 70)])
    stats = StatsAggregator(roster, slots, current_ranking=current, previous_ranking=previous).compute({})
    assert stats["emp_a"].performance_trend == "↑"
    assert stats["emp_c"].performance_trend is None

"""Per-employee statistics for the week being scheduled."""

from __future__ import annotations

from typing import Dict, Mapping, Optional, Sequence

from shiftboard.domain.entities import (
    BAND_LEVEL,
    AttendanceSummary,
    EmployeeStats,
    RankingSnapshot,
    ShiftSlot,
)
from shiftboard.services.roster import RosterIndex

DaysMap = Mapping[str, Mapping[str, Optional[str]]]


def performance_trend(
    uid: str,
    current: RankingSnapshot | None,
    previous: RankingSnapshot | None,
) -> Optional[str]:
    """Compare an employee's band, then raw score, between two snapshots."""
    if current is None or previous is None:
        return None
    now = current.locate(uid)
    before = previous.locate(uid)
    if now is None or before is None:
        return None

    now_band, now_entry, _ = now
    before_band, before_entry, _ = before
    now_level = BAND_LEVEL.get(now_band, 0)
    before_level = BAND_LEVEL.get(before_band, 0)
    if now_level > before_level:
        return "↑"
    if now_level < before_level:
        return "↓"
    if now_entry.score > before_entry.score:
        return "↑"
    if now_entry.score < before_entry.score:
        return "↓"
    return "→"


class StatsAggregator:
    """Combines in-grid hours with attendance and ranking feeds."""

    def __init__(
        self,
        roster: RosterIndex,
        slots: Sequence[ShiftSlot],
        attendance: Mapping[str, AttendanceSummary] | None = None,
        current_ranking: RankingSnapshot | None = None,
        previous_ranking: RankingSnapshot | None = None,
        neutral_reliability: float = 70.0,
        default_slot_hours: float = 8.0,
    ):
        self.roster = roster
        self.slot_hours = {s.id: s.hours for s in slots}
        self.attendance = dict(attendance or {})
        self.current_ranking = current_ranking
        self.previous_ranking = previous_ranking
        self.neutral_reliability = neutral_reliability
        self.default_slot_hours = default_slot_hours

    def compute(self, days: DaysMap) -> Dict[str, EmployeeStats]:
        """Statistics keyed by employee id for the given week of assignments.

        Args:
            days: ``{dateISO: {slotId: employeeId | None}}`` for the 7 days.
        """
        stats: Dict[str, EmployeeStats] = {emp.id: EmployeeStats() for emp in self.roster}

        for day in days.values():
            for slot_id, uid in day.items():
                if not uid:
                    continue
                entry = stats.setdefault(uid, EmployeeStats())
                entry.shifts_scheduled += 1
                entry.hours_scheduled += self.slot_hours.get(slot_id, self.default_slot_hours)

        for uid, entry in stats.items():
            summary = self.attendance.get(uid)
            entry.attendance_reliability = (
                summary.reliability if summary is not None else self.neutral_reliability
            )

        if self.current_ranking is not None:
            for band, ranked, position in self.current_ranking.ordered():
                entry = stats.get(ranked.uid)
                if entry is None:
                    continue
                entry.performance_band = band
                entry.performance_score = ranked.score
                entry.ranking_position = position
                entry.needs_training = band == "needsTraining"

        for uid, entry in stats.items():
            entry.performance_trend = performance_trend(
                uid, self.current_ranking, self.previous_ranking
            )
        return stats

"""Candidate scoring and ranking for open slots."""

from __future__ import annotations

import logging
from concurrent.futures import Executor, Future
from dataclasses import dataclass, field
from typing import Dict, List, Mapping

from shiftboard.config import ScoringConfig
from shiftboard.domain.entities import Employee, EmployeePreference, EmployeeStats, ShiftSlot, Suggestion
from shiftboard.engine.grid import WeekGrid
from shiftboard.services import scoring
from shiftboard.services.dates import day_name, to_iso
from shiftboard.services.eligibility import EligibilityGuard
from shiftboard.services.roster import RosterIndex
from shiftboard.services.stats import StatsAggregator

logger = logging.getLogger(__name__)

WeekSuggestions = Dict[str, Dict[str, List[Suggestion]]]

BLOCKED_REASON = "Blocked: approved time off"
DEFAULT_REASON = "Good fit for this shift"


@dataclass
class ScoringContext:
    """Per-employee stats and preferences computed once per ranking pass."""

    stats: Mapping[str, EmployeeStats] = field(default_factory=dict)
    preferences: Mapping[str, EmployeePreference] = field(default_factory=dict)


class RecommendationEngine:
    """Scores and ranks employees for a slot on a date."""

    def __init__(
        self,
        grid: WeekGrid,
        roster: RosterIndex,
        guard: EligibilityGuard,
        stats: StatsAggregator,
        preferences: Mapping[str, EmployeePreference] | None = None,
        cfg: ScoringConfig | None = None,
    ):
        self.grid = grid
        self.roster = roster
        self.guard = guard
        self.stats = stats
        self.preferences = dict(preferences or {})
        self.cfg = cfg or ScoringConfig()
        self.cached_suggestions: WeekSuggestions = {}

    def build_context(self) -> ScoringContext:
        return ScoringContext(stats=self.stats.compute(self.grid.days), preferences=self.preferences)

    def score(
        self,
        employee: Employee,
        slot: ShiftSlot,
        date,
        context: ScoringContext | None = None,
    ) -> Suggestion:
        """
        Score one employee for one slot on one date.

        Args:
            employee: Candidate employee
            slot: Slot to fill
            date: Date of the shift (ISO string or date)
            context: Precomputed stats/preferences; built from the grid if omitted

        Returns:
            Suggestion with the 0-100 score and per-factor points
        """
        iso = to_iso(date)
        if self.guard.is_blocked(iso, employee.id):
            return Suggestion(
                employee=employee,
                score=0.0,
                factors={},
                reasons=[BLOCKED_REASON],
                confidence="low",
                blocked=True,
            )

        context = context or self.build_context()
        stats = context.stats.get(employee.id) or EmployeeStats()
        prefs = context.preferences.get(employee.id) or EmployeePreference()
        weekday = day_name(iso)
        already_scheduled = employee.id in self.grid.employees_on(iso)
        same_side = len(self.grid.side_assignments(iso, slot.side))

        results = {
            "performance": scoring.performance_points(stats.performance_score),
            "attendance": scoring.attendance_points(
                stats.attendance_reliability, self.cfg.neutral_reliability
            ),
            "hours_balance": scoring.hours_balance_points(
                stats.hours_scheduled, self.cfg.ideal_hours
            ),
            "availability": scoring.availability_points(already_scheduled, weekday, slot, prefs),
            "team_chemistry": scoring.team_chemistry_points(same_side),
            "training": scoring.training_points(stats.needs_training),
            "preferences": scoring.preference_points(weekday, slot, prefs),
        }

        factors = {name: points for name, (points, _) in results.items()}
        reasons = [reason for _, notes in results.values() for reason in notes]
        total = scoring.finalize_score(factors)
        return Suggestion(
            employee=employee,
            score=total,
            factors=factors,
            reasons=reasons or [DEFAULT_REASON],
            confidence=scoring.confidence_for(
                total, self.cfg.high_confidence, self.cfg.medium_confidence
            ),
            blocked=False,
        )

    def candidates(self, slot: ShiftSlot, date) -> List[Employee]:
        """Employees on the slot's side with no assignment that day, in roster order."""
        busy = self.grid.employees_on(date)
        return [e for e in self.roster.by_side(slot.side) if e.id not in busy]

    def get_suggestions_for_slot(
        self,
        slot_id: str,
        date,
        top_n: int | None = None,
        context: ScoringContext | None = None,
    ) -> List[Suggestion]:
        top_n = self.cfg.top_n if top_n is None else top_n
        if top_n <= 0:
            return []
        slot = self.grid.get_slot(slot_id)
        iso = to_iso(date)
        self.grid.day(iso)  # validates the date belongs to the week

        pool = self.candidates(slot, iso)
        if not pool:
            return []
        context = context or self.build_context()
        scored = [self.score(emp, slot, iso, context) for emp in pool]
        eligible = [s for s in scored if not s.blocked]
        # sorted() is stable, so ties keep roster order.
        eligible = sorted(eligible, key=lambda s: -s.score)
        return eligible[:top_n]

    def compute_full_week(self, top_n: int | None = None) -> WeekSuggestions:
        """Suggestions for every open slot of the week. Pure; does not touch the cache."""
        context = self.build_context()
        result: WeekSuggestions = {}
        for iso in self.grid.dates:
            day = self.grid.days[iso]
            day_suggestions: Dict[str, List[Suggestion]] = {}
            for slot in self.grid.slots:
                if day.get(slot.id):
                    continue
                found = self.get_suggestions_for_slot(slot.id, iso, top_n, context)
                if found:
                    day_suggestions[slot.id] = found
            if day_suggestions:
                result[iso] = day_suggestions
        return result

    def generate_full_week_suggestions(self, top_n: int | None = None) -> WeekSuggestions:
        self.cached_suggestions = self.compute_full_week(top_n)
        logger.debug(
            "Generated suggestions for %d open slot(s)",
            sum(len(d) for d in self.cached_suggestions.values()),
        )
        return self.cached_suggestions

    def submit_full_week_suggestions(self, executor: Executor, top_n: int | None = None) -> Future:
        """Run :meth:`compute_full_week` on an executor.

        Cancelling or ignoring the future leaves the cache untouched; call
        :meth:`cache_suggestions` with the result to adopt it.
        """
        return executor.submit(self.compute_full_week, top_n)

    def cache_suggestions(self, suggestions: WeekSuggestions) -> None:
        self.cached_suggestions = suggestions

    def apply_ai_suggestion(self, date, slot_id: str, employee) -> None:
        """Assign the suggested employee and stop offering that slot."""
        iso = to_iso(date)
        self.grid.assign(slot_id, employee, iso)
        day = self.cached_suggestions.get(iso)
        if day is None:
            return
        day.pop(slot_id, None)
        if not day:
            del self.cached_suggestions[iso]

"""WeekSession - loads every feed for a week and coordinates saves and publishing."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from shiftboard.config import SchedulerConfig
from shiftboard.domain.entities import WeekStatus
from shiftboard.domain.repositories import (
    AttendanceRepository,
    PreferenceRepository,
    RankingRepository,
    ScheduleRepository,
    ScheduleRequestRepository,
    StaffRepository,
)
from shiftboard.engine.grid import WeekGrid
from shiftboard.engine.publish import PublishController
from shiftboard.engine.recommend import RecommendationEngine
from shiftboard.errors import IncompleteWeekError, LockedScheduleError, ValidationError
from shiftboard.services.attendance import summarize_attendance
from shiftboard.services.dates import normalize_week_ending, to_iso
from shiftboard.services.eligibility import EligibilityGuard
from shiftboard.services.roster import RosterIndex
from shiftboard.services.stats import StatsAggregator

logger = logging.getLogger(__name__)


@dataclass
class WeekSession:
    """
    Everything needed to edit one week.

    The engine objects are pure and in-memory; this class is the only place
    that talks to the store. Each save is a single document write, and the
    grid is re-read from the store after every successful write.
    """

    db: Session
    cfg: SchedulerConfig
    roster: RosterIndex
    guard: EligibilityGuard
    stats: StatsAggregator
    grid: WeekGrid
    engine: RecommendationEngine
    controller: PublishController

    @property
    def week_ending(self) -> date:
        return self.grid.week_ending

    def refresh(self, day=None) -> None:
        """Re-read the persisted week, or just one day of it."""
        dates = None if day is None else [day]
        self.grid.reload(ScheduleRepository.get(self.db, self.week_ending), dates=dates)

    def _ensure_draft(self) -> None:
        if self.grid.is_locked:
            raise LockedScheduleError(
                f"Week ending {self.week_ending.isoformat()} is published and locked"
            )

    def save_day(self, day) -> None:
        """Persist one complete, edited day (merge into the week document)."""
        self._ensure_draft()
        iso = to_iso(day)
        if not self.grid.is_day_complete(iso):
            raise ValidationError(f"Cannot save {iso}: every slot must be filled")
        if not self.grid.is_dirty(iso):
            raise ValidationError(f"Nothing to save for {iso}")
        ScheduleRepository.save_day(self.db, self.week_ending, iso, self.grid.day_payload(iso))
        self.refresh(iso)
        logger.info("Saved %s", iso)

    def save_draft(self, day) -> None:
        """Persist a partial day without the completeness gate."""
        self._ensure_draft()
        iso = to_iso(day)
        ScheduleRepository.save_day(self.db, self.week_ending, iso, self.grid.day_payload(iso))
        self.refresh(iso)
        logger.info("Saved draft of %s", iso)

    def save_week(self) -> None:
        """Persist the whole week as a draft once every day has been saved."""
        self._ensure_draft()
        missing = self.grid.missing_slots()
        if missing:
            raise IncompleteWeekError(
                f"Cannot save week: {len(missing)} slot-day(s) still open", missing
            )
        unsaved = [iso for iso in self.grid.dates if not self.grid.is_saved(iso)]
        if unsaved:
            raise ValidationError(f"Save each day first; unsaved: {', '.join(unsaved)}")
        days = {iso: self.grid.day_payload(iso) for iso in self.grid.dates}
        ScheduleRepository.save_week(self.db, self.week_ending, days, status=WeekStatus.DRAFT.value)
        self.refresh()
        logger.info("Week ending %s saved (draft)", self.week_ending.isoformat())

    def publish(self, actor: str = "system") -> None:
        """Publish the week. Status flips in memory only after the write commits."""
        days = {iso: self.grid.day_payload(iso) for iso in self.grid.dates}

        def persist(entry):
            ScheduleRepository.save_week(
                self.db, self.week_ending, days, status=WeekStatus.PUBLISHED.value, audit=entry
            )

        self.controller.publish(actor, persist=persist)
        self.refresh()

    def unpublish(self, actor: str, reason: str) -> None:
        """Audited override reopening a published week for edits."""

        def persist(entry):
            ScheduleRepository.set_status(
                self.db, self.week_ending, WeekStatus.DRAFT.value, audit=entry
            )

        self.controller.unpublish(actor, reason, persist=persist)
        self.refresh()


def load_week_session(
    db: Session,
    week_ending,
    cfg: SchedulerConfig | None = None,
    as_of: Optional[date] = None,
) -> WeekSession:
    """
    Read every feed for a week and wire the engine together.

    Args:
        db: Database session
        week_ending: Sunday anchor (non-Sundays roll forward)
        cfg: SchedulerConfig (defaults if omitted)
        as_of: End of the attendance window (default: today)

    Returns:
        A WeekSession with the persisted grid loaded
    """
    cfg = cfg or SchedulerConfig()
    anchor = normalize_week_ending(week_ending)
    slots = cfg.shift_slots()

    roster = RosterIndex.from_pools(StaffRepository.get_pools(db))
    guard = EligibilityGuard(ScheduleRequestRepository.get_approved_blocks(db, anchor))
    preferences = PreferenceRepository.get_map(db, roster.ids())

    as_of = as_of or date.today()
    window_start = as_of - timedelta(days=cfg.attendance.window_days)
    attendance = summarize_attendance(
        AttendanceRepository.get_window(db, window_start, as_of),
        as_of,
        employee_ids=roster.ids(),
        cfg=cfg.attendance,
    )

    period_id = anchor.isoformat()
    current = RankingRepository.get(db, period_id)
    previous = (
        RankingRepository.get_previous(db, period_id, cfg.ranking_period_days) if current else None
    )

    stats = StatsAggregator(
        roster,
        slots,
        attendance=attendance,
        current_ranking=current,
        previous_ranking=previous,
        neutral_reliability=cfg.scoring.neutral_reliability,
        default_slot_hours=cfg.scoring.default_slot_hours,
    )
    grid = WeekGrid.from_document(
        ScheduleRepository.get(db, anchor),
        anchor,
        slots,
        guard=guard,
        roster=roster,
        allow_double_booking=cfg.allow_double_booking,
    )
    engine = RecommendationEngine(grid, roster, guard, stats, preferences, cfg.scoring)
    logger.info(
        "Loaded week ending %s: %d staff, %d time-off block(s), status %s",
        period_id,
        len(roster),
        len(guard),
        grid.status.value,
    )
    return WeekSession(
        db=db,
        cfg=cfg,
        roster=roster,
        guard=guard,
        stats=stats,
        grid=grid,
        engine=engine,
        controller=PublishController(grid),
    )

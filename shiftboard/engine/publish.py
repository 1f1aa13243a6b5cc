"""Draft / published lifecycle for a scheduling week."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable

from shiftboard.domain.entities import AuditEntry, WeekStatus
from shiftboard.engine.grid import WeekGrid
from shiftboard.errors import IncompleteWeekError, LockedScheduleError, ValidationError

logger = logging.getLogger(__name__)

PersistHook = Callable[[AuditEntry], None]


class DayState(Enum):
    INCOMPLETE = "incomplete"
    COMPLETE = "complete"


class PublishController:
    """Gates DRAFT -> PUBLISHED on week completion.

    The reverse transition exists only as an audited override
    (:meth:`unpublish`) that must name who did it and why.
    """

    def __init__(self, grid: WeekGrid):
        self.grid = grid

    @property
    def state(self) -> WeekStatus:
        return self.grid.state.status

    def day_state(self, date) -> DayState:
        return DayState.COMPLETE if self.grid.is_day_complete(date) else DayState.INCOMPLETE

    def can_save_day(self, date) -> bool:
        return self.grid.can_save_day(date)

    def can_save_week(self) -> bool:
        return self.grid.can_save_week()

    def can_publish(self) -> bool:
        return self.state is WeekStatus.DRAFT and self.grid.is_week_complete()

    def check_publishable(self) -> None:
        """Raise unless :meth:`publish` would succeed. Never mutates."""
        if self.state is not WeekStatus.DRAFT:
            raise LockedScheduleError(
                f"Week ending {self.grid.week_ending.isoformat()} is already published"
            )
        missing = self.grid.missing_slots()
        if missing:
            raise IncompleteWeekError(
                f"Cannot publish: {len(missing)} slot-day(s) still open", missing
            )

    def publish(self, actor: str = "system", persist: PersistHook | None = None) -> AuditEntry:
        """Transition DRAFT -> PUBLISHED.

        ``persist`` is called with the audit entry before the status flips;
        if it raises, nothing changes in memory.
        """
        self.check_publishable()
        entry = AuditEntry(action="publish", actor=actor)
        if persist is not None:
            persist(entry)
        self.grid.state.status = WeekStatus.PUBLISHED
        self.grid.state.audit.append(entry)
        logger.info("Week ending %s published by %s", self.grid.week_ending.isoformat(), actor)
        return entry

    def check_unpublishable(self, actor: str, reason: str) -> None:
        if self.state is not WeekStatus.PUBLISHED:
            raise ValidationError("Only a published week can be reopened")
        if not str(actor or "").strip():
            raise ValidationError("Reopening a published week requires an actor")
        if not str(reason or "").strip():
            raise ValidationError("Reopening a published week requires a reason")

    def unpublish(self, actor: str, reason: str, persist: PersistHook | None = None) -> AuditEntry:
        self.check_unpublishable(actor, reason)
        entry = AuditEntry(action="unpublish", actor=actor.strip(), reason=reason.strip())
        if persist is not None:
            persist(entry)
        self.grid.state.status = WeekStatus.DRAFT
        self.grid.state.audit.append(entry)
        logger.warning(
            "Week ending %s reopened by %s: %s",
            self.grid.week_ending.isoformat(),
            entry.actor,
            entry.reason,
        )
        return entry

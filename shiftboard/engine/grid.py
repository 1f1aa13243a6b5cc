"""Week assignment grid: day x slot matrix for one scheduling week."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Mapping, Optional, Sequence, Set, Tuple

from shiftboard.domain.entities import AuditEntry, Employee, ShiftSlot, Side, WeekStatus
from shiftboard.errors import (
    BlockedAssignmentError,
    DoubleBookingError,
    LockedScheduleError,
    ValidationError,
)
from shiftboard.services.dates import normalize_week_ending, to_iso, week_day_isos
from shiftboard.services.eligibility import EligibilityGuard
from shiftboard.services.roster import RosterIndex

logger = logging.getLogger(__name__)

DaySchedule = Dict[str, Optional[str]]


@dataclass
class ScheduleEngineState:
    """All mutable scheduling state for one week.

    Only ``WeekGrid`` mutations and ``PublishController`` transitions write
    to it.
    """

    week_ending: date
    status: WeekStatus = WeekStatus.DRAFT
    days: Dict[str, DaySchedule] = field(default_factory=dict)
    dirty: Dict[str, bool] = field(default_factory=dict)
    saved: Dict[str, bool] = field(default_factory=dict)
    audit: List[AuditEntry] = field(default_factory=list)


class WeekGrid:
    """Owns the assignment matrix, dirty/saved tracking and completion queries."""

    def __init__(
        self,
        week_ending,
        slots: Sequence[ShiftSlot],
        guard: EligibilityGuard | None = None,
        roster: RosterIndex | None = None,
        allow_double_booking: bool = False,
        state: ScheduleEngineState | None = None,
    ):
        anchor = normalize_week_ending(week_ending)
        if to_iso(week_ending) != anchor.isoformat():
            logger.warning(
                "Week ending %s is not a Sunday; using %s", to_iso(week_ending), anchor.isoformat()
            )
        self.slots: Tuple[ShiftSlot, ...] = tuple(slots)
        self._slot_index = {s.id: s for s in self.slots}
        self.guard = guard or EligibilityGuard()
        self.roster = roster
        self.allow_double_booking = allow_double_booking
        self.dates: List[str] = week_day_isos(anchor)

        self.state = state or ScheduleEngineState(week_ending=anchor)
        for iso in self.dates:
            day = self.state.days.setdefault(iso, {})
            for s in self.slots:
                day.setdefault(s.id, None)
            self.state.dirty.setdefault(iso, False)
            self.state.saved.setdefault(iso, False)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------
    @property
    def week_ending(self) -> date:
        return self.state.week_ending

    @property
    def status(self) -> WeekStatus:
        return self.state.status

    @property
    def is_locked(self) -> bool:
        return self.state.status is WeekStatus.PUBLISHED

    @property
    def days(self) -> Dict[str, DaySchedule]:
        return self.state.days

    def get_slot(self, slot_id: str) -> ShiftSlot:
        slot = self._slot_index.get(slot_id)
        if slot is None:
            raise ValidationError(f"Unknown slot id: {slot_id}")
        return slot

    def _day_key(self, value) -> str:
        iso = to_iso(value)
        if iso not in self.state.days or iso not in self.dates:
            raise ValidationError(
                f"Date {iso} is outside the week ending {self.week_ending.isoformat()}"
            )
        return iso

    def day(self, value) -> DaySchedule:
        """Copy of one day's ``{slotId: employeeId | None}`` map."""
        return dict(self.state.days[self._day_key(value)])

    def assigned(self, slot_id: str, value) -> Optional[str]:
        self.get_slot(slot_id)
        return self.state.days[self._day_key(value)].get(slot_id)

    def employees_on(self, value) -> Set[str]:
        return {uid for uid in self.state.days[self._day_key(value)].values() if uid}

    def side_assignments(self, value, side: Side) -> List[str]:
        day = self.state.days[self._day_key(value)]
        return [
            uid
            for slot_id, uid in day.items()
            if uid and slot_id in self._slot_index and self._slot_index[slot_id].side == side
        ]

    def slot_of(self, employee_id: str, value) -> Optional[str]:
        for slot_id, uid in self.state.days[self._day_key(value)].items():
            if uid == employee_id:
                return slot_id
        return None

    def assignment_set(self) -> Set[Tuple[str, str, str]]:
        """Every ``(dateISO, slotId, employeeId)`` currently in the grid."""
        return {
            (iso, slot_id, uid)
            for iso, day in self.state.days.items()
            for slot_id, uid in day.items()
            if uid
        }

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def _ensure_unlocked(self) -> None:
        if self.is_locked:
            raise LockedScheduleError(
                f"Week ending {self.week_ending.isoformat()} is published and locked"
            )

    def _employee_id(self, employee) -> str:
        uid = employee.id if isinstance(employee, Employee) else str(employee or "").strip()
        if not uid:
            raise ValidationError("An employee id is required")
        return uid

    def _employee_name(self, employee, uid: str) -> str:
        if isinstance(employee, Employee):
            return employee.name
        return self.roster.display_name(uid) if self.roster else uid

    def _check_assignable(self, uid: str, employee, iso: str, target_slot: str, from_slot=None):
        if self.guard.is_blocked(iso, uid):
            logger.warning("Rejected assignment of %s on %s: approved time off", uid, iso)
            raise BlockedAssignmentError(uid, iso, self._employee_name(employee, uid))
        if self.allow_double_booking:
            return
        for slot_id, holder in self.state.days[iso].items():
            if holder == uid and slot_id not in (target_slot, from_slot):
                logger.warning("Rejected double booking of %s on %s", uid, iso)
                raise DoubleBookingError(uid, iso, slot_id)

    def _commit_day(self, iso: str, day: DaySchedule) -> None:
        self.state.days[iso] = day
        self.state.dirty[iso] = True

    def assign(self, slot_id: str, employee, date) -> None:
        """Place an employee (object or id) into a slot on a date."""
        self._ensure_unlocked()
        self.get_slot(slot_id)
        iso = self._day_key(date)
        uid = self._employee_id(employee)
        self._check_assignable(uid, employee, iso, slot_id)

        day = dict(self.state.days[iso])
        day[slot_id] = uid
        self._commit_day(iso, day)
        logger.debug("Assigned %s to %s on %s", uid, slot_id, iso)

    def clear(self, slot_id: str, date) -> None:
        self._ensure_unlocked()
        self.get_slot(slot_id)
        iso = self._day_key(date)
        day = dict(self.state.days[iso])
        day[slot_id] = None
        self._commit_day(iso, day)
        logger.debug("Cleared %s on %s", slot_id, iso)

    def move(self, from_slot_id: str, to_slot_id: str, date, employee) -> None:
        """Move an employee between slots of one day, all or nothing."""
        if from_slot_id == to_slot_id:
            self.assign(to_slot_id, employee, date)
            return
        self._ensure_unlocked()
        self.get_slot(from_slot_id)
        self.get_slot(to_slot_id)
        iso = self._day_key(date)
        uid = self._employee_id(employee)
        if self.state.days[iso].get(from_slot_id) != uid:
            raise ValidationError(f"Employee {uid} does not hold slot {from_slot_id} on {iso}")
        self._check_assignable(uid, employee, iso, to_slot_id, from_slot=from_slot_id)

        day = dict(self.state.days[iso])
        day[from_slot_id] = None
        day[to_slot_id] = uid
        self._commit_day(iso, day)
        logger.debug("Moved %s from %s to %s on %s", uid, from_slot_id, to_slot_id, iso)

    def clear_day(self, date) -> None:
        self._ensure_unlocked()
        iso = self._day_key(date)
        self._commit_day(iso, {s.id: None for s in self.slots})

    # ------------------------------------------------------------------
    # Completion and save gating
    # ------------------------------------------------------------------
    def is_day_complete(self, date) -> bool:
        day = self.state.days[self._day_key(date)]
        return all(day.get(s.id) for s in self.slots)

    def is_week_complete(self) -> bool:
        return all(self.is_day_complete(iso) for iso in self.dates)

    def completion(self) -> Dict[str, bool]:
        return {iso: self.is_day_complete(iso) for iso in self.dates}

    def missing_slots(self) -> List[Tuple[str, str]]:
        return [
            (iso, s.id)
            for iso in self.dates
            for s in self.slots
            if not self.state.days[iso].get(s.id)
        ]

    def is_dirty(self, date) -> bool:
        return self.state.dirty[self._day_key(date)]

    def is_saved(self, date) -> bool:
        return self.state.saved[self._day_key(date)]

    def can_save_day(self, date) -> bool:
        return not self.is_locked and self.is_day_complete(date) and self.is_dirty(date)

    def can_save_week(self) -> bool:
        return (
            not self.is_locked
            and self.is_week_complete()
            and all(self.state.saved[iso] for iso in self.dates)
        )

    def mark_saved(self, date) -> None:
        iso = self._day_key(date)
        self.state.dirty[iso] = False
        self.state.saved[iso] = True

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------
    def day_payload(self, date) -> dict:
        day = self.state.days[self._day_key(date)]
        return {"slots": {s.id: day.get(s.id) or None for s in self.slots}}

    def to_document(self, status: WeekStatus | None = None) -> dict:
        """Persistable week document. Slot values are employee ids only."""
        return {
            "status": (status or self.status).value,
            "days": {iso: self.day_payload(iso) for iso in self.dates},
        }

    def reload(self, document: Mapping | None, dates: Sequence | None = None) -> None:
        """Replace in-memory state with a persisted document.

        With ``dates`` only those days are re-read, so unsaved edits on
        other days survive a single-day save.
        """
        document = document or {}
        status = str(document.get("status") or WeekStatus.DRAFT.value)
        self.state.status = WeekStatus(status)
        stored = document.get("days") or {}
        targets = self.dates if dates is None else [self._day_key(d) for d in dates]
        for iso in targets:
            slots_map = (stored.get(iso) or {}).get("slots") or {}
            day = {s.id: (slots_map.get(s.id) or None) for s in self.slots}
            self.state.days[iso] = day
            self.state.dirty[iso] = False
            self.state.saved[iso] = iso in stored and all(day.values())
        self.state.audit = [AuditEntry.from_dict(a) for a in document.get("audit") or []]

    @classmethod
    def from_document(
        cls,
        document: Mapping | None,
        week_ending,
        slots: Sequence[ShiftSlot],
        guard: EligibilityGuard | None = None,
        roster: RosterIndex | None = None,
        allow_double_booking: bool = False,
    ) -> "WeekGrid":
        """Rehydrate a grid. Assignments are restored by id, whatever the roster says."""
        grid = cls(
            week_ending,
            slots,
            guard=guard,
            roster=roster,
            allow_double_booking=allow_double_booking,
        )
        grid.reload(document)
        return grid

"""Error kinds raised by the scheduling engine and its persistence layer."""

from __future__ import annotations

from typing import List, Tuple


class SchedulingError(Exception):
    """Base class for every error the engine raises on purpose."""


class ValidationError(SchedulingError, ValueError):
    """A required field is missing or a value is out of range."""


class DoubleBookingError(ValidationError):
    """The employee already holds another slot on that day."""

    def __init__(self, employee_id: str, date_iso: str, slot_id: str):
        self.employee_id = employee_id
        self.date_iso = date_iso
        self.slot_id = slot_id
        super().__init__(
            f"Employee {employee_id} is already scheduled on {date_iso} (slot {slot_id})"
        )


class BlockedAssignmentError(SchedulingError):
    """Assignment attempted against an approved absence."""

    def __init__(self, employee_id: str, date_iso: str, employee_name: str | None = None):
        self.employee_id = employee_id
        self.employee_name = employee_name or employee_id
        self.date_iso = date_iso
        super().__init__(
            f"Unable to comply: {self.employee_name} ({employee_id}) has approved time off on {date_iso}"
        )


class LockedScheduleError(SchedulingError):
    """Mutation attempted on a published week."""


class IncompleteWeekError(SchedulingError):
    """Publish or week save attempted before every slot-day is filled."""

    def __init__(self, message: str, missing: List[Tuple[str, str]] | None = None):
        self.missing = list(missing or [])
        super().__init__(message)


class PersistenceError(SchedulingError):
    """The external store rejected a write."""

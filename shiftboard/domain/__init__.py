"""Domain types and data access layer."""

from .entities import (
    AuditEntry,
    Employee,
    EmployeePreference,
    RankingSnapshot,
    ShiftSlot,
    Side,
    Suggestion,
    TimeOffBlock,
    WeekStatus,
)
from .models import Base, ScheduleRequest, ScheduleWeek, StaffMember, StaffPreference
from .repositories import (
    AttendanceRepository,
    PreferenceRepository,
    RankingRepository,
    ScheduleRepository,
    ScheduleRequestRepository,
    StaffRepository,
)

__all__ = [
    "AuditEntry",
    "Employee",
    "EmployeePreference",
    "RankingSnapshot",
    "ShiftSlot",
    "Side",
    "Suggestion",
    "TimeOffBlock",
    "WeekStatus",
    "Base",
    "ScheduleRequest",
    "ScheduleWeek",
    "StaffMember",
    "StaffPreference",
    "AttendanceRepository",
    "PreferenceRepository",
    "RankingRepository",
    "ScheduleRepository",
    "ScheduleRequestRepository",
    "StaffRepository",
]

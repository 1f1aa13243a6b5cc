"""Value types for the weekly scheduling engine.

These are plain dataclasses shared by every layer. Persistence rows live in
``shiftboard.domain.models``; the engine never sees them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional, Tuple


BAND_ORDER: Tuple[str, ...] = ("elite", "strong", "developing", "needsTraining")
BAND_LEVEL: Dict[str, int] = {"elite": 4, "strong": 3, "developing": 2, "needsTraining": 1}


class Side(Enum):
    """Front-of-house / back-of-house partition of slots and staff."""

    FOH = "foh"
    BOH = "boh"

    @classmethod
    def parse(cls, value) -> Optional["Side"]:
        """Map loose role strings ("Front of House", "BOH", "back") to a side."""
        if isinstance(value, Side):
            return value
        text = str(value or "").strip().lower()
        if not text:
            return None
        if text == "foh" or "front" in text:
            return cls.FOH
        if text == "boh" or "back" in text:
            return cls.BOH
        return None


class WeekStatus(Enum):
    """Lifecycle state of a scheduling week."""

    DRAFT = "draft"
    PUBLISHED = "published"


def parse_hhmm(value: str) -> int:
    """Convert ``"HH:MM"`` to minutes after midnight."""
    parts = str(value).strip().split(":")
    hours = int(parts[0])
    minutes = int(parts[1]) if len(parts) > 1 and parts[1] else 0
    return hours * 60 + minutes


def normalize_days(days) -> List[str]:
    """``["monday", " FRIDAY"]`` -> ``["Monday", "Friday"]`` to match weekday names."""
    return [str(d).strip().capitalize() for d in (days or []) if str(d).strip()]


@dataclass(frozen=True)
class Employee:
    """Canonical employee record. ``id`` is the identity; ``name`` is display only."""

    id: str
    name: str
    role: Side
    sub_role: str = ""

    def __repr__(self) -> str:
        return f"<Employee(id={self.id!r}, name={self.name!r}, side={self.role.value})>"


@dataclass(frozen=True)
class ShiftSlot:
    """A named, timed position that needs exactly one employee per day."""

    id: str
    label: str
    side: Side
    start_time: str
    end_time: str
    hours: float

    @property
    def start_minutes(self) -> int:
        return parse_hhmm(self.start_time)

    @property
    def end_minutes(self) -> int:
        # Shifts ending at or before they start run past midnight.
        end = parse_hhmm(self.end_time)
        if end <= self.start_minutes:
            end += 24 * 60
        return end

    @property
    def time_bucket(self) -> str:
        hour = self.start_minutes // 60
        if 5 <= hour < 12:
            return "morning"
        if 12 <= hour < 17:
            return "afternoon"
        if 17 <= hour < 22:
            return "evening"
        return "night"


@dataclass
class EmployeePreference:
    """Scheduling preferences submitted by an employee."""

    preferred_days: List[str] = field(default_factory=list)
    avoid_days: List[str] = field(default_factory=list)
    preferred_times: List[str] = field(default_factory=list)
    preferred_start_time: Optional[str] = None
    preferred_end_time: Optional[str] = None
    min_hours_per_week: Optional[float] = None
    max_hours_per_week: Optional[float] = None

    @property
    def has_time_range(self) -> bool:
        return bool(self.preferred_start_time and self.preferred_end_time)

    @classmethod
    def from_dict(cls, data: dict | None) -> "EmployeePreference":
        data = data or {}
        return cls(
            preferred_days=normalize_days(data.get("preferred_days") or data.get("preferredDays")),
            avoid_days=normalize_days(data.get("avoid_days") or data.get("avoidDays")),
            preferred_times=[
                str(t).lower() for t in (data.get("preferred_times") or data.get("preferredTimes") or [])
            ],
            preferred_start_time=data.get("preferred_start_time") or data.get("preferredStartTime") or None,
            preferred_end_time=data.get("preferred_end_time") or data.get("preferredEndTime") or None,
            min_hours_per_week=data.get("min_hours_per_week") or data.get("minHoursPerWeek") or None,
            max_hours_per_week=data.get("max_hours_per_week") or data.get("maxHoursPerWeek") or None,
        )


@dataclass
class AttendanceSummary:
    """Attendance quality over the trailing window."""

    reliability: float
    total_shifts: int = 0
    attended_shifts: int = 0
    on_time_shifts: int = 0
    late_shifts: int = 0
    no_shows: int = 0
    on_time_rate: int = 0  # percentage of attended shifts started on time

    @classmethod
    def neutral(cls, reliability: float = 70) -> "AttendanceSummary":
        return cls(reliability=reliability)


@dataclass
class RankingEntry:
    uid: str
    name: str = ""
    role: str = ""
    score: float = 0.0


@dataclass
class RankingSnapshot:
    """Performance bands for one ranking period, each band ordered best-first."""

    period_label: str
    bands: Dict[str, List[RankingEntry]] = field(default_factory=dict)

    def ordered(self):
        """Yield ``(band, entry, position)`` with a global 1-based position."""
        position = 0
        for band in BAND_ORDER:
            for entry in self.bands.get(band, []):
                position += 1
                yield band, entry, position

    def locate(self, uid: str) -> Optional[Tuple[str, RankingEntry, int]]:
        for band, entry, position in self.ordered():
            if entry.uid == uid:
                return band, entry, position
        return None

    def to_dict(self) -> dict:
        return {
            "period_label": self.period_label,
            "bands": {
                band: [
                    {"uid": e.uid, "name": e.name, "role": e.role, "score": e.score}
                    for e in entries
                ]
                for band, entries in self.bands.items()
            },
        }

    @classmethod
    def from_dict(cls, data: dict) -> "RankingSnapshot":
        bands: Dict[str, List[RankingEntry]] = {}
        for band, entries in (data.get("bands") or {}).items():
            bands[band] = [
                RankingEntry(
                    uid=str(e.get("uid", "")),
                    name=str(e.get("name", "")),
                    role=str(e.get("role", "")),
                    score=float(e.get("score") or 0.0),
                )
                for e in entries or []
            ]
        label = data.get("period_label") or data.get("periodLabel") or ""
        return cls(period_label=str(label), bands=bands)


@dataclass(frozen=True)
class TimeOffBlock:
    """An approved absence: the employee cannot work any slot on that date."""

    employee_id: str
    date_iso: str
    reason: str = ""


@dataclass
class EmployeeStats:
    """Derived per-week statistics used by the recommendation engine."""

    hours_scheduled: float = 0.0
    shifts_scheduled: int = 0
    attendance_reliability: Optional[float] = None
    performance_band: Optional[str] = None
    performance_score: Optional[float] = None
    ranking_position: Optional[int] = None
    performance_trend: Optional[str] = None
    needs_training: bool = False


@dataclass
class Suggestion:
    """A scored candidate for one slot on one date."""

    employee: Employee
    score: float
    factors: Dict[str, float] = field(default_factory=dict)
    reasons: List[str] = field(default_factory=list)
    confidence: str = "low"
    blocked: bool = False

    def to_dict(self) -> dict:
        return {
            "employee_id": self.employee.id,
            "employee_name": self.employee.name,
            "score": self.score,
            "factors": dict(self.factors),
            "reasons": list(self.reasons),
            "confidence": self.confidence,
            "blocked": self.blocked,
        }


@dataclass
class AuditEntry:
    """Record of a lifecycle transition on a week."""

    action: str
    actor: str
    reason: str = ""
    at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict:
        return {
            "action": self.action,
            "actor": self.actor,
            "reason": self.reason,
            "at": self.at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "AuditEntry":
        at = data.get("at")
        return cls(
            action=str(data.get("action", "")),
            actor=str(data.get("actor", "")),
            reason=str(data.get("reason", "")),
            at=datetime.fromisoformat(at) if at else datetime.now(timezone.utc),
        )

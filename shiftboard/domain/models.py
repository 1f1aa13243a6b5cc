"""SQLAlchemy models backing the schedule store and the input feeds."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import JSON, Column, Date, DateTime, Float, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


class StaffMember(Base):
    """Roster entry. ``uid`` equals the employee's authentication identity."""

    __tablename__ = "staff"

    uid = Column(String(100), primary_key=True)
    name = Column(String(200), nullable=False, default="")
    role = Column(String(50), nullable=False)  # "Front of House" / "Back of House" / foh / boh
    sub_role = Column(String(100), nullable=True)

    def to_record(self) -> dict:
        return {"uid": self.uid, "name": self.name, "role": self.role, "sub_role": self.sub_role or ""}

    def __repr__(self) -> str:
        return f"<StaffMember(uid='{self.uid}', name='{self.name}', role='{self.role}')>"


class StaffPreference(Base):
    """Scheduling preferences submitted by a staff member."""

    __tablename__ = "staff_preferences"

    uid = Column(String(100), primary_key=True)
    preferred_days = Column(JSON, nullable=False, default=list)
    avoid_days = Column(JSON, nullable=False, default=list)
    preferred_times = Column(JSON, nullable=False, default=list)
    preferred_start_time = Column(String(5), nullable=True)
    preferred_end_time = Column(String(5), nullable=True)
    min_hours_per_week = Column(Float, nullable=True)
    max_hours_per_week = Column(Float, nullable=True)

    def to_record(self) -> dict:
        return {
            "preferred_days": list(self.preferred_days or []),
            "avoid_days": list(self.avoid_days or []),
            "preferred_times": list(self.preferred_times or []),
            "preferred_start_time": self.preferred_start_time,
            "preferred_end_time": self.preferred_end_time,
            "min_hours_per_week": self.min_hours_per_week,
            "max_hours_per_week": self.max_hours_per_week,
        }


class AttendanceRecord(Base):
    """One punch-clock outcome for one scheduled shift."""

    __tablename__ = "attendance_records"

    id = Column(Integer, primary_key=True, autoincrement=True)
    uid = Column(String(100), nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)
    status = Column(String(20), nullable=False)  # completed, active, no-show, absent
    scheduled_start = Column(DateTime, nullable=True)
    punched_in_at = Column(DateTime, nullable=True)

    def to_record(self) -> dict:
        return {
            "uid": self.uid,
            "date": self.date,
            "status": self.status,
            "scheduled_start": self.scheduled_start,
            "punched_in_at": self.punched_in_at,
        }


class RankingSnapshotRecord(Base):
    """Performance bands for one period, keyed by the period's ISO date."""

    __tablename__ = "ranking_snapshots"

    period_id = Column(String(10), primary_key=True)
    period_label = Column(String(100), nullable=False, default="")
    bands = Column(JSON, nullable=False, default=dict)


class ScheduleRequest(Base):
    """Time-off request; only approved ones block scheduling."""

    __tablename__ = "schedule_requests"

    id = Column(Integer, primary_key=True, autoincrement=True)
    uid = Column(String(100), nullable=False, index=True)
    name = Column(String(200), nullable=True)
    date = Column(Date, nullable=False)
    week_ending = Column(Date, nullable=False, index=True)
    type = Column(String(20), nullable=False, default="time_off")
    status = Column(String(20), nullable=False, default="pending")  # pending, approved, denied
    reason = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=_utcnow)

    def __repr__(self) -> str:
        return f"<ScheduleRequest(id={self.id}, uid='{self.uid}', date={self.date}, status='{self.status}')>"


class ScheduleWeek(Base):
    """The week document: ``{status, days: {ISODate: {slots: {slotId: uid|null}}}}``."""

    __tablename__ = "schedule_weeks"

    week_ending = Column(Date, primary_key=True)
    status = Column(String(20), nullable=False, default="draft")
    days = Column(JSON, nullable=False, default=dict)
    audit = Column(JSON, nullable=False, default=list)
    updated_at = Column(DateTime, nullable=False, default=_utcnow)

    def to_document(self) -> dict:
        return {
            "status": self.status,
            "days": dict(self.days or {}),
            "audit": list(self.audit or []),
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self) -> str:
        return f"<ScheduleWeek(week_ending={self.week_ending}, status='{self.status}')>"

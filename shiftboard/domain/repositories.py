"""Repository classes for data access.

Read-side repositories act as the engine's input providers (roster,
preferences, attendance, rankings, time off). ``ScheduleRepository`` is the
write side: every save scope is exactly one commit.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta, timezone
from typing import Dict, Iterable, List, Mapping, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from shiftboard.domain.entities import AuditEntry, EmployeePreference, RankingSnapshot, TimeOffBlock
from shiftboard.errors import PersistenceError
from shiftboard.services.dates import parse_iso_date

from .models import (
    AttendanceRecord,
    RankingSnapshotRecord,
    ScheduleRequest,
    ScheduleWeek,
    StaffMember,
    StaffPreference,
)

logger = logging.getLogger(__name__)


def _commit(session: Session, what: str) -> None:
    try:
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.error("Write failed (%s): %s", what, e)
        raise PersistenceError(f"{what} failed: {e}") from e


class StaffRepository:
    """Roster provider."""

    @staticmethod
    def get_all(session: Session) -> List[StaffMember]:
        """Get all staff ordered by name; this is the roster order used for ties."""
        return session.query(StaffMember).order_by(StaffMember.name, StaffMember.uid).all()

    @staticmethod
    def get_by_id(session: Session, uid: str) -> Optional[StaffMember]:
        return session.query(StaffMember).filter(StaffMember.uid == uid).first()

    @staticmethod
    def get_pools(session: Session) -> Dict[str, List[dict]]:
        """Staff records partitioned by side: ``{"foh": [...], "boh": [...]}``."""
        pools: Dict[str, List[dict]] = {"foh": [], "boh": []}
        for member in StaffRepository.get_all(session):
            role = (member.role or "").lower()
            if "front" in role or role == "foh":
                pools["foh"].append(member.to_record())
            elif "back" in role or role == "boh":
                pools["boh"].append(member.to_record())
            else:
                logger.warning("Staff member %s has no recognised side (%r)", member.uid, member.role)
        return pools

    @staticmethod
    def bulk_upsert(session: Session, members: Iterable[StaffMember]) -> int:
        count = 0
        for member in members:
            session.merge(member)
            count += 1
        _commit(session, "staff import")
        return count


class PreferenceRepository:
    """Preferences provider."""

    @staticmethod
    def get_map(session: Session, uids: Iterable[str]) -> Dict[str, EmployeePreference]:
        """Preferences for each uid; uids without a row get empty preferences."""
        uids = list(uids)
        rows = session.query(StaffPreference).filter(StaffPreference.uid.in_(uids)).all() if uids else []
        found = {row.uid: EmployeePreference.from_dict(row.to_record()) for row in rows}
        return {uid: found.get(uid, EmployeePreference()) for uid in uids}

    @staticmethod
    def bulk_upsert(session: Session, prefs: Iterable[StaffPreference]) -> int:
        count = 0
        for pref in prefs:
            session.merge(pref)
            count += 1
        _commit(session, "preference import")
        return count


class AttendanceRepository:
    """Attendance punch records."""

    @staticmethod
    def get_window(session: Session, start: date, end: date) -> List[dict]:
        rows = (
            session.query(AttendanceRecord)
            .filter(AttendanceRecord.date >= start, AttendanceRecord.date <= end)
            .order_by(AttendanceRecord.date, AttendanceRecord.id)
            .all()
        )
        return [row.to_record() for row in rows]

    @staticmethod
    def bulk_create(session: Session, records: Iterable[AttendanceRecord]) -> int:
        records = list(records)
        session.add_all(records)
        _commit(session, "attendance import")
        return len(records)


class RankingRepository:
    """Ranking-snapshot provider, keyed by period ISO date."""

    @staticmethod
    def get(session: Session, period_id: str) -> Optional[RankingSnapshot]:
        row = session.query(RankingSnapshotRecord).filter(
            RankingSnapshotRecord.period_id == period_id
        ).first()
        if row is None:
            return None
        return RankingSnapshot.from_dict({"period_label": row.period_label, "bands": row.bands})

    @staticmethod
    def get_previous(session: Session, period_id: str, period_days: int = 14) -> Optional[RankingSnapshot]:
        previous = parse_iso_date(period_id) - timedelta(days=period_days)
        return RankingRepository.get(session, previous.isoformat())

    @staticmethod
    def save(session: Session, period_id: str, snapshot: RankingSnapshot) -> None:
        data = snapshot.to_dict()
        session.merge(
            RankingSnapshotRecord(
                period_id=period_id,
                period_label=data["period_label"],
                bands=data["bands"],
            )
        )
        _commit(session, f"ranking snapshot {period_id}")


class ScheduleRequestRepository:
    """Time-off provider."""

    @staticmethod
    def get_for_week(session: Session, week_ending: date) -> List[ScheduleRequest]:
        return (
            session.query(ScheduleRequest)
            .filter(ScheduleRequest.week_ending == week_ending)
            .order_by(ScheduleRequest.date, ScheduleRequest.id)
            .all()
        )

    @staticmethod
    def get_approved_blocks(session: Session, week_ending: date) -> List[TimeOffBlock]:
        rows = (
            session.query(ScheduleRequest)
            .filter(
                ScheduleRequest.week_ending == week_ending,
                ScheduleRequest.status == "approved",
            )
            .all()
        )
        return [TimeOffBlock(r.uid, r.date.isoformat(), r.reason or "") for r in rows]

    @staticmethod
    def bulk_create(session: Session, requests: Iterable[ScheduleRequest]) -> int:
        requests = list(requests)
        session.add_all(requests)
        _commit(session, "schedule request import")
        return len(requests)

    @staticmethod
    def set_status(session: Session, request_id: int, status: str) -> ScheduleRequest:
        request = session.get(ScheduleRequest, request_id)
        if request is None:
            raise PersistenceError(f"Schedule request {request_id} not found")
        request.status = status
        _commit(session, f"schedule request {request_id} status")
        return request


class ScheduleRepository:
    """The week document store, keyed by week-ending date."""

    @staticmethod
    def get(session: Session, week_ending: date) -> Optional[dict]:
        row = session.get(ScheduleWeek, week_ending)
        if row is None:
            return None
        session.refresh(row)
        return row.to_document()

    @staticmethod
    def _row(session: Session, week_ending: date) -> ScheduleWeek:
        row = session.get(ScheduleWeek, week_ending)
        if row is None:
            row = ScheduleWeek(week_ending=week_ending, status="draft", days={}, audit=[])
            session.add(row)
        return row

    @staticmethod
    def save_day(session: Session, week_ending: date, date_iso: str, payload: Mapping) -> None:
        """Merge one day into the week document; the week stays a draft."""
        row = ScheduleRepository._row(session, week_ending)
        days = dict(row.days or {})
        days[date_iso] = {"slots": dict(payload["slots"]), "updated_at": datetime.now(timezone.utc).isoformat()}
        row.days = days
        row.status = "draft"
        row.updated_at = datetime.now(timezone.utc)
        _commit(session, f"save day {date_iso}")

    @staticmethod
    def save_week(
        session: Session,
        week_ending: date,
        days: Mapping[str, Mapping],
        status: str = "draft",
        audit: AuditEntry | None = None,
    ) -> None:
        """Write every day and the status in one commit."""
        row = ScheduleRepository._row(session, week_ending)
        stamp = datetime.now(timezone.utc).isoformat()
        merged = dict(row.days or {})
        for iso, payload in days.items():
            merged[iso] = {"slots": dict(payload["slots"]), "updated_at": stamp}
        row.days = merged
        row.status = status
        if audit is not None:
            row.audit = list(row.audit or []) + [audit.to_dict()]
        row.updated_at = datetime.now(timezone.utc)
        _commit(session, f"save week {week_ending.isoformat()} ({status})")

    @staticmethod
    def set_status(session: Session, week_ending: date, status: str, audit: AuditEntry | None = None) -> None:
        row = session.get(ScheduleWeek, week_ending)
        if row is None:
            raise PersistenceError(f"No stored week ending {week_ending.isoformat()}")
        row.status = status
        if audit is not None:
            row.audit = list(row.audit or []) + [audit.to_dict()]
        row.updated_at = datetime.now(timezone.utc)
        _commit(session, f"set status {status} for {week_ending.isoformat()}")

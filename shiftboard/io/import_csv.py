"""CSV import utilities to load the engine's input feeds into the database."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List

import pandas as pd
from sqlalchemy.orm import Session

from shiftboard.domain.entities import BAND_ORDER, RankingEntry, RankingSnapshot, Side, normalize_days
from shiftboard.domain.models import AttendanceRecord, ScheduleRequest, StaffMember, StaffPreference
from shiftboard.domain.repositories import (
    AttendanceRepository,
    PreferenceRepository,
    RankingRepository,
    ScheduleRequestRepository,
    StaffRepository,
)
from shiftboard.errors import ValidationError
from shiftboard.services.dates import nearest_sunday


def _read(csv_path: str | Path, required: List[str]) -> pd.DataFrame:
    df = pd.read_csv(csv_path, dtype=str, keep_default_na=False)

    # Normalize column names
    df.columns = df.columns.str.lower().str.strip()
    if "uid" not in df.columns:
        for alt in ("employee_id", "id"):
            if alt in df.columns:
                df = df.rename(columns={alt: "uid"})
                break

    missing = [c for c in required if c not in df.columns]
    if missing:
        raise ValidationError(f"{csv_path}: missing column(s) {', '.join(missing)}")
    return df


def _text(row, column: str) -> str | None:
    value = str(row.get(column, "") or "").strip()
    return value or None


def _split_list(value) -> List[str]:
    """``"Monday; Friday"`` -> ``["Monday", "Friday"]``."""
    return [part.strip() for part in str(value or "").split(";") if part.strip()]


def _number(value) -> float | None:
    value = str(value or "").strip()
    if not value:
        return None
    number = pd.to_numeric(value, errors="coerce")
    return None if pd.isna(number) else float(number)


def _timestamp(value):
    value = str(value or "").strip()
    if not value:
        return None
    ts = pd.to_datetime(value, errors="coerce")
    return None if pd.isna(ts) else ts.to_pydatetime()


def import_staff_csv(session: Session, csv_path: str | Path) -> int:
    """
    Import the roster from CSV.

    Expected columns: uid (or id), name, role, sub_role (optional). Role
    may be "Front of House", "Back of House", "foh" or "boh".

    Args:
        session: Database session
        csv_path: Path to staff CSV

    Returns:
        Number of staff members imported
    """
    df = _read(csv_path, ["uid", "role"])
    df = df[df["uid"].str.strip() != ""].drop_duplicates(subset=["uid"], keep="first")

    members = []
    for _, row in df.iterrows():
        side = Side.parse(row["role"])
        if side is None:
            print(f"[WARN] Skipping {row['uid']}: unrecognised role {row['role']!r}")
            continue
        members.append(
            StaffMember(
                uid=row["uid"].strip(),
                name=_text(row, "name") or row["uid"].strip(),
                role=side.value,
                sub_role=_text(row, "sub_role"),
            )
        )

    count = StaffRepository.bulk_upsert(session, members)
    print(f"[INFO] Imported {count} staff from {csv_path}")
    return count


def import_time_off_csv(session: Session, csv_path: str | Path) -> int:
    """
    Import time-off requests from CSV.

    Expected columns: uid, date, status (pending/approved/denied; default
    approved), name, reason, week_ending (optional, derived from date).

    Returns:
        Number of requests imported
    """
    df = _read(csv_path, ["uid", "date"])
    df["date"] = pd.to_datetime(df["date"]).dt.date

    requests = []
    for _, row in df.iterrows():
        day = row["date"]
        week_ending = _text(row, "week_ending")
        requests.append(
            ScheduleRequest(
                uid=row["uid"].strip(),
                name=_text(row, "name"),
                date=day,
                week_ending=nearest_sunday(week_ending or day),
                type=_text(row, "type") or "time_off",
                status=(_text(row, "status") or "approved").lower(),
                reason=_text(row, "reason"),
            )
        )

    count = ScheduleRequestRepository.bulk_create(session, requests)
    print(f"[INFO] Imported {count} time-off requests from {csv_path}")
    return count


def import_attendance_csv(session: Session, csv_path: str | Path) -> int:
    """
    Import attendance punches from CSV.

    Expected columns: uid, date, status, scheduled_start, punched_in_at
    (both timestamps optional).

    Returns:
        Number of attendance records imported
    """
    df = _read(csv_path, ["uid", "date", "status"])
    df["date"] = pd.to_datetime(df["date"]).dt.date

    records = []
    for _, row in df.iterrows():
        records.append(
            AttendanceRecord(
                uid=row["uid"].strip(),
                date=row["date"],
                status=row["status"].strip().lower(),
                scheduled_start=_timestamp(row.get("scheduled_start")),
                punched_in_at=_timestamp(row.get("punched_in_at")),
            )
        )

    count = AttendanceRepository.bulk_create(session, records)
    print(f"[INFO] Imported {count} attendance records from {csv_path}")
    return count


def import_rankings_csv(session: Session, csv_path: str | Path) -> int:
    """
    Import ranking snapshots from CSV, one row per ranked employee.

    Expected columns: period_id (ISO date), period_label, band, uid, name,
    role, score. Row order within a band is the ranking order.

    Returns:
        Number of snapshots imported
    """
    df = _read(csv_path, ["period_id", "band", "uid"])
    unknown = sorted(set(df["band"]) - set(BAND_ORDER))
    if unknown:
        raise ValidationError(f"{csv_path}: unknown band(s) {', '.join(unknown)}")

    count = 0
    for period_id, rows in df.groupby("period_id", sort=False):
        bands: Dict[str, List[RankingEntry]] = {band: [] for band in BAND_ORDER}
        for _, row in rows.iterrows():
            bands[row["band"]].append(
                RankingEntry(
                    uid=row["uid"].strip(),
                    name=_text(row, "name") or "",
                    role=_text(row, "role") or "",
                    score=_number(row.get("score")) or 0.0,
                )
            )
        label = _text(rows.iloc[0], "period_label") or period_id
        RankingRepository.save(session, period_id, RankingSnapshot(period_label=label, bands=bands))
        count += 1

    print(f"[INFO] Imported {count} ranking snapshots from {csv_path}")
    return count


def import_preferences_csv(session: Session, csv_path: str | Path) -> int:
    """
    Import staff preferences from CSV.

    Expected columns: uid, preferred_days, avoid_days, preferred_times
    (semicolon-separated), preferred_start_time, preferred_end_time,
    min_hours_per_week, max_hours_per_week.

    Returns:
        Number of preference rows imported
    """
    df = _read(csv_path, ["uid"])
    df = df.drop_duplicates(subset=["uid"], keep="last")

    prefs = []
    for _, row in df.iterrows():
        prefs.append(
            StaffPreference(
                uid=row["uid"].strip(),
                preferred_days=normalize_days(_split_list(row.get("preferred_days"))),
                avoid_days=normalize_days(_split_list(row.get("avoid_days"))),
                preferred_times=[t.lower() for t in _split_list(row.get("preferred_times"))],
                preferred_start_time=_text(row, "preferred_start_time"),
                preferred_end_time=_text(row, "preferred_end_time"),
                min_hours_per_week=_number(row.get("min_hours_per_week")),
                max_hours_per_week=_number(row.get("max_hours_per_week")),
            )
        )

    count = PreferenceRepository.bulk_upsert(session, prefs)
    print(f"[INFO] Imported {count} preference rows from {csv_path}")
    return count

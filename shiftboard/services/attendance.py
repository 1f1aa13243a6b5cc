"""Attendance reliability from punch history over a trailing window."""

from __future__ import annotations

import math
from datetime import date, timedelta
from typing import Dict, Iterable, Mapping

import pandas as pd

from shiftboard.config import AttendanceConfig
from shiftboard.domain.entities import AttendanceSummary

ATTENDED_STATUSES = {"completed", "active"}
NO_SHOW_STATUSES = {"no-show", "no_show", "absent"}


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _to_frame(records) -> pd.DataFrame:
    if isinstance(records, pd.DataFrame):
        df = records.copy()
    else:
        df = pd.DataFrame(list(records))
    df.columns = [str(c).lower().strip() for c in df.columns]
    if "employee_id" in df.columns and "uid" not in df.columns:
        df = df.rename(columns={"employee_id": "uid"})
    for col in ("uid", "date", "status", "scheduled_start", "punched_in_at"):
        if col not in df.columns:
            df[col] = None
    return df


def summarize_employee(rows: pd.DataFrame, cfg: AttendanceConfig) -> AttendanceSummary:
    """Reliability for one employee's in-window punch records.

    ``reliability = round(attended / total * 100)``, plus a bonus when the
    on-time rate beats the threshold, minus a penalty per no-show, clamped
    to 0..100.
    """
    total = len(rows)
    if total == 0:
        return AttendanceSummary.neutral(cfg.neutral_reliability)

    attended = on_time = late = no_shows = 0
    grace = pd.Timedelta(minutes=cfg.on_time_grace_minutes)
    for _, row in rows.iterrows():
        status = str(row["status"] or "").strip().lower()
        if status in ATTENDED_STATUSES:
            attended += 1
            scheduled = pd.to_datetime(row["scheduled_start"], errors="coerce")
            punched = pd.to_datetime(row["punched_in_at"], errors="coerce")
            if pd.isna(scheduled) or pd.isna(punched):
                # No timing data: attended counts as on time.
                on_time += 1
            elif punched - scheduled <= grace:
                on_time += 1
            else:
                late += 1
        elif status in NO_SHOW_STATUSES:
            no_shows += 1

    reliability = round_half_up(attended / total * 100)
    on_time_rate = on_time / attended if attended else 0.0
    if on_time_rate > cfg.on_time_threshold:
        reliability = min(100, reliability + cfg.on_time_bonus)
    reliability = max(0, reliability - no_shows * cfg.no_show_penalty)

    return AttendanceSummary(
        reliability=max(0, min(100, reliability)),
        total_shifts=total,
        attended_shifts=attended,
        on_time_shifts=on_time,
        late_shifts=late,
        no_shows=no_shows,
        on_time_rate=round_half_up(on_time_rate * 100),
    )


def summarize_attendance(
    records,
    as_of: date,
    employee_ids: Iterable[str] = (),
    cfg: AttendanceConfig | None = None,
) -> Dict[str, AttendanceSummary]:
    """Summaries for every employee seen in ``records`` or listed in ``employee_ids``.

    Only records dated within ``[as_of - window_days, as_of]`` count.
    Employees with no in-window records get the neutral summary.
    """
    cfg = cfg or AttendanceConfig()
    df = _to_frame(records)
    result: Dict[str, AttendanceSummary] = {}

    if not df.empty:
        df["uid"] = df["uid"].astype(str).str.strip()
        df["date"] = pd.to_datetime(df["date"], errors="coerce").dt.date
        start = as_of - timedelta(days=cfg.window_days)
        in_window = df[df["date"].notna()]
        in_window = in_window[(in_window["date"] >= start) & (in_window["date"] <= as_of)]
        for uid, rows in in_window.groupby("uid", sort=False):
            if uid:
                result[str(uid)] = summarize_employee(rows, cfg)

    for uid in employee_ids:
        if uid not in result:
            result[uid] = AttendanceSummary.neutral(cfg.neutral_reliability)
    return result


def reliability_map(summaries: Mapping[str, AttendanceSummary]) -> Dict[str, float]:
    return {uid: s.reliability for uid, s in summaries.items()}

"""CSV export utilities for a loaded week."""

from __future__ import annotations

from pathlib import Path
from typing import Mapping

import pandas as pd

from shiftboard.domain.entities import EmployeeStats
from shiftboard.engine.grid import WeekGrid
from shiftboard.services.dates import day_name
from shiftboard.services.roster import RosterIndex

WEEK_COLUMNS = [
    "date",
    "weekday",
    "slot_id",
    "label",
    "side",
    "employee_id",
    "employee_name",
]

STATS_COLUMNS = [
    "employee_id",
    "employee_name",
    "side",
    "hours_scheduled",
    "shifts_scheduled",
    "attendance_reliability",
    "performance_band",
    "performance_score",
    "ranking_position",
    "performance_trend",
    "needs_training",
]


def week_frame(grid: WeekGrid, roster: RosterIndex | None = None) -> pd.DataFrame:
    """One row per slot-day, open slots included with empty employee fields."""
    rows = []
    for iso in grid.dates:
        day = grid.days[iso]
        for slot in grid.slots:
            uid = day.get(slot.id)
            rows.append({
                "date": iso,
                "weekday": day_name(iso),
                "slot_id": slot.id,
                "label": slot.label,
                "side": slot.side.value,
                "employee_id": uid or "",
                "employee_name": (roster.display_name(uid) if roster else uid) or "",
            })
    return pd.DataFrame(rows, columns=WEEK_COLUMNS)


def export_week_csv(grid: WeekGrid, csv_path: str | Path, roster: RosterIndex | None = None) -> int:
    """
    Export the week grid to CSV.

    Args:
        grid: Loaded week grid
        csv_path: Output CSV path
        roster: Used for display names (ids are written when omitted)

    Returns:
        Number of filled slot-days exported
    """
    df = week_frame(grid, roster)
    df.to_csv(csv_path, index=False)
    filled = int((df["employee_id"] != "").sum())
    print(f"[INFO] Exported {filled}/{len(df)} filled slot-days to {csv_path}")
    return filled


def stats_frame(stats: Mapping[str, EmployeeStats], roster: RosterIndex | None = None) -> pd.DataFrame:
    rows = []
    for uid, entry in stats.items():
        emp = roster.get(uid) if roster else None
        rows.append({
            "employee_id": uid,
            "employee_name": emp.name if emp else uid,
            "side": emp.role.value if emp else "",
            "hours_scheduled": entry.hours_scheduled,
            "shifts_scheduled": entry.shifts_scheduled,
            "attendance_reliability": entry.attendance_reliability,
            "performance_band": entry.performance_band,
            "performance_score": entry.performance_score,
            "ranking_position": entry.ranking_position,
            "performance_trend": entry.performance_trend,
            "needs_training": entry.needs_training,
        })
    df = pd.DataFrame(rows, columns=STATS_COLUMNS)
    return df.sort_values(["hours_scheduled", "employee_name"], ascending=[False, True], kind="stable")


def export_stats_csv(
    stats: Mapping[str, EmployeeStats],
    csv_path: str | Path,
    roster: RosterIndex | None = None,
) -> int:
    """Export per-employee weekly stats to CSV. Returns the row count."""
    df = stats_frame(stats, roster)
    df.to_csv(csv_path, index=False)
    print(f"[INFO] Exported stats for {len(df)} employees to {csv_path}")
    return len(df)

"""Tests for CSV import/export functionality."""

from datetime import date

import pandas as pd
import pytest

from shiftboard.domain.repositories import (
    AttendanceRepository,
    PreferenceRepository,
    RankingRepository,
    ScheduleRequestRepository,
    StaffRepository,
)
from shiftboard.engine.session import load_week_session
from shiftboard.errors import ValidationError
from shiftboard.io.export_csv import export_stats_csv, export_week_csv
from shiftboard.io.import_csv import (
    import_attendance_csv,
    import_preferences_csv,
    import_rankings_csv,
    import_staff_csv,
    import_time_off_csv,
)
from shiftboard.services.dates import day_name
from shiftboard.services.scoring import preference_points


@pytest.fixture
def host_slot(slots):
    return next(s for s in slots if s.id == "foh-host")


def test_import_staff_csv(db_session, tmp_path):
    """Test importing the roster from CSV."""
    csv_content = """UID,Name,Role,Sub_Role
u1,Ana Ruiz,Front of House,Server
u2,Bo Kim,Back of House,
u3,Cy Diaz,Owner,
u1,Ana Duplicate,Back of House,
"""
    csv_file = tmp_path / "staff.csv"
    csv_file.write_text(csv_content)

    count = import_staff_csv(db_session, csv_file)
    assert count == 2

    pools = StaffRepository.get_pools(db_session)
    assert [r["uid"] for r in pools["foh"]] == ["u1"]
    assert [r["uid"] for r in pools["boh"]] == ["u2"]
    assert StaffRepository.get_by_id(db_session, "u1").sub_role == "Server"


def test_import_time_off_csv(db_session, tmp_path):
    csv_content = """uid,name,date,status,reason
u1,Ana,2025-07-09,approved,Wedding
u2,Bo,2025-07-10,pending,
u3,Cy,2025-07-11,,
"""
    csv_file = tmp_path / "time_off.csv"
    csv_file.write_text(csv_content)

    assert import_time_off_csv(db_session, csv_file) == 3

    blocks = ScheduleRequestRepository.get_approved_blocks(db_session, date(2025, 7, 13))
    assert {(b.employee_id, b.date_iso) for b in blocks} == {("u1", "2025-07-09"), ("u3", "2025-07-11")}


def test_import_attendance_csv(db_session, tmp_path):
    csv_content = """employee_id,date,status,scheduled_start,punched_in_at
u1,2025-07-01,completed,2025-07-01 10:00,2025-07-01 10:20
u1,2025-07-02,No-Show,2025-07-02 10:00,
"""
    csv_file = tmp_path / "attendance.csv"
    csv_file.write_text(csv_content)

    assert import_attendance_csv(db_session, csv_file) == 2

    rows = AttendanceRepository.get_window(db_session, date(2025, 6, 15), date(2025, 7, 13))
    assert [r["status"] for r in rows] == ["completed", "no-show"]
    assert rows[0]["punched_in_at"].minute == 20
    assert rows[1]["punched_in_at"] is None


def test_import_rankings_csv(db_session, tmp_path):
    csv_content = """period_id,period_label,band,uid,name,role,score
2025-07-13,Jun 30 - Jul 13,strong,u3,Cy,foh,81
2025-07-13,Jun 30 - Jul 13,elite,u1,Ana,foh,95
2025-07-13,Jun 30 - Jul 13,elite,u2,Bo,boh,90
2025-06-29,Jun 16 - Jun 29,elite,u2,Bo,boh,93
"""
    csv_file = tmp_path / "rankings.csv"
    csv_file.write_text(csv_content)

    assert import_rankings_csv(db_session, csv_file) == 2

    snapshot = RankingRepository.get(db_session, "2025-07-13")
    assert snapshot.period_label == "Jun 30 - Jul 13"
    assert [(e.uid, pos) for _, e, pos in snapshot.ordered()] == [("u1", 1), ("u2", 2), ("u3", 3)]


def test_import_rankings_rejects_unknown_band(db_session, tmp_path):
    csv_file = tmp_path / "rankings.csv"
    csv_file.write_text("period_id,band,uid\n2025-07-13,rockstar,u1\n")
    with pytest.raises(ValidationError):
        import_rankings_csv(db_session, csv_file)


def test_import_preferences_csv(db_session, tmp_path):
    csv_content = """uid,preferred_days,avoid_days,preferred_times,preferred_start_time,preferred_end_time,max_hours_per_week
u1,Monday; Friday,Sunday,Morning,09:00,17:00,32
u2,,,,,,
"""
    csv_file = tmp_path / "preferences.csv"
    csv_file.write_text(csv_content)

    assert import_preferences_csv(db_session, csv_file) == 2

    prefs = PreferenceRepository.get_map(db_session, ["u1", "u2"])
    assert prefs["u1"].preferred_days == ["Monday", "Friday"]
    assert prefs["u1"].avoid_days == ["Sunday"]
    assert prefs["u1"].preferred_times == ["morning"]
    assert prefs["u1"].max_hours_per_week == 32
    assert prefs["u1"].has_time_range
    assert prefs["u2"].preferred_days == []


def test_missing_required_column(db_session, tmp_path):
    csv_file = tmp_path / "staff.csv"
    csv_file.write_text("uid,name\nu1,Ana\n")
    with pytest.raises(ValidationError):
        import_staff_csv(db_session, csv_file)


def test_export_week_and_stats(db_session, tmp_path):
    (tmp_path / "staff.csv").write_text("uid,name,role\nu1,Ana,foh\nu2,Bo,boh\n")
    import_staff_csv(db_session, tmp_path / "staff.csv")
    ws = load_week_session(db_session, "2025-07-13", as_of=date(2025, 7, 13))
    ws.grid.assign("foh-host", "u1", "2025-07-07")
    ws.grid.assign("boh-grill", "u2", "2025-07-08")

    week_csv = tmp_path / "week.csv"
    assert export_week_csv(ws.grid, week_csv, ws.roster) == 2

    df = pd.read_csv(week_csv, keep_default_na=False)
    assert len(df) == 56
    row = df[(df["date"] == "2025-07-07") & (df["slot_id"] == "foh-host")].iloc[0]
    assert row["employee_name"] == "Ana"
    assert row["weekday"] == "Monday"

    stats_csv = tmp_path / "stats.csv"
    assert export_stats_csv(ws.stats.compute(ws.grid.days), stats_csv, ws.roster) == 2
    stats = pd.read_csv(stats_csv)
    assert set(stats["employee_id"]) == {"u1", "u2"}
    assert stats["hours_scheduled"].tolist() == [8.0, 8.0]


def test_import_preferences_normalizes_day_names(db_session, tmp_path, host_slot):
    csv_file = tmp_path / "preferences.csv"
    csv_file.write_text("uid,preferred_days,avoid_days\nu1,monday; FRIDAY,friday\n")
    import_preferences_csv(db_session, csv_file)

    prefs = PreferenceRepository.get_map(db_session, ["u1"])["u1"]
    assert prefs.preferred_days == ["Monday", "Friday"]
    assert prefs.avoid_days == ["Friday"]
    # Avoiding the day overrides the preference for it
    assert preference_points(day_name("2025-07-11"), host_slot, prefs)[0] == 0
    assert preference_points(day_name("2025-07-07"), host_slot, prefs)[0] == 5

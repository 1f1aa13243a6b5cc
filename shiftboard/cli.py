"""Command-line interface for building and publishing a week's schedule."""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import date

from shiftboard.config import load_config
from shiftboard.domain.db import get_session, init_database, reset_database
from shiftboard.engine.session import WeekSession, load_week_session
from shiftboard.errors import IncompleteWeekError, SchedulingError, ValidationError
from shiftboard.io.export_csv import export_stats_csv, export_week_csv, stats_frame
from shiftboard.io.import_csv import (
    import_attendance_csv,
    import_preferences_csv,
    import_rankings_csv,
    import_staff_csv,
    import_time_off_csv,
)
from shiftboard.services.dates import bubble_label, is_sunday, normalize_week_ending, parse_iso_date


def _db_url(args: argparse.Namespace) -> str:
    return args.db or load_config(args.config).db_url


def _open_week(args: argparse.Namespace) -> WeekSession:
    cfg = load_config(args.config)
    if not is_sunday(args.week):
        print(f"[WARN] {args.week} is not a Sunday; using {normalize_week_ending(args.week).isoformat()}")
    as_of = parse_iso_date(args.as_of) if getattr(args, "as_of", None) else date.today()
    db = get_session(args.db or cfg.db_url)
    return load_week_session(db, args.week, cfg, as_of=as_of)


def _print_week(ws: WeekSession) -> None:
    grid = ws.grid
    print(f"Week ending {ws.week_ending.isoformat()} [{grid.status.value}]")
    for iso in grid.dates:
        flags = "complete" if grid.is_day_complete(iso) else "incomplete"
        if grid.is_saved(iso):
            flags += ", saved"
        print(f"  {bubble_label(iso)} ({flags})")
        for slot in grid.slots:
            uid = grid.days[iso].get(slot.id)
            who = f"{ws.roster.display_name(uid)} ({uid})" if uid else "-"
            print(f"    {slot.id:<16} {slot.label:<12} {who}")


def _cmd_init_db(args: argparse.Namespace) -> None:
    """Initialize the database."""
    db_url = _db_url(args)
    if args.reset:
        reset_database(db_url)
        print(f"[WARN] Database reset, all data dropped: {db_url}")
        return
    init_database(db_url)
    print(f"[OK] Database initialized: {db_url}")


def _cmd_import_csv(args: argparse.Namespace) -> None:
    """Import CSV feeds into the database."""
    session = get_session(_db_url(args))
    try:
        if args.staff:
            count = import_staff_csv(session, args.staff)
            print(f"[OK] Imported {count} staff")

        if args.time_off:
            count = import_time_off_csv(session, args.time_off)
            print(f"[OK] Imported {count} time-off requests")

        if args.attendance:
            count = import_attendance_csv(session, args.attendance)
            print(f"[OK] Imported {count} attendance records")

        if args.rankings:
            count = import_rankings_csv(session, args.rankings)
            print(f"[OK] Imported {count} ranking snapshots")

        if args.preferences:
            count = import_preferences_csv(session, args.preferences)
            print(f"[OK] Imported {count} preference rows")

        print("[OK] CSV import complete")
    finally:
        session.close()


def _cmd_show(args: argparse.Namespace) -> None:
    ws = _open_week(args)
    try:
        _print_week(ws)
    finally:
        ws.db.close()


def _cmd_assign(args: argparse.Namespace) -> None:
    ws = _open_week(args)
    try:
        ws.grid.assign(args.slot, args.employee, args.date)
        ws.save_draft(args.date)
        print(f"[OK] {ws.roster.display_name(args.employee)} assigned to {args.slot} on {args.date}")
    finally:
        ws.db.close()


def _cmd_clear(args: argparse.Namespace) -> None:
    ws = _open_week(args)
    try:
        if args.slot:
            ws.grid.clear(args.slot, args.date)
        else:
            ws.grid.clear_day(args.date)
        ws.save_draft(args.date)
        print(f"[OK] Cleared {args.slot or 'all slots'} on {args.date}")
    finally:
        ws.db.close()


def _cmd_move(args: argparse.Namespace) -> None:
    ws = _open_week(args)
    try:
        ws.grid.move(args.from_slot, args.to_slot, args.date, args.employee)
        ws.save_draft(args.date)
        print(f"[OK] Moved {args.employee} from {args.from_slot} to {args.to_slot} on {args.date}")
    finally:
        ws.db.close()


def _cmd_save_day(args: argparse.Namespace) -> None:
    """Confirm a day: every slot filled and the day stored."""
    ws = _open_week(args)
    try:
        iso = parse_iso_date(args.date).isoformat()
        missing = [slot_id for day, slot_id in ws.grid.missing_slots() if day == iso]
        if missing:
            raise ValidationError(f"Cannot save {iso}: open slot(s) {', '.join(missing)}")
        if not ws.grid.is_saved(iso):
            ws.save_draft(iso)
        print(f"[OK] Saved {iso}")
    finally:
        ws.db.close()


def _cmd_save_week(args: argparse.Namespace) -> None:
    ws = _open_week(args)
    try:
        ws.save_week()
        print(f"[OK] Week ending {ws.week_ending.isoformat()} saved")
    finally:
        ws.db.close()


def _cmd_publish(args: argparse.Namespace) -> None:
    ws = _open_week(args)
    try:
        ws.publish(args.actor)
        print(f"[OK] Week ending {ws.week_ending.isoformat()} published")
    finally:
        ws.db.close()


def _cmd_unpublish(args: argparse.Namespace) -> None:
    ws = _open_week(args)
    try:
        ws.unpublish(args.actor, args.reason)
        print(f"[WARN] Week ending {ws.week_ending.isoformat()} reopened by {args.actor}: {args.reason}")
    finally:
        ws.db.close()


def _print_suggestions(label: str, suggestions) -> None:
    print(label)
    if not suggestions:
        print("    (no eligible staff)")
    for rank, s in enumerate(suggestions, start=1):
        print(f"    {rank}. {s.employee.name} ({s.employee.id}) {s.score:.1f} [{s.confidence}]")
        print(f"       {'; '.join(s.reasons)}")


def _cmd_suggest(args: argparse.Namespace) -> None:
    ws = _open_week(args)
    try:
        engine = ws.engine
        if args.slot and args.date:
            found = engine.get_suggestions_for_slot(args.slot, args.date, args.top)
            _print_suggestions(f"{bubble_label(args.date)} {args.slot}", found)
            if args.apply and found:
                engine.apply_ai_suggestion(args.date, args.slot, found[0].employee)
                ws.save_draft(args.date)
                print(f"[OK] Applied {found[0].employee.name} to {args.slot}")
            return
        if args.slot or args.date:
            raise ValidationError("--slot and --date must be given together")

        week = engine.generate_full_week_suggestions(args.top)
        for iso, slots in week.items():
            for slot_id, found in slots.items():
                _print_suggestions(f"{bubble_label(iso)} {slot_id}", found)
        if not args.apply:
            return

        # Re-rank slot by slot so earlier picks are excluded from later slots.
        applied = 0
        for iso in list(week):
            for slot_id in list(week[iso]):
                found = engine.get_suggestions_for_slot(slot_id, iso, 1)
                if not found:
                    print(f"[WARN] No eligible staff left for {slot_id} on {iso}")
                    continue
                engine.apply_ai_suggestion(iso, slot_id, found[0].employee)
                applied += 1
            ws.save_draft(iso)
        print(f"[OK] Applied {applied} suggestion(s)")
    finally:
        ws.db.close()


def _cmd_stats(args: argparse.Namespace) -> None:
    ws = _open_week(args)
    try:
        stats = ws.stats.compute(ws.grid.days)
        if args.out:
            export_stats_csv(stats, args.out, ws.roster)
        else:
            print(stats_frame(stats, ws.roster).to_string(index=False))
    finally:
        ws.db.close()


def _cmd_export(args: argparse.Namespace) -> None:
    ws = _open_week(args)
    try:
        if args.out:
            count = export_week_csv(ws.grid, args.out, ws.roster)
            print(f"[OK] Exported {count} assignments to {args.out}")
        if args.stats:
            count = export_stats_csv(ws.stats.compute(ws.grid.days), args.stats, ws.roster)
            print(f"[OK] Exported stats for {count} employees to {args.stats}")
    finally:
        ws.db.close()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="shiftboard",
        description="Weekly FOH/BOH shift scheduling",
    )

    # Global options
    parser.add_argument("--db", help="Database URL (default: config db_url)")
    parser.add_argument("--config", help="Path to config YAML/JSON (default: built-in slots)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")

    week = argparse.ArgumentParser(add_help=False)
    week.add_argument("--week", required=True, help="Week ending (Sunday), e.g. 2025-07-13")
    week.add_argument("--as-of", help="End of the attendance window (default: today)")

    sub = parser.add_subparsers(dest="command", required=True)

    init = sub.add_parser("init-db", help="Initialize database")
    init.add_argument("--reset", action="store_true", help="Drop and recreate all tables")
    init.set_defaults(func=_cmd_init_db)

    imp = sub.add_parser("import-csv", help="Import CSV feeds into database")
    imp.add_argument("--staff", help="Path to staff CSV")
    imp.add_argument("--time-off", help="Path to time-off requests CSV")
    imp.add_argument("--attendance", help="Path to attendance punches CSV")
    imp.add_argument("--rankings", help="Path to ranking snapshots CSV")
    imp.add_argument("--preferences", help="Path to staff preferences CSV")
    imp.set_defaults(func=_cmd_import_csv)

    show = sub.add_parser("show", parents=[week], help="Print the week grid")
    show.set_defaults(func=_cmd_show)

    asg = sub.add_parser("assign", parents=[week], help="Assign an employee to a slot")
    asg.add_argument("--date", required=True)
    asg.add_argument("--slot", required=True)
    asg.add_argument("--employee", required=True, help="Employee id")
    asg.set_defaults(func=_cmd_assign)

    clr = sub.add_parser("clear", parents=[week], help="Clear a slot (or the whole day)")
    clr.add_argument("--date", required=True)
    clr.add_argument("--slot", help="Slot id; omit to clear every slot of the day")
    clr.set_defaults(func=_cmd_clear)

    mv = sub.add_parser("move", parents=[week], help="Move an employee between slots of one day")
    mv.add_argument("--date", required=True)
    mv.add_argument("--from-slot", required=True)
    mv.add_argument("--to-slot", required=True)
    mv.add_argument("--employee", required=True)
    mv.set_defaults(func=_cmd_move)

    sd = sub.add_parser("save-day", parents=[week], help="Save a complete day")
    sd.add_argument("--date", required=True)
    sd.set_defaults(func=_cmd_save_day)

    sw = sub.add_parser("save-week", parents=[week], help="Save the complete week as a draft")
    sw.set_defaults(func=_cmd_save_week)

    pub = sub.add_parser("publish", parents=[week], help="Publish and lock the week")
    pub.add_argument("--actor", default="system")
    pub.set_defaults(func=_cmd_publish)

    unp = sub.add_parser("unpublish", parents=[week], help="Reopen a published week (audited)")
    unp.add_argument("--actor", required=True)
    unp.add_argument("--reason", required=True)
    unp.set_defaults(func=_cmd_unpublish)

    sug = sub.add_parser("suggest", parents=[week], help="Rank staff for open slots")
    sug.add_argument("--date", help="Date of a single slot")
    sug.add_argument("--slot", help="Slot id")
    sug.add_argument("--top", type=int, default=None, help="Suggestions per slot (default: config top_n)")
    sug.add_argument("--apply", action="store_true", help="Assign the top suggestion")
    sug.set_defaults(func=_cmd_suggest)

    st = sub.add_parser("stats", parents=[week], help="Per-employee weekly stats")
    st.add_argument("--out", help="Write stats CSV instead of printing")
    st.set_defaults(func=_cmd_stats)

    exp = sub.add_parser("export", parents=[week], help="Export the week to CSV")
    exp.add_argument("--out", help="Path to export the week grid CSV")
    exp.add_argument("--stats", help="Path to export the stats CSV")
    exp.set_defaults(func=_cmd_export)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        args.func(args)
    except IncompleteWeekError as e:
        print(f"[ERROR] {e}")
        for iso, slot_id in e.missing[:10]:
            print(f"    open: {iso} {slot_id}")
        return 1
    except SchedulingError as e:
        print(f"[ERROR] {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())

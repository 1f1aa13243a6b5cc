"""Date helpers for the Sunday week-ending anchor."""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import List

import pandas as pd

from shiftboard.errors import ValidationError


def parse_iso_date(value) -> date:
    """Accept a ``date``, ``datetime`` or ``YYYY-MM-DD`` string."""
    if value is None or value == "":
        raise ValidationError("A date is required")
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError as e:
        raise ValidationError(f"Invalid ISO date: {value!r}") from e


def to_iso(value) -> str:
    return parse_iso_date(value).isoformat()


def is_sunday(value) -> bool:
    return parse_iso_date(value).weekday() == 6


def nearest_sunday(value) -> date:
    """The given date if it is a Sunday, otherwise the following Sunday."""
    d = parse_iso_date(value)
    return d + timedelta(days=(6 - d.weekday()) % 7)


def normalize_week_ending(value) -> date:
    """Validate a week-ending anchor, rolling non-Sundays forward."""
    if value is None or value == "":
        raise ValidationError("Week ending date is required")
    return nearest_sunday(value)


def week_days(week_ending) -> List[date]:
    """Monday..Sunday for the week that ends on ``week_ending``."""
    sunday = parse_iso_date(week_ending)
    if sunday.weekday() != 6:
        raise ValidationError(f"Week ending must be a Sunday: {sunday.isoformat()}")
    start = sunday - timedelta(days=6)
    return [start + timedelta(days=i) for i in range(7)]


def week_day_isos(week_ending) -> List[str]:
    return [d.isoformat() for d in week_days(week_ending)]


def day_name(value) -> str:
    """Full English weekday name, e.g. ``"Monday"``."""
    return pd.Timestamp(parse_iso_date(value)).day_name()


def bubble_label(value) -> str:
    """Short display label such as ``"Mon 07/07"``."""
    d = parse_iso_date(value)
    return f"{day_name(d)[:3]} {d.month:02d}/{d.day:02d}"

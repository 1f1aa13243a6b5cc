"""Scheduler configuration: slot definitions, scoring constants and storage.

Configuration is read from YAML (``.yaml``/``.yml``) or JSON. Every key is
optional; anything missing falls back to the defaults below.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import List, Tuple

import yaml

from shiftboard.domain.entities import ShiftSlot, Side
from shiftboard.errors import ValidationError


@dataclass
class SlotConfig:
    id: str
    label: str
    side: str
    start: str
    end: str
    hours: float = 8.0


def _default_slots() -> List[SlotConfig]:
    return [
        SlotConfig("foh-host", "Host", "foh", "10:00", "18:00", 8),
        SlotConfig("foh-server-1", "Server 1", "foh", "11:00", "19:00", 8),
        SlotConfig("foh-server-2", "Server 2", "foh", "11:00", "19:00", 8),
        SlotConfig("foh-bartender", "Bartender", "foh", "16:00", "00:00", 8),
        SlotConfig("boh-grill", "Grill", "boh", "10:00", "18:00", 8),
        SlotConfig("boh-fry", "Fry", "boh", "11:00", "19:00", 8),
        SlotConfig("boh-saute", "Saute", "boh", "11:00", "19:00", 8),
        SlotConfig("boh-salad", "Salad", "boh", "10:00", "18:00", 8),
    ]


@dataclass
class ScoringConfig:
    ideal_hours: float = 30.0
    neutral_reliability: float = 70.0
    top_n: int = 3
    high_confidence: float = 70.0
    medium_confidence: float = 50.0
    default_slot_hours: float = 8.0


@dataclass
class AttendanceConfig:
    window_days: int = 28
    on_time_grace_minutes: int = 15
    on_time_bonus: int = 5
    on_time_threshold: float = 0.8
    no_show_penalty: int = 10
    neutral_reliability: float = 70.0


@dataclass
class SchedulerConfig:
    db_url: str = "sqlite:///shiftboard.db"
    slots: List[SlotConfig] = field(default_factory=_default_slots)
    scoring: ScoringConfig = field(default_factory=ScoringConfig)
    attendance: AttendanceConfig = field(default_factory=AttendanceConfig)
    allow_double_booking: bool = False
    ranking_period_days: int = 14

    def shift_slots(self) -> Tuple[ShiftSlot, ...]:
        """Build the immutable slot set for one scheduling session."""
        seen = set()
        out = []
        for s in self.slots:
            if s.id in seen:
                raise ValidationError(f"Duplicate slot id in config: {s.id}")
            seen.add(s.id)
            side = Side.parse(s.side)
            if side is None:
                raise ValidationError(f"Slot {s.id} has unknown side {s.side!r}")
            if float(s.hours) <= 0:
                raise ValidationError(f"Slot {s.id} must have positive hours")
            out.append(
                ShiftSlot(
                    id=s.id,
                    label=s.label,
                    side=side,
                    start_time=s.start,
                    end_time=s.end,
                    hours=float(s.hours),
                )
            )
        if not out:
            raise ValidationError("At least one slot must be configured")
        return tuple(out)

    def to_dict(self) -> dict:
        return asdict(self)


def _build(cls, data: dict, section: str):
    if not isinstance(data, dict):
        raise ValidationError(f"Config section '{section}' must be a mapping")
    known = {f.name for f in fields(cls)}
    unknown = set(data) - known
    if unknown:
        raise ValidationError(f"Unknown keys in '{section}': {', '.join(sorted(unknown))}")
    return cls(**data)


def config_from_dict(data: dict | None) -> SchedulerConfig:
    """Validate a raw mapping into a :class:`SchedulerConfig`."""
    data = dict(data or {})
    known = {f.name for f in fields(SchedulerConfig)}
    unknown = set(data) - known
    if unknown:
        raise ValidationError(f"Unknown config keys: {', '.join(sorted(unknown))}")

    kwargs = {}
    if "db_url" in data:
        kwargs["db_url"] = str(data["db_url"])
    if "allow_double_booking" in data:
        kwargs["allow_double_booking"] = bool(data["allow_double_booking"])
    if "ranking_period_days" in data:
        kwargs["ranking_period_days"] = int(data["ranking_period_days"])
    if "scoring" in data:
        kwargs["scoring"] = _build(ScoringConfig, data["scoring"] or {}, "scoring")
    if "attendance" in data:
        kwargs["attendance"] = _build(AttendanceConfig, data["attendance"] or {}, "attendance")
    if "slots" in data:
        raw_slots = data["slots"] or []
        if not isinstance(raw_slots, list):
            raise ValidationError("Config 'slots' must be a list")
        kwargs["slots"] = [_build(SlotConfig, s, "slots") for s in raw_slots]

    cfg = SchedulerConfig(**kwargs)
    cfg.shift_slots()  # fail fast on bad slot definitions
    return cfg


def load_config(path: str | Path | None = None) -> SchedulerConfig:
    """Load configuration from a YAML or JSON file; ``None`` gives defaults."""
    if path is None:
        return SchedulerConfig()
    p = Path(path)
    if not p.exists():
        raise ValidationError(f"Config file not found: {p}")
    text = p.read_text()
    if p.suffix.lower() in (".yaml", ".yml"):
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise ValidationError(f"Invalid YAML config {p}: {e}") from e
    else:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise ValidationError(f"Invalid JSON config {p}: {e}") from e
    return config_from_dict(data)

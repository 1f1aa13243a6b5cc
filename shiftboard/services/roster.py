"""Roster normalization.

Raw staff records arrive with either ``uid`` or ``id`` and loose role
strings. They are normalized here, once, into :class:`Employee` objects
keyed by a single canonical ``id``.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, Iterator, List, Mapping, Optional

from shiftboard.domain.entities import Employee, Side
from shiftboard.errors import ValidationError

logger = logging.getLogger(__name__)


def normalize_record(record: Mapping, side_hint: Side | None = None) -> Optional[Employee]:
    """Turn one raw staff record into an :class:`Employee`, or ``None`` if unusable."""
    uid = str(record.get("uid") or record.get("id") or "").strip()
    if not uid:
        return None
    name = str(record.get("name") or "").strip() or uid
    side = Side.parse(record.get("role")) or side_hint
    if side is None:
        return None
    sub_role = str(record.get("sub_role") or record.get("subRole") or "").strip()
    return Employee(id=uid, name=name, role=side, sub_role=sub_role)


class RosterIndex:
    """Ordered, id-keyed view of the active roster."""

    def __init__(self, employees: Iterable[Employee] = ()):
        self._by_id: Dict[str, Employee] = {}
        self._order: Dict[str, int] = {}
        for emp in employees:
            if emp.id in self._by_id:
                logger.warning("Duplicate roster id %s ignored", emp.id)
                continue
            self._order[emp.id] = len(self._by_id)
            self._by_id[emp.id] = emp

    @classmethod
    def from_records(cls, records: Iterable[Mapping]) -> "RosterIndex":
        employees = []
        for rec in records:
            emp = normalize_record(rec)
            if emp is None:
                logger.warning("Dropping staff record without id or side: %r", dict(rec))
                continue
            employees.append(emp)
        return cls(employees)

    @classmethod
    def from_pools(cls, pools: Mapping[str, Iterable[Mapping]]) -> "RosterIndex":
        """Build from side-partitioned pools: ``{"foh": [...], "boh": [...]}``."""
        employees = []
        for key in ("foh", "boh"):
            hint = Side(key)
            for rec in pools.get(key) or []:
                emp = normalize_record(rec, side_hint=hint)
                if emp is None:
                    logger.warning("Dropping %s staff record without id: %r", key, dict(rec))
                    continue
                employees.append(emp)
        return cls(employees)

    def __len__(self) -> int:
        return len(self._by_id)

    def __iter__(self) -> Iterator[Employee]:
        return iter(self._by_id.values())

    def __contains__(self, employee_id: object) -> bool:
        return employee_id in self._by_id

    def get(self, employee_id: str) -> Optional[Employee]:
        return self._by_id.get(employee_id)

    def require(self, employee_id: str) -> Employee:
        emp = self._by_id.get(employee_id)
        if emp is None:
            raise ValidationError(f"Unknown employee id: {employee_id}")
        return emp

    def by_side(self, side: Side) -> List[Employee]:
        return [e for e in self._by_id.values() if e.role == side]

    def position(self, employee_id: str) -> int:
        """Roster order; unknown ids sort last."""
        return self._order.get(employee_id, len(self._order))

    def display_name(self, employee_id: str | None) -> str:
        if not employee_id:
            return ""
        emp = self._by_id.get(employee_id)
        return emp.name if emp else employee_id

    def ids(self) -> List[str]:
        return list(self._by_id)

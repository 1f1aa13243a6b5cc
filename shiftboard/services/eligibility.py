"""Approved time-off index: who is blocked on which date."""

from __future__ import annotations

from typing import Dict, FrozenSet, Iterable, Mapping, Optional, Set

from shiftboard.domain.entities import TimeOffBlock
from shiftboard.services.dates import to_iso


class EligibilityGuard:
    """Answers "is employee X blocked on date Y" in constant time."""

    def __init__(self, blocks: Iterable[TimeOffBlock] = ()):
        self._by_date: Dict[str, Set[str]] = {}
        self._reasons: Dict[tuple, str] = {}
        for block in blocks:
            self.add(block)

    @classmethod
    def from_requests(cls, requests: Iterable[Mapping]) -> "EligibilityGuard":
        """Index raw schedule requests, keeping only approved ones."""
        blocks = []
        for r in requests:
            status = str(r.get("status", "approved") or "").strip().lower()
            if status != "approved":
                continue
            uid = str(r.get("uid") or r.get("employee_id") or "").strip()
            raw_date = r.get("date_iso") or r.get("dateISO") or r.get("date")
            if not uid or not raw_date:
                continue
            blocks.append(TimeOffBlock(uid, to_iso(raw_date), str(r.get("reason") or "")))
        return cls(blocks)

    def add(self, block: TimeOffBlock) -> None:
        iso = to_iso(block.date_iso)
        self._by_date.setdefault(iso, set()).add(block.employee_id)
        self._reasons[(iso, block.employee_id)] = block.reason

    def is_blocked(self, date, employee_id: str) -> bool:
        ids = self._by_date.get(date if isinstance(date, str) else to_iso(date))
        if not ids:
            return False
        return employee_id in ids

    def blocked_on(self, date) -> FrozenSet[str]:
        return frozenset(self._by_date.get(to_iso(date), ()))

    def reason_for(self, date, employee_id: str) -> Optional[str]:
        return self._reasons.get((to_iso(date), employee_id))

    def __len__(self) -> int:
        return sum(len(ids) for ids in self._by_date.values())

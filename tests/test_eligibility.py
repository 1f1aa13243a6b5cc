"""Tests for the approved time-off guard."""

from datetime import date

from shiftboard.domain.entities import TimeOffBlock
from shiftboard.services.eligibility import EligibilityGuard


def test_only_approved_requests_block():
    guard = EligibilityGuard.from_requests([
        {"uid": "emp_a", "date": "2025-07-09", "status": "approved", "reason": "Wedding"},
        {"uid": "emp_b", "date": "2025-07-09", "status": "pending"},
        {"uid": "emp_c", "date": "2025-07-09", "status": "denied"},
        {"employee_id": "emp_d", "dateISO": "2025-07-10", "status": "APPROVED"},
    ])

    assert guard.is_blocked("2025-07-09", "emp_a")
    assert not guard.is_blocked("2025-07-09", "emp_b")
    assert not guard.is_blocked("2025-07-09", "emp_c")
    assert guard.is_blocked("2025-07-10", "emp_d")
    assert len(guard) == 2


def test_records_without_id_or_date_are_skipped():
    guard = EligibilityGuard.from_requests([
        {"uid": "", "date": "2025-07-09", "status": "approved"},
        {"uid": "emp_a", "status": "approved"},
    ])
    assert len(guard) == 0


def test_lookup_by_date_object_or_string():
    guard = EligibilityGuard([TimeOffBlock("emp_a", "2025-07-09", "Vacation")])

    assert guard.is_blocked(date(2025, 7, 9), "emp_a")
    assert guard.is_blocked("2025-07-09", "emp_a")
    assert not guard.is_blocked("2025-07-10", "emp_a")
    assert not guard.is_blocked("2025-07-09", "emp_z")
    assert guard.blocked_on("2025-07-09") == frozenset({"emp_a"})
    assert guard.blocked_on("2025-07-10") == frozenset()
    assert guard.reason_for("2025-07-09", "emp_a") == "Vacation"
    assert guard.reason_for("2025-07-10", "emp_a") is None

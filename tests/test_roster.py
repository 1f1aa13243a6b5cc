"""Tests for roster normalization."""

import pytest

from shiftboard.domain.entities import Side
from shiftboard.errors import ValidationError
from shiftboard.services.roster import RosterIndex, normalize_record


def test_normalize_record_fallbacks():
    emp = normalize_record({"id": "u1", "role": "Front of House", "subRole": "Server"})
    assert emp.id == "u1"
    assert emp.name == "u1"
    assert emp.role is Side.FOH
    assert emp.sub_role == "Server"

    assert normalize_record({"uid": "u2", "name": "Kim", "role": "BOH"}).role is Side.BOH
    assert normalize_record({"name": "No Id", "role": "foh"}) is None
    assert normalize_record({"uid": "u3", "role": "Management"}) is None


def test_from_records_drops_unusable_and_duplicates():
    roster = RosterIndex.from_records([
        {"uid": "u1", "name": "Ana", "role": "Front of House"},
        {"uid": "u2", "name": "Bo", "role": "Back of House"},
        {"uid": "u1", "name": "Ana Again", "role": "Back of House"},
        {"uid": "u3", "name": "Cy", "role": "Host stand"},
    ])

    assert len(roster) == 2
    assert roster.require("u1").name == "Ana"
    assert "u3" not in roster
    assert roster.ids() == ["u1", "u2"]


def test_from_pools_uses_side_hint():
    roster = RosterIndex.from_pools({
        "foh": [{"uid": "f1", "name": "Fay"}],
        "boh": [{"uid": "b1", "name": "Bill", "role": ""}],
    })
    assert roster.require("f1").role is Side.FOH
    assert roster.require("b1").role is Side.BOH


def test_lookups(roster):
    assert [e.id for e in roster.by_side(Side.BOH)] == ["emp_v", "emp_w", "emp_x", "emp_y", "emp_z"]
    assert roster.position("emp_c") == 2
    assert roster.position("nobody") == len(roster)
    assert roster.display_name("emp_a") == "Ana"
    assert roster.display_name("former") == "former"
    assert roster.display_name(None) == ""
    assert roster.get("nobody") is None
    with pytest.raises(ValidationError):
        roster.require("nobody")

"""Tests for the draft/published lifecycle."""

from datetime import timedelta

import pytest

from shiftboard.domain.entities import AuditEntry, WeekStatus
from shiftboard.engine.publish import DayState, PublishController
from shiftboard.errors import (
    IncompleteWeekError,
    LockedScheduleError,
    PersistenceError,
    ValidationError,
)


@pytest.fixture
def controller(grid):
    return PublishController(grid)


def test_publish_rejected_with_one_open_slot(grid, controller, fill_week):
    fill_week(grid, skip={("2025-07-13", "foh-bartender")})
    before = grid.assignment_set()
    assert len(before) == 55

    with pytest.raises(IncompleteWeekError) as exc:
        controller.publish("manager")

    assert exc.value.missing == [("2025-07-13", "foh-bartender")]
    assert controller.state is WeekStatus.DRAFT
    assert grid.assignment_set() == before
    assert grid.state.audit == []


def test_publish_complete_week_locks_it(grid, controller, fill_week):
    fill_week(grid)
    assert controller.can_publish()

    entry = controller.publish("manager")

    assert controller.state is WeekStatus.PUBLISHED
    assert grid.is_locked
    assert entry.action == "publish"
    assert entry.actor == "manager"
    assert grid.state.audit == [entry]
    with pytest.raises(LockedScheduleError):
        grid.clear("foh-host", "2025-07-07")


def test_publish_twice_is_rejected(grid, controller, fill_week):
    fill_week(grid)
    controller.publish()
    with pytest.raises(LockedScheduleError):
        controller.publish()


def test_failed_persist_keeps_draft(grid, controller, fill_week):
    fill_week(grid)

    def persist(entry):
        raise PersistenceError("store unavailable")

    with pytest.raises(PersistenceError):
        controller.publish("manager", persist=persist)

    assert controller.state is WeekStatus.DRAFT
    assert not grid.is_locked
    assert grid.state.audit == []


def test_persist_sees_audit_entry_before_status_flips(grid, controller, fill_week):
    fill_week(grid)
    seen = []

    def persist(entry):
        seen.append((entry.action, grid.status))

    controller.publish("manager", persist=persist)
    assert seen == [("publish", WeekStatus.DRAFT)]


def test_unpublish_requires_actor_and_reason(grid, controller, fill_week):
    fill_week(grid)
    controller.publish("manager")

    with pytest.raises(ValidationError):
        controller.unpublish("manager", "  ")
    with pytest.raises(ValidationError):
        controller.unpublish("", "late call-out")
    assert controller.state is WeekStatus.PUBLISHED


def test_unpublish_is_audited(grid, controller, fill_week):
    fill_week(grid)
    controller.publish("manager")

    entry = controller.unpublish("gm", "Emergency swap on Friday")

    assert controller.state is WeekStatus.DRAFT
    assert [a.action for a in grid.state.audit] == ["publish", "unpublish"]
    assert entry.reason == "Emergency swap on Friday"
    assert entry.at.utcoffset() == timedelta(0)
    assert AuditEntry.from_dict(entry.to_dict()).at == entry.at
    grid.clear("foh-host", "2025-07-11")
    assert not grid.is_day_complete("2025-07-11")


def test_unpublish_draft_is_rejected(controller):
    with pytest.raises(ValidationError):
        controller.unpublish("gm", "no reason")


def test_day_state_and_save_gates(grid, controller, fill_week):
    assert controller.day_state("2025-07-07") is DayState.INCOMPLETE
    fill_week(grid, dates=["2025-07-07"])
    assert controller.day_state("2025-07-07") is DayState.COMPLETE
    assert controller.can_save_day("2025-07-07")
    assert not controller.can_save_week()
    assert not controller.can_publish()

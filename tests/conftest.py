"""Pytest configuration and shared fixtures."""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from shiftboard.config import SchedulerConfig
from shiftboard.domain.entities import Employee, Side, TimeOffBlock
from shiftboard.domain.models import Base
from shiftboard.engine.grid import WeekGrid
from shiftboard.services.eligibility import EligibilityGuard
from shiftboard.services.roster import RosterIndex

# Monday 2025-07-07 .. Sunday 2025-07-13
WEEK_ENDING = "2025-07-13"
BLOCKED_DAY = "2025-07-09"


def pytest_configure(config):
    """Configure pytest."""
    # Add custom markers
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests (deselect with '-m \"not integration\"')"
    )
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )


@pytest.fixture
def db_session():
    """Create in-memory database session for testing."""
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)
    SessionLocal = sessionmaker(bind=engine)
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def slots():
    return SchedulerConfig().shift_slots()


@pytest.fixture
def employees():
    """Five front-of-house and five back-of-house staff, in roster order."""
    return [
        Employee("emp_a", "Ana", Side.FOH),
        Employee("emp_b", "Ben", Side.FOH),
        Employee("emp_c", "Cleo", Side.FOH),
        Employee("emp_d", "Dev", Side.FOH),
        Employee("emp_e", "Eli", Side.FOH),
        Employee("emp_v", "Vic", Side.BOH),
        Employee("emp_w", "Wes", Side.BOH),
        Employee("emp_x", "Xia", Side.BOH),
        Employee("emp_y", "Yara", Side.BOH),
        Employee("emp_z", "Zed", Side.BOH),
    ]


@pytest.fixture
def roster(employees):
    return RosterIndex(employees)


@pytest.fixture
def guard():
    """emp_b has approved time off on Wednesday."""
    return EligibilityGuard([TimeOffBlock("emp_b", BLOCKED_DAY, "Vacation")])


@pytest.fixture
def grid(slots, guard, roster):
    return WeekGrid(WEEK_ENDING, slots, guard=guard, roster=roster)


@pytest.fixture
def fill_week(roster):
    """Fill every slot of a grid with distinct, unblocked staff of the right side."""

    def _fill(grid, skip=(), dates=None):
        for iso in dates or grid.dates:
            pools = {
                side: [e for e in roster.by_side(side) if not grid.guard.is_blocked(iso, e.id)]
                for side in (Side.FOH, Side.BOH)
            }
            for slot in grid.slots:
                if (iso, slot.id) in skip:
                    continue
                grid.assign(slot.id, pools[slot.side].pop(0), iso)

    return _fill

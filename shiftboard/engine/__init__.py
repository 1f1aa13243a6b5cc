"""Scheduling engine: grid, recommendations and publish lifecycle."""

from .grid import ScheduleEngineState, WeekGrid
from .publish import DayState, PublishController
from .recommend import RecommendationEngine
from .session import WeekSession, load_week_session

__all__ = [
    "ScheduleEngineState",
    "WeekGrid",
    "DayState",
    "PublishController",
    "RecommendationEngine",
    "WeekSession",
    "load_week_session",
]

"""Domain models and holiday cache storage."""

from .models import (
    EquityResult,
    HeatmapSlot,
    Holiday,
    HolidayCacheEntry,
    Participant,
    ParticipantStatus,
    Status,
    WorkingHoursPolicy,
)
from .repositories import HolidayRepository, InMemoryHolidayRepository, SqlHolidayRepository

__all__ = [
    "EquityResult",
    "HeatmapSlot",
    "Holiday",
    "HolidayCacheEntry",
    "Participant",
    "ParticipantStatus",
    "Status",
    "WorkingHoursPolicy",
    "HolidayRepository",
    "InMemoryHolidayRepository",
    "SqlHolidayRepository",
]

"""Value types for the scheduling-equity engine.

Every model is an immutable dataclass. Participants and custom policies are
owned by the caller's storage layer; the derived results (statuses, equity
results, heatmap slots) are recomputed on every call and never persisted by
the engine.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from enum import Enum
from typing import FrozenSet, Optional, Tuple


class Status(str, Enum):
    """Comfort classification of a participant at a candidate time."""

    GREEN = "green"
    ORANGE = "orange"
    RED = "red"
    CRITICAL = "critical"


@dataclass(frozen=True)
class Participant:
    """Meeting participant.

    Example:
        >>> Participant(name="Alice", timezone="Europe/Paris", country_code="FR")
    """

    name: str
    timezone: str
    country_code: str
    id: Optional[str] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class WorkingHoursPolicy:
    """Working-hours policy for one country.

    Windows are half-open ``[start, end)`` times of day. ``work_days`` holds
    ISO weekdays (1=Monday ... 7=Sunday).
    """

    country_code: str
    green_start: time
    green_end: time
    orange_morning_start: time
    orange_morning_end: time
    orange_evening_start: time
    orange_evening_end: time
    work_days: FrozenSet[int]
    is_default: bool = True


@dataclass(frozen=True)
class Holiday:
    """National holiday as reported by the holiday source.

    Example:
        >>> Holiday(date=date(2025, 7, 14), name="Bastille Day", country_code="FR")
    """

    date: date
    name: str
    country_code: str
    local_name: Optional[str] = None
    fixed: bool = False
    is_global: bool = True
    counties: Optional[Tuple[str, ...]] = None
    types: Tuple[str, ...] = ()


@dataclass(frozen=True)
class HolidayCacheEntry:
    """All holidays of one (country, year) plus the time they were fetched."""

    country_code: str
    year: int
    holidays: Tuple[Holiday, ...]
    fetched_at: datetime

    @property
    def key(self) -> Tuple[str, int]:
        return (self.country_code, self.year)


@dataclass(frozen=True)
class ParticipantStatus:
    """Classification of one participant at one candidate instant."""

    participant: Participant
    local_time: datetime
    status: Status
    reason: str
    policy: WorkingHoursPolicy
    holiday: Optional[Holiday] = None
    provisional: bool = False

    @property
    def is_critical(self) -> bool:
        return self.status is Status.CRITICAL


@dataclass(frozen=True)
class EquityResult:
    """Aggregate fairness of a candidate time across the roster."""

    score: float
    green_count: int
    orange_count: int
    red_count: int
    critical_count: int
    total_points: int
    max_possible: int

    @property
    def participant_count(self) -> int:
        return self.green_count + self.orange_count + self.red_count + self.critical_count

    def breakdown(self) -> dict:
        return {
            Status.GREEN.value: self.green_count,
            Status.ORANGE.value: self.orange_count,
            Status.RED.value: self.red_count,
            Status.CRITICAL.value: self.critical_count,
            "total": self.participant_count,
        }


@dataclass(frozen=True)
class HeatmapSlot:
    """One hour of a heatmap scan."""

    hour: int
    instant: datetime
    equity: EquityResult
    statuses: Tuple[ParticipantStatus, ...] = ()

    @property
    def score(self) -> float:
        return self.equity.score

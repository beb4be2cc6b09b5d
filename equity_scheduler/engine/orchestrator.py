"""EquityEngine - wires time resolution, policies, holidays, classification and scoring."""

from __future__ import annotations

import itertools
import logging
import threading
from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Dict, FrozenSet, Iterable, List, Optional, Sequence, Tuple

from equity_scheduler.domain.models import EquityResult, HeatmapSlot, Holiday, Participant, ParticipantStatus
from equity_scheduler.domain.repositories import InMemoryHolidayRepository, SqlHolidayRepository
from equity_scheduler.errors import EmptyRosterError
from equity_scheduler.services.holidays import HolidayCache, HolidayKey, NagerDateSource
from equity_scheduler.services.policies import ConfigResolver, index_custom_policies, normalize_country_code
from equity_scheduler.services.scoring import calculate_equity_score
from equity_scheduler.services.timeplan import get_zone, localize

from .heatmap import HeatmapGenerator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MeetingEvaluation:
    instant: datetime
    statuses: Tuple[ParticipantStatus, ...]
    equity: EquityResult
    degraded: bool
    degraded_keys: FrozenSet[HolidayKey]


@dataclass(frozen=True)
class OptimalTimes:
    target_date: date
    anchor_timezone: str
    slots: Tuple[HeatmapSlot, ...]
    suggestions: Tuple[HeatmapSlot, ...]
    degraded: bool
    degraded_keys: FrozenSet[HolidayKey]


class RequestTracker:
    """
    Last-request-wins bookkeeping for callers that re-score as the user edits.

    Results computed for a superseded ticket should be discarded by the
    caller; holiday fetches they triggered still populate the cache.
    """

    def __init__(self):
        self._counter = itertools.count(1)
        self._latest = 0
        self._lock = threading.Lock()

    def begin(self) -> int:
        with self._lock:
            self._latest = next(self._counter)
            return self._latest

    def is_current(self, ticket: int) -> bool:
        with self._lock:
            return ticket == self._latest


class EquityEngine:
    """
    End-to-end scoring for a roster.

    Input is validated at the boundary: an empty roster, unknown timezone,
    malformed country code or malformed custom policy fails before any
    holiday is fetched.
    """

    def __init__(
        self,
        holiday_cache: HolidayCache,
        resolver: ConfigResolver | None = None,
        prefetch_workers: int = 4,
        heatmap_workers: int = 1,
        anchor_timezone: str = "UTC",
        top_n: int = 3,
    ):
        self.holiday_cache = holiday_cache
        self.resolver = resolver or ConfigResolver()
        self.prefetch_workers = prefetch_workers
        self.heatmap = HeatmapGenerator(self.resolver, max_workers=heatmap_workers)
        self.anchor_timezone = anchor_timezone
        self.top_n = top_n

    @classmethod
    def from_config(cls, cfg, source=None, repository=None) -> "EquityEngine":
        """Build an engine (and its holiday cache) from an EngineConfig."""
        if source is None:
            source = NagerDateSource(
                base_url=cfg.holiday_source.base_url,
                timeout=cfg.holiday_source.timeout_seconds,
                include_regional=cfg.holiday_source.include_regional,
            )
        if repository is None:
            if cfg.cache.db_url:
                repository = SqlHolidayRepository.from_url(cfg.cache.db_url)
            else:
                repository = InMemoryHolidayRepository()
        cache = HolidayCache(source, repository, retry_policy=cfg.retry, ttl=cfg.cache.ttl)
        return cls(
            cache,
            resolver=ConfigResolver(cfg.country_defaults),
            prefetch_workers=cfg.prefetch_workers,
            heatmap_workers=cfg.heatmap.max_workers,
            anchor_timezone=cfg.heatmap.anchor_timezone,
            top_n=cfg.heatmap.top_n,
        )

    def _validate_roster(self, participants: Sequence[Participant]) -> List[Participant]:
        if not participants:
            raise EmptyRosterError()
        validated = []
        for participant in participants:
            get_zone(participant.timezone)
            code = normalize_country_code(participant.country_code)
            validated.append(participant if code == participant.country_code else replace(participant, country_code=code))
        return validated

    def _holiday_keys(self, participants: Sequence[Participant], instants: Iterable[datetime]) -> List[HolidayKey]:
        keys = []
        seen = set()
        for instant in instants:
            for participant in participants:
                key = (participant.country_code, localize(instant, participant.timezone).local.year)
                if key not in seen:
                    seen.add(key)
                    keys.append(key)
        return keys

    def _load_holidays(self, keys: Sequence[HolidayKey]) -> Tuple[Dict[HolidayKey, List[Holiday]], FrozenSet[HolidayKey]]:
        lookups = self.holiday_cache.prefetch(keys, max_workers=self.prefetch_workers)
        holidays = {key: lookup.holidays for key, lookup in lookups.items()}
        degraded = frozenset(key for key, lookup in lookups.items() if lookup.degraded)
        if degraded:
            logger.warning("Holiday data degraded for %s", ", ".join(f"{c} {y}" for c, y in sorted(degraded)))
        return holidays, degraded

    def evaluate(
        self,
        participants: Sequence[Participant],
        instant: datetime,
        custom_policies=(),
    ) -> MeetingEvaluation:
        """
        Classify and score every participant at one candidate instant.

        Args:
            participants: Non-empty roster
            instant: Candidate meeting time (timezone-aware)
            custom_policies: Organizer's custom policies (mapping or iterable)

        Returns:
            MeetingEvaluation; ``degraded`` is True if any holiday data used
            could not be freshly verified
        """
        roster = self._validate_roster(participants)
        custom = index_custom_policies(custom_policies)
        holidays, degraded = self._load_holidays(self._holiday_keys(roster, [instant]))

        statuses = self.heatmap.evaluate_instant(
            roster,
            instant,
            self.resolver.resolve_many({p.country_code for p in roster}, custom),
            holidays,
            degraded,
        )
        return MeetingEvaluation(
            instant=instant,
            statuses=tuple(statuses),
            equity=calculate_equity_score(statuses),
            degraded=bool(degraded),
            degraded_keys=degraded,
        )

    def find_optimal_times(
        self,
        participants: Sequence[Participant],
        target_date: date,
        custom_policies=(),
        top_n: Optional[int] = None,
        anchor_timezone: Optional[str] = None,
    ) -> OptimalTimes:
        """Scan all 24 hours of ``target_date`` and rank them."""
        roster = self._validate_roster(participants)
        custom = index_custom_policies(custom_policies)
        anchor = anchor_timezone or self.anchor_timezone
        top_n = self.top_n if top_n is None else top_n

        instants = self.heatmap.slot_instants(target_date, anchor)
        holidays, degraded = self._load_holidays(self._holiday_keys(roster, instants))
        slots, suggestions = self.heatmap.generate(
            roster,
            target_date,
            self.resolver.resolve_many({p.country_code for p in roster}, custom),
            holidays,
            top_n=top_n,
            anchor_timezone=anchor,
            degraded_keys=degraded,
        )
        return OptimalTimes(
            target_date=target_date,
            anchor_timezone=anchor,
            slots=tuple(slots),
            suggestions=tuple(suggestions),
            degraded=bool(degraded),
            degraded_keys=degraded,
        )

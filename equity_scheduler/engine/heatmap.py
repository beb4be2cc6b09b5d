"""24-hour equity heatmap and ranked time suggestions."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from datetime import date, datetime
from typing import AbstractSet, Iterable, List, Mapping, NamedTuple, Sequence, Tuple

from equity_scheduler.domain.models import HeatmapSlot, Holiday, Participant, ParticipantStatus, WorkingHoursPolicy
from equity_scheduler.errors import EmptyRosterError
from equity_scheduler.services.classifier import classify
from equity_scheduler.services.policies import ConfigResolver
from equity_scheduler.services.scoring import calculate_equity_score
from equity_scheduler.services.timeplan import instant_at_hour, localize

HOURS = range(24)


class Heatmap(NamedTuple):
    slots: List[HeatmapSlot]
    suggestions: List[HeatmapSlot]


def top_suggestions(slots: Sequence[HeatmapSlot], count: int = 3) -> List[HeatmapSlot]:
    """
    Best ``count`` slots by descending score.

    The sort is stable, so among equal scores the earlier hour wins.
    """
    if count < 0:
        raise ValueError("count must not be negative")
    ranked = sorted(slots, key=lambda slot: slot.equity.score, reverse=True)
    return ranked[:count]


class HeatmapGenerator:
    """
    Scans every hour of a day, classifying and scoring the whole roster.

    Slot ``h`` is the instant ``h`` hours after local midnight of the target
    date in ``anchor_timezone`` (UTC by default).
    """

    def __init__(self, resolver: ConfigResolver | None = None, max_workers: int = 1):
        self.resolver = resolver or ConfigResolver()
        self.max_workers = max_workers

    def slot_instants(self, target_date: date, anchor_timezone: str = "UTC") -> List[datetime]:
        return [instant_at_hour(target_date, hour, anchor_timezone) for hour in HOURS]

    def _policy_for(self, country_code: str, policies_by_country: Mapping[str, WorkingHoursPolicy]) -> WorkingHoursPolicy:
        policy = policies_by_country.get(country_code)
        return policy if policy is not None else self.resolver.resolve(country_code)

    def evaluate_instant(
        self,
        participants: Sequence[Participant],
        instant: datetime,
        policies_by_country: Mapping[str, WorkingHoursPolicy],
        holidays_by_country_year: Mapping[Tuple[str, int], Iterable[Holiday]],
        degraded_keys: AbstractSet[Tuple[str, int]] = frozenset(),
    ) -> List[ParticipantStatus]:
        """Classify every participant at one instant."""
        statuses = []
        for participant in participants:
            local_year = localize(instant, participant.timezone).local.year
            key = (participant.country_code, local_year)
            statuses.append(
                classify(
                    participant,
                    instant,
                    self._policy_for(participant.country_code, policies_by_country),
                    holidays_by_country_year.get(key, ()),
                    holidays_degraded=key in degraded_keys,
                )
            )
        return statuses

    def generate(
        self,
        participants: Sequence[Participant],
        target_date: date,
        policies_by_country: Mapping[str, WorkingHoursPolicy],
        holidays_by_country_year: Mapping[Tuple[str, int], Iterable[Holiday]],
        top_n: int = 3,
        anchor_timezone: str = "UTC",
        degraded_keys: AbstractSet[Tuple[str, int]] = frozenset(),
    ) -> Heatmap:
        """
        Build the 24-slot heatmap for ``target_date``.

        Args:
            participants: Non-empty roster
            target_date: Calendar date in the anchor timezone
            policies_by_country: Resolved policy per country code
            holidays_by_country_year: Holidays keyed by (country_code, year)
            top_n: Number of suggestions to return
            anchor_timezone: Timezone whose wall-clock hours are scanned
            degraded_keys: Holiday keys whose data is provisional

        Returns:
            Heatmap(slots in hour order, suggestions ranked by score)

        Raises:
            EmptyRosterError: If the roster is empty
        """
        if not participants:
            raise EmptyRosterError()

        def build_slot(hour: int) -> HeatmapSlot:
            instant = instant_at_hour(target_date, hour, anchor_timezone)
            statuses = self.evaluate_instant(
                participants, instant, policies_by_country, holidays_by_country_year, degraded_keys
            )
            return HeatmapSlot(
                hour=hour,
                instant=instant,
                equity=calculate_equity_score(statuses),
                statuses=tuple(statuses),
            )

        if self.max_workers > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
                # map keeps hour order
                slots = list(pool.map(build_slot, HOURS))
        else:
            slots = [build_slot(hour) for hour in HOURS]

        return Heatmap(slots, top_suggestions(slots, top_n))

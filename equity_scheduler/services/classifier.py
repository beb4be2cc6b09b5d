"""Per-participant comfort classification at a candidate meeting time."""

from __future__ import annotations

from datetime import datetime
from typing import Iterable

from equity_scheduler.domain.models import Holiday, Participant, ParticipantStatus, Status, WorkingHoursPolicy

from .holidays import find_holiday
from .timeplan import localize, minutes_of_day

REASON_HOLIDAY = "National Holiday: {name}"
REASON_NON_WORKING_DAY = "Non-working day"
REASON_OUTSIDE_HOURS = "Outside working hours"
REASON_OPTIMAL = "Optimal working hours"
REASON_BUFFER = "Buffer hours"


def _within(value: int, start, end) -> bool:
    return minutes_of_day(start) <= value < minutes_of_day(end)


def classify_time_of_day(minute_of_day: int, policy: WorkingHoursPolicy) -> tuple:
    """
    Band a minute-of-day against the policy windows (all half-open).

    A minute falling between an orange window and the green window is red.
    """
    if not _within(minute_of_day, policy.orange_morning_start, policy.orange_evening_end):
        return Status.RED, REASON_OUTSIDE_HOURS
    if _within(minute_of_day, policy.green_start, policy.green_end):
        return Status.GREEN, REASON_OPTIMAL
    if _within(minute_of_day, policy.orange_morning_start, policy.orange_morning_end) or _within(
        minute_of_day, policy.orange_evening_start, policy.orange_evening_end
    ):
        return Status.ORANGE, REASON_BUFFER
    return Status.RED, REASON_OUTSIDE_HOURS


def classify(
    participant: Participant,
    instant: datetime,
    policy: WorkingHoursPolicy,
    holidays: Iterable[Holiday] = (),
    holidays_degraded: bool = False,
) -> ParticipantStatus:
    """
    Classify one participant at one candidate instant.

    First match wins: national holiday, then non-working day, then the
    time-of-day band.

    Args:
        participant: Participant to classify
        instant: Candidate meeting time (timezone-aware)
        policy: Resolved working-hours policy for the participant's country
        holidays: Holidays of the participant's country for the local year
        holidays_degraded: Holiday data could not be freshly verified

    Returns:
        ParticipantStatus; ``provisional`` mirrors ``holidays_degraded``

    Raises:
        InvalidTimezoneError: If the participant's timezone is unknown
    """
    local, weekday = localize(instant, participant.timezone)

    holiday = find_holiday(local.date(), holidays)
    if holiday is not None:
        status, reason = Status.CRITICAL, REASON_HOLIDAY.format(name=holiday.name)
    elif weekday not in policy.work_days:
        status, reason = Status.CRITICAL, REASON_NON_WORKING_DAY
    else:
        status, reason = classify_time_of_day(minutes_of_day(local), policy)

    return ParticipantStatus(
        participant=participant,
        local_time=local,
        status=status,
        reason=reason,
        policy=policy,
        holiday=holiday,
        provisional=holidays_degraded,
    )

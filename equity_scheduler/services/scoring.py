"""Equity scoring: aggregate participant statuses into a 0-100 fairness score."""

from __future__ import annotations

from typing import Dict, Sequence

from equity_scheduler.domain.models import EquityResult, ParticipantStatus, Status
from equity_scheduler.errors import EmptyRosterError

STATUS_WEIGHTS: Dict[Status, int] = {
    Status.GREEN: 10,
    Status.ORANGE: 5,
    Status.RED: -15,
    Status.CRITICAL: -50,
}


def clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


def calculate_equity_score(statuses: Sequence[ParticipantStatus]) -> EquityResult:
    """
    Score a candidate time.

    score = clamp(sum(weights) / (participants * 10) * 100, 0, 100), where
    10 is the green weight, so an all-green roster scores 100.

    Args:
        statuses: One status per participant

    Returns:
        EquityResult with the score and per-status counts

    Raises:
        EmptyRosterError: If ``statuses`` is empty
    """
    if not statuses:
        raise EmptyRosterError("Cannot score an empty roster")

    counts = {status: 0 for status in Status}
    for s in statuses:
        counts[Status(s.status)] += 1

    total_points = sum(STATUS_WEIGHTS[status] * n for status, n in counts.items())
    max_possible = len(statuses) * STATUS_WEIGHTS[Status.GREEN]
    score = clamp(total_points / max_possible * 100)

    return EquityResult(
        score=score,
        green_count=counts[Status.GREEN],
        orange_count=counts[Status.ORANGE],
        red_count=counts[Status.RED],
        critical_count=counts[Status.CRITICAL],
        total_points=total_points,
        max_possible=max_possible,
    )


def score_quality(score: float) -> str:
    """Quality band: excellent (>=71), good (>=41), fair (>=1), poor."""
    if score >= 71:
        return "excellent"
    if score >= 41:
        return "good"
    if score >= 1:
        return "fair"
    return "poor"


def compare_scores(score_a: float, score_b: float) -> int:
    """1 if A is better, -1 if B is better, 0 if equal."""
    if score_a > score_b:
        return 1
    if score_a < score_b:
        return -1
    return 0

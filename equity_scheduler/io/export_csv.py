"""Tabular export of engine results."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

import pandas as pd

from equity_scheduler.domain.models import HeatmapSlot, ParticipantStatus
from equity_scheduler.services.scoring import score_quality

STATUS_COLUMNS = [
    "participant_id",
    "name",
    "timezone",
    "country_code",
    "local_time",
    "status",
    "reason",
    "provisional",
]

HEATMAP_COLUMNS = [
    "hour",
    "instant_utc",
    "score",
    "quality",
    "green",
    "orange",
    "red",
    "critical",
    "provisional",
]


def statuses_to_frame(statuses: Sequence[ParticipantStatus]) -> pd.DataFrame:
    rows = [
        {
            "participant_id": s.participant.id,
            "name": s.participant.name,
            "timezone": s.participant.timezone,
            "country_code": s.participant.country_code,
            "local_time": s.local_time.isoformat(),
            "status": s.status.value,
            "reason": s.reason,
            "provisional": s.provisional,
        }
        for s in statuses
    ]
    return pd.DataFrame(rows, columns=STATUS_COLUMNS)


def heatmap_to_frame(slots: Sequence[HeatmapSlot]) -> pd.DataFrame:
    rows = [
        {
            "hour": slot.hour,
            "instant_utc": slot.instant.isoformat(),
            "score": round(slot.equity.score, 2),
            "quality": score_quality(slot.equity.score),
            "green": slot.equity.green_count,
            "orange": slot.equity.orange_count,
            "red": slot.equity.red_count,
            "critical": slot.equity.critical_count,
            "provisional": any(s.provisional for s in slot.statuses),
        }
        for slot in slots
    ]
    return pd.DataFrame(rows, columns=HEATMAP_COLUMNS)


def export_statuses_csv(statuses: Sequence[ParticipantStatus], csv_path: str | Path) -> int:
    """Write participant statuses to CSV. Returns number of rows written."""
    df = statuses_to_frame(statuses)
    df.to_csv(csv_path, index=False)
    return len(df)


def export_heatmap_csv(slots: Sequence[HeatmapSlot], csv_path: str | Path) -> int:
    """Write heatmap slots to CSV. Returns number of rows written."""
    df = heatmap_to_frame(slots)
    df.to_csv(csv_path, index=False)
    return len(df)

"""CSV import utilities for rosters and custom policies."""

from __future__ import annotations

from pathlib import Path
from typing import List

import pandas as pd

from equity_scheduler.domain.models import Participant, WorkingHoursPolicy
from equity_scheduler.services.policies import normalize_country_code, policy_from_dict

PARTICIPANT_COLUMNS = ("name", "timezone", "country_code")


def _read_frame(csv_path: str | Path) -> pd.DataFrame:
    # keep_default_na=False: "NA" is Namibia, not a missing value
    df = pd.read_csv(csv_path, dtype=str, keep_default_na=False)
    df.columns = df.columns.str.lower().str.strip()
    return df


def _optional(row: pd.Series, column: str):
    value = str(row.get(column, "")).strip()
    return value or None


def read_participants_csv(csv_path: str | Path) -> List[Participant]:
    """
    Read a participant roster from CSV.

    Args:
        csv_path: CSV with columns name, timezone, country_code (or country)
            and optional id, notes

    Returns:
        Participants in file order
    """
    df = _read_frame(csv_path)
    if "country_code" not in df.columns and "country" in df.columns:
        df.rename(columns={"country": "country_code"}, inplace=True)

    missing = [c for c in PARTICIPANT_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"Roster CSV is missing columns: {', '.join(missing)}")

    participants = []
    for _, row in df.iterrows():
        participants.append(
            Participant(
                name=str(row["name"]).strip(),
                timezone=str(row["timezone"]).strip(),
                country_code=normalize_country_code(row["country_code"]),
                id=_optional(row, "id"),
                notes=_optional(row, "notes"),
            )
        )
    return participants


def read_policies_csv(csv_path: str | Path) -> List[WorkingHoursPolicy]:
    """
    Read custom working-hours policies from CSV.

    Columns: country_code, green_start, green_end, orange_morning_start,
    orange_morning_end, orange_evening_start, orange_evening_end and
    work_days (pattern like "MTWThF" or a comma list like "1,2,3,4,5").
    Blank cells fall back to the global default.
    """
    df = _read_frame(csv_path)
    if "country_code" not in df.columns:
        raise ValueError("Policy CSV is missing column: country_code")

    policies = []
    for _, row in df.iterrows():
        fields = {k: v.strip() for k, v in row.items() if isinstance(v, str) and v.strip()}
        policies.append(policy_from_dict(fields, is_default=False))
    return policies

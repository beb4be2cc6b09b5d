"""Tests for CSV import/export functionality."""

from datetime import date, time

import pandas as pd
import pytest

from equity_scheduler.engine.heatmap import HeatmapGenerator
from equity_scheduler.errors import InvalidCountryCodeError, InvalidPolicyError
from equity_scheduler.io.export_csv import HEATMAP_COLUMNS, STATUS_COLUMNS, export_heatmap_csv, export_statuses_csv
from equity_scheduler.io.import_csv import read_participants_csv, read_policies_csv


def test_read_participants_csv(tmp_path):
    """Test importing a roster from CSV."""
    csv_file = tmp_path / "roster.csv"
    csv_file.write_text(
        "id,name,timezone,country_code,notes\n"
        "p1,Amelie,Europe/Paris,fr,\n"
        "p2,Noah,America/New_York,US,Remote\n"
        "p3,Johanna,Africa/Windhoek,NA,\n"
    )

    participants = read_participants_csv(csv_file)

    assert [p.name for p in participants] == ["Amelie", "Noah", "Johanna"]
    assert participants[0].country_code == "FR"
    assert participants[0].notes is None
    assert participants[1].notes == "Remote"
    # Namibia's code must not be read as a missing value
    assert participants[2].country_code == "NA"


def test_read_participants_accepts_country_alias(tmp_path):
    csv_file = tmp_path / "roster.csv"
    csv_file.write_text("Name,Timezone,Country\nHaruto,Asia/Tokyo,JP\n")

    participants = read_participants_csv(csv_file)

    assert participants[0].country_code == "JP"
    assert participants[0].id is None


def test_read_participants_missing_columns(tmp_path):
    csv_file = tmp_path / "roster.csv"
    csv_file.write_text("name,country_code\nAmelie,FR\n")
    with pytest.raises(ValueError, match="timezone"):
        read_participants_csv(csv_file)


def test_read_participants_bad_country(tmp_path):
    csv_file = tmp_path / "roster.csv"
    csv_file.write_text("name,timezone,country_code\nAmelie,Europe/Paris,FRA\n")
    with pytest.raises(InvalidCountryCodeError):
        read_participants_csv(csv_file)


def test_read_policies_csv(tmp_path):
    csv_file = tmp_path / "policies.csv"
    csv_file.write_text(
        "country_code,green_start,green_end,orange_morning_start,orange_morning_end,"
        "orange_evening_start,orange_evening_end,work_days\n"
        "IN,09:30,17:30,08:30,09:30,17:30,18:30,MTWThFSa\n"
        "de,,,,,,,\n"
    )

    policies = read_policies_csv(csv_file)

    assert policies[0].country_code == "IN"
    assert policies[0].green_start == time(9, 30)
    assert policies[0].work_days == {1, 2, 3, 4, 5, 6}
    assert policies[1].country_code == "DE"
    assert policies[1].green_start == time(9, 0)
    assert all(not p.is_default for p in policies)


def test_read_policies_rejects_invalid_window(tmp_path):
    csv_file = tmp_path / "policies.csv"
    csv_file.write_text("country_code,green_start,green_end\nFR,17:00,09:00\n")
    with pytest.raises(InvalidPolicyError):
        read_policies_csv(csv_file)


def test_export_heatmap_csv(tmp_path, paris, new_york):
    """Test exporting all heatmap slots to CSV."""
    heatmap = HeatmapGenerator().generate([paris, new_york], date(2025, 1, 15), {}, {})
    out = tmp_path / "heatmap.csv"

    count = export_heatmap_csv(heatmap.slots, out)

    assert count == 24
    df = pd.read_csv(out)
    assert list(df.columns) == HEATMAP_COLUMNS
    row = df[df["hour"] == 14].iloc[0]
    assert row["score"] == 100
    assert row["quality"] == "excellent"
    assert row["green"] == 2
    assert row["instant_utc"] == "2025-01-15T14:00:00+00:00"


def test_export_statuses_csv(tmp_path, paris, new_york):
    heatmap = HeatmapGenerator().generate([paris, new_york], date(2025, 1, 15), {}, {})
    out = tmp_path / "statuses.csv"

    count = export_statuses_csv(heatmap.slots[10].statuses, out)

    assert count == 2
    df = pd.read_csv(out, dtype=str)
    assert list(df.columns) == STATUS_COLUMNS
    assert list(df["status"]) == ["green", "red"]
    assert list(df["participant_id"]) == ["p-fr", "p-us"]

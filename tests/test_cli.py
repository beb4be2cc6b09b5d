"""Tests for the command-line interface."""

import json
import logging
from datetime import date

import pandas as pd
import pytest

from equity_scheduler.cli import main
from equity_scheduler.domain.models import Holiday
from equity_scheduler.errors import HolidaySourceError
from equity_scheduler.log import JsonFormatter
from equity_scheduler.services.holidays import NagerDateSource

HOLIDAYS = {
    ("FR", 2025): [
        Holiday(date=date(2025, 5, 1), name="Labour Day", country_code="FR"),
        Holiday(date=date(2025, 7, 14), name="Bastille Day", country_code="FR"),
        Holiday(date=date(2025, 12, 25), name="Christmas Day", country_code="FR"),
    ],
}


@pytest.fixture(autouse=True)
def offline_source(monkeypatch):
    """Serve holidays from memory instead of the network."""
    monkeypatch.setattr(NagerDateSource, "fetch", lambda self, code, year: list(HOLIDAYS.get((code, year), [])))


@pytest.fixture
def roster(tmp_path):
    path = tmp_path / "roster.csv"
    path.write_text(
        "id,name,timezone,country_code\n"
        "p-fr,Amelie,Europe/Paris,FR\n"
        "p-us,Noah,America/New_York,US\n"
    )
    return path


def test_evaluate(roster, capsys):
    main(["evaluate", "--roster", str(roster), "--at", "2025-01-15T14:00Z"])
    out = capsys.readouterr().out
    assert "Equity score: 100.0 (excellent)" in out
    assert "[WARN]" not in out


def test_evaluate_export(roster, tmp_path, capsys):
    out_file = tmp_path / "statuses.csv"
    main(["evaluate", "--roster", str(roster), "--at", "2025-07-14T08:00Z", "--out", str(out_file)])

    assert "[OK] Exported 2 participant statuses" in capsys.readouterr().out
    df = pd.read_csv(out_file)
    assert list(df["status"]) == ["critical", "red"]


def test_heatmap(roster, tmp_path, capsys):
    out_file = tmp_path / "heatmap.csv"
    main(["heatmap", "--roster", str(roster), "--date", "2025-01-15", "--top", "2", "--out", str(out_file)])

    out = capsys.readouterr().out
    assert "1. 14:00  score 100.0" in out
    assert "2. 15:00  score 100.0" in out
    assert "  3. " not in out
    assert len(pd.read_csv(out_file)) == 24


def test_heatmap_reports_degraded_holidays(roster, tmp_path, monkeypatch, capsys):
    def down(self, code, year):
        raise HolidaySourceError("unreachable")

    monkeypatch.setattr(NagerDateSource, "fetch", down)
    config = tmp_path / "config.yaml"
    config.write_text("retry:\n  max_attempts: 1\n")

    main(["--config", str(config), "heatmap", "--roster", str(roster), "--date", "2025-01-15"])

    assert "[WARN] Holiday data could not be verified for: FR 2025, US 2025" in capsys.readouterr().out


def test_holidays_upcoming(capsys):
    main(["holidays", "--country", "fr", "--year", "2025", "--upcoming", "2", "--since", "2025-05-01"])
    out = capsys.readouterr().out
    assert "2025-07-14  Bastille Day" in out
    assert "2025-12-25  Christmas Day" in out
    assert "Labour Day" not in out
    assert "[OK] 2 holidays" in out


def test_sqlite_cache_option(tmp_path, capsys):
    db_url = f"sqlite:///{tmp_path / 'cache.db'}"
    main(["--db", db_url, "holidays", "--country", "FR", "--year", "2025"])
    assert "[OK] 3 holidays" in capsys.readouterr().out
    assert (tmp_path / "cache.db").exists()


def test_json_log_formatter():
    record = logging.LogRecord("equity_scheduler.services.holidays", logging.WARNING, __file__, 1, "down %s", ("FR",), None)
    payload = json.loads(JsonFormatter().format(record))
    assert payload == {"level": "WARNING", "logger": "equity_scheduler.services.holidays", "message": "down FR"}

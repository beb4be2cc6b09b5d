"""Storage back-ends for the holiday cache."""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from datetime import date, datetime, timezone
from typing import Dict, Optional, Tuple

from sqlalchemy import select

from .db import DEFAULT_DB_URL, HolidayCacheRecord, create_db_engine, get_session_factory, init_database
from .models import Holiday, HolidayCacheEntry


class HolidayRepository(ABC):
    """Key-value store of holiday cache entries keyed by (country_code, year).

    Implementations hold at most one entry per key; ``upsert`` replaces the
    whole entry.
    """

    @abstractmethod
    def get(self, country_code: str, year: int) -> Optional[HolidayCacheEntry]:
        """Return the entry for the key, fresh or stale, or None."""

    @abstractmethod
    def upsert(self, entry: HolidayCacheEntry) -> None:
        """Insert or replace the entry for ``entry.key``."""


class InMemoryHolidayRepository(HolidayRepository):
    """Process-local repository; the default store and the usual test double."""

    def __init__(self):
        self._entries: Dict[Tuple[str, int], HolidayCacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, country_code: str, year: int) -> Optional[HolidayCacheEntry]:
        with self._lock:
            return self._entries.get((country_code, year))

    def upsert(self, entry: HolidayCacheEntry) -> None:
        with self._lock:
            self._entries[entry.key] = entry

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class DatabaseManager:
    """Engine and session factory for the holiday cache database."""

    def __init__(self, db_url: str = DEFAULT_DB_URL):
        """
        Connect to the holiday cache database.

        Args:
            db_url: SQLAlchemy database URL (default: sqlite:///holiday_cache.db)
        """
        self.engine = create_db_engine(db_url)
        self.SessionLocal = get_session_factory(self.engine)

    def create_tables(self):
        """Create the holiday_cache table on first use."""
        init_database(self.engine)

    def get_session(self):
        """Open a session; callers use it as a context manager."""
        return self.SessionLocal()


class SqlHolidayRepository(HolidayRepository):
    """Holiday cache persisted through SQLAlchemy."""

    def __init__(self, db: DatabaseManager):
        self.db = db

    @classmethod
    def from_url(cls, db_url: str) -> "SqlHolidayRepository":
        db = DatabaseManager(db_url)
        db.create_tables()
        return cls(db)

    def get(self, country_code: str, year: int) -> Optional[HolidayCacheEntry]:
        with self.db.get_session() as session:
            record = session.execute(
                select(HolidayCacheRecord).where(
                    HolidayCacheRecord.country_code == country_code,
                    HolidayCacheRecord.year == year,
                )
            ).scalar_one_or_none()
            if record is None:
                return None
            return _record_to_entry(record)

    def upsert(self, entry: HolidayCacheEntry) -> None:
        payload = [_holiday_to_dict(h) for h in entry.holidays]
        with self.db.get_session() as session:
            record = session.execute(
                select(HolidayCacheRecord).where(
                    HolidayCacheRecord.country_code == entry.country_code,
                    HolidayCacheRecord.year == entry.year,
                )
            ).scalar_one_or_none()
            if record is None:
                record = HolidayCacheRecord(country_code=entry.country_code, year=entry.year)
                session.add(record)
            record.holidays_json = payload
            record.fetched_at = entry.fetched_at
            session.commit()


def _holiday_to_dict(holiday: Holiday) -> dict:
    return {
        "date": holiday.date.isoformat(),
        "name": holiday.name,
        "country_code": holiday.country_code,
        "local_name": holiday.local_name,
        "fixed": holiday.fixed,
        "is_global": holiday.is_global,
        "counties": list(holiday.counties) if holiday.counties is not None else None,
        "types": list(holiday.types),
    }


def _holiday_from_dict(data: dict) -> Holiday:
    counties = data.get("counties")
    return Holiday(
        date=date.fromisoformat(data["date"]),
        name=data["name"],
        country_code=data["country_code"],
        local_name=data.get("local_name"),
        fixed=bool(data.get("fixed", False)),
        is_global=bool(data.get("is_global", True)),
        counties=tuple(counties) if counties is not None else None,
        types=tuple(data.get("types") or ()),
    )


def _record_to_entry(record: HolidayCacheRecord) -> HolidayCacheEntry:
    fetched_at = record.fetched_at
    # SQLite drops tzinfo on the way back
    if fetched_at.tzinfo is None:
        fetched_at = fetched_at.replace(tzinfo=timezone.utc)
    return HolidayCacheEntry(
        country_code=record.country_code,
        year=record.year,
        holidays=tuple(_holiday_from_dict(d) for d in record.holidays_json),
        fetched_at=fetched_at,
    )

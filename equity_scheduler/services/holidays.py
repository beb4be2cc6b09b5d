"""
National holiday lookup with caching, retry and degraded-mode fallback.

The holiday cache is the only component of the engine that performs network
I/O. Entries are fresh for seven days; a stale entry is never discarded on a
failed refresh and is served instead, flagged as degraded.
"""

from __future__ import annotations

import logging
import threading
import time
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from datetime import date, datetime, timedelta, timezone
from typing import Callable, Dict, Iterable, List, Mapping, NamedTuple, Optional, Sequence, Tuple

import httpx

from equity_scheduler.domain.models import Holiday, HolidayCacheEntry
from equity_scheduler.domain.repositories import HolidayRepository, InMemoryHolidayRepository
from equity_scheduler.errors import HolidaySourceError

from .policies import normalize_country_code
from .retry import RetryPolicy

logger = logging.getLogger(__name__)

NAGER_API_BASE = "https://date.nager.at/api/v3"
CACHE_TTL = timedelta(days=7)
DEFAULT_TIMEOUT_SECONDS = 10.0
MIN_YEAR = 2000
MAX_YEAR = 2100

HolidayKey = Tuple[str, int]


class HolidayLookup(NamedTuple):
    holidays: List[Holiday]
    degraded: bool


class HolidaySource(ABC):
    """Read-only lookup of a country's holidays for a year."""

    @abstractmethod
    def fetch(self, country_code: str, year: int) -> List[Holiday]:
        """
        Fetch holidays.

        Raises:
            HolidaySourceError: If the source is unreachable or answers with an error
        """


class NagerDateSource(HolidaySource):
    """Client for the Nager.Date public holiday API."""

    def __init__(
        self,
        base_url: str = NAGER_API_BASE,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        include_regional: bool = False,
        client: Optional[httpx.Client] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.include_regional = include_regional
        self._client = client

    def fetch(self, country_code: str, year: int) -> List[Holiday]:
        url = f"{self.base_url}/PublicHolidays/{year}/{country_code}"
        try:
            if self._client is not None:
                response = self._client.get(url, timeout=self.timeout, headers={"Accept": "application/json"})
            else:
                with httpx.Client(timeout=self.timeout) as client:
                    response = client.get(url, headers={"Accept": "application/json"})
        except httpx.HTTPError as e:
            raise HolidaySourceError(f"Holiday request failed for {country_code} {year}: {e}") from e

        # Unknown country: no data, nothing to retry
        if response.status_code in (204, 404):
            logger.info("No holiday data for %s %s (HTTP %s)", country_code, year, response.status_code)
            return []
        if response.status_code >= 400:
            raise HolidaySourceError(
                f"Holiday API error for {country_code} {year}: {response.status_code} {response.reason_phrase}"
            )
        try:
            payload = response.json()
        except ValueError as e:
            raise HolidaySourceError(f"Holiday API returned invalid JSON for {country_code} {year}") from e
        if not isinstance(payload, list):
            raise HolidaySourceError(f"Holiday API returned unexpected payload for {country_code} {year}")

        holidays = [parse_holiday(item, country_code) for item in payload]
        if not self.include_regional:
            holidays = [h for h in holidays if h.is_global]
        return holidays


def parse_holiday(item: dict, country_code: str) -> Holiday:
    """Convert one Nager.Date holiday object."""
    if not isinstance(item, Mapping):
        raise HolidaySourceError(f"Malformed holiday record: {item!r}")
    try:
        counties = item.get("counties")
        return Holiday(
            date=date.fromisoformat(item["date"]),
            name=item.get("name") or item.get("localName") or "Holiday",
            country_code=(item.get("countryCode") or country_code).upper(),
            local_name=item.get("localName"),
            fixed=bool(item.get("fixed", False)),
            is_global=bool(item.get("global", True)),
            counties=tuple(counties) if counties else None,
            types=tuple(item.get("types") or ()),
        )
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise HolidaySourceError(f"Malformed holiday record: {item!r}") from e


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class HolidayCache:
    """
    Holiday store keyed by (country_code, year).

    ``get`` never raises for source outages: after the retry policy is
    exhausted it serves the stale entry if one exists, otherwise an empty
    list, and reports ``degraded=True``. Requests for the same key are
    coalesced behind a per-key lock; distinct keys proceed in parallel.
    """

    def __init__(
        self,
        source: HolidaySource,
        repository: Optional[HolidayRepository] = None,
        retry_policy: RetryPolicy = RetryPolicy(),
        ttl: timedelta = CACHE_TTL,
        clock: Callable[[], datetime] = _utcnow,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.source = source
        self.repository = repository if repository is not None else InMemoryHolidayRepository()
        self.retry_policy = retry_policy
        self.ttl = ttl
        self._clock = clock
        self._sleep = sleep
        self._key_locks: Dict[HolidayKey, threading.Lock] = {}
        self._guard = threading.Lock()

    def is_fresh(self, entry: HolidayCacheEntry, now: Optional[datetime] = None) -> bool:
        now = now or self._clock()
        return now - entry.fetched_at < self.ttl

    def _lock_for(self, key: HolidayKey) -> threading.Lock:
        with self._guard:
            lock = self._key_locks.get(key)
            if lock is None:
                lock = self._key_locks[key] = threading.Lock()
            return lock

    def get(self, country_code: str, year: int, retry_policy: Optional[RetryPolicy] = None) -> HolidayLookup:
        """
        Holidays for a country and year.

        Args:
            country_code: ISO 3166-1 alpha-2 code
            year: Calendar year
            retry_policy: Overrides the cache's retry policy for this call

        Returns:
            HolidayLookup(holidays, degraded)

        Raises:
            InvalidCountryCodeError: If the country code is malformed
            ValueError: If the year is outside 2000-2100
        """
        code = normalize_country_code(country_code)
        year = int(year)
        if not MIN_YEAR <= year <= MAX_YEAR:
            raise ValueError(f"Year must be within {MIN_YEAR}-{MAX_YEAR}, got {year}")
        entry = self.repository.get(code, year)
        if entry is not None and self.is_fresh(entry):
            logger.debug("Using cached holidays for %s %s", code, year)
            return HolidayLookup(list(entry.holidays), False)

        with self._lock_for((code, year)):
            # Another caller may have refreshed while we waited
            entry = self.repository.get(code, year)
            if entry is not None and self.is_fresh(entry):
                return HolidayLookup(list(entry.holidays), False)
            if entry is not None:
                logger.info("Cached holidays for %s %s are stale, refreshing", code, year)
            return self._refresh(code, year, entry, retry_policy or self.retry_policy)

    def _refresh(
        self,
        code: str,
        year: int,
        stale: Optional[HolidayCacheEntry],
        retry_policy: RetryPolicy,
    ) -> HolidayLookup:
        try:
            holidays = retry_policy.run(
                lambda: self.source.fetch(code, year),
                retry_on=(HolidaySourceError, OSError),
                sleep=self._sleep,
                description=f"Holiday fetch {code} {year}",
            )
        except (HolidaySourceError, OSError):
            if stale is not None:
                logger.warning("Serving stale holidays for %s %s (fetched %s)", code, year, stale.fetched_at)
                return HolidayLookup(list(stale.holidays), True)
            logger.warning("No holiday data available for %s %s; holiday conflicts unverified", code, year)
            return HolidayLookup([], True)

        entry = HolidayCacheEntry(
            country_code=code,
            year=year,
            holidays=tuple(holidays),
            fetched_at=self._clock(),
        )
        self.repository.upsert(entry)
        logger.info("Cached %d holidays for %s %s", len(holidays), code, year)
        return HolidayLookup(list(holidays), False)

    def prefetch(self, keys: Iterable[HolidayKey], max_workers: int = 4) -> Dict[HolidayKey, HolidayLookup]:
        """Fetch distinct keys concurrently; one network call per key at most."""
        unique: List[HolidayKey] = []
        seen = set()
        for country_code, year in keys:
            key = (normalize_country_code(country_code), int(year))
            if key not in seen:
                seen.add(key)
                unique.append(key)
        if not unique:
            return {}
        if max_workers <= 1 or len(unique) == 1:
            return {key: self.get(*key) for key in unique}
        with ThreadPoolExecutor(max_workers=min(max_workers, len(unique))) as pool:
            results = list(pool.map(lambda key: self.get(*key), unique))
        return dict(zip(unique, results))

    def prefetch_countries(
        self,
        country_codes: Iterable[str],
        years: Optional[Sequence[int]] = None,
        max_workers: int = 4,
    ) -> Dict[HolidayKey, HolidayLookup]:
        """Prefetch the current and next year (by default) for each country."""
        if years is None:
            current = self._clock().year
            years = (current, current + 1)
        keys = [(code, year) for code in country_codes for year in years]
        return self.prefetch(keys, max_workers=max_workers)


def find_holiday(local_date: date, holidays: Iterable[Holiday]) -> Optional[Holiday]:
    """Return the holiday falling on ``local_date``, if any."""
    if isinstance(local_date, datetime):
        local_date = local_date.date()
    for holiday in holidays:
        if holiday.date == local_date:
            return holiday
    return None


def upcoming_holidays(holidays: Iterable[Holiday], from_date: date, count: int = 5) -> List[Holiday]:
    """Holidays strictly after ``from_date``, earliest first."""
    if isinstance(from_date, datetime):
        from_date = from_date.date()
    upcoming = sorted((h for h in holidays if h.date > from_date), key=lambda h: h.date)
    return upcoming[:count]

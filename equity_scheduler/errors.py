"""Exceptions raised by the scheduling-equity engine."""

from __future__ import annotations


class EquitySchedulerError(Exception):
    """Base class for all engine errors."""


class InvalidTimezoneError(EquitySchedulerError, ValueError):
    """Timezone identifier is not a recognized IANA zone."""

    def __init__(self, timezone: str):
        super().__init__(f"Invalid IANA timezone: {timezone!r}")
        self.timezone = timezone


class InvalidCountryCodeError(EquitySchedulerError, ValueError):
    """Country code is not an ISO 3166-1 alpha-2 code."""

    def __init__(self, country_code):
        super().__init__(f"Invalid ISO 3166-1 alpha-2 country code: {country_code!r}")
        self.country_code = country_code


class InvalidPolicyError(EquitySchedulerError, ValueError):
    """Working-hours policy is malformed."""


class EmptyRosterError(EquitySchedulerError, ValueError):
    """A computation was requested for a roster with no participants."""

    def __init__(self, message: str = "At least one participant is required"):
        super().__init__(message)


class HolidaySourceError(EquitySchedulerError):
    """The external holiday source could not produce data."""

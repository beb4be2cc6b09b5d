"""Working-hours policy resolution (custom -> country default -> global fallback)."""

from __future__ import annotations

import re
from dataclasses import replace
from datetime import time
from typing import Dict, Iterable, Mapping, Optional

from equity_scheduler.domain.models import WorkingHoursPolicy
from equity_scheduler.errors import InvalidCountryCodeError, InvalidPolicyError

from .timeplan import minutes_of_day, parse_time_string

WEEKDAY_TOKENS = {"M": 1, "T": 2, "W": 3, "Th": 4, "F": 5, "Sa": 6, "Su": 7}
_TOKEN_RE = re.compile(r"Su|Sa|Th|M|T|W|F")
_PATTERN_ORDER = ["M", "T", "W", "Th", "F", "Sa", "Su"]

GLOBAL_COUNTRY = "*"

DEFAULT_POLICY = WorkingHoursPolicy(
    country_code=GLOBAL_COUNTRY,
    green_start=time(9, 0),
    green_end=time(17, 0),
    orange_morning_start=time(8, 0),
    orange_morning_end=time(9, 0),
    orange_evening_start=time(17, 0),
    orange_evening_end=time(18, 0),
    work_days=frozenset({1, 2, 3, 4, 5}),
    is_default=True,
)

# Countries whose standard work week is not Monday-Friday
BUILTIN_WORK_WEEKS = {
    "IL": "SuMTWTh",
    "SA": "SuMTWTh",
    "EG": "SuMTWTh",
    "KW": "SuMTWTh",
    "QA": "SuMTWTh",
    "OM": "SuMTWTh",
    "BH": "SuMTWTh",
    "JO": "SuMTWTh",
    "IQ": "SuMTWTh",
    "IR": "SaSuMTW",
}

_POLICY_TIME_FIELDS = (
    "green_start",
    "green_end",
    "orange_morning_start",
    "orange_morning_end",
    "orange_evening_start",
    "orange_evening_end",
)


def normalize_country_code(country_code) -> str:
    """Upper-case and check an ISO 3166-1 alpha-2 code."""
    if not isinstance(country_code, str):
        raise InvalidCountryCodeError(country_code)
    code = country_code.strip().upper()
    if len(code) != 2 or not code.isascii() or not code.isalpha():
        raise InvalidCountryCodeError(country_code)
    return code


def parse_work_week(pattern: str) -> frozenset:
    """
    Parse a work-week pattern into ISO weekdays.

    Tokens are M, T, W, Th, F, Sa, Su. A bare T right after W is read as
    Thursday so that the common "MTWTF" spelling means Monday-Friday.

    Example:
        parse_work_week("SuMTWTh")  # frozenset({7, 1, 2, 3, 4})
    """
    if not isinstance(pattern, str) or not pattern:
        raise InvalidPolicyError(f"Invalid work week pattern: {pattern!r}")
    tokens = _TOKEN_RE.findall(pattern)
    if "".join(tokens) != pattern:
        raise InvalidPolicyError(f"Invalid work week pattern: {pattern!r}")
    days = set()
    previous = None
    for token in tokens:
        if token == "T" and previous == "W":
            token = "Th"
        days.add(WEEKDAY_TOKENS[token])
        previous = token
    return frozenset(days)


def format_work_week(days: Iterable[int]) -> str:
    wanted = set(days)
    return "".join(t for t in _PATTERN_ORDER if WEEKDAY_TOKENS[t] in wanted)


def _coerce_time(value, field_name: str) -> time:
    if isinstance(value, time):
        return value
    try:
        return parse_time_string(value)
    except (TypeError, ValueError) as e:
        raise InvalidPolicyError(f"{field_name}: cannot parse time {value!r}") from e


def _coerce_work_days(value) -> frozenset:
    if isinstance(value, str):
        if value.replace(",", "").replace(" ", "").isdigit():
            return frozenset(int(x) for x in value.split(",") if x.strip())
        return parse_work_week(value)
    try:
        return frozenset(int(x) for x in value)
    except (TypeError, ValueError) as e:
        raise InvalidPolicyError(f"work_days: cannot parse {value!r}") from e


def validate_policy(policy: WorkingHoursPolicy) -> WorkingHoursPolicy:
    """
    Reject malformed policies before any computation.

    Raises:
        InvalidPolicyError: If a window is empty or reversed, or work days
            are empty or outside 1..7
    """
    windows = [
        ("green", policy.green_start, policy.green_end),
        ("orange_morning", policy.orange_morning_start, policy.orange_morning_end),
        ("orange_evening", policy.orange_evening_start, policy.orange_evening_end),
    ]
    for name, start, end in windows:
        if minutes_of_day(start) >= minutes_of_day(end):
            raise InvalidPolicyError(
                f"{policy.country_code}: {name} window must start before it ends ({start} >= {end})"
            )
    if not policy.work_days:
        raise InvalidPolicyError(f"{policy.country_code}: at least one work day is required")
    bad_days = [d for d in policy.work_days if d not in range(1, 8)]
    if bad_days:
        raise InvalidPolicyError(f"{policy.country_code}: work days must be within 1..7, got {sorted(bad_days)}")
    return policy


def policy_from_dict(data: Mapping, country_code: Optional[str] = None, is_default: bool = False) -> WorkingHoursPolicy:
    """
    Build and validate a policy from a mapping of field values.

    Missing time fields fall back to the global default windows; missing
    ``work_days`` falls back to Monday-Friday.
    """
    code = country_code or data.get("country_code")
    if code is None:
        raise InvalidPolicyError("Policy is missing country_code")
    code = normalize_country_code(code)
    fields = {}
    for name in _POLICY_TIME_FIELDS:
        raw = data.get(name)
        fields[name] = getattr(DEFAULT_POLICY, name) if raw is None else _coerce_time(raw, name)
    raw_days = data.get("work_days", data.get("work_week_pattern"))
    work_days = DEFAULT_POLICY.work_days if raw_days is None else _coerce_work_days(raw_days)
    policy = WorkingHoursPolicy(country_code=code, work_days=work_days, is_default=is_default, **fields)
    return validate_policy(policy)


def builtin_country_defaults() -> Dict[str, WorkingHoursPolicy]:
    return {
        code: replace(DEFAULT_POLICY, country_code=code, work_days=parse_work_week(pattern))
        for code, pattern in BUILTIN_WORK_WEEKS.items()
    }


def index_custom_policies(policies) -> Dict[str, WorkingHoursPolicy]:
    """
    Key an organizer's custom policies by country code.

    Accepts a mapping or an iterable of policies. An organizer holds at most
    one custom policy per country.
    """
    if policies is None:
        return {}
    if isinstance(policies, Mapping):
        items = list(policies.values())
    else:
        items = list(policies)
    indexed: Dict[str, WorkingHoursPolicy] = {}
    for policy in items:
        code = normalize_country_code(policy.country_code)
        if code in indexed:
            raise InvalidPolicyError(f"Duplicate custom policy for country {code}")
        indexed[code] = validate_policy(replace(policy, country_code=code, is_default=False))
    return indexed


class ConfigResolver:
    """Resolves the effective working-hours policy for a country."""

    def __init__(
        self,
        country_defaults: Mapping[str, WorkingHoursPolicy] | None = None,
        fallback: WorkingHoursPolicy = DEFAULT_POLICY,
    ):
        defaults = builtin_country_defaults()
        if country_defaults:
            defaults.update({code.upper(): policy for code, policy in country_defaults.items()})
        self.country_defaults = defaults
        self.fallback = fallback

    def resolve(
        self,
        country_code: str,
        custom_policies: Mapping[str, WorkingHoursPolicy] | None = None,
    ) -> WorkingHoursPolicy:
        """
        Return the custom policy for the country if the organizer has one,
        otherwise the country default, otherwise the global fallback.

        Never fails.
        """
        code = str(country_code).strip().upper()
        if custom_policies:
            custom = custom_policies.get(code)
            if custom is not None:
                return custom
        default = self.country_defaults.get(code)
        if default is not None:
            return default
        return replace(self.fallback, country_code=code)

    def resolve_many(self, country_codes: Iterable[str], custom_policies=None) -> Dict[str, WorkingHoursPolicy]:
        return {code: self.resolve(code, custom_policies) for code in country_codes}


def resolve_policy(country_code: str, custom_policies=None) -> WorkingHoursPolicy:
    """Resolve against the built-in defaults only."""
    return ConfigResolver().resolve(country_code, custom_policies)

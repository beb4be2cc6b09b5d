"""Services for equity scheduling logic."""

from .classifier import classify
from .holidays import HolidayCache, HolidayLookup, HolidaySource, NagerDateSource, find_holiday, upcoming_holidays
from .policies import ConfigResolver, DEFAULT_POLICY, parse_work_week, policy_from_dict, validate_policy
from .retry import RetryPolicy
from .scoring import calculate_equity_score, compare_scores, score_quality
from .timeplan import localize, parse_time_string, parse_utc_instant, timezone_offset

__all__ = [
    "classify",
    "HolidayCache",
    "HolidayLookup",
    "HolidaySource",
    "NagerDateSource",
    "find_holiday",
    "upcoming_holidays",
    "ConfigResolver",
    "DEFAULT_POLICY",
    "parse_work_week",
    "policy_from_dict",
    "validate_policy",
    "RetryPolicy",
    "calculate_equity_score",
    "compare_scores",
    "score_quality",
    "localize",
    "parse_time_string",
    "parse_utc_instant",
    "timezone_offset",
]

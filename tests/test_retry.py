"""Tests for the retry policy."""

import pytest

from equity_scheduler.errors import HolidaySourceError
from equity_scheduler.services.retry import RetryPolicy


def test_default_schedule():
    """Default backoff is 1s, 2s, 4s with three attempts."""
    policy = RetryPolicy()
    assert policy.max_attempts == 3
    assert policy.schedule() == [1.0, 2.0, 4.0]
    assert policy.max_total_wait() == 3.0


def test_custom_schedule():
    policy = RetryPolicy(max_attempts=4, base_delay=0.5, multiplier=3)
    assert policy.schedule() == [0.5, 1.5, 4.5, 13.5]


@pytest.mark.parametrize(
    "kwargs",
    [{"max_attempts": 0}, {"base_delay": -1}, {"multiplier": 0.5}],
)
def test_invalid_policy(kwargs):
    with pytest.raises(ValueError):
        RetryPolicy(**kwargs)


def test_run_succeeds_after_failures():
    """Two failures then success sleeps 1s then 2s."""
    outcomes = [HolidaySourceError("down"), HolidaySourceError("down"), "ok"]
    sleeps = []

    def flaky():
        result = outcomes.pop(0)
        if isinstance(result, Exception):
            raise result
        return result

    assert RetryPolicy().run(flaky, sleep=sleeps.append) == "ok"
    assert sleeps == [1.0, 2.0]


def test_run_reraises_last_error():
    calls = []
    sleeps = []

    def always_down():
        calls.append(1)
        raise HolidaySourceError(f"down {len(calls)}")

    with pytest.raises(HolidaySourceError, match="down 3"):
        RetryPolicy().run(always_down, sleep=sleeps.append)
    assert len(calls) == 3
    assert sleeps == [1.0, 2.0]


def test_run_does_not_retry_unlisted_errors():
    calls = []

    def broken():
        calls.append(1)
        raise KeyError("bug")

    with pytest.raises(KeyError):
        RetryPolicy().run(broken, retry_on=(HolidaySourceError,), sleep=lambda s: None)
    assert len(calls) == 1


def test_single_attempt_never_sleeps():
    sleeps = []

    def down():
        raise HolidaySourceError("down")

    with pytest.raises(HolidaySourceError):
        RetryPolicy(max_attempts=1).run(down, sleep=sleeps.append)
    assert sleeps == []

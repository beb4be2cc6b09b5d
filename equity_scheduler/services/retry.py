"""
Retry policy with exponential backoff.

Delays follow base_delay * multiplier ** (attempt - 1), which with the
defaults gives 1s, 2s, 4s. No jitter is applied. The wait happens only
between attempts, so the last delay of the schedule is never slept.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, List, Tuple, Type, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_BASE_DELAY_SECONDS = 1.0
DEFAULT_MULTIPLIER = 2.0


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    base_delay: float = DEFAULT_BASE_DELAY_SECONDS
    multiplier: float = DEFAULT_MULTIPLIER

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be 1 or greater")
        if self.base_delay < 0:
            raise ValueError("base_delay must not be negative")
        if self.multiplier < 1:
            raise ValueError("multiplier must be 1 or greater")

    def delay_for(self, attempt: int) -> float:
        """Delay after failed ``attempt`` (1-indexed)."""
        if attempt < 1:
            raise ValueError("Attempt number must be 1 or greater")
        return self.base_delay * (self.multiplier ** (attempt - 1))

    def schedule(self) -> List[float]:
        return [self.delay_for(a) for a in range(1, self.max_attempts + 1)]

    def max_total_wait(self) -> float:
        """Upper bound on time spent sleeping before giving up."""
        return sum(self.schedule()[:-1])

    def run(
        self,
        fn: Callable[[], T],
        retry_on: Tuple[Type[BaseException], ...] = (Exception,),
        sleep: Callable[[float], None] = time.sleep,
        description: str = "operation",
    ) -> T:
        """
        Call ``fn`` until it succeeds or attempts are exhausted.

        Attempts are strictly sequential. The last exception is re-raised
        when every attempt fails.
        """
        for attempt in range(1, self.max_attempts + 1):
            try:
                return fn()
            except retry_on as e:
                if attempt == self.max_attempts:
                    logger.warning("%s failed after %d attempts: %s", description, attempt, e)
                    raise
                delay = self.delay_for(attempt)
                logger.warning(
                    "%s failed (attempt %d/%d): %s; retrying in %.1fs",
                    description, attempt, self.max_attempts, e, delay,
                )
                sleep(delay)
        raise AssertionError("unreachable")

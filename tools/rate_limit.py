"""
Process-local rate limiter for outbound Brave API calls.
One instance is owned by the search client; each upstream request calls check() once.
The limiter is advisory: it does not read the API's quota headers.
"""
import logging
import threading
import time
from datetime import datetime, timezone
from typing import Callable

from tools.base import RateLimitExceeded

logger = logging.getLogger(__name__)

DEFAULT_PER_SECOND = 1
DEFAULT_PER_MONTH = 15000
WINDOW_SEC = 1.0


def _month_key(ts: float) -> str:
    return datetime.fromtimestamp(ts, tz=timezone.utc).strftime("%Y-%m")


class RateLimiter:
    """Per-second and per-calendar-month (UTC) call counters."""

    def __init__(
        self,
        per_second: int = DEFAULT_PER_SECOND,
        per_month: int = DEFAULT_PER_MONTH,
        clock: Callable[[], float] = time.time,
    ):
        self.per_second = per_second
        self.per_month = per_month
        self._clock = clock
        self._lock = threading.Lock()
        now = clock()
        self.calls_this_second = 0
        self.calls_this_month = 0
        self.window_start = now
        self.month = _month_key(now)

    def check(self) -> None:
        """Count one call, or raise RateLimitExceeded without counting it."""
        with self._lock:
            now = self._clock()
            if now - self.window_start >= WINDOW_SEC:
                self.calls_this_second = 0
                self.window_start = now
            month = _month_key(now)
            if month != self.month:
                logger.info("rate_limit_month_rollover", extra={"month": month, "previous": self.calls_this_month})
                self.calls_this_month = 0
                self.month = month

            if self.calls_this_second >= self.per_second or self.calls_this_month >= self.per_month:
                logger.warning(
                    "rate_limit_exceeded",
                    extra={"second": self.calls_this_second, "month": self.calls_this_month},
                )
                raise RateLimitExceeded()
            self.calls_this_second += 1
            self.calls_this_month += 1

"""Request quota tracking for the narrator's LLM calls.

A QuotaTracker is constructed explicitly and injected into whatever makes the
calls; each instance owns its own counters and reset window.
"""

import logging
import time
from typing import Callable

from pydantic import BaseModel

logger = logging.getLogger(__name__)


class QuotaStatus(BaseModel):
    available: bool
    remaining_requests: int
    request_count: int
    error_count: int
    blocked: bool
    blocked_until: float | None = None
    seconds_until_reset: float


class QuotaTracker:
    """
    Counts requests per reset window and backs off after quota errors or
    too many consecutive failures.

    Example:
        >>> quota = QuotaTracker(hourly_limit=2)
        >>> quota.check_available()
        True
        >>> quota.record_success(); quota.record_success()
        >>> quota.check_available()
        False
    """

    def __init__(
        self,
        hourly_limit: int = 100,
        reset_interval: float = 3600.0,
        backoff: float = 300.0,
        max_consecutive_errors: int = 3,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Args:
            hourly_limit: Requests allowed per reset window.
            reset_interval: Window length in seconds.
            backoff: Seconds to block after a quota error or an error streak.
            max_consecutive_errors: Error streak length that triggers a backoff.
            clock: Time source in seconds, injectable for tests.
        """
        self.hourly_limit = hourly_limit
        self.reset_interval = reset_interval
        self.backoff = backoff
        self.max_consecutive_errors = max_consecutive_errors
        self._clock = clock

        self._last_reset = clock()
        self._request_count = 0
        self._error_count = 0
        self._blocked_until: float | None = None

    def check_available(self) -> bool:
        """True if a request may be made now."""
        now = self._clock()

        if now - self._last_reset >= self.reset_interval:
            self._reset(now)

        if self._blocked_until is not None:
            if now < self._blocked_until:
                return False
            self._unblock()

        if self._request_count >= self.hourly_limit:
            self._blocked_until = self._last_reset + self.reset_interval
            logger.warning("Narrator quota reached (%d requests); blocked until the next window", self._request_count)
            return False

        if self._error_count >= self.max_consecutive_errors:
            self._block_temporarily(now, "too many consecutive errors")
            return False

        return True

    def record_success(self) -> None:
        self._request_count += 1
        self._error_count = 0

    def record_quota_exceeded(self) -> None:
        self._error_count += 1
        self._block_temporarily(self._clock(), "quota exceeded by the provider")

    def record_error(self, error: str) -> None:
        self._error_count += 1
        logger.debug("Narrator error %d/%d: %s", self._error_count, self.max_consecutive_errors, error)
        if self._error_count >= self.max_consecutive_errors:
            self._block_temporarily(self._clock(), f"too many errors: {error}")

    @property
    def blocked_until(self) -> float | None:
        return self._blocked_until

    def status(self) -> QuotaStatus:
        now = self._clock()
        available = self.check_available()
        return QuotaStatus(
            available=available,
            remaining_requests=max(0, self.hourly_limit - self._request_count),
            request_count=self._request_count,
            error_count=self._error_count,
            blocked=self._blocked_until is not None,
            blocked_until=self._blocked_until,
            seconds_until_reset=max(0.0, self._last_reset + self.reset_interval - now),
        )

    def _reset(self, now: float) -> None:
        self._last_reset = now
        self._request_count = 0
        self._error_count = 0
        self._blocked_until = None
        logger.info("Narrator quota window reset")

    def _unblock(self) -> None:
        self._blocked_until = None
        # Forgive one error at a time so a flaky provider is retried gradually
        self._error_count = max(0, self._error_count - 1)
        logger.info("Narrator quota unblocked")

    def _block_temporarily(self, now: float, reason: str) -> None:
        self._blocked_until = now + self.backoff
        logger.warning("Narrator requests paused for %.0fs: %s", self.backoff, reason)

# SPDX-License-Identifier: Apache-2.0
"""Retry with exponential backoff and a moving-window rate limiter."""
from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from limits import RateLimitItemPerSecond
from limits.storage import MemoryStorage
from limits.strategies import MovingWindowRateLimiter

from .exceptions import RateLimitedError

T = TypeVar("T")

_logger = logging.getLogger("fhevmsdk.resilience")


async def retry(
    operation: Callable[[], Awaitable[T]],
    max_attempts: int = 3,
    base_delay: float = 1.0,
    backoff_factor: float = 2.0,
    retry_on: type[BaseException] | tuple[type[BaseException], ...] = Exception,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """Run ``operation`` until it succeeds or ``max_attempts`` is used up.

    After failed attempt n (1-based) waits ``base_delay * backoff_factor ** (n - 1)``
    seconds. When attempts run out the last error is re-raised unchanged.
    Errors outside ``retry_on`` are raised immediately.
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")
    attempt = 1
    while True:
        try:
            return await operation()
        except retry_on as exc:
            if attempt >= max_attempts:
                _logger.warning("Giving up after %d attempt(s): %s", attempt, exc)
                raise
            delay = base_delay * backoff_factor ** (attempt - 1)
            _logger.warning("Attempt %d/%d failed (%s); retrying in %.2fs", attempt, max_attempts, exc, delay)
            await sleep(delay)
            attempt += 1


class RateLimiter:
    """Allows at most ``max_requests`` per key within a trailing ``window`` (whole seconds).

    Backed by an in-memory ``limits`` moving window; expired entries are evicted
    by the storage. ``check`` never raises; denial is reported as False and not recorded.
    """

    def __init__(self, max_requests: int = 10, window: float = 60.0):
        if max_requests < 1:
            raise ValueError("max_requests must be at least 1")
        if window < 1 or window != int(window):
            raise ValueError("window must be a positive whole number of seconds")
        self.max_requests = max_requests
        self.window = window
        self._item = RateLimitItemPerSecond(max_requests, int(window))
        self._limiter = MovingWindowRateLimiter(MemoryStorage())

    def check(self, key: str) -> bool:
        if self._limiter.hit(self._item, key):
            return True
        _logger.warning("Rate limit reached for %s (%d in %.0fs)", key, self.max_requests, self.window)
        return False

    def require(self, key: str) -> None:
        """Like check, but raises RateLimitedError when denied."""
        if not self.check(key):
            raise RateLimitedError(key)

    def remaining(self, key: str) -> int:
        return max(0, self._limiter.get_window_stats(self._item, key).remaining)

    def reset(self, key: str) -> None:
        self._limiter.clear(self._item, key)

"""In-memory fixed-window rate limiting.

One ``RateLimiter`` lives on ``app.state`` for the lifetime of the process.
Counters are per process only; running several workers multiplies the
effective limits.
"""

from __future__ import annotations

import asyncio
import logging
import math
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

logger = logging.getLogger(__name__)

PURGE_INTERVAL_SECONDS = 5 * 60


@dataclass(frozen=True)
class RateLimitConfig:
    max: int
    window_ms: int


@dataclass
class RateLimitResult:
    allowed: bool
    current: int
    limit: int
    reset_at: int  # epoch milliseconds
    retry_after: Optional[int] = None  # seconds, only set when denied


@dataclass
class _Window:
    count: int
    reset_at: int


SUBMIT_QUESTION = "submit-question"
VOTE = "vote"
PULSE_CHECK = "pulse-check"

RATE_LIMITS: Dict[str, RateLimitConfig] = {
    SUBMIT_QUESTION: RateLimitConfig(max=5, window_ms=5 * 60 * 1000),
    VOTE: RateLimitConfig(max=30, window_ms=60 * 1000),
    PULSE_CHECK: RateLimitConfig(max=20, window_ms=60 * 1000),
}


def _now_ms() -> int:
    return int(time.time() * 1000)


class RateLimiter:
    def __init__(
        self,
        clock: Callable[[], int] = _now_ms,
        purge_interval: float = PURGE_INTERVAL_SECONDS,
    ) -> None:
        self._clock = clock
        self._purge_interval = purge_interval
        self._windows: Dict[Tuple[str, str], _Window] = {}
        self._lock = threading.Lock()
        self._purge_task: Optional[asyncio.Task] = None

    def check(self, action: str, identifier: str, config: RateLimitConfig) -> RateLimitResult:
        """Count one request for ``(action, identifier)`` and report whether it may proceed."""
        key = (action, identifier)
        with self._lock:
            now = self._clock()
            window = self._windows.get(key)

            if window is None or window.reset_at < now:
                window = _Window(count=1, reset_at=now + config.window_ms)
                self._windows[key] = window
                return RateLimitResult(
                    allowed=True, current=1, limit=config.max, reset_at=window.reset_at
                )

            window.count += 1
            if window.count > config.max:
                # A request landing exactly on reset_at still belongs to the old window
                retry_after = max(1, math.ceil((window.reset_at - now) / 1000))
                return RateLimitResult(
                    allowed=False,
                    current=window.count,
                    limit=config.max,
                    reset_at=window.reset_at,
                    retry_after=retry_after,
                )

            return RateLimitResult(
                allowed=True, current=window.count, limit=config.max, reset_at=window.reset_at
            )

    def purge(self) -> int:
        """Drop windows that have already reset. Returns how many were removed."""
        with self._lock:
            now = self._clock()
            stale = [key for key, window in self._windows.items() if window.reset_at < now]
            for key in stale:
                del self._windows[key]
        return len(stale)

    def __len__(self) -> int:
        return len(self._windows)

    def start(self) -> None:
        """Begin periodic purging on the running event loop."""
        if self._purge_task is None:
            self._purge_task = asyncio.get_running_loop().create_task(self._purge_forever())

    async def stop(self) -> None:
        if self._purge_task is None:
            return
        self._purge_task.cancel()
        try:
            await self._purge_task
        except asyncio.CancelledError:
            pass
        self._purge_task = None

    async def _purge_forever(self) -> None:
        while True:
            await asyncio.sleep(self._purge_interval)
            removed = self.purge()
            if removed:
                logger.debug("Purged %d stale rate limit windows", removed)


def rate_limit_headers(result: RateLimitResult) -> Dict[str, str]:
    headers = {
        "X-RateLimit-Limit": str(result.limit),
        "X-RateLimit-Remaining": str(max(0, result.limit - result.current)),
        "X-RateLimit-Reset": str(result.reset_at // 1000),
    }
    if result.retry_after is not None:
        headers["Retry-After"] = str(result.retry_after)
    return headers

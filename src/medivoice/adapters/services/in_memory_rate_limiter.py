"""
Process-local fixed-window rate limiter.

Each key gets a window that opens with its first request and lasts
window_seconds; once it has elapsed the next request opens a new window.
Suitable for a single instance; several instances each keep their own counts.
"""

import logging
import threading
import time
from typing import Callable, Dict, Tuple

from medivoice.application.ports.services.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)


class InMemoryRateLimiter(RateLimiter):
    def __init__(
        self,
        max_requests: int = 30,
        window_seconds: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
        prune_threshold: int = 1024,
    ) -> None:
        self._max_requests = max_requests
        self._window_seconds = window_seconds
        self._clock = clock
        self._prune_threshold = prune_threshold
        self._lock = threading.Lock()
        # key -> (window start, requests counted in window)
        self._windows: Dict[str, Tuple[float, int]] = {}

    def check(self, key: str) -> bool:
        now = self._clock()
        with self._lock:
            if len(self._windows) >= self._prune_threshold:
                self._prune(now)

            start, count = self._windows.get(key, (now, 0))
            if now - start > self._window_seconds:
                start, count = now, 0

            if count >= self._max_requests:
                logger.warning(f"⚠️  Rate limit exceeded for {key}")
                return False

            self._windows[key] = (start, count + 1)
            return True

    @property
    def tracked_keys(self) -> int:
        return len(self._windows)

    def _prune(self, now: float) -> None:
        expired = [k for k, (start, _) in self._windows.items() if now - start > self._window_seconds]
        for key in expired:
            del self._windows[key]
        if expired:
            logger.debug(f"Pruned {len(expired)} expired rate-limit windows")

    def reset(self) -> None:
        with self._lock:
            self._windows.clear()

import threading
import time
from typing import Callable, Optional

import structlog
from fastapi import Request

from .errors import RateLimitError

logger = structlog.get_logger(__name__)


class RateLimiter:
    """
    Fixed-window request counter keyed by client IP.

    Used as a FastAPI dependency; raises RateLimitError (429) once a client
    exceeds ``limit`` requests inside the current window.
    """

    def __init__(
        self,
        limit: int,
        window_seconds: int,
        name: str = "global",
        enabled: bool = True,
        clock: Optional[Callable[[], float]] = None,
    ):
        self.limit = limit
        self.window_seconds = window_seconds
        self.name = name
        self.enabled = enabled
        self._clock = clock or time.monotonic
        self._hits: dict[str, tuple[float, int]] = {}
        self._lock = threading.Lock()
        self._next_sweep = self._clock() + window_seconds

    def hit(self, key: str) -> bool:
        """Count one request for ``key``; False when it is over the limit."""
        now = self._clock()
        with self._lock:
            if now >= self._next_sweep:
                self._sweep(now)
            started, count = self._hits.get(key, (now, 0))
            if now - started >= self.window_seconds:
                started, count = now, 0
            count += 1
            self._hits[key] = (started, count)
            return count <= self.limit

    def _sweep(self, now: float):
        """Forget clients whose window has expired. Caller holds the lock."""
        expired = [key for key, (started, _) in self._hits.items() if now - started >= self.window_seconds]
        for key in expired:
            del self._hits[key]
        self._next_sweep = now + self.window_seconds

    @property
    def tracked_clients(self) -> int:
        return len(self._hits)

    def reset(self):
        with self._lock:
            self._hits.clear()

    def __call__(self, request: Request) -> None:
        if not self.enabled:
            return
        key = request.client.host if request.client else "unknown"
        if not self.hit(key):
            logger.warning("rate_limit_exceeded", limiter=self.name, client=key, path=request.url.path)
            raise RateLimitError()

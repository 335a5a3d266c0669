from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    remaining: int
    reset_in: float  # seconds until the client's window resets


@dataclass
class _Window:
    count: int
    reset_at: float


class FixedWindowRateLimiter:
    """Per-client request counter that resets a fixed time after the first hit.

    State lives in process memory, so it resets on restart and is not shared
    between instances.
    """

    def __init__(
        self,
        max_requests: int = 10,
        window_seconds: float = 3600,
        max_clients: int = 10_000,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.max_clients = max_clients
        self._clock = clock
        self._windows: dict[str, _Window] = {}
        self._lock = threading.Lock()

    def _prune(self, now: float) -> None:
        expired = [k for k, w in self._windows.items() if now > w.reset_at]
        for k in expired:
            del self._windows[k]
        # Still full: drop the windows closest to expiry.
        overflow = len(self._windows) - self.max_clients + 1
        if overflow > 0:
            for k, _ in sorted(self._windows.items(), key=lambda kv: kv[1].reset_at)[:overflow]:
                del self._windows[k]

    def check_and_consume(self, client_id: str) -> RateLimitDecision:
        with self._lock:
            now = self._clock()
            window = self._windows.get(client_id)

            if window is None or now > window.reset_at:
                if window is None and len(self._windows) >= self.max_clients:
                    self._prune(now)
                self._windows[client_id] = _Window(count=1, reset_at=now + self.window_seconds)
                return RateLimitDecision(True, self.max_requests - 1, float(self.window_seconds))

            if window.count >= self.max_requests:
                logger.warning("rate limit exceeded for %s", client_id)
                return RateLimitDecision(False, 0, window.reset_at - now)

            window.count += 1
            return RateLimitDecision(True, self.max_requests - window.count, window.reset_at - now)

    def reset(self) -> None:
        with self._lock:
            self._windows.clear()

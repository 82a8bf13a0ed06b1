"""In-memory sliding window rate limiting for the public routes."""

import threading
import time
from collections import defaultdict, deque
from dataclasses import dataclass
from typing import Deque, DefaultDict, Optional

__all__ = ["InMemoryRateLimiter", "RateLimit"]


@dataclass(frozen=True)
class RateLimit:
    max_requests: int
    window_seconds: int


class InMemoryRateLimiter:
    """Sliding window limiter keyed by arbitrary strings.

    State lives in the process; several workers each keep their own window.
    """

    def __init__(self, *, limit: RateLimit) -> None:
        self.limit = limit
        self._events: DefaultDict[str, Deque[float]] = defaultdict(deque)
        self._lock = threading.Lock()

    def allow(self, key: str, *, now: Optional[float] = None) -> bool:
        timestamp = now if now is not None else time.monotonic()
        window_start = timestamp - self.limit.window_seconds
        with self._lock:
            events = self._events[key]
            while events and events[0] <= window_start:
                events.popleft()

            if len(events) >= self.limit.max_requests:
                return False

            events.append(timestamp)
            return True

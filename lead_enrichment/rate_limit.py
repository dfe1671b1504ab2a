"""Sliding window rate limiting for external lookup calls."""
from __future__ import annotations

import threading
import time
from collections import deque
from typing import Callable, Deque, Dict, Optional


class RateLimitExceeded(RuntimeError):
    """Raised when a lookup source has used up its call budget."""

    def __init__(self, key: str) -> None:
        super().__init__(f"Rate limit exceeded for {key}")
        self.key = key


class RateLimiter:
    """Reject calls once ``max_calls`` happened within the trailing window.

    Budgets are tracked per key (one key per lookup source). A limiter created
    with ``max_calls=None`` never rejects.
    """

    def __init__(
        self,
        max_calls: Optional[int],
        window_seconds: float = 60.0,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._max_calls = max_calls
        self._window = float(window_seconds)
        self._clock = clock
        self._lock = threading.Lock()
        self._calls: Dict[str, Deque[float]] = {}

    @property
    def max_calls(self) -> Optional[int]:
        return self._max_calls

    def acquire(self, key: str) -> None:
        if not self._max_calls:
            return
        with self._lock:
            now = self._clock()
            calls = self._calls.setdefault(key, deque())
            while calls and calls[0] <= now - self._window:
                calls.popleft()
            if len(calls) >= self._max_calls:
                raise RateLimitExceeded(key)
            calls.append(now)

    def remaining(self, key: str) -> Optional[int]:
        if not self._max_calls:
            return None
        with self._lock:
            now = self._clock()
            calls = self._calls.get(key, ())
            recent = sum(1 for stamp in calls if stamp > now - self._window)
            return max(0, self._max_calls - recent)

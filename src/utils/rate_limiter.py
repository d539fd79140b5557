"""Rate limiting utilities to respect provider API limits."""

import threading
import time
from collections import deque


class RateLimiter:
    """Sliding-window rate limiter, safe to share between fetch threads."""

    def __init__(self, calls_per_minute: int = 60, window_seconds: float = 60.0):
        if calls_per_minute <= 0:
            raise ValueError("calls_per_minute must be positive")
        self.calls_per_minute = calls_per_minute
        self.window_seconds = window_seconds
        self._timestamps: deque[float] = deque()
        self._lock = threading.Lock()

    def wait(self) -> float:
        """Block until a request is allowed. Returns the seconds slept."""
        slept = 0.0
        with self._lock:
            now = time.monotonic()
            while self._timestamps and now - self._timestamps[0] > self.window_seconds:
                self._timestamps.popleft()
            if len(self._timestamps) >= self.calls_per_minute:
                sleep_time = self.window_seconds - (now - self._timestamps[0])
                if sleep_time > 0:
                    time.sleep(sleep_time)
                    slept = sleep_time
                self._timestamps.popleft()
            self._timestamps.append(time.monotonic())
        return slept

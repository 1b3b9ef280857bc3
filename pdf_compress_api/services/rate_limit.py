"""In-memory sliding-window rate limiter keyed by client address."""

import math
import threading
import time
from collections import defaultdict
from typing import Dict, List, Optional, Tuple


class SlidingWindowRateLimiter:
    """Tracks request timestamps per key and rejects requests over the limit.

    State is per process; with several gunicorn workers each worker keeps
    its own window.
    """

    def __init__(self, max_requests: int, window_seconds: int = 600):
        self._lock = threading.Lock()
        self._requests: Dict[str, List[float]] = defaultdict(list)
        self.max_requests = max_requests
        self.window = window_seconds
        self.enabled = max_requests > 0 and window_seconds > 0

    def check(self, key: str, now: Optional[float] = None) -> Tuple[bool, int]:
        """Record a request for ``key``.

        Returns:
            (allowed, retry_after_seconds). ``retry_after`` is 0 when allowed.
        """
        if not self.enabled:
            return True, 0

        now = time.time() if now is None else now
        cutoff = now - self.window

        with self._lock:
            recent = [t for t in self._requests[key] if t > cutoff]
            if len(recent) >= self.max_requests:
                self._requests[key] = recent
                retry_after = max(1, math.ceil(recent[0] + self.window - now))
                return False, retry_after
            recent.append(now)
            self._requests[key] = recent
            return True, 0

    @property
    def tracked_keys(self) -> int:
        with self._lock:
            return len(self._requests)

    def is_allowed(self, key: str) -> bool:
        return self.check(key)[0]

    def cleanup(self, now: Optional[float] = None) -> int:
        """Remove stale keys. Returns how many were dropped."""
        now = time.time() if now is None else now
        cutoff = now - self.window
        with self._lock:
            stale_keys = [k for k, timestamps in self._requests.items() if not timestamps or timestamps[-1] <= cutoff]
            for key in stale_keys:
                del self._requests[key]
        return len(stale_keys)

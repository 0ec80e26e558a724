"""Per-thread limit on automated answer attempts.

Fixed window counter: the first attempt in a thread opens a window, further
attempts are allowed until the cap is reached, and the window restarts once
it has elapsed. State is process-local and resets on restart.
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Dict

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_SECONDS = 60 * 60
DEFAULT_MAX_REQUESTS = 5


@dataclass
class RateLimitEntry:
    count: int
    reset_at: float


class ThreadRateLimiter:
    """Bound automated answers per ticket thread."""

    def __init__(
        self,
        max_requests: int = DEFAULT_MAX_REQUESTS,
        window_seconds: float = DEFAULT_WINDOW_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_requests < 1:
            raise ValueError(f"max_requests must be >= 1, got {max_requests}")
        self.max_requests = max_requests
        self.window_seconds = float(window_seconds)
        self._clock = clock
        self._entries: Dict[str, RateLimitEntry] = {}

    def allow(self, thread_id: str) -> bool:
        """Consume one attempt for the thread.

        Returns:
            True if the attempt is allowed, False if the cap is reached.
            Denied attempts are not counted.
        """
        now = self._clock()
        entry = self._entries.get(thread_id)

        if entry is None or now > entry.reset_at:
            self._entries[thread_id] = RateLimitEntry(
                count=1, reset_at=now + self.window_seconds
            )
            return True

        if entry.count >= self.max_requests:
            return False

        entry.count += 1
        return True

    def remaining(self, thread_id: str) -> int:
        """Attempts left in the current window."""
        entry = self._entries.get(thread_id)
        if entry is None or self._clock() > entry.reset_at:
            return self.max_requests
        return max(0, self.max_requests - entry.count)

    def sweep_expired(self) -> int:
        """Delete entries whose window has elapsed.

        Returns:
            Number of entries removed
        """
        now = self._clock()
        expired = [key for key, entry in self._entries.items() if now > entry.reset_at]
        for key in expired:
            self._entries.pop(key, None)
        if expired:
            logger.debug("Swept %d expired rate limit entries", len(expired))
        return len(expired)

    def __len__(self) -> int:
        return len(self._entries)

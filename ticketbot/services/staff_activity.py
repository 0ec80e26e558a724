"""Pause automated replies while staff handle a ticket.

A thread is paused by any staff message or the ``!pause`` command and
resumes on ``!resume`` or after a period without staff messages. Expiry is
evaluated when the state is read, so ``is_paused`` is always fresh; the
sweep only bounds memory.
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Dict

logger = logging.getLogger(__name__)

DEFAULT_PAUSE_SECONDS = 5 * 60


@dataclass
class PauseEntry:
    paused_at: float
    last_staff_message: float


class StaffPauseTracker:
    """Track which ticket threads are currently staff-controlled."""

    def __init__(
        self,
        pause_seconds: float = DEFAULT_PAUSE_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.pause_seconds = float(pause_seconds)
        self._clock = clock
        self._entries: Dict[str, PauseEntry] = {}

    def pause(self, thread_id: str) -> None:
        """Pause the thread, starting a fresh pause period."""
        now = self._clock()
        self._entries[thread_id] = PauseEntry(paused_at=now, last_staff_message=now)

    def record_staff_activity(self, thread_id: str) -> None:
        """Refresh the pause timeout, pausing the thread if needed."""
        entry = self._entries.get(thread_id)
        if entry is None or self._is_expired(entry, self._clock()):
            self.pause(thread_id)
            return
        entry.last_staff_message = self._clock()

    def resume(self, thread_id: str) -> None:
        """Lift the pause on a thread.

        Args:
            thread_id: Thread to resume; unknown threads are ignored
        """
        self._entries.pop(thread_id, None)

    def is_paused(self, thread_id: str) -> bool:
        """Return True while staff control the thread.

        Deletes the entry and returns False once the timeout has passed.
        """
        entry = self._entries.get(thread_id)
        if entry is None:
            return False

        if self._is_expired(entry, self._clock()):
            self._entries.pop(thread_id, None)
            logger.info("Auto-resuming bot replies in thread %s", thread_id)
            return False

        return True

    def sweep_expired(self) -> int:
        """Delete pauses that have already expired.

        Returns:
            Number of entries removed
        """
        now = self._clock()
        expired = [
            key for key, entry in self._entries.items() if self._is_expired(entry, now)
        ]
        for key in expired:
            self._entries.pop(key, None)
        return len(expired)

    def _is_expired(self, entry: PauseEntry, now: float) -> bool:
        return now - entry.last_staff_message > self.pause_seconds

    def __contains__(self, thread_id: object) -> bool:
        return thread_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

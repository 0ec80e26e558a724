"""Nudge ticket creators who stay silent after opening a ticket.

Each new ticket thread is tracked until its creator (or staff) posts. A
background poll collects threads that have been silent past the threshold;
the caller sends one prompt and marks the thread as asked.
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

logger = logging.getLogger(__name__)

DEFAULT_INACTIVITY_THRESHOLD_SECONDS = 60
DEFAULT_MAX_AGE_SECONDS = 2 * 60 * 60


@dataclass
class InactivityEntry:
    thread_id: str
    created_at: float
    owner_id: Optional[str] = None
    asked: bool = False


class ThreadInactivityTracker:
    """One-shot inactivity timers for ticket threads."""

    def __init__(
        self,
        threshold_seconds: float = DEFAULT_INACTIVITY_THRESHOLD_SECONDS,
        max_age_seconds: float = DEFAULT_MAX_AGE_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.threshold_seconds = float(threshold_seconds)
        self.max_age_seconds = float(max_age_seconds)
        self._clock = clock
        self._entries: Dict[str, InactivityEntry] = {}

    def track(self, thread_id: str, owner_id: Optional[str] = None) -> None:
        """Start tracking a newly created ticket thread."""
        self._entries[thread_id] = InactivityEntry(
            thread_id=thread_id,
            created_at=self._clock(),
            owner_id=owner_id or None,
        )

    def on_message(self, thread_id: str, author_id: str, is_staff: bool) -> None:
        """Stop tracking once the creator or staff has posted.

        When the creator is unknown, any non-staff message counts.
        """
        entry = self._entries.get(thread_id)
        if entry is None:
            return

        if is_staff or entry.owner_id is None or author_id == entry.owner_id:
            self._entries.pop(thread_id, None)
            logger.debug("Stopped inactivity tracking for thread %s", thread_id)

    def due_for_prompt(self) -> List[InactivityEntry]:
        """Return silent threads that have not been prompted yet.

        Threads older than the absolute ceiling are dropped instead.
        """
        now = self._clock()
        due: List[InactivityEntry] = []
        for thread_id, entry in list(self._entries.items()):
            age = now - entry.created_at
            if age > self.max_age_seconds:
                self._entries.pop(thread_id, None)
                continue
            if not entry.asked and age >= self.threshold_seconds:
                due.append(entry)
        return due

    def mark_asked(self, thread_id: str) -> None:
        """Record that the inactivity prompt was sent for a thread.

        Args:
            thread_id: Tracked thread; unknown threads are ignored
        """
        entry = self._entries.get(thread_id)
        if entry is not None:
            entry.asked = True

    def stop_tracking(self, thread_id: str) -> None:
        self._entries.pop(thread_id, None)

    def sweep_expired(self) -> int:
        """Delete threads older than the absolute ceiling.

        Returns:
            Number of entries removed
        """
        now = self._clock()
        expired = [
            key
            for key, entry in self._entries.items()
            if now - entry.created_at > self.max_age_seconds
        ]
        for key in expired:
            self._entries.pop(key, None)
        return len(expired)

    def __contains__(self, thread_id: object) -> bool:
        return thread_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

"""Prevent the bot from posting the same reply twice in a thread.

The guard keeps the last bot message per thread. On a cache miss it can
consult the thread's recent history, so replies sent before a restart (or by
another process) are still seen. History lookups fail open.
"""

import logging
import re
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Awaitable, Callable, Dict, Optional, Sequence

from ticketbot.metrics.router_metrics import dedup_history_lookups_total

logger = logging.getLogger(__name__)

DEFAULT_DEDUP_WINDOW_SECONDS = 2 * 60

_ROLE_MENTION = re.compile(r"<@&\d+>")
_USER_MENTION = re.compile(r"<@!?\d+>")
_WHITESPACE = re.compile(r"\s+")


@dataclass
class DedupEntry:
    last_message: str
    timestamp: float


@dataclass(frozen=True)
class RecentBotMessage:
    """A bot message read back from the thread history, newest first."""

    content: str
    created_at: datetime


HistoryFetcher = Callable[[], Awaitable[Sequence[RecentBotMessage]]]


def normalize_message(content: str) -> str:
    """Strip mentions and collapse whitespace for comparison."""
    if not content or not isinstance(content, str):
        return ""
    content = _ROLE_MENTION.sub("", content)
    content = _USER_MENTION.sub("", content)
    return _WHITESPACE.sub(" ", content).strip()


class ReplyDeduplicator:
    """Per-thread cache of the last bot reply.

    Timestamps are wall-clock seconds so cached entries and platform history
    share one time base.
    """

    def __init__(
        self,
        window_seconds: float = DEFAULT_DEDUP_WINDOW_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        self.window_seconds = float(window_seconds)
        self._clock = clock
        self._entries: Dict[str, DedupEntry] = {}

    async def should_skip(
        self,
        thread_id: str,
        candidate: str,
        history: Optional[HistoryFetcher] = None,
    ) -> bool:
        """Return True if ``candidate`` repeats the last bot message.

        The cache entry is overwritten with the candidate afterwards, whether
        or not the caller ends up sending it.
        """
        if not thread_id or not candidate:
            return False

        normalized = normalize_message(candidate)
        now = self._clock()

        cached = self._entries.get(thread_id)
        if cached is not None and self._is_duplicate(cached, normalized, now):
            self._remember(thread_id, normalized, now)
            return True

        if history is not None:
            last = await self._last_bot_message(thread_id, history)
            if last is not None and self._is_duplicate(last, normalized, now):
                self._remember(thread_id, normalized, now)
                return True

        self._remember(thread_id, normalized, now)
        return False

    def record(self, thread_id: str, content: str) -> None:
        """Remember a message the bot has sent."""
        if not thread_id or not content:
            return
        self._remember(thread_id, normalize_message(content), self._clock())

    def sweep_expired(self) -> int:
        """Delete entries older than twice the window."""
        now = self._clock()
        expired = [
            key
            for key, entry in self._entries.items()
            if now - entry.timestamp > self.window_seconds * 2
        ]
        for key in expired:
            self._entries.pop(key, None)
        return len(expired)

    def last_message(self, thread_id: str) -> Optional[str]:
        """Return the normalized last message cached for a thread, if any."""
        entry = self._entries.get(thread_id)
        return entry.last_message if entry is not None else None

    def _is_duplicate(self, entry: DedupEntry, normalized: str, now: float) -> bool:
        return (
            now - entry.timestamp < self.window_seconds
            and entry.last_message == normalized
        )

    def _remember(self, thread_id: str, normalized: str, now: float) -> None:
        self._entries[thread_id] = DedupEntry(last_message=normalized, timestamp=now)

    async def _last_bot_message(
        self, thread_id: str, history: HistoryFetcher
    ) -> Optional[DedupEntry]:
        try:
            messages = await history()
        except Exception as e:
            # Fail open: a broken lookup must not drop a legitimate reply
            dedup_history_lookups_total.labels(result="error").inc()
            logger.error(
                "Failed to check duplicate messages in thread %s: %s", thread_id, e
            )
            return None

        if not messages:
            dedup_history_lookups_total.labels(result="empty").inc()
            return None

        dedup_history_lookups_total.labels(result="found").inc()
        newest = messages[0]
        return DedupEntry(
            last_message=normalize_message(newest.content),
            timestamp=newest.created_at.timestamp(),
        )

    def __len__(self) -> int:
        return len(self._entries)

"""Background loops: inactivity prompts and state sweeps.

Each loop runs on its own fixed interval without a shared lock. Sweeps only
bound memory; expiry that affects decisions is checked when state is read.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import suppress
from typing import Awaitable, Callable, Dict, List, Optional

from ticketbot.channels.models import ChatGateway
from ticketbot.metrics.router_metrics import (
    inactivity_prompts_total,
    maintenance_sweeps_total,
)
from ticketbot.prompts import messages
from ticketbot.services.deduplication import ReplyDeduplicator
from ticketbot.services.rate_limiter import ThreadRateLimiter
from ticketbot.services.staff_activity import StaffPauseTracker
from ticketbot.services.thread_inactivity import ThreadInactivityTracker

logger = logging.getLogger(__name__)

DEFAULT_SWEEP_INTERVALS: Dict[str, float] = {
    "rate_limit": 10 * 60,
    "dedup": 5 * 60,
    "staff_pause": 60,
    "inactivity": 15 * 60,
}


class MaintenanceService:
    """Run the inactivity poll and the per-store sweeps."""

    def __init__(
        self,
        gateway: ChatGateway,
        rate_limiter: ThreadRateLimiter,
        deduplicator: ReplyDeduplicator,
        pause_tracker: StaffPauseTracker,
        inactivity_tracker: ThreadInactivityTracker,
        inactivity_poll_seconds: float = 15.0,
        sweep_intervals: Optional[Dict[str, float]] = None,
        restart_delay_seconds: float = 5.0,
    ) -> None:
        self.gateway = gateway
        self.inactivity_tracker = inactivity_tracker
        self.inactivity_poll_seconds = inactivity_poll_seconds
        self.sweep_intervals = {**DEFAULT_SWEEP_INTERVALS, **(sweep_intervals or {})}
        self.restart_delay_seconds = restart_delay_seconds
        self._sweepers: Dict[str, Callable[[], int]] = {
            "rate_limit": rate_limiter.sweep_expired,
            "dedup": deduplicator.sweep_expired,
            "staff_pause": pause_tracker.sweep_expired,
            "inactivity": inactivity_tracker.sweep_expired,
        }
        self._tasks: List[asyncio.Task[None]] = []
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    async def start(self) -> None:
        """Start the inactivity poll and one sweep loop per store."""
        if self._running:
            return
        self._running = True
        self._tasks = [
            asyncio.create_task(
                self._run_loop(
                    "inactivity_poll",
                    self.inactivity_poll_seconds,
                    self.run_inactivity_poll,
                )
            )
        ]
        for name in self._sweepers:
            self._tasks.append(
                asyncio.create_task(
                    self._run_loop(
                        f"sweep:{name}",
                        self.sweep_intervals[name],
                        self._sweep_action(name),
                    )
                )
            )
        logger.info("Maintenance service started with %d loops", len(self._tasks))

    async def stop(self) -> None:
        """Cancel all loops and wait for them to finish."""
        self._running = False
        for task in self._tasks:
            task.cancel()
        for task in self._tasks:
            with suppress(asyncio.CancelledError):
                await task
        self._tasks = []
        logger.info("Maintenance service stopped")

    async def run_inactivity_poll(self) -> int:
        """Prompt every silent ticket creator once.

        Returns:
            Number of prompts sent
        """
        sent = 0
        for entry in self.inactivity_tracker.due_for_prompt():
            # Marked before sending so a slow send is never repeated
            self.inactivity_tracker.mark_asked(entry.thread_id)
            try:
                await self.gateway.send_to_thread(
                    entry.thread_id, messages.inactivity_prompt(entry.owner_id)
                )
            except Exception as e:
                inactivity_prompts_total.labels(result="error").inc()
                logger.warning(
                    "Failed to send inactivity prompt to thread %s: %s",
                    entry.thread_id,
                    e,
                )
                continue
            inactivity_prompts_total.labels(result="sent").inc()
            logger.info("Sent inactivity prompt to thread %s", entry.thread_id)
            sent += 1
        return sent

    def sweep(self, name: str) -> int:
        """Run one store's sweep.

        Args:
            name: Store key, one of ``DEFAULT_SWEEP_INTERVALS``

        Returns:
            Number of entries removed

        Raises:
            KeyError: If the store name is unknown
        """
        removed = self._sweepers[name]()
        if removed:
            maintenance_sweeps_total.labels(store=name).inc(removed)
            logger.debug("Sweep %s removed %d entries", name, removed)
        return removed

    def _sweep_action(self, name: str) -> Callable[[], Awaitable[int]]:
        async def action() -> int:
            return self.sweep(name)

        return action

    async def _run_loop(
        self, name: str, interval: float, action: Callable[[], Awaitable[int]]
    ) -> None:
        while self._running:
            try:
                await asyncio.sleep(interval)
                await action()
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("Maintenance loop %s crashed; retrying", name)
                await asyncio.sleep(self.restart_delay_seconds)

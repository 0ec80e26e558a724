"""Route ticket thread messages to exactly one action.

For every inbound message the router applies a fixed precedence:

1. ignore bots, non-ticket channels and empty messages
2. feed the inactivity tracker
3. staff ``!pause`` / ``!resume`` commands
4. other staff messages pause the thread
5. paused threads get no reply
6. gift card detected -> redacted payment alert, never an answer
7-12. rate limit, FAQ answer or escalation, duplicate check, reply

The state containers are independent; this order is what keeps their
decisions consistent for a given message.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Sequence

from ticketbot.channels.models import ChatGateway, InboundMessage, RouteOutcome
from ticketbot.channels.notification import send_payment_alert
from ticketbot.core.exceptions import ChannelUnavailableError
from ticketbot.core.gift_cards import has_gift_card, redact_gift_card_codes
from ticketbot.metrics.router_metrics import payment_alerts_total, route_outcomes_total
from ticketbot.prompts import messages
from ticketbot.services.answer_service import AnswerService
from ticketbot.services.deduplication import ReplyDeduplicator
from ticketbot.services.rate_limiter import ThreadRateLimiter
from ticketbot.services.staff_activity import StaffPauseTracker
from ticketbot.services.thread_inactivity import ThreadInactivityTracker

logger = logging.getLogger(__name__)


class StaffCommand(str, Enum):
    PAUSE = "!pause"
    RESUME = "!resume"


def parse_staff_command(content: str) -> Optional[StaffCommand]:
    """Return the command if the whole message is one (case-insensitive)."""
    normalized = (content or "").strip().lower()
    for command in StaffCommand:
        if normalized == command.value:
            return command
    return None


@dataclass(frozen=True)
class RouterConfig:
    ticket_channel_id: str
    payment_channel_id: str
    payment_role_id: str
    staff_role_id: str = ""
    answering_enabled: bool = False
    confidence_threshold: float = 0.6
    gift_card_keywords: Sequence[str] = ()
    dedup_history_limit: int = 10

    @classmethod
    def from_settings(cls, settings: Any) -> "RouterConfig":
        return cls(
            ticket_channel_id=settings.TICKET_CHANNEL_ID,
            payment_channel_id=settings.PAYMENT_CHANNEL_ID,
            payment_role_id=settings.PAYMENT_ROLE_ID,
            staff_role_id=settings.STAFF_ROLE_ID,
            answering_enabled=settings.answering_enabled,
            confidence_threshold=settings.CONFIDENCE_THRESHOLD,
            gift_card_keywords=settings.gift_card_keywords,
            dedup_history_limit=settings.DEDUP_HISTORY_LIMIT,
        )


class MessageRouter:
    """Decide and perform the single action for an inbound thread message."""

    def __init__(
        self,
        config: RouterConfig,
        gateway: ChatGateway,
        rate_limiter: ThreadRateLimiter,
        deduplicator: ReplyDeduplicator,
        pause_tracker: StaffPauseTracker,
        inactivity_tracker: ThreadInactivityTracker,
        answer_service: Optional[AnswerService] = None,
    ):
        self.config = config
        self.gateway = gateway
        self.rate_limiter = rate_limiter
        self.deduplicator = deduplicator
        self.pause_tracker = pause_tracker
        self.inactivity_tracker = inactivity_tracker
        self.answer_service = answer_service

    async def route(self, message: InboundMessage) -> RouteOutcome:
        """Handle one inbound message.

        Args:
            message: Message seen in a guild channel

        Returns:
            The single outcome applied to the message
        """
        outcome = await self._route(message)
        route_outcomes_total.labels(outcome=outcome.value).inc()
        return outcome

    def is_ticket_message(self, message: InboundMessage) -> bool:
        """Check whether a message is a non-empty human post in a ticket thread.

        Args:
            message: Inbound message to check

        Returns:
            True if the router should act on the message
        """
        return (
            not message.author_is_bot
            and message.is_thread
            and message.parent_id == self.config.ticket_channel_id
            and bool(message.content and message.content.strip())
        )

    async def _route(self, message: InboundMessage) -> RouteOutcome:
        if not self.is_ticket_message(message):
            return RouteOutcome.IGNORED

        thread_id = message.channel_id
        is_staff = bool(self.config.staff_role_id) and message.author_is_staff

        self.inactivity_tracker.on_message(thread_id, message.author_id, is_staff)

        if is_staff:
            command = parse_staff_command(message.content)
            if command is not None:
                await self._apply_staff_command(message, command)
                return RouteOutcome.STAFF_COMMAND

            self.pause_tracker.record_staff_activity(thread_id)
            logger.debug("Staff activity in thread %s; bot paused", thread_id)
            return RouteOutcome.STAFF_ACTIVITY

        if self.pause_tracker.is_paused(thread_id):
            logger.info("Thread %s is paused by staff; not replying", thread_id)
            return RouteOutcome.PAUSED

        try:
            if has_gift_card(message.content, self.config.gift_card_keywords):
                return await self._alert_payment(message)
            return await self._answer(message)
        except Exception:
            logger.exception(
                "Failed to handle message %s in thread %s",
                message.message_id,
                thread_id,
            )
            await self._send_fallback_escalation(message)
            return RouteOutcome.FAILED

    async def _apply_staff_command(
        self, message: InboundMessage, command: StaffCommand
    ) -> None:
        thread_id = message.channel_id
        if command is StaffCommand.PAUSE:
            self.pause_tracker.pause(thread_id)
            ack = messages.PAUSE_ACK
        else:
            self.pause_tracker.resume(thread_id)
            ack = messages.RESUME_ACK

        logger.info(
            "Staff %s applied %s in thread %s",
            message.author_id,
            command.value,
            thread_id,
        )

        try:
            await self.gateway.send_to_thread(thread_id, ack)
        except Exception as e:
            logger.warning(
                "Could not acknowledge %s in thread %s: %s", command.value, thread_id, e
            )

        try:
            await self.gateway.delete_message(message)
        except Exception as e:
            logger.warning(
                "Could not delete command message %s in thread %s: %s",
                message.message_id,
                thread_id,
                e,
            )

    async def _alert_payment(self, message: InboundMessage) -> RouteOutcome:
        try:
            payment_channel = await self.gateway.fetch_channel(
                self.config.payment_channel_id
            )
        except ChannelUnavailableError as e:
            payment_alerts_total.labels(result="channel_unavailable").inc()
            logger.error(
                "Payment channel unavailable for message %s in thread %s: %s",
                message.message_id,
                message.channel_id,
                e.detail,
            )
            return RouteOutcome.PAYMENT_CHANNEL_UNAVAILABLE

        logger.info(
            "Amazon gift card detected in thread %s, author %s",
            message.channel_id,
            message.author_tag or message.author_id,
        )
        await send_payment_alert(
            payment_channel, message, role_id=self.config.payment_role_id
        )
        payment_alerts_total.labels(result="sent").inc()
        return RouteOutcome.PAYMENT_ALERT

    async def _answer(self, message: InboundMessage) -> RouteOutcome:
        thread_id = message.channel_id

        if self.answer_service is None or not self.config.answering_enabled:
            return RouteOutcome.ANSWERING_DISABLED

        if not self.rate_limiter.allow(thread_id):
            logger.info(
                "Rate limit reached for thread %s; skipping message %s",
                thread_id,
                message.message_id,
            )
            return RouteOutcome.RATE_LIMITED

        result = await self.answer_service.answer(
            redact_gift_card_codes(message.content)
        )

        if result.confidence >= self.config.confidence_threshold:
            reply = redact_gift_card_codes(result.answer)
            outcome = RouteOutcome.AUTO_ANSWERED
        else:
            reply = messages.escalation_message(self.config.staff_role_id)
            outcome = RouteOutcome.ESCALATED

        logger.info(
            "Thread %s message %s: confidence %.2f -> %s",
            thread_id,
            message.message_id,
            result.confidence,
            outcome.value,
        )

        if not await self._send_reply(message, reply):
            return RouteOutcome.DEDUPLICATED
        return outcome

    async def _send_reply(self, message: InboundMessage, reply: str) -> bool:
        """Reply unless it duplicates the last bot message.

        Returns:
            False if the reply was skipped as a duplicate
        """
        thread_id = message.channel_id
        limit = self.config.dedup_history_limit

        async def history():
            return await self.gateway.recent_bot_messages(thread_id, limit)

        if await self.deduplicator.should_skip(thread_id, reply, history=history):
            logger.info(
                "Skipping duplicate reply in thread %s for message %s",
                thread_id,
                message.message_id,
            )
            return False

        await self.gateway.reply(message, reply)
        self.deduplicator.record(thread_id, reply)
        return True

    async def _send_fallback_escalation(self, message: InboundMessage) -> None:
        reply = messages.escalation_message(self.config.staff_role_id)
        try:
            await self._send_reply(message, reply)
        except Exception:
            logger.exception(
                "Fallback escalation failed for message %s in thread %s",
                message.message_id,
                message.channel_id,
            )

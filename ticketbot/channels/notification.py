"""Payment alerts for gift cards posted in ticket threads."""

import logging
import time
from typing import Callable

from ticketbot.channels.models import InboundMessage, OutboundChannel
from ticketbot.core.gift_cards import redact_gift_card_codes
from ticketbot.prompts.messages import PAYMENT_ALERT_TEMPLATE

logger = logging.getLogger(__name__)


def discord_timestamp(epoch_seconds: float) -> str:
    """Full date/time marker rendered in each reader's local timezone."""
    return f"<t:{int(epoch_seconds)}:F>"


def compose_payment_alert(
    message: InboundMessage,
    role_id: str,
    clock: Callable[[], float] = time.time,
) -> str:
    """Build the alert text. The excerpt is always redacted."""
    excerpt = redact_gift_card_codes(message.content).replace("\n", "\n> ")
    return PAYMENT_ALERT_TEMPLATE.format(
        role_id=role_id,
        thread_link=message.thread_link,
        author_tag=message.author_tag or message.author_id,
        timestamp=discord_timestamp(clock()),
        excerpt=excerpt,
    )


async def send_payment_alert(
    payment_channel: OutboundChannel,
    message: InboundMessage,
    role_id: str,
    clock: Callable[[], float] = time.time,
) -> None:
    body = compose_payment_alert(message, role_id, clock)
    await payment_channel.send(body)

"""Ticket thread message handling.

The router is platform-agnostic: it consumes ``InboundMessage`` values and
talks to the chat platform through the ``ChatGateway`` protocol. The Discord
plugin provides both.
"""

from ticketbot.channels.models import (
    ChatGateway,
    InboundMessage,
    OutboundChannel,
    RouteOutcome,
)
from ticketbot.channels.router import MessageRouter

__all__ = [
    "ChatGateway",
    "InboundMessage",
    "MessageRouter",
    "OutboundChannel",
    "RouteOutcome",
]

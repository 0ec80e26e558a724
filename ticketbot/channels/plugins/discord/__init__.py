"""Discord platform plugin."""

from ticketbot.channels.plugins.discord.client import TicketBotClient, build_intents
from ticketbot.channels.plugins.discord.gateway import DiscordGateway, to_inbound_message

__all__ = ["DiscordGateway", "TicketBotClient", "build_intents", "to_inbound_message"]

"""Discord client that feeds ticket thread events to the router."""

from __future__ import annotations

import logging
from typing import Any, Optional

import discord

from ticketbot.channels.bootstrapper import BotComponents, build_components
from ticketbot.channels.plugins.discord.gateway import DiscordGateway, to_inbound_message
from ticketbot.core.exceptions import ChannelUnavailableError

logger = logging.getLogger(__name__)


def build_intents() -> discord.Intents:
    intents = discord.Intents.default()
    intents.guilds = True
    intents.guild_messages = True
    intents.message_content = True
    # Role membership of message authors decides who is staff
    intents.members = True
    return intents


class TicketBotClient(discord.Client):
    """Watches the ticket channel's threads.

    ``on_thread_create`` starts inactivity tracking, ``on_message`` routes
    every thread message. Background maintenance starts in ``setup_hook``.
    """

    def __init__(
        self,
        settings: Any,
        components: Optional[BotComponents] = None,
        **kwargs: Any,
    ) -> None:
        kwargs.setdefault("intents", build_intents())
        kwargs.setdefault(
            "allowed_mentions",
            discord.AllowedMentions(everyone=False, roles=True, users=True),
        )
        super().__init__(**kwargs)
        self.settings = settings
        self.gateway = DiscordGateway(self)
        self.components = components or build_components(settings, self.gateway)

    async def setup_hook(self) -> None:
        await self.components.maintenance.start()

    async def on_ready(self) -> None:
        logger.info("Bot ready, guilds: %d", len(self.guilds))
        for label, channel_id in (
            ("payment", self.settings.PAYMENT_CHANNEL_ID),
            ("tickets", self.settings.TICKET_CHANNEL_ID),
        ):
            try:
                await self.gateway.fetch_channel(channel_id)
                logger.info("Channel %s: %s", label, channel_id)
            except ChannelUnavailableError:
                logger.error("Channel %s not found: %s", label, channel_id)

    async def on_thread_create(self, thread: discord.Thread) -> None:
        if str(thread.parent_id) != self.settings.TICKET_CHANNEL_ID:
            return

        owner_id = None if self._opened_by_bot(thread) else thread.owner_id
        self.components.inactivity_tracker.track(
            str(thread.id), str(owner_id) if owner_id else None
        )
        logger.info("Tracking new ticket thread %s", thread.id)

    def _opened_by_bot(self, thread: discord.Thread) -> bool:
        """Check whether a bot (this one or a ticket bot) created the thread.

        Such threads have no known creator, so any customer reply counts.
        """
        if self.user is not None and thread.owner_id == self.user.id:
            return True
        owner = thread.owner
        return owner is not None and bool(owner.bot)

    async def on_message(self, message: discord.Message) -> None:
        inbound = to_inbound_message(
            message,
            bot_user_id=self.user.id if self.user else None,
            staff_role_id=self.settings.STAFF_ROLE_ID,
        )
        await self.components.router.route(inbound)

    async def close(self) -> None:
        await self.components.close()
        await super().close()

"""Discord implementation of the router's gateway contract."""

from __future__ import annotations

import logging
from typing import List, Optional

import discord

from ticketbot.channels.models import InboundMessage
from ticketbot.core.exceptions import ChannelUnavailableError
from ticketbot.services.deduplication import RecentBotMessage

logger = logging.getLogger(__name__)


def _has_role(author: discord.abc.User, role_id: str) -> bool:
    roles = getattr(author, "roles", None) or []
    return any(str(role.id) == role_id for role in roles)


def to_inbound_message(
    message: discord.Message,
    bot_user_id: Optional[int] = None,
    staff_role_id: str = "",
) -> InboundMessage:
    """Convert a discord.py message into the router's model."""
    channel = message.channel
    is_thread = isinstance(channel, discord.Thread)
    parent_id = getattr(channel, "parent_id", None) if is_thread else None

    author = message.author
    if not isinstance(author, discord.Member) and message.guild is not None:
        author = message.guild.get_member(author.id) or author

    return InboundMessage(
        message_id=str(message.id),
        channel_id=str(channel.id),
        parent_id=str(parent_id) if parent_id else None,
        guild_id=str(message.guild.id) if message.guild else None,
        is_thread=is_thread,
        author_id=str(author.id),
        author_tag=str(author),
        author_is_bot=bool(author.bot)
        or (bot_user_id is not None and author.id == bot_user_id),
        author_is_staff=bool(staff_role_id) and _has_role(author, staff_role_id),
        content=message.content or "",
    )


class DiscordGateway:
    """Channel operations over a connected discord.py client."""

    def __init__(self, client: discord.Client):
        self.client = client

    async def fetch_channel(self, channel_id: str) -> discord.abc.Messageable:
        try:
            snowflake = int(channel_id)
        except (TypeError, ValueError) as e:
            raise ChannelUnavailableError(str(channel_id), "invalid id") from e

        channel = self.client.get_channel(snowflake)
        if channel is None:
            try:
                channel = await self.client.fetch_channel(snowflake)
            except (discord.HTTPException, discord.InvalidData) as e:
                raise ChannelUnavailableError(channel_id, str(e)) from e

        if not isinstance(channel, discord.abc.Messageable):
            raise ChannelUnavailableError(channel_id, "not a text channel")
        return channel

    async def reply(self, message: InboundMessage, content: str) -> None:
        channel = await self.fetch_channel(message.channel_id)
        partial = channel.get_partial_message(int(message.message_id))
        await partial.reply(content, mention_author=False)

    async def send_to_thread(self, thread_id: str, content: str) -> None:
        channel = await self.fetch_channel(thread_id)
        await channel.send(content)

    async def delete_message(self, message: InboundMessage) -> None:
        channel = await self.fetch_channel(message.channel_id)
        await channel.get_partial_message(int(message.message_id)).delete()

    async def recent_bot_messages(
        self, thread_id: str, limit: int
    ) -> List[RecentBotMessage]:
        """Bot messages among the last ``limit`` messages, newest first."""
        bot_user = self.client.user
        if bot_user is None:
            return []

        channel = await self.fetch_channel(thread_id)
        recent: List[RecentBotMessage] = []
        async for item in channel.history(limit=limit):
            if item.author.id == bot_user.id:
                recent.append(
                    RecentBotMessage(content=item.content, created_at=item.created_at)
                )
        return recent

"""Channel message models and the gateway contract used by the router."""

from enum import Enum
from typing import Optional, Protocol, Sequence

from pydantic import BaseModel, ConfigDict, Field

from ticketbot.services.deduplication import RecentBotMessage

DISCORD_CHANNEL_URL = "https://discord.com/channels/{guild_id}/{channel_id}"


class RouteOutcome(str, Enum):
    """The single action taken for an inbound message."""

    IGNORED = "ignored"
    STAFF_COMMAND = "staff_command"
    STAFF_ACTIVITY = "staff_activity"
    PAUSED = "paused"
    PAYMENT_ALERT = "payment_alert"
    PAYMENT_CHANNEL_UNAVAILABLE = "payment_channel_unavailable"
    ANSWERING_DISABLED = "answering_disabled"
    RATE_LIMITED = "rate_limited"
    DEDUPLICATED = "deduplicated"
    AUTO_ANSWERED = "auto_answered"
    ESCALATED = "escalated"
    FAILED = "failed"


class InboundMessage(BaseModel):
    """A message posted in a guild channel, as seen by the router."""

    model_config = ConfigDict(frozen=True)

    message_id: str = Field(..., min_length=1)
    channel_id: str = Field(..., min_length=1, description="Thread or channel id")
    parent_id: Optional[str] = Field(None, description="Parent channel of a thread")
    guild_id: Optional[str] = None
    is_thread: bool = False
    author_id: str = Field(..., min_length=1)
    author_tag: str = ""
    author_is_bot: bool = False
    author_is_staff: bool = False
    content: str = ""

    @property
    def thread_link(self) -> str:
        return DISCORD_CHANNEL_URL.format(
            guild_id=self.guild_id or "@me", channel_id=self.channel_id
        )


class OutboundChannel(Protocol):
    async def send(self, content: str) -> object: ...


class ChatGateway(Protocol):
    """Operations the router needs from the chat platform.

    Sends are best effort and may raise; ``fetch_channel`` raises
    ``ChannelUnavailableError`` when the channel cannot be resolved.
    """

    async def fetch_channel(self, channel_id: str) -> OutboundChannel: ...

    async def reply(self, message: InboundMessage, content: str) -> None: ...

    async def send_to_thread(self, thread_id: str, content: str) -> None: ...

    async def delete_message(self, message: InboundMessage) -> None: ...

    async def recent_bot_messages(
        self, thread_id: str, limit: int
    ) -> Sequence[RecentBotMessage]: ...

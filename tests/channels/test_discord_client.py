"""Tests for the Discord client event handlers."""

from unittest.mock import AsyncMock, MagicMock

import discord
import pytest
from conftest import STAFF_ROLE_ID, THREAD_ID, TICKET_CHANNEL_ID
from ticketbot.channels.models import InboundMessage
from ticketbot.channels.plugins.discord.client import TicketBotClient, build_intents
from ticketbot.core.config import Settings
from ticketbot.services.thread_inactivity import ThreadInactivityTracker


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        BOT_TOKEN="token",
        PAYMENT_CHANNEL_ID="2000",
        PAYMENT_ROLE_ID="3000",
        TICKET_CHANNEL_ID=TICKET_CHANNEL_ID,
        STAFF_ROLE_ID=STAFF_ROLE_ID,
    )


@pytest.fixture
def components(clock) -> MagicMock:
    mock = MagicMock()
    mock.inactivity_tracker = ThreadInactivityTracker(clock=clock)
    mock.router.route = AsyncMock()
    mock.maintenance.start = AsyncMock()
    return mock


@pytest.fixture
def client(settings, components) -> TicketBotClient:
    return TicketBotClient(settings=settings, components=components)


def _thread(parent_id: int = 1000, owner_id: int = 777, owner=None) -> MagicMock:
    thread = MagicMock(spec=discord.Thread)
    thread.id = int(THREAD_ID)
    thread.parent_id = parent_id
    thread.owner_id = owner_id
    thread.owner = owner
    return thread


@pytest.mark.unit
def test_intents_include_message_content_and_members():
    intents = build_intents()

    assert intents.message_content
    assert intents.members


class TestOnThreadCreate:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_ticket_thread_is_tracked_with_owner(self, client, components):
        await client.on_thread_create(_thread())

        tracker = components.inactivity_tracker
        assert THREAD_ID in tracker
        tracker.on_message(THREAD_ID, "999", is_staff=False)
        assert THREAD_ID in tracker
        tracker.on_message(THREAD_ID, "777", is_staff=False)
        assert THREAD_ID not in tracker

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_thread_in_other_channel_is_ignored(self, client, components):
        await client.on_thread_create(_thread(parent_id=9999))

        assert len(components.inactivity_tracker) == 0

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_thread_opened_by_this_bot_has_no_owner(
        self, client, components, monkeypatch
    ):
        monkeypatch.setattr(
            TicketBotClient, "user", property(lambda self: MagicMock(id=99))
        )

        await client.on_thread_create(_thread(owner_id=99))

        entry = components.inactivity_tracker._entries[THREAD_ID]
        assert entry.owner_id is None

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_thread_opened_by_ticket_bot_has_no_owner(self, client, components):
        ticket_bot = MagicMock(spec=discord.Member)
        ticket_bot.bot = True

        await client.on_thread_create(_thread(owner_id=555, owner=ticket_bot))

        tracker = components.inactivity_tracker
        assert tracker._entries[THREAD_ID].owner_id is None
        tracker.on_message(THREAD_ID, "777", is_staff=False)
        assert THREAD_ID not in tracker


class TestOnMessage:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_message_is_converted_and_routed(self, client, components):
        author = MagicMock(spec=discord.Member)
        author.id = 888
        author.bot = False
        author.roles = [MagicMock(id=int(STAFF_ROLE_ID))]
        thread = _thread()
        message = MagicMock()
        message.id = 1
        message.channel = thread
        message.guild.id = 42
        message.author = author
        message.content = "!pause"

        await client.on_message(message)

        inbound = components.router.route.await_args.args[0]
        assert isinstance(inbound, InboundMessage)
        assert inbound.channel_id == THREAD_ID
        assert inbound.parent_id == TICKET_CHANNEL_ID
        assert inbound.author_is_staff is True
        assert inbound.content == "!pause"


@pytest.mark.unit
@pytest.mark.asyncio
async def test_setup_hook_starts_maintenance(client, components):
    await client.setup_hook()

    components.maintenance.start.assert_awaited_once()

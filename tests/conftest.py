"""
Pytest configuration and shared fixtures for the ticket bot.

This module provides:
- A controllable clock for the time-based state containers
- A mocked chat gateway and payment channel
- A sample FAQ knowledge base and mocked language model
- A router factory wiring all of the above
"""

from typing import Any, Callable
from unittest.mock import AsyncMock, MagicMock

import pytest
from ticketbot.channels.models import InboundMessage
from ticketbot.channels.router import MessageRouter, RouterConfig
from ticketbot.services.answer_service import AnswerService
from ticketbot.services.deduplication import ReplyDeduplicator
from ticketbot.services.faq.knowledge_base import FAQEntry, KnowledgeBase
from ticketbot.services.rate_limiter import ThreadRateLimiter
from ticketbot.services.staff_activity import StaffPauseTracker
from ticketbot.services.thread_inactivity import ThreadInactivityTracker

TICKET_CHANNEL_ID = "1000"
PAYMENT_CHANNEL_ID = "2000"
PAYMENT_ROLE_ID = "3000"
STAFF_ROLE_ID = "4000"
THREAD_ID = "5000"


class FakeClock:
    """Manually advanced clock returning seconds."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def payment_channel() -> MagicMock:
    channel = MagicMock()
    channel.send = AsyncMock()
    return channel


@pytest.fixture
def gateway(payment_channel: MagicMock) -> MagicMock:
    """Mocked ChatGateway; every operation succeeds by default."""
    gw = MagicMock()
    gw.fetch_channel = AsyncMock(return_value=payment_channel)
    gw.reply = AsyncMock()
    gw.send_to_thread = AsyncMock()
    gw.delete_message = AsyncMock()
    gw.recent_bot_messages = AsyncMock(return_value=[])
    return gw


@pytest.fixture
def faq_entries() -> list[FAQEntry]:
    return [
        FAQEntry(
            question="How do I activate my license key?",
            answer="Open Settings > License, paste your key and click Activate.",
            keywords=["activate", "license key"],
        ),
        FAQEntry(
            question="How long does payment verification take?",
            answer="Staff verify payments manually, usually within a few hours.",
            keywords=["payment", "pending"],
        ),
        FAQEntry(
            question="The software crashes on launch.",
            answer="Please contact the official software support team.",
            keywords=["crash", "error code"],
        ),
    ]


@pytest.fixture
def knowledge_base(faq_entries: list[FAQEntry]) -> KnowledgeBase:
    return KnowledgeBase(faq_entries)


@pytest.fixture
def model() -> MagicMock:
    """Mocked chat model returning a confident JSON answer."""
    mock = MagicMock()
    mock.complete = AsyncMock(
        return_value='{"answer": "Open Settings > License and paste your key.", '
        '"confidence": 0.9}'
    )
    return mock


@pytest.fixture
def router_config() -> RouterConfig:
    return RouterConfig(
        ticket_channel_id=TICKET_CHANNEL_ID,
        payment_channel_id=PAYMENT_CHANNEL_ID,
        payment_role_id=PAYMENT_ROLE_ID,
        staff_role_id=STAFF_ROLE_ID,
        answering_enabled=True,
    )


@pytest.fixture
def make_router(
    router_config: RouterConfig,
    gateway: MagicMock,
    knowledge_base: KnowledgeBase,
    model: MagicMock,
    clock: FakeClock,
) -> Callable[..., MessageRouter]:
    """Build a router with fresh state containers sharing the fake clock."""

    def factory(**overrides: Any) -> MessageRouter:
        params: dict[str, Any] = {
            "config": router_config,
            "gateway": gateway,
            "rate_limiter": ThreadRateLimiter(clock=clock),
            "deduplicator": ReplyDeduplicator(clock=clock),
            "pause_tracker": StaffPauseTracker(clock=clock),
            "inactivity_tracker": ThreadInactivityTracker(clock=clock),
            "answer_service": AnswerService(knowledge_base=knowledge_base, model=model),
        }
        params.update(overrides)
        return MessageRouter(**params)

    return factory


@pytest.fixture
def message_factory() -> Callable[..., InboundMessage]:
    """Build a non-staff message in a tracked ticket thread."""
    counter = {"value": 0}

    def factory(content: str, **overrides: Any) -> InboundMessage:
        counter["value"] += 1
        fields: dict[str, Any] = {
            "message_id": f"msg-{counter['value']}",
            "channel_id": THREAD_ID,
            "parent_id": TICKET_CHANNEL_ID,
            "guild_id": "42",
            "is_thread": True,
            "author_id": "777",
            "author_tag": "customer",
            "content": content,
        }
        fields.update(overrides)
        return InboundMessage(**fields)

    return factory


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: mark test as an integration test")
    config.addinivalue_line("markers", "unit: mark test as a unit test")

"""Wire the state containers, answer service and router from settings."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from ticketbot.channels.maintenance import MaintenanceService
from ticketbot.channels.models import ChatGateway
from ticketbot.channels.router import MessageRouter, RouterConfig
from ticketbot.services.answer_service import AnswerService, ChatModel
from ticketbot.services.deduplication import ReplyDeduplicator
from ticketbot.services.faq.knowledge_base import KnowledgeBase
from ticketbot.services.llm_client import OpenAIChatClient
from ticketbot.services.rate_limiter import ThreadRateLimiter
from ticketbot.services.staff_activity import StaffPauseTracker
from ticketbot.services.thread_inactivity import ThreadInactivityTracker

logger = logging.getLogger(__name__)


@dataclass
class BotComponents:
    """Everything the platform client needs, owned per process."""

    router: MessageRouter
    maintenance: MaintenanceService
    rate_limiter: ThreadRateLimiter
    deduplicator: ReplyDeduplicator
    pause_tracker: StaffPauseTracker
    inactivity_tracker: ThreadInactivityTracker
    answer_service: Optional[AnswerService] = None
    model_client: Optional[Any] = None

    async def close(self) -> None:
        await self.maintenance.stop()
        close = getattr(self.model_client, "close", None)
        if close is not None:
            await close()


def build_components(
    settings: Any,
    gateway: ChatGateway,
    model_client: Optional[ChatModel] = None,
    knowledge_base: Optional[KnowledgeBase] = None,
) -> BotComponents:
    rate_limiter = ThreadRateLimiter(
        max_requests=settings.RATE_LIMIT_MAX_REQUESTS,
        window_seconds=settings.RATE_LIMIT_WINDOW_SECONDS,
    )
    deduplicator = ReplyDeduplicator(window_seconds=settings.DEDUP_WINDOW_SECONDS)
    pause_tracker = StaffPauseTracker(pause_seconds=settings.STAFF_PAUSE_SECONDS)
    inactivity_tracker = ThreadInactivityTracker(
        threshold_seconds=settings.INACTIVITY_THRESHOLD_SECONDS,
        max_age_seconds=settings.INACTIVITY_MAX_AGE_SECONDS,
    )

    answer_service: Optional[AnswerService] = None
    if settings.answering_enabled:
        if model_client is None:
            model_client = OpenAIChatClient.from_settings(settings)
        if knowledge_base is None:
            knowledge_base = KnowledgeBase.from_file(settings.FAQ_FILE_PATH)
        answer_service = AnswerService(knowledge_base=knowledge_base, model=model_client)
    else:
        logger.info("Automated answers disabled (no model credential)")

    router = MessageRouter(
        config=RouterConfig.from_settings(settings),
        gateway=gateway,
        rate_limiter=rate_limiter,
        deduplicator=deduplicator,
        pause_tracker=pause_tracker,
        inactivity_tracker=inactivity_tracker,
        answer_service=answer_service,
    )
    maintenance = MaintenanceService(
        gateway=gateway,
        rate_limiter=rate_limiter,
        deduplicator=deduplicator,
        pause_tracker=pause_tracker,
        inactivity_tracker=inactivity_tracker,
        inactivity_poll_seconds=settings.INACTIVITY_POLL_SECONDS,
    )

    return BotComponents(
        router=router,
        maintenance=maintenance,
        rate_limiter=rate_limiter,
        deduplicator=deduplicator,
        pause_tracker=pause_tracker,
        inactivity_tracker=inactivity_tracker,
        answer_service=answer_service,
        model_client=model_client,
    )

"""FAQ-grounded automated answers.

``AnswerService.answer`` never fails: every error path resolves to the same
escalation result with confidence 0. Deciding whether to post the answer or
escalate is left to the router.
"""

import json
import logging
import math
from typing import Any, Optional, Protocol

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from ticketbot.core.exceptions import CollaboratorUnavailable
from ticketbot.core.gift_cards import redact_gift_card_codes
from ticketbot.metrics.router_metrics import answer_outcomes_total
from ticketbot.prompts.messages import HUMAN_ESCALATION
from ticketbot.prompts.support_prompt import SYSTEM_PROMPT, build_user_prompt
from ticketbot.services.faq.knowledge_base import (
    FAQ_MIN_SCORE,
    KnowledgeBase,
    format_faq_context,
)

logger = logging.getLogger(__name__)


class ChatModel(Protocol):
    async def complete(self, messages: list[dict[str, str]]) -> str: ...


class AnswerResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    answer: str
    confidence: float


ESCALATION_RESULT = AnswerResult(answer=HUMAN_ESCALATION, confidence=0.0)


class ModelAnswer(BaseModel):
    """Schema of the JSON object the model must return."""

    model_config = ConfigDict(extra="ignore")

    answer: str
    confidence: float = 0.0

    @field_validator("answer")
    @classmethod
    def strip_answer(cls, v: str) -> str:
        return v.strip()

    @field_validator("confidence", mode="before")
    @classmethod
    def coerce_confidence(cls, v: Any) -> float:
        """Clamp to [0, 1]; anything non-numeric or non-finite becomes 0."""
        if isinstance(v, bool):
            return 0.0
        try:
            value = float(v)
        except (TypeError, ValueError):
            return 0.0
        if not math.isfinite(value):
            return 0.0
        return min(1.0, max(0.0, value))


def parse_model_answer(raw: str) -> Optional[AnswerResult]:
    """Validate the model's text output against the answer schema.

    Returns:
        The parsed result, or None if the output violates the schema
    """
    if not raw or not raw.strip():
        return None
    try:
        # json.loads keeps non-finite literals (NaN) parseable so they can be
        # coerced to 0 rather than rejected
        parsed = ModelAnswer.model_validate(json.loads(raw))
    except (ValueError, ValidationError):
        return None
    if not parsed.answer:
        return None
    return AnswerResult(answer=parsed.answer, confidence=parsed.confidence)


class AnswerService:
    """Answer ticket questions from the FAQ through the language model."""

    def __init__(
        self,
        knowledge_base: KnowledgeBase,
        model: ChatModel,
        min_score: float = FAQ_MIN_SCORE,
    ):
        self.knowledge_base = knowledge_base
        self.model = model
        self.min_score = min_score

    async def answer(self, raw_message: str) -> AnswerResult:
        """Answer a ticket message from the FAQ.

        Args:
            raw_message: Customer message, redacted again before use

        Returns:
            The model answer, or the escalation result with confidence 0
        """
        safe_message = redact_gift_card_codes(raw_message)
        if not safe_message.strip():
            answer_outcomes_total.labels(outcome="empty_question").inc()
            return ESCALATION_RESULT

        result = self.knowledge_base.search(safe_message)
        if result.best_score < self.min_score:
            logger.info(
                "FAQ best score %.1f below %.1f; escalating without model call",
                result.best_score,
                self.min_score,
            )
            answer_outcomes_total.labels(outcome="low_faq_score").inc()
            return ESCALATION_RESULT

        messages = [
            {"role": "system", "content": SYSTEM_PROMPT},
            {
                "role": "user",
                "content": build_user_prompt(
                    format_faq_context(result.entries), safe_message
                ),
            },
        ]

        try:
            raw = await self.model.complete(messages)
        except CollaboratorUnavailable as e:
            logger.error("Model call failed: %s", e.detail)
            answer_outcomes_total.labels(outcome="model_error").inc()
            return ESCALATION_RESULT
        except Exception:
            logger.exception("Unexpected error during model call")
            answer_outcomes_total.labels(outcome="model_error").inc()
            return ESCALATION_RESULT

        parsed = parse_model_answer(raw)
        if parsed is None:
            logger.warning("Model output did not match the answer schema")
            answer_outcomes_total.labels(outcome="malformed_output").inc()
            return ESCALATION_RESULT

        answer_outcomes_total.labels(outcome="answered").inc()
        return parsed

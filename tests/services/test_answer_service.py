"""Tests for the FAQ-grounded answer service."""

from unittest.mock import AsyncMock

import pytest
from ticketbot.core.exceptions import MalformedModelOutputError, ModelUnavailableError
from ticketbot.prompts.messages import HUMAN_ESCALATION
from ticketbot.services.answer_service import (
    AnswerService,
    parse_model_answer,
)

QUESTION = "How do I activate my license key?"


@pytest.fixture
def service(knowledge_base, model):
    return AnswerService(knowledge_base=knowledge_base, model=model)


class TestParseModelAnswer:
    @pytest.mark.unit
    def test_parses_valid_object(self):
        result = parse_model_answer('{"answer": " Do this. ", "confidence": 0.8}')
        assert result.answer == "Do this."
        assert result.confidence == 0.8

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ('{"answer": "a", "confidence": 3}', 1.0),
            ('{"answer": "a", "confidence": -2}', 0.0),
            ('{"answer": "a", "confidence": "0.7"}', 0.7),
            ('{"answer": "a", "confidence": "high"}', 0.0),
            ('{"answer": "a", "confidence": NaN}', 0.0),
            ('{"answer": "a", "confidence": Infinity}', 0.0),
            ('{"answer": "a"}', 0.0),
        ],
    )
    def test_confidence_is_clamped_and_coerced(self, raw, expected):
        assert parse_model_answer(raw).confidence == expected

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "raw",
        [
            "",
            "not json at all",
            '```json\n{"answer": "a", "confidence": 1}\n```',
            '["answer", 1]',
            '{"answer": "   ", "confidence": 0.9}',
            '{"answer": 42, "confidence": 0.9}',
            '{"confidence": 0.9}',
        ],
    )
    def test_schema_violations_return_none(self, raw):
        assert parse_model_answer(raw) is None


class TestAnswer:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_answers_from_model_when_faq_matches(self, service, model):
        result = await service.answer(QUESTION)

        assert result.answer == "Open Settings > License and paste your key."
        assert result.confidence == 0.9
        model.complete.assert_awaited_once()

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_low_faq_score_escalates_without_model_call(self, service, model):
        result = await service.answer("bakery croissant baguette")

        assert result.answer == HUMAN_ESCALATION
        assert result.confidence == 0
        model.complete.assert_not_awaited()

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_model_receives_context_and_redacted_question(self, service, model):
        await service.answer(f"{QUESTION} I also have AB12-CD3456-EF78")

        messages = model.complete.await_args.args[0]
        assert messages[0]["role"] == "system"
        user_prompt = messages[1]["content"]
        assert "FAQ Entry 1:" in user_prompt
        assert "[REDACTED]" in user_prompt
        assert "AB12-CD3456-EF78" not in user_prompt

    @pytest.mark.unit
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [
            ModelUnavailableError("Model request timed out after 15.0s"),
            MalformedModelOutputError(),
            RuntimeError("unexpected"),
        ],
    )
    async def test_model_failures_resolve_to_escalation(self, service, model, error):
        model.complete = AsyncMock(side_effect=error)

        result = await service.answer(QUESTION)

        assert result.answer == HUMAN_ESCALATION
        assert result.confidence == 0

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_malformed_output_resolves_to_escalation(self, service, model):
        model.complete = AsyncMock(return_value="Sure! Here is your answer.")

        result = await service.answer(QUESTION)

        assert result.answer == HUMAN_ESCALATION
        assert result.confidence == 0

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_code_only_message_escalates(self, service, model):
        result = await service.answer("   ")

        assert result.confidence == 0
        model.complete.assert_not_awaited()

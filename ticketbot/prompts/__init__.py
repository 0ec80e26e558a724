"""Prompts package: model instructions and user-facing messages."""

from ticketbot.prompts import messages
from ticketbot.prompts.support_prompt import SYSTEM_PROMPT, build_user_prompt

__all__ = ["messages", "SYSTEM_PROMPT", "build_user_prompt"]

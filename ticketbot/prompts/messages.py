"""User-facing strings posted by the bot.

Escalation and fallback texts never carry error details.
"""

from typing import Optional

HUMAN_ESCALATION: str = "A human support agent will assist you shortly."

PAUSE_ACK: str = "⏸️ Automated replies are paused for this ticket."

RESUME_ACK: str = "▶️ Automated replies are resumed for this ticket."

INACTIVITY_PROMPT: str = (
    "Hello! Please describe your request so our team can help you "
    "(order, payment, activation, technical issue...)."
)

PAYMENT_ALERT_TEMPLATE: str = (
    "🚨 **Amazon gift card detected**\n"
    "<@&{role_id}>\n"
    "🧵 Ticket: {thread_link}\n"
    "👤 User: {author_tag}\n"
    "⏰ Time: {timestamp}\n"
    "💬 Message:\n"
    "> {excerpt}"
)


def role_mention(role_id: Optional[str]) -> str:
    return f"<@&{role_id}>" if role_id else ""


def user_mention(user_id: Optional[str]) -> str:
    return f"<@{user_id}>" if user_id else ""


def escalation_message(support_role_id: Optional[str]) -> str:
    """Escalation reply, mentioning the support role when configured."""
    mention = role_mention(support_role_id)
    return f"{mention} {HUMAN_ESCALATION}" if mention else HUMAN_ESCALATION


def inactivity_prompt(owner_id: Optional[str]) -> str:
    mention = user_mention(owner_id)
    return f"{mention} {INACTIVITY_PROMPT}" if mention else INACTIVITY_PROMPT

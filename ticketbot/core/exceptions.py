"""
Exception hierarchy for the ticket bot.

Configuration problems are fatal at startup. Collaborator failures (Discord
channels, the language model) are always recovered locally by the caller and
never reach a ticket thread as raw errors.
"""

from typing import Optional, Sequence


class TicketBotError(Exception):
    """Base exception for all application errors."""

    def __init__(self, detail: str, error_code: Optional[str] = None):
        super().__init__(detail)
        self.detail = detail
        self.error_code = error_code or self.__class__.__name__


# Configuration Exceptions


class ConfigurationError(TicketBotError):
    """Raised when required settings are missing or blank."""

    def __init__(self, missing: Sequence[str], detail: Optional[str] = None):
        self.missing = list(missing)
        super().__init__(
            detail
            or (
                f"Missing required env: {', '.join(self.missing)}. "
                "Check .env and .env.example."
            ),
            error_code="CONFIGURATION_ERROR",
        )


# Collaborator Exceptions


class CollaboratorUnavailable(TicketBotError):
    """Raised when an external collaborator fails or times out."""


class ChannelUnavailableError(CollaboratorUnavailable):
    """Raised when a Discord channel cannot be fetched."""

    def __init__(self, channel_id: str, reason: str = "not found"):
        self.channel_id = channel_id
        super().__init__(
            f"Channel '{channel_id}' unavailable: {reason}",
            error_code="CHANNEL_UNAVAILABLE",
        )


class ModelUnavailableError(CollaboratorUnavailable):
    """Raised when the language model call fails or times out."""

    def __init__(self, detail: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(detail, error_code="MODEL_UNAVAILABLE")


class MalformedModelOutputError(CollaboratorUnavailable):
    """Raised when the model response does not match the expected schema."""

    def __init__(self, detail: str = "Model returned malformed output"):
        super().__init__(detail, error_code="MALFORMED_MODEL_OUTPUT")

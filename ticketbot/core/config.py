import logging
from functools import lru_cache

from pydantic import AliasChoices, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ticketbot.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

REQUIRED_SETTINGS = (
    "BOT_TOKEN",
    "PAYMENT_CHANNEL_ID",
    "PAYMENT_ROLE_ID",
    "TICKET_CHANNEL_ID",
)


class Settings(BaseSettings):
    # Discord settings (required, checked by load_settings)
    BOT_TOKEN: str = ""
    PAYMENT_CHANNEL_ID: str = ""
    PAYMENT_ROLE_ID: str = Field(
        default="",
        validation_alias=AliasChoices("PAYMENT_ROLE_ID", "AMAZON_ROLE_ID"),
    )
    TICKET_CHANNEL_ID: str = ""

    # Optional features - blank disables the corresponding path
    STAFF_ROLE_ID: str = ""  # Staff commands, staff pause and escalation mention
    OPENAI_API_KEY: str = ""  # Automated FAQ answers

    # OpenAI settings
    OPENAI_API_URL: str = "https://api.openai.com/v1/chat/completions"
    OPENAI_MODEL: str = "gpt-4o-mini"
    LLM_TEMPERATURE: float = 0.3
    LLM_MAX_TOKENS: int = 500
    LLM_TIMEOUT_SECONDS: float = 15.0

    # Knowledge base
    FAQ_FILE_PATH: str = "data/faq.json"

    # Gift card detection - accepts comma-separated string or list
    GIFT_CARD_KEYWORDS: str | list[str] = ""

    # Routing thresholds and state windows
    CONFIDENCE_THRESHOLD: float = 0.6
    RATE_LIMIT_MAX_REQUESTS: int = 5
    RATE_LIMIT_WINDOW_SECONDS: float = 3600.0
    DEDUP_WINDOW_SECONDS: float = 120.0
    DEDUP_HISTORY_LIMIT: int = 10
    STAFF_PAUSE_SECONDS: float = 300.0
    INACTIVITY_THRESHOLD_SECONDS: float = 60.0
    INACTIVITY_POLL_SECONDS: float = 15.0
    INACTIVITY_MAX_AGE_SECONDS: float = 2 * 60 * 60

    # Observability
    LOG_LEVEL: str = "INFO"
    METRICS_PORT: int = 0  # 0 disables the Prometheus exporter

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )

    @field_validator(
        "BOT_TOKEN",
        "PAYMENT_CHANNEL_ID",
        "PAYMENT_ROLE_ID",
        "TICKET_CHANNEL_ID",
        "STAFF_ROLE_ID",
        "OPENAI_API_KEY",
    )
    @classmethod
    def strip_identifiers(cls, v: str) -> str:
        return v.strip() if isinstance(v, str) else v

    @field_validator("GIFT_CARD_KEYWORDS")
    @classmethod
    def normalize_keywords(cls, v: str | list[str]) -> list[str]:
        """Normalize keywords to a lowercase list without blank entries.

        A blank keyword would match every message, so it is dropped.
        """
        candidates = v.split(",") if isinstance(v, str) else v
        return [
            keyword.strip().lower()
            for keyword in candidates
            if isinstance(keyword, str) and keyword.strip()
        ]

    @field_validator("CONFIDENCE_THRESHOLD")
    @classmethod
    def validate_confidence_threshold(cls, v: float) -> float:
        if not 0.0 <= v <= 1.0:
            raise ValueError(f"CONFIDENCE_THRESHOLD must be between 0 and 1, got {v}")
        return v

    @field_validator("LLM_TEMPERATURE")
    @classmethod
    def validate_temperature(cls, v: float) -> float:
        if not 0.0 <= v <= 2.0:
            raise ValueError(f"LLM_TEMPERATURE must be between 0.0 and 2.0, got {v}")
        return v

    @property
    def gift_card_keywords(self) -> tuple[str, ...]:
        keywords = self.GIFT_CARD_KEYWORDS
        if isinstance(keywords, str):
            return tuple(self.normalize_keywords(keywords))
        return tuple(keywords)

    @property
    def answering_enabled(self) -> bool:
        """Automated answers need a model credential."""
        return bool(self.OPENAI_API_KEY)

    @property
    def staff_enabled(self) -> bool:
        return bool(self.STAFF_ROLE_ID)

    def missing_required(self) -> list[str]:
        """Return the names of required settings that are absent or blank."""
        return [
            name
            for name in REQUIRED_SETTINGS
            if not str(getattr(self, name, "") or "").strip()
        ]


def load_settings(**overrides) -> Settings:
    """Build and validate settings.

    Raises:
        ConfigurationError: If a required setting is missing/blank or a value
            fails validation.
    """
    try:
        settings = Settings(**overrides)
    except ValidationError as exc:
        fields = sorted({str(error["loc"][0]) for error in exc.errors() if error["loc"]})
        raise ConfigurationError(
            fields, detail=f"Invalid settings: {', '.join(fields)}. {exc}"
        ) from exc

    missing = settings.missing_required()
    if missing:
        raise ConfigurationError(missing)

    if not settings.answering_enabled:
        logger.info("OPENAI_API_KEY not set; automated answers disabled")
    if not settings.staff_enabled:
        logger.info("STAFF_ROLE_ID not set; staff commands and pause disabled")
    return settings


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached, validated application settings.

    Settings are only created once on first access, then cached.
    """
    return load_settings()


def reset_settings() -> None:
    """Reset the cached settings instance (used by tests)."""
    get_settings.cache_clear()

"""Tests for settings loading and validation."""

import pytest
from ticketbot.core.config import load_settings
from ticketbot.core.exceptions import ConfigurationError

REQUIRED = {
    "BOT_TOKEN": "token",
    "PAYMENT_CHANNEL_ID": "2000",
    "PAYMENT_ROLE_ID": "3000",
    "TICKET_CHANNEL_ID": "1000",
}

ALL_KEYS = (
    *REQUIRED,
    "AMAZON_ROLE_ID",
    "OPENAI_API_KEY",
    "STAFF_ROLE_ID",
    "GIFT_CARD_KEYWORDS",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Isolate settings from the developer environment and any .env file."""
    for key in ALL_KEYS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.mark.unit
def test_loads_required_settings_from_environment(monkeypatch):
    for key, value in REQUIRED.items():
        monkeypatch.setenv(key, f"  {value}  ")

    settings = load_settings()

    assert settings.BOT_TOKEN == "token"
    assert settings.TICKET_CHANNEL_ID == "1000"
    assert settings.answering_enabled is False
    assert settings.staff_enabled is False


@pytest.mark.unit
def test_missing_required_settings_raise_configuration_error(monkeypatch):
    monkeypatch.setenv("BOT_TOKEN", "token")
    monkeypatch.setenv("PAYMENT_CHANNEL_ID", "   ")

    with pytest.raises(ConfigurationError) as exc_info:
        load_settings()

    assert exc_info.value.missing == [
        "PAYMENT_CHANNEL_ID",
        "PAYMENT_ROLE_ID",
        "TICKET_CHANNEL_ID",
    ]
    assert "PAYMENT_ROLE_ID" in exc_info.value.detail


@pytest.mark.unit
def test_amazon_role_id_is_accepted_as_payment_role(monkeypatch):
    for key, value in REQUIRED.items():
        if key != "PAYMENT_ROLE_ID":
            monkeypatch.setenv(key, value)
    monkeypatch.setenv("AMAZON_ROLE_ID", "999")

    assert load_settings().PAYMENT_ROLE_ID == "999"


@pytest.mark.unit
def test_optional_features_enable_when_configured(monkeypatch):
    for key, value in REQUIRED.items():
        monkeypatch.setenv(key, value)
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    monkeypatch.setenv("STAFF_ROLE_ID", "4000")

    settings = load_settings()

    assert settings.answering_enabled is True
    assert settings.staff_enabled is True


@pytest.mark.unit
def test_gift_card_keywords_are_normalized(monkeypatch):
    for key, value in REQUIRED.items():
        monkeypatch.setenv(key, value)
    monkeypatch.setenv("GIFT_CARD_KEYWORDS", "Gift Card, ,carte cadeau")

    settings = load_settings()

    assert settings.gift_card_keywords == ("gift card", "carte cadeau")


@pytest.mark.unit
def test_invalid_threshold_is_a_configuration_error():
    with pytest.raises(ConfigurationError) as exc_info:
        load_settings(**REQUIRED, CONFIDENCE_THRESHOLD=1.5)

    assert "CONFIDENCE_THRESHOLD" in exc_info.value.missing

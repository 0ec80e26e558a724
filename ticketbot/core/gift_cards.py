"""Amazon gift card code detection and redaction.

Full codes must never be republished: every text that may contain one is
passed through ``redact_gift_card_codes`` before it is logged, sent to the
language model or included in an outbound message. Detection runs on the
original text.
"""

import re
from typing import Iterable, Pattern

GIFT_CARD_CODE_PATTERN: Pattern[str] = re.compile(
    r"\b[A-Z0-9]{4}-[A-Z0-9]{6}-[A-Z0-9]{4}\b"
)

REDACTION_PLACEHOLDER = "[REDACTED]"

# Keyword detection is opt-in through GIFT_CARD_KEYWORDS.
DEFAULT_GIFT_CARD_KEYWORDS: tuple[str, ...] = ()


def redact_gift_card_codes(text: str) -> str:
    """Replace every gift card code in ``text`` with the placeholder.

    Substitution is repeated until no match remains, so the result never
    contains a code and redacting twice is a no-op.

    Returns:
        Redacted text, or "" for empty/non-string input
    """
    if not text or not isinstance(text, str):
        return ""

    redacted = text
    while GIFT_CARD_CODE_PATTERN.search(redacted):
        redacted = GIFT_CARD_CODE_PATTERN.sub(REDACTION_PLACEHOLDER, redacted)
    return redacted


def has_gift_card(
    text: str, keywords: Iterable[str] = DEFAULT_GIFT_CARD_KEYWORDS
) -> bool:
    """Return True if the text looks like it carries a gift card.

    Matches the code format, or any keyword as a case-insensitive substring.
    """
    if not text or not isinstance(text, str):
        return False

    if GIFT_CARD_CODE_PATTERN.search(text):
        return True

    lowered = text.lower()
    return any(
        keyword.strip().lower() in lowered
        for keyword in keywords
        if isinstance(keyword, str) and keyword.strip()
    )

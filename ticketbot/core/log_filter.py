"""Logging filter that keeps gift card codes out of log output."""

import logging
from typing import Any

from ticketbot.core.gift_cards import redact_gift_card_codes


class GiftCardRedactionFilter(logging.Filter):
    """Logging filter that redacts gift card codes from log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        """Redact the message and its arguments.

        Returns:
            True (always allow the record, but with redacted content)
        """
        if isinstance(record.msg, str) and record.msg:
            record.msg = redact_gift_card_codes(record.msg)

        if record.args:
            if isinstance(record.args, dict):
                record.args = {
                    k: self._redact_value(v) for k, v in record.args.items()
                }
            elif isinstance(record.args, tuple):
                record.args = tuple(self._redact_value(arg) for arg in record.args)

        return True

    @staticmethod
    def _redact_value(value: Any) -> Any:
        if not isinstance(value, str) or not value:
            return value
        return redact_gift_card_codes(value)


def install_redaction_filter(logger: logging.Logger | None = None) -> None:
    """Attach the filter to a logger and its handlers.

    Handler-level filters also cover records propagated from child loggers,
    which logger-level filters on the root do not see.
    """
    target = logger or logging.getLogger()
    redaction_filter = GiftCardRedactionFilter()
    target.addFilter(redaction_filter)
    for handler in target.handlers:
        handler.addFilter(redaction_filter)

"""Process entry point: configure logging, validate settings, run the bot."""

import logging
import sys

from prometheus_client import start_http_server

from ticketbot.channels.plugins.discord import TicketBotClient
from ticketbot.core.config import Settings, load_settings
from ticketbot.core.exceptions import ConfigurationError
from ticketbot.core.log_filter import install_redaction_filter

logger = logging.getLogger("ticketbot.main")


def setup_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    install_redaction_filter()


def start_metrics_exporter(settings: Settings) -> None:
    if settings.METRICS_PORT > 0:
        start_http_server(settings.METRICS_PORT)
        logger.info("Prometheus metrics exposed on port %d", settings.METRICS_PORT)


def main() -> None:
    setup_logging()

    try:
        settings = load_settings()
    except ConfigurationError as e:
        logger.error(e.detail)
        sys.exit(1)

    logging.getLogger().setLevel(
        getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
    )
    start_metrics_exporter(settings)

    client = TicketBotClient(settings=settings)
    logger.info("Starting ticket bot...")
    # log_handler=None keeps discord.py from replacing the logging setup
    client.run(settings.BOT_TOKEN, log_handler=None)


if __name__ == "__main__":
    main()

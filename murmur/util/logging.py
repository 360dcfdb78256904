"""Stdlib logging for libraries that do not emit through logfire."""

import logging
import sys

from murmur.config import Settings

# Libraries that log per request or per render at INFO and below
QUIET_LOGGERS = ("httpx", "httpcore", "MARKDOWN", "bleach", "asyncio")


def setup_logging(settings: Settings) -> None:
    """Configure the root handler and quiet chatty libraries.

    SQL statements are only logged in debug mode outside production.

    Args:
        settings: Application settings
    """
    level = logging.DEBUG if settings.debug else logging.INFO

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)-7s [%(name)s] %(message)s",
        stream=sys.stdout,
        force=True,
    )

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    sql_level = (
        logging.INFO
        if settings.debug and settings.environment != "production"
        else logging.WARNING
    )
    logging.getLogger("sqlalchemy.engine").setLevel(sql_level)
    logging.getLogger("murmur").setLevel(level)

    logging.getLogger(__name__).info(
        "Logging configured for %s at %s",
        settings.environment,
        logging.getLevelName(level),
    )

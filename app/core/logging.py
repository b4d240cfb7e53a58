"""Logging configuration."""

import logging

from app.core.config import settings


def configure_logging(level: str | None = None) -> None:
    """Configure root logging once for the API, bot and CLI entry points."""
    logging.basicConfig(
        level=(level or settings.LOG_LEVEL).upper(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)

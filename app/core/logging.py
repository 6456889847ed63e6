from __future__ import annotations

import logging

from app.core.config import settings

# Libraries that log every outbound request at INFO.
_CHATTY_LOGGERS = ("httpx", "httpcore", "openai", "google.auth.transport.requests")


# Centralized app logging configuration (format + level).
def configure_logging() -> None:
    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )
    for name in _CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

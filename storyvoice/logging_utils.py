"""Process-wide logging setup for the service and the DSP engine."""
from __future__ import annotations

import logging
import os
from typing import Optional

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
ROOT_LOGGER = "storyvoice"

_CONFIGURED = False


def setup_logging(level: Optional[str] = None) -> None:
    """Configure root logging once.

    Args:
        level: Optional log level name (e.g., "INFO", "DEBUG"). If omitted,
               reads LOG_LEVEL env or defaults to INFO.
    """
    global _CONFIGURED
    if _CONFIGURED:
        return

    log_level_name = (level or os.getenv("LOG_LEVEL") or "INFO").upper()
    log_level = getattr(logging, log_level_name, logging.INFO)
    logging.basicConfig(level=log_level, format=LOG_FORMAT)
    logging.getLogger(ROOT_LOGGER).setLevel(log_level)

    _CONFIGURED = True


def get_logger(name: str) -> logging.Logger:
    """Return a logger under the ``storyvoice`` namespace.

    ``get_logger("service")`` and ``get_logger("storyvoice.service")`` name
    the same logger, so handlers and levels set on ``storyvoice`` apply.
    """
    if name != ROOT_LOGGER and not name.startswith(ROOT_LOGGER + "."):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)

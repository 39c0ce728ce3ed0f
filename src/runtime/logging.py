"""Logging initialization."""

from __future__ import annotations

import logging

from src.config.logging import LOG_LEVEL, LOG_FORMAT, SHOW_ACCESS_LOGS


def configure_logging() -> None:
    # Access lines and per-frame client logs are noisy. Keep them tame unless explicitly enabled.
    if not SHOW_ACCESS_LOGS:
        logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
        logging.getLogger("websockets").setLevel(logging.WARNING)
    logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT)


__all__ = ["configure_logging"]

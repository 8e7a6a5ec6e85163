"""Logging setup shared by the CLI and the HTTP app."""

from __future__ import annotations

import logging
from typing import Optional

from . import config

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_configured = False


def configure_logging(level: Optional[str] = None) -> None:
    """Configure the package logger once. Later calls only adjust the level."""
    global _configured
    resolved = getattr(logging, (level or config.LOG_LEVEL).upper(), logging.INFO)
    package_logger = logging.getLogger("inventory_planner")
    package_logger.setLevel(resolved)
    if _configured:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    package_logger.addHandler(handler)
    _configured = True

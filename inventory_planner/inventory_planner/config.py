from __future__ import annotations

import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("config_invalid_int name=%s value=%r default=%s", name, raw, default)
        return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name, "").strip().lower()
    if not raw:
        return default
    return raw in ("1", "true", "yes", "on")


# ==================== CONFIG ====================
LOOKBACK_DAYS = _env_int("PLANNER_LOOKBACK_DAYS", 30)
FORECAST_PERIOD_DAYS = _env_int("PLANNER_FORECAST_PERIOD_DAYS", 30)
# Used for expected delivery when the supplier lead time is unknown
UNKNOWN_LEAD_TIME_HORIZON_DAYS = _env_int("PLANNER_UNKNOWN_LEAD_TIME_HORIZON_DAYS", 3650)
SUPPRESS_OPEN_PO = _env_bool("PLANNER_SUPPRESS_OPEN_PO", True)
PROJECTION_DAYS = _env_int("PLANNER_PROJECTION_DAYS", 7)
LOW_STOCK_THRESHOLD = _env_int("PLANNER_LOW_STOCK_THRESHOLD", 10)
MAX_WORKERS = _env_int("PLANNER_MAX_WORKERS", 8)
LOG_LEVEL = os.getenv("PLANNER_LOG_LEVEL", "INFO").strip().upper() or "INFO"
OUTPUT_DIR = Path(os.getenv("PLANNER_OUTPUT_DIR", "").strip() or Path.cwd() / "output")

# bf6stats/config.py
"""
Runtime settings.

Defaults live here as module constants; each can be overridden through an
environment variable so deployments don't need code changes.
"""

import os
from typing import Dict


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name, "").strip().lower()
    if not raw:
        return default
    return raw in ("1", "true", "yes", "on")


API_BASE = os.getenv("BF6STATS_API_BASE", "https://api.tracker.gg/api/v2/bf6/standard").rstrip("/")

# Enables the richer match payload: multiple delta snapshots plus
# displayName/category fields on every stat.
UPDATE_HASH = os.getenv("BF6STATS_UPDATE_HASH", "4B52B92031F7E041534F8A85C814734F")

DEFAULT_PLAYER_ID = os.getenv("BF6STATS_DEFAULT_PLAYER_ID", "1009202439087")

SITE_ORIGIN = "https://tracker.gg"

NAVIGATION_TIMEOUT_MS = _env_int("BF6STATS_NAV_TIMEOUT_MS", 30000)
HEADLESS = _env_bool("BF6STATS_HEADLESS", True)
CHROMIUM_EXECUTABLE_PATH = os.getenv("BF6STATS_CHROMIUM_PATH", "").strip() or None

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/131.0.0.0 Safari/537.36"
)
VIEWPORT: Dict[str, int] = {"width": 1920, "height": 1080}
LOCALE = "en-US"
TIMEZONE_ID = "America/New_York"

# bf6stats/scraper/session.py
"""
Browser process management for Playwright-based retrieval.

Builds the launch and context options that make the automated Chromium look
like an ordinary desktop browser, and owns start/stop of the process.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from playwright.async_api import Browser, Playwright, async_playwright

from bf6stats import config

logger = logging.getLogger(__name__)

# Flags that hide the usual automation fingerprints
STEALTH_ARGS: List[str] = [
    "--disable-blink-features=AutomationControlled",
    "--disable-dev-shm-usage",
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-gpu",
]


def launch_options(
    headless: Optional[bool] = None,
    executable_path: Optional[str] = None,
) -> Dict[str, Any]:
    """Keyword arguments for ``chromium.launch``."""
    options: Dict[str, Any] = {
        "headless": config.HEADLESS if headless is None else headless,
        "args": list(STEALTH_ARGS),
    }
    path = executable_path or config.CHROMIUM_EXECUTABLE_PATH
    if path:
        options["executable_path"] = path
    return options


def context_options() -> Dict[str, Any]:
    """Keyword arguments for ``browser.new_context``, fresh for every request."""
    return {
        "user_agent": config.USER_AGENT,
        "viewport": dict(config.VIEWPORT),
        "locale": config.LOCALE,
        "timezone_id": config.TIMEZONE_ID,
    }


async def launch_browser(
    headless: Optional[bool] = None,
    executable_path: Optional[str] = None,
) -> Tuple[Playwright, Browser]:
    """
    Start the Playwright driver and a Chromium process.

    Returns:
        (playwright, browser) tuple; both must be released with ``close_browser``

    Raises:
        Exception: Whatever Playwright raises when the driver or browser
            cannot start; the caller wraps it.
    """
    playwright = await async_playwright().start()
    try:
        browser = await playwright.chromium.launch(**launch_options(headless, executable_path))
    except Exception:
        await playwright.stop()
        raise
    logger.info("Chromium launched")
    return playwright, browser


async def close_browser(playwright: Optional[Any], browser: Optional[Any]) -> None:
    """Close browser and stop the driver; errors are logged, not raised."""
    if browser is not None:
        try:
            await browser.close()
        except Exception as exc:
            logger.warning("Browser close failed: %s", exc)
    if playwright is not None:
        try:
            await playwright.stop()
        except Exception as exc:
            logger.warning("Playwright stop failed: %s", exc)

# bf6stats/scraper/__init__.py
"""
Browser-backed retrieval for tracker.gg.

Requests go through a shared Playwright Chromium so the upstream bot
mitigation sees a real browser's network stack and fingerprint.
"""

from .core import (
    BrowserFetcher,
    BrowserLaunchError,
    BrowserResponse,
    BrowserState,
    NavigationTimeoutError,
    NoResponseError,
    ResponseParseError,
    RetrievalError,
    ScraperBlockedError,
    UpstreamStatusError,
)
from .session import close_browser, context_options, launch_browser, launch_options
from .validation import is_challenge_page, sanitize_headers

__all__ = [
    'BrowserFetcher',
    'BrowserLaunchError',
    'BrowserResponse',
    'BrowserState',
    'NavigationTimeoutError',
    'NoResponseError',
    'ResponseParseError',
    'RetrievalError',
    'ScraperBlockedError',
    'UpstreamStatusError',
    'close_browser',
    'context_options',
    'launch_browser',
    'launch_options',
    'is_challenge_page',
    'sanitize_headers',
]

from __future__ import annotations

import asyncio
import enum
import json
import logging
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional, Tuple

from playwright.async_api import TimeoutError as PlaywrightTimeout

from bf6stats import config
from .session import close_browser, context_options, launch_browser
from .validation import sanitize_headers

logger = logging.getLogger(__name__)

Launcher = Callable[[], Awaitable[Tuple[Any, Any]]]


class RetrievalError(Exception):
    """Base class for failures while retrieving an upstream resource."""


class BrowserLaunchError(RetrievalError):
    """Raised when the shared browser process cannot be started."""


class NavigationTimeoutError(RetrievalError):
    """Raised when a page navigation exceeds its timeout."""


class NoResponseError(RetrievalError):
    """Raised when navigation finishes without a main-resource response."""


class UpstreamStatusError(RetrievalError):
    """Raised when the upstream API answers with a non-2xx status."""

    def __init__(self, status: int, status_text: str, url: str = ""):
        self.status = status
        self.status_text = status_text
        self.url = url
        super().__init__(f"HTTP {status} {status_text} for {url}".strip())


class ScraperBlockedError(RetrievalError):
    """Raised when bot mitigation serves a challenge page instead of data."""


class ResponseParseError(Exception):
    """Raised when a response body is not valid JSON."""


class BrowserState(enum.Enum):
    UNINITIALIZED = "uninitialized"
    LAUNCHING = "launching"
    READY = "ready"
    FAILED = "failed"
    CLOSED = "closed"


class BrowserResponse:
    """Response captured from a browser navigation, shaped like an HTTP response."""

    def __init__(self, url: str, status: int, status_text: str, headers: Mapping[str, str], body: bytes):
        self.url = url
        self.status = status
        self.status_text = status_text or "OK"
        self.headers: Dict[str, str] = sanitize_headers(headers, lowercase=True)
        self._body = body or b""
        self._text: Optional[str] = None
        self._json: Any = None
        self._json_loaded = False

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    @property
    def content_type(self) -> str:
        return self.headers.get("content-type", "application/json")

    def header(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self.headers.get(name.lower(), default)

    def bytes(self) -> bytes:
        return self._body

    def text(self) -> str:
        if self._text is None:
            self._text = self._body.decode("utf-8", errors="replace")
        return self._text

    def json(self) -> Any:
        if not self._json_loaded:
            try:
                self._json = json.loads(self.text())
            except json.JSONDecodeError as exc:
                raise ResponseParseError(f"Failed to parse JSON from {self.url}: {exc}") from exc
            self._json_loaded = True
        return self._json

    def __repr__(self) -> str:
        return f"<BrowserResponse {self.status} {self.status_text} {self.url}>"


class BrowserFetcher:
    """
    HTTP GET through a real Chromium so bot mitigation sees a browser.

    One browser process is shared by every call and started lazily; each call
    gets its own browser context and page, closed again before returning.
    """

    def __init__(
        self,
        launcher: Optional[Launcher] = None,
        timeout_ms: Optional[int] = None,
        wait_until: str = "networkidle",
    ):
        self._launcher = launcher or launch_browser
        self.timeout_ms = config.NAVIGATION_TIMEOUT_MS if timeout_ms is None else timeout_ms
        self.wait_until = wait_until
        self.state = BrowserState.UNINITIALIZED
        self._playwright: Any = None
        self._browser: Any = None
        self._launch_task: Optional[asyncio.Future] = None
        self._launch_error: Optional[BrowserLaunchError] = None

    # --- Browser lifecycle ---

    async def get_browser(self) -> Any:
        """
        Return the shared browser, launching it on first use.

        Concurrent callers during a launch all await the same attempt. A failed
        launch is reported to every one of them and to every later caller; only
        ``close()`` allows another attempt.
        """
        if self.state is BrowserState.READY and self._browser is not None:
            return self._browser
        if self.state is BrowserState.FAILED and self._launch_error is not None:
            raise self._launch_error

        if self._launch_task is None:
            self.state = BrowserState.LAUNCHING
            self._launch_task = asyncio.ensure_future(self._launch())

        # Shielded so one cancelled waiter doesn't abort the launch for the rest
        return await asyncio.shield(self._launch_task)

    async def _launch(self) -> Any:
        try:
            playwright, browser = await self._launcher()
        except Exception as exc:
            logger.error("Error launching browser: %s", exc)
            error = BrowserLaunchError(
                f"Failed to launch browser: {exc}\n"
                "Ensure Chromium is installed: python -m playwright install chromium"
            )
            self._launch_error = error
            self.state = BrowserState.FAILED
            self._launch_task = None
            raise error from exc

        self._playwright = playwright
        self._browser = browser
        self.state = BrowserState.READY
        self._launch_task = None
        return browser

    async def close(self) -> None:
        """Shut the shared browser down and clear any launch failure; a later fetch launches anew."""
        if self._launch_task is not None:
            try:
                await self._launch_task
            except BrowserLaunchError:
                pass
        await close_browser(self._playwright, self._browser)
        self._playwright = None
        self._browser = None
        self._launch_error = None
        self.state = BrowserState.CLOSED

    async def __aenter__(self) -> "BrowserFetcher":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    # --- Requests ---

    async def fetch(
        self,
        url: str,
        headers: Optional[Mapping[str, str]] = None,
        method: str = "GET",
        timeout_ms: Optional[int] = None,
    ) -> BrowserResponse:
        """
        Navigate to ``url`` in a fresh context and capture the main response.

        Args:
            url: Target URL
            headers: Extra request headers (User-Agent, Cookie, Referer, ...)
            method: Only GET is supported
            timeout_ms: Navigation timeout; defaults to the fetcher setting

        Returns:
            BrowserResponse with status, headers and the full body

        Raises:
            BrowserLaunchError: Browser could not be started
            NavigationTimeoutError: Navigation took longer than the timeout
            NoResponseError: Navigation produced no response object
        """
        if method.upper() != "GET":
            raise ValueError(f"Unsupported method '{method}': browser retrieval only supports GET")

        timeout = self.timeout_ms if timeout_ms is None else timeout_ms
        browser = await self.get_browser()
        context = await browser.new_context(**context_options())
        page = None

        try:
            page = await context.new_page()

            extra = sanitize_headers(headers)
            if extra:
                await page.set_extra_http_headers(extra)

            try:
                response = await page.goto(url, wait_until=self.wait_until, timeout=timeout)
            except PlaywrightTimeout as exc:
                raise NavigationTimeoutError(f"Navigation to {url} timed out after {timeout}ms") from exc

            if response is None:
                raise NoResponseError(f"No response received from {url}")

            body = await response.body()
            result = BrowserResponse(
                url=url,
                status=response.status,
                status_text=response.status_text,
                headers=response.headers,
                body=body,
            )
            logger.debug("GET %s -> %s (%d bytes)", url, result.status, len(body))
            return result
        finally:
            if page is not None:
                try:
                    await page.close()
                except Exception as exc:
                    logger.warning("Page close failed: %s", exc)
            try:
                await context.close()
            except Exception as exc:
                logger.warning("Context close failed: %s", exc)

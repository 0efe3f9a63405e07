# tests/helpers.py

import asyncio
import json
import os
from typing import Any, Dict, List, Optional

from playwright.async_api import TimeoutError as PlaywrightTimeout


FIXTURES = os.path.join(os.path.dirname(__file__), "fixtures")


def load_json(filename: str):
    with open(os.path.join(FIXTURES, filename), "r", encoding="utf-8") as f:
        return json.load(f)


def snapshot(stats: Dict[str, Any], metadata: Optional[Dict[str, Any]] = None,
             timestamp: str = "2025-11-01T00:00:00+00:00") -> Dict[str, Any]:
    """Build one match snapshot whose overview segment carries ``stats`` as plain numbers."""
    return {
        "metadata": {"timestamp": timestamp},
        "segments": [
            {
                "type": "overview",
                "metadata": metadata or {},
                "stats": {
                    key: value if isinstance(value, dict) else {"value": value, "displayValue": str(value)}
                    for key, value in stats.items()
                },
            }
        ],
    }


def wrap(matches: List[Dict[str, Any]]) -> Dict[str, Any]:
    return {"data": {"matches": matches}}


# --- Fake Playwright objects ---

class FakeResponse:
    def __init__(self, status=200, status_text="OK", headers=None, body=b"{}"):
        self.status = status
        self.status_text = status_text
        self.headers = headers if headers is not None else {"content-type": "application/json"}
        self._body = body

    async def body(self) -> bytes:
        return self._body


class FakePage:
    def __init__(self, context, responder):
        self.context = context
        self.responder = responder
        self.extra_headers: Dict[str, str] = {}
        self.closed = False
        self.goto_calls: List[Dict[str, Any]] = []

    async def set_extra_http_headers(self, headers):
        self.extra_headers = dict(headers)

    async def goto(self, url, wait_until=None, timeout=None):
        self.goto_calls.append({"url": url, "wait_until": wait_until, "timeout": timeout})
        result = self.responder(url, self)
        if asyncio.iscoroutine(result):
            result = await result
        if isinstance(result, Exception):
            raise result
        return result

    async def close(self):
        self.closed = True


class FakeContext:
    def __init__(self, browser, options):
        self.browser = browser
        self.options = options
        self.pages: List[FakePage] = []
        self.closed = False

    async def new_page(self):
        page = FakePage(self, self.browser.responder)
        self.pages.append(page)
        return page

    async def close(self):
        self.closed = True


class FakeBrowser:
    def __init__(self, responder=None):
        self.responder = responder or (lambda url, page: FakeResponse())
        self.contexts: List[FakeContext] = []
        self.closed = False

    async def new_context(self, **options):
        context = FakeContext(self, options)
        self.contexts.append(context)
        return context

    async def close(self):
        self.closed = True


class FakePlaywright:
    def __init__(self):
        self.stopped = False

    async def stop(self):
        self.stopped = True


class FakeLauncher:
    """Stands in for ``launch_browser``; counts launches and can fail or stall."""

    def __init__(self, browser=None, error=None, delay=0.0):
        self.browser = browser or FakeBrowser()
        self.playwright = FakePlaywright()
        self.error = error
        self.delay = delay
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.playwright, self.browser


def timeout_error(message: str = "Timeout 30000ms exceeded.") -> PlaywrightTimeout:
    return PlaywrightTimeout(message)


class FakeFetcher:
    """Replaces BrowserFetcher in client tests: maps URL fragments to canned responses."""

    def __init__(self, routes=None):
        self.routes = routes or {}
        self.calls: List[Dict[str, Any]] = []
        self.closed = False

    async def fetch(self, url, headers=None, method="GET", timeout_ms=None):
        from bf6stats.scraper import BrowserResponse

        self.calls.append({"url": url, "headers": dict(headers or {})})
        for fragment, route in self.routes.items():
            if fragment in url:
                if isinstance(route, Exception):
                    raise route
                status, body, content_type = route
                if not isinstance(body, (bytes, str)):
                    body = json.dumps(body)
                if isinstance(body, str):
                    body = body.encode("utf-8")
                return BrowserResponse(url, status, "OK" if status < 400 else "Error",
                                       {"content-type": content_type}, body)
        return BrowserResponse(url, 404, "Not Found", {"content-type": "application/json"}, b"{}")

    async def close(self):
        self.closed = True

# bf6stats/scraper/validation.py
"""
Validation logic that keeps junk out of retrieval results.

Catches bot-mitigation challenge pages served in place of JSON, and header
names/values that cannot be carried in a standard header mapping.
"""

import logging
import re
from typing import Dict, Iterable, Mapping, Optional

logger = logging.getLogger(__name__)

# Title/body markers of interstitial challenge pages, including localized variants
CHALLENGE_MARKERS = (
    "just a moment",
    "attention required",
    "checking your browser",
    "verify you are human",
    "cf-challenge",
    "challenge-platform",
    "einen moment",
    "un instant",
    "un momento",
)

_TOKEN_RE = re.compile(r"^[!#$%&'*+\-.^_`|~0-9A-Za-z]+$")
_BAD_VALUE_RE = re.compile(r"[\x00-\x08\x0a-\x1f\x7f]")


def is_challenge_page(body: Optional[str], content_type: str = "") -> bool:
    """
    Detect a bot-mitigation interstitial instead of an API payload.

    Args:
        body: Response body text
        content_type: Value of the Content-Type header, if known

    Returns:
        True if the body looks like an HTML challenge page

    Examples:
        >>> is_challenge_page("<title>Just a moment...</title>", "text/html")
        True
        >>> is_challenge_page('{"data": {}}', "application/json")
        False
    """
    if not body:
        return False
    if "json" in (content_type or "").lower():
        return False
    head = body[:4096].lower()
    if "<html" not in head and "<!doctype" not in head and "<title" not in head:
        return False
    return any(marker in head for marker in CHALLENGE_MARKERS)


def is_valid_header(name: object, value: object) -> bool:
    """A header is representable if its name is a token and its value is printable latin-1."""
    if not isinstance(name, str) or not isinstance(value, str):
        return False
    if not name or not _TOKEN_RE.match(name):
        return False
    if not value or _BAD_VALUE_RE.search(value):
        return False
    try:
        value.encode("latin-1")
    except UnicodeEncodeError:
        return False
    return True


def sanitize_headers(headers: Optional[Mapping[str, str]], lowercase: bool = False) -> Dict[str, str]:
    """
    Drop every header that can't be represented, keeping the rest.

    Never raises; skipped headers are logged at WARNING.
    """
    clean: Dict[str, str] = {}
    if not headers:
        return clean

    items: Iterable = headers.items()
    for name, value in items:
        if not is_valid_header(name, value):
            preview = str(value)[:50] if value is not None else None
            logger.warning("Skipping invalid header: %s = %s...", name, preview)
            continue
        clean[name.lower() if lowercase else name] = value
    return clean

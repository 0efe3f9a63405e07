# bf6stats/platforms.py
"""
Platform slug to tracker.gg path segment mapping.

The same platform is spelled differently depending on the endpoint family,
so every URL builder goes through ``platform_segment``.
"""

from typing import Dict, Tuple

MATCHES = "matches"
PROFILE = "profile"
STAT_HISTORY = "stat_history"

ENDPOINT_FAMILIES: Tuple[str, ...] = (MATCHES, PROFILE, STAT_HISTORY)

PLATFORM_SEGMENTS: Dict[str, Dict[str, str]] = {
    "origin": {MATCHES: "origin", PROFILE: "ign", STAT_HISTORY: "origin"},
    "psn": {MATCHES: "psn", PROFILE: "psn", STAT_HISTORY: "psn"},
    "xbl": {MATCHES: "xbox", PROFILE: "xbox", STAT_HISTORY: "xbox"},
    "steam": {MATCHES: "steam", PROFILE: "steam", STAT_HISTORY: "steam"},
}

DEFAULT_PLATFORM = "origin"


class UnknownPlatformError(ValueError):
    """Raised for a platform slug or endpoint family outside the table."""


def supported_platforms() -> Tuple[str, ...]:
    return tuple(PLATFORM_SEGMENTS)


def normalize_platform(platform: str) -> str:
    """Lower-case and validate a platform slug; empty means the default."""
    slug = (platform or DEFAULT_PLATFORM).strip().lower()
    if slug not in PLATFORM_SEGMENTS:
        raise UnknownPlatformError(
            f"Unknown platform '{platform}'. Expected one of: {', '.join(PLATFORM_SEGMENTS)}"
        )
    return slug


def platform_segment(platform: str, family: str) -> str:
    """
    Resolve the URL path segment for a platform within an endpoint family.

    Examples:
        >>> platform_segment("xbl", MATCHES)
        'xbox'
        >>> platform_segment("origin", PROFILE)
        'ign'
    """
    if family not in ENDPOINT_FAMILIES:
        raise UnknownPlatformError(f"Unknown endpoint family '{family}'")
    return PLATFORM_SEGMENTS[normalize_platform(platform)][family]

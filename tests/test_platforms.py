# tests/test_platforms.py

import pytest

from bf6stats.platforms import (
    MATCHES,
    PROFILE,
    STAT_HISTORY,
    UnknownPlatformError,
    normalize_platform,
    platform_segment,
    supported_platforms,
)


@pytest.mark.parametrize("platform, family, expected", [
    ("origin", MATCHES, "origin"),
    ("origin", PROFILE, "ign"),
    ("origin", STAT_HISTORY, "origin"),
    ("xbl", MATCHES, "xbox"),
    ("xbl", PROFILE, "xbox"),
    ("xbl", STAT_HISTORY, "xbox"),
    ("psn", PROFILE, "psn"),
    ("steam", MATCHES, "steam"),
])
def test_platform_segment(platform, family, expected):
    assert platform_segment(platform, family) == expected


def test_supported_platforms():
    assert set(supported_platforms()) == {"origin", "psn", "xbl", "steam"}


def test_normalize_platform_case_and_default():
    assert normalize_platform(" XBL ") == "xbl"
    assert normalize_platform("") == "origin"


def test_unknown_platform_rejected():
    with pytest.raises(UnknownPlatformError):
        normalize_platform("epic")


def test_unknown_family_rejected():
    with pytest.raises(UnknownPlatformError):
        platform_segment("psn", "leaderboards")

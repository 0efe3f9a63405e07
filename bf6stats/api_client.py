from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import quote, urlencode

from bf6stats import config
from bf6stats.platforms import MATCHES, PROFILE, STAT_HISTORY, normalize_platform, platform_segment
from bf6stats.scraper import (
    BrowserFetcher,
    ResponseParseError,
    ScraperBlockedError,
    UpstreamStatusError,
    is_challenge_page,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HistoryPoint:
    date: Optional[datetime]
    value: float
    display_value: str


@dataclass(frozen=True)
class StatHistory:
    """Daily series for a single stat, oldest first."""

    key: str
    name: str
    points: Tuple[HistoryPoint, ...] = field(default_factory=tuple)

    @property
    def latest(self) -> Optional[float]:
        return self.points[-1].value if self.points else None


class TrackerAPIClient:
    BASE = config.API_BASE
    HEADERS = {
        "Accept": "application/json, text/plain, */*",
        "Accept-Language": "en-US,en;q=0.9",
        "User-Agent": config.USER_AGENT,
        "Referer": f"{config.SITE_ORIGIN}/",
        "Origin": config.SITE_ORIGIN,
        "Sec-Fetch-Dest": "empty",
        "Sec-Fetch-Mode": "cors",
        "Sec-Fetch-Site": "same-site",
        "Sec-Ch-Ua": '"Google Chrome";v="131", "Chromium";v="131", "Not_A Brand";v="24"',
        "Sec-Ch-Ua-Mobile": "?0",
        "Sec-Ch-Ua-Platform": '"Windows"',
        "DNT": "1",
        "Cache-Control": "no-cache",
        "Pragma": "no-cache",
    }

    STAT_HISTORY_KEYS = ("kdRatio", "wlPercentage")

    def __init__(
        self,
        fetcher: Optional[BrowserFetcher] = None,
        update_hash: str = config.UPDATE_HASH,
        default_player_id: str = config.DEFAULT_PLAYER_ID,
    ):
        self.fetcher = fetcher or BrowserFetcher()
        self.update_hash = update_hash
        self.default_player_id = default_player_id

    # --- Headers and URLs ---

    def build_headers(
        self,
        accept: Optional[str] = None,
        accept_language: Optional[str] = None,
        user_agent: Optional[str] = None,
        cookie: Optional[str] = None,
        cf_bm_token: Optional[str] = None,
    ) -> Dict[str, str]:
        """Browser-like request headers, preferring the caller's own values."""
        headers = dict(self.HEADERS)
        if accept:
            headers["Accept"] = accept
        if accept_language:
            headers["Accept-Language"] = accept_language
        if user_agent:
            headers["User-Agent"] = user_agent
        if cookie:
            # The bot-mitigation clearance token only helps alongside the rest of the jar
            headers["Cookie"] = f"{cookie}; _cf_bm_token={cf_bm_token}" if cf_bm_token else cookie
        return headers

    def _player(self, player_id: Optional[str]) -> str:
        return quote(str(player_id or self.default_player_id), safe="")

    def matches_url(self, player_id: Optional[str] = None, platform: str = "origin") -> str:
        segment = platform_segment(platform, MATCHES)
        query = urlencode({"updateHash": self.update_hash})
        return f"{self.BASE}/matches/{segment}/{self._player(player_id)}?{query}"

    def profile_url(self, player_id: Optional[str] = None, platform: str = "origin") -> str:
        segment = platform_segment(platform, PROFILE)
        return f"{self.BASE}/profile/{segment}/{self._player(player_id)}"

    def stat_history_url(self, stat_key: str, player_id: Optional[str] = None, platform: str = "origin") -> str:
        if stat_key not in self.STAT_HISTORY_KEYS:
            raise ValueError(f"Unsupported stat history '{stat_key}'")
        segment = platform_segment(platform, STAT_HISTORY)
        return f"{self.BASE}/profile/{segment}/{self._player(player_id)}/stats/overview/{stat_key}"

    # --- Transport ---

    async def _get_json(self, url: str, headers: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
        response = await self.fetcher.fetch(url, headers=headers or self.HEADERS)

        if not response.ok:
            if is_challenge_page(response.text(), response.content_type):
                raise ScraperBlockedError(f"Bot mitigation blocked {url} (HTTP {response.status})")
            raise UpstreamStatusError(response.status, response.status_text, url)

        try:
            return response.json()
        except ResponseParseError:
            if is_challenge_page(response.text(), response.content_type):
                raise ScraperBlockedError(f"Bot mitigation served a challenge page for {url}")
            raise

    # --- Parsing ---

    @staticmethod
    def _safe_float(value: Any, default: float = 0.0) -> float:
        if value is None:
            return default
        try:
            return float(value)
        except (TypeError, ValueError):
            return default

    @staticmethod
    def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
        if not value:
            return None
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None

    def parse_stat_history(self, payload: Dict[str, Any], stat_key: str = "") -> StatHistory:
        data = payload.get("data", {}) if isinstance(payload, dict) else {}
        history = data.get("history", {}) if isinstance(data, dict) else {}
        meta = history.get("metadata", {}) if isinstance(history, dict) else {}
        rows = history.get("data", []) if isinstance(history, dict) else []

        points: List[HistoryPoint] = []
        for row in rows or []:
            if not isinstance(row, (list, tuple)) or len(row) < 2 or not isinstance(row[1], dict):
                continue
            date_str, point = row[0], row[1]
            points.append(
                HistoryPoint(
                    date=self._parse_timestamp(date_str),
                    value=self._safe_float(point.get("value")),
                    display_value=str(point.get("displayValue") or ""),
                )
            )

        return StatHistory(
            key=meta.get("key") or stat_key,
            name=meta.get("name") or stat_key,
            points=tuple(points),
        )

    @staticmethod
    def parse_profile(payload: Dict[str, Any]) -> Dict[str, Any]:
        data = payload.get("data") if isinstance(payload, dict) else None
        if not isinstance(data, dict):
            data = {}
        platform_info = data.get("platformInfo")
        if not isinstance(platform_info, dict):
            platform_info = {}
        user_info = data.get("userInfo")
        if not isinstance(user_info, dict):
            user_info = {}
        return {
            "username": platform_info.get("platformUserHandle") or "Player",
            "avatar_url": platform_info.get("avatarUrl"),
            "user_id": user_info.get("userId"),
            "is_premium": bool(user_info.get("isPremium")),
        }

    # --- Endpoints ---

    async def get_matches(
        self,
        player_id: Optional[str] = None,
        platform: str = "origin",
        headers: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        """Raw match-history payload (delta snapshots) for a player."""
        platform = normalize_platform(platform)
        url = self.matches_url(player_id, platform)
        logger.info("Fetching matches for %s on %s", player_id or self.default_player_id, platform)
        return await self._get_json(url, headers)

    async def get_profile(
        self,
        player_id: Optional[str] = None,
        platform: str = "origin",
        headers: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        payload = await self._get_json(self.profile_url(player_id, platform), headers)
        return self.parse_profile(payload)

    async def get_stat_history(
        self,
        stat_key: str,
        player_id: Optional[str] = None,
        platform: str = "origin",
        headers: Optional[Dict[str, str]] = None,
    ) -> StatHistory:
        payload = await self._get_json(self.stat_history_url(stat_key, player_id, platform), headers)
        return self.parse_stat_history(payload, stat_key)

    async def get_kd_history(self, player_id: Optional[str] = None, platform: str = "origin", headers=None) -> StatHistory:
        return await self.get_stat_history("kdRatio", player_id, platform, headers)

    async def get_wl_history(self, player_id: Optional[str] = None, platform: str = "origin", headers=None) -> StatHistory:
        return await self.get_stat_history("wlPercentage", player_id, platform, headers)

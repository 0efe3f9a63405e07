from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from bf6stats.api_client import StatHistory, TrackerAPIClient
from bf6stats.platforms import normalize_platform
from bf6stats.reconciler import PlayerOverview, reconcile
from bf6stats.summary import BreakdownSummarizer, current_ratio

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Dashboard:
    overview: PlayerOverview
    profile: Dict[str, Any]
    kd_history: StatHistory
    wl_history: StatHistory
    summary: Dict[str, Any] = field(default_factory=dict)

    @property
    def current_kd(self) -> float:
        return current_ratio(self.kd_history, self.overview.totals.overall_kd)

    @property
    def current_win_rate(self) -> float:
        return current_ratio(self.wl_history, self.overview.totals.win_rate)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "profile": dict(self.profile),
            "overview": self.overview.to_dict(),
            "summary": self.summary,
            "current_kd": self.current_kd,
            "current_win_rate": self.current_win_rate,
        }


class StatsService:
    """Fetch-then-reconcile entry point used by the web app and the CLI."""

    def __init__(self, client: Optional[TrackerAPIClient] = None):
        self.client = client or TrackerAPIClient()
        self.summarizer = BreakdownSummarizer()

    async def get_player_overview(
        self,
        player_id: str,
        platform: str = "origin",
        headers: Optional[Dict[str, str]] = None,
    ) -> PlayerOverview:
        """
        Reconciled lifetime totals plus passthrough breakdowns for one player.

        Raises:
            UnknownPlatformError: Platform slug is not supported
            RetrievalError: Upstream could not be reached or refused the request
            ResponseParseError: Upstream body was not JSON
        """
        platform = normalize_platform(platform)
        payload = await self.client.get_matches(player_id, platform, headers=headers)
        overview = reconcile(payload)
        if not overview.has_data:
            logger.info("No match data for %s on %s", player_id, platform)
        return overview

    async def get_dashboard(
        self,
        player_id: str,
        platform: str = "origin",
        headers: Optional[Dict[str, str]] = None,
    ) -> Dashboard:
        """All four upstream calls concurrently; any failure fails the whole load."""
        platform = normalize_platform(platform)
        overview, profile, kd_history, wl_history = await asyncio.gather(
            self.get_player_overview(player_id, platform, headers),
            self.client.get_profile(player_id, platform, headers),
            self.client.get_kd_history(player_id, platform, headers),
            self.client.get_wl_history(player_id, platform, headers),
        )
        return Dashboard(
            overview=overview,
            profile=profile,
            kd_history=kd_history,
            wl_history=wl_history,
            summary=self.summarizer.summarize(overview.breakdowns),
        )

    async def close(self) -> None:
        await self.client.fetcher.close()

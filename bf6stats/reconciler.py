# bf6stats/reconciler.py
"""
Lifetime totals from tracker.gg match-history delta snapshots.

Each snapshot's overview segment carries cumulative counters, but snapshots
arrive in no guaranteed order and counters can regress (resets, partial
payloads). Cumulative keys are therefore reduced with a per-key maximum over
the whole sequence. Point-in-time fields (rank, kdaRatio and other display
stats) are not cumulative and are read from the first snapshot, which
upstream returns as the most recent. Breakdown collections come from the
last snapshot instead, with the first as fallback.

Kills and deaths are maximised independently, so ``overall_kd`` may not match
any single snapshot. This mirrors the dashboard numbers players already see.
"""

import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence

logger = logging.getLogger(__name__)

CUMULATIVE_KEYS = ("matchesPlayed", "matchesWon", "matchesLost", "kills", "deaths", "timePlayed")

# Only meaningful as of the latest snapshot
POINT_IN_TIME_KEYS = (
    "kdaRatio",
    "assists",
    "score",
    "scorePerMinute",
    "damageDealt",
    "damagePerMinute",
    "headshotKills",
    "headshotPercentage",
    "revives",
    "multiKills",
)

BREAKDOWN_KEYS = ("gamemodes", "weapons", "vehicles", "gadgets", "kits", "levels")

Number = float


@dataclass(frozen=True)
class ReconciledTotals:
    total_matches: Number = 0
    total_wins: Number = 0
    total_losses: Number = 0
    total_kills: Number = 0
    total_deaths: Number = 0
    total_time_played: Number = 0

    @property
    def overall_kd(self) -> float:
        if self.total_deaths > 0:
            return self.total_kills / self.total_deaths
        return float(self.total_kills)

    @property
    def win_rate(self) -> float:
        if self.total_matches > 0:
            return self.total_wins / self.total_matches * 100
        return 0.0

    def to_dict(self) -> Dict[str, Any]:
        out = asdict(self)
        out["overall_kd"] = self.overall_kd
        out["win_rate"] = self.win_rate
        return out


@dataclass(frozen=True)
class RankInfo:
    player_rank: Number = 0
    image_url: Optional[str] = None


@dataclass(frozen=True)
class PlayerOverview:
    totals: ReconciledTotals
    rank: RankInfo
    point_in_time: Dict[str, str] = field(default_factory=dict)
    breakdowns: Dict[str, List[Dict[str, Any]]] = field(default_factory=dict)
    has_data: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "has_data": self.has_data,
            "totals": self.totals.to_dict(),
            "rank": asdict(self.rank),
            "point_in_time": dict(self.point_in_time),
            "breakdowns": {k: list(v) for k, v in self.breakdowns.items()},
        }


# --- Boundary normalisation ---

def normalize_matches(payload: Any) -> List[Dict[str, Any]]:
    """
    Return the snapshot list from either response variant.

    Accepts ``{"data": {"matches": [...]}}`` and ``{"matches": [...]}``.
    Anything else yields an empty list.
    """
    if not isinstance(payload, dict):
        return []

    data = payload.get("data")
    if isinstance(data, dict) and isinstance(data.get("matches"), list):
        matches = data["matches"]
    elif isinstance(payload.get("matches"), list):
        matches = payload["matches"]
    else:
        return []

    return [m for m in matches if isinstance(m, dict)]


def overview_segment(match: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if not isinstance(match, dict):
        return None
    for segment in match.get("segments") or []:
        if isinstance(segment, dict) and segment.get("type") == "overview":
            return segment
    return None


def _stats(segment: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    if not segment:
        return {}
    stats = segment.get("stats")
    return stats if isinstance(stats, dict) else {}


def stat_value(stats: Dict[str, Any], key: str) -> Optional[Number]:
    """Numeric ``value`` of a stat node, or None when absent or not a number."""
    node = stats.get(key)
    if not isinstance(node, dict):
        return None
    value = node.get("value")
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value


def display_value(stats: Dict[str, Any], key: str) -> str:
    """displayValue, then value as a string, then "0"."""
    node = stats.get(key)
    if not isinstance(node, dict):
        return "0"
    if node.get("displayValue") is not None:
        return str(node["displayValue"])
    if node.get("value") is not None:
        return str(node["value"])
    return "0"


# --- Reduction ---

def _max_scan(segments: Iterable[Dict[str, Any]], key: str) -> Number:
    best: Number = 0
    for segment in segments:
        value = stat_value(_stats(segment), key)
        if value is not None and value > best:
            best = value
    return best


def _resolve(key: str, segments: Sequence[Dict[str, Any]], first: Optional[Dict], last: Optional[Dict]) -> Number:
    best = _max_scan(segments, key)
    if best:
        return best

    for candidate in (first, last):
        value = stat_value(_stats(candidate), key)
        if value is not None:
            return value
    return 0


def reconcile_totals(matches: Sequence[Dict[str, Any]]) -> ReconciledTotals:
    """Reduce normalised snapshots to lifetime totals; never raises."""
    segments = [s for s in (overview_segment(m) for m in matches) if s is not None]
    if not segments:
        return ReconciledTotals()

    first = overview_segment(matches[0])
    last = overview_segment(matches[-1])
    resolved = {key: _resolve(key, segments, first, last) for key in CUMULATIVE_KEYS}

    return ReconciledTotals(
        total_matches=resolved["matchesPlayed"],
        total_wins=resolved["matchesWon"],
        total_losses=resolved["matchesLost"],
        total_kills=resolved["kills"],
        total_deaths=resolved["deaths"],
        total_time_played=resolved["timePlayed"],
    )


def _latest_segment(matches: Sequence[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if not matches:
        return None
    return overview_segment(matches[0]) or overview_segment(matches[-1])


def read_rank(matches: Sequence[Dict[str, Any]]) -> RankInfo:
    """Rank as of the most recent snapshot; the oldest is only a fallback."""
    if not matches:
        return RankInfo()

    for segment in (overview_segment(matches[0]), overview_segment(matches[-1])):
        node = _stats(segment).get("careerPlayerRank")
        if isinstance(node, dict) and node.get("value"):
            image_url = (node.get("metadata") or {}).get("imageUrl")
            return RankInfo(player_rank=node["value"], image_url=image_url)
    return RankInfo()


def read_point_in_time(matches: Sequence[Dict[str, Any]]) -> Dict[str, str]:
    stats = _stats(_latest_segment(matches))
    return {key: display_value(stats, key) for key in POINT_IN_TIME_KEYS}


def read_breakdowns(matches: Sequence[Dict[str, Any]]) -> Dict[str, List[Dict[str, Any]]]:
    """
    Per-entity metadata collections, passed through as received.

    Read from the last snapshot, or the first when the last has no overview.
    """
    segment = {}
    if matches:
        segment = overview_segment(matches[-1]) or overview_segment(matches[0]) or {}
    metadata = segment.get("metadata")
    if not isinstance(metadata, dict):
        metadata = {}
    return {key: list(metadata.get(key) or []) for key in BREAKDOWN_KEYS}


def reconcile(payload: Any) -> PlayerOverview:
    """
    Full overview for one match-history payload.

    Unrecognised or empty payloads give zero totals with ``has_data`` False.
    """
    matches = normalize_matches(payload)
    has_data = any(overview_segment(m) is not None for m in matches)
    if not has_data:
        logger.info("No overview snapshots in payload (%d matches)", len(matches))
        return PlayerOverview(
            totals=ReconciledTotals(),
            rank=RankInfo(),
            breakdowns={key: [] for key in BREAKDOWN_KEYS},
            has_data=False,
        )

    return PlayerOverview(
        totals=reconcile_totals(matches),
        rank=read_rank(matches),
        point_in_time=read_point_in_time(matches),
        breakdowns=read_breakdowns(matches),
        has_data=True,
    )

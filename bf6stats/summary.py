# bf6stats/summary.py

from typing import Any, Dict, List, Optional

from bf6stats.api_client import StatHistory


class BreakdownSummarizer:
    """Rank per-entity breakdowns (weapons, maps, vehicles, ...) for display."""

    # (breakdown key, sort stat, limit)
    TOP_LISTS = {
        'top_weapons': ('weapons', 'kills', 10),
        'top_maps': ('levels', 'timePlayed', 6),
        'top_vehicles': ('vehicles', 'timePlayed', 5),
        'top_gadgets': ('gadgets', 'uses', 8),
    }

    FAVORITES = {
        'most_played_gamemode': ('gamemodes', 'matchesPlayed'),
        'most_used_weapon': ('weapons', 'kills'),
        'most_used_kit': ('kits', 'timePlayed'),
    }

    @staticmethod
    def _stat(entry: Dict[str, Any], key: str) -> float:
        stats = entry.get('stats') if isinstance(entry, dict) else None
        if not isinstance(stats, dict):
            return 0.0
        value = stats.get(key)
        if isinstance(value, dict):
            value = value.get('value')
        try:
            return float(value or 0)
        except (TypeError, ValueError):
            return 0.0

    def top_entries(self, entries: List[Dict[str, Any]], stat: str,
                    limit: Optional[int] = None) -> List[Dict[str, Any]]:
        """Entries with a positive ``stat``, highest first."""
        ranked = [e for e in entries or [] if self._stat(e, stat) > 0]
        ranked.sort(key=lambda e: self._stat(e, stat), reverse=True)
        return ranked[:limit] if limit is not None else ranked

    def summarize(self, breakdowns: Dict[str, List[Dict[str, Any]]]) -> Dict[str, Any]:
        summary: Dict[str, Any] = {}
        for name, (key, stat, limit) in self.TOP_LISTS.items():
            summary[name] = self.top_entries(breakdowns.get(key, []), stat, limit)
        for name, (key, stat) in self.FAVORITES.items():
            top = self.top_entries(breakdowns.get(key, []), stat, 1)
            summary[name] = top[0] if top else None
        return summary


def current_ratio(history: Optional[StatHistory], fallback: float) -> float:
    """Latest history value, or ``fallback`` when the series is missing or zero."""
    if history is None:
        return fallback
    return history.latest or fallback

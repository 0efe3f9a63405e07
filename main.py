# main.py
"""
bf6stats command line.

Fetches a player's tracker.gg data through the shared browser and prints the
reconciled lifetime totals.
"""

import argparse
import asyncio
import functools
import json
import logging
import sys
from pathlib import Path

from bf6stats.api_client import TrackerAPIClient
from bf6stats.platforms import UnknownPlatformError, supported_platforms
from bf6stats.reconciler import PlayerOverview
from bf6stats.scraper import BrowserFetcher, ResponseParseError, RetrievalError, launch_browser
from bf6stats.service import StatsService


def _safe_print(message: str) -> None:
    """Print with Unicode fallback for restricted terminal encodings."""
    try:
        print(message)
    except UnicodeEncodeError:
        print(message.encode("ascii", errors="replace").decode("ascii"))


def _format_time(seconds: float) -> str:
    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


def _print_overview(player_id: str, overview: PlayerOverview) -> None:
    if not overview.has_data:
        _safe_print(f"No match data available for {player_id}")
        return

    totals = overview.totals
    _safe_print("-" * 48)
    _safe_print(f"  {player_id}  |  Rank #{overview.rank.player_rank}")
    _safe_print("-" * 48)
    _safe_print(f"  Matches     {totals.total_matches}  ({totals.total_wins} W / {totals.total_losses} L)")
    _safe_print(f"  Win rate    {totals.win_rate:.1f}%")
    _safe_print(f"  K/D         {totals.overall_kd:.2f}  ({totals.total_kills} K / {totals.total_deaths} D)")
    _safe_print(f"  KDA         {overview.point_in_time.get('kdaRatio', '0.00')}")
    _safe_print(f"  Time played {_format_time(totals.total_time_played)}")


def _save(path: str, data) -> None:
    out = Path(path)
    out.write_text(json.dumps(data, indent=2), encoding="utf-8")
    _safe_print(f"Saved -> {out}")


async def _run(args: argparse.Namespace) -> int:
    launcher = functools.partial(launch_browser, headless=args.headless)
    fetcher = BrowserFetcher(launcher=launcher, timeout_ms=args.timeout_ms)
    client = TrackerAPIClient(fetcher)
    service = StatsService(client)

    try:
        if args.command == "overview":
            overview = await service.get_player_overview(args.player, args.platform)
            _print_overview(args.player, overview)
            if args.save:
                _save(args.save, overview.to_dict())

        elif args.command == "matches":
            payload = await client.get_matches(args.player, args.platform)
            _safe_print(json.dumps(payload, indent=2)[:2000] if not args.save else "Match payload fetched")
            if args.save:
                _save(args.save, payload)

        elif args.command == "history":
            history = await client.get_stat_history(args.stat, args.player, args.platform)
            _safe_print(f"{history.name} ({len(history.points)} days)")
            for point in history.points:
                day = point.date.date().isoformat() if point.date else "?"
                _safe_print(f"  {day}  {point.display_value or point.value}")

        elif args.command == "dashboard":
            dashboard = await service.get_dashboard(args.player, args.platform)
            _safe_print(f"Player: {dashboard.profile.get('username')}")
            _print_overview(args.player, dashboard.overview)
            _safe_print(f"  Current K/D {dashboard.current_kd:.2f}  |  Current W/L {dashboard.current_win_rate:.1f}%")
            if args.save:
                _save(args.save, dashboard.to_dict())

    except UnknownPlatformError as e:
        _safe_print(f"ERROR: {e}")
        return 2
    except (RetrievalError, ResponseParseError) as e:
        _safe_print(f"ERROR: {e}")
        return 1
    finally:
        await fetcher.close()

    return 0


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Battlefield 6 lifetime stats from tracker.gg",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py overview 1009202439087
  python main.py overview 1009202439087 --platform psn --save overview.json
  python main.py history 1009202439087 --stat wlPercentage
        """,
    )
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--platform", default="origin", choices=supported_platforms(),
                        help="Platform (default: origin)")
    common.add_argument("--no-headless", dest="headless", action="store_false", default=True,
                        help="Show browser window while running")
    common.add_argument("--timeout-ms", type=int, default=None, help="Navigation timeout in milliseconds")
    common.add_argument("--save", metavar="PATH", help="Write the JSON result to PATH")
    common.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    sub = parser.add_subparsers(dest="command", required=True)
    for name, help_text in (
        ("overview", "Reconciled lifetime totals"),
        ("matches", "Raw match-history payload"),
        ("dashboard", "Overview, profile and ratio history together"),
    ):
        cmd = sub.add_parser(name, help=help_text, parents=[common])
        cmd.add_argument("player", help="tracker.gg player id")

    history = sub.add_parser("history", help="Daily history of one stat", parents=[common])
    history.add_argument("player", help="tracker.gg player id")
    history.add_argument("--stat", default="kdRatio", choices=TrackerAPIClient.STAT_HISTORY_KEYS)

    args = parser.parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    return asyncio.run(_run(args))


if __name__ == "__main__":
    sys.exit(main())

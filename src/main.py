#!/usr/bin/env python3
"""Hunt Radar - Product Hunt launches from the command line.

Examples:
    hunt-radar top --timeframe "last 7 days" --tz Europe/Berlin --order VOTES
    hunt-radar top --date 2024-09-01
    hunt-radar search "ai agents" --limit 5
    hunt-radar window "from:2024-08-01 to:2024-08-15" --tz UTC
    hunt-radar cache --clear
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

import yaml
from dotenv import load_dotenv

# Load .env file (for PRODUCTHUNT_API_TOKEN etc.)
load_dotenv()

src_dir = Path(__file__).parent
if str(src_dir) not in sys.path:
    sys.path.insert(0, str(src_dir))

from utils.cache import ResponseCache
from utils.logging_config import get_logger, setup_from_config

logger = get_logger("main")

from services.tools import build_tools
from timeframe.clock import DEFAULT_TIMEZONE, TIMEZONE_ERRORS, get_zone
from timeframe.query import SEARCH_LIMIT_BOUNDS, TOOL_LIMIT_BOUNDS, PostsOrder, render_table
from _version import __version__

DEFAULT_CONFIG_PATH = "config.yaml"


def load_config(config_path: str = DEFAULT_CONFIG_PATH) -> dict:
    """Load configuration from YAML file.

    Args:
        config_path: Path to the YAML config file.

    Returns:
        Configuration dictionary, or empty dict if file is invalid.
    """
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f)
            return config if isinstance(config, dict) else {}
    except FileNotFoundError:
        logger.warning("Config file not found: %s, using defaults", config_path)
        return {}
    except yaml.YAMLError as e:
        logger.warning("Invalid YAML in %s: %s, using defaults", config_path, e)
        return {}


def validate_config(config: dict) -> list[str]:
    """Validate config values and warn about anything unusable.

    Args:
        config: Loaded configuration dictionary.

    Returns:
        List of warning messages (empty if all OK).
    """
    warnings = []

    for section in ("timeframe", "limits", "producthunt", "algolia", "cache", "logging"):
        val = config.get(section)
        if val is not None and not isinstance(val, dict):
            warnings.append(f"Config '{section}' should be dict, got {type(val).__name__}")

    tz = (config.get("timeframe") or {}).get("default_timezone")
    if tz:
        try:
            get_zone(tz)
        except TIMEZONE_ERRORS:
            warnings.append(f"Unknown timeframe.default_timezone: '{tz}'")

    limits = config.get("limits") or {}
    for key in ("tool_max", "search_max"):
        value = limits.get(key)
        if value is not None and (not isinstance(value, int) or value < 1):
            warnings.append(f"limits.{key} should be a positive integer, got {value!r}")

    for msg in warnings:
        logger.warning("Config: %s", msg)

    return warnings


def _print_result(result: dict, as_json: bool):
    if as_json:
        print(json.dumps(result, indent=2, ensure_ascii=False))
        return
    if result.get("error"):
        print(f"Error: {result['error']}", file=sys.stderr)
        return
    window = result.get("window")
    if window:
        print(f"Window ({window['label']}): {window['postedAfter']} -> {window['postedBefore']}")
    if "table" in result:
        print(result["table"])


def prune_cache(config: dict, clear_all: bool = False) -> int:
    """Delete expired cache entries, or every entry with ``clear_all``."""
    cfg = config.get("cache") or {}
    cache = ResponseCache(cfg.get("dir", "data/cache"), cfg.get("ttl", 300))
    removed = cache.clear() if clear_all else cache.clear_expired()
    print(f"Removed {removed} cache file(s) from {cache.cache_dir}")
    return removed


async def async_main(args, config: dict = None) -> int:
    """Run one CLI command. Returns the process exit code."""
    if config is None:
        config = load_config(args.config)
    validate_config(config)
    if args.command == "cache":
        prune_cache(config, clear_all=args.clear)
        return 0

    tools = build_tools(config)
    tz = getattr(args, "tz", None) or config.get("timeframe", {}).get("default_timezone", DEFAULT_TIMEZONE)

    try:
        if args.command == "top":
            if args.date:
                result = await tools.call(
                    "get_top_products", {"date": args.date, "tz": tz, "limit": args.limit}
                )
            else:
                result = await tools.call(
                    "get_top_products_by_timeframe",
                    {"timeframe": args.timeframe, "tz": tz, "limit": args.limit, "order": args.order},
                )
        elif args.command == "search":
            hits = await tools.algolia.search(args.query, args.limit)
            result = {"query": args.query, "hits": hits, "table": render_table(hits)}
        else:
            result = await tools.call("resolve_timeframe", {"timeframe": args.timeframe, "tz": tz})
    finally:
        await tools.close()

    _print_result(result, args.json)
    return 1 if result.get("error") else 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description=f"Hunt Radar v{__version__} - Product Hunt launches by timeframe"
    )
    parser.add_argument(
        "--config",
        default=DEFAULT_CONFIG_PATH,
        help="Path to configuration file",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print raw JSON instead of a table",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level (default: logging.level from config, else WARNING)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    top = sub.add_parser("top", help="Top products for a day or timeframe")
    top.add_argument("--timeframe", default=None, help="e.g. today, this-week, 'last 7 days'")
    top.add_argument("--date", default=None, help="Single day, YYYY-MM-DD")
    top.add_argument("--tz", default=None, help=f"IANA timezone (default: {DEFAULT_TIMEZONE})")
    top.add_argument(
        "--limit",
        type=int,
        default=3,
        help=f"Number of posts ({TOOL_LIMIT_BOUNDS[0]}-{TOOL_LIMIT_BOUNDS[1]}, default: 3)",
    )
    top.add_argument(
        "--order",
        default=PostsOrder.RANKING.value,
        choices=[o.value for o in PostsOrder],
        help="Sort order (default: RANKING)",
    )

    search = sub.add_parser("search", help="Search posts via Algolia")
    search.add_argument("query", help="Search keywords")
    search.add_argument(
        "--limit",
        type=int,
        default=10,
        help=f"Number of hits ({SEARCH_LIMIT_BOUNDS[0]}-{SEARCH_LIMIT_BOUNDS[1]}, default: 10)",
    )

    window = sub.add_parser("window", help="Show the UTC window for a timeframe")
    window.add_argument("timeframe", nargs="?", default=None)
    window.add_argument("--tz", default=None, help=f"IANA timezone (default: {DEFAULT_TIMEZONE})")

    cache = sub.add_parser("cache", help="Prune the response cache")
    cache.add_argument(
        "--clear",
        action="store_true",
        help="Remove every entry, not only expired ones",
    )
    return parser


def main(argv: list[str] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    config = load_config(args.config)
    setup_from_config(config, level=args.log_level, default="WARNING")
    return asyncio.run(async_main(args, config))


if __name__ == "__main__":
    sys.exit(main())

#!/usr/bin/env python3
"""Command-line interface for the AWS IP ranges cache."""

import argparse
import logging
import sys
from pathlib import Path

import anyio

from .config import DEFAULT_CACHE_FILE, CacheConfig, setup_logging
from .errors import CacheUnavailableError, IPRangesError
from .filters import Filter
from .resolver import QueryResolver

logger = logging.getLogger(__name__)


def parse_filter_pairs(pairs: list[str]) -> dict[str, str]:
    """
    Turn ["KEY=VALUE", ...] into a mapping filter.

    Raises:
        ValueError: If a pair has no "=" or an empty key
    """
    result: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key.strip():
            raise ValueError(f"Invalid filter {pair!r}, expected KEY=VALUE")
        result[key.strip()] = value
    return result


async def _run(args: argparse.Namespace, resolver: QueryResolver, filter: Filter) -> int:
    if args.delete_cache:
        await resolver.delete_cache()
        logger.info("Cache cleared: %s", resolver.storage.path)
        return 0

    if args.check:
        up_to_date = await resolver.is_up_to_date()
        print("up-to-date" if up_to_date else "stale")
        return 0 if up_to_date else 1

    try:
        if args.cache_only:
            prefixes = await resolver.get_from_cache(filter)
        else:
            prefixes = await resolver.query(filter)
    except CacheUnavailableError as e:
        logger.error("Cache unavailable: %s", e)
        return 1
    except IPRangesError as e:
        logger.error("Could not load IP ranges: %s", e)
        return 1

    for prefix in prefixes:
        print(prefix)
    return 0


def main() -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Print AWS IP prefixes from a locally cached copy of ip-ranges.json",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "service",
        nargs="?",
        metavar="SERVICE",
        help="Only print prefixes for this service (e.g. S3, EC2; case-insensitive)",
    )

    parser.add_argument(
        "--filter",
        action="append",
        metavar="KEY=VALUE",
        help=(
            "Only print prefixes whose KEY field equals VALUE exactly. "
            "Repeat to require several fields (e.g. --filter service=S3 --filter region=us-east-1)."
        ),
    )

    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--cache-only",
        action="store_true",
        help="Read from the cache file only; never contact the network",
    )
    mode.add_argument(
        "--check",
        action="store_true",
        help="Report whether the cache file is up to date (exit 1 if stale)",
    )
    mode.add_argument(
        "--delete-cache",
        action="store_true",
        help="Delete the cache file (or empty it if it cannot be deleted)",
    )

    parser.add_argument(
        "--cache-file",
        type=Path,
        default=DEFAULT_CACHE_FILE,
        help=f"Cache file location (default: {DEFAULT_CACHE_FILE})",
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Log each step of cache resolution",
    )

    args = parser.parse_args()

    if args.service and args.filter:
        parser.error("SERVICE and --filter cannot be combined")

    # Configure logging
    setup_logging(args.debug)

    filter: Filter = args.service
    if args.filter:
        try:
            filter = parse_filter_pairs(args.filter)
        except ValueError as e:
            logger.error("%s", e)
            return 1

    config = CacheConfig(cache_file=args.cache_file, debug=args.debug)
    resolver = QueryResolver(config)

    return anyio.run(_run, args, resolver, filter)


if __name__ == "__main__":
    sys.exit(main())

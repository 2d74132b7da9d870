"""Command line interface.

Usage:
    filtercache resolve /img/a.jpg thumbnail
    filtercache resolve /img/a.jpg thumbnail --webp --resolver redis
    filtercache resolve /img/a.jpg thumbnail --runtime '{"rotate": {"angle": 90}}'
    filtercache bust /img/a.jpg thumbnail
    filtercache filters
"""

import argparse
import json
import sys

from filtercache.config import get_settings
from filtercache.dependencies import (
    build_filter_service,
    get_filter_configuration,
    get_redis_client,
)
from filtercache.exceptions import FilterCacheError
from filtercache.logging_setup import setup_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="filtercache", description="Filtered image cache")
    sub = parser.add_subparsers(dest="command", required=True)

    resolve = sub.add_parser("resolve", help="Print the URL of a filtered image")
    resolve.add_argument("path", help="Source image path")
    resolve.add_argument("filter", help="Filter set name")
    resolve.add_argument(
        "--resolver",
        default=None,
        help="Cache resolver (default: from settings)",
    )
    resolve.add_argument(
        "--webp",
        action="store_true",
        help="Print the WebP variant URL when WebP generation is enabled",
    )
    resolve.add_argument(
        "--runtime",
        default=None,
        help='Runtime filters as JSON, e.g. \'{"rotate": {"angle": 90}}\'',
    )

    bust = sub.add_parser("bust", help="Remove a filtered image from the cache")
    bust.add_argument("path", help="Source image path")
    bust.add_argument("filter", help="Filter set name")

    sub.add_parser("filters", help="List configured filter sets")

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    setup_logging(settings.log_level, settings.enable_structured_logging)

    if args.command == "filters":
        for name, filter_set in get_filter_configuration(settings).all().items():
            print(f"{name}: {json.dumps(filter_set)}")
        return 0

    redis_client = None
    try:
        redis_client = get_redis_client(settings)
        service = build_filter_service(settings, redis_client)

        if args.command == "bust":
            service.invalidate(args.path, args.filter)
            return 0

        if args.runtime:
            url = service.resolve_url_with_runtime_filters(
                args.path,
                args.filter,
                json.loads(args.runtime),
                resolver=args.resolver,
                webp=args.webp,
            )
        else:
            url = service.resolve_url(
                args.path,
                args.filter,
                resolver=args.resolver,
                webp=args.webp,
            )
    except json.JSONDecodeError as e:
        print(f"Invalid --runtime JSON: {e}", file=sys.stderr)
        return 2
    except FilterCacheError as e:
        print(f"{e.code}: {e.message}", file=sys.stderr)
        return 1
    finally:
        if redis_client is not None:
            redis_client.disconnect()

    print(url)
    return 0

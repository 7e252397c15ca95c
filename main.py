# main.py

"""Entry point for the product_cache command line."""

import argparse
import asyncio
import logging
import sys

from product_cache.config.logging_config import setup_logging
from product_cache.config.settings import Settings

logger = logging.getLogger("product_cache.main")


def _positive_int(value: str) -> int:
    """argparse type for strictly positive integers."""
    number = int(value)
    if number <= 0:
        msg = f"expected a positive integer, got {value}"
        raise argparse.ArgumentTypeError(msg)
    return number


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="product_cache",
        description="Offline-first product catalog browser.",
        epilog=f"API: {Settings.API_BASE_URL}",
    )
    parser.add_argument(
        "-p",
        "--pages",
        type=_positive_int,
        default=1,
        help="Number of pages to load (default: 1).",
    )
    parser.add_argument(
        "-l",
        "--limit",
        type=_positive_int,
        default=Settings.PAGE_SIZE,
        help=f"Page size (default: {Settings.PAGE_SIZE}).",
    )
    parser.add_argument(
        "-r",
        "--refresh",
        action="store_true",
        default=False,
        help="Start with a refresh, replacing the local cache.",
    )
    parser.add_argument(
        "-f",
        "--format",
        choices=["json", "table"],
        default="json",
        dest="output_format",
        help="Output format (default: json).",
    )
    parser.add_argument(
        "--product",
        type=_positive_int,
        default=None,
        dest="product_id",
        help="Show a single product by id.",
    )
    parser.add_argument(
        "--clear-cache",
        action="store_true",
        default=False,
        dest="clear_cache",
        help="Remove every cached product.",
    )
    parser.add_argument(
        "--status",
        action="store_true",
        default=False,
        help="Report connectivity and cache size.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Show INFO logs (cache writes, fallbacks) on stderr.",
    )
    return parser


def main() -> None:
    """Dispatch to the requested command."""
    args = _build_parser().parse_args()

    log_file = setup_logging("INFO" if args.verbose else None)
    logger.info("product_cache starting, log file: %s", log_file)

    from product_cache.cli import runner

    if args.clear_cache:
        exit_code = runner.run_clear_cache()
    elif args.status:
        exit_code = asyncio.run(runner.run_status())
    elif args.product_id is not None:
        exit_code = asyncio.run(
            runner.show_product(args.product_id, args.output_format)
        )
    else:
        exit_code = asyncio.run(
            runner.browse(
                pages=args.pages,
                limit=args.limit,
                refresh=args.refresh,
                output_format=args.output_format,
            )
        )
    sys.exit(exit_code)


if __name__ == "__main__":
    main()

# main.py

"""Entry point for the catalog_sync command-line tool."""

import argparse
import asyncio
import logging
import sys

from src.config.logging_config import setup_logging
from src.config.settings import Settings
from src.filters.product_sorter import configure_collation
from src.models.query_state import SORT_KEYS

logger = logging.getLogger("catalog_sync.main")


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="catalog_sync",
        description=(
            "Sync a product catalog from a document store and query it."
        ),
    )
    parser.add_argument(
        "query",
        nargs="?",
        default=None,
        help="Search text (matches name, brand or description).",
    )

    store = parser.add_argument_group("document store")
    store.add_argument(
        "--store-url",
        default=None,
        help="Base URL of the REST document store "
        "(default: $CATALOG_STORE_URL).",
    )
    store.add_argument(
        "--seed",
        default=None,
        help="Serve the catalog from a local JSON file instead.",
    )
    store.add_argument(
        "--collection",
        default=Settings.COLLECTION_NAME,
        help=f"Collection name (default: {Settings.COLLECTION_NAME}).",
    )

    filters = parser.add_argument_group("filters")
    filters.add_argument("-c", "--category", default=None)
    filters.add_argument(
        "-b",
        "--brand",
        default=None,
        help="Comma-separated brands to keep.",
    )
    filters.add_argument("--min-price", type=float, default=None)
    filters.add_argument("--max-price", type=float, default=None)
    filters.add_argument("--min-rating", type=float, default=None)
    filters.add_argument(
        "--in-stock",
        action="store_true",
        default=False,
        help="Only show products that are in stock.",
    )
    filters.add_argument(
        "--sort",
        choices=SORT_KEYS,
        default="name",
        dest="sort_by",
    )
    filters.add_argument(
        "--desc",
        action="store_true",
        default=False,
        help="Sort descending.",
    )

    output = parser.add_argument_group("output")
    output.add_argument(
        "-f",
        "--format",
        choices=["json", "table"],
        default="json",
        dest="output_format",
        help="Output format (default: json).",
    )
    output.add_argument(
        "--save",
        action="store_true",
        default=False,
        help="Also save results to results/ as JSON and CSV.",
    )
    output.add_argument(
        "--watch",
        type=float,
        default=0.0,
        metavar="SECONDS",
        help="Stay subscribed and re-print on every change.",
    )
    output.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Echo INFO logs to stderr.",
    )

    actions = parser.add_mutually_exclusive_group()
    actions.add_argument(
        "--import",
        default=None,
        dest="import_file",
        metavar="FILE",
        help="Create every product in FILE in the store.",
    )
    actions.add_argument(
        "--health",
        action="store_true",
        default=False,
        help="Run a connectivity health check on the store.",
    )
    return parser


def main() -> None:
    """Route to query, import or health-check mode."""
    from src.cli import runner

    parser = _build_parser()
    args = parser.parse_args()

    log_file = setup_logging(
        console_level=logging.INFO if args.verbose else logging.WARNING
    )
    logger.info("catalog_sync starting — log file: %s", log_file)

    configure_collation()
    store = runner.build_store(args.store_url, args.seed, args.collection)

    if args.import_file:
        coro = runner.run_import(store, args.import_file, args.collection)
    elif args.health:
        coro = runner.run_health_check(store, args.collection)
    else:
        query_state = runner.build_query_state(
            search=args.query,
            category=args.category,
            brand_csv=args.brand,
            min_price=args.min_price,
            max_price=args.max_price,
            min_rating=args.min_rating,
            in_stock=args.in_stock,
            sort_by=args.sort_by,
            descending=args.desc,
        )
        coro = runner.cli_query(
            store,
            query_state,
            args.collection,
            output_format=args.output_format,
            save=args.save,
            watch=args.watch,
        )

    try:
        exit_code = asyncio.run(coro)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        exit_code = 130
    except Exception:
        logger.critical("Fatal error during run", exc_info=True)
        raise
    sys.exit(exit_code)


if __name__ == "__main__":
    main()

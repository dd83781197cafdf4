import argparse
import json
from typing import List, Optional

from . import __version__
from .airtable import AirtableRecordStore
from .backfill import BackfillJob
from .config import BackfillConfig
from .directory import list_categories, list_products
from .domain import derive_key
from .env import load_env
from .errors import ConfigError, FatalListingError
from .imgbb import ImgbbImageHost
from .logger import get_logger
from .logos import ClearbitLogoLookup


def _load_config(args: argparse.Namespace) -> BackfillConfig:
    try:
        return BackfillConfig.from_env(view=getattr(args, "view", None))
    except ConfigError as e:
        raise SystemExit(f"Configuration error: {e}")


def cmd_run(args: argparse.Namespace) -> None:
    config = _load_config(args)
    logger = get_logger(level=args.log_level, enable_file=not args.no_log_file)
    store = AirtableRecordStore.from_config(config, logger=logger)
    job = BackfillJob(
        config,
        store=store,
        lookup=ClearbitLogoLookup.from_config(config, logger=logger),
        host=ImgbbImageHost.from_config(config, logger=logger),
        logger=logger,
    )
    try:
        summary = job.run_once(limit=args.limit, dry_run=args.dry_run)
    except FatalListingError as e:
        logger.critical(f"Fatal error: {e}")
        raise SystemExit(1)

    logger.log_metrics_summary()
    print(
        f"Done. total={summary.total} skipped={summary.skipped} "
        f"succeeded={summary.succeeded} failed={summary.failed}"
    )
    if args.dry_run:
        print(f"Dry run: {summary.processed} records would be processed.")


def cmd_key(args: argparse.Namespace) -> None:
    key = derive_key(args.url)
    if not key:
        raise SystemExit(f"Could not derive a domain from: {args.url}")
    print(key)


def _directory_store(args: argparse.Namespace):
    config = _load_config(args)
    logger = get_logger(level=args.log_level, enable_file=False)
    return config, AirtableRecordStore.from_config(config, logger=logger)


def cmd_products(args: argparse.Namespace) -> None:
    config, store = _directory_store(args)
    try:
        products = list_products(store, config.view)
    except FatalListingError as e:
        raise SystemExit(str(e))
    if args.json:
        print(json.dumps(products, indent=2, ensure_ascii=False))
        return
    if not products:
        print("No products found.")
        return
    print(f"Found {len(products)} products:\n")
    for product in products:
        print(f"ID: {product['id']}")
        print(f"  Name: {product['name']}")
        print(f"  Category: {product['category']}")
        print(f"  Website: {product['website']}")
        print(f"  Logo: {product['logo'] or '-'}")
        print()


def cmd_categories(args: argparse.Namespace) -> None:
    config, store = _directory_store(args)
    try:
        categories = list_categories(store, config.view)
    except FatalListingError as e:
        raise SystemExit(str(e))
    for category in categories:
        print(category)


def main(argv: Optional[List[str]] = None):
    # Load .env if present (AIRTABLE_API_KEY, IMGBB_API_KEY, etc.)
    load_env()
    parser = argparse.ArgumentParser(prog="logobackfill", description="Backfill missing product logos in Airtable")
    parser.add_argument("--version", action="store_true", help="Show version")

    subparsers = parser.add_subparsers(dest="command")

    run = subparsers.add_parser("run", help="Fetch, re-host and write back missing logos")
    run.add_argument("--limit", type=int, help="Process at most N eligible records")
    run.add_argument("--dry-run", action="store_true", help="List eligible records without fetching or updating")
    run.add_argument("--view", help="Airtable view to read (default: BACKFILL_VIEW or 'Grid view')")
    run.add_argument("--log-level", default="INFO", help="Log level (default: INFO)")
    run.add_argument("--no-log-file", action="store_true", help="Do not write logs/ files")
    run.set_defaults(func=cmd_run)

    key = subparsers.add_parser("key", help="Print the domain key derived from a website URL")
    key.add_argument("url", help="Website URL")
    key.set_defaults(func=cmd_key)

    prd = subparsers.add_parser("products", help="List directory products")
    prd.add_argument("--view", help="Airtable view to read")
    prd.add_argument("--json", action="store_true", help="Print products as JSON")
    prd.add_argument("--log-level", default="WARNING", help="Log level (default: WARNING)")
    prd.set_defaults(func=cmd_products)

    cat = subparsers.add_parser("categories", help="List directory categories")
    cat.add_argument("--view", help="Airtable view to read")
    cat.add_argument("--log-level", default="WARNING", help="Log level (default: WARNING)")
    cat.set_defaults(func=cmd_categories)

    args = parser.parse_args(argv)

    if args.version:
        print(__version__)
        return

    if hasattr(args, "func"):
        args.func(args)
        return

    parser.print_help()


if __name__ == "__main__":
    main()

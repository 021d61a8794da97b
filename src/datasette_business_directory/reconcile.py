"""
Clear suggestions that were promoted but never deleted.

Promotion inserts the Business first and deletes the suggestion second; if
the delete fails (or the request is abandoned in between) the suggestion
keeps showing as pending. Businesses remember the suggestion they came from
in ``source_suggestion_id``, which is enough to find and clear those rows.

Usage:
    directory-reconcile --config datasette.yaml
    directory-reconcile --db directory.db --dry-run
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from .config import DirectoryConfig
from .errors import StoreError
from .models import BUSINESSES_TABLE, SUGGESTIONS_TABLE
from .store import In, RecordStore, build_store

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("directory-reconcile")


async def find_orphaned_suggestions(store: RecordStore) -> list[str]:
    """Ids of pending suggestions that already have a published Business."""
    suggestion_ids = [row["id"] for row in await store.query(SUGGESTIONS_TABLE)]
    if not suggestion_ids:
        return []

    businesses = await store.query(
        BUSINESSES_TABLE,
        [In("source_suggestion_id", tuple(suggestion_ids))],
    )
    promoted = {row["source_suggestion_id"] for row in businesses}
    return [sid for sid in suggestion_ids if sid in promoted]


async def clear_orphaned_suggestions(store: RecordStore, dry_run: bool = False) -> list[str]:
    """Delete orphaned suggestions and return their ids."""
    orphaned = await find_orphaned_suggestions(store)
    logger.info(f"Found {len(orphaned)} orphaned suggestion(s)")

    if dry_run or not orphaned:
        return orphaned

    await store.delete(SUGGESTIONS_TABLE, [In("id", tuple(orphaned))])
    for suggestion_id in orphaned:
        logger.info(f"Cleared suggestion {suggestion_id}")
    return orphaned


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Clear suggestions that were promoted but not removed",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=Path("datasette.yaml"),
        help="Path to config file (default: datasette.yaml)",
    )
    parser.add_argument(
        "--db",
        type=Path,
        help="Use this SQLite database instead of the configured store",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="List orphaned suggestions without deleting them",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging",
    )
    args = parser.parse_args(argv)

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    config = DirectoryConfig.from_yaml(args.config)
    if args.db:
        config.store.backend = "sqlite"
        config.store.db_path = args.db

    if config.store.backend == "sqlite" and not (
        config.store.db_path and Path(config.store.db_path).exists()
    ):
        logger.error(f"Database not found: {config.store.db_path}")
        return 1

    store = build_store(config)
    if store is None:
        logger.error("Record store is not configured")
        return 1

    try:
        orphaned = asyncio.run(clear_orphaned_suggestions(store, dry_run=args.dry_run))
    except StoreError as e:
        logger.error(f"Reconciliation failed: {e.message}")
        return 1

    if args.dry_run:
        for suggestion_id in orphaned:
            logger.info(f"  - would clear {suggestion_id}")
    return 0


if __name__ == "__main__":
    sys.exit(main())

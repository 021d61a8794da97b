#!/usr/bin/env python3
"""Create or upgrade the business directory database."""

import argparse
import sqlite3
from pathlib import Path

from datasette_business_directory.migrations import current_version, run_migrations


def init_db(db_path: Path) -> None:
    """Apply all pending migrations and show the resulting schema."""
    print(f"Initializing database: {db_path}")

    applied = run_migrations(db_path)
    if applied:
        print(f"Applied migration(s): {', '.join(str(v) for v in applied)}")
    else:
        print("Schema already up to date.")
    print(f"Schema version: {current_version(db_path)}")

    conn = sqlite3.connect(db_path)
    try:
        cursor = conn.execute(
            "SELECT name FROM sqlite_master WHERE type='table' ORDER BY name"
        )
        tables = [row[0] for row in cursor if not row[0].startswith("sqlite_")]
        print("\nTables:")
        for table in tables:
            count = conn.execute(f'SELECT count(*) FROM "{table}"').fetchone()[0]
            print(f"  {table} ({count} rows)")
    finally:
        conn.close()


def main() -> None:
    parser = argparse.ArgumentParser(description="Initialize the business directory database")
    parser.add_argument(
        "--db",
        type=Path,
        default=Path("directory.db"),
        help="Path to the SQLite database file (default: directory.db)",
    )
    args = parser.parse_args()

    init_db(args.db)


if __name__ == "__main__":
    main()

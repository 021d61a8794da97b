"""
Schema migrations for the SQLite record store.

Each migration is a numbered SQL file in this directory
(e.g. ``0002_business_source_suggestion.sql``), applied once, in numeric
order, and recorded in ``schema_migrations``.
"""

import logging
import re
import sqlite3
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).parent
MIGRATION_NAME_RE = re.compile(r"^(\d+)_.+\.sql$")


@dataclass(frozen=True)
class Migration:
    version: int
    path: Path

    @property
    def name(self) -> str:
        return self.path.name


def discover_migrations(directory: Path = MIGRATIONS_DIR) -> list[Migration]:
    """All migration files in ``directory``, oldest first."""
    found = []
    for path in directory.glob("*.sql"):
        match = MIGRATION_NAME_RE.match(path.name)
        if match:
            found.append(Migration(int(match.group(1)), path))
    return sorted(found, key=lambda m: m.version)


def applied_versions(conn: sqlite3.Connection) -> set[int]:
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS schema_migrations (
            version INTEGER PRIMARY KEY,
            applied_ts TEXT NOT NULL
        )
        """
    )
    return {row[0] for row in conn.execute("SELECT version FROM schema_migrations")}


def run_migrations(db_path: Path, directory: Path = MIGRATIONS_DIR) -> list[int]:
    """
    Bring the database at ``db_path`` up to date. Idempotent.

    Returns the versions applied by this call.
    """
    applied = []
    conn = sqlite3.connect(db_path)
    try:
        done = applied_versions(conn)
        conn.commit()

        for migration in discover_migrations(directory):
            if migration.version in done:
                continue

            logger.info(f"Applying migration {migration.version}: {migration.name}")
            conn.executescript(migration.path.read_text())
            conn.execute(
                "INSERT INTO schema_migrations (version, applied_ts) VALUES (?, ?)",
                (migration.version, datetime.now(UTC).isoformat()),
            )
            conn.commit()
            applied.append(migration.version)
    finally:
        conn.close()

    return applied


def current_version(db_path: Path) -> int:
    """Highest applied migration version, 0 for a missing or empty database."""
    if not Path(db_path).exists():
        return 0

    conn = sqlite3.connect(db_path)
    try:
        return max(applied_versions(conn), default=0)
    finally:
        conn.close()

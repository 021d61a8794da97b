"""
Record store adapter.

The workflows only ever talk to a ``RecordStore``: a mapping of table name to
query / insert / delete with simple filter predicates and ordering. The
default implementation is a local SQLite file; ``postgrest.py`` provides a
PostgREST (Supabase) backed one.
"""

import logging
import re
import secrets
import sqlite3
from abc import ABC, abstractmethod
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

from .errors import StoreReadFailed, StoreWriteFailed

if TYPE_CHECKING:
    from .config import DirectoryConfig

logger = logging.getLogger(__name__)

IDENTIFIER_RE = re.compile(r"^[a-z_][a-z0-9_]*$")


# -----------------------------------------------------------------------------
# Filter predicates
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class Eq:
    """Column equals value (``None`` matches NULL)."""

    column: str
    value: Any


@dataclass(frozen=True)
class Contains:
    """Case-insensitive substring match."""

    column: str
    text: str


@dataclass(frozen=True)
class In:
    """Column value is one of ``values``."""

    column: str
    values: tuple


@dataclass(frozen=True, init=False)
class AnyOf:
    """Logical OR across the wrapped filters."""

    filters: tuple

    def __init__(self, *filters):
        object.__setattr__(self, "filters", tuple(filters))


@dataclass(frozen=True)
class OrderBy:
    column: str
    descending: bool = False


Filter = Eq | Contains | In | AnyOf


def new_record_id() -> str:
    """Generate a record id."""
    return secrets.token_hex(16)


class RecordStore(ABC):
    """Generic table store used by every workflow."""

    @abstractmethod
    async def query(
        self,
        table: str,
        filters: Sequence[Filter] = (),
        order: Sequence[OrderBy] = (),
    ) -> list[dict[str, Any]]:
        """Return rows matching all ``filters`` (AND), sorted by ``order``."""

    @abstractmethod
    async def insert(self, table: str, row: dict[str, Any]) -> dict[str, Any]:
        """Insert ``row`` and return it as stored (with id and defaults)."""

    @abstractmethod
    async def delete(self, table: str, filters: Sequence[Filter]) -> int:
        """Delete matching rows and return how many were removed.

        Deleting rows that do not exist is a no-op, not an error.
        """


# -----------------------------------------------------------------------------
# SQLite implementation
# -----------------------------------------------------------------------------


def _identifier(name: str) -> str:
    if not IDENTIFIER_RE.match(name):
        raise ValueError(f"Invalid identifier: {name!r}")
    return f'"{name}"'


def _sql_value(value: Any) -> Any:
    if isinstance(value, bool):
        return int(value)
    return value


def _like_pattern(text: str) -> str:
    escaped = text.lower().replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def compile_filter(f: Filter) -> tuple[str, list[Any]]:
    """Translate a filter into a SQL fragment and its parameters."""
    if isinstance(f, Eq):
        column = _identifier(f.column)
        if f.value is None:
            return f"{column} IS NULL", []
        return f"{column} = ?", [_sql_value(f.value)]
    if isinstance(f, Contains):
        column = _identifier(f.column)
        return f"lower(coalesce({column}, '')) LIKE ? ESCAPE '\\'", [_like_pattern(f.text)]
    if isinstance(f, In):
        column = _identifier(f.column)
        if not f.values:
            return "0", []
        placeholders = ", ".join("?" for _ in f.values)
        return f"{column} IN ({placeholders})", [_sql_value(v) for v in f.values]
    if isinstance(f, AnyOf):
        if not f.filters:
            return "1", []
        parts, params = [], []
        for inner in f.filters:
            sql, inner_params = compile_filter(inner)
            parts.append(sql)
            params.extend(inner_params)
        return "(" + " OR ".join(parts) + ")", params
    raise TypeError(f"Unsupported filter: {f!r}")


def compile_where(filters: Iterable[Filter]) -> tuple[str, list[Any]]:
    parts, params = [], []
    for f in filters:
        sql, f_params = compile_filter(f)
        parts.append(sql)
        params.extend(f_params)
    if not parts:
        return "", []
    return " WHERE " + " AND ".join(parts), params


class SQLiteRecordStore(RecordStore):
    """Record store backed by a local SQLite database file."""

    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    async def query(self, table, filters=(), order=()):
        where, params = compile_where(filters)
        sql = f"SELECT * FROM {_identifier(table)}{where}"
        if order:
            sql += " ORDER BY " + ", ".join(
                f"{_identifier(o.column)} {'DESC' if o.descending else 'ASC'}" for o in order
            )

        try:
            conn = self._connect()
            try:
                return [dict(row) for row in conn.execute(sql, params).fetchall()]
            finally:
                conn.close()
        except sqlite3.Error as e:
            logger.error(f"Query on {table} failed: {e}")
            raise StoreReadFailed(str(e)) from e

    async def insert(self, table, row):
        record = {key: _sql_value(value) for key, value in row.items()}
        record.setdefault("id", new_record_id())
        columns = ", ".join(_identifier(key) for key in record)
        placeholders = ", ".join("?" for _ in record)

        try:
            conn = self._connect()
            try:
                conn.execute(
                    f"INSERT INTO {_identifier(table)} ({columns}) VALUES ({placeholders})",
                    list(record.values()),
                )
                conn.commit()
                stored = conn.execute(
                    f"SELECT * FROM {_identifier(table)} WHERE id = ?",
                    (record["id"],),
                ).fetchone()
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise StoreWriteFailed(str(e)) from e

        return dict(stored)

    async def delete(self, table, filters):
        if not filters:
            raise ValueError("Refusing to delete without filters")
        where, params = compile_where(filters)

        try:
            conn = self._connect()
            try:
                cursor = conn.execute(f"DELETE FROM {_identifier(table)}{where}", params)
                conn.commit()
                return cursor.rowcount
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise StoreWriteFailed(str(e)) from e


# -----------------------------------------------------------------------------
# Construction
# -----------------------------------------------------------------------------


def build_store(config: "DirectoryConfig") -> RecordStore | None:
    """Construct the configured record store.

    Returns None when the backend is missing the settings it needs; callers
    report that as "not configured" rather than failing at import time.
    """
    store_config = config.store

    if store_config.backend == "sqlite":
        if not store_config.db_path:
            return None
        return SQLiteRecordStore(Path(store_config.db_path))

    if store_config.backend == "postgrest":
        from .postgrest import PostgrestRecordStore

        api_key = store_config.get_api_key()
        if not store_config.rest_url or not api_key:
            return None
        return PostgrestRecordStore(
            store_config.rest_url,
            api_key,
            timeout=store_config.timeout_seconds,
        )

    logger.error(f"Unknown record store backend: {store_config.backend}")
    return None

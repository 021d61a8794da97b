"""
Search and filtering over published businesses.

Results are always ranked verified-first, then by name. Every executed
search is recorded in ``search_events`` by a background task; the caller
never waits on that write and never sees its failures.
"""

import asyncio
import logging
from dataclasses import dataclass

from .models import BUSINESSES_TABLE, SEARCH_EVENTS_TABLE, Business
from .store import AnyOf, Contains, Eq, Filter, OrderBy, RecordStore

logger = logging.getLogger(__name__)

LOCATION_FIELDS = ("name", "city", "zip")

RANKING = (
    OrderBy("verified", descending=True),
    OrderBy("name"),
)

# Strong references to in-flight log writes; the event loop only keeps weak ones.
_pending_logs: set[asyncio.Task] = set()


@dataclass
class SearchQuery:
    """What a visitor asked for."""

    location: str = ""
    category: str = ""
    verified_only: bool = False

    def normalized(self) -> "SearchQuery":
        return SearchQuery(
            location=(self.location or "").strip(),
            category=(self.category or "").strip(),
            verified_only=bool(self.verified_only),
        )


def build_filters(query: SearchQuery) -> list[Filter]:
    """Translate a search into store filters.

    An empty location means no location filter, not "match nothing".
    """
    query = query.normalized()
    filters: list[Filter] = []

    if query.location:
        filters.append(AnyOf(*(Contains(column, query.location) for column in LOCATION_FIELDS)))
    if query.category:
        filters.append(Eq("category", query.category))
    if query.verified_only:
        filters.append(Eq("verified", True))

    return filters


async def _record_search(store: RecordStore, query: SearchQuery, result_count: int) -> None:
    try:
        await store.insert(
            SEARCH_EVENTS_TABLE,
            {
                "location": query.location or None,
                "category": query.category or None,
                "verified_only": query.verified_only,
                "result_count": result_count,
            },
        )
    except Exception as e:
        logger.warning(f"Error logging search event: {e}")


def _schedule_search_log(store: RecordStore, query: SearchQuery, result_count: int) -> None:
    task = asyncio.get_running_loop().create_task(_record_search(store, query, result_count))
    _pending_logs.add(task)
    task.add_done_callback(_pending_logs.discard)


async def drain_search_logs() -> None:
    """Wait for outstanding search log writes (shutdown and tests)."""
    while pending := [task for task in _pending_logs if not task.done()]:
        await asyncio.gather(*pending, return_exceptions=True)


async def search_businesses(
    store: RecordStore,
    query: SearchQuery,
    log_events: bool = True,
) -> list[Business]:
    """
    Run a directory search.

    Raises:
        StoreReadFailed: the query failed; no partial results are returned.
    """
    query = query.normalized()
    rows = await store.query(BUSINESSES_TABLE, build_filters(query), RANKING)
    results = [Business.from_row(row) for row in rows]

    if log_events:
        _schedule_search_log(store, query, len(results))

    return results


async def featured_businesses(store: RecordStore) -> list[Business]:
    """Curated listings shown before any search is made."""
    rows = await store.query(BUSINESSES_TABLE, [Eq("featured", True)], RANKING)
    return [Business.from_row(row) for row in rows]

"""
Moderation workflows: submission, promotion, rejection and the review queue.

A suggestion is Pending for as long as its row exists. It leaves that state
exactly once, either by rejection (deleted) or by promotion (a Business is
inserted, then the suggestion is deleted). The insert always happens before
the delete so a crash in between can only leave a duplicate behind, never
lose a suggestion.
"""

import logging
from dataclasses import dataclass
from typing import Any

from .classifier import ImportPredicate, classify_suggestion
from .errors import DeleteFailed, InsertFailed, MissingField, StoreWriteFailed
from .models import (
    BUSINESSES_TABLE,
    SUGGESTIONS_TABLE,
    Business,
    ReviewItem,
    Suggestion,
)
from .store import Eq, OrderBy, RecordStore
from .validation import clean_text, is_spam_submission, validate_promotion, validate_submission

logger = logging.getLogger(__name__)

REVIEW_SEARCH_FIELDS = ("name", "city", "state", "notes", "website")


@dataclass
class PromotionResult:
    """Outcome of a successful promotion."""

    business: Business
    suggestion_cleared: bool = True


async def submit_suggestion(
    store: RecordStore,
    payload: dict[str, Any],
    require_city: bool = True,
    default_state: str = "FL",
    honeypot_field: str = "company",
) -> Suggestion | None:
    """
    Store a public suggestion.

    Returns the stored suggestion, or None when the honeypot was tripped. In
    that case nothing is written and the caller should still report success,
    so automated submitters get no signal.

    Raises:
        ValidationError: the payload failed validation.
        StoreWriteFailed: the insert failed.
    """
    if is_spam_submission(payload, honeypot_field):
        logger.info("Discarding suggestion with honeypot field filled")
        return None

    record = validate_submission(payload, require_city=require_city, default_state=default_state)
    row = await store.insert(SUGGESTIONS_TABLE, record)
    logger.info(f"Stored suggestion {row.get('id')}: {record['name']}")
    return Suggestion.from_row(row)


async def promote_suggestion(store: RecordStore, payload: dict[str, Any]) -> PromotionResult:
    """
    Publish a suggestion as a Business and remove the suggestion.

    Raises:
        MissingField / ValidationError: before any store access.
        InsertFailed: the Business insert failed; the suggestion is untouched.
    """
    request = validate_promotion(payload)

    try:
        row = await store.insert(BUSINESSES_TABLE, request.to_business_row())
    except StoreWriteFailed as e:
        logger.error(f"Error inserting business for suggestion {request.suggestion_id}: {e}")
        raise InsertFailed(e.message) from e

    business = Business.from_row(row)
    logger.info(f"Promoted suggestion {request.suggestion_id} to business {business.id}")

    # Cleanup is best effort: the business is already public.
    try:
        await store.delete(SUGGESTIONS_TABLE, [Eq("id", request.suggestion_id)])
    except StoreWriteFailed:
        logger.exception(
            f"Error deleting suggestion {request.suggestion_id}; "
            "it stays pending until reconciled"
        )
        return PromotionResult(business=business, suggestion_cleared=False)

    return PromotionResult(business=business)


async def reject_suggestion(store: RecordStore, suggestion_id: Any) -> None:
    """
    Discard a suggestion without publishing it. Idempotent.

    Raises:
        MissingField: no suggestion id was given.
        DeleteFailed: the store reported an error.
    """
    suggestion_id = clean_text(suggestion_id)
    if not suggestion_id:
        raise MissingField("suggestionId is required.")

    try:
        removed = await store.delete(SUGGESTIONS_TABLE, [Eq("id", suggestion_id)])
    except StoreWriteFailed as e:
        logger.error(f"Error deleting suggestion {suggestion_id}: {e}")
        raise DeleteFailed(e.message) from e

    if removed:
        logger.info(f"Rejected suggestion {suggestion_id}")
    else:
        logger.debug(f"Suggestion {suggestion_id} was already gone")


def _matches(suggestion: Suggestion, needle: str) -> bool:
    haystack = " ".join(getattr(suggestion, field) or "" for field in REVIEW_SEARCH_FIELDS)
    return needle in haystack.lower()


async def list_suggestions(
    store: RecordStore,
    text: str = "",
    is_imported: ImportPredicate | None = None,
) -> list[ReviewItem]:
    """
    Pending suggestions, newest first, annotated with their origin.

    ``text`` narrows the list to suggestions mentioning it (case-insensitive)
    in any of name, city, state, notes or website.

    Raises:
        StoreReadFailed: the listing query failed.
    """
    rows = await store.query(SUGGESTIONS_TABLE, order=[OrderBy("created_at", descending=True)])
    suggestions = [Suggestion.from_row(row) for row in rows]

    needle = (text or "").strip().lower()
    if needle:
        suggestions = [s for s in suggestions if _matches(s, needle)]

    return [ReviewItem(s, classify_suggestion(s, is_imported)) for s in suggestions]

"""
Display-only classification of suggestions as Imported or Community.

Bulk-seeded or migrated suggestions tend to carry tell-tale words in their
notes or point at the old directory site. The keyword list is a heuristic and
is meant to be tuned, so the check is a plain predicate that can be swapped
without touching the moderation workflow.
"""

from collections.abc import Callable, Iterable

from .models import Suggestion, SuggestionOrigin

DEFAULT_IMPORT_SIGNALS = (
    "blackjaxconnect.com",
    "import",
    "imported",
    "batch",
    "scrape",
    "scraped",
    "source:",
    "seed",
    "migration",
)

ImportPredicate = Callable[[Suggestion], bool]


def keyword_classifier(keywords: Iterable[str] = DEFAULT_IMPORT_SIGNALS) -> ImportPredicate:
    """Build a predicate that flags suggestions mentioning any keyword."""
    needles = [k.lower() for k in keywords if k]

    def is_imported(suggestion: Suggestion) -> bool:
        haystack = f"{suggestion.notes or ''}\n{suggestion.website or ''}".lower()
        return any(needle in haystack for needle in needles)

    return is_imported


_default_predicate = keyword_classifier()


def classify_suggestion(
    suggestion: Suggestion,
    is_imported: ImportPredicate | None = None,
) -> SuggestionOrigin:
    """Label a suggestion for the review queue. Never persisted."""
    predicate = is_imported or _default_predicate
    if predicate(suggestion):
        return SuggestionOrigin.IMPORTED
    return SuggestionOrigin.COMMUNITY

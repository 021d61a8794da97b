"""
Validation and normalization of submission and promotion payloads.

Nothing in here touches the record store: every payload is checked before
any I/O happens, and every optional text field that comes out is either a
trimmed non-empty string or None so "not provided" is stored uniformly.
"""

from dataclasses import dataclass
from typing import Any

from .errors import MissingField, ValidationError
from .models import Category

# Input limits from the public suggestion form
MAX_LENGTHS = {
    "name": 120,
    "city": 80,
    "website": 200,
    "notes": 500,
}

PROMOTION_TEXT_FIELDS = (
    "address",
    "city",
    "zip",
    "phone",
    "website",
    "description",
)


def clean_text(value: Any) -> str | None:
    """Trim a text value, mapping missing or blank input to None."""
    if value is None:
        return None
    text = value if isinstance(value, str) else str(value)
    return text.strip() or None


def normalize_state(value: Any, default: str | None = None) -> str | None:
    """Upper-case and cut a state to two characters.

    Blank input, or anything that is not two letters once cut, falls back to
    ``default``.
    """
    state = clean_text(value)
    if state is not None:
        state = state.upper()[:2]
        if len(state) == 2 and state.isalpha():
            return state
    return default.upper()[:2] if default else None


def _truncate(field_name: str, value: str | None) -> str | None:
    limit = MAX_LENGTHS.get(field_name)
    if value is None or limit is None:
        return value
    return value[:limit].rstrip() or None


def is_spam_submission(payload: dict[str, Any], honeypot_field: str = "company") -> bool:
    """True when the hidden honeypot field was filled in.

    Humans never see that field, so any value is treated as a bot signal.
    """
    return clean_text(payload.get(honeypot_field)) is not None


def validate_submission(
    payload: dict[str, Any],
    require_city: bool = True,
    default_state: str = "FL",
) -> dict[str, Any]:
    """
    Validate a public suggestion and return the row to store.

    Over-long fields are cut to the form limits and an unusable state falls
    back to ``default_state``; neither is an error.

    Raises:
        ValidationError: name (or city, when required) is blank.
    """
    name = clean_text(payload.get("name"))
    city = clean_text(payload.get("city"))

    if require_city and (not name or not city):
        raise ValidationError("Business name and city are required.")
    if not name:
        raise ValidationError("Business name is required.")

    return {
        "name": _truncate("name", name),
        "city": _truncate("city", city),
        "state": normalize_state(payload.get("state"), default=default_state),
        "website": _truncate("website", clean_text(payload.get("website"))),
        "notes": _truncate("notes", clean_text(payload.get("notes"))),
    }


@dataclass
class PromotionRequest:
    """A validated admin request to publish a suggestion."""

    suggestion_id: str
    name: str
    category: str = Category.SERVICES.value
    address: str | None = None
    city: str | None = None
    state: str | None = None
    zip: str | None = None
    phone: str | None = None
    website: str | None = None
    description: str | None = None
    verified: bool = True

    def to_business_row(self) -> dict[str, Any]:
        """Build the Business row, keeping a back-reference to the suggestion."""
        return {
            "name": self.name,
            "category": self.category,
            "address": self.address,
            "city": self.city,
            "state": self.state,
            "zip": self.zip,
            "description": self.description,
            "phone": self.phone,
            "website": self.website,
            "verified": self.verified,
            "source_suggestion_id": self.suggestion_id,
        }


def validate_promotion(payload: dict[str, Any]) -> PromotionRequest:
    """
    Validate a promotion payload.

    Raises:
        MissingField: suggestionId or name is missing/blank.
        ValidationError: unknown category.
    """
    suggestion_id = clean_text(payload.get("suggestionId"))
    name = clean_text(payload.get("name"))
    if not suggestion_id or not name:
        raise MissingField("suggestionId and name are required.")

    category = clean_text(payload.get("category")) or Category.SERVICES.value
    if category not in Category.values():
        raise ValidationError(f"category must be one of: {', '.join(Category.values())}.")

    # Only an explicit boolean false unverifies; anything else keeps the default.
    verified = payload.get("verified")
    verified = verified if isinstance(verified, bool) else True

    return PromotionRequest(
        suggestion_id=suggestion_id,
        name=name,
        category=category,
        state=normalize_state(payload.get("state")),
        verified=verified,
        **{key: clean_text(payload.get(key)) for key in PROMOTION_TEXT_FIELDS},
    )

"""
Data models for the business directory.
"""

from dataclasses import asdict, dataclass, fields
from enum import Enum
from typing import Any

BUSINESSES_TABLE = "businesses"
SUGGESTIONS_TABLE = "business_suggestions"
SEARCH_EVENTS_TABLE = "search_events"


class Category(str, Enum):
    """Fixed set of directory categories."""

    FOOD = "food"
    RETAIL = "retail"
    SERVICES = "services"
    HEALTH = "health"
    NONPROFIT = "nonprofit"
    OTHER = "other"

    @classmethod
    def values(cls) -> list[str]:
        return [member.value for member in cls]


class SuggestionOrigin(str, Enum):
    """Display-only label distinguishing seeded suggestions from organic ones."""

    IMPORTED = "Imported"
    COMMUNITY = "Community"


def _known_fields(cls, row: dict[str, Any]) -> dict[str, Any]:
    names = {f.name for f in fields(cls)}
    return {key: value for key, value in row.items() if key in names}


@dataclass
class Business:
    """A published, publicly searchable directory entry."""

    id: str
    name: str
    category: str = Category.SERVICES.value
    address: str | None = None
    city: str | None = None
    state: str | None = None
    zip: str | None = None
    description: str | None = None
    phone: str | None = None
    website: str | None = None
    verified: bool = True
    featured: bool = False
    area: str | None = None
    source_suggestion_id: str | None = None
    created_at: str | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Business":
        """Build from a store row; SQLite hands booleans back as 0/1."""
        data = _known_fields(cls, row)
        data["verified"] = bool(data.get("verified", True))
        data["featured"] = bool(data.get("featured") or False)
        return cls(**data)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class Suggestion:
    """A community-submitted candidate business awaiting review."""

    id: str
    name: str
    city: str | None = None
    state: str | None = None
    website: str | None = None
    notes: str | None = None
    created_at: str | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Suggestion":
        return cls(**_known_fields(cls, row))

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class ReviewItem:
    """A pending suggestion annotated for the admin review queue."""

    suggestion: Suggestion
    origin: SuggestionOrigin

    def to_dict(self) -> dict[str, Any]:
        return {**self.suggestion.to_dict(), "origin": self.origin.value}

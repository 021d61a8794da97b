"""Unit tests for the Imported/Community status classifier."""

import pytest

from datasette_business_directory.classifier import classify_suggestion, keyword_classifier
from datasette_business_directory.models import Suggestion, SuggestionOrigin


def make_suggestion(notes=None, website=None):
    return Suggestion(id="s1", name="Soul Kitchen", notes=notes, website=website)


class TestClassifySuggestion:
    @pytest.mark.parametrize(
        "notes",
        [
            "Imported from the 2023 list",
            "batch 4",
            "SCRAPED from maps",
            "source: chamber of commerce",
            "seed data",
            "legacy migration",
        ],
    )
    def test_import_keywords_in_notes(self, notes):
        assert classify_suggestion(make_suggestion(notes=notes)) == SuggestionOrigin.IMPORTED

    def test_known_domain_in_website(self):
        suggestion = make_suggestion(website="https://BlackJaxConnect.com/listing/42")
        assert classify_suggestion(suggestion) == SuggestionOrigin.IMPORTED

    def test_keyword_in_website(self):
        suggestion = make_suggestion(website="https://example.com/?source:feed")
        assert classify_suggestion(suggestion) == SuggestionOrigin.IMPORTED

    def test_organic_suggestion_is_community(self):
        suggestion = make_suggestion(
            notes="Best oxtails on the Northside, go on Sundays",
            website="instagram.com/soulkitchen",
        )
        assert classify_suggestion(suggestion) == SuggestionOrigin.COMMUNITY

    def test_empty_fields_are_community(self):
        assert classify_suggestion(make_suggestion()) == SuggestionOrigin.COMMUNITY

    def test_predicate_is_swappable(self):
        only_csv = keyword_classifier(["csv upload"])

        assert classify_suggestion(make_suggestion(notes="seed"), only_csv) == SuggestionOrigin.COMMUNITY
        assert (
            classify_suggestion(make_suggestion(notes="From CSV upload"), only_csv)
            == SuggestionOrigin.IMPORTED
        )

    def test_empty_keyword_list_never_matches(self):
        never = keyword_classifier([])
        assert classify_suggestion(make_suggestion(notes="imported"), never) == SuggestionOrigin.COMMUNITY

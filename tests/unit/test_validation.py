"""Unit tests for submission and promotion validation."""

import pytest

from datasette_business_directory.errors import MissingField, ValidationError
from datasette_business_directory.validation import (
    clean_text,
    is_spam_submission,
    normalize_state,
    validate_promotion,
    validate_submission,
)


class TestCleanText:
    def test_trims(self):
        assert clean_text("  Soul Kitchen ") == "Soul Kitchen"

    def test_blank_becomes_none(self):
        assert clean_text("   ") is None
        assert clean_text("") is None
        assert clean_text(None) is None

    def test_non_string_is_stringified(self):
        assert clean_text(32202) == "32202"


class TestNormalizeState:
    def test_upper_cases(self):
        assert normalize_state("fl") == "FL"

    def test_truncates_to_two(self):
        assert normalize_state("Florida") == "FL"

    def test_default_for_blank(self):
        assert normalize_state("  ", default="FL") == "FL"
        assert normalize_state(None, default="GA") == "GA"

    def test_no_default_gives_none(self):
        assert normalize_state("") is None

    @pytest.mark.parametrize("value", ["F", "1", "12", "f.", "F L", "g"])
    def test_unusable_state_falls_back_to_default(self, value):
        assert normalize_state(value, default="FL") == "FL"

    def test_unusable_state_without_default_is_none(self):
        assert normalize_state("F") is None


class TestValidateSubmission:
    def test_valid_submission(self):
        record = validate_submission(
            {"name": " Soul Kitchen ", "city": "Jacksonville", "state": "fl"}
        )
        assert record == {
            "name": "Soul Kitchen",
            "city": "Jacksonville",
            "state": "FL",
            "website": None,
            "notes": None,
        }

    def test_state_defaults_to_fl(self):
        record = validate_submission({"name": "Bistro", "city": "Tampa"})
        assert record["state"] == "FL"

    def test_configurable_default_state(self):
        record = validate_submission({"name": "Bistro", "city": "Atlanta"}, default_state="GA")
        assert record["state"] == "GA"

    @pytest.mark.parametrize("name", ["", "   ", None, "\t\n"])
    def test_blank_name_rejected(self, name):
        with pytest.raises(ValidationError):
            validate_submission({"name": name, "city": "Jacksonville"})

    def test_city_required_by_default(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_submission({"name": "Soul Kitchen", "city": "  "})
        assert exc_info.value.message == "Business name and city are required."

    def test_city_optional_when_configured(self):
        record = validate_submission({"name": "Soul Kitchen"}, require_city=False)
        assert record["city"] is None

    def test_name_still_required_when_city_optional(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_submission({"name": "", "city": "Tampa"}, require_city=False)
        assert exc_info.value.message == "Business name is required."

    def test_empty_optionals_become_none(self):
        record = validate_submission(
            {"name": "Bistro", "city": "Tampa", "website": "  ", "notes": ""}
        )
        assert record["website"] is None
        assert record["notes"] is None

    @pytest.mark.parametrize("state", ["F", "1", "f.", "F L"])
    def test_odd_state_still_accepted(self, state):
        record = validate_submission({"name": "Bistro", "city": "Tampa", "state": state})
        assert record["state"] == "FL"

    def test_long_notes_cut_to_form_limit(self):
        record = validate_submission({"name": "Bistro", "city": "Tampa", "notes": "x" * 501})
        assert record["notes"] == "x" * 500

    def test_long_name_and_website_cut(self):
        record = validate_submission(
            {"name": "x" * 121, "city": "Tampa", "website": "w" * 250}
        )
        assert record["name"] == "x" * 120
        assert len(record["website"]) == 200


class TestSpamSignal:
    def test_filled_honeypot_is_spam(self):
        assert is_spam_submission({"name": "Bot Co", "company": "Acme"}) is True

    def test_empty_honeypot_is_not_spam(self):
        assert is_spam_submission({"name": "Bistro", "company": ""}) is False
        assert is_spam_submission({"name": "Bistro", "company": "   "}) is False
        assert is_spam_submission({"name": "Bistro"}) is False

    def test_custom_field_name(self):
        assert is_spam_submission({"fax": "555"}, honeypot_field="fax") is True
        assert is_spam_submission({"company": "Acme"}, honeypot_field="fax") is False


class TestValidatePromotion:
    def test_minimal_payload_defaults(self):
        request = validate_promotion({"suggestionId": "abc", "name": "Soul Kitchen"})

        assert request.suggestion_id == "abc"
        assert request.name == "Soul Kitchen"
        assert request.category == "services"
        assert request.verified is True
        assert request.city is None

    @pytest.mark.parametrize(
        "payload",
        [
            {"name": "Soul Kitchen"},
            {"suggestionId": "abc"},
            {"suggestionId": "abc", "name": "   "},
            {"suggestionId": "", "name": "Soul Kitchen"},
            {},
        ],
    )
    def test_missing_required_fields(self, payload):
        with pytest.raises(MissingField) as exc_info:
            validate_promotion(payload)
        assert exc_info.value.message == "suggestionId and name are required."

    def test_falsy_category_defaults_to_services(self):
        request = validate_promotion({"suggestionId": "abc", "name": "X", "category": ""})
        assert request.category == "services"

    def test_unknown_category_rejected(self):
        with pytest.raises(ValidationError):
            validate_promotion({"suggestionId": "abc", "name": "X", "category": "casino"})

    def test_only_explicit_false_unverifies(self):
        assert validate_promotion({"suggestionId": "a", "name": "X", "verified": False}).verified is False
        assert validate_promotion({"suggestionId": "a", "name": "X", "verified": "false"}).verified is True
        assert validate_promotion({"suggestionId": "a", "name": "X", "verified": None}).verified is True

    def test_optional_strings_trimmed(self):
        request = validate_promotion(
            {
                "suggestionId": "abc",
                "name": "  Soul Kitchen ",
                "category": "food",
                "address": " 1 Main St ",
                "zip": "",
                "state": "fl",
                "website": "   ",
            }
        )
        assert request.name == "Soul Kitchen"
        assert request.address == "1 Main St"
        assert request.zip is None
        assert request.state == "FL"
        assert request.website is None

    def test_unusable_promotion_state_is_dropped(self):
        request = validate_promotion({"suggestionId": "abc", "name": "X", "state": "F"})
        assert request.state is None

    def test_business_row_keeps_back_reference(self):
        request = validate_promotion({"suggestionId": "abc", "name": "X", "category": "food"})
        row = request.to_business_row()

        assert row["source_suggestion_id"] == "abc"
        assert row["category"] == "food"
        assert row["verified"] is True
        assert "featured" not in row

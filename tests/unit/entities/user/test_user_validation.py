"""Unit tests for user field validation and normalization."""

import pytest

from src.users_api.entities.user.validation import (
    is_valid_email,
    is_valid_phone,
    normalize_user_fields,
    sanitize_text,
    validate_user_fields,
)


class TestSanitizeText:
    def test_trims_and_strips_angle_brackets(self):
        assert sanitize_text("  <b>Bob</b>  ") == "bBob/b"

    def test_plain_text_unchanged(self):
        assert sanitize_text("France") == "France"


class TestEmailValidation:
    @pytest.mark.parametrize(
        "email",
        ["user@example.com", "first.last@sub.domain.org", "  padded@example.com  "],
    )
    def test_valid_emails(self, email):
        assert is_valid_email(email)

    @pytest.mark.parametrize(
        "email",
        ["", "no-at-sign.com", "user@", "user@domain", "two words@example.com", None, 42],
    )
    def test_invalid_emails(self, email):
        assert not is_valid_email(email)


class TestPhoneValidation:
    @pytest.mark.parametrize(
        "phone",
        ["+1-555-0123", "+44 20 7946 0958", "(555) 123-4567", "5551234", None, "", "   "],
    )
    def test_valid_phones(self, phone):
        assert is_valid_phone(phone)

    @pytest.mark.parametrize(
        "phone",
        ["+0123", "phone", "+1-555-CALL", "12345678901234567", 5551234],
    )
    def test_invalid_phones(self, phone):
        assert not is_valid_phone(phone)


class TestValidateUserFields:
    """Test create-mode and update-mode validation."""

    def test_valid_create_payload(self, user_fields):
        assert validate_user_fields(user_fields) == {}

    def test_create_requires_names_and_email(self):
        errors = validate_user_fields({})

        assert errors == {
            "first_name": "First name must be at least 2 characters long",
            "last_name": "Last name must be at least 2 characters long",
            "email": "Valid email address is required",
        }

    def test_single_character_first_name_rejected(self, user_fields):
        user_fields["first_name"] = "J"

        errors = validate_user_fields(user_fields)

        assert errors == {"first_name": "First name must be at least 2 characters long"}

    def test_name_length_is_measured_after_trimming(self, user_fields):
        user_fields["last_name"] = "  X  "
        assert "last_name" in validate_user_fields(user_fields)

    @pytest.mark.parametrize("name", ["<a>", "<<>>", " <> "])
    def test_name_length_is_measured_after_sanitizing(self, user_fields, name):
        user_fields["first_name"] = name
        assert validate_user_fields(user_fields) == {
            "first_name": "First name must be at least 2 characters long"
        }

    def test_bracket_padding_does_not_count_toward_max(self, user_fields):
        user_fields["last_name"] = "<" + "Z" * 50 + ">"
        user_fields["country"] = "<<" + "C" * 50 + ">>"
        assert validate_user_fields(user_fields) == {}

    def test_name_too_long(self, user_fields):
        user_fields["first_name"] = "A" * 51
        user_fields["last_name"] = "B" * 51

        errors = validate_user_fields(user_fields)

        assert errors["first_name"] == "First name cannot exceed 50 characters"
        assert errors["last_name"] == "Last name cannot exceed 50 characters"

    def test_name_at_bounds_accepted(self, user_fields):
        user_fields["first_name"] = "Al"
        user_fields["last_name"] = "Z" * 50
        assert validate_user_fields(user_fields) == {}

    def test_non_string_name_rejected(self, user_fields):
        user_fields["first_name"] = 12345
        assert "first_name" in validate_user_fields(user_fields)

    def test_invalid_phone_reported(self, user_fields):
        user_fields["phone"] = "not-a-phone"
        assert validate_user_fields(user_fields) == {
            "phone": "Invalid phone number format"
        }

    def test_country_too_long(self, user_fields):
        user_fields["country"] = "C" * 51
        assert validate_user_fields(user_fields) == {
            "country": "Country cannot exceed 50 characters"
        }

    def test_update_checks_only_supplied_fields(self):
        assert validate_user_fields({"country": "Peru"}, partial=True) == {}

    def test_update_still_validates_supplied_fields(self):
        errors = validate_user_fields({"email": "broken", "first_name": "A"}, partial=True)

        assert set(errors) == {"email", "first_name"}

    def test_unknown_keys_ignored(self, user_fields):
        user_fields["id"] = "not-an-id"
        user_fields["role"] = "admin"
        assert validate_user_fields(user_fields) == {}


class TestNormalizeUserFields:
    def test_email_trimmed_and_lower_cased(self):
        assert normalize_user_fields({"email": "  John.DOE@Example.COM "}) == {
            "email": "john.doe@example.com"
        }

    def test_free_text_sanitized(self, user_fields):
        user_fields["first_name"] = "  <Ada>  "
        user_fields["country"] = " United Kingdom "

        normalized = normalize_user_fields(user_fields)

        assert normalized["first_name"] == "Ada"
        assert normalized["country"] == "United Kingdom"

    def test_blank_optional_fields_become_none(self):
        assert normalize_user_fields({"phone": "   ", "country": ""}) == {
            "phone": None,
            "country": None,
        }

    def test_omitted_fields_absent(self):
        assert normalize_user_fields({"last_name": "Smith"}) == {"last_name": "Smith"}

    def test_unknown_keys_dropped(self):
        normalized = normalize_user_fields(
            {"id": 99, "created_at": "2020-01-01", "first_name": "Bob"}
        )
        assert normalized == {"first_name": "Bob"}

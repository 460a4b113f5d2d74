"""Tests for short code generation and input checks."""

from shortlinks.utils.shortener import (
    LOCATIONS,
    create_short_url,
    generate_short_code,
    is_valid_url,
    is_valid_validity,
    pick_location,
    validate_short_code,
)


class TestShortenerLogic:
    """Tests for URL shortening logic functions."""

    def test_generate_short_code_default_length(self):
        """Generated codes default to six characters."""
        assert len(generate_short_code()) == 6

    def test_generate_short_code_length(self):
        """Test that generated short codes have correct length."""
        for length in [3, 6, 8, 10]:
            code = generate_short_code(length)
            assert len(code) == length

    def test_generated_codes_pass_format_validation(self):
        """Generated codes always satisfy the custom code format."""
        for _ in range(200):
            code = generate_short_code()
            assert code.isalnum()
            assert validate_short_code(code) is True

    def test_validate_short_code_valid(self):
        """Test validation of valid short codes."""
        valid_codes = ["abc", "abc123", "Abc123", "a1b2c3", "ABCDEFGHIJ", "0123456789"]
        for code in valid_codes:
            assert validate_short_code(code) is True

    def test_validate_short_code_invalid(self):
        """Test validation of invalid short codes."""
        invalid_codes = [
            "",
            "ab",  # too short
            "a" * 11,  # too long
            "abc@123",  # special chars
            "abc def",  # spaces
            "abc-123",  # hyphen
            "abc_12",  # underscore
            "abc123\n",  # trailing newline
            None,
            123456,
        ]
        for code in invalid_codes:
            assert validate_short_code(code) is False

    def test_is_valid_url(self):
        assert is_valid_url("https://example.com/a") is True
        assert is_valid_url("http://localhost:3001/path?q=1") is True
        assert is_valid_url("ftp://files.example.com/x.txt") is True

    def test_is_valid_url_rejects_relative_and_garbage(self):
        for url in ["", "   ", "not-a-valid-url", "/relative/path", "http://", None, 42]:
            assert is_valid_url(url) is False

    def test_is_valid_validity(self):
        for value in [1, 30, 0.5, 1440]:
            assert is_valid_validity(value) is True
        for value in [0, -1, -0.5, "x", "30", None, True, float("nan"), float("inf")]:
            assert is_valid_validity(value) is False

    def test_pick_location_uses_placeholder_labels(self):
        for _ in range(50):
            assert pick_location() in LOCATIONS

    def test_create_short_url(self):
        assert create_short_url("http://testserver/", "abc123") == "http://testserver/abc123"
        assert create_short_url("https://sho.rt", "xyz") == "https://sho.rt/xyz"

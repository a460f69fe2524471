"""Unit tests for cosmetic account and card numbers."""

import re

from voicebank.services.user import account_display_number, display_digits


class TestDisplayDigits:
    """Test the four-digit display number derivation."""

    def test_deterministic(self):
        assert display_digits("ada@example.com", "acc_1") == display_digits(
            "ada@example.com", "acc_1"
        )

    def test_always_four_digits(self):
        for i in range(200):
            digits = display_digits(f"user{i}@example.com", f"acc_{i}")
            assert 1000 <= int(digits) <= 9999

    def test_empty_input(self):
        """Test the hash of nothing folds to the lowest display number."""
        assert display_digits("", "") == "1000"

    def test_single_character(self):
        """Test one character hashes to its code point."""
        assert display_digits("a", "") == str(ord("a") + 1000)

    def test_masked_account_number(self):
        assert re.fullmatch(r"\*\*\*\* \d{4}", account_display_number("ada@example.com", "acc_1"))

"""
Unit tests for referral code helpers.
"""

from partner_engine.utils.referral_codes import (
    REFERRAL_CODE_ALPHABET,
    generate_referral_code,
    is_valid_referral_code_format,
    normalize_referral_code,
)


class TestReferralCodes:
    """Test generation, normalization and format checks."""

    def test_generated_code_shape(self):
        """8 characters from the alphabet, valid format."""
        code = generate_referral_code()
        assert len(code) == 8
        assert set(code) <= set(REFERRAL_CODE_ALPHABET)
        assert is_valid_referral_code_format(code)

    def test_alphabet_has_no_ambiguous_characters(self):
        """0, O and I are excluded."""
        assert not {"0", "O", "I"} & set(REFERRAL_CODE_ALPHABET)

    def test_normalize(self):
        """Whitespace trimmed, upper-cased."""
        assert normalize_referral_code("  ab12cd34 \n") == "AB12CD34"

    def test_format_length_bounds(self):
        """6 to 12 characters."""
        assert not is_valid_referral_code_format("ABCDE")
        assert is_valid_referral_code_format("ABCDEF")
        assert is_valid_referral_code_format("ABCDEFGHJKLM")
        assert not is_valid_referral_code_format("ABCDEFGHJKLMN")

    def test_format_rejects_foreign_characters(self):
        """Characters outside the alphabet are rejected."""
        assert not is_valid_referral_code_format("ABC0EF")
        assert not is_valid_referral_code_format("abcdef")
        assert not is_valid_referral_code_format("ABC-EF")

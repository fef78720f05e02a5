"""
Referral code helpers.

Codes use an alphabet without ambiguous characters (0, O, I).
"""

import secrets

REFERRAL_CODE_ALPHABET = "123456789ABCDEFGHJKLMNPQRSTUVWXYZ"
REFERRAL_CODE_LENGTH = 8
REFERRAL_CODE_MIN_LENGTH = 6
REFERRAL_CODE_MAX_LENGTH = 12


def generate_referral_code(length: int = REFERRAL_CODE_LENGTH) -> str:
    """
    Generate a random referral code.

    Args:
        length: Code length

    Returns:
        Random code from REFERRAL_CODE_ALPHABET
    """
    return "".join(
        secrets.choice(REFERRAL_CODE_ALPHABET) for _ in range(length)
    )


def normalize_referral_code(code: str) -> str:
    """Trim whitespace and uppercase."""
    return code.strip().upper()


def is_valid_referral_code_format(code: str) -> bool:
    """
    Check referral code format.

    Args:
        code: Normalized code

    Returns:
        True if 6-12 characters, all from the alphabet
    """
    if not REFERRAL_CODE_MIN_LENGTH <= len(code) <= REFERRAL_CODE_MAX_LENGTH:
        return False
    return all(ch in REFERRAL_CODE_ALPHABET for ch in code)

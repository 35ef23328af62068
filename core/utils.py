"""
Utility functions: input parsing and validation helpers.
"""

import re
from typing import Optional, Tuple

from .errors import ValidationError

SURAH_COUNT = 114

# Largest id an INTEGER column holds on every supported database
MAX_ID = 2**31 - 1

VERSE_KEY_PATTERN = re.compile(r"[0-9]+:[0-9]+")


def convert_arabic_digits(text: str) -> str:
    """
    Convert Arabic-Indic (٠-٩) and Persian (۰-۹) numerals to English (0-9).

    Args:
        text: Input string

    Returns:
        String with converted digits
    """
    trans = str.maketrans("٠١٢٣٤٥٦٧٨٩۰۱۲۳۴۵۶۷۸۹", "01234567890123456789")
    return text.translate(trans)


def safe_int(text, default=None) -> Optional[int]:
    """
    Safely parse integer from user input, handling Arabic digits.

    Args:
        text: User input string
        default: Default value if parsing fails

    Returns:
        Integer value or default
    """
    try:
        return int(convert_arabic_digits(str(text).strip()))
    except (ValueError, TypeError):
        return default


def is_verse_key(text: str) -> bool:
    """Return True if *text* is a "surah:verse" reference such as "2:255"."""
    return bool(VERSE_KEY_PATTERN.fullmatch(text))


def make_verse_key(surah_number: int, verse_number: int) -> str:
    return f"{surah_number}:{verse_number}"


def parse_verse_key(key: str) -> Tuple[int, int]:
    """
    Split a verse key into its surah and verse numbers.

    Args:
        key: Key in "surah:verse" form

    Returns:
        (surah_number, verse_number)

    Raises:
        ValidationError: If the key is malformed
    """
    if not key or not is_verse_key(key):
        raise ValidationError(
            "Invalid verse key format. Should be surah:verse (e.g., 2:255)"
        )
    surah, verse = key.split(":")
    return int(surah), int(verse)


def parse_surah_number(value) -> int:
    """
    Validate a surah number coming from a request.

    Raises:
        ValidationError: If the value is not an integer in 1..114
    """
    number = safe_int(value)
    if number is None or not 1 <= number <= SURAH_COUNT:
        raise ValidationError("Invalid surah number")
    return number


def parse_positive_int(value, message: str) -> int:
    """Parse an id-sized positive integer (1..MAX_ID) or raise ValidationError(message)."""
    number = safe_int(value)
    if number is None or not 1 <= number <= MAX_ID:
        raise ValidationError(message)
    return number

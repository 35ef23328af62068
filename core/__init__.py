"""
Core module: search engine, tajweed parser, reader settings and shared helpers.
"""

from .errors import (
    ConflictError,
    NotFoundError,
    QuranError,
    StorageError,
    UpstreamError,
    ValidationError,
)
from .search import LANGUAGES, MAX_RESULTS, normalize_language, search_verses
from .session import UserSession
from .settings import (
    DEFAULT_SETTINGS,
    SETTINGS_VERSION,
    ReaderSettings,
    migrate_settings,
    validate_settings,
)
from .tajweed import (
    TajweedRule,
    TajweedSpan,
    UnknownRule,
    lookup_rule,
    parse_tajweed,
    tokenize_tajweed,
)
from .utils import (
    convert_arabic_digits,
    is_verse_key,
    make_verse_key,
    parse_positive_int,
    parse_surah_number,
    parse_verse_key,
    safe_int,
)

__all__ = [
    # Errors
    "QuranError",
    "ValidationError",
    "NotFoundError",
    "ConflictError",
    "StorageError",
    "UpstreamError",
    # Search module
    "search_verses",
    "normalize_language",
    "LANGUAGES",
    "MAX_RESULTS",
    # Session
    "UserSession",
    # Settings module
    "ReaderSettings",
    "DEFAULT_SETTINGS",
    "SETTINGS_VERSION",
    "migrate_settings",
    "validate_settings",
    # Tajweed module
    "TajweedRule",
    "TajweedSpan",
    "UnknownRule",
    "lookup_rule",
    "parse_tajweed",
    "tokenize_tajweed",
    # Utils
    "convert_arabic_digits",
    "safe_int",
    "is_verse_key",
    "make_verse_key",
    "parse_verse_key",
    "parse_surah_number",
    "parse_positive_int",
]

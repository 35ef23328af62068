"""
Search module: Provides functionality for searching Quran verses.

The engine does not talk to the database itself. It is given a storage
object offering:

    get_verse_by_key(key) -> verse or None
    basic_search(query, language, surah_number, limit) -> list of verses
    supports_ranked_search() -> bool
    ranked_search(query, language, surah_number, limit) -> list of verses
    add_search_history(user_id, query)
"""

import logging
from typing import List, Optional

from .errors import StorageError, ValidationError
from .session import UserSession
from .utils import is_verse_key, parse_verse_key

logger = logging.getLogger(__name__)

LANGUAGES = ("arabic", "tajik", "both")
DEFAULT_LANGUAGE = "both"
MAX_RESULTS = 100


def normalize_language(language: Optional[str]) -> str:
    """
    Validate a language scope.

    Args:
        language: "arabic", "tajik", "both" or None (means "both")

    Returns:
        The language scope

    Raises:
        ValidationError: For any other value
    """
    if language is None or language == "":
        return DEFAULT_LANGUAGE
    if language not in LANGUAGES:
        raise ValidationError(
            f"Invalid language '{language}'. Expected one of: {', '.join(LANGUAGES)}"
        )
    return language


def search_verses(storage, query: Optional[str], language: Optional[str] = DEFAULT_LANGUAGE,
                  surah: Optional[int] = None, session: Optional[UserSession] = None,
                  limit: int = MAX_RESULTS) -> List:
    """
    Search for verses matching a free-text query.

    A "surah:verse" query (e.g. "2:255") resolves straight to that verse.
    Anything else is a substring search: case-sensitive over the Arabic text
    and case-insensitive over the Tajik translation, OR-ed across the
    requested languages and restricted to *surah* when given. Results come
    in surah/verse order, at most *limit* of them.

    Args:
        storage: Storage collaborator (see module docstring)
        query: Search query string
        language: Language scope
        surah: Optional surah number filter
        session: Reader the search is made for; its query is added to search history
        limit: Maximum number of results to return

    Returns:
        List of matching verses

    Raises:
        ValidationError: If the query is empty or the language is unknown
        StorageError: If the database is unavailable
    """
    if query is None or not query.strip():
        raise ValidationError("Search query is required")
    language = normalize_language(language)
    text = query.strip()

    if is_verse_key(text):
        results = _search_by_key(storage, text, surah)
    else:
        results = _search_text(storage, text, language, surah, limit)

    if session is not None and not session.is_anonymous:
        _record_history(storage, session.user_id, query)

    return results


def _search_by_key(storage, key: str, surah: Optional[int]) -> List:
    surah_number, _ = parse_verse_key(key)
    if surah is not None and surah != surah_number:
        return []
    verse = storage.get_verse_by_key(key)
    return [verse] if verse is not None else []


def _search_text(storage, query: str, language: str, surah: Optional[int], limit: int) -> List:
    if storage.supports_ranked_search():
        try:
            return storage.ranked_search(query, language, surah, limit)
        except StorageError as e:
            logger.warning(f"Ranked search failed for '{query}', using basic search: {e}")

    return storage.basic_search(query, language, surah, limit)


def _record_history(storage, user_id: int, query: str) -> None:
    try:
        storage.add_search_history(user_id, query)
    except Exception as e:
        logger.warning(f"Could not save search history for user {user_id}: {e}")

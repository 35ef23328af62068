"""
words.py — Word-by-word analysis of verses.

Stored analysis rows win. When a verse has none yet, its Arabic text is split
on whitespace into positioned words (no transliteration, translation or
grammar yet) and those rows are stored for next time.
"""
import logging

from core.errors import NotFoundError, StorageError
from core.utils import make_verse_key, parse_positive_int, parse_surah_number

logger = logging.getLogger(__name__)


def split_words(verse_id: int, arabic_text: str) -> list[dict]:
    """Basic word analysis data from Arabic text, one entry per word."""
    return [
        {
            "verse_id": verse_id,
            "word_position": position,
            "word_text": word,
            "transliteration": None,
            "translation": None,
            "root": None,
            "part_of_speech": None,
        }
        for position, word in enumerate(arabic_text.split(), 1)
    ]


def get_word_analysis(storage, surah, verse) -> list[dict]:
    """
    Word-by-word breakdown of a verse.

    Args:
        storage: Storage instance
        surah:   Surah number (1-114), as received.
        verse:   Verse number, as received.

    Returns:
        Word dicts ordered by word_position.

    Raises:
        ValidationError: If either number is invalid.
        NotFoundError:   If the verse does not exist.
    """
    surah_num = parse_surah_number(surah)
    verse_num = parse_positive_int(verse, "Invalid surah or verse number")

    key = make_verse_key(surah_num, verse_num)
    record = storage.get_verse_by_key(key)
    if record is None:
        raise NotFoundError("Verse not found")

    existing = storage.get_word_analysis(record.id)
    if existing:
        logger.debug(f"Returning existing word analysis for {key}")
        return [row.to_dict() for row in existing]

    words = split_words(record.id, record.arabic_text)
    try:
        rows = storage.add_word_analysis(words)
    except StorageError as e:
        logger.warning(f"Could not store word analysis for {key}: {e}")
        return [{"id": None, **word, "created_at": None} for word in words]

    logger.info(f"Stored {len(rows)} words for {key}")
    return [row.to_dict() for row in rows]

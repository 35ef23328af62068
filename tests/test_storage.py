import pytest
from sqlalchemy import func, select
from sqlalchemy.dialects import postgresql

from core.errors import ConflictError, NotFoundError, ValidationError
from database import Bookmark


def test_surahs_are_ordered_by_number(seeded):
    assert [surah.number for surah in seeded.get_all_surahs()] == [1, 2, 112]


def test_add_surahs_skips_existing(seeded):
    from conftest import SURAHS

    assert seeded.add_surahs(SURAHS) == 0
    assert len(seeded.get_all_surahs()) == 3


def test_verses_by_surah_are_ordered(seeded):
    surah = seeded.get_surah_by_number(2)
    verses = seeded.get_verses_by_surah(surah.id)
    assert [verse.verse_number for verse in verses] == [1, 2, 255]
    assert all(verse.unique_key == f"2:{verse.verse_number}" for verse in verses)


def test_add_verses_rejects_inconsistent_key(seeded):
    with pytest.raises(ValidationError):
        seeded.add_verses(2, [{"verse_number": 3, "arabic_text": "x", "tajik_text": "y",
                               "unique_key": "3:3"}])


def test_add_verses_for_unknown_surah(seeded):
    with pytest.raises(NotFoundError):
        seeded.add_verses(50, [{"verse_number": 1, "arabic_text": "x", "tajik_text": "y"}])


def test_get_verse_by_key(seeded):
    verse = seeded.get_verse_by_key("2:255")
    assert verse.verse_number == 255
    assert seeded.get_verse_by_key("2:999") is None


def test_bookmark_round_trip(seeded):
    verse = seeded.get_verse_by_key("2:255")
    bookmark = seeded.create_bookmark(1, verse.id)
    assert bookmark.id is not None
    assert bookmark.created_at is not None

    listed = seeded.get_bookmarks_by_user(1)
    assert [(b.id, v.unique_key) for b, v in listed] == [(bookmark.id, "2:255")]
    assert seeded.get_bookmarks_by_user(2) == []

    assert seeded.delete_bookmark(bookmark.id) is True
    assert seeded.get_bookmarks_by_user(1) == []
    assert seeded.delete_bookmark(bookmark.id) is False


def test_duplicate_bookmark_conflicts(seeded, engine):
    verse = seeded.get_verse_by_key("1:1")
    seeded.create_bookmark(5, verse.id)
    with pytest.raises(ConflictError):
        seeded.create_bookmark(5, verse.id)

    with engine.connect() as conn:
        count = conn.scalar(select(func.count()).select_from(Bookmark).where(Bookmark.user_id == 5))
    assert count == 1

    # another reader may bookmark the same verse
    seeded.create_bookmark(6, verse.id)


def test_bookmark_for_unknown_verse(seeded):
    with pytest.raises(NotFoundError):
        seeded.create_bookmark(1, 9999)


def test_search_history_newest_first(seeded):
    for query in ("раҳмат", "нур", "2:255"):
        seeded.add_search_history(3, query)
    seeded.add_search_history(4, "other")

    assert [entry.query for entry in seeded.get_search_history_by_user(3)] == ["2:255", "нур", "раҳмат"]
    assert len(seeded.get_search_history_by_user(3, limit=2)) == 2


def compile_for_postgres(stmt):
    return str(stmt.compile(dialect=postgresql.dialect()))


def test_ranked_statement_uses_full_text_match(storage):
    sql = compile_for_postgres(storage._ranked_statement("нур", "both", 2, 25))

    assert "plainto_tsquery" in sql
    assert "to_tsvector" in sql
    assert "@@" in sql
    assert "lower(verses.tajik_text)" in sql
    assert "surahs.number = " in sql
    assert "ORDER BY surahs.number, verses.verse_number" in sql
    assert "LIMIT" in sql


def test_ranked_statement_for_arabic_is_substring_only(storage):
    sql = compile_for_postgres(storage._ranked_statement("نور", "arabic", None, 25))

    assert "plainto_tsquery" not in sql
    assert "verses.arabic_text LIKE" in sql
    assert "surahs.number = " not in sql

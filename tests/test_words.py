import pytest

from core.errors import NotFoundError, StorageError, ValidationError
from storage import Storage
from words import get_word_analysis, split_words


def test_split_words_positions():
    words = split_words(10, "قُلْ  هُوَ اللَّهُ أَحَدٌ")
    assert [(w["word_position"], w["word_text"]) for w in words] == [
        (1, "قُلْ"), (2, "هُوَ"), (3, "اللَّهُ"), (4, "أَحَدٌ"),
    ]
    assert all(w["verse_id"] == 10 and w["translation"] is None for w in words)


def test_generated_analysis_is_stored(seeded):
    first = get_word_analysis(seeded, "112", "1")
    assert [w["word_text"] for w in first] == ["قُلْ", "هُوَ", "اللَّهُ", "أَحَدٌ"]
    assert all(w["id"] is not None for w in first)

    second = get_word_analysis(seeded, 112, 1)
    assert [w["id"] for w in second] == [w["id"] for w in first]


def test_stored_analysis_wins(seeded):
    verse = seeded.get_verse_by_key("2:1")
    seeded.add_word_analysis([
        {"verse_id": verse.id, "word_position": 1, "word_text": "الم",
         "transliteration": "alif-lam-mim", "translation": "Алиф. Лом. Мим."},
    ])
    words = get_word_analysis(seeded, 2, 1)
    assert words[0]["transliteration"] == "alif-lam-mim"


def test_store_failure_returns_generated_words(engine, seeded):
    class ReadOnly(Storage):
        def add_word_analysis(self, words):
            raise StorageError("read-only")

    words = get_word_analysis(ReadOnly(engine), 2, 2)
    assert words[0]["id"] is None
    assert words[0]["word_text"] == "ذَٰلِكَ"


def test_missing_verse(seeded):
    with pytest.raises(NotFoundError):
        get_word_analysis(seeded, 2, 300)


@pytest.mark.parametrize("surah, verse", [("abc", 1), (0, 1), (115, 1), (2, "x"), (2, 0)])
def test_invalid_numbers(seeded, surah, verse):
    with pytest.raises(ValidationError):
        get_word_analysis(seeded, surah, verse)

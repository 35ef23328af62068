import json

import pytest

from core.errors import ValidationError
from core.settings import DEFAULT_SETTINGS, SETTINGS_VERSION, ReaderSettings, migrate_settings


def test_missing_file_is_created_with_defaults(tmp_path):
    path = tmp_path / "reader" / "settings.json"
    settings = ReaderSettings(path)

    assert settings.data == DEFAULT_SETTINGS
    assert json.loads(path.read_text(encoding="utf-8"))["version"] == SETTINGS_VERSION


def test_set_and_reload(tmp_path):
    path = tmp_path / "settings.json"
    settings = ReaderSettings(path)
    settings.set_last_read(2, 255)
    settings.update({"theme": "dark", "display": {"wordByWordMode": True}})

    reloaded = ReaderSettings(path)
    assert reloaded.last_read() == {"surah": 2, "verse": 255}
    assert reloaded["theme"] == "dark"
    assert reloaded["display"] == {"tajweedMode": False, "wordByWordMode": True, "showTransliteration": True}


def test_corrupt_file_falls_back_to_defaults(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text("{not json", encoding="utf-8")
    assert ReaderSettings(path).data == DEFAULT_SETTINGS


def test_version_one_layout_is_migrated(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({
        "theme": "dark",
        "translator-preference": "ayati",
        "lastReadPosition": json.dumps({
            "surahNumber": 36, "surahName": "Ёсин", "verseNumber": 1, "verseKey": "36:1",
        }),
    }), encoding="utf-8")

    settings = ReaderSettings(path)
    assert settings["version"] == SETTINGS_VERSION
    assert settings["theme"] == "dark"
    assert settings.last_read() == {"surah": 36, "verse": 1}
    assert json.loads(path.read_text(encoding="utf-8"))["version"] == SETTINGS_VERSION


def test_migrate_keeps_display_defaults():
    migrated = migrate_settings({"version": 2, "display": {"tajweedMode": True}})
    assert migrated["display"] == {
        "tajweedMode": True,
        "wordByWordMode": False,
        "showTransliteration": True,
    }


def test_reset_does_not_share_defaults(tmp_path):
    settings = ReaderSettings(tmp_path / "settings.json")
    settings.update({"display": {"tajweedMode": True}})
    settings.reset()
    assert settings["display"]["tajweedMode"] is False
    assert DEFAULT_SETTINGS["display"]["tajweedMode"] is False


@pytest.mark.parametrize("display", [["tajweedMode"], "on", 1])
def test_malformed_display_falls_back_to_defaults(tmp_path, display):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"version": 2, "theme": "dark", "display": display}), encoding="utf-8")
    assert ReaderSettings(path).data == DEFAULT_SETTINGS


@pytest.mark.parametrize("updates", [
    {"version": 3},
    {"fontSize": 18},
    {"theme": "sepia"},
    {"translator": ""},
    {"display": ["tajweedMode"]},
    {"display": {"tajweedMode": "yes"}},
    {"display": {"nightMode": True}},
    {"lastRead": {"surah": 115, "verse": 1}},
    {"lastRead": {"surah": 2}},
])
def test_invalid_update_is_rejected_and_not_saved(tmp_path, updates):
    path = tmp_path / "settings.json"
    settings = ReaderSettings(path)

    with pytest.raises(ValidationError):
        settings.update(updates)
    assert settings.data == DEFAULT_SETTINGS
    assert ReaderSettings(path).data == DEFAULT_SETTINGS


def test_set_last_read_validates_position(tmp_path):
    settings = ReaderSettings(tmp_path / "settings.json")
    with pytest.raises(ValidationError):
        settings.set_last_read(0, 1)
    assert settings.last_read() is None

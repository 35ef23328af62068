"""
Settings management module: Handles reader preferences persisted by the client.

Version 1 was a flat set of browser storage keys (``theme``,
``translator-preference``, ``lastReadPosition``). Version 2 nests display
toggles and stores the last read position as an object.
"""

import copy
import json
from pathlib import Path
from typing import Any, Dict, Optional

from .errors import ValidationError
from .utils import parse_positive_int, parse_surah_number


SETTINGS_VERSION = 2

THEMES = ("light", "dark", "system")

DEFAULT_SETTINGS = {
    "version": SETTINGS_VERSION,
    "theme": "system",
    "translator": "ayati",
    "display": {
        "tajweedMode": False,
        "wordByWordMode": False,
        "showTransliteration": True,
    },
    "lastRead": None,  # {"surah": 2, "verse": 255}
}


def _defaults() -> Dict[str, Any]:
    return copy.deepcopy(DEFAULT_SETTINGS)


def migrate_settings(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Bring a settings dict up to SETTINGS_VERSION.

    Args:
        data: Settings as loaded from disk

    Returns:
        Settings in the current layout, unknown keys dropped
    """
    version = data.get("version", 1)
    if version == 1:
        data = _migrate_v1(data)

    result = _defaults()
    for key in ("theme", "translator", "lastRead"):
        if key in data:
            result[key] = data[key]
    display = data.get("display")
    if isinstance(display, dict):
        result["display"].update(display)
    return result


def _migrate_v1(data: Dict[str, Any]) -> Dict[str, Any]:
    migrated: Dict[str, Any] = {"version": 2}
    if "theme" in data:
        migrated["theme"] = data["theme"]
    if "translator-preference" in data:
        migrated["translator"] = data["translator-preference"]

    position = data.get("lastReadPosition")
    if isinstance(position, str):
        try:
            position = json.loads(position)
        except json.JSONDecodeError:
            position = None
    if isinstance(position, dict) and "surahNumber" in position:
        migrated["lastRead"] = {
            "surah": position.get("surahNumber"),
            "verse": position.get("verseNumber", 1),
        }
    return migrated


def validate_settings(updates: Dict[str, Any]) -> None:
    """
    Check a partial settings change against the version 2 layout.

    Raises:
        ValidationError: On unknown keys, a ``version`` change or a malformed value
    """
    for key, value in updates.items():
        if key not in DEFAULT_SETTINGS or key == "version":
            raise ValidationError(f"Unknown setting: {key}")

        if key == "theme" and value not in THEMES:
            raise ValidationError(f"Invalid theme: {value}")
        elif key == "translator" and not (isinstance(value, str) and value):
            raise ValidationError("Invalid translator")
        elif key == "display":
            if not isinstance(value, dict):
                raise ValidationError("Invalid display settings")
            for toggle, enabled in value.items():
                if toggle not in DEFAULT_SETTINGS["display"] or not isinstance(enabled, bool):
                    raise ValidationError(f"Invalid display setting: {toggle}")
        elif key == "lastRead" and value is not None:
            if not isinstance(value, dict) or set(value) != {"surah", "verse"}:
                raise ValidationError("Invalid last read position")
            parse_surah_number(value["surah"])
            parse_positive_int(value["verse"], "Invalid last read position")


class ReaderSettings:
    """Manages reader settings with file persistence."""

    def __init__(self, settings_file: Path):
        """
        Initialize settings from file or defaults.

        Args:
            settings_file: Path to settings.json file
        """
        self.settings_file = settings_file
        self.data = self._load_or_create()

    def _load_or_create(self) -> Dict[str, Any]:
        """Load settings from file or create with defaults."""
        if self.settings_file.exists():
            try:
                raw = json.loads(self.settings_file.read_text(encoding="utf-8"))
            except json.JSONDecodeError:
                # Corrupted file, use defaults
                return _defaults()
            if not isinstance(raw, dict) or not isinstance(raw.get("display") or {}, dict):
                return _defaults()
            data = migrate_settings(raw)
            if raw.get("version") != SETTINGS_VERSION:
                self._save(data)
            return data

        data = _defaults()
        self._save(data)
        return data

    def _save(self, data: Dict[str, Any]) -> None:
        """Save settings to file."""
        self.settings_file.parent.mkdir(parents=True, exist_ok=True)
        self.settings_file.write_text(
            json.dumps(data, indent=2, ensure_ascii=False),
            encoding="utf-8"
        )

    def update(self, updates: Dict[str, Any]) -> None:
        """
        Validate and apply changes, then save.

        ``display`` is merged into the current toggles rather than replacing them.

        Raises:
            ValidationError: If a key or value does not fit the current layout;
                nothing is applied in that case
        """
        validate_settings(updates)
        for key, value in updates.items():
            if key == "display":
                self.data["display"].update(value)
            else:
                self.data[key] = copy.deepcopy(value)
        self._save(self.data)

    def reset(self) -> None:
        """Reset settings to defaults."""
        self.data = _defaults()
        self._save(self.data)

    def last_read(self) -> Optional[Dict[str, int]]:
        return self.data.get("lastRead")

    def set_last_read(self, surah: int, verse: int) -> None:
        self.update({"lastRead": {"surah": surah, "verse": verse}})

    def __getitem__(self, key: str) -> Any:
        """Allow dict-like access."""
        return self.data[key]

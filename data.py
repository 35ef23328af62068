"""
data.py — Load Quran source files and import them into the database.

Sources:
  - surah metadata: JSON array of objects with number, name_arabic,
    name_tajik, name_english, revelation_type, verses_count (description optional)
  - verse text: Tanzil-style SQL dumps (quran-simple.sql, tg.ayati.sql)
"""
import json
import logging
import re
from collections import defaultdict
from pathlib import Path
from typing import Any

from config import AUDIO_API, DEFAULT_VOICE
from core.utils import make_verse_key

logger = logging.getLogger(__name__)

BATCH_SIZE = 50

SURAH_FIELDS = (
    "number", "name_arabic", "name_tajik", "name_english",
    "revelation_type", "verses_count", "description",
)


def load_surah_metadata(path: Path) -> list[dict[str, Any]]:
    """Load surah metadata from a JSON file."""
    raw = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(raw, list):
        raise ValueError(f"{path}: expected a JSON array of surahs")
    return [{field: entry.get(field) for field in SURAH_FIELDS} for entry in raw]


def _unescape_sql(text: str) -> str:
    return text.replace("\\'", "'").replace("''", "'").replace('\\"', '"')


def parse_sql_dump(text: str, table: str) -> dict[str, str]:
    """
    Extract verse text from a Tanzil SQL dump.

    Args:
        text:  Dump contents.
        table: Table name used in the INSERT statements (quran_text, tg_ayati).

    Returns:
        {"sura:aya": text} in dump order.
    """
    pattern = re.compile(
        rf"INSERT INTO `{re.escape(table)}` \(`index`, `sura`, `aya`, `text`\) VALUES\s*"
        r"\((\d+), (\d+), (\d+), '((?:[^'\\]|\\.|'')*)'\)"
    )
    verses = {}
    for match in pattern.finditer(text):
        _index, sura, aya, verse_text = match.groups()
        verses[make_verse_key(int(sura), int(aya))] = _unescape_sql(verse_text)
    return verses


def load_sql_dump(path: Path, table: str) -> dict[str, str]:
    return parse_sql_dump(Path(path).read_text(encoding="utf-8"), table)


def audio_url(voice: str, sura: int, aya: int) -> str:
    return f"{AUDIO_API}/{voice}/{sura:03d}{aya:03d}.mp3"


def import_quran(
    storage,
    surahs: list[dict[str, Any]],
    arabic: dict[str, str],
    tajik: dict[str, str],
    voice: str = DEFAULT_VOICE,
) -> dict[str, int]:
    """
    Insert surahs and verses; rows already present are left alone.

    Verses without a Tajik translation, or whose surah is not in *surahs*,
    are skipped with a warning.

    Returns:
        Counters: surahs, verses, skipped.
    """
    surahs_added = storage.add_surahs(surahs)
    logger.info(f"Imported {surahs_added} surah(s)")

    known = {s["number"] for s in surahs}
    by_surah: dict[int, list[dict]] = defaultdict(list)
    skipped = 0

    for key, arabic_text in arabic.items():
        sura, aya = (int(part) for part in key.split(":"))
        if sura not in known:
            logger.warning(f"Surah {sura} not found, skipping verse {key}")
            skipped += 1
            continue
        if key not in tajik:
            logger.warning(f"No Tajik translation for verse {key}, skipping")
            skipped += 1
            continue
        by_surah[sura].append({
            "verse_number": aya,
            "arabic_text": arabic_text,
            "tajik_text": tajik[key],
            "audio_url": audio_url(voice, sura, aya),
        })

    verses_added = 0
    for sura in sorted(by_surah):
        rows = sorted(by_surah[sura], key=lambda row: row["verse_number"])
        for start in range(0, len(rows), BATCH_SIZE):
            verses_added += storage.add_verses(sura, rows[start:start + BATCH_SIZE])
        logger.info(f"Processed Surah {sura} ({len(rows)} verses)")

    return {"surahs": surahs_added, "verses": verses_added, "skipped": skipped}

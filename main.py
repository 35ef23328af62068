#!/usr/bin/env python3
import logging
import sys

from config import HOST, LOG_LEVEL, PORT, RANKED_SEARCH

USAGE = """Tajik Quran API

Usage:
  python main.py serve                                   - Start the HTTP API
  python main.py init-db                                 - Create database tables
  python main.py import SURAHS.json ARABIC.sql TAJIK.sql - Import surahs and verses
"""


def setup_logging() -> None:
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=getattr(logging, LOG_LEVEL, logging.INFO),
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)


def serve() -> None:
    import uvicorn
    from api import create_app
    from database import init_db

    init_db()
    uvicorn.run(create_app(), host=HOST, port=PORT, log_level=LOG_LEVEL.lower())


def import_files(surahs_path: str, arabic_path: str, tajik_path: str) -> None:
    from data import import_quran, load_sql_dump, load_surah_metadata
    from database import init_db
    from storage import Storage

    init_db()
    counts = import_quran(
        Storage(ranked_search=RANKED_SEARCH),
        load_surah_metadata(surahs_path),
        load_sql_dump(arabic_path, "quran_text"),
        load_sql_dump(tajik_path, "tg_ayati"),
    )
    logging.getLogger(__name__).info(
        f"Import finished: {counts['surahs']} surahs, {counts['verses']} verses, "
        f"{counts['skipped']} skipped"
    )


def main():
    setup_logging()
    args = sys.argv[1:]

    if args == ["serve"]:
        serve()
    elif args == ["init-db"]:
        from database import init_db
        init_db()
        print("Database tables created")
    elif len(args) == 4 and args[0] == "import":
        import_files(*args[1:])
    else:
        print(USAGE)


if __name__ == "__main__":
    main()

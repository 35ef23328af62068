"""
database.py — SQLAlchemy models and session management for the Quran API.
"""
from datetime import datetime, timezone

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    create_engine,
    event,
)
from sqlalchemy.orm import declarative_base, relationship

from config import DATABASE_URL, DATA_DIR, DB_MAX_OVERFLOW, DB_POOL_SIZE

DATA_DIR.mkdir(parents=True, exist_ok=True)

Base = declarative_base()


def _utcnow():
    return datetime.now(timezone.utc)


def _isoformat(value):
    return value.isoformat() if value else None


class Surah(Base):
    __tablename__ = "surahs"
    __table_args__ = (
        CheckConstraint("revelation_type IN ('Meccan', 'Medinan')", name="ck_surahs_revelation_type"),
    )

    id              = Column(Integer, primary_key=True)
    number          = Column(Integer, unique=True, nullable=False)
    name_arabic     = Column(String, nullable=False)
    name_tajik      = Column(String, nullable=False)
    name_english    = Column(String, nullable=False)
    revelation_type = Column(String, nullable=False)
    verses_count    = Column(Integer, nullable=False)
    description     = Column(Text)

    verses = relationship("Verse", back_populates="surah")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "number": self.number,
            "name_arabic": self.name_arabic,
            "name_tajik": self.name_tajik,
            "name_english": self.name_english,
            "revelation_type": self.revelation_type,
            "verses_count": self.verses_count,
            "description": self.description,
        }


class Verse(Base):
    __tablename__ = "verses"
    __table_args__ = (
        UniqueConstraint("surah_id", "verse_number", name="uq_verses_surah_verse"),
    )

    id              = Column(Integer, primary_key=True)
    surah_id        = Column(Integer, ForeignKey("surahs.id"), nullable=False, index=True)
    verse_number    = Column(Integer, nullable=False)
    arabic_text     = Column(Text, nullable=False)
    tajik_text      = Column(Text, nullable=False)
    transliteration = Column(Text)
    translation     = Column(Text)
    tafsir          = Column(Text)
    page            = Column(Integer)
    juz             = Column(Integer)
    audio_url       = Column(String)
    unique_key      = Column(String, unique=True, nullable=False)  # "2:255"

    surah = relationship("Surah", back_populates="verses")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "surah_id": self.surah_id,
            "verse_number": self.verse_number,
            "arabic_text": self.arabic_text,
            "tajik_text": self.tajik_text,
            "transliteration": self.transliteration,
            "translation": self.translation,
            "tafsir": self.tafsir,
            "page": self.page,
            "juz": self.juz,
            "audio_url": self.audio_url,
            "unique_key": self.unique_key,
        }


class Bookmark(Base):
    __tablename__ = "bookmarks"
    __table_args__ = (
        UniqueConstraint("user_id", "verse_id", name="uq_bookmarks_user_verse"),
    )

    id         = Column(Integer, primary_key=True)
    user_id    = Column(Integer, nullable=False, index=True)
    verse_id   = Column(Integer, ForeignKey("verses.id"), nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "verse_id": self.verse_id,
            "created_at": _isoformat(self.created_at),
        }


class SearchHistory(Base):
    __tablename__ = "search_history"

    id         = Column(Integer, primary_key=True)
    user_id    = Column(Integer, nullable=False, index=True)
    query      = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "query": self.query,
            "created_at": _isoformat(self.created_at),
        }


class WordAnalysis(Base):
    __tablename__ = "word_analysis"
    __table_args__ = (
        UniqueConstraint("verse_id", "word_position", name="uq_word_analysis_verse_position"),
    )

    id              = Column(Integer, primary_key=True)
    verse_id        = Column(Integer, ForeignKey("verses.id"), nullable=False, index=True)
    word_position   = Column(Integer, nullable=False)
    word_text       = Column(Text, nullable=False)
    transliteration = Column(Text)
    translation     = Column(Text)
    root            = Column(String)
    part_of_speech  = Column(String)
    created_at      = Column(DateTime(timezone=True), default=_utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "verse_id": self.verse_id,
            "word_position": self.word_position,
            "word_text": self.word_text,
            "transliteration": self.transliteration,
            "translation": self.translation,
            "root": self.root,
            "part_of_speech": self.part_of_speech,
            "created_at": _isoformat(self.created_at),
        }


def _configure_sqlite(dbapi_connection, _connection_record):
    # SQLite's lower() only folds ASCII; Tajik search needs Cyrillic folding.
    dbapi_connection.create_function("lower", 1, lambda s: s.lower() if s is not None else None)
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA case_sensitive_like = ON")
    cursor.execute("PRAGMA foreign_keys = ON")
    cursor.close()


def make_engine(url: str = DATABASE_URL):
    """Create an engine for *url*; SQLite connections get Unicode-aware lower()."""
    if url.startswith("sqlite"):
        new_engine = create_engine(url, echo=False, connect_args={"check_same_thread": False})
        event.listen(new_engine, "connect", _configure_sqlite)
        return new_engine

    return create_engine(
        url,
        echo=False,
        pool_size=DB_POOL_SIZE,
        max_overflow=DB_MAX_OVERFLOW,
        pool_pre_ping=True,
    )


engine = make_engine()


def init_db(bind=None) -> None:
    Base.metadata.create_all(bind or engine)

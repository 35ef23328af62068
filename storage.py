"""
storage.py — Database access for surahs, verses, bookmarks, search history
and word analysis.

Every method opens its own short session; rows are returned detached with
their columns loaded. SQLAlchemy failures are logged and re-raised as
StorageError so callers can tell "database down" from "nothing found".
"""
import logging
from contextlib import contextmanager

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from core.errors import ConflictError, NotFoundError, StorageError, ValidationError
from core.search import MAX_RESULTS
from core.utils import make_verse_key
from database import Bookmark, SearchHistory, Surah, Verse, WordAnalysis

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 50


class Storage:
    """Storage access layer over the relational store."""

    def __init__(self, engine=None, ranked_search: bool = False):
        if engine is None:
            from database import engine as default_engine
            engine = default_engine
        self.engine = engine
        self._session_factory = sessionmaker(bind=engine, expire_on_commit=False)
        self._ranked_enabled = ranked_search
        self._ranked_supported = None

    @contextmanager
    def _session(self, operation: str):
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"Database error during {operation}: {e}")
            raise StorageError(f"Database error during {operation}") from e
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    # ------------------------------------------------------------------
    # Surahs
    # ------------------------------------------------------------------

    def get_all_surahs(self) -> list[Surah]:
        with self._session("get_all_surahs") as session:
            return list(session.scalars(select(Surah).order_by(Surah.number)))

    def get_surah_by_number(self, number: int) -> Surah | None:
        with self._session(f"get_surah_by_number({number})") as session:
            return session.scalars(select(Surah).where(Surah.number == number)).first()

    def add_surahs(self, surahs: list[dict]) -> int:
        """Insert surah metadata, skipping numbers already present. Returns rows added."""
        with self._session("add_surahs") as session:
            existing = set(session.scalars(select(Surah.number)))
            added = 0
            for data in surahs:
                if data["number"] in existing:
                    continue
                session.add(Surah(**data))
                existing.add(data["number"])
                added += 1
            return added

    # ------------------------------------------------------------------
    # Verses
    # ------------------------------------------------------------------

    def get_verses_by_surah(self, surah_id: int) -> list[Verse]:
        with self._session(f"get_verses_by_surah({surah_id})") as session:
            stmt = select(Verse).where(Verse.surah_id == surah_id).order_by(Verse.verse_number)
            return list(session.scalars(stmt))

    def get_verse_by_key(self, key: str) -> Verse | None:
        with self._session(f"get_verse_by_key({key})") as session:
            return session.scalars(select(Verse).where(Verse.unique_key == key)).first()

    def add_verses(self, surah_number: int, verses: list[dict]) -> int:
        """
        Insert verses of one surah, skipping keys already present.

        Each dict carries the Verse columns except ``surah_id``; ``unique_key``
        is derived when missing and must match surah and verse numbers.
        Returns the number of rows added.
        """
        with self._session(f"add_verses({surah_number})") as session:
            surah = session.scalars(select(Surah).where(Surah.number == surah_number)).first()
            if surah is None:
                raise NotFoundError(f"Surah {surah_number} not found")

            existing = set(session.scalars(select(Verse.unique_key).where(Verse.surah_id == surah.id)))
            added = 0
            for data in verses:
                key = make_verse_key(surah_number, data["verse_number"])
                if data.get("unique_key", key) != key:
                    raise ValidationError(f"Verse key {data['unique_key']} does not match {key}")
                if key in existing:
                    continue
                session.add(Verse(**{**data, "surah_id": surah.id, "unique_key": key}))
                existing.add(key)
                added += 1
            return added

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    def _search_conditions(self, query: str, language: str) -> list:
        conditions = []
        if language in ("arabic", "both"):
            conditions.append(Verse.arabic_text.contains(query, autoescape=True))
        if language in ("tajik", "both"):
            conditions.append(func.lower(Verse.tajik_text).contains(query.lower(), autoescape=True))
        return conditions

    def _search_statement(self, conditions: list, surah_number: int | None, limit: int):
        stmt = select(Verse).join(Surah, Verse.surah_id == Surah.id).where(or_(*conditions))
        if surah_number is not None:
            stmt = stmt.where(Surah.number == surah_number)
        return stmt.order_by(Surah.number, Verse.verse_number).limit(limit)

    def _ranked_statement(self, query: str, language: str, surah_number: int | None, limit: int):
        conditions = self._search_conditions(query, language)
        if language in ("tajik", "both"):
            tsquery = func.plainto_tsquery("simple", query)
            conditions.append(func.to_tsvector("simple", Verse.tajik_text).op("@@")(tsquery))
        return self._search_statement(conditions, surah_number, limit)

    def _run_search(self, operation: str, stmt) -> list[Verse]:
        with self._session(operation) as session:
            return list(session.scalars(stmt))

    def basic_search(self, query: str, language: str = "both", surah_number: int | None = None,
                     limit: int = MAX_RESULTS) -> list[Verse]:
        """Substring search: Arabic case-sensitive, Tajik case-insensitive."""
        return self._run_search(
            f"basic_search({query!r}, {language}, surah={surah_number})",
            self._search_statement(self._search_conditions(query, language), surah_number, limit),
        )

    def supports_ranked_search(self) -> bool:
        """Full-text search is available when enabled and the database is PostgreSQL."""
        if self._ranked_supported is None:
            self._ranked_supported = self._ranked_enabled and self.engine.dialect.name == "postgresql"
            logger.info(f"Ranked search {'enabled' if self._ranked_supported else 'disabled'}")
        return self._ranked_supported

    def ranked_search(self, query: str, language: str = "both", surah_number: int | None = None,
                      limit: int = MAX_RESULTS) -> list[Verse]:
        """
        PostgreSQL full-text match on the Tajik translation, OR-ed with the
        substring conditions of basic_search.
        """
        return self._run_search(
            f"ranked_search({query!r}, {language}, surah={surah_number})",
            self._ranked_statement(query, language, surah_number, limit),
        )

    # ------------------------------------------------------------------
    # Bookmarks
    # ------------------------------------------------------------------

    def get_bookmarks_by_user(self, user_id: int) -> list[tuple[Bookmark, Verse]]:
        stmt = (
            select(Bookmark, Verse)
            .join(Verse, Bookmark.verse_id == Verse.id)
            .where(Bookmark.user_id == user_id)
            .order_by(Bookmark.created_at.desc(), Bookmark.id.desc())
        )
        with self._session(f"get_bookmarks_by_user({user_id})") as session:
            return [(bookmark, verse) for bookmark, verse in session.execute(stmt)]

    def create_bookmark(self, user_id: int, verse_id: int) -> Bookmark:
        """
        Bookmark a verse for a user.

        Raises:
            NotFoundError: If the verse does not exist
            ConflictError: If the user already bookmarked the verse
        """
        with self._session(f"create_bookmark(user={user_id}, verse={verse_id})") as session:
            if session.get(Verse, verse_id) is None:
                raise NotFoundError("Verse not found")

            bookmark = Bookmark(user_id=user_id, verse_id=verse_id)
            session.add(bookmark)
            try:
                session.flush()
            except IntegrityError:
                raise ConflictError("Bookmark already exists") from None
            return bookmark

    def delete_bookmark(self, bookmark_id: int) -> bool:
        with self._session(f"delete_bookmark({bookmark_id})") as session:
            bookmark = session.get(Bookmark, bookmark_id)
            if bookmark is None:
                return False
            session.delete(bookmark)
            return True

    # ------------------------------------------------------------------
    # Search history
    # ------------------------------------------------------------------

    def add_search_history(self, user_id: int, query: str) -> SearchHistory:
        with self._session(f"add_search_history(user={user_id})") as session:
            entry = SearchHistory(user_id=user_id, query=query)
            session.add(entry)
            session.flush()
            return entry

    def get_search_history_by_user(self, user_id: int, limit: int = HISTORY_LIMIT) -> list[SearchHistory]:
        stmt = (
            select(SearchHistory)
            .where(SearchHistory.user_id == user_id)
            .order_by(SearchHistory.created_at.desc(), SearchHistory.id.desc())
            .limit(limit)
        )
        with self._session(f"get_search_history_by_user({user_id})") as session:
            return list(session.scalars(stmt))

    # ------------------------------------------------------------------
    # Word analysis
    # ------------------------------------------------------------------

    def get_word_analysis(self, verse_id: int) -> list[WordAnalysis]:
        stmt = (
            select(WordAnalysis)
            .where(WordAnalysis.verse_id == verse_id)
            .order_by(WordAnalysis.word_position)
        )
        with self._session(f"get_word_analysis({verse_id})") as session:
            return list(session.scalars(stmt))

    def add_word_analysis(self, words: list[dict]) -> list[WordAnalysis]:
        with self._session("add_word_analysis") as session:
            rows = [WordAnalysis(**word) for word in words]
            session.add_all(rows)
            session.flush()
            return sorted(rows, key=lambda row: row.word_position)

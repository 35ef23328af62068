"""
api.py — FastAPI application exposing the Quran data under /api.
"""
import logging
import re
import traceback

from fastapi import APIRouter, FastAPI, Query, Request, Response
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from starlette.concurrency import run_in_threadpool

from config import DEBUG, RANKED_SEARCH, SEARCH_RESULT_LIMIT
from core.errors import (
    ConflictError,
    NotFoundError,
    QuranError,
    StorageError,
    UpstreamError,
    ValidationError,
)
from core.search import search_verses
from core.session import UserSession
from core.tajweed import parse_tajweed
from core.utils import MAX_ID, parse_positive_int, parse_surah_number, parse_verse_key
from storage import Storage
from tajweed import TajweedClient
from words import get_word_analysis

logger = logging.getLogger(__name__)

AYAH_REF_PATTERN = re.compile(r"[0-9]+(:[0-9]+)?")

ERROR_STATUS = {
    ValidationError: 400,
    NotFoundError: 404,
    ConflictError: 409,
    StorageError: 500,
    UpstreamError: 500,
}

# Server-side failures never echo internal details
SERVER_MESSAGES = {
    StorageError: "Database error",
    UpstreamError: "Error fetching data from the content provider",
}


class BookmarkCreate(BaseModel):
    user_id: int = Field(gt=0, le=MAX_ID)
    verse_id: int = Field(gt=0, le=MAX_ID)


def _error_status(exc: QuranError) -> int:
    for error_type, status in ERROR_STATUS.items():
        if isinstance(exc, error_type):
            return status
    return 500


async def handle_quran_error(request: Request, exc: QuranError) -> JSONResponse:
    status = _error_status(exc)
    if status >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
        message = next(
            (text for error_type, text in SERVER_MESSAGES.items() if isinstance(exc, error_type)),
            "Internal server error",
        )
    else:
        message = str(exc)
    return JSONResponse(status_code=status, content={"message": message})


async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={"message": "Invalid request data", "errors": jsonable_encoder(exc.errors())},
    )


async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    content = {"message": "An unexpected error occurred"}
    if DEBUG:
        content["stack"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return JSONResponse(status_code=500, content=content)


def create_router(storage: Storage, tajweed_client: TajweedClient, result_limit: int) -> APIRouter:
    router = APIRouter(prefix="/api")

    @router.get("/health")
    async def health():
        return {"status": "ok"}

    # ── Surahs & verses ─────────────────────────────

    @router.get("/surahs")
    def list_surahs():
        return [surah.to_dict() for surah in storage.get_all_surahs()]

    @router.get("/surahs/{number}")
    def get_surah(number: str):
        surah = storage.get_surah_by_number(parse_surah_number(number))
        if surah is None:
            raise NotFoundError("Surah not found")
        return surah.to_dict()

    @router.get("/surahs/{number}/verses")
    def list_surah_verses(number: str):
        surah = storage.get_surah_by_number(parse_surah_number(number))
        if surah is None:
            raise NotFoundError("Surah not found")
        return [verse.to_dict() for verse in storage.get_verses_by_surah(surah.id)]

    @router.get("/verses/{key}")
    async def get_verse(key: str, tajweed: bool = False):
        surah_num, verse_num = parse_verse_key(key)
        verse = await run_in_threadpool(storage.get_verse_by_key, key)
        if verse is None:
            raise NotFoundError("Verse not found")

        result = verse.to_dict()
        if tajweed:
            text = await tajweed_client.get_ayah_text(surah_num, verse_num)
            result["tajweed"] = text is not None
            result["tajweed_html"] = parse_tajweed(text) if text else verse.arabic_text
        return result

    # ── Search ──────────────────────────────────────

    @router.get("/search")
    def search(
        q: str | None = None,
        language: str | None = None,
        surah: str | None = None,
        user_id: str | None = Query(None, alias="userId"),
    ):
        session = UserSession.from_param(user_id)
        surah_num = parse_surah_number(surah) if surah else None
        results = search_verses(storage, q, language, surah_num, session, limit=result_limit)
        return [verse.to_dict() for verse in results]

    @router.get("/search-history")
    def search_history(user_id: str | None = Query(None, alias="userId")):
        session = UserSession.from_param(user_id, required=True)
        return [entry.to_dict() for entry in storage.get_search_history_by_user(session.user_id)]

    # ── Bookmarks ───────────────────────────────────

    @router.get("/bookmarks")
    def list_bookmarks(user_id: str | None = Query(None, alias="userId")):
        session = UserSession.from_param(user_id, required=True)
        return [
            {"bookmark": bookmark.to_dict(), "verse": verse.to_dict()}
            for bookmark, verse in storage.get_bookmarks_by_user(session.user_id)
        ]

    @router.post("/bookmarks", status_code=201)
    def create_bookmark(body: BookmarkCreate):
        bookmark = storage.create_bookmark(body.user_id, body.verse_id)
        logger.info(f"User {body.user_id} bookmarked verse {body.verse_id}")
        return bookmark.to_dict()

    @router.delete("/bookmarks/{bookmark_id}", status_code=204)
    def delete_bookmark(bookmark_id: str):
        if not storage.delete_bookmark(parse_positive_int(bookmark_id, "Invalid bookmark ID")):
            raise NotFoundError("Bookmark not found")
        return Response(status_code=204)

    # ── Word analysis ───────────────────────────────

    @router.get("/word-analysis/{surah}/{verse}")
    def word_analysis(surah: str, verse: str):
        return get_word_analysis(storage, surah, verse)

    # ── Tajweed proxy ───────────────────────────────

    @router.get("/tajweed/ayah/{ref}")
    async def tajweed_ayah(ref: str):
        if not AYAH_REF_PATTERN.fullmatch(ref):
            raise ValidationError("Invalid ayah reference")
        return await tajweed_client.fetch_ayah(ref)

    @router.get("/tajweed/surah/{number}")
    async def tajweed_surah(number: str):
        return await tajweed_client.fetch_surah(parse_surah_number(number))

    return router


def create_app(
    storage: Storage | None = None,
    tajweed_client: TajweedClient | None = None,
    result_limit: int = SEARCH_RESULT_LIMIT,
) -> FastAPI:
    """Build the application; collaborators default to the configured database and provider."""
    storage = storage or Storage(ranked_search=RANKED_SEARCH)
    tajweed_client = tajweed_client or TajweedClient()

    app = FastAPI(title="Tajik Quran", description="Bilingual Arabic/Tajik Quran API")
    app.state.storage = storage
    app.state.tajweed_client = tajweed_client

    app.add_exception_handler(QuranError, handle_quran_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation)
    app.add_exception_handler(Exception, handle_unexpected)

    app.include_router(create_router(storage, tajweed_client, result_limit))
    return app

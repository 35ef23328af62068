from urllib.parse import unquote

import httpx
import pytest
from fastapi.testclient import TestClient

from api import create_app
from database import init_db, make_engine
from storage import Storage
from tajweed import TajweedClient

SURAHS = [
    {"number": 1, "name_arabic": "الفاتحة", "name_tajik": "Фотиҳа", "name_english": "Al-Fatihah",
     "revelation_type": "Meccan", "verses_count": 7},
    {"number": 2, "name_arabic": "البقرة", "name_tajik": "Бақара", "name_english": "Al-Baqarah",
     "revelation_type": "Medinan", "verses_count": 286},
    {"number": 112, "name_arabic": "الإخلاص", "name_tajik": "Ихлос", "name_english": "Al-Ikhlas",
     "revelation_type": "Meccan", "verses_count": 4},
]

FATIHA = [
    {"verse_number": 1, "arabic_text": "بِسْمِ اللَّهِ الرَّحْمَٰنِ الرَّحِيمِ",
     "tajik_text": "Ба номи Аллоҳи бахшояндаи меҳрубон."},
    {"verse_number": 2, "arabic_text": "الْحَمْدُ لِلَّهِ رَبِّ الْعَالَمِينَ",
     "tajik_text": "Ситоиш махсуси Аллоҳ аст, ки парвардигори ҷаҳониён аст."},
]

BAQARAH = [
    {"verse_number": 1, "arabic_text": "الم", "tajik_text": "Алиф. Лом. Мим."},
    {"verse_number": 2, "arabic_text": "ذَٰلِكَ الْكِتَابُ لَا رَيْبَ ۛ فِيهِ ۛ هُدًى لِّلْمُتَّقِينَ",
     "tajik_text": "Ин китоб, ки дар он ҳеҷ шакке нест, роҳнамои парҳезгорон аст."},
    {"verse_number": 255, "arabic_text": "اللَّهُ لَا إِلَٰهَ إِلَّا هُوَ الْحَيُّ الْقَيُّومُ",
     "tajik_text": "АЛЛОҲ, ки ҳеҷ худое ҷуз Ӯ нест, зиндаву пояндаву нигаҳбон аст."},
]

IKHLAS = [
    {"verse_number": 1, "arabic_text": "قُلْ هُوَ اللَّهُ أَحَدٌ",
     "tajik_text": "Бигӯ: «Ӯ Аллоҳи якто аст."},
]

TAJWEED_AYAH = "[h:1[ٱ]للَّهُ لَآ إِلَٰهَ إِلَّا هُوَ [l[ل]"


def upstream_handler(request: httpx.Request) -> httpx.Response:
    path = unquote(request.url.path)
    if path.endswith("/ayah/2:255/quran-tajweed"):
        return httpx.Response(200, json={
            "code": 200, "status": "OK",
            "data": {"number": 262, "text": TAJWEED_AYAH, "edition": {"identifier": "quran-tajweed"}},
        })
    if path.endswith("/surah/1/quran-tajweed"):
        return httpx.Response(200, json={
            "code": 200, "status": "OK",
            "data": {"number": 1, "ayahs": [{"numberInSurah": 1, "text": "[h:1[ٱ]"}]},
        })
    return httpx.Response(404, json={"code": 404, "status": "NOT FOUND", "data": "Not found"})


def failing_handler(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("upstream unreachable", request=request)


@pytest.fixture
def engine(tmp_path):
    engine = make_engine(f"sqlite:///{tmp_path / 'test.db'}")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def storage(engine):
    return Storage(engine)


@pytest.fixture
def seeded(storage):
    storage.add_surahs(SURAHS)
    storage.add_verses(1, FATIHA)
    storage.add_verses(2, BAQARAH)
    storage.add_verses(112, IKHLAS)
    return storage


@pytest.fixture
def tajweed_client():
    return TajweedClient(base_url="https://api.test/v1", transport=httpx.MockTransport(upstream_handler))


@pytest.fixture
def client(seeded, tajweed_client):
    app = create_app(storage=seeded, tajweed_client=tajweed_client)
    with TestClient(app) as test_client:
        yield test_client

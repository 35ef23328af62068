import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()

BASE_DIR = Path(__file__).parent
DATA_DIR = BASE_DIR / "data"

DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{DATA_DIR / 'quran.db'}")
DB_POOL_SIZE = int(os.getenv("DB_POOL_SIZE", "10"))
DB_MAX_OVERFLOW = int(os.getenv("DB_MAX_OVERFLOW", "5"))

# Full-text search is only attempted on PostgreSQL
RANKED_SEARCH = os.getenv("RANKED_SEARCH", "").lower() in ("1", "true", "yes")
SEARCH_RESULT_LIMIT = int(os.getenv("SEARCH_RESULT_LIMIT", "100"))

QURAN_API = os.getenv("QURAN_API", "https://api.alquran.cloud/v1")
TAJWEED_EDITION = os.getenv("TAJWEED_EDITION", "quran-tajweed")
QURAN_API_TOKEN = os.getenv("QURAN_API_TOKEN", "")
UPSTREAM_TIMEOUT = float(os.getenv("UPSTREAM_TIMEOUT", "10"))

AUDIO_API = "https://everyayah.com/data"
DEFAULT_VOICE = os.getenv("DEFAULT_VOICE", "Alafasy_64kbps")

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "5000"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
DEBUG = os.getenv("DEBUG", "").lower() in ("1", "true", "yes")

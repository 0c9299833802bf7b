"""Application configuration and constants."""
import os
from pathlib import Path


def _parse_int_env(name: str, default: int) -> int:
    """Parse integer from environment variable."""
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


# Database
DB_DIR = Path(os.environ.get("DB_DIR", Path.cwd() / "data"))
DB_DIR.mkdir(parents=True, exist_ok=True)
DATABASE_URL = os.environ.get(
    "DATABASE_URL", f"sqlite:///{DB_DIR / 'assessments.db'}"
)

# Legacy key-value store (read once, deleted after migration)
LEGACY_STORE_DIR = Path(
    os.environ.get("LEGACY_STORE_DIR", Path.cwd() / "data" / "legacy")
)
ASSESSMENTS_LEGACY_KEY = "ASSESSMENTS_STORAGE_V1"
SESSIONS_LEGACY_KEY = "ASSESSMENT_SESSIONS_V1"

# Remote documents
ASSESSMENTS_STATE_PATH = "/assessments/state"
ASSESSMENTS_SESSIONS_PATH = "/assessments/sessions"
PURCHASES_PATH = "/purchases"
COURSES_PATH = "/courses"
LESSONS_PATH = "/lessons"

# Document cache
DOCUMENT_CACHE_TTL_MS = _parse_int_env("DOCUMENT_CACHE_TTL_MS", 1_500)
MAX_DOCUMENT_CACHE_TTL_MS = 20_000

# Sessions
ASSESSMENT_SESSION_TTL_DAYS = _parse_int_env("ASSESSMENT_SESSION_TTL_DAYS", 14)

# Course content
DEFAULT_BLOCK_TITLE = os.environ.get("DEFAULT_BLOCK_TITLE", "Course materials")

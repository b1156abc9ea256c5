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


def _parse_float_env(name: str, default: float) -> float:
    """Parse float from environment variable."""
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


# Database
DB_DIR = Path(os.environ.get("DB_DIR", Path.cwd() / "data"))
DB_DIR.mkdir(parents=True, exist_ok=True)
DATABASE_URL = os.environ.get(
    "DATABASE_URL", f"sqlite:///{DB_DIR / 'examprep.db'}"
)

# Logging
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

# Exams
DEFAULT_MARKS_PER_QUESTION = _parse_float_env("DEFAULT_MARKS_PER_QUESTION", 2.0)
DEFAULT_DURATION_MINUTES = _parse_int_env("DEFAULT_DURATION_MINUTES", 60)
TIMER_TICK_SECONDS = _parse_float_env("TIMER_TICK_SECONDS", 1.0)

# Share of the per-question marks deducted for a wrong answer, by exam type.
# Exam types not listed here have no negative marking.
NEGATIVE_MARKING_FRACTIONS: dict[str, float] = {
    "UPSC": 1 / 3,
    "MPSC": 1 / 4,
    "NEET": 1 / 4,
}

# Results
LEADERBOARD_LIMIT = _parse_int_env("LEADERBOARD_LIMIT", 50)

# In-memory attempts
SUBMITTED_ATTEMPT_RETENTION_SECONDS = _parse_int_env(
    "SUBMITTED_ATTEMPT_RETENTION_SECONDS", 60 * 60
)
ATTEMPTS_CLEANUP_INTERVAL_SECONDS = _parse_int_env(
    "ATTEMPTS_CLEANUP_INTERVAL_SECONDS", 10 * 60
)

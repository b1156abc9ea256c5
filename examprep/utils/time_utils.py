"""Time utilities."""
from datetime import datetime, timezone


def utc_now() -> str:
    """Get current UTC timestamp as ISO string."""
    return datetime.now(timezone.utc).isoformat()


def parse_iso_timestamp(value: object) -> datetime | None:
    """Parse ISO timestamp string to datetime."""
    if not isinstance(value, str):
        return None
    raw = value.strip()
    if not raw:
        return None
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(raw)
    except ValueError:
        return None


def format_time_taken(seconds: int) -> str:
    """Format elapsed seconds as 'Hh Mm' (minutes rounded)."""
    minutes = round(max(seconds, 0) / 60)
    return f"{minutes // 60}h {minutes % 60}m"


def format_clock(seconds: int) -> str:
    """Format a countdown as HH:MM:SS."""
    seconds = max(seconds, 0)
    hours, rest = divmod(seconds, 3600)
    mins, secs = divmod(rest, 60)
    return f"{hours:02d}:{mins:02d}:{secs:02d}"

"""Service for cleanup operations."""
import logging
import threading
import time

from examprep.config import (
    ATTEMPTS_CLEANUP_INTERVAL_SECONDS,
    SUBMITTED_ATTEMPT_RETENTION_SECONDS,
)
from examprep.services.attempt_service import discard_submitted_attempts

logger = logging.getLogger(__name__)


def cleanup_submitted_attempts() -> int:
    """Remove submitted attempts whose review window has passed."""
    if SUBMITTED_ATTEMPT_RETENTION_SECONDS <= 0:
        return 0

    try:
        removed = discard_submitted_attempts(SUBMITTED_ATTEMPT_RETENTION_SECONDS)
        if removed > 0:
            logger.info(f"Cleaned up {removed} submitted attempts")
        return removed
    except Exception as e:
        logger.error(f"Failed to cleanup submitted attempts: {e}")
        return 0


def schedule_attempts_cleanup(
    interval_seconds: int = ATTEMPTS_CLEANUP_INTERVAL_SECONDS,
) -> threading.Thread:
    """Schedule periodic cleanup of submitted attempts."""
    def _worker() -> None:
        while True:
            time.sleep(interval_seconds)
            cleanup_submitted_attempts()

    thread = threading.Thread(
        target=_worker,
        name="attempts_cleanup",
        daemon=True,
    )
    thread.start()
    return thread

"""Service for cleanup operations."""
import logging
import threading

from api.config import SESSION_CLEANUP_INTERVAL_SECONDS
from api.database import SessionLocal
from api.services.auth_service import cleanup_expired_sessions

logger = logging.getLogger(__name__)

# Delay before the first run so startup is not slowed down
INITIAL_DELAY_SECONDS = 60


def purge_expired_sessions() -> int:
    """Remove expired login sessions from database."""
    try:
        db = SessionLocal()
        try:
            deleted = cleanup_expired_sessions(db)
            if deleted > 0:
                logger.info("Cleaned up %s expired sessions", deleted)
            return deleted
        finally:
            db.close()
    except Exception:
        logger.exception("Failed to cleanup expired sessions")
        return 0


def schedule_session_cleanup(
    interval: float = SESSION_CLEANUP_INTERVAL_SECONDS,
    initial_delay: float = INITIAL_DELAY_SECONDS,
    stop_event: threading.Event | None = None,
) -> threading.Thread:
    """Schedule periodic cleanup of expired sessions on a daemon thread."""
    stop_event = stop_event or threading.Event()

    def _worker() -> None:
        if stop_event.wait(initial_delay):
            return
        while True:
            purge_expired_sessions()
            if stop_event.wait(interval):
                return

    thread = threading.Thread(
        target=_worker,
        name="sessions_cleanup",
        daemon=True,
    )
    thread.start()
    return thread

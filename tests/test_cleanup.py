import threading
from datetime import datetime, timedelta, timezone

from api.services import cleanup_service
from api.services.auth_service import (
    cleanup_expired_sessions,
    create_session,
    get_active_session,
)


def test_cleanup_removes_only_expired_sessions(db, make_user) -> None:
    user = make_user("carol")
    now = datetime.now(timezone.utc)
    create_session(db, user.id, "old", now - timedelta(minutes=5))
    create_session(db, user.id, "fresh", now + timedelta(minutes=5))

    assert cleanup_expired_sessions(db) == 1
    assert get_active_session(db, "fresh") is not None
    assert get_active_session(db, "old") is None


def test_scheduled_cleanup_runs_until_stopped(monkeypatch) -> None:
    ran = threading.Event()
    calls = []

    def fake_purge() -> int:
        calls.append(1)
        ran.set()
        return 0

    monkeypatch.setattr(cleanup_service, "purge_expired_sessions", fake_purge)
    stop = threading.Event()
    thread = cleanup_service.schedule_session_cleanup(
        interval=0.01, initial_delay=0, stop_event=stop
    )

    assert ran.wait(5)
    stop.set()
    thread.join(5)
    assert not thread.is_alive()
    assert thread.daemon
    assert calls

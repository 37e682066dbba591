"""Live session registry.

Keeps one cluequest.Session per running playthrough, keyed by session id.
After every successful action the progress snapshot is written to storage
(when persist_sessions is on), so sessions survive a restart and are
restored lazily on first access. Ending a session stores its outcome as a
result and discards the live session and its snapshot.
"""

import logging
import threading
import time
import uuid

from cluequest import NotFoundError, Session
from cluequest.actions import Action, EndSession, SessionOutcome
from cluequest.models import SessionProgress
from cluequest.session import Clock

from backend import storage

logger = logging.getLogger(__name__)

_sessions: dict[str, Session] = {}
_registry_lock = threading.RLock()
_clock: Clock = time.time


def set_clock(clock: Clock) -> None:
    """Replace the clock used for new and restored sessions (used in tests)."""
    global _clock
    _clock = clock


def reset() -> None:
    """Forget all live sessions (storage is left untouched)."""
    with _registry_lock:
        _sessions.clear()


def _persist(session: Session) -> None:
    if storage.get_config()["persist_sessions"]:
        storage.save_session(session.snapshot())


def _restore(session_id: str) -> Session | None:
    snapshot = storage.get_session(session_id)
    if snapshot is None:
        return None
    if storage.get_result(session_id) is not None:
        logger.warning("stale snapshot for finished session id=%s", session_id)
        storage.delete_session(session_id)
        return None
    progress = SessionProgress.model_validate(snapshot)
    catalog = storage.get_catalog(progress.adventure_id)
    if catalog is None:
        raise NotFoundError("adventure", progress.adventure_id)
    logger.info("session restored id=%s adventure=%s", session_id, progress.adventure_id)
    return Session.restore(catalog, progress, _clock)


def start_session(adventure_id: str, players: list[str]) -> Session:
    catalog = storage.get_catalog(adventure_id)
    if catalog is None:
        raise NotFoundError("adventure", adventure_id)
    config = storage.get_config()
    session = Session.start(
        catalog,
        uuid.uuid4().hex,
        players,
        hint_tokens=config["hint_token_budget"],
        clock=_clock,
    )
    with _registry_lock:
        _sessions[session.id] = session
    _persist(session)
    return session


def get_session(session_id: str) -> Session:
    with _registry_lock:
        session = _sessions.get(session_id)
        if session is None:
            session = _restore(session_id)
            if session is None:
                raise NotFoundError("session", session_id)
            _sessions[session_id] = session
    return session


def apply_action(session_id: str, action: Action):
    """Run one action against a live session and snapshot the result."""
    if isinstance(action, EndSession):
        return end_session(session_id)
    session = get_session(session_id)
    with session.lock:
        result = session.apply(action)
        _persist(session)
    return result


def fail_scene(session_id: str, scene_id: str) -> Session:
    session = get_session(session_id)
    with session.lock:
        session.fail_scene(scene_id)
        _persist(session)
    return session


def end_session(session_id: str) -> SessionOutcome:
    session = get_session(session_id)
    with session.lock:
        outcome = session.end()
        storage.save_result(outcome.model_dump(mode="json"))
        # Snapshot goes before the live entry so a lookup never restores it.
        with _registry_lock:
            storage.delete_session(session_id)
            _sessions.pop(session_id, None)
    return outcome

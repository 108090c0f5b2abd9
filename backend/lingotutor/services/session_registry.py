from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime, timedelta

from lingotutor.models.review import SessionState, SessionStatus

logger = logging.getLogger(__name__)

_sessions: dict[str, SessionState] = {}
_rating_locks: dict[str, asyncio.Lock] = {}


class SessionNotFound(Exception):
    """No live session with this id belongs to the caller."""


class RatingInProgress(Exception):
    """Another rating for the same session has not been acknowledged yet."""


def save_session(session: SessionState) -> SessionState:
    """Keep a live session. A complete session is dropped instead of stored."""
    if session.status == SessionStatus.COMPLETE:
        discard_session(session.id)
        return session
    _sessions[session.id] = session
    _rating_locks.setdefault(session.id, asyncio.Lock())
    return session


def get_session(session_id: str, user_id: str) -> SessionState:
    """Look up a live session. Sessions of other users are reported as missing."""
    session = _sessions.get(session_id)
    if session is None or session.user_id != user_id:
        raise SessionNotFound(session_id)
    return session


def discard_session(session_id: str) -> bool:
    _rating_locks.pop(session_id, None)
    if _sessions.pop(session_id, None) is None:
        return False
    logger.info("Review session %s discarded", session_id)
    return True


def expire_sessions(now: datetime, max_age: timedelta) -> int:
    """Drop sessions started before `now - max_age`. Returns how many went."""
    cutoff = now - max_age
    stale = [sid for sid, s in _sessions.items() if s.started_at < cutoff]
    for session_id in stale:
        discard_session(session_id)
    if stale:
        logger.info("Expired %d abandoned review session(s)", len(stale))
    return len(stale)


def session_count() -> int:
    return len(_sessions)


@asynccontextmanager
async def rating_slot(session_id: str) -> AsyncIterator[None]:
    """Hold the session's rating lock; a second concurrent rating is rejected."""
    lock = _rating_locks.setdefault(session_id, asyncio.Lock())
    if lock.locked():
        raise RatingInProgress(session_id)
    async with lock:
        yield


def clear_sessions() -> None:
    _sessions.clear()
    _rating_locks.clear()

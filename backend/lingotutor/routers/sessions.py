"""
Flashcard review session router.

Endpoints:
  POST   /sessions              — start a session over the words due now
  GET    /sessions/{id}         — session state and current word
  POST   /sessions/{id}/rate    — rate the current word, advance
  POST   /sessions/{id}/reset   — start over with a fresh due-word query
  DELETE /sessions/{id}         — abandon the session
"""
from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

from fastapi import APIRouter, Depends, HTTPException

from lingotutor.config import settings
from lingotutor.db.store import SqliteVocabularyStore, get_store
from lingotutor.dependencies import get_user_id
from lingotutor.models.review import (
    RateRequest,
    RateResult,
    SessionStart,
    SessionState,
    SessionView,
)
from lingotutor.services import session_registry
from lingotutor.services.review_session import (
    DataUnavailable,
    OutOfRange,
    apply_persist_ops,
    rate_current_item,
    reset_session,
    start_session,
)
from lingotutor.services.session_registry import RatingInProgress, SessionNotFound

logger = logging.getLogger(__name__)
router = APIRouter()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _load(session_id: str, user_id: str) -> SessionState:
    try:
        return session_registry.get_session(session_id, user_id)
    except SessionNotFound:
        raise HTTPException(status_code=404, detail="Session not found")


@router.post("/", response_model=SessionView, status_code=201)
async def create_session(
    body: SessionStart,
    user_id: str = Depends(get_user_id),
    store: SqliteVocabularyStore = Depends(get_store),
) -> SessionView:
    now = _utcnow()
    session_registry.expire_sessions(now, timedelta(minutes=settings.session_ttl_minutes))
    try:
        session = await start_session(store, user_id, body.language, now)
    except DataUnavailable:
        raise HTTPException(status_code=503, detail="Vocabulary unavailable, try again")
    # complete sessions are returned but not kept
    session_registry.save_session(session)
    return SessionView.of(session)


@router.get("/{session_id}", response_model=SessionView)
async def get_session(
    session_id: str,
    user_id: str = Depends(get_user_id),
) -> SessionView:
    return SessionView.of(_load(session_id, user_id))


@router.post("/{session_id}/rate", response_model=RateResult)
async def rate(
    session_id: str,
    body: RateRequest,
    user_id: str = Depends(get_user_id),
    store: SqliteVocabularyStore = Depends(get_store),
) -> RateResult:
    """Rate the current word. Write failures are reported, the session advances anyway.

    The rating that completes a session also removes it; later calls get 404.
    """
    _load(session_id, user_id)
    try:
        async with session_registry.rating_slot(session_id):
            session = _load(session_id, user_id)
            updated, ops, schedule = rate_current_item(
                session, body.difficulty, _utcnow()
            )
            session_registry.save_session(updated)
            failures = await apply_persist_ops(store, ops)
    except RatingInProgress:
        raise HTTPException(status_code=409, detail="A rating is already in progress")
    except OutOfRange:
        raise HTTPException(status_code=409, detail="Session has no card left to rate")

    if failures:
        logger.warning(
            "Session %s advanced with %d unsaved write(s)", session_id, len(failures)
        )
    return RateResult(
        session=updated,
        current_item=updated.current_item,
        schedule=schedule,
        persist_errors=failures,
    )


@router.post("/{session_id}/reset", response_model=SessionView)
async def reset(
    session_id: str,
    user_id: str = Depends(get_user_id),
    store: SqliteVocabularyStore = Depends(get_store),
) -> SessionView:
    session = _load(session_id, user_id)
    try:
        fresh = await reset_session(store, session, _utcnow())
    except DataUnavailable:
        raise HTTPException(status_code=503, detail="Vocabulary unavailable, try again")
    session_registry.save_session(fresh)
    return SessionView.of(fresh)


@router.delete("/{session_id}", status_code=204)
async def abandon(
    session_id: str,
    user_id: str = Depends(get_user_id),
) -> None:
    _load(session_id, user_id)
    session_registry.discard_session(session_id)

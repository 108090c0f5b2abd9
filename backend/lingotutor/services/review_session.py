"""
Flashcard review sessions.

A session is a fixed queue of due words (at most `settings.session_size`),
rated one at a time:

  start_session      query due words, build the queue           -> SessionState
  rate_current_item  schedule the current word, advance          -> (SessionState, [PersistOp])
  apply_persist_ops  write the scheduler result and review record -> [PersistFailure]
  reset_session      throw the state away and start again

SessionState is a value: rate_current_item never mutates its input, so the
caller decides where the state lives. Persistence is optimistic: a failed
write is logged and reported, but the session has already advanced.
"""
from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Any, Protocol

from lingotutor.config import settings
from lingotutor.db.store import StoreError
from lingotutor.models.review import (
    Difficulty,
    ItemUpdate,
    PersistFailure,
    PersistOp,
    ReviewEventInsert,
    ReviewSchedule,
    SessionState,
    SessionStatus,
)
from lingotutor.models.vocabulary import VocabularyItem
from lingotutor.services.scheduler import compute_next_review

logger = logging.getLogger(__name__)


class DataUnavailable(Exception):
    """The due-word query failed; no session was started."""


class OutOfRange(Exception):
    """A rating arrived with no current word (session complete or empty)."""


class VocabularyStore(Protocol):
    async def query_due(
        self, user_id: str, language: str, now: datetime, limit: int
    ) -> list[VocabularyItem]: ...

    async def update_item(self, item_id: str, fields: dict[str, Any]) -> None: ...


class ReviewEventSink(Protocol):
    async def insert_event(
        self, item_id: str, user_id: str, difficulty: Difficulty
    ) -> None: ...


class SessionStore(VocabularyStore, ReviewEventSink, Protocol):
    pass


async def start_session(
    store: VocabularyStore,
    user_id: str,
    language: str,
    now: datetime,
    limit: int | None = None,
    session_id: str | None = None,
) -> SessionState:
    """Build a review queue of due words. Raises DataUnavailable."""
    session = SessionState(
        id=session_id or str(uuid.uuid4()),
        user_id=user_id,
        language=language,
        started_at=now,
    )
    try:
        queue = await store.query_due(
            user_id, language, now, limit or settings.session_size
        )
    except StoreError as e:
        logger.warning("Could not load due words for %s/%s: %s", user_id, language, e)
        raise DataUnavailable(str(e)) from e

    status = SessionStatus.ACTIVE if queue else SessionStatus.COMPLETE
    session.queue = list(queue)
    session.counters.total = len(queue)
    session.status = status
    logger.info(
        "Review session %s started for %s/%s with %d words",
        session.id, user_id, language, len(queue),
    )
    return session


def rate_current_item(
    session: SessionState,
    difficulty: Difficulty | str,
    now: datetime,
) -> tuple[SessionState, list[PersistOp], ReviewSchedule]:
    """
    Apply a rating to the word at the current position.

    Returns the advanced session, the writes the caller must issue and the
    schedule that was computed. The input session is left untouched.

    Raises OutOfRange when there is no current word and ValueError for a
    rating outside easy/medium/hard.
    """
    item = session.current_item
    if item is None:
        raise OutOfRange(
            f"Session {session.id} has no word at position {session.position}"
        )
    rating = Difficulty(difficulty)

    schedule = compute_next_review(rating, item.mastery_level, now)

    ops: list[PersistOp] = [
        ItemUpdate(
            item_id=item.id,
            fields={
                "mastery_level": schedule.new_mastery_level,
                "times_reviewed": item.times_reviewed + 1,
                "last_reviewed_at": now,
                "next_review_at": schedule.next_review_at,
            },
        ),
        ReviewEventInsert(item_id=item.id, user_id=session.user_id, difficulty=rating),
    ]

    counters = session.counters.model_copy(
        update={
            "reviewed": session.counters.reviewed + 1,
            rating.value: getattr(session.counters, rating.value) + 1,
        }
    )
    position = session.position + 1
    status = (
        SessionStatus.COMPLETE if position >= len(session.queue) else SessionStatus.ACTIVE
    )
    updated = session.model_copy(
        update={"counters": counters, "position": position, "status": status}
    )
    return updated, ops, schedule


async def apply_persist_ops(
    store: SessionStore, ops: list[PersistOp]
) -> list[PersistFailure]:
    """Issue the writes from a rating. Failures are logged and returned, not raised."""
    failures: list[PersistFailure] = []
    for op in ops:
        try:
            if isinstance(op, ItemUpdate):
                await store.update_item(op.item_id, op.fields)
            else:
                await store.insert_event(op.item_id, op.user_id, op.difficulty)
        except StoreError as e:
            logger.warning("Persisting %s for word %s failed: %s", op.kind, op.item_id, e)
            failures.append(PersistFailure(kind=op.kind, item_id=op.item_id, error=str(e)))
    return failures


async def reset_session(
    store: VocabularyStore, session: SessionState, now: datetime
) -> SessionState:
    """Start over for the same user and language, keeping the session id."""
    return await start_session(
        store, session.user_id, session.language, now, session_id=session.id
    )

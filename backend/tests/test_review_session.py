"""Tests for review session bookkeeping against an in-memory store."""

from __future__ import annotations

from datetime import timedelta

import pytest

from lingotutor.db.store import StoreError
from lingotutor.models.review import (
    Difficulty,
    ItemUpdate,
    ReviewEventInsert,
    SessionStatus,
)
from lingotutor.services.review_session import (
    DataUnavailable,
    OutOfRange,
    apply_persist_ops,
    rate_current_item,
    reset_session,
    start_session,
)
from tests.utils import make_item


class FakeStore:
    """Store double recording queries and writes."""

    def __init__(self, items=None, fail_query=False, fail_updates=False, fail_events=False):
        self.items = list(items or [])
        self.fail_query = fail_query
        self.fail_updates = fail_updates
        self.fail_events = fail_events
        self.queries: list[tuple] = []
        self.updates: list[tuple] = []
        self.events: list[tuple] = []

    async def query_due(self, user_id, language, now, limit):
        if self.fail_query:
            raise StoreError("database is locked")
        self.queries.append((user_id, language, now, limit))
        return self.items[:limit]

    async def update_item(self, item_id, fields):
        if self.fail_updates:
            raise StoreError("disk I/O error")
        self.updates.append((item_id, fields))

    async def insert_event(self, item_id, user_id, difficulty):
        if self.fail_events:
            raise StoreError("disk I/O error")
        self.events.append((item_id, user_id, difficulty))


def _assert_counters_consistent(session):
    c = session.counters
    assert c.reviewed == c.easy + c.medium + c.hard
    assert session.position <= len(session.queue)


async def test_empty_due_set_completes_immediately(now):
    store = FakeStore()

    session = await start_session(store, "user-1", "spanish", now)

    assert session.status == SessionStatus.COMPLETE
    assert session.counters.total == 0
    assert session.current_item is None


async def test_start_session_queries_with_session_size(now):
    store = FakeStore([make_item(str(i)) for i in range(30)])

    session = await start_session(store, "user-1", "spanish", now)

    assert store.queries == [("user-1", "spanish", now, 20)]
    assert session.status == SessionStatus.ACTIVE
    assert session.counters.total == 20
    assert session.position == 0
    assert session.current_item.id == "0"


async def test_start_session_query_failure_is_data_unavailable(now):
    with pytest.raises(DataUnavailable):
        await start_session(FakeStore(fail_query=True), "user-1", "spanish", now)


async def test_rating_advances_by_one_and_keeps_counters_consistent(now):
    store = FakeStore([make_item("a"), make_item("b")])
    session = await start_session(store, "user-1", "spanish", now)

    updated, _, _ = rate_current_item(session, Difficulty.MEDIUM, now)

    assert updated.position == session.position + 1
    assert updated.counters.medium == 1
    assert updated.status == SessionStatus.ACTIVE
    _assert_counters_consistent(updated)
    # the input value is left alone
    assert session.position == 0
    assert session.counters.reviewed == 0


async def test_rating_returns_update_and_review_event(now):
    store = FakeStore([make_item("a", mastery=2, times_reviewed=4)])
    session = await start_session(store, "user-1", "spanish", now)

    _, ops, schedule = rate_current_item(session, "easy", now)

    update, event = ops
    assert isinstance(update, ItemUpdate)
    assert update.item_id == "a"
    assert update.fields == {
        "mastery_level": 3,
        "times_reviewed": 5,
        "last_reviewed_at": now,
        "next_review_at": now + timedelta(days=7),
    }
    assert isinstance(event, ReviewEventInsert)
    assert (event.item_id, event.user_id, event.difficulty) == ("a", "user-1", Difficulty.EASY)
    assert schedule.new_mastery_level == 3


async def test_three_card_session_end_to_end(now):
    items = [make_item("a", mastery=2), make_item("b", mastery=0), make_item("c", mastery=3)]
    store = FakeStore(items)
    session = await start_session(store, "user-1", "spanish", now)

    for difficulty in ("easy", "hard", "medium"):
        session, ops, _ = rate_current_item(session, difficulty, now)
        assert await apply_persist_ops(store, ops) == []
        _assert_counters_consistent(session)

    c = session.counters
    assert (c.reviewed, c.easy, c.hard, c.medium) == (3, 1, 1, 1)
    assert session.status == SessionStatus.COMPLETE
    assert [u[1]["mastery_level"] for u in store.updates] == [3, 0, 3]
    assert [e[2] for e in store.events] == [Difficulty.EASY, Difficulty.HARD, Difficulty.MEDIUM]


async def test_rating_completed_session_is_out_of_range(now):
    store = FakeStore([make_item("a")])
    session = await start_session(store, "user-1", "spanish", now)
    session, _, _ = rate_current_item(session, "hard", now)
    assert session.status == SessionStatus.COMPLETE

    with pytest.raises(OutOfRange):
        rate_current_item(session, "easy", now)
    assert session.counters.reviewed == 1
    assert session.position == 1


async def test_rating_empty_session_is_out_of_range(now):
    session = await start_session(FakeStore(), "user-1", "spanish", now)

    with pytest.raises(OutOfRange):
        rate_current_item(session, "easy", now)


async def test_unknown_rating_is_rejected_without_advancing(now):
    session = await start_session(FakeStore([make_item("a")]), "user-1", "spanish", now)

    with pytest.raises(ValueError):
        rate_current_item(session, "again", now)
    assert session.position == 0


async def test_write_failures_are_reported_not_rolled_back(now):
    store = FakeStore([make_item("a"), make_item("b")], fail_updates=True, fail_events=True)
    session = await start_session(store, "user-1", "spanish", now)

    session, ops, _ = rate_current_item(session, "easy", now)
    failures = await apply_persist_ops(store, ops)

    assert [f.kind for f in failures] == ["item_update", "review_event"]
    assert all(f.item_id == "a" for f in failures)
    assert session.position == 1
    assert session.counters.easy == 1


async def test_event_failure_does_not_block_update(now):
    store = FakeStore([make_item("a")], fail_events=True)
    session = await start_session(store, "user-1", "spanish", now)

    _, ops, _ = rate_current_item(session, "medium", now)
    failures = await apply_persist_ops(store, ops)

    assert len(store.updates) == 1
    assert [f.kind for f in failures] == ["review_event"]


async def test_reset_zeroes_counters_and_keeps_id(now):
    store = FakeStore([make_item("a"), make_item("b")])
    session = await start_session(store, "user-1", "spanish", now)
    session, _, _ = rate_current_item(session, "easy", now)

    later = now + timedelta(minutes=5)
    fresh = await reset_session(store, session, later)

    assert fresh.id == session.id
    assert fresh.position == 0
    assert fresh.counters.reviewed == 0
    assert fresh.counters.total == 2
    assert fresh.started_at == later
    assert store.queries[-1][2] == later

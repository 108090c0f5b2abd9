"""
Vocabulary store used by review sessions.

Wraps the module-level SQLite helpers behind the small interface the session
manager needs and turns driver errors into StoreError.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any

import aiosqlite
from fastapi import Depends

from lingotutor.db.sqlite import (
    get_db,
    get_due_vocabulary,
    insert_review_event,
    update_vocabulary_review,
)
from lingotutor.models.review import Difficulty
from lingotutor.models.vocabulary import VocabularyItem


class StoreError(Exception):
    """Raised when the vocabulary store cannot complete a read or write."""


class SqliteVocabularyStore:
    def __init__(self, db: aiosqlite.Connection) -> None:
        self._db = db

    async def query_due(
        self, user_id: str, language: str, now: datetime, limit: int
    ) -> list[VocabularyItem]:
        try:
            return await get_due_vocabulary(self._db, user_id, language, now, limit)
        except aiosqlite.Error as e:
            raise StoreError(f"Due-word query failed: {e}") from e

    async def update_item(self, item_id: str, fields: dict[str, Any]) -> None:
        try:
            updated = await update_vocabulary_review(self._db, item_id, fields)
        except aiosqlite.Error as e:
            raise StoreError(f"Update of word {item_id} failed: {e}") from e
        if not updated:
            raise StoreError(f"Word {item_id} no longer exists")

    async def insert_event(
        self, item_id: str, user_id: str, difficulty: Difficulty
    ) -> None:
        try:
            await insert_review_event(self._db, item_id, user_id, difficulty)
        except aiosqlite.Error as e:
            raise StoreError(f"Review record for word {item_id} failed: {e}") from e


async def get_store(
    db: aiosqlite.Connection = Depends(get_db),
) -> SqliteVocabularyStore:
    return SqliteVocabularyStore(db)

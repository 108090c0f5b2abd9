import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, AsyncIterator

import aiosqlite

from lingotutor.config import settings
from lingotutor.models.review import Difficulty, ReviewEvent
from lingotutor.models.vocabulary import (
    Category,
    VocabularyCreate,
    VocabularyItem,
    VocabularyStats,
    VocabularyUpdate,
)

_db_path: Path | None = None

SCHEMA_VERSION = 1

SCHEMA_SQL = """
PRAGMA journal_mode=WAL;
PRAGMA foreign_keys=ON;

CREATE TABLE IF NOT EXISTS vocabulary_words (
    id                  TEXT PRIMARY KEY,
    user_id             TEXT NOT NULL,
    language            TEXT NOT NULL,
    word                TEXT NOT NULL,
    translation         TEXT NOT NULL,
    category            TEXT,
    example_sentence    TEXT,
    example_translation TEXT,
    mastery_level       INTEGER NOT NULL DEFAULT 0
                        CHECK (mastery_level BETWEEN 0 AND 5),
    times_reviewed      INTEGER NOT NULL DEFAULT 0,
    last_reviewed_at    TEXT,
    next_review_at      TEXT,
    created_at          TEXT NOT NULL DEFAULT (datetime('now')),
    updated_at          TEXT NOT NULL DEFAULT (datetime('now'))
);
CREATE INDEX IF NOT EXISTS idx_vocabulary_owner
    ON vocabulary_words(user_id, language);
CREATE INDEX IF NOT EXISTS idx_vocabulary_due
    ON vocabulary_words(user_id, language, next_review_at);

CREATE TABLE IF NOT EXISTS flashcard_reviews (
    id            TEXT PRIMARY KEY,
    vocabulary_id TEXT NOT NULL REFERENCES vocabulary_words(id) ON DELETE CASCADE,
    user_id       TEXT NOT NULL,
    difficulty    TEXT NOT NULL,
    created_at    TEXT NOT NULL DEFAULT (datetime('now'))
);
CREATE INDEX IF NOT EXISTS idx_reviews_vocabulary ON flashcard_reviews(vocabulary_id);

CREATE TABLE IF NOT EXISTS schema_version (
    version    INTEGER PRIMARY KEY,
    applied_at TEXT NOT NULL DEFAULT (datetime('now'))
);
INSERT OR IGNORE INTO schema_version(version) VALUES (1);
"""

# Columns a review is allowed to write back
REVIEW_FIELDS = frozenset(
    {"mastery_level", "times_reviewed", "last_reviewed_at", "next_review_at"}
)


async def init_sqlite(data_dir: Path) -> None:
    global _db_path
    _db_path = data_dir / settings.sqlite_filename
    async with aiosqlite.connect(_db_path) as db:
        await db.executescript(SCHEMA_SQL)
        await db.commit()


async def get_db() -> AsyncIterator[aiosqlite.Connection]:
    assert _db_path is not None, "SQLite not initialized"
    async with aiosqlite.connect(_db_path) as db:
        db.row_factory = aiosqlite.Row
        await db.execute("PRAGMA foreign_keys=ON")
        yield db


def _now() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")


def to_db_timestamp(value: datetime) -> str:
    """UTC ISO-8601 with fixed microsecond width, so text order == time order."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds")


def _escape_like(text: str) -> str:
    """Make `%` and `_` match literally in a LIKE pattern (escape char `\\`)."""
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _row_to_vocabulary(row: aiosqlite.Row) -> VocabularyItem:
    return VocabularyItem(**dict(row))


# --- Vocabulary CRUD ---


async def create_vocabulary(
    db: aiosqlite.Connection, user_id: str, item: VocabularyCreate
) -> VocabularyItem:
    item_id = str(uuid.uuid4())
    now = _now()
    await db.execute(
        """INSERT INTO vocabulary_words
           (id, user_id, language, word, translation, category,
            example_sentence, example_translation, mastery_level,
            times_reviewed, created_at, updated_at)
           VALUES (?, ?, ?, ?, ?, ?, ?, ?, 0, 0, ?, ?)""",
        (
            item_id,
            user_id,
            item.language,
            item.word,
            item.translation,
            item.category.value if item.category else None,
            item.example_sentence,
            item.example_translation,
            now,
            now,
        ),
    )
    await db.commit()
    return await get_vocabulary(db, item_id)  # type: ignore[return-value]


async def get_vocabulary(
    db: aiosqlite.Connection, item_id: str, user_id: str | None = None
) -> VocabularyItem | None:
    if user_id is None:
        cursor = await db.execute(
            "SELECT * FROM vocabulary_words WHERE id = ?", (item_id,)
        )
    else:
        cursor = await db.execute(
            "SELECT * FROM vocabulary_words WHERE id = ? AND user_id = ?",
            (item_id, user_id),
        )
    row = await cursor.fetchone()
    if row is None:
        return None
    return _row_to_vocabulary(row)


async def list_vocabulary(
    db: aiosqlite.Connection,
    user_id: str,
    language: str | None = None,
    search: str | None = None,
    category: Category | None = None,
    offset: int = 0,
    limit: int = 50,
) -> tuple[list[VocabularyItem], int]:
    """List a user's words, newest first. `search` matches word or translation."""
    clauses = ["user_id = ?"]
    params: list[Any] = [user_id]
    if language:
        clauses.append("language = ?")
        params.append(language)
    if search:
        clauses.append(
            "(LOWER(word) LIKE ? ESCAPE '\\' OR LOWER(translation) LIKE ? ESCAPE '\\')"
        )
        pattern = f"%{_escape_like(search.lower())}%"
        params.extend([pattern, pattern])
    if category:
        clauses.append("category = ?")
        params.append(category.value)
    where = " AND ".join(clauses)

    cursor = await db.execute(
        f"SELECT COUNT(*) FROM vocabulary_words WHERE {where}",  # noqa: S608
        params,
    )
    total = (await cursor.fetchone())[0]

    cursor = await db.execute(
        f"""SELECT * FROM vocabulary_words WHERE {where}
            ORDER BY created_at DESC, rowid DESC
            LIMIT ? OFFSET ?""",  # noqa: S608
        [*params, limit, offset],
    )
    rows = await cursor.fetchall()
    return [_row_to_vocabulary(r) for r in rows], total


async def update_vocabulary(
    db: aiosqlite.Connection,
    item_id: str,
    user_id: str,
    updates: VocabularyUpdate,
) -> VocabularyItem | None:
    existing = await get_vocabulary(db, item_id, user_id)
    if existing is None:
        return None

    fields = updates.model_dump(exclude_unset=True)
    # word and translation are NOT NULL; an explicit null means "keep"
    for key in ("word", "translation"):
        if key in fields and fields[key] is None:
            del fields[key]
    if not fields:
        return existing

    for key, val in fields.items():
        if hasattr(val, "value"):
            fields[key] = val.value

    fields["updated_at"] = _now()
    set_clause = ", ".join(f"{k} = ?" for k in fields)
    values = list(fields.values()) + [item_id, user_id]

    await db.execute(
        f"UPDATE vocabulary_words SET {set_clause} WHERE id = ? AND user_id = ?",  # noqa: S608
        values,
    )
    await db.commit()
    return await get_vocabulary(db, item_id, user_id)


async def delete_vocabulary(
    db: aiosqlite.Connection, item_id: str, user_id: str
) -> bool:
    """Delete a word; its review history goes with it (ON DELETE CASCADE)."""
    cursor = await db.execute(
        "DELETE FROM vocabulary_words WHERE id = ? AND user_id = ?",
        (item_id, user_id),
    )
    await db.commit()
    return (cursor.rowcount or 0) > 0


# --- Review scheduling ---


async def get_due_vocabulary(
    db: aiosqlite.Connection,
    user_id: str,
    language: str,
    now: datetime,
    limit: int = 20,
) -> list[VocabularyItem]:
    """
    Words due at `now` (next_review_at <= now or NULL).

    Least recently reviewed first; never-reviewed words lead.
    """
    cursor = await db.execute(
        """SELECT * FROM vocabulary_words
           WHERE user_id = ? AND language = ?
           AND (next_review_at IS NULL OR next_review_at <= ?)
           ORDER BY last_reviewed_at IS NOT NULL, last_reviewed_at ASC,
                    created_at ASC, rowid ASC
           LIMIT ?""",
        (user_id, language, to_db_timestamp(now), limit),
    )
    rows = await cursor.fetchall()
    return [_row_to_vocabulary(r) for r in rows]


async def update_vocabulary_review(
    db: aiosqlite.Connection, item_id: str, fields: dict[str, Any]
) -> bool:
    """Write scheduler output onto a word. Returns False if the word is gone."""
    unknown = set(fields) - REVIEW_FIELDS
    if unknown:
        raise ValueError(f"Not a review field: {', '.join(sorted(unknown))}")
    if not fields:
        return True

    values = {
        k: to_db_timestamp(v) if isinstance(v, datetime) else v
        for k, v in fields.items()
    }
    values["updated_at"] = _now()
    set_clause = ", ".join(f"{k} = ?" for k in values)

    cursor = await db.execute(
        f"UPDATE vocabulary_words SET {set_clause} WHERE id = ?",  # noqa: S608
        [*values.values(), item_id],
    )
    await db.commit()
    return (cursor.rowcount or 0) > 0


async def insert_review_event(
    db: aiosqlite.Connection,
    vocabulary_id: str,
    user_id: str,
    difficulty: Difficulty,
) -> ReviewEvent:
    event = ReviewEvent(
        id=str(uuid.uuid4()),
        vocabulary_id=vocabulary_id,
        user_id=user_id,
        difficulty=difficulty,
        created_at=_now(),
    )
    await db.execute(
        """INSERT INTO flashcard_reviews
           (id, vocabulary_id, user_id, difficulty, created_at)
           VALUES (?, ?, ?, ?, ?)""",
        (
            event.id,
            event.vocabulary_id,
            event.user_id,
            event.difficulty.value,
            event.created_at,
        ),
    )
    await db.commit()
    return event


async def list_review_events(
    db: aiosqlite.Connection, vocabulary_id: str
) -> list[ReviewEvent]:
    cursor = await db.execute(
        """SELECT * FROM flashcard_reviews WHERE vocabulary_id = ?
           ORDER BY created_at DESC, rowid DESC""",
        (vocabulary_id,),
    )
    rows = await cursor.fetchall()
    return [ReviewEvent(**dict(r)) for r in rows]


async def get_vocabulary_stats(
    db: aiosqlite.Connection,
    user_id: str,
    language: str | None,
    now: datetime,
) -> VocabularyStats:
    """Word count, due count, mastery histogram and rating totals."""
    scope = "user_id = ?"
    joined_scope = "v.user_id = ?"
    params: list[Any] = [user_id]
    if language:
        scope += " AND language = ?"
        joined_scope += " AND v.language = ?"
        params.append(language)

    cursor = await db.execute(
        f"""SELECT COUNT(*),
                   SUM(CASE WHEN (next_review_at IS NULL OR next_review_at <= ?)
                       THEN 1 ELSE 0 END)
            FROM vocabulary_words WHERE {scope}""",  # noqa: S608
        [to_db_timestamp(now), *params],
    )
    row = await cursor.fetchone()
    total_words: int = row[0] if row else 0
    due_now: int = (row[1] or 0) if row else 0

    cursor = await db.execute(
        f"""SELECT mastery_level, COUNT(*) FROM vocabulary_words
            WHERE {scope} GROUP BY mastery_level""",  # noqa: S608
        params,
    )
    mastery = {level: 0 for level in range(6)}
    for level, count in await cursor.fetchall():
        mastery[level] = count

    cursor = await db.execute(
        f"""SELECT r.difficulty, COUNT(*) FROM flashcard_reviews r
            JOIN vocabulary_words v ON v.id = r.vocabulary_id
            WHERE {joined_scope}
            GROUP BY r.difficulty""",  # noqa: S608
        params,
    )
    reviews = {d.value: 0 for d in Difficulty}
    for difficulty, count in await cursor.fetchall():
        reviews[difficulty] = count

    return VocabularyStats(
        total_words=total_words,
        due_now=due_now,
        mastery_distribution=mastery,
        reviews=reviews,
    )

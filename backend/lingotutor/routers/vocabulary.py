"""
Vocabulary router.

Endpoints:
  GET    /vocabulary               — list words (language, search, category filters)
  POST   /vocabulary               — add a word (mastery 0, never reviewed)
  GET    /vocabulary/stats         — totals, due count, mastery histogram
  GET    /vocabulary/{id}          — single word
  PATCH  /vocabulary/{id}          — edit word / translation / category / examples
  DELETE /vocabulary/{id}          — delete word and its review history
  GET    /vocabulary/{id}/reviews  — review history, newest first
"""
from __future__ import annotations

from datetime import datetime, timezone

import aiosqlite
from fastapi import APIRouter, Depends, HTTPException, Query

from lingotutor.db.sqlite import (
    create_vocabulary,
    delete_vocabulary,
    get_db,
    get_vocabulary,
    get_vocabulary_stats,
    list_review_events,
    list_vocabulary,
    update_vocabulary,
)
from lingotutor.dependencies import get_user_id
from lingotutor.models.review import ReviewEvent
from lingotutor.models.vocabulary import (
    Category,
    VocabularyCreate,
    VocabularyItem,
    VocabularyList,
    VocabularyStats,
    VocabularyUpdate,
)

router = APIRouter()


@router.get("/", response_model=VocabularyList)
async def list_words(
    language: str | None = Query(default=None),
    search: str | None = Query(default=None),
    category: Category | None = Query(default=None),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=200),
    user_id: str = Depends(get_user_id),
    db: aiosqlite.Connection = Depends(get_db),
) -> VocabularyList:
    items, total = await list_vocabulary(
        db,
        user_id,
        language=language,
        search=search,
        category=category,
        offset=offset,
        limit=limit,
    )
    return VocabularyList(items=items, total=total, offset=offset, limit=limit)


@router.post("/", response_model=VocabularyItem, status_code=201)
async def add_word(
    body: VocabularyCreate,
    user_id: str = Depends(get_user_id),
    db: aiosqlite.Connection = Depends(get_db),
) -> VocabularyItem:
    return await create_vocabulary(db, user_id, body)


@router.get("/stats", response_model=VocabularyStats)
async def word_stats(
    language: str | None = Query(default=None),
    user_id: str = Depends(get_user_id),
    db: aiosqlite.Connection = Depends(get_db),
) -> VocabularyStats:
    return await get_vocabulary_stats(
        db, user_id, language, datetime.now(timezone.utc)
    )


@router.get("/{item_id}", response_model=VocabularyItem)
async def get_word(
    item_id: str,
    user_id: str = Depends(get_user_id),
    db: aiosqlite.Connection = Depends(get_db),
) -> VocabularyItem:
    item = await get_vocabulary(db, item_id, user_id)
    if not item:
        raise HTTPException(status_code=404, detail="Word not found")
    return item


@router.patch("/{item_id}", response_model=VocabularyItem)
async def edit_word(
    item_id: str,
    body: VocabularyUpdate,
    user_id: str = Depends(get_user_id),
    db: aiosqlite.Connection = Depends(get_db),
) -> VocabularyItem:
    updated = await update_vocabulary(db, item_id, user_id, body)
    if not updated:
        raise HTTPException(status_code=404, detail="Word not found")
    return updated


@router.delete("/{item_id}", status_code=204)
async def remove_word(
    item_id: str,
    user_id: str = Depends(get_user_id),
    db: aiosqlite.Connection = Depends(get_db),
) -> None:
    deleted = await delete_vocabulary(db, item_id, user_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Word not found")


@router.get("/{item_id}/reviews", response_model=list[ReviewEvent])
async def word_reviews(
    item_id: str,
    user_id: str = Depends(get_user_id),
    db: aiosqlite.Connection = Depends(get_db),
) -> list[ReviewEvent]:
    if not await get_vocabulary(db, item_id, user_id):
        raise HTTPException(status_code=404, detail="Word not found")
    return await list_review_events(db, item_id)

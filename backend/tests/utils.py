"""Factories shared by the test modules."""

from __future__ import annotations

from datetime import datetime

from lingotutor.db.sqlite import create_vocabulary, update_vocabulary_review
from lingotutor.models.vocabulary import Category, VocabularyCreate, VocabularyItem


def make_item(item_id: str, mastery: int = 0, times_reviewed: int = 0, **extra) -> VocabularyItem:
    fields = {
        "id": item_id,
        "user_id": "user-1",
        "language": "spanish",
        "word": f"palabra-{item_id}",
        "translation": f"word-{item_id}",
        "mastery_level": mastery,
        "times_reviewed": times_reviewed,
        "created_at": "2026-01-01 00:00:00",
        "updated_at": "2026-01-01 00:00:00",
    }
    fields.update(extra)
    return VocabularyItem(**fields)


async def add_word(
    db,
    word: str,
    translation: str = "",
    user_id: str = "user-1",
    language: str = "spanish",
    category: Category = Category.OTHER,
    mastery: int | None = None,
    last_reviewed_at: datetime | None = None,
    next_review_at: datetime | None = None,
) -> VocabularyItem:
    item = await create_vocabulary(
        db,
        user_id,
        VocabularyCreate(
            language=language,
            word=word,
            translation=translation or f"{word} (en)",
            category=category,
        ),
    )
    review_fields: dict = {}
    if mastery is not None:
        review_fields["mastery_level"] = mastery
    if last_reviewed_at is not None:
        review_fields["last_reviewed_at"] = last_reviewed_at
    if next_review_at is not None:
        review_fields["next_review_at"] = next_review_at
    if review_fields:
        await update_vocabulary_review(db, item.id, review_fields)
    return item

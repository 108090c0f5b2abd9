from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class Category(str, Enum):
    VERBS = "verbs"
    NOUNS = "nouns"
    ADJECTIVES = "adjectives"
    PHRASES = "phrases"
    OTHER = "other"


class VocabularyCreate(BaseModel):
    language: str = Field(min_length=1)
    word: str = Field(min_length=1)
    translation: str = Field(min_length=1)
    category: Category | None = Category.OTHER
    example_sentence: str | None = None
    example_translation: str | None = None


class VocabularyUpdate(BaseModel):
    word: str | None = Field(default=None, min_length=1)
    translation: str | None = Field(default=None, min_length=1)
    category: Category | None = None
    example_sentence: str | None = None
    example_translation: str | None = None


class VocabularyItem(BaseModel):
    id: str
    user_id: str
    language: str
    word: str
    translation: str
    category: Category | None = None
    example_sentence: str | None = None
    example_translation: str | None = None
    mastery_level: int = 0          # 0–5
    times_reviewed: int = 0
    last_reviewed_at: datetime | None = None
    next_review_at: datetime | None = None  # None = never reviewed, always due
    created_at: str
    updated_at: str


class VocabularyList(BaseModel):
    items: list[VocabularyItem]
    total: int
    offset: int
    limit: int


class VocabularyStats(BaseModel):
    total_words: int
    due_now: int
    mastery_distribution: dict[int, int]
    reviews: dict[str, int]

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Literal, Union

from pydantic import BaseModel, Field

from lingotutor.models.vocabulary import VocabularyItem


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class SessionStatus(str, Enum):
    LOADING = "loading"
    ACTIVE = "active"
    COMPLETE = "complete"


class ReviewSchedule(BaseModel):
    next_review_at: datetime
    new_mastery_level: int


class ReviewEvent(BaseModel):
    id: str
    vocabulary_id: str
    user_id: str
    difficulty: Difficulty
    created_at: str


class SessionCounters(BaseModel):
    total: int = 0
    reviewed: int = 0
    easy: int = 0
    medium: int = 0
    hard: int = 0


class SessionState(BaseModel):
    id: str
    user_id: str
    language: str
    status: SessionStatus = SessionStatus.LOADING
    queue: list[VocabularyItem] = Field(default_factory=list)
    position: int = 0
    counters: SessionCounters = Field(default_factory=SessionCounters)
    started_at: datetime

    @property
    def current_item(self) -> VocabularyItem | None:
        if self.position < len(self.queue):
            return self.queue[self.position]
        return None


class ItemUpdate(BaseModel):
    """Write-back of the scheduler result onto one vocabulary item."""

    kind: Literal["item_update"] = "item_update"
    item_id: str
    fields: dict[str, Any]


class ReviewEventInsert(BaseModel):
    kind: Literal["review_event"] = "review_event"
    item_id: str
    user_id: str
    difficulty: Difficulty


PersistOp = Union[ItemUpdate, ReviewEventInsert]


class PersistFailure(BaseModel):
    kind: str
    item_id: str
    error: str


# --- API payloads ---


class SessionStart(BaseModel):
    language: str = Field(min_length=1)


class RateRequest(BaseModel):
    difficulty: Difficulty


class SessionView(BaseModel):
    session: SessionState
    current_item: VocabularyItem | None

    @classmethod
    def of(cls, session: SessionState) -> SessionView:
        return cls(session=session, current_item=session.current_item)


class RateResult(BaseModel):
    session: SessionState
    current_item: VocabularyItem | None
    schedule: ReviewSchedule
    persist_errors: list[PersistFailure] = Field(default_factory=list)

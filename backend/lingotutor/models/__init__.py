from lingotutor.models.chat import ChatRequest, ChatResponse
from lingotutor.models.review import (
    Difficulty,
    ItemUpdate,
    PersistFailure,
    PersistOp,
    RateRequest,
    RateResult,
    ReviewEvent,
    ReviewEventInsert,
    ReviewSchedule,
    SessionCounters,
    SessionStart,
    SessionState,
    SessionStatus,
    SessionView,
)
from lingotutor.models.vocabulary import (
    Category,
    VocabularyCreate,
    VocabularyItem,
    VocabularyList,
    VocabularyStats,
    VocabularyUpdate,
)

__all__ = [
    "Category",
    "ChatRequest",
    "ChatResponse",
    "Difficulty",
    "ItemUpdate",
    "PersistFailure",
    "PersistOp",
    "RateRequest",
    "RateResult",
    "ReviewEvent",
    "ReviewEventInsert",
    "ReviewSchedule",
    "SessionCounters",
    "SessionStart",
    "SessionState",
    "SessionStatus",
    "SessionView",
    "VocabularyCreate",
    "VocabularyItem",
    "VocabularyList",
    "VocabularyStats",
    "VocabularyUpdate",
]

"""
Spaced-repetition scheduler for vocabulary flashcards.

SM-2 inspired, without a per-item ease factor:

  easy    next review in max(7, mastery * 2) days, mastery + 1 (max 5)
  medium  next review in max(3, mastery) days,     mastery unchanged
  hard    next review in 1 day,                     mastery - 1 (min 0)
  other   next review in 3 days,                    mastery unchanged

These values are already persisted for existing vocabulary, so the table must
stay bit-exact.
"""
from __future__ import annotations

from datetime import datetime, timedelta

from lingotutor.models.review import Difficulty, ReviewSchedule

MIN_MASTERY = 0
MAX_MASTERY = 5
FALLBACK_DAYS = 3


def _clamp_mastery(level: int) -> int:
    return max(MIN_MASTERY, min(MAX_MASTERY, int(level)))


def _parse_difficulty(difficulty: Difficulty | str | None) -> Difficulty | None:
    if isinstance(difficulty, Difficulty):
        return difficulty
    try:
        return Difficulty(difficulty)
    except ValueError:
        return None


def compute_next_review(
    difficulty: Difficulty | str | None,
    current_mastery_level: int,
    now: datetime,
) -> ReviewSchedule:
    """
    Compute the next review time and mastery level for one rating.

    Never raises: an unknown difficulty takes the 3-day branch and an
    out-of-range mastery level is clamped into [0, 5] first.
    """
    mastery = _clamp_mastery(current_mastery_level)
    new_mastery = mastery

    rating = _parse_difficulty(difficulty)
    if rating is Difficulty.EASY:
        days = max(7, mastery * 2)
        new_mastery = min(MAX_MASTERY, mastery + 1)
    elif rating is Difficulty.MEDIUM:
        days = max(3, mastery)
    elif rating is Difficulty.HARD:
        days = 1
        new_mastery = max(MIN_MASTERY, mastery - 1)
    else:
        days = FALLBACK_DAYS

    return ReviewSchedule(
        next_review_at=now + timedelta(days=days),
        new_mastery_level=new_mastery,
    )

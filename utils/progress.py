from __future__ import annotations

from datetime import date, timedelta
from typing import Iterable, Optional, Sequence, Set

from models.card import Card
from models.stats import StudyStats
from utils.due import select_due


def count_reviewed_on(cards: Sequence[Card], day: date) -> int:
    return sum(1 for card in cards if card.last_review_date == day)


def streak_days(review_days: Iterable[date], today: date) -> int:
    """Consecutive days ending today that each have at least one review."""
    days: Set[date] = set(review_days)
    streak = 0
    cursor = today
    while cursor in days:
        streak += 1
        cursor -= timedelta(days=1)
    return streak


def compute_study_stats(
    cards: Sequence[Card],
    today: date,
    review_dates: Optional[Iterable[date]] = None,
) -> StudyStats:
    """Summary counters for a user's card set.

    ``review_dates`` is the day of every review event (the review log); when it
    is not available the cards' last review dates are used instead.
    """
    if review_dates is None:
        review_dates = [card.last_review_date for card in cards if card.last_review_date]
    return StudyStats(
        due_today=len(select_due(cards, today)),
        reviewed_today=count_reviewed_on(cards, today),
        total_cards=sum(1 for card in cards if card.is_active),
        streak_days=streak_days(review_dates, today),
    )

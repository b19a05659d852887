from __future__ import annotations

from datetime import date
from typing import List, Optional, Sequence

from models.card import Card


def is_due(card: Card, today: date) -> bool:
    return card.is_active and card.is_approved and card.next_review_date <= today


def due_sort_key(card: Card):
    """Most overdue first, then oldest card, then lowest id."""
    return (card.next_review_date, card.created_at, card.id)


def select_due(cards: Sequence[Card], today: date, limit: Optional[int] = None) -> List[Card]:
    """Return the cards due on ``today`` in review order, capped at ``limit`` when given."""
    if limit is not None and limit < 0:
        raise ValueError(f"limit must be >= 0, got {limit}")
    due = sorted((card for card in cards if is_due(card, today)), key=due_sort_key)
    if limit is not None:
        return due[:limit]
    return due

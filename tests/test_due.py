from datetime import date, datetime, timedelta

import pytest

from models.card import Card
from utils.due import is_due, select_due

TODAY = date(2024, 5, 10)


def _card(card_id: int, due_offset: int, created_minute: int = 0, **overrides) -> Card:
    data = dict(
        id=card_id,
        user_id="reader-1",
        book_id=1,
        chapter_id=1,
        front=f"Question {card_id}",
        back=f"Answer {card_id}",
        is_approved=True,
        next_review_date=TODAY + timedelta(days=due_offset),
        created_at=datetime(2024, 1, 1, 9, created_minute),
    )
    data.update(overrides)
    return Card(**data)


def _five_cards():
    return [
        _card(1, -2, created_minute=5),
        _card(2, 0, created_minute=3),
        _card(3, 1, created_minute=1),
        _card(4, -1, created_minute=4),
        _card(5, 0, created_minute=2),
    ]


def test_limit_returns_most_overdue_first():
    due = select_due(_five_cards(), TODAY, limit=2)
    assert [card.id for card in due] == [1, 4]


def test_ties_on_due_date_break_by_creation_time():
    due = select_due(_five_cards(), TODAY)
    assert [card.id for card in due] == [1, 4, 5, 2]


def test_due_boundary_is_inclusive_of_today():
    assert is_due(_card(1, 0), TODAY)
    assert not is_due(_card(1, 1), TODAY)


def test_inactive_and_unapproved_cards_are_never_due():
    cards = [
        _card(1, -3, is_active=False),
        _card(2, -3, is_approved=False),
        _card(3, -3),
    ]
    assert [card.id for card in select_due(cards, TODAY)] == [3]


def test_ordering_is_stable_across_calls_and_input_order():
    cards = _five_cards()
    first = select_due(cards, TODAY)
    second = select_due(list(reversed(cards)), TODAY)
    assert [c.id for c in first] == [c.id for c in second]


def test_zero_limit_and_negative_limit():
    assert select_due(_five_cards(), TODAY, limit=0) == []
    with pytest.raises(ValueError):
        select_due(_five_cards(), TODAY, limit=-1)

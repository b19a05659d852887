from datetime import date, datetime

import pytest

from models.card import Card
from utils.session import (
    ReviewPersistError,
    ReviewSession,
    SessionFinishedError,
    end_session,
    get_session,
    prune_sessions,
    start_session,
)
from utils.sm2 import Rating

TODAY = date(2024, 5, 10)


def _card(card_id: int) -> Card:
    return Card(
        id=card_id,
        user_id="reader-1",
        book_id=1,
        chapter_id=1,
        front=f"Q{card_id}",
        back=f"A{card_id}",
        is_approved=True,
        next_review_date=TODAY,
        created_at=datetime(2024, 1, 1, 9, card_id),
    )


class RecordingStore:
    def __init__(self, accept=True):
        self.accept = accept
        self.writes = []

    def __call__(self, card, rating, state):
        if self.accept:
            self.writes.append((card.id, rating, state))
        return self.accept


def test_session_walks_batch_once_even_after_again():
    session = ReviewSession.from_due("reader-1", [_card(2), _card(1)], TODAY)
    store = RecordingStore()

    assert session.current.id == 1
    session.rate(Rating.AGAIN, TODAY, store)
    assert session.current.id == 2
    session.rate("good", TODAY, store)

    assert session.finished
    assert session.current is None
    assert (session.reviewed, session.correct) == (2, 1)
    assert [write[0] for write in store.writes] == [1, 2]
    with pytest.raises(SessionFinishedError):
        session.rate(Rating.GOOD, TODAY, store)


def test_failed_persist_does_not_advance():
    session = ReviewSession("reader-1", [_card(1)])
    with pytest.raises(ReviewPersistError):
        session.rate(Rating.GOOD, TODAY, RecordingStore(accept=False))
    assert session.current.id == 1
    assert session.reviewed == 0
    assert session.current.repetitions == 0


def test_rated_card_carries_new_state_and_version():
    session = ReviewSession("reader-1", [_card(1)])
    session.rate(Rating.GOOD, TODAY, RecordingStore())
    reviewed = session.cards[0]
    assert reviewed.repetitions == 1
    assert reviewed.last_review_date == TODAY
    assert reviewed.version == 1


def test_skip_and_summary():
    session = ReviewSession("reader-1", [_card(1), _card(2)], session_id="s1")
    assert session.skip().id == 1
    summary = session.summary()
    assert summary["position"] == 2
    assert summary["remaining"] == 1
    assert summary["reviewed"] == 0


def test_limit_caps_batch_size():
    session = ReviewSession.from_due("reader-1", [_card(i) for i in range(1, 6)], TODAY, limit=3)
    assert session.total == 3


def test_registry_round_trip():
    session = start_session(ReviewSession("reader-1", [_card(1)]))
    assert get_session(session.id) is session
    assert end_session(session.id) is session
    assert get_session(session.id) is None


def test_empty_session_is_not_registered():
    session = start_session(ReviewSession("reader-1", []))
    assert session.finished
    assert get_session(session.id) is None


def test_prune_drops_finished_and_idle_sessions():
    finished = start_session(ReviewSession("reader-1", [_card(1)]))
    finished.rate(Rating.GOOD, TODAY, RecordingStore())
    idle = start_session(ReviewSession("reader-1", [_card(2)]))
    active = start_session(ReviewSession("reader-1", [_card(3)]))

    prune_sessions(max_idle=60, now=active.touched_at + 30)
    assert get_session(finished.id) is None
    assert get_session(idle.id) is idle
    assert get_session(active.id) is active

    prune_sessions(max_idle=60, now=active.touched_at + 120)
    assert get_session(idle.id) is None
    assert get_session(active.id) is None

"""Review sessions: a fixed batch of due cards walked through one card at a time."""
from __future__ import annotations

import logging
import time
import uuid
from datetime import date
from typing import Callable, Dict, List, Optional, Sequence, Union

from models.card import Card
from utils.due import select_due
from utils.sm2 import DEFAULT_POLICY, Rating, ReviewState, SchedulerPolicy, parse_rating, review

logger = logging.getLogger(__name__)

PersistFn = Callable[[Card, Rating, ReviewState], bool]


class SessionFinishedError(RuntimeError):
    pass


class ReviewPersistError(RuntimeError):
    def __init__(self, card_id: int):
        super().__init__(f"Review of card {card_id} was not persisted")
        self.card_id = card_id


class ReviewSession:
    """Sequential review over a batch fetched once at session start.

    The batch is never re-queried, so a card rated "again" does not come back
    until the next session. The cursor only moves after the caller confirms
    the new state was stored.
    """

    def __init__(
        self,
        user_id: str,
        cards: Sequence[Card],
        policy: SchedulerPolicy = DEFAULT_POLICY,
        session_id: Optional[str] = None,
    ):
        self.id = session_id or uuid.uuid4().hex
        self.user_id = user_id
        self.policy = policy
        self._cards: List[Card] = list(cards)
        self._index = 0
        self.reviewed = 0
        self.correct = 0
        self.touched_at = time.monotonic()

    @classmethod
    def from_due(
        cls,
        user_id: str,
        cards: Sequence[Card],
        today: date,
        limit: Optional[int] = None,
        policy: SchedulerPolicy = DEFAULT_POLICY,
    ) -> "ReviewSession":
        return cls(user_id, select_due(cards, today, limit), policy=policy)

    @property
    def total(self) -> int:
        return len(self._cards)

    @property
    def remaining(self) -> int:
        return self.total - self._index

    @property
    def finished(self) -> bool:
        return self._index >= self.total

    @property
    def current(self) -> Optional[Card]:
        if self.finished:
            return None
        return self._cards[self._index]

    @property
    def cards(self) -> List[Card]:
        return list(self._cards)

    def rate(self, rating: Union[str, Rating], today: date, persist: PersistFn) -> ReviewState:
        """Review the current card and advance once ``persist`` confirms the write."""
        card = self.current
        if card is None:
            raise SessionFinishedError(f"Session {self.id} has no cards left")
        rating = parse_rating(rating)
        new_state = review(card.review_state, rating, today, self.policy)
        if not persist(card, rating, new_state):
            logger.warning("Session %s: card %s not persisted, staying on it", self.id, card.id)
            raise ReviewPersistError(card.id)
        self._cards[self._index] = card.with_review_state(new_state)
        self._index += 1
        self.touched_at = time.monotonic()
        self.reviewed += 1
        if rating is not Rating.AGAIN:
            self.correct += 1
        if self.finished:
            logger.info(
                "Session %s finished: %d reviewed, %d correct", self.id, self.reviewed, self.correct
            )
        return new_state

    def skip(self) -> Optional[Card]:
        """Move past the current card without reviewing it."""
        card = self.current
        if card is None:
            raise SessionFinishedError(f"Session {self.id} has no cards left")
        self._index += 1
        self.touched_at = time.monotonic()
        return card

    def summary(self) -> Dict[str, object]:
        return {
            "session_id": self.id,
            "user_id": self.user_id,
            "total": self.total,
            "position": min(self._index + 1, self.total),
            "remaining": self.remaining,
            "reviewed": self.reviewed,
            "correct": self.correct,
            "finished": self.finished,
        }


# Sessions untouched for this long are dropped on the next start_session.
SESSION_MAX_IDLE_SECONDS = 6 * 60 * 60

_sessions: Dict[str, ReviewSession] = {}


def prune_sessions(max_idle: float = SESSION_MAX_IDLE_SECONDS, now: Optional[float] = None) -> int:
    """Drop finished sessions and sessions idle longer than ``max_idle`` seconds."""
    now = time.monotonic() if now is None else now
    stale = [
        session_id
        for session_id, session in _sessions.items()
        if session.finished or now - session.touched_at > max_idle
    ]
    for session_id in stale:
        del _sessions[session_id]
    if stale:
        logger.info("Dropped %d finished or idle sessions", len(stale))
    return len(stale)


def start_session(session: ReviewSession) -> ReviewSession:
    """Register ``session`` unless it is already finished (an empty batch)."""
    prune_sessions()
    logger.info("Session %s started for user %s with %d cards", session.id, session.user_id, session.total)
    if not session.finished:
        _sessions[session.id] = session
    return session


def get_session(session_id: str) -> Optional[ReviewSession]:
    return _sessions.get(session_id)


def end_session(session_id: str) -> Optional[ReviewSession]:
    return _sessions.pop(session_id, None)

"""SM-2 style scheduling: pure review-state transitions, no clock or storage access."""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, fields
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple, Union

logger = logging.getLogger(__name__)


class Rating(str, Enum):
    AGAIN = "again"
    HARD = "hard"
    GOOD = "good"
    EASY = "easy"


@dataclass(frozen=True)
class SchedulerPolicy:
    initial_ease: float = 2.5
    min_ease: float = 1.3
    again_penalty: float = 0.20
    hard_penalty: float = 0.15
    easy_bonus: float = 0.15
    relearn_interval: int = 1
    hard_multiplier: float = 1.2
    easy_multiplier: float = 1.3
    good_first_interval: int = 1
    good_second_interval: int = 3
    easy_first_interval: int = 4
    easy_second_interval: int = 7

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "SchedulerPolicy":
        """Build a policy from a config table, ignoring keys that are not policy knobs."""
        known = {f.name for f in fields(cls)}
        return cls(**{key: value for key, value in values.items() if key in known})


DEFAULT_POLICY = SchedulerPolicy()


@dataclass(frozen=True)
class ReviewState:
    ease_factor: float
    interval_days: int
    repetitions: int
    next_review_date: date
    last_review_date: Optional[date] = None


def new_review_state(created_on: date, policy: SchedulerPolicy = DEFAULT_POLICY) -> ReviewState:
    """Seed state for a freshly generated card: due on the day it was created."""
    return ReviewState(
        ease_factor=policy.initial_ease,
        interval_days=0,
        repetitions=0,
        next_review_date=created_on,
        last_review_date=None,
    )


def parse_rating(value: Union[str, Rating]) -> Rating:
    """Map a raw rating to Rating; anything outside again/hard/good/easy raises ValueError."""
    if isinstance(value, Rating):
        return value
    if not isinstance(value, str):
        raise ValueError(f"Rating must be a string, got {type(value).__name__}")
    try:
        return Rating(value.strip().lower())
    except ValueError:
        raise ValueError(
            f"Rating must be 'again', 'hard', 'good', or 'easy', got {value!r}"
        ) from None


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _clamp_ease(ease: float, policy: SchedulerPolicy) -> float:
    return max(policy.min_ease, round(ease, 2))


def _sanitize(state: ReviewState, policy: SchedulerPolicy) -> Tuple[float, int, int]:
    """Return (ease, interval, repetitions) safe to compute from.

    A stored ease below the floor is re-clamped. A card that claims successful
    repetitions but has no review date or no interval is inconsistent; it is
    scheduled as if it had never been reviewed.
    """
    if state.ease_factor < policy.min_ease:
        logger.warning(
            "Ease factor %.3f below floor %.2f, re-clamping", state.ease_factor, policy.min_ease
        )
    ease = _clamp_ease(state.ease_factor, policy)
    interval = state.interval_days
    repetitions = state.repetitions
    if interval < 0 or repetitions < 0:
        logger.warning(
            "Negative review counters (interval=%s, repetitions=%s), treating card as new",
            interval,
            repetitions,
        )
        return ease, 0, 0
    if repetitions > 0 and (state.last_review_date is None or interval == 0):
        logger.warning(
            "Card has %s repetitions but last_review_date=%s interval=%s, treating card as new",
            repetitions,
            state.last_review_date,
            interval,
        )
        return ease, 0, 0
    return ease, interval, repetitions


def _stepped_interval(
    repetitions: int,
    previous_interval: int,
    growth: float,
    first_interval: int,
    second_interval: int,
) -> int:
    if repetitions == 1:
        return first_interval
    if repetitions == 2:
        return second_interval
    return _round_half_up(previous_interval * growth)


def review(
    state: ReviewState,
    rating: Union[str, Rating],
    today: date,
    policy: SchedulerPolicy = DEFAULT_POLICY,
) -> ReviewState:
    """Apply one review to ``state`` and return the next state.

    ``today`` is the calendar date of the review; the engine never reads a
    clock. The input state is left untouched.
    """
    rating = parse_rating(rating)
    if isinstance(today, datetime):
        today = today.date()
    ease, interval, repetitions = _sanitize(state, policy)

    if rating is Rating.AGAIN:
        new_repetitions = 0
        new_ease = _clamp_ease(ease - policy.again_penalty, policy)
        new_interval = policy.relearn_interval
    elif rating is Rating.HARD:
        new_repetitions = repetitions + 1
        new_ease = _clamp_ease(ease - policy.hard_penalty, policy)
        new_interval = _round_half_up(interval * new_ease * policy.hard_multiplier)
    elif rating is Rating.GOOD:
        new_repetitions = repetitions + 1
        new_ease = ease
        new_interval = _stepped_interval(
            new_repetitions,
            interval,
            new_ease,
            policy.good_first_interval,
            policy.good_second_interval,
        )
    else:
        new_repetitions = repetitions + 1
        new_ease = _clamp_ease(ease + policy.easy_bonus, policy)
        new_interval = _stepped_interval(
            new_repetitions,
            interval,
            new_ease * policy.easy_multiplier,
            policy.easy_first_interval,
            policy.easy_second_interval,
        )

    # A reviewed card is never due again the same day.
    new_interval = max(1, new_interval)
    return ReviewState(
        ease_factor=new_ease,
        interval_days=new_interval,
        repetitions=new_repetitions,
        next_review_date=today + timedelta(days=new_interval),
        last_review_date=today,
    )


def preview_intervals(
    state: ReviewState,
    today: date,
    policy: SchedulerPolicy = DEFAULT_POLICY,
) -> Dict[Rating, int]:
    """Interval each rating would produce, for labelling rating buttons."""
    return {rating: review(state, rating, today, policy).interval_days for rating in Rating}

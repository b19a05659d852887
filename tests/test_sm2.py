import itertools
import logging
from datetime import date, timedelta

import pytest

from utils.sm2 import (
    DEFAULT_POLICY,
    Rating,
    ReviewState,
    SchedulerPolicy,
    new_review_state,
    parse_rating,
    preview_intervals,
    review,
)

DAY0 = date(2024, 3, 1)


def _day(n: int) -> date:
    return DAY0 + timedelta(days=n)


def _state(ease, interval, reps, last=DAY0):
    return ReviewState(
        ease_factor=ease,
        interval_days=interval,
        repetitions=reps,
        next_review_date=last + timedelta(days=interval),
        last_review_date=last,
    )


def test_new_card_seed_is_due_on_creation_day():
    state = new_review_state(DAY0)
    assert state == ReviewState(2.5, 0, 0, DAY0, None)


def test_new_card_rated_good_is_due_next_day():
    result = review(new_review_state(DAY0), Rating.GOOD, DAY0)
    assert result.interval_days == 1
    assert result.repetitions == 1
    assert result.ease_factor == pytest.approx(2.5)
    assert result.next_review_date == _day(1)
    assert result.last_review_date == DAY0


def test_second_good_uses_fixed_second_step():
    state = ReviewState(2.5, 1, 1, _day(1), DAY0)
    result = review(state, Rating.GOOD, _day(1))
    assert result.interval_days == 3
    assert result.repetitions == 2
    assert result.next_review_date == _day(4)


def test_again_resets_streak_and_penalizes_ease():
    state = _state(2.5, 10, 5, last=_day(10))
    result = review(state, "again", _day(20))
    assert result.ease_factor == pytest.approx(2.3)
    assert result.interval_days == 1
    assert result.repetitions == 0
    assert result.next_review_date == _day(21)


def test_hard_ease_never_drops_below_floor():
    result = review(_state(1.35, 5, 3), Rating.HARD, _day(5))
    assert result.ease_factor == pytest.approx(1.3)
    assert result.repetitions == 4
    # 5 * 1.3 * 1.2 = 7.8
    assert result.interval_days == 8


def test_good_after_second_step_multiplies_by_ease_rounding_half_up():
    # 5 * 2.5 = 12.5 rounds up, never down to the even 12
    result = review(_state(2.5, 5, 3), Rating.GOOD, _day(5))
    assert result.interval_days == 13
    assert result.repetitions == 4


def test_easy_uses_larger_seeds_and_bonus():
    first = review(new_review_state(DAY0), Rating.EASY, DAY0)
    assert (first.repetitions, first.interval_days) == (1, 4)
    assert first.ease_factor == pytest.approx(2.65)

    second = review(_state(2.5, 1, 1), Rating.EASY, _day(1))
    assert (second.repetitions, second.interval_days) == (2, 7)
    assert second.ease_factor == pytest.approx(2.65)

    third = review(_state(2.5, 3, 2), Rating.EASY, _day(3))
    # 3 * 2.65 * 1.3 = 10.335
    assert (third.repetitions, third.interval_days) == (3, 10)


def test_first_review_hard_counts_as_success():
    result = review(new_review_state(DAY0), Rating.HARD, DAY0)
    assert result.repetitions == 1
    assert result.interval_days == 1
    assert result.ease_factor == pytest.approx(2.35)


def test_first_review_again_stays_at_zero_repetitions():
    result = review(new_review_state(DAY0), Rating.AGAIN, DAY0)
    assert result.repetitions == 0
    assert result.interval_days == 1
    assert result.next_review_date == _day(1)


def test_corrupt_ease_self_heals_on_next_review(caplog):
    with caplog.at_level(logging.WARNING, logger="utils.sm2"):
        result = review(_state(0.9, 10, 4), Rating.GOOD, _day(10))
    assert result.ease_factor == pytest.approx(1.3)
    assert result.interval_days == 13
    assert "below floor" in caplog.text


def test_repetitions_without_review_date_is_scheduled_as_new(caplog):
    state = ReviewState(2.5, 6, 3, DAY0, None)
    with caplog.at_level(logging.WARNING, logger="utils.sm2"):
        result = review(state, Rating.GOOD, DAY0)
    assert result.repetitions == 1
    assert result.interval_days == 1
    assert "treating card as new" in caplog.text


def test_review_does_not_mutate_input_and_is_deterministic():
    state = _state(2.5, 3, 2)
    snapshot = ReviewState(**vars(state))
    first = review(state, Rating.GOOD, _day(3))
    second = review(state, Rating.GOOD, _day(3))
    assert first == second
    assert state == snapshot


def test_invalid_rating_fails_fast():
    with pytest.raises(ValueError):
        review(new_review_state(DAY0), "perfect", DAY0)
    with pytest.raises(ValueError):
        parse_rating(3)


def test_parse_rating_accepts_loose_strings():
    assert parse_rating(" GOOD ") is Rating.GOOD
    assert parse_rating(Rating.EASY) is Rating.EASY


def test_invariants_hold_for_any_rating_sequence():
    for sequence in itertools.product(list(Rating), repeat=5):
        state = new_review_state(DAY0)
        today = DAY0
        for rating in sequence:
            state = review(state, rating, today)
            assert state.ease_factor >= DEFAULT_POLICY.min_ease
            assert state.interval_days >= 1
            assert state.next_review_date == state.last_review_date + timedelta(days=state.interval_days)
            if rating is Rating.AGAIN:
                assert state.repetitions == 0
            today = state.next_review_date


def test_policy_from_mapping_ignores_unknown_keys():
    policy = SchedulerPolicy.from_mapping({"good_second_interval": 6, "timezone": "UTC"})
    assert policy.good_second_interval == 6
    result = review(ReviewState(2.5, 1, 1, _day(1), DAY0), Rating.GOOD, _day(1), policy)
    assert result.interval_days == 6


def test_preview_intervals_for_new_card():
    intervals = preview_intervals(new_review_state(DAY0), DAY0)
    assert intervals == {Rating.AGAIN: 1, Rating.HARD: 1, Rating.GOOD: 1, Rating.EASY: 4}

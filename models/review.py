from pydantic import BaseModel
from typing import Optional
from datetime import date

from models.card import Card
from utils.sm2 import Rating


class ReviewRequest(BaseModel):
    rating: Rating
    today: Optional[date] = None
    expected_version: Optional[int] = None


class SessionRateRequest(BaseModel):
    rating: Rating
    today: Optional[date] = None


class ReviewResult(BaseModel):
    card_id: int
    rating: Rating
    ease_factor: float
    interval_days: int
    repetitions: int
    next_review_date: date
    last_review_date: date
    version: int


class IntervalPreview(BaseModel):
    card_id: int
    again: int
    hard: int
    good: int
    easy: int


class SessionView(BaseModel):
    session_id: str
    user_id: str
    total: int
    position: int
    remaining: int
    reviewed: int
    correct: int
    finished: bool
    card: Optional[Card] = None


class SessionRateResult(BaseModel):
    result: ReviewResult
    session: SessionView

from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
from datetime import date, datetime
from enum import Enum

from utils.sm2 import ReviewState
from utils.tags import normalize_tags


class CardType(str, Enum):
    BASIC = "basic"
    CONCEPTUAL = "conceptual"
    APPLICATION = "application"
    SYNTOPICAL = "syntopical"


class CardDifficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class CardBase(BaseModel):
    front: str = Field(min_length=1)
    back: str = Field(min_length=1)
    card_type: CardType = CardType.BASIC
    difficulty: CardDifficulty = CardDifficulty.MEDIUM
    tags: List[str] = Field(default_factory=list)

    @field_validator("tags")
    @classmethod
    def clean_tags(cls, v):
        return normalize_tags(v)


class CardCreate(CardBase):
    chapter_id: int
    is_approved: bool = False


class CardUpdate(BaseModel):
    front: Optional[str] = Field(default=None, min_length=1)
    back: Optional[str] = Field(default=None, min_length=1)
    tags: Optional[List[str]] = None
    is_active: Optional[bool] = None
    is_approved: Optional[bool] = None

    @field_validator("front", "back", "tags", "is_active", "is_approved")
    @classmethod
    def reject_null(cls, v):
        # Omit a field to leave it unchanged; null is not a value any column accepts.
        if v is None:
            raise ValueError("must not be null")
        return v

    @field_validator("tags")
    @classmethod
    def clean_tags(cls, v):
        return normalize_tags(v)


class Card(CardBase):
    id: int
    user_id: str
    book_id: int
    chapter_id: int
    is_active: bool = True
    is_approved: bool = False
    ease_factor: float = 2.5
    interval_days: int = Field(default=0, ge=0)
    repetitions: int = Field(default=0, ge=0)
    next_review_date: date
    last_review_date: Optional[date] = None
    created_at: datetime
    version: int = 0

    class Config:
        from_attributes = True

    @property
    def review_state(self) -> ReviewState:
        return ReviewState(
            ease_factor=self.ease_factor,
            interval_days=self.interval_days,
            repetitions=self.repetitions,
            next_review_date=self.next_review_date,
            last_review_date=self.last_review_date,
        )

    def with_review_state(self, state: ReviewState) -> "Card":
        """Return a copy of the card carrying ``state`` and the next version."""
        return self.model_copy(
            update={
                "ease_factor": state.ease_factor,
                "interval_days": state.interval_days,
                "repetitions": state.repetitions,
                "next_review_date": state.next_review_date,
                "last_review_date": state.last_review_date,
                "version": self.version + 1,
            }
        )


class CardList(BaseModel):
    items: List[Card]
    total: int

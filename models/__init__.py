from .book import Book, BookCreate, BookStatus, Chapter, ChapterCreate
from .card import Card, CardCreate, CardUpdate, CardList, CardType, CardDifficulty
from .review import (
    Rating, ReviewRequest, ReviewResult, SessionRateRequest, IntervalPreview,
    SessionView, SessionRateResult,
)
from .stats import StudyStats

__all__ = [
    'Book', 'BookCreate', 'BookStatus', 'Chapter', 'ChapterCreate',
    'Card', 'CardCreate', 'CardUpdate', 'CardList', 'CardType', 'CardDifficulty',
    'Rating', 'ReviewRequest', 'ReviewResult', 'SessionRateRequest', 'IntervalPreview',
    'SessionView', 'SessionRateResult',
    'StudyStats',
]

# Routes package __init__.py - re-exports routers for main.py convenience
from .library import router as library_router
from .cards import router as cards_router
from .review import router as review_router
from .stats import router as stats_router

__all__ = ['library_router', 'cards_router', 'review_router', 'stats_router']

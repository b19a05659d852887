from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends

from db.database import get_db
from db.store import list_cards, list_review_dates
from models.stats import StudyStats
from utils.clock import resolve_today
from utils.progress import compute_study_stats

router = APIRouter()

@router.get("/{user_id}", response_model=StudyStats)
async def user_stats(user_id: str, today: Optional[date] = None, conn = Depends(get_db)):
    """Due, reviewed-today, total and streak counters for a user."""
    return compute_study_stats(
        list_cards(conn, user_id),
        resolve_today(today),
        review_dates=list_review_dates(conn, user_id),
    )

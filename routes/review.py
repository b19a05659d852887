from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from config import load_config, scheduler_policy_from_config
from db.database import get_db
from db.store import get_card, list_active_cards, save_review
from models.card import CardList
from models.review import (
    IntervalPreview,
    Rating,
    ReviewRequest,
    ReviewResult,
    SessionRateRequest,
    SessionRateResult,
    SessionView,
)
from utils.clock import resolve_today
from utils.due import select_due
from utils.session import (
    ReviewPersistError,
    ReviewSession,
    SessionFinishedError,
    end_session,
    get_session,
    start_session,
)
from utils.sm2 import preview_intervals, review

router = APIRouter()


def _session_view(session: ReviewSession) -> SessionView:
    return SessionView(**session.summary(), card=session.current)


def _require_session(session_id: str) -> ReviewSession:
    session = get_session(session_id)
    if not session:
        raise HTTPException(status_code=404, detail="Session not found")
    return session


@router.get("/cards/{card_id}/preview", response_model=IntervalPreview)
async def preview_card(card_id: int, today: Optional[date] = None, conn = Depends(get_db)):
    """Interval each rating would give this card, for the rating buttons."""
    card = get_card(conn, card_id)
    if not card:
        raise HTTPException(status_code=404, detail="Card not found")
    intervals = preview_intervals(card.review_state, resolve_today(today), scheduler_policy_from_config())
    return IntervalPreview(card_id=card.id, **{rating.value: days for rating, days in intervals.items()})


@router.post("/cards/{card_id}", response_model=ReviewResult)
async def review_card(card_id: int, body: ReviewRequest, conn = Depends(get_db)):
    """Apply one rating to one card outside of a session."""
    card = get_card(conn, card_id)
    if not card:
        raise HTTPException(status_code=404, detail="Card not found")
    if not card.is_active:
        raise HTTPException(status_code=409, detail="Card is suspended")
    if body.expected_version is not None and body.expected_version != card.version:
        raise HTTPException(status_code=409, detail="Card was reviewed elsewhere; reload it")
    today = resolve_today(body.today)
    new_state = review(card.review_state, body.rating, today, scheduler_policy_from_config())
    if not save_review(conn, card, body.rating, new_state):
        raise HTTPException(status_code=409, detail="Card was reviewed elsewhere; reload it")
    return ReviewResult(
        card_id=card.id,
        rating=body.rating,
        ease_factor=new_state.ease_factor,
        interval_days=new_state.interval_days,
        repetitions=new_state.repetitions,
        next_review_date=new_state.next_review_date,
        last_review_date=new_state.last_review_date,
        version=card.version + 1,
    )


@router.get("/sessions/{session_id}", response_model=SessionView)
async def session_status(session_id: str):
    return _session_view(_require_session(session_id))


@router.post("/sessions/{session_id}/rate", response_model=SessionRateResult)
async def rate_session_card(session_id: str, body: SessionRateRequest, conn = Depends(get_db)):
    """Rate the session's current card; the session advances only if the write lands."""
    session = _require_session(session_id)
    card = session.current
    if card is None:
        raise HTTPException(status_code=409, detail="Session is finished")
    stored = get_card(conn, card.id)
    if not stored or not stored.is_active:
        raise HTTPException(status_code=409, detail="Card is suspended or deleted; skip it")
    today = resolve_today(body.today)

    def persist(target, rating: Rating, state) -> bool:
        return save_review(conn, target, rating, state)

    try:
        new_state = session.rate(body.rating, today, persist)
    except SessionFinishedError:
        raise HTTPException(status_code=409, detail="Session is finished")
    except ReviewPersistError:
        raise HTTPException(status_code=409, detail="Card was reviewed elsewhere; skip it or end the session")
    if session.finished:
        end_session(session.id)
    result = ReviewResult(
        card_id=card.id,
        rating=body.rating,
        ease_factor=new_state.ease_factor,
        interval_days=new_state.interval_days,
        repetitions=new_state.repetitions,
        next_review_date=new_state.next_review_date,
        last_review_date=new_state.last_review_date,
        version=card.version + 1,
    )
    return SessionRateResult(result=result, session=_session_view(session))


@router.post("/sessions/{session_id}/skip", response_model=SessionView)
async def skip_session_card(session_id: str):
    session = _require_session(session_id)
    try:
        session.skip()
    except SessionFinishedError:
        raise HTTPException(status_code=409, detail="Session is finished")
    if session.finished:
        end_session(session.id)
    return _session_view(session)


@router.delete("/sessions/{session_id}", response_model=SessionView)
async def finish_session(session_id: str):
    session = end_session(session_id)
    if not session:
        raise HTTPException(status_code=404, detail="Session not found")
    return _session_view(session)


@router.get("/{user_id}/due", response_model=CardList)
async def due_cards(
    user_id: str,
    limit: Optional[int] = Query(default=None, ge=0),
    today: Optional[date] = None,
    conn = Depends(get_db),
):
    """Cards due for the user, most overdue first."""
    cards = select_due(list_active_cards(conn, user_id), resolve_today(today), limit)
    return CardList(items=cards, total=len(cards))


@router.post("/{user_id}/sessions", response_model=SessionView, status_code=201)
async def create_session(
    user_id: str,
    limit: Optional[int] = Query(default=None, ge=1),
    today: Optional[date] = None,
    conn = Depends(get_db),
):
    """Fetch one due batch and open a session over it."""
    config = load_config()
    if limit is None:
        limit = config["scheduler"]["default_session_limit"]
    session = ReviewSession.from_due(
        user_id,
        list_active_cards(conn, user_id),
        resolve_today(today),
        limit=limit,
        policy=scheduler_policy_from_config(config),
    )
    start_session(session)
    return _session_view(session)

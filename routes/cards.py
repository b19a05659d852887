from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from config import scheduler_policy_from_config
from db.database import get_db
from db import store
from models.card import Card, CardCreate, CardList, CardUpdate
from utils.clock import resolve_today

router = APIRouter()

@router.post("", response_model=Card, status_code=status.HTTP_201_CREATED)
async def create_card(body: CardCreate, today: Optional[date] = None, conn = Depends(get_db)):
    """Add a generated card to a chapter; it is due the day it is created."""
    chapter = store.get_chapter(conn, body.chapter_id)
    if not chapter:
        raise HTTPException(status_code=404, detail="Chapter not found")
    return store.create_card(
        conn,
        chapter,
        body,
        created_on=resolve_today(today),
        policy=scheduler_policy_from_config(),
    )

@router.get("", response_model=CardList)
async def list_cards(
    user_id: str = Query(..., min_length=1),
    chapter_id: Optional[int] = None,
    conn = Depends(get_db),
):
    items = store.list_cards(conn, user_id, chapter_id=chapter_id)
    return CardList(items=items, total=len(items))

@router.get("/{card_id}", response_model=Card)
async def get_card(card_id: int, conn = Depends(get_db)):
    card = store.get_card(conn, card_id)
    if not card:
        raise HTTPException(status_code=404, detail="Card not found")
    return card

@router.patch("/{card_id}", response_model=Card)
async def update_card(card_id: int, body: CardUpdate, conn = Depends(get_db)):
    """Edit content, tags or lifecycle flags; review state is not editable."""
    if not store.get_card(conn, card_id):
        raise HTTPException(status_code=404, detail="Card not found")
    return store.update_card(conn, card_id, body)

@router.post("/{card_id}/approve", response_model=Card)
async def approve_card(card_id: int, conn = Depends(get_db)):
    """Accept a generated card into the user's deck."""
    if not store.get_card(conn, card_id):
        raise HTTPException(status_code=404, detail="Card not found")
    return store.update_card(conn, card_id, CardUpdate(is_approved=True))

@router.delete("/{card_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_card(card_id: int, conn = Depends(get_db)):
    if not store.delete_card(conn, card_id):
        raise HTTPException(status_code=404, detail="Card not found")

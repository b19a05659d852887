"""Persistence for books, chapters, cards and the review log."""
from __future__ import annotations

import logging
import sqlite3
from datetime import date, datetime, timezone
from typing import List, Optional

from models.book import Book, BookCreate, Chapter, ChapterCreate
from models.card import Card, CardCreate, CardUpdate
from utils.sm2 import DEFAULT_POLICY, Rating, ReviewState, SchedulerPolicy, new_review_state
from utils.tags import set_card_tags

logger = logging.getLogger(__name__)

_CARD_SELECT = """
    SELECT
        c.*,
        GROUP_CONCAT(t.name, ',') AS tags
    FROM cards c
    LEFT JOIN card_tags ct ON ct.card_id = c.id
    LEFT JOIN tags t ON t.id = ct.tag_id
"""


def _utcnow() -> str:
    return datetime.now(timezone.utc).isoformat()


def _row_to_card(row: sqlite3.Row) -> Card:
    data = dict(row)
    data["tags"] = [tag for tag in (data.get("tags") or "").split(",") if tag]
    return Card.model_validate(data)


# --- Books ---

def create_book(conn: sqlite3.Connection, data: BookCreate) -> Book:
    cursor = conn.cursor()
    created_at = _utcnow()
    cursor.execute(
        "INSERT INTO books (user_id, title, author, status, created_at) VALUES (?, ?, ?, ?, ?)",
        (data.user_id, data.title, data.author, data.status.value, created_at),
    )
    conn.commit()
    return get_book(conn, cursor.lastrowid)


def get_book(conn: sqlite3.Connection, book_id: int) -> Optional[Book]:
    row = conn.execute("SELECT * FROM books WHERE id = ?", (book_id,)).fetchone()
    return Book.model_validate(dict(row)) if row else None


def list_books(conn: sqlite3.Connection, user_id: str) -> List[Book]:
    rows = conn.execute(
        "SELECT * FROM books WHERE user_id = ? ORDER BY created_at DESC, id DESC",
        (user_id,),
    ).fetchall()
    return [Book.model_validate(dict(row)) for row in rows]


def delete_book(conn: sqlite3.Connection, book_id: int) -> bool:
    """Delete a book; chapters, cards and review history go with it."""
    cursor = conn.cursor()
    cursor.execute("DELETE FROM books WHERE id = ?", (book_id,))
    conn.commit()
    return cursor.rowcount > 0


# --- Chapters ---

def create_chapter(conn: sqlite3.Connection, book: Book, data: ChapterCreate) -> Chapter:
    cursor = conn.cursor()
    cursor.execute(
        """
        INSERT INTO chapters (book_id, user_id, title, chapter_number, created_at)
        VALUES (?, ?, ?, ?, ?)
        """,
        (book.id, book.user_id, data.title, data.chapter_number, _utcnow()),
    )
    conn.commit()
    return get_chapter(conn, cursor.lastrowid)


def get_chapter(conn: sqlite3.Connection, chapter_id: int) -> Optional[Chapter]:
    row = conn.execute("SELECT * FROM chapters WHERE id = ?", (chapter_id,)).fetchone()
    return Chapter.model_validate(dict(row)) if row else None


def list_chapters(conn: sqlite3.Connection, book_id: int) -> List[Chapter]:
    rows = conn.execute(
        "SELECT * FROM chapters WHERE book_id = ? ORDER BY chapter_number, id",
        (book_id,),
    ).fetchall()
    return [Chapter.model_validate(dict(row)) for row in rows]


def delete_chapter(conn: sqlite3.Connection, chapter_id: int) -> bool:
    """Delete a chapter and, through the foreign key cascade, its cards."""
    cursor = conn.cursor()
    cursor.execute("DELETE FROM chapters WHERE id = ?", (chapter_id,))
    conn.commit()
    return cursor.rowcount > 0


# --- Cards ---

def create_card(
    conn: sqlite3.Connection,
    chapter: Chapter,
    data: CardCreate,
    created_on: date,
    created_at: Optional[datetime] = None,
    policy: SchedulerPolicy = DEFAULT_POLICY,
) -> Card:
    """Insert a generated card with the initial review state, due on ``created_on``."""
    seed = new_review_state(created_on, policy)
    created_at = created_at or datetime.now(timezone.utc)
    cursor = conn.cursor()
    cursor.execute(
        """
        INSERT INTO cards (
            user_id, book_id, chapter_id, front, back, card_type, difficulty,
            is_active, is_approved, ease_factor, interval_days, repetitions,
            next_review_date, last_review_date, created_at, version
        )
        VALUES (?, ?, ?, ?, ?, ?, ?, 1, ?, ?, ?, ?, ?, NULL, ?, 0)
        """,
        (
            chapter.user_id,
            chapter.book_id,
            chapter.id,
            data.front,
            data.back,
            data.card_type.value,
            data.difficulty.value,
            int(data.is_approved),
            seed.ease_factor,
            seed.interval_days,
            seed.repetitions,
            seed.next_review_date.isoformat(),
            created_at.isoformat(),
        ),
    )
    card_id = cursor.lastrowid
    set_card_tags(conn, card_id, data.tags)
    conn.commit()
    return get_card(conn, card_id)


def get_card(conn: sqlite3.Connection, card_id: int) -> Optional[Card]:
    row = conn.execute(_CARD_SELECT + " WHERE c.id = ? GROUP BY c.id", (card_id,)).fetchone()
    return _row_to_card(row) if row else None


def list_cards(
    conn: sqlite3.Connection,
    user_id: str,
    chapter_id: Optional[int] = None,
    active_only: bool = False,
) -> List[Card]:
    clauses = ["c.user_id = ?"]
    params: list = [user_id]
    if chapter_id is not None:
        clauses.append("c.chapter_id = ?")
        params.append(chapter_id)
    if active_only:
        clauses.append("c.is_active = 1")
    rows = conn.execute(
        _CARD_SELECT + f" WHERE {' AND '.join(clauses)} GROUP BY c.id ORDER BY c.created_at, c.id",
        params,
    ).fetchall()
    return [_row_to_card(row) for row in rows]


def list_active_cards(conn: sqlite3.Connection, user_id: str) -> List[Card]:
    return list_cards(conn, user_id, active_only=True)


def update_card(conn: sqlite3.Connection, card_id: int, changes: CardUpdate) -> Optional[Card]:
    """Apply an edit; review state is never touched here."""
    fields = {
        name: value
        for name, value in changes.model_dump(exclude_unset=True, exclude={"tags"}).items()
        if value is not None
    }
    cursor = conn.cursor()
    if fields:
        assignments = ", ".join(f"{name} = ?" for name in fields)
        values = [int(value) if isinstance(value, bool) else value for value in fields.values()]
        cursor.execute(f"UPDATE cards SET {assignments} WHERE id = ?", (*values, card_id))
    if changes.tags is not None:
        set_card_tags(conn, card_id, changes.tags)
    conn.commit()
    return get_card(conn, card_id)


def delete_card(conn: sqlite3.Connection, card_id: int) -> bool:
    cursor = conn.cursor()
    cursor.execute("DELETE FROM cards WHERE id = ?", (card_id,))
    conn.commit()
    return cursor.rowcount > 0


# --- Reviews ---

def persist_review_state(
    conn: sqlite3.Connection,
    card_id: int,
    state: ReviewState,
    expected_version: int,
) -> bool:
    """Compare-and-set the review state; False when another write got there first."""
    cursor = conn.cursor()
    cursor.execute(
        """
        UPDATE cards
        SET ease_factor = ?, interval_days = ?, repetitions = ?,
            next_review_date = ?, last_review_date = ?, version = version + 1
        WHERE id = ? AND version = ?
        """,
        (
            state.ease_factor,
            state.interval_days,
            state.repetitions,
            state.next_review_date.isoformat(),
            state.last_review_date.isoformat() if state.last_review_date else None,
            card_id,
            expected_version,
        ),
    )
    return cursor.rowcount == 1


def record_review(
    conn: sqlite3.Connection,
    card: Card,
    rating: Rating,
    state: ReviewState,
) -> None:
    conn.execute(
        """
        INSERT INTO reviews (card_id, user_id, rating, reviewed_on, ease_factor, interval_days)
        VALUES (?, ?, ?, ?, ?, ?)
        """,
        (
            card.id,
            card.user_id,
            rating.value,
            state.last_review_date.isoformat(),
            state.ease_factor,
            state.interval_days,
        ),
    )


def save_review(conn: sqlite3.Connection, card: Card, rating: Rating, state: ReviewState) -> bool:
    """Store one review event atomically: state update and log row commit together."""
    if not persist_review_state(conn, card.id, state, card.version):
        conn.rollback()
        logger.warning("Stale review write rejected for card %s at version %s", card.id, card.version)
        return False
    record_review(conn, card, rating, state)
    conn.commit()
    return True


def list_review_dates(conn: sqlite3.Connection, user_id: str) -> List[date]:
    rows = conn.execute(
        "SELECT DISTINCT reviewed_on FROM reviews WHERE user_id = ? ORDER BY reviewed_on",
        (user_id,),
    ).fetchall()
    return [date.fromisoformat(row[0]) for row in rows]

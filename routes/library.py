from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, status

from db.database import get_db
from db import store
from models.book import Book, BookCreate, Chapter, ChapterCreate

router = APIRouter()

@router.post("/books", response_model=Book, status_code=status.HTTP_201_CREATED)
async def create_book(body: BookCreate, conn = Depends(get_db)):
    return store.create_book(conn, body)

@router.get("/books", response_model=List[Book])
async def list_books(user_id: str = Query(..., min_length=1), conn = Depends(get_db)):
    """Books for a user, newest first."""
    return store.list_books(conn, user_id)

@router.get("/books/{book_id}", response_model=Book)
async def get_book(book_id: int, conn = Depends(get_db)):
    book = store.get_book(conn, book_id)
    if not book:
        raise HTTPException(status_code=404, detail="Book not found")
    return book

@router.delete("/books/{book_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_book(book_id: int, conn = Depends(get_db)):
    """Delete a book with its chapters and cards."""
    if not store.delete_book(conn, book_id):
        raise HTTPException(status_code=404, detail="Book not found")

@router.post("/books/{book_id}/chapters", response_model=Chapter, status_code=status.HTTP_201_CREATED)
async def create_chapter(book_id: int, body: ChapterCreate, conn = Depends(get_db)):
    book = store.get_book(conn, book_id)
    if not book:
        raise HTTPException(status_code=404, detail="Book not found")
    return store.create_chapter(conn, book, body)

@router.get("/books/{book_id}/chapters", response_model=List[Chapter])
async def list_chapters(book_id: int, conn = Depends(get_db)):
    if not store.get_book(conn, book_id):
        raise HTTPException(status_code=404, detail="Book not found")
    return store.list_chapters(conn, book_id)

@router.delete("/chapters/{chapter_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_chapter(chapter_id: int, conn = Depends(get_db)):
    """Delete a chapter; its cards are removed with it."""
    if not store.delete_chapter(conn, chapter_id):
        raise HTTPException(status_code=404, detail="Chapter not found")

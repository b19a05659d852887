from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from enum import Enum


class BookStatus(str, Enum):
    READING = "reading"
    COMPLETED = "completed"
    PAUSED = "paused"


class BookBase(BaseModel):
    title: str = Field(min_length=1)
    author: Optional[str] = None
    status: BookStatus = BookStatus.READING


class BookCreate(BookBase):
    user_id: str = Field(min_length=1)


class Book(BookBase):
    id: int
    user_id: str
    created_at: datetime

    class Config:
        from_attributes = True


class ChapterBase(BaseModel):
    title: str = Field(min_length=1)
    chapter_number: int = Field(ge=0)


class ChapterCreate(ChapterBase):
    pass


class Chapter(ChapterBase):
    id: int
    book_id: int
    user_id: str
    created_at: datetime

    class Config:
        from_attributes = True

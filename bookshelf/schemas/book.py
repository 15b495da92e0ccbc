"""Book schemas."""

from __future__ import annotations

import time
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

GENRES = [
    "Fiction",
    "Non-Fiction",
    "Science Fiction",
    "Fantasy",
    "Mystery",
    "Thriller",
    "Romance",
    "Biography",
    "History",
    "Science",
    "Self-Help",
    "Business",
]


def new_book_id() -> int:
    """Client-assigned id: current time in milliseconds."""
    return int(time.time() * 1000)


class BookRecord(BaseModel):
    id: int
    title: str = Field(..., min_length=1)
    author: str = Field(..., min_length=1)
    price: float = Field(..., ge=0)
    description: str = ""
    rating: Optional[float] = Field(None, ge=0, le=5)
    review_count: Optional[int] = Field(None, ge=0, alias="reviewCount")
    pages: Optional[int] = Field(None, ge=0)
    genre: Optional[str] = None
    isbn: Optional[str] = None
    publisher: Optional[str] = None
    published_date: Optional[str] = Field(None, alias="publishedDate")
    cover_image: Optional[str] = Field(None, alias="coverImage")

    model_config = ConfigDict(populate_by_name=True)

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class BookListResponse(BaseModel):
    success: bool = True
    data: list[BookRecord]
    error: Optional[str] = None


class DeleteResult(BaseModel):
    success: bool
    error: Optional[str] = None


class GenreListResponse(BaseModel):
    genres: list[str]

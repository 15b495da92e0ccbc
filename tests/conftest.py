"""Shared test configuration and fixtures."""

from __future__ import annotations

import os
import sys
from pathlib import Path

# Ensure the project root is on sys.path so `bookshelf.*` resolves
PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

# Test environment, set before any bookshelf module reads settings
os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("CACHE_ENABLED", "false")
os.environ.setdefault("LOG_FORMAT", "console")
os.environ.setdefault("AWS_ACCESS_KEY_ID", "testing")
os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "testing")
os.environ.setdefault("AWS_DEFAULT_REGION", "us-east-1")
os.environ.setdefault("HTTP_RETRY_MIN_WAIT", "0")
os.environ.setdefault("HTTP_RETRY_MAX_WAIT", "0")

import pytest  # noqa: E402

from bookshelf.schemas.book import BookRecord, DeleteResult  # noqa: E402


def make_book(book_id: int, title: str = "Untitled", **fields) -> BookRecord:
    data = {"id": book_id, "title": title, "author": "Some Author", "price": 10.0}
    data.update(fields)
    return BookRecord(**data)


class FakeCatalog:
    """In-memory stand-in for the catalog API client."""

    def __init__(self, books=(), delete_result=None, delete_error=None, list_error=None):
        self.books = list(books)
        self.delete_result = delete_result
        self.delete_error = delete_error
        self.list_error = list_error
        self.list_calls: list[bool] = []
        self.delete_calls: list[int] = []

    async def list_books(self, fresh: bool = False):
        self.list_calls.append(fresh)
        if self.list_error is not None:
            raise self.list_error
        return list(self.books)

    async def delete_book(self, book_id: int) -> DeleteResult:
        self.delete_calls.append(book_id)
        if self.delete_error is not None:
            raise self.delete_error
        if self.delete_result is not None:
            return self.delete_result
        self.books = [b for b in self.books if b.id != book_id]
        return DeleteResult(success=True)


@pytest.fixture
def sample_books() -> list[BookRecord]:
    return [
        make_book(1, "Dune", author="Frank Herbert", price=9.99, rating=4.6,
                  genre="Science Fiction", isbn="978-0441172719", publishedDate="1965-08-01"),
        make_book(2, "The Hobbit", author="J.R.R. Tolkien", price=8.99, rating=4.7,
                  genre="Fantasy", isbn="978-0547928227", publishedDate="1937-09-21"),
        make_book(3, "Gone Girl", author="Gillian Flynn", price=11.5, rating=4.1,
                  genre="Thriller", publishedDate="2012-06-05"),
        make_book(4, "Free Classics", author="Various", price=0, genre="fiction"),
    ]

"""Error taxonomy for the catalog."""

from __future__ import annotations


class BookshelfError(Exception):
    """Base class for all catalog errors."""


class RemoteOperationFailure(BookshelfError):
    """A delete or fetch against the catalog API failed."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class ReconciliationFailure(RemoteOperationFailure):
    """The refresh after a successful delete failed. Never fatal."""


class StoreError(BookshelfError):
    """The record store could not complete an operation."""


class BookNotFound(StoreError):
    def __init__(self, book_id: int):
        super().__init__(f"Book {book_id} not found")
        self.book_id = book_id


class BookAlreadyExists(StoreError):
    def __init__(self, book_id: int):
        super().__init__(f"Book {book_id} already exists")
        self.book_id = book_id


class CoverValidationError(BookshelfError):
    """Uploaded cover image was rejected before reaching storage."""


class CoverStoreError(BookshelfError):
    """The cover store could not complete an operation."""

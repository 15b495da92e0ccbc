"""Book record routes — thin handlers over the DynamoDB record store."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from bookshelf.database import get_books_table
from bookshelf.exceptions import BookAlreadyExists, BookNotFound, StoreError
from bookshelf.schemas.book import GENRES, BookListResponse, BookRecord, DeleteResult, GenreListResponse
from bookshelf.services import book_store, cache

logger = structlog.get_logger()
router = APIRouter(prefix="/books", tags=["Books"])


def _bypass_cache(request: Request) -> bool:
    directives = f"{request.headers.get('cache-control', '')},{request.headers.get('pragma', '')}".lower()
    return "no-cache" in directives or "no-store" in directives


@router.get("", response_model=BookListResponse, response_model_exclude_none=True)
async def list_books(request: Request, table=Depends(get_books_table)):
    """Full catalog listing. ``Cache-Control: no-cache`` skips the list cache."""
    generation = await cache.current_generation()
    if not _bypass_cache(request):
        cached = await cache.get_book_list(generation)
        if cached is not None:
            return BookListResponse(data=cached)

    try:
        books = await run_in_threadpool(book_store.list_books, table)
    except StoreError:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"success": False, "error": "Failed to fetch books", "data": []},
        )

    await cache.store_book_list(books, generation)
    return BookListResponse(data=books)


@router.get("/genres", response_model=GenreListResponse)
async def list_genres():
    """Suggested genres for pickers. Stored genres are free-form."""
    return GenreListResponse(genres=GENRES)


@router.get("/{book_id}", response_model=BookRecord, response_model_exclude_none=True)
async def get_book(book_id: int, table=Depends(get_books_table)):
    try:
        return await run_in_threadpool(book_store.get_book, table, book_id)
    except BookNotFound:
        raise HTTPException(status_code=404, detail="Book not found")
    except StoreError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.post(
    "",
    response_model=BookRecord,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
)
async def create_book(data: BookRecord, table=Depends(get_books_table)):
    try:
        book = await run_in_threadpool(book_store.create_book, table, data)
    except BookAlreadyExists:
        raise HTTPException(status_code=409, detail="Book already exists")
    except StoreError as e:
        raise HTTPException(status_code=500, detail=str(e))
    await cache.invalidate_book_list()
    return book


@router.put("/{book_id}", response_model=BookRecord, response_model_exclude_none=True)
async def put_book(book_id: int, data: BookRecord, table=Depends(get_books_table)):
    """Create or replace the whole record."""
    if data.id != book_id:
        raise HTTPException(status_code=400, detail="Book id does not match path")
    try:
        book = await run_in_threadpool(book_store.put_book, table, data)
    except StoreError as e:
        raise HTTPException(status_code=500, detail=str(e))
    await cache.invalidate_book_list()
    return book


@router.delete("/{book_id}", response_model=DeleteResult, response_model_exclude_none=True)
async def delete_book(book_id: int, table=Depends(get_books_table)):
    try:
        await run_in_threadpool(book_store.delete_book, table, book_id)
    except StoreError:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"success": False, "error": "Failed to delete book"},
        )
    await cache.invalidate_book_list()
    return DeleteResult(success=True)

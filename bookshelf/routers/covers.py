"""Cover image upload/delete routes."""

from __future__ import annotations

from typing import Any, Optional

import structlog
from fastapi import APIRouter, Body, Depends, File, Form, HTTPException, UploadFile
from fastapi.concurrency import run_in_threadpool

from bookshelf.config import get_settings
from bookshelf.exceptions import CoverStoreError, CoverValidationError
from bookshelf.services import cover_store
from bookshelf.services.cover_store import CoverUpload, get_s3_client

logger = structlog.get_logger()
router = APIRouter(prefix="/covers", tags=["Covers"])


@router.post("", response_model=CoverUpload)
async def upload_cover(
    file: Optional[UploadFile] = File(None),
    book_id: Optional[str] = Form(None, alias="bookId"),
    s3=Depends(get_s3_client),
):
    if file is None:
        raise HTTPException(status_code=400, detail="No file provided")
    if not book_id:
        raise HTTPException(status_code=400, detail="No bookId provided")

    # One byte past the cap is enough to reject an oversized upload.
    content = await file.read(get_settings().cover_max_bytes + 1)
    try:
        return await run_in_threadpool(
            cover_store.upload_cover, s3, book_id, content, file.content_type
        )
    except CoverValidationError as e:
        logger.info("cover_rejected", book_id=book_id, reason=str(e))
        raise HTTPException(status_code=400, detail=str(e))
    except CoverStoreError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.delete("")
async def delete_cover(
    payload: dict[str, Any] = Body(default_factory=dict),
    s3=Depends(get_s3_client),
):
    key = payload.get("key")
    if not key or not isinstance(key, str):
        raise HTTPException(status_code=400, detail="Missing or invalid object key.")
    try:
        await run_in_threadpool(cover_store.delete_cover, s3, key)
    except CoverStoreError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return {"message": "File deleted successfully"}

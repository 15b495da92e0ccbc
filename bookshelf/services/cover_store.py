"""
Cover image store — uploads and deletes book covers in S3.
Supports LocalStack in development and real AWS in production via aws_endpoint_url.
"""

from __future__ import annotations

from functools import lru_cache

import structlog
from botocore.exceptions import BotoCoreError, ClientError
from pydantic import BaseModel, Field

from bookshelf.config import get_settings
from bookshelf.exceptions import CoverStoreError, CoverValidationError

logger = structlog.get_logger()

ALLOWED_CONTENT_TYPES = {
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
}


class CoverUpload(BaseModel):
    image_url: str = Field(..., alias="imageUrl")
    key: str

    model_config = {"populate_by_name": True}


@lru_cache()
def get_s3_client():
    """Create an S3 client, routing to LocalStack when aws_endpoint_url is set."""
    import boto3

    settings = get_settings()
    kwargs = {"region_name": settings.aws_region}
    if settings.aws_endpoint_url:
        kwargs["endpoint_url"] = settings.aws_endpoint_url
    return boto3.client("s3", **kwargs)


def cover_key(book_id: int | str, content_type: str) -> str:
    settings = get_settings()
    ext = ALLOWED_CONTENT_TYPES.get(content_type, "jpg")
    return f"{settings.covers_folder}/book-{book_id}.{ext}"


def cover_url(key: str) -> str:
    return f"{get_settings().covers_base_url}/{key}"


def validate_cover(content_type: str | None, size: int) -> None:
    if content_type not in ALLOWED_CONTENT_TYPES:
        raise CoverValidationError("Invalid file type. Only JPG, PNG, and WebP are allowed.")
    max_bytes = get_settings().cover_max_bytes
    if size > max_bytes:
        raise CoverValidationError(f"File size must be less than {max_bytes // (1024 * 1024)}MB.")


def upload_cover(s3, book_id: int | str, content: bytes, content_type: str) -> CoverUpload:
    """Validate and store a cover; an existing cover for the book is replaced."""
    validate_cover(content_type, len(content))
    key = cover_key(book_id, content_type)
    try:
        s3.put_object(
            Bucket=get_settings().covers_bucket,
            Key=key,
            Body=content,
            ContentType=content_type,
        )
    except (ClientError, BotoCoreError) as e:
        logger.error("cover_upload_error", key=key, error=str(e))
        raise CoverStoreError("Failed to upload file") from e
    logger.info("cover_uploaded", book_id=str(book_id), key=key, size=len(content))
    return CoverUpload(image_url=cover_url(key), key=key)


def delete_cover(s3, key: str) -> None:
    try:
        s3.delete_object(Bucket=get_settings().covers_bucket, Key=key)
    except (ClientError, BotoCoreError) as e:
        logger.error("cover_delete_error", key=key, error=str(e))
        raise CoverStoreError("Failed to delete file.") from e
    logger.info("cover_deleted", key=key)

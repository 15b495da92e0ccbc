"""DynamoDB resource, books table handle, and FastAPI dependency."""

from __future__ import annotations

from functools import lru_cache

import boto3

from bookshelf.config import get_settings


@lru_cache()
def get_dynamodb():
    """DynamoDB resource, routed to LocalStack when aws_endpoint_url is set."""
    settings = get_settings()
    kwargs = {"region_name": settings.aws_region}
    if settings.aws_endpoint_url:
        kwargs["endpoint_url"] = settings.aws_endpoint_url
    return boto3.resource("dynamodb", **kwargs)


def get_books_table():
    return get_dynamodb().Table(get_settings().books_table_name)

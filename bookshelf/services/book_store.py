"""
Book record store backed by a DynamoDB table keyed by numeric ``id``.

Writes are whole-record puts (create-or-replace); there is no partial
update path. DynamoDB returns numbers as ``Decimal`` and rejects Python
floats, so items are converted on the way in and out.
"""

from __future__ import annotations

import json
from decimal import Decimal
from typing import Any

import structlog
from botocore.exceptions import BotoCoreError, ClientError
from pydantic import ValidationError

from bookshelf.exceptions import BookAlreadyExists, BookNotFound, StoreError
from bookshelf.schemas.book import BookRecord

logger = structlog.get_logger()


def to_item(book: BookRecord) -> dict[str, Any]:
    return json.loads(json.dumps(book.to_wire()), parse_float=Decimal)


def _plain(value: Any) -> Any:
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_plain(v) for v in value]
    return value


def from_item(item: dict[str, Any]) -> BookRecord:
    return BookRecord.model_validate(_plain(item))


def _error_code(exc: ClientError) -> str:
    return exc.response.get("Error", {}).get("Code", "")


def list_books(table) -> list[BookRecord]:
    """Scan the whole table, following pagination."""
    books: list[BookRecord] = []
    kwargs: dict[str, Any] = {}
    try:
        while True:
            page = table.scan(**kwargs)
            for item in page.get("Items", []):
                try:
                    books.append(from_item(item))
                except ValidationError:
                    logger.warning("book_item_invalid", book_id=str(item.get("id")))
            last_key = page.get("LastEvaluatedKey")
            if not last_key:
                break
            kwargs["ExclusiveStartKey"] = last_key
    except (ClientError, BotoCoreError) as e:
        logger.error("book_scan_error", error=str(e))
        raise StoreError("Failed to fetch books") from e
    return books


def get_book(table, book_id: int) -> BookRecord:
    try:
        item = table.get_item(Key={"id": book_id}).get("Item")
    except (ClientError, BotoCoreError) as e:
        logger.error("book_get_error", book_id=book_id, error=str(e))
        raise StoreError("Failed to fetch book") from e
    if not item:
        raise BookNotFound(book_id)
    return from_item(item)


def create_book(table, book: BookRecord) -> BookRecord:
    """Insert a new record; fails if the id is already taken."""
    try:
        table.put_item(Item=to_item(book), ConditionExpression="attribute_not_exists(id)")
    except ClientError as e:
        if _error_code(e) == "ConditionalCheckFailedException":
            raise BookAlreadyExists(book.id) from e
        logger.error("book_create_error", book_id=book.id, error=str(e))
        raise StoreError("Failed to create book") from e
    except BotoCoreError as e:
        logger.error("book_create_error", book_id=book.id, error=str(e))
        raise StoreError("Failed to create book") from e
    logger.info("book_created", book_id=book.id)
    return book


def put_book(table, book: BookRecord) -> BookRecord:
    """Create or replace the record with ``book.id``."""
    try:
        table.put_item(Item=to_item(book))
    except (ClientError, BotoCoreError) as e:
        logger.error("book_put_error", book_id=book.id, error=str(e))
        raise StoreError("Failed to save book") from e
    logger.info("book_saved", book_id=book.id)
    return book


def delete_book(table, book_id: int) -> None:
    """Delete by id. Deleting a missing id is not an error."""
    try:
        table.delete_item(Key={"id": book_id})
    except (ClientError, BotoCoreError) as e:
        logger.error("book_delete_error", book_id=book_id, error=str(e))
        raise StoreError("Failed to delete book") from e
    logger.info("book_deleted", book_id=book_id)


def ensure_table(dynamodb, table_name: str):
    """Create the books table if it does not exist yet and return it."""
    existing = {t.name for t in dynamodb.tables.all()}
    if table_name in existing:
        return dynamodb.Table(table_name)
    table = dynamodb.create_table(
        TableName=table_name,
        KeySchema=[{"AttributeName": "id", "KeyType": "HASH"}],
        AttributeDefinitions=[{"AttributeName": "id", "AttributeType": "N"}],
        BillingMode="PAY_PER_REQUEST",
    )
    table.wait_until_exists()
    logger.info("books_table_created", table=table_name)
    return table

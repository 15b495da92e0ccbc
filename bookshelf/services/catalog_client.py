"""HTTP client for the catalog API with circuit breaker and retry."""

from __future__ import annotations

from typing import Any, Optional

import httpx
import structlog
from circuitbreaker import CircuitBreaker, CircuitBreakerError
from pydantic import ValidationError
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from bookshelf.config import Settings, get_settings
from bookshelf.exceptions import RemoteOperationFailure
from bookshelf.schemas.book import BookRecord, DeleteResult

logger = structlog.get_logger()

NO_CACHE_HEADERS = {"Cache-Control": "no-cache", "Pragma": "no-cache"}


def _reason(response: httpx.Response, default: str) -> str:
    """Human-readable failure reason from an error response body."""
    try:
        body = response.json()
    except ValueError:
        return default
    if isinstance(body, dict):
        for key in ("error", "detail"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
    return default


class CatalogClient:
    """Async client for the /books endpoints.

    Transport errors are retried with exponential backoff; repeated
    failures open the circuit and later calls fail fast until the
    recovery timeout passes.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings or get_settings()
        self._client = httpx.AsyncClient(
            base_url=base_url or self.settings.catalog_api_url,
            timeout=httpx.Timeout(
                self.settings.http_timeout_seconds,
                connect=self.settings.http_connect_timeout_seconds,
            ),
            transport=transport,
        )
        self._breaker = CircuitBreaker(
            failure_threshold=self.settings.circuit_failure_threshold,
            recovery_timeout=self.settings.circuit_recovery_timeout,
            expected_exception=httpx.TransportError,
            name="catalog_api",
        )
        self._guarded_request = self._breaker(self._request_with_retry)

    async def _request_with_retry(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.settings.http_retry_attempts),
            wait=wait_exponential(
                multiplier=1,
                min=self.settings.http_retry_min_wait,
                max=self.settings.http_retry_max_wait,
            ),
            retry=retry_if_exception_type(httpx.TransportError),
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                return await self._client.request(method, url, **kwargs)
        raise RuntimeError("unreachable")  # pragma: no cover

    async def _request(self, method: str, url: str, failure: str, **kwargs: Any) -> httpx.Response:
        try:
            return await self._guarded_request(method, url, **kwargs)
        except CircuitBreakerError as exc:
            logger.warning("catalog_circuit_open", method=method, url=url)
            raise RemoteOperationFailure(f"{failure}: service unavailable") from exc
        except httpx.HTTPError as exc:
            logger.error("catalog_request_error", method=method, url=url, error=str(exc))
            raise RemoteOperationFailure(f"{failure}: {exc}") from exc

    async def list_books(self, fresh: bool = False) -> list[BookRecord]:
        """Fetch the whole catalog. ``fresh`` bypasses any cache along the way."""
        failure = "Failed to fetch books"
        headers = NO_CACHE_HEADERS if fresh else None
        response = await self._request("GET", "/books", failure, headers=headers)
        if response.is_error:
            raise RemoteOperationFailure(_reason(response, failure))
        try:
            payload = response.json()
            return [BookRecord.model_validate(item) for item in payload.get("data") or []]
        except (ValueError, AttributeError, ValidationError) as exc:
            raise RemoteOperationFailure(f"{failure}: malformed response") from exc

    async def get_book(self, book_id: int) -> Optional[BookRecord]:
        failure = "Failed to fetch book"
        response = await self._request("GET", f"/books/{book_id}", failure)
        if response.status_code == 404:
            return None
        if response.is_error:
            raise RemoteOperationFailure(_reason(response, failure))
        return BookRecord.model_validate(response.json())

    async def create_book(self, book: BookRecord) -> BookRecord:
        failure = "Failed to create book"
        response = await self._request("POST", "/books", failure, json=book.to_wire())
        if response.is_error:
            raise RemoteOperationFailure(_reason(response, failure))
        return BookRecord.model_validate(response.json())

    async def put_book(self, book: BookRecord) -> BookRecord:
        """Create-or-replace keyed by ``book.id``."""
        failure = "Failed to save book"
        response = await self._request("PUT", f"/books/{book.id}", failure, json=book.to_wire())
        if response.is_error:
            raise RemoteOperationFailure(_reason(response, failure))
        return BookRecord.model_validate(response.json())

    async def delete_book(self, book_id: int) -> DeleteResult:
        """Returns an explicit failure result for error statuses; raises on transport failure."""
        failure = "Failed to delete book"
        response = await self._request("DELETE", f"/books/{book_id}", failure)
        if response.is_error:
            return DeleteResult(success=False, error=_reason(response, failure))
        return DeleteResult(success=True)

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "CatalogClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

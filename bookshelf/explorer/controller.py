"""
Explorer controller — owns the in-memory catalog and the current query.

State machine for the displayed collection:

    Idle ──delete──▶ OptimisticallyMutated ──ok──▶ Reconciling ──▶ Idle
                              │
                              └──failure──▶ RolledBack ──▶ Idle

The optimistic removal happens synchronously, before the first await.
Rollback restores the whole snapshot taken at that moment, so a rollback
that lands after another delete's optimistic removal brings that record
back too. Reconciliation fetches are not ordered against each other.
With overlapping deletes the phase returns to Idle only after the last
one settles.
"""

from __future__ import annotations

import enum
from typing import Any, Callable, Optional, Protocol, Sequence

import structlog

from bookshelf.exceptions import ReconciliationFailure, RemoteOperationFailure
from bookshelf.explorer.debounce import Debouncer
from bookshelf.explorer.query_engine import active_filter_count, derive_view
from bookshelf.schemas.book import BookRecord, DeleteResult
from bookshelf.schemas.query import FILTER_FIELDS, PriceRange, QuerySpec

logger = structlog.get_logger()

DEFAULT_DEBOUNCE_SECONDS = 0.3


class CatalogSource(Protocol):
    async def list_books(self, fresh: bool = False) -> list[BookRecord]: ...

    async def delete_book(self, book_id: int) -> DeleteResult: ...


class ExplorerPhase(str, enum.Enum):
    IDLE = "idle"
    OPTIMISTICALLY_MUTATED = "optimistically_mutated"
    RECONCILING = "reconciling"
    ROLLED_BACK = "rolled_back"


Listener = Callable[["ExplorerController"], None]


class ExplorerController:
    def __init__(
        self,
        source: CatalogSource,
        books: Sequence[BookRecord] = (),
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
    ):
        self._source = source
        self._collection: tuple[BookRecord, ...] = tuple(books)
        self._query = QuerySpec()
        self._is_refreshing = False
        self._phase = ExplorerPhase.IDLE
        self._deletes_in_flight = 0
        self._listeners: list[Listener] = []
        self._view: Optional[list[BookRecord]] = None
        self._term_debouncer: Debouncer[str] = Debouncer(debounce_seconds, self._apply_term)

    # ── Read side ──

    @property
    def collection(self) -> list[BookRecord]:
        return list(self._collection)

    @property
    def query(self) -> QuerySpec:
        return self._query

    @property
    def is_refreshing(self) -> bool:
        return self._is_refreshing

    @property
    def phase(self) -> ExplorerPhase:
        return self._phase

    @property
    def view(self) -> list[BookRecord]:
        if self._view is None:
            self._view = derive_view(self._collection, self._query)
        return list(self._view)

    @property
    def result_count(self) -> int:
        return len(self.view)

    @property
    def active_filter_count(self) -> int:
        return active_filter_count(self._query)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a change listener. Returns a function that removes it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    # ── Query spec ──

    def set_term(self, term: str) -> None:
        """Debounced: only the last term of a burst is applied."""
        self._term_debouncer.submit(term)

    def flush_term(self) -> None:
        self._term_debouncer.flush()

    def set_filters(self, **options: Any) -> None:
        """Apply structured filter options immediately.

        Accepts ``genre``, ``price_range`` (a ``PriceRange`` or a
        ``(min, max)`` pair), ``rating``, ``sort_by`` and ``sort_order``.
        """
        unknown = set(options) - set(FILTER_FIELDS)
        if unknown:
            raise TypeError(f"Unknown filter options: {', '.join(sorted(unknown))}")
        price_range = options.get("price_range")
        if price_range is not None and not isinstance(price_range, PriceRange):
            low, high = price_range
            options["price_range"] = PriceRange(min=low, max=high)
        # Revalidated: form values such as rating="4" arrive as strings.
        merged = {**self._query.model_dump(exclude_unset=True), **options}
        self._set_query(QuerySpec.model_validate(merged))

    def clear_filters(self) -> None:
        self._set_query(QuerySpec(term=self._query.term))

    # ── Collection ──

    def replace_collection(self, books: Sequence[BookRecord]) -> None:
        """Adopt a new authoritative snapshot (initial load or page refresh)."""
        self._set_collection(tuple(books))

    async def load(self) -> None:
        self.replace_collection(await self._source.list_books())

    async def refresh(self) -> bool:
        """Reconcile with a fresh, cache-bypassing fetch.

        Returns ``False`` if the fetch failed; the collection is then left
        as it was.
        """
        self._is_refreshing = True
        self._notify()
        try:
            fresh = await self._source.list_books(fresh=True)
        except Exception as exc:
            failure = ReconciliationFailure(getattr(exc, "reason", None) or str(exc))
            logger.warning("reconciliation_failed", reason=failure.reason)
            return False
        else:
            self._set_collection(tuple(fresh))
            return True
        finally:
            self._is_refreshing = False
            self._notify()

    async def delete_book(self, book_id: int) -> None:
        """Optimistically delete ``book_id``.

        Raises ``RemoteOperationFailure`` after restoring the pre-delete
        collection if the remote delete fails. A failed reconciliation
        afterwards does not count as a failure.
        """
        snapshot = self._collection
        self._deletes_in_flight += 1
        self._phase = ExplorerPhase.OPTIMISTICALLY_MUTATED
        try:
            self._set_collection(tuple(b for b in snapshot if b.id != book_id))

            try:
                result = await self._source.delete_book(book_id)
            except Exception as exc:
                self._roll_back(snapshot, book_id)
                reason = getattr(exc, "reason", None) or str(exc) or "Delete failed"
                raise RemoteOperationFailure(reason) from exc

            if not result.success:
                self._roll_back(snapshot, book_id)
                raise RemoteOperationFailure(result.error or "Delete failed")

            logger.info("book_deleted", book_id=book_id)
            self._phase = ExplorerPhase.RECONCILING
            await self.refresh()
        finally:
            self._deletes_in_flight -= 1
            self._settle_phase()

    def close(self) -> None:
        self._term_debouncer.cancel()
        self._listeners.clear()

    # ── Internals ──

    def _roll_back(self, snapshot: tuple[BookRecord, ...], book_id: int) -> None:
        self._phase = ExplorerPhase.ROLLED_BACK
        logger.warning("book_delete_rolled_back", book_id=book_id)
        self._set_collection(snapshot)

    def _settle_phase(self) -> None:
        # Idle only once no delete is in flight.
        if self._deletes_in_flight:
            self._phase = ExplorerPhase.OPTIMISTICALLY_MUTATED
        else:
            self._phase = ExplorerPhase.IDLE

    def _apply_term(self, term: str) -> None:
        self._set_query(self._query.model_copy(update={"term": term}))

    def _set_query(self, query: QuerySpec) -> None:
        self._query = query
        self._view = None
        self._notify()

    def _set_collection(self, books: tuple[BookRecord, ...]) -> None:
        self._collection = books
        self._view = None
        self._notify()

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)


async def open_explorer(source: Optional[CatalogSource] = None) -> ExplorerController:
    """Build a controller over the configured catalog API and load the catalog."""
    from bookshelf.config import get_settings
    from bookshelf.services.catalog_client import CatalogClient

    settings = get_settings()
    controller = ExplorerController(
        source or CatalogClient(settings=settings),
        debounce_seconds=settings.search_debounce_seconds,
    )
    await controller.load()
    return controller

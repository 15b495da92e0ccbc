"""Debounced value delivery for free-text search input."""

from __future__ import annotations

import asyncio
from typing import Callable, Generic, Optional, TypeVar

T = TypeVar("T")


class Debouncer(Generic[T]):
    """Delivers the latest submitted value after ``delay`` seconds of quiet.

    Holds a single pending slot: every ``submit()`` cancels the scheduled
    delivery and restarts the timer, so intermediate values are dropped.
    Must be used from within a running event loop.
    """

    def __init__(self, delay: float, callback: Callable[[T], None]):
        self.delay = delay
        self._callback = callback
        self._handle: Optional[asyncio.TimerHandle] = None
        self._pending: Optional[T] = None
        self._has_pending = False

    @property
    def pending(self) -> bool:
        return self._has_pending

    def submit(self, value: T) -> None:
        self._pending = value
        self._has_pending = True
        if self._handle is not None:
            self._handle.cancel()
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self.delay, self._fire)

    def flush(self) -> None:
        """Deliver the pending value now, if any."""
        if self._handle is not None:
            self._handle.cancel()
        self._fire()

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
        self._handle = None
        self._pending = None
        self._has_pending = False

    def _fire(self) -> None:
        self._handle = None
        if not self._has_pending:
            return
        value = self._pending
        self._pending = None
        self._has_pending = False
        self._callback(value)

"""
Query engine — derives the displayed view of a book collection.

Pipeline (each stage consumes the previous stage's output):
    text filter → genre → price range → minimum rating → stable sort

Every function here is pure: inputs are never mutated and malformed or
missing record fields degrade to neutral defaults instead of raising.
"""

from __future__ import annotations

import unicodedata
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any, Callable, Optional, Sequence

from bookshelf.schemas.book import BookRecord
from bookshelf.schemas.query import FILTER_FIELDS, SORT_FIELDS, PriceRange, QuerySpec

_DATE_FORMATS = (
    "%Y",
    "%Y-%m",
    "%Y/%m/%d",
    "%m/%d/%Y",
    "%B %d, %Y",
    "%b %d, %Y",
    "%d %B %Y",
    "%d %b %Y",
    "%B %Y",
    "%b %Y",
)


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _number(value: Any) -> float:
    if value is None:
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def collation_key(value: Any) -> tuple:
    """Locale-style sort key: letters first, then accents, then case (lower before upper)."""
    text = _text(value)
    decomposed = unicodedata.normalize("NFD", text)
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch)).casefold()
    accents = decomposed.casefold()
    case = tuple(1 if ch.isupper() else 0 for ch in text)
    return (base, accents, case)


def parse_timestamp(value: Any) -> Optional[float]:
    """Epoch seconds for a published date; ``None`` when missing or unparsable."""
    text = _text(value).strip()
    if not text:
        return None

    parsed: Optional[datetime] = None
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        for fmt in _DATE_FORMATS:
            try:
                parsed = datetime.strptime(text, fmt)
                break
            except ValueError:
                continue
    if parsed is None:
        try:
            parsed = parsedate_to_datetime(text)
        except (TypeError, ValueError, IndexError):
            return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    try:
        return parsed.timestamp()
    except (OverflowError, OSError, ValueError):
        return None


def date_sort_key(value: Any) -> tuple[int, float]:
    """Undated records rank below every real date, pre-1970 ones included."""
    timestamp = parse_timestamp(value)
    if timestamp is None:
        return (0, 0.0)
    return (1, timestamp)


# ── Filter stages ──


def matches_term(book: BookRecord, term: str) -> bool:
    haystack = " ".join(
        _text(getattr(book, field, None)) for field in ("title", "author", "isbn")
    ).lower()
    return term in haystack


def filter_by_term(books: Sequence[BookRecord], term: str) -> list[BookRecord]:
    normalized = term.strip().lower()
    if not normalized:
        return list(books)
    return [b for b in books if matches_term(b, normalized)]


def filter_by_genre(books: Sequence[BookRecord], genre: Optional[str]) -> list[BookRecord]:
    if not genre:
        return list(books)
    wanted = genre.lower()
    return [b for b in books if _text(getattr(b, "genre", None)).lower() == wanted]


def filter_by_price(
    books: Sequence[BookRecord],
    low: Optional[float],
    high: Optional[float],
) -> list[BookRecord]:
    if low is None and high is None:
        return list(books)

    def _in_range(book: BookRecord) -> bool:
        price = _number(getattr(book, "price", None))
        if low is not None and price < low:
            return False
        if high is not None and price > high:
            return False
        return True

    return [b for b in books if _in_range(b)]


def filter_by_rating(books: Sequence[BookRecord], minimum: Optional[float]) -> list[BookRecord]:
    if minimum is None:
        return list(books)
    return [b for b in books if _number(getattr(b, "rating", None)) >= minimum]


# ── Sort stage ──

_SORT_KEYS: dict[str, Callable[[BookRecord], Any]] = {
    "title": lambda b: collation_key(getattr(b, "title", None)),
    "author": lambda b: collation_key(getattr(b, "author", None)),
    "price": lambda b: _number(getattr(b, "price", None)),
    "rating": lambda b: _number(getattr(b, "rating", None)),
    "date": lambda b: date_sort_key(getattr(b, "published_date", None)),
}


def sort_books(
    books: Sequence[BookRecord],
    sort_by: str = "title",
    sort_order: str = "asc",
) -> list[BookRecord]:
    """Stable sort; equal keys keep their input order in both directions."""
    field = sort_by if sort_by in SORT_FIELDS else "title"
    # sorted(reverse=True) keeps equal elements in input order.
    return sorted(books, key=_SORT_KEYS[field], reverse=sort_order == "desc")


# ── Entry points ──


def derive_view(collection: Sequence[BookRecord], spec: Optional[QuerySpec] = None) -> list[BookRecord]:
    """Filtered, sorted view of ``collection`` for ``spec``."""
    spec = spec or QuerySpec()

    result = filter_by_term(collection, spec.term)
    result = filter_by_genre(result, spec.genre)
    if spec.price_range is not None and spec.price_range.is_active:
        result = filter_by_price(result, spec.price_range.min, spec.price_range.max)
    result = filter_by_rating(result, spec.rating)
    return sort_books(result, spec.sort_by, spec.sort_order)


def result_count(collection: Sequence[BookRecord], spec: Optional[QuerySpec] = None) -> int:
    return len(derive_view(collection, spec))


def active_filter_count(spec: QuerySpec) -> int:
    """Number of structured options the user has set (the "N filters applied" badge)."""
    count = 0
    for field in FILTER_FIELDS:
        value = getattr(spec, field)
        if field not in spec.model_fields_set or value is None:
            continue
        if isinstance(value, PriceRange) and not value.is_active:
            continue
        count += 1
    return count
